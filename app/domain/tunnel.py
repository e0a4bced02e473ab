from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

__all__ = [
    "NOT_SET",
    "TunnelToken",
    "TunnelInfo",
    "parse_tunnel_token",
]

NOT_SET = "Not set."


class TunnelToken(BaseModel):
    """Stored value of the `tunneltoken` setting.

    Only name and base are read; any value is accepted for either and rendered with str().
    """

    model_config = ConfigDict(extra="allow")

    name: Any
    base: Any

    @property
    def endpoint(self) -> str:
        return f"https://{self.name}.{self.base}"


class TunnelInfo(BaseModel):
    """Tunnel and mDNS configuration derived from settings plus static defaults."""

    # Stored values pass through unvalidated; the defaults are a str and a bool.
    localDomain: Any
    mDNSstate: Any = None
    tunnelDomain: str


def parse_tunnel_token(value: Any) -> TunnelToken | None:
    """Return a TunnelToken if value is a mapping that has both name and base keys, else None."""
    if not isinstance(value, Mapping):
        return None
    try:
        return TunnelToken.model_validate(dict(value))
    except ValidationError:
        return None
