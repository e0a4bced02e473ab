from __future__ import annotations

import pprint
import sys
from typing import Any, Protocol, TypeVar

from ..config import StaticConfig
from ..domain.tunnel import NOT_SET, TunnelInfo, parse_tunnel_token
from ..logging_conf import get_logger

logger = get_logger("service.settings")

T = TypeVar("T")

TUNNEL_TOKEN_KEY = "tunneltoken"
MDNS_STATE_KEY = "multicastDNSstate"
LOCAL_DNS_NAME_KEY = "localDNSname"


class SettingsStore(Protocol):
    async def get_setting(self, key: str) -> Any: ...

    async def set_setting(self, key: str, value: Any) -> None: ...

    async def delete_setting(self, key: str) -> None: ...


def render_value(value: Any) -> str:
    """Single-line rendering of an arbitrary setting value for logs."""
    return pprint.pformat(value, width=sys.maxsize)


class SettingsService:
    """Logged pass-through over a settings store, plus derived tunnel info.

    Store failures are logged with the key (and value, for writes) and then
    re-raised unchanged. Nothing is cached or retried.
    """

    def __init__(self, store: SettingsStore, *, config: StaticConfig, debug: bool = False):
        self.store = store
        self.config = config
        self.debug = debug

    # ------------------------
    # Pass-through accessors
    # ------------------------
    async def get_setting(self, key: str) -> Any:
        try:
            return await self.store.get_setting(key)
        except Exception:
            logger.error("settings.get_failed", extra={"event": "settings_get_failed", "key": key})
            raise

    async def set_setting(self, key: str, value: T) -> T:
        try:
            await self.store.set_setting(key, value)
        except Exception:
            logger.error(
                "settings.set_failed",
                extra={"event": "settings_set_failed", "key": key, "value": render_value(value)},
            )
            raise

        if self.debug:
            logger.info(
                "settings.set",
                extra={"event": "settings_set", "key": key, "value": render_value(value)},
            )
        return value

    async def delete_setting(self, key: str) -> None:
        try:
            await self.store.delete_setting(key)
        except Exception:
            logger.error(
                "settings.delete_failed", extra={"event": "settings_delete_failed", "key": key}
            )
            raise

    # ------------------------
    # Derived
    # ------------------------
    async def get_tunnel_info(self) -> TunnelInfo:
        """Combine the tunnel token and mDNS settings with the static defaults.

        - tunnelDomain is https://{name}.{base} when `tunneltoken` holds a
          name/base mapping, "Not set." otherwise.
        - A missing mDNS setting falls back to its static default.
        - If reading the mDNS settings fails, localDomain falls back to the
          default domain and mDNSstate keeps whatever was read before the
          failure (possibly None).
        """
        token = parse_tunnel_token(await self.get_setting(TUNNEL_TOKEN_KEY))
        if token is not None:
            logger.info(
                "tunnel.token_found",
                extra={"event": "tunnel_token_found", "tunnel_name": token.name, "tunnel_base": token.base},
            )
            tunnel_domain = token.endpoint
        else:
            tunnel_domain = NOT_SET

        mdns_state = None
        local_domain = None
        try:
            mdns_state = await self.get_setting(MDNS_STATE_KEY)
            local_domain = await self.get_setting(LOCAL_DNS_NAME_KEY)
            if mdns_state is None:
                mdns_state = self.config.mdns_enabled
            if local_domain is None:
                local_domain = self.config.mdns_domain
        except Exception as e:
            logger.error(
                "tunnel.mdns_read_failed",
                extra={"event": "tunnel_mdns_read_failed", "error": str(e)},
            )
            local_domain = self.config.mdns_domain

        logger.info(
            "tunnel.info",
            extra={"event": "tunnel_info", "tunnel_domain": tunnel_domain, "local_domain": local_domain},
        )
        return TunnelInfo(localDomain=local_domain, mDNSstate=mdns_state, tunnelDomain=tunnel_domain)
