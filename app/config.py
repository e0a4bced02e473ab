"""Process configuration.

Two layers:

- AppConfig: per-process knobs read from the environment (execution mode,
  database path, signing secret, optional config file).
- StaticConfig: the read-only configuration tree consulted by dotted path,
  e.g. ``settings.defaults.mdns.domain``. Built-in defaults can be overlaid by
  a JSON file.
"""
from __future__ import annotations

import json
import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

__all__ = [
    "ConfigError",
    "AppConfig",
    "StaticConfig",
    "load_app_config",
    "load_static_config",
    "DEFAULT_CONFIG",
]

DEFAULT_CONFIG: dict[str, Any] = {
    "settings": {
        "defaults": {
            "mdns": {
                "enabled": True,
                "domain": "gateway.local",
            },
        },
    },
}


class ConfigError(KeyError):
    """Raised for unknown configuration paths or an unusable config file."""


# ------------------------
# Environment
# ------------------------
@dataclass(frozen=True)
class AppConfig:
    env: str = "production"
    db_path: str = "gateway.sqlite3"
    config_path: str | None = None
    token_secret: str = "dev-secret-change-me"

    @property
    def debug(self) -> bool:
        """Successful setting writes are logged only when running tests."""
        return self.env == "test"


def load_app_config() -> AppConfig:
    """Build an AppConfig from APP_ENV, DB_PATH, CONFIG_PATH and TOKEN_SECRET."""
    defaults = AppConfig()
    return AppConfig(
        env=os.getenv("APP_ENV", defaults.env),
        db_path=os.getenv("DB_PATH", defaults.db_path),
        config_path=os.getenv("CONFIG_PATH") or None,
        token_secret=os.getenv("TOKEN_SECRET", defaults.token_secret),
    )


# ------------------------
# Static configuration tree
# ------------------------
class _MdnsDefaults(BaseModel):
    enabled: bool | str
    domain: str


class _Defaults(BaseModel):
    mdns: _MdnsDefaults


class _SettingsSection(BaseModel):
    defaults: _Defaults


class _RequiredTree(BaseModel):
    """Paths that must always resolve; extra keys are allowed alongside them."""

    settings: _SettingsSection


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    out = deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


class StaticConfig:
    """Read-only dotted-path view over a nested configuration mapping."""

    def __init__(self, tree: dict[str, Any] | None = None):
        tree = deepcopy(DEFAULT_CONFIG) if tree is None else tree
        try:
            _RequiredTree.model_validate(tree)
        except ValidationError as e:
            raise ConfigError(f"Configuration is missing required defaults: {e}") from e
        self._tree = tree

    def get(self, path: str) -> Any:
        node: Any = self._tree
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                raise ConfigError(path)
            node = node[part]
        return deepcopy(node)

    @property
    def mdns_enabled(self) -> bool | str:
        return self.get("settings.defaults.mdns.enabled")

    @property
    def mdns_domain(self) -> str:
        return self.get("settings.defaults.mdns.domain")


def load_static_config(config_path: str | os.PathLike[str] | None = None) -> StaticConfig:
    """Return the built-in defaults, overlaid with a JSON file when one is given."""
    if config_path is None:
        return StaticConfig()

    path = Path(config_path)
    try:
        overlay = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(overlay, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    return StaticConfig(_deep_merge(DEFAULT_CONFIG, overlay))
