from __future__ import annotations

import json

import pytest

from app.config import AppConfig, ConfigError, StaticConfig, load_app_config, load_static_config


def test_builtin_mdns_defaults():
    cfg = StaticConfig()
    assert cfg.get("settings.defaults.mdns.enabled") is True
    assert cfg.get("settings.defaults.mdns.domain") == "gateway.local"


def test_unknown_path_raises_config_error():
    cfg = StaticConfig()
    with pytest.raises(ConfigError):
        cfg.get("settings.defaults.nope")
    with pytest.raises(ConfigError):
        cfg.get("settings.defaults.mdns.domain.deeper")


def test_json_overlay_is_deep_merged(tmp_path):
    path = tmp_path / "local.json"
    path.write_text(json.dumps({"settings": {"defaults": {"mdns": {"domain": "house.local"}}}}))
    cfg = load_static_config(path)
    assert cfg.mdns_domain == "house.local"
    assert cfg.mdns_enabled is True


def test_overlay_cannot_drop_required_defaults(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"settings": {"defaults": {"mdns": None}}}))
    with pytest.raises(ConfigError):
        load_static_config(path)


def test_unreadable_config_file(tmp_path):
    with pytest.raises(ConfigError):
        load_static_config(tmp_path / "missing.json")


def test_debug_follows_test_mode(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    assert load_app_config().debug is True
    assert AppConfig(env="production").debug is False
