from __future__ import annotations

import sqlite3

import pytest
from fastapi.testclient import TestClient

from app.config import AppConfig, StaticConfig
from app.db import Database
from app.main import create_app
from app.service import SettingsService, TokenAuthority


class FailingStore:
    """Settings store whose operations raise for the configured keys."""

    def __init__(self, fail_keys: set[str] | None = None, values: dict | None = None):
        self.fail_keys = fail_keys
        self.values = dict(values or {})
        self.error = sqlite3.OperationalError("database is locked")

    def _check(self, key: str) -> None:
        if self.fail_keys is None or key in self.fail_keys:
            raise self.error

    async def get_setting(self, key):
        self._check(key)
        return self.values.get(key)

    async def set_setting(self, key, value):
        self._check(key)
        self.values[key] = value

    async def delete_setting(self, key):
        self._check(key)
        self.values.pop(key, None)


@pytest.fixture
def static_config() -> StaticConfig:
    return StaticConfig()


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "settings.sqlite3"))
    database.open()
    yield database
    database.close()


@pytest.fixture
def service(db, static_config) -> SettingsService:
    return SettingsService(db, config=static_config, debug=False)


@pytest.fixture
def authority(db) -> TokenAuthority:
    return TokenAuthority(db, secret="test-secret")


@pytest.fixture
def app(tmp_path, static_config):
    config = AppConfig(env="test", db_path=str(tmp_path / "app.sqlite3"), token_secret="test-secret")
    return create_app(config, static_config)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
