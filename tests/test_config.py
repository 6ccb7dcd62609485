"""
Configuration and app-state wiring tests.

Run:
----
    pytest tests/test_config.py -v
"""

import pytest

from server.config import DEV_JWT_SECRET, ServerConfig
from server.services import JsonDocumentStore, MemoryDocumentStore
from server.state import AppState

from conftest import make_config

ENV_KEYS = [
    "DATA_SOURCE",
    "DATA_JSON_PATH",
    "JWT_SECRET",
    "CONSISTENCY_MODE",
    "COOKIE_SECURE",
    "BOOKMARKS_ADMIN_VIEW",
    "CORS_ORIGINS",
    "PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestServerConfig:
    def test_defaults(self, clean_env):
        config = ServerConfig.from_env()
        assert config.port == 3001
        assert config.data_source == "memory"
        assert config.consistency_mode == "transactional"
        assert config.cookie_secure is True
        assert config.bookmarks_admin_view is False
        assert config.using_dev_secret

    def test_env_overrides(self, clean_env):
        clean_env.setenv("CONSISTENCY_MODE", "FAST")
        clean_env.setenv("COOKIE_SECURE", "false")
        clean_env.setenv("BOOKMARKS_ADMIN_VIEW", "1")
        clean_env.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
        clean_env.setenv("JWT_SECRET", "s3cret")
        config = ServerConfig.from_env()
        assert config.consistency_mode == "fast"
        assert config.cookie_secure is False
        assert config.bookmarks_admin_view is True
        assert config.cors_origins == ["http://a.test", "http://b.test"]
        assert not config.using_dev_secret

    def test_cookie_max_age(self):
        assert ServerConfig(jwt_expire_days=7).cookie_max_age == 7 * 86400

    def test_validate_ok(self):
        ok, errors = make_config().validate()
        assert ok
        assert errors == []

    def test_validate_errors(self):
        config = ServerConfig(data_source="mongo", consistency_mode="eventual", bcrypt_rounds=2)
        ok, errors = config.validate()
        assert not ok
        assert len(errors) == 3

    def test_dev_secret_constant(self):
        assert ServerConfig().jwt_secret == DEV_JWT_SECRET


class TestAppStateStore:
    def test_memory_by_default(self):
        state = AppState(make_config())
        assert isinstance(state.store, MemoryDocumentStore)
        assert state.engagement.mode == "transactional"

    def test_json_store(self, tmp_path):
        state = AppState(make_config(data_source="json", data_json_path=tmp_path / "store.json"))
        assert isinstance(state.store, JsonDocumentStore)

    def test_firebase_without_credentials_file_falls_back(self, tmp_path):
        config = make_config(data_source="firebase", firebase_credentials_path=tmp_path / "missing.json")
        state = AppState(config)
        assert type(state.store) is MemoryDocumentStore
        assert state.store_fallback is True

    def test_injected_store(self):
        store = MemoryDocumentStore()
        state = AppState(make_config(consistency_mode="fast"), store=store)
        assert state.store is store
        assert state.store_fallback is False
