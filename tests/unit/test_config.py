"""Configuration system unit tests."""

import os
from unittest.mock import patch

from zero_to_dev.domain.config import AppConfig, CliConfig, get_config


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.service_name == "zero-to-dev-api"
        assert config.port == 4000
        assert config.env == "development"
        assert config.is_development is True

    def test_db_defaults(self):
        config = AppConfig()
        assert config.db.url.startswith("postgresql+psycopg2://")
        assert config.db.pool_min == 2
        assert config.db.pool_max == 10
        assert config.db.max_overflow == 8

    def test_redis_defaults(self):
        config = AppConfig()
        assert config.redis.url == "redis://localhost:6379"
        assert config.redis.max_retries == 3

    def test_env_override(self):
        env = {"DB_URL": "sqlite://", "PROBE_DATABASE_TIMEOUT_MS": "250", "PROBE_HISTORY_MAX_PENDING": "4"}
        with patch.dict(os.environ, env):
            config = AppConfig()
        assert config.db.url == "sqlite://"
        assert config.probe.database_timeout_ms == 250
        assert config.probe.history_max_pending == 4

    def test_production_env(self):
        with patch.dict(os.environ, {"APP_ENV": "production"}):
            assert AppConfig().is_development is False


class TestCliConfig:
    def test_port_list(self):
        assert CliConfig(ports="3000, 4000,,6379").port_list == [3000, 4000, 6379]

    def test_container_list(self):
        assert CliConfig(containers="a, b").container_list == ["a", "b"]


class TestGetConfig:
    def test_singleton(self):
        get_config.cache_clear()
        c1 = get_config()
        c2 = get_config()
        assert c1 is c2
