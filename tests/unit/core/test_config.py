"""
Unit tests for settings.
"""

import pytest
from pydantic import ValidationError

from tagcache.core.config import Settings, get_settings


class TestSettings:
    """Test cases for Settings."""

    def test_test_environment_defaults(self):
        """conftest environment is picked up."""
        settings = get_settings()

        assert settings.ENVIRONMENT == "test"
        assert settings.CACHE_DOMAIN == "testapp"
        assert settings.CACHE_BACKEND == "memory"
        assert settings.CACHE_DEFAULT_EXPIRE == 0

    def test_backend_selector_normalized(self):
        settings = Settings(CACHE_BACKEND=" Redis ")

        assert settings.CACHE_BACKEND == "redis"
        assert settings.is_redis_backend

    def test_serializer_validated(self):
        assert Settings(CACHE_SERIALIZER="PICKLE").CACHE_SERIALIZER == "pickle"

        with pytest.raises(ValidationError):
            Settings(CACHE_SERIALIZER="msgpack")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(ENVIRONMENT="qa")

    def test_invalid_redis_url(self):
        with pytest.raises(ValidationError):
            Settings(REDIS_URL="http://localhost:6379")

    def test_empty_domain_rejected(self):
        with pytest.raises(ValidationError):
            Settings(CACHE_DOMAIN="")

    def test_negative_default_expire_rejected(self):
        with pytest.raises(ValidationError):
            Settings(CACHE_DEFAULT_EXPIRE=-1)

    def test_log_level_uppercased(self):
        assert Settings(LOG_LEVEL="warning").LOG_LEVEL == "WARNING"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CACHE_DOMAIN", "fromenv")
        monkeypatch.setenv("REDIS_MAX_CONNECTIONS", "20")

        settings = Settings()

        assert settings.CACHE_DOMAIN == "fromenv"
        assert settings.REDIS_MAX_CONNECTIONS == 20
