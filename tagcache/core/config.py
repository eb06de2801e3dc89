"""
tagcache Configuration

Configuration management with environment variable support.
Only create_cache() reads these defaults; the cache facade itself takes
every value explicitly.
"""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    JSON_SERIALIZER,
    MEMORY_BACKEND,
    NO_EXPIRY,
    PICKLE_SERIALIZER,
    REDIS_BACKEND,
)

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Cache settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Cache facade defaults
    CACHE_DOMAIN: str = Field(
        default="default",
        min_length=1,
        description="Domain used when create_cache() receives none",
    )
    CACHE_BACKEND: str = Field(
        default=MEMORY_BACKEND, description="Backend selector (memory, redis)"
    )
    CACHE_SERIALIZER: str = Field(
        default=JSON_SERIALIZER, description="Value serializer (json, pickle)"
    )
    CACHE_DEFAULT_EXPIRE: int = Field(
        default=NO_EXPIRY,
        ge=0,
        description="Default expiry in seconds for stores, 0 = no expiry",
    )
    TAG_UPDATE_MAX_RETRIES: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Compare-and-swap attempts for a tag record update",
    )

    # Redis configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_CONNECTION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Redis connect timeout in seconds"
    )
    REDIS_OPERATION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Redis socket timeout in seconds"
    )
    REDIS_SCAN_COUNT: int = Field(
        default=100, ge=1, le=10000, description="SCAN batch size hint"
    )

    # Development and debugging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v):
        """Normalize backend selector; custom backends may be registered later."""
        return v.strip().lower()

    @field_validator("CACHE_SERIALIZER")
    @classmethod
    def validate_cache_serializer(cls, v):
        """Validate serializer name."""
        allowed = [JSON_SERIALIZER, PICKLE_SERIALIZER]
        if v.lower() not in allowed:
            raise ValueError(f"CACHE_SERIALIZER must be one of: {allowed}")
        return v.lower()

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("REDIS_URL must be a redis://, rediss:// or unix:// URL")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @property
    def is_redis_backend(self) -> bool:
        """Check if the configured backend is Redis."""
        return self.CACHE_BACKEND == REDIS_BACKEND

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
