"""
Shared configuration management for the portfolio cache layer.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Logging
    log_level: str = Field(default="info")

    # External services
    redis_url: str = Field(default="redis://localhost:6379/0")
    socket_timeout: float = Field(default=5.0, gt=0)
    socket_connect_timeout: float = Field(default=5.0, gt=0)


class CacheConfig(BaseConfig):
    """Cache layer configuration."""

    # Default expiration applied when set() is called without a ttl (seconds)
    cache_ttl: float = Field(default=60.0, gt=0)

    # Health check
    health_check_key: str = Field(default="__health_check__", min_length=1)
    health_check_timeout: float = Field(default=2.0, gt=0)
    health_check_ttl: float = Field(default=1.0, gt=0)
    health_check_cleanup_timeout: float = Field(default=1.0, gt=0)


def get_config(**overrides) -> CacheConfig:
    """Get the cache layer configuration."""
    return CacheConfig(**overrides)
