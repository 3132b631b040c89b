"""
Centralized settings using Pydantic Settings.

This module exposes a single `settings` instance. Components never read it
directly; `StoreRegistry.from_settings` turns it into configured objects.
"""

from typing import Optional

from pydantic import Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Redis connection
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: PositiveFloat = 30.0
    REDIS_SOCKET_CONNECT_TIMEOUT: PositiveFloat = 30.0
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, ge=0)
    REDIS_RETRY_ON_TIMEOUT: bool = True

    # File cache
    FILE_CACHE_KEY_PREFIX: str = Field(default="file:", min_length=1)
    FILE_CACHE_DIR: Optional[str] = None
    # Unset means cached files never expire
    FILE_TTL_SECONDS: Optional[PositiveInt] = Field(default=None)
    TMPDIR: Optional[str] = None


settings = Settings()
