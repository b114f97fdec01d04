"""
KV-LRU Configuration Settings

This module contains all configuration constants for the KV-LRU service.
Values can be overridden through KV_LRU_* environment variables, except
the cache capacity which is fixed for the lifetime of the process.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Service configuration settings."""

    # Network settings
    HOST: str = os.environ.get("KV_LRU_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("KV_LRU_PORT", "7171"))
    HTTP_PORT: int = int(os.environ.get("KV_LRU_HTTP_PORT", "8080"))

    # Cache settings
    CAPACITY: int = 1024
    SHARDS: int = int(os.environ.get("KV_LRU_SHARDS", "1"))
    MAX_KEY_LENGTH: int = 256
    MAX_VALUE_LENGTH: int = 256

    # Connection settings
    READ_BUFFER_SIZE: int = 4096
    CORS_ALLOW_ORIGINS: str = os.environ.get("KV_LRU_CORS_ALLOW_ORIGINS", "*")

    # Logging settings
    DEBUG: bool = os.environ.get("KV_LRU_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KV_LRU_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
