"""Configuration module for KV-LRU."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
