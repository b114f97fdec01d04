"""Network front ends for KV-LRU."""

from .http_server import create_app
from .tcp_server import CacheServer

__all__ = ["CacheServer", "create_app"]
