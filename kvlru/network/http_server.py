"""
HTTP Server Module

FastAPI front end exposing the cache over two query-string routes:

    GET /set?key=<key>&value=<value>&duration=<duration>
        200 {"message": "Value set successfully"}
        400 {"error": "Invalid duration format"}

    GET /get?key=<key>
        200 {"value": <value>}
        404 {"error": "Key not found or expired"}

Handlers are plain functions, so FastAPI runs them on its worker thread
pool and concurrent requests reach the cache from several threads.
"""

import logging
from typing import Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..cache.sharded import ShardedLRUCache
from ..cache.store import LRUCache
from ..config.settings import settings
from ..protocol.duration import InvalidDurationError, parse_duration

logger = logging.getLogger(__name__)

Cache = Union[LRUCache, ShardedLRUCache]


def create_app(cache: Cache = None) -> FastAPI:
    """
    Build the FastAPI application around a cache.

    Args:
        cache: Cache instance (creates one of settings.CAPACITY if not provided)

    Returns:
        The configured FastAPI application
    """
    if cache is None:
        cache = LRUCache(settings.CAPACITY)

    app = FastAPI(
        title="KV-LRU",
        version=__version__,
        description="In-memory key-value cache with LRU eviction and TTL expiration.",
    )
    app.state.cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.CORS_ALLOW_ORIGINS.split(",")],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"],
        allow_headers=["Origin", "Content-Length", "Content-Type"],
    )

    @app.get("/set")
    def set_value(key: str = "", value: str = "", duration: str = "") -> JSONResponse:
        try:
            ttl = parse_duration(duration)
        except InvalidDurationError as exc:
            logger.debug(f"Rejected /set for {key!r}: {exc}")
            return JSONResponse(status_code=400, content={"error": "Invalid duration format"})

        cache.set(key, value, ttl=ttl)
        return JSONResponse(status_code=200, content={"message": "Value set successfully"})

    @app.get("/get")
    def get_value(key: str = "") -> JSONResponse:
        value, found = cache.get(key)
        if not found:
            return JSONResponse(status_code=404, content={"error": "Key not found or expired"})
        return JSONResponse(status_code=200, content={"value": value})

    return app
