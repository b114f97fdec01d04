"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator

from fastapi.testclient import TestClient

from kvlru.cache.recency import RecencyList
from kvlru.cache.sharded import ShardedLRUCache
from kvlru.cache.store import LRUCache
from kvlru.network.http_server import create_app
from kvlru.network.tcp_server import CacheServer
from kvlru.protocol.parser import ProtocolParser


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class FakeClock:
    """Manually advanced clock for deterministic TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def assert_consistent(cache: LRUCache) -> None:
    """Check that the index and the recency list describe the same entries."""
    ordered = list(cache._order)
    assert len(ordered) == len(cache._items) == len(cache._order)
    assert len(ordered) <= cache.capacity
    for entry in ordered:
        assert cache._items[entry.key] is entry
    for key, entry in cache._items.items():
        assert entry.key == key


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> LRUCache:
    """Create a fresh LRUCache (100 entries) driven by the fake clock."""
    return LRUCache(capacity=100, clock=clock)


@pytest.fixture
def small_cache(clock: FakeClock) -> LRUCache:
    """Create an LRUCache with capacity 2 for eviction testing."""
    return LRUCache(capacity=2, clock=clock)


@pytest.fixture
def real_time_cache() -> LRUCache:
    """Create an LRUCache on the real monotonic clock."""
    return LRUCache(capacity=100)


@pytest.fixture
def sharded_cache(clock: FakeClock) -> ShardedLRUCache:
    """Create a ShardedLRUCache with 4 shards over 100 entries."""
    return ShardedLRUCache(capacity=100, shards=4, clock=clock)


@pytest.fixture
def check_consistency():
    """Provide the index/recency-list agreement check."""
    return assert_consistent


@pytest.fixture
def recency_list() -> RecencyList:
    """Create an empty recency list."""
    return RecencyList()


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def http_cache() -> LRUCache:
    """Cache behind the HTTP app (capacity 2, real clock)."""
    return LRUCache(capacity=2)


@pytest.fixture
def http_client(http_cache: LRUCache):
    """Create a FastAPI TestClient around a fresh app."""
    with TestClient(create_app(http_cache)) as client:
        yield client


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[CacheServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a CacheServer with capacity 2 on a random free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = CacheServer(host='127.0.0.1', port=server_port, cache=LRUCache(capacity=2))

    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Usage:
        async with AsyncClient('127.0.0.1', 7171) as client:
            response = await client.send_command("SET key value 1h")
            assert response == "OK stored"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except ConnectionError:
                pass

    async def send_command(self, command: str) -> str:
        """
        Send a command and receive the response.

        Args:
            command: Command string (newline will be added if missing)

        Returns:
            Response string (stripped of trailing newline)
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        response = await self.reader.readline()
        return response.decode().strip()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("GET key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
