"""
Tests for the Async TCP Server

These tests verify the CacheServer class:
- Server starts and accepts connections
- Handle multiple concurrent clients
- Process commands correctly
- Handle disconnections gracefully

The server fixture wraps a cache of capacity 2.

Run with: python -m pytest tests/test_server.py -v
"""

import asyncio
import pytest


@pytest.mark.asyncio
class TestServerConnection:
    """Test server connection handling."""

    async def test_server_is_running(self, server):
        assert server.is_running()

    async def test_server_accepts_connection(self, server, client_factory):
        async with client_factory() as client:
            assert client.reader is not None
            assert client.writer is not None

    async def test_server_handles_disconnect(self, server, server_port, client_factory):
        """Test server handles client disconnect gracefully."""
        reader, writer = await asyncio.open_connection('127.0.0.1', server_port)

        writer.write(b"SET key value 1h\n")
        await writer.drain()
        response = await reader.readline()
        assert response == b"OK stored\n"

        writer.close()
        await writer.wait_closed()

        # Server should still accept new connections
        async with client_factory() as client:
            response = await client.send_command("GET key")
            assert response == "OK value"

    async def test_server_handles_quit(self, server, server_port):
        """Test QUIT closes the connection from the server side."""
        reader, writer = await asyncio.open_connection('127.0.0.1', server_port)

        writer.write(b"QUIT\n")
        await writer.drain()

        assert await asyncio.wait_for(reader.read(), timeout=1.0) == b""

        writer.close()
        await writer.wait_closed()

    async def test_invalid_encoding(self, server, server_port):
        reader, writer = await asyncio.open_connection('127.0.0.1', server_port)

        writer.write(b"GET \xff\xfe\n")
        await writer.drain()
        assert await reader.readline() == b"ERROR invalid encoding\n"

        # Connection stays usable
        writer.write(b"GET key\n")
        await writer.drain()
        assert await reader.readline() == b"ERROR key not found or expired\n"

        writer.close()
        await writer.wait_closed()

    @pytest.mark.parametrize("size", [5000, 20000])
    async def test_overlong_line_is_rejected(self, server, client_factory, size):
        async with client_factory() as client:
            assert await client.send_command("SET key " + "v" * size + " 1h") == "ERROR invalid command"

            # The rest of the line was drained; the connection stays usable
            assert await client.send_command("SET key value 1h") == "OK stored"
            assert await client.send_command("GET key") == "OK value"

    async def test_stop(self, server):
        await server.stop()
        assert not server.is_running()


@pytest.mark.asyncio
class TestServerCommands:
    """Test command execution through server."""

    async def test_set_command(self, server, client_factory):
        async with client_factory() as client:
            assert await client.send_command("SET key1 value1 1h") == "OK stored"

    async def test_get_command_found(self, server, client_factory):
        async with client_factory() as client:
            await client.send_command("SET key1 value1 1h")
            assert await client.send_command("GET key1") == "OK value1"

    async def test_get_command_not_found(self, server, client_factory):
        async with client_factory() as client:
            assert await client.send_command("GET nonexistent") == "ERROR key not found or expired"

    async def test_invalid_duration(self, server, client_factory):
        async with client_factory() as client:
            response = await client.send_command("SET key1 value1 tomorrow")
            assert response == "ERROR invalid duration format"

            # Nothing was stored
            assert await client.send_command("GET key1") == "ERROR key not found or expired"

    async def test_invalid_command(self, server, client_factory):
        async with client_factory() as client:
            assert await client.send_command("INVALID command") == "ERROR invalid command"

    async def test_malformed_set(self, server, client_factory):
        async with client_factory() as client:
            assert await client.send_command("SET onlykey") == "ERROR invalid command"

    async def test_empty_command(self, server, client_factory):
        async with client_factory() as client:
            assert await client.send_command("") == "ERROR invalid command"

    async def test_case_insensitive_commands(self, server, client_factory):
        async with client_factory() as client:
            assert await client.send_command("set key1 value1 1h") == "OK stored"
            assert await client.send_command("GET key1") == "OK value1"
            assert await client.send_command("Set key2 value2 1h") == "OK stored"
            assert await client.send_command("get key2") == "OK value2"


@pytest.mark.asyncio
class TestServerCacheSemantics:
    """Eviction and expiry through the TCP front end (capacity 2)."""

    async def test_lru_eviction(self, server, client_factory):
        async with client_factory() as client:
            await client.send_command("SET a 1 1h")
            await client.send_command("SET b 2 1h")
            await client.send_command("SET c 3 1h")

            assert await client.send_command("GET a") == "ERROR key not found or expired"
            assert await client.send_command("GET b") == "OK 2"
            assert await client.send_command("GET c") == "OK 3"

    async def test_get_refreshes_recency(self, server, client_factory):
        async with client_factory() as client:
            await client.send_command("SET a 1 1h")
            await client.send_command("SET b 2 1h")
            assert await client.send_command("GET a") == "OK 1"
            await client.send_command("SET c 3 1h")

            assert await client.send_command("GET b") == "ERROR key not found or expired"
            assert await client.send_command("GET a") == "OK 1"
            assert await client.send_command("GET c") == "OK 3"

    async def test_expiry(self, server, client_factory):
        async with client_factory() as client:
            await client.send_command("SET x 1 1ms")
            await asyncio.sleep(0.01)
            assert await client.send_command("GET x") == "ERROR key not found or expired"


@pytest.mark.asyncio
class TestServerConcurrency:
    """Test concurrent client handling."""

    async def test_two_clients_share_state(self, server, client_factory):
        async with client_factory() as client1:
            async with client_factory() as client2:
                await client1.send_command("SET key1 value1 1h")
                assert await client2.send_command("GET key1") == "OK value1"

                await client2.send_command("SET key1 value2 1h")
                assert await client1.send_command("GET key1") == "OK value2"

    async def test_many_concurrent_clients(self, server, client_factory):
        num_clients = 10

        async def client_task(client_id: int):
            async with client_factory() as client:
                response = await client.send_command(f"SET key{client_id} value{client_id} 1h")
                assert response == "OK stored"

        await asyncio.gather(*(client_task(i) for i in range(num_clients)))

        # Capacity 2: only two of the keys survive
        async with client_factory() as client:
            found = 0
            for i in range(num_clients):
                if await client.send_command(f"GET key{i}") == f"OK value{i}":
                    found += 1
            assert found == 2

    async def test_concurrent_writes_same_key(self, server, client_factory):
        async with client_factory() as client1:
            async with client_factory() as client2:
                await asyncio.gather(
                    client1.send_command("SET shared value1 1h"),
                    client2.send_command("SET shared value2 1h"),
                )

                # One value should win
                response = await client1.send_command("GET shared")
                assert response in ["OK value1", "OK value2"]
