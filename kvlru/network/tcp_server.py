"""
Async TCP Server Module

This module implements the line-oriented TCP front end of KV-LRU.

Each client connection is handled in its own coroutine. Cache calls are
synchronous and never awaited, so the cache lock is never held across a
suspension point.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional, Union

from ..cache.sharded import ShardedLRUCache
from ..cache.store import LRUCache
from ..config.settings import settings
from ..protocol.commands import INVALID_COMMAND, INVALID_ENCODING, Command, CommandType, Reply
from ..protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)

Cache = Union[LRUCache, ShardedLRUCache]


class CacheServer:
    """
    Asynchronous TCP server for the KV-LRU service.

    Features:
    - Non-blocking I/O with asyncio
    - Persistent connections (multiple commands per connection)
    - Graceful error handling and connection cleanup
    - One cache shared across all connections

    Usage:
        server = CacheServer(host='0.0.0.0', port=7171, cache=cache)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 7171)
        cache: The cache instance shared by all connections
        parser: The ProtocolParser for parsing commands
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            cache: Cache = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            cache: Cache instance (creates one of settings.CAPACITY if not provided)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.cache = cache if cache is not None else LRUCache(settings.CAPACITY)
        self.parser = ProtocolParser()

        self._server: Optional[asyncio.Server] = None
        self._running = False

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Reads one command per line, executes it against the cache and
        writes back one response line, until the client disconnects or
        sends QUIT.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        logger.debug(f"Client connected: {addr}")

        try:
            while True:
                data = await self._read_line(reader)
                if data is None:
                    logger.debug(f"Over-long request line from {addr} discarded")
                    reply = Reply.rejected()
                elif not data:
                    logger.debug(f"Client disconnected: {addr}")
                    break
                else:
                    try:
                        raw = data.decode().rstrip('\r\n')
                    except UnicodeDecodeError:
                        reply = Reply.rejected(INVALID_ENCODING)
                    else:
                        command = self.parser.parse_request(raw)

                        if command.type == CommandType.QUIT:
                            logger.debug(f"Client requested quit: {addr}")
                            break

                        if not command.is_valid:
                            reply = Reply.rejected(command.error or INVALID_COMMAND)
                        else:
                            reply = self._execute_command(command)

                writer.write(self.parser.format_reply(reply).encode())
                await writer.drain()

        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    @staticmethod
    async def _read_line(reader: StreamReader) -> Optional[bytes]:
        """
        Read one request line.

        Returns:
            The line, b"" at end of stream, or None when the line exceeded
            the read buffer limit (the whole line has then been consumed)
        """
        try:
            return await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            # Last line without a terminator, or b"" on a clean close
            return exc.partial
        except asyncio.LimitOverrunError:
            pass

        while True:
            try:
                await reader.readuntil(b"\n")
                return None
            except asyncio.LimitOverrunError as exc:
                await reader.readexactly(exc.consumed)
            except asyncio.IncompleteReadError:
                return None

    def _execute_command(self, command: Command) -> Reply:
        """
        Execute a valid SET or GET command on the cache.
        """
        if command.type == CommandType.SET:
            self.cache.set(command.key, command.value, ttl=command.ttl)
            return Reply.stored()

        value, found = self.cache.get(command.key)
        return Reply.hit(value) if found else Reply.miss()

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs until cancelled or stop() is called.

        Example:
            server = CacheServer(port=7171)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=settings.READ_BUFFER_SIZE,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"TCP protocol serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the server and waits for it to fully shut down.
        """
        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running
