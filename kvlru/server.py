#!/usr/bin/env python3
"""
KV-LRU Server Entry Point

Builds the process-wide cache and serves it over HTTP, the TCP text
protocol, or both from a single event loop.

Usage:
    python -m kvlru.server                      # HTTP on 8080 and TCP on 7171
    python -m kvlru.server --protocol http      # HTTP only
    python -m kvlru.server --port 9000          # Custom TCP port
    python -m kvlru.server --http-port 9001     # Custom HTTP port
    python -m kvlru.server --shards 8           # Split the cache over 8 locks
    python -m kvlru.server --debug              # Enable debug logging

Environment Variables:
    KV_LRU_HOST         - Server bind address
    KV_LRU_PORT         - TCP protocol port
    KV_LRU_HTTP_PORT    - HTTP port
    KV_LRU_SHARDS       - Number of cache shards
    KV_LRU_DEBUG        - Enable debug mode (true/false)
    KV_LRU_LOG_LEVEL    - Log level when not in debug mode

The cache capacity is fixed at settings.CAPACITY entries.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Union

import uvicorn

from .cache.sharded import ShardedLRUCache
from .cache.store import LRUCache
from .config.settings import settings
from .network.http_server import create_app
from .network.tcp_server import CacheServer

logger = logging.getLogger(__name__)

PROTOCOLS = ("tcp", "http", "both")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="KV-LRU: In-Memory TTL-LRU Cache Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number for the TCP text protocol",
    )

    parser.add_argument(
        "--http-port",
        type=int,
        default=settings.HTTP_PORT,
        help="Port number for the HTTP API",
    )

    parser.add_argument(
        "--protocol",
        choices=PROTOCOLS,
        default="both",
        help="Which front ends to serve",
    )

    parser.add_argument(
        "--shards",
        type=int,
        default=settings.SHARDS,
        help="Number of independently locked cache shards",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def build_cache(shards: int) -> Union[LRUCache, ShardedLRUCache]:
    """Create the process-wide cache."""
    if shards > 1:
        return ShardedLRUCache(settings.CAPACITY, shards=shards)
    return LRUCache(settings.CAPACITY)


async def serve(args: argparse.Namespace, cache: Union[LRUCache, ShardedLRUCache]) -> None:
    """Run the selected front ends until they are stopped."""
    tcp_server = None
    http_server = None

    if args.protocol in ("tcp", "both"):
        tcp_server = CacheServer(host=args.host, port=args.port, cache=cache)

    if args.protocol in ("http", "both"):
        config = uvicorn.Config(
            create_app(cache),
            host=args.host,
            port=args.http_port,
            log_level="debug" if args.debug else settings.LOG_LEVEL.lower(),
        )
        http_server = uvicorn.Server(config)

    tasks = []

    if http_server is not None:
        # uvicorn owns SIGINT/SIGTERM; the TCP front end follows it down
        async def run_http() -> None:
            try:
                await http_server.serve()
            finally:
                if tcp_server is not None:
                    await tcp_server.stop()

        tasks.append(run_http())
    else:
        loop = asyncio.get_running_loop()

        async def shutdown(sig: signal.Signals) -> None:
            """Handle shutdown signal."""
            logger.info(f"Received signal {sig.name}, initiating shutdown...")
            await tcp_server.stop()

        # Register signal handlers (Unix only)
        if sys.platform != 'win32':
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(
                    sig,
                    lambda s=sig: asyncio.create_task(shutdown(s))
                )

    if tcp_server is not None:
        tasks.append(tcp_server.start())

    await asyncio.gather(*tasks)


def main(argv=None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)

    cache = build_cache(args.shards)

    logger.info("Starting KV-LRU server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Protocol: {args.protocol}")
    if args.protocol in ("tcp", "both"):
        logger.info(f"  TCP port: {args.port}")
    if args.protocol in ("http", "both"):
        logger.info(f"  HTTP port: {args.http_port}")
    logger.info(f"  Capacity: {settings.CAPACITY}")
    logger.info(f"  Shards: {args.shards}")
    logger.info(f"  Debug: {args.debug}")

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    try:
        loop.run_until_complete(serve(args, cache))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
