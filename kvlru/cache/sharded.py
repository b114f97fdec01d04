"""
Sharded Cache Module

Splits the keyspace over N independently locked LRUCache instances so
that requests for keys on different shards never contend for the same
lock. Each shard is a complete bounded TTL-LRU cache of its own.

Shard Assignment:
- str/bytes keys: SHA-256 of the key, first 8 bytes mod N (stable across
  processes)
- other hashable keys: hash(key) mod N

Recency is tracked per shard, so the entry evicted on overflow is the
least recently used one of the key's shard, not of the whole cache.
"""

import hashlib
import time
from typing import Any, Callable, Hashable, List, Tuple

from .store import TTL, LRUCache


def shard_for_key(key: Hashable, num_shards: int) -> int:
    """
    Calculate which shard owns a given key.

    Args:
        key: The key to place
        num_shards: Total number of shards

    Returns:
        Shard index in range(num_shards)
    """
    if isinstance(key, str):
        key = key.encode("utf-8")
    if isinstance(key, bytes):
        digest = hashlib.sha256(key).digest()
        return int.from_bytes(digest[:8], byteorder="big") % num_shards
    return hash(key) % num_shards


def split_capacity(capacity: int, num_shards: int) -> List[int]:
    """Distribute a total capacity over shards, remainder to the first ones."""
    base, extra = divmod(capacity, num_shards)
    return [base + 1 if i < extra else base for i in range(num_shards)]


class ShardedLRUCache:
    """
    LRUCache front that routes each key to one of N sub-caches.

    Offers the same operations as LRUCache. The total number of entries
    never exceeds `capacity` since the shard capacities sum to it.

    Usage:
        cache = ShardedLRUCache(capacity=1024, shards=8)
        cache.set("key", "value", ttl=60)
        value, found = cache.get("key")
    """

    def __init__(
            self,
            capacity: int,
            shards: int = 8,
            clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the sharded cache.

        Args:
            capacity: Total maximum number of entries
            shards: Number of sub-caches
            clock: Callable returning the current time in seconds

        Raises:
            ValueError: If shards < 1 or capacity < shards
        """
        if shards < 1:
            raise ValueError("shards must be positive")
        if capacity < shards:
            raise ValueError("capacity must be at least the number of shards")
        self._capacity = capacity
        self._shards = [LRUCache(size, clock=clock) for size in split_capacity(capacity, shards)]

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def shards(self) -> List[LRUCache]:
        return list(self._shards)

    def shard(self, key: Hashable) -> LRUCache:
        """Get the sub-cache responsible for a key."""
        return self._shards[shard_for_key(key, len(self._shards))]

    def set(self, key: Hashable, value: Any, ttl: TTL = None) -> None:
        self.shard(key).set(key, value, ttl)

    def get(self, key: Hashable) -> Tuple[Any, bool]:
        return self.shard(key).get(key)

    def peek(self, key: Hashable) -> Tuple[Any, bool]:
        return self.shard(key).peek(key)

    def contains(self, key: Hashable) -> bool:
        return self.shard(key).contains(key)

    def __contains__(self, key: Hashable) -> bool:
        return self.contains(key)

    def delete(self, key: Hashable) -> bool:
        return self.shard(key).delete(key)

    def clear(self) -> None:
        for shard in self._shards:
            shard.clear()

    def __len__(self) -> int:
        # Shards are locked one at a time, so this is not an atomic snapshot
        return sum(len(shard) for shard in self._shards)
