"""
Bounded TTL-LRU Cache Module

This module implements the core cache engine: a capacity-bounded store
with least-recently-used eviction and per-entry time-to-live.

Internal Storage:
    _items: key -> Entry (the index)
    _order: RecencyList of the same entries, most recently used first

Expired entries are never swept in the background. They are purged
lazily when the key is looked up, or evicted like any other entry when
they drift to the back of the recency list.
"""

import logging
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple, Union

from .recency import Entry, RecencyList

logger = logging.getLogger(__name__)

TTL = Union[int, float, timedelta, None]


def ttl_to_seconds(ttl: TTL) -> Optional[float]:
    """Normalize a TTL argument to seconds (None = never expires)."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


class LRUCache:
    """
    Thread-safe in-memory cache with LRU eviction and TTL expiration.

    This class provides O(1) average-case time complexity for:
    - set: Insert or update a key, evicting the LRU entry when full
    - get: Retrieve a value and mark it as most recently used
    - delete: Remove a key
    - contains: Check if a key is present and not expired

    TTL and LRU compose independently: an entry that has not expired can
    still be evicted when it is the coldest one in a full cache, and an
    expired entry keeps occupying a slot until it is looked up or evicted.

    Every operation runs under one lock scoped to the whole cache, so the
    index and the recency list are never observed half-updated.

    Usage:
        cache = LRUCache(capacity=1024)
        cache.set("key", "value", ttl=60)
        value, found = cache.get("key")

    Attributes:
        capacity: Maximum number of entries held at once
    """

    def __init__(self, capacity: int, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            capacity: Maximum number of entries (must be positive)
            clock: Callable returning the current time in seconds

        Raises:
            ValueError: If capacity is not positive
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._clock = clock
        self._lock = threading.Lock()
        self._items: Dict[Hashable, Entry] = {}
        self._order = RecencyList()

    @property
    def capacity(self) -> int:
        return self._capacity

    def set(self, key: Hashable, value: Any, ttl: TTL = None) -> None:
        """
        Insert or update a key.

        Args:
            key: The key to store
            value: The value to associate with the key
            ttl: Time-to-live in seconds or as a timedelta (None = never
                 expires). Zero or negative values store an entry that is
                 already expired.

        An existing entry is refreshed in place even if it has already
        expired: its value and expiration are replaced and it becomes the
        most recently used. Only inserting a new key can evict.
        """
        seconds = ttl_to_seconds(ttl)

        with self._lock:
            expires_at = self._clock() + seconds if seconds is not None else None

            entry = self._items.get(key)
            if entry is not None:
                entry.value = value
                entry.expires_at = expires_at
                self._order.move_to_front(entry)
                return

            if len(self._order) >= self._capacity:
                self._evict_oldest()

            self._items[key] = self._order.push_front(Entry(key, value, expires_at))

    def get(self, key: Hashable) -> Tuple[Any, bool]:
        """
        Retrieve the value for a key and mark it as most recently used.

        Args:
            key: The key to look up

        Returns:
            (value, True) if found and not expired, (None, False) otherwise.
            Never-set and expired keys are reported the same way.
        """
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None, False

            if entry.is_expired(self._clock()):
                logger.debug(f"Expired key purged on lookup: {key!r}")
                self._remove_entry(entry)
                return None, False

            self._order.move_to_front(entry)
            return entry.value, True

    def peek(self, key: Hashable) -> Tuple[Any, bool]:
        """
        Like get(), but without updating the recency order.

        An expired entry is still purged.
        """
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None, False
            return entry.value, True

    def contains(self, key: Hashable) -> bool:
        """Check if a key is present and not expired (recency untouched)."""
        with self._lock:
            return self._live_entry(key) is not None

    def __contains__(self, key: Hashable) -> bool:
        return self.contains(key)

    def delete(self, key: Hashable) -> bool:
        """
        Remove a key.

        Returns:
            True if a live entry was removed, False if the key was missing
            or had already expired
        """
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return False
            self._remove_entry(entry)
            return True

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._items.clear()
            self._order.clear()

    def keys(self) -> List[Hashable]:
        """
        Get all physically present keys, most recently used first.

        Expired entries that have not been purged yet are included.
        """
        with self._lock:
            return [entry.key for entry in self._order]

    def __len__(self) -> int:
        """
        Number of entries currently held.

        Note: This may include expired entries that haven't been purged yet.
        """
        with self._lock:
            return len(self._order)

    def _live_entry(self, key: Hashable) -> Optional[Entry]:
        entry = self._items.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            logger.debug(f"Expired key purged on lookup: {key!r}")
            self._remove_entry(entry)
            return None
        return entry

    def _evict_oldest(self) -> None:
        victim = self._order.back()
        if victim is not None:
            logger.debug(f"Evicting least recently used key: {victim.key!r}")
            self._remove_entry(victim)

    def _remove_entry(self, entry: Entry) -> None:
        self._order.remove(entry)
        del self._items[entry.key]
