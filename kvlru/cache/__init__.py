"""Cache module for KV-LRU."""

from .recency import Entry, RecencyList
from .sharded import ShardedLRUCache, shard_for_key
from .store import LRUCache

__all__ = ["Entry", "LRUCache", "RecencyList", "ShardedLRUCache", "shard_for_key"]
