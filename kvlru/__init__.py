"""
KV-LRU: Bounded TTL-LRU Cache Service

An in-memory key-value cache with least-recently-used eviction and
per-entry time-to-live, served over HTTP and a raw TCP text protocol.
"""

__version__ = "1.0.0"
