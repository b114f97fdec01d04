"""Protocol module for KV-LRU."""

from .commands import Command, CommandType, Reply, Status
from .duration import InvalidDurationError, parse_duration
from .parser import ProtocolParser

__all__ = [
    "Command",
    "CommandType",
    "InvalidDurationError",
    "ProtocolParser",
    "Reply",
    "Status",
    "parse_duration",
]
