"""
Protocol Requests and Replies

A request line parses into a Command; the server answers every command
except QUIT with exactly one Reply line of the form `<STATUS> [TEXT]`.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

STORED = "stored"
MISS = "key not found or expired"
INVALID_COMMAND = "invalid command"
INVALID_DURATION = "invalid duration format"
INVALID_ENCODING = "invalid encoding"


class CommandType(Enum):
    SET = auto()
    GET = auto()
    QUIT = auto()
    UNKNOWN = auto()


class Status(Enum):
    OK = "OK"
    ERROR = "ERROR"


@dataclass
class Command:
    """
    A parsed request line.

    `ttl` is in seconds and only meaningful for SET. A SET whose duration
    did not parse keeps its key and value but carries `error`.
    """
    type: CommandType
    key: str = ""
    value: str = ""
    ttl: float = 0.0
    error: Optional[str] = None
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        if self.error is not None or self.type == CommandType.UNKNOWN:
            return False
        return self.type == CommandType.QUIT or bool(self.key)


@dataclass(frozen=True)
class Reply:
    """One response line: a status and optional text."""
    status: Status
    text: str = ""

    @classmethod
    def stored(cls) -> "Reply":
        """SET went through."""
        return cls(Status.OK, STORED)

    @classmethod
    def hit(cls, value: str) -> "Reply":
        """GET found a live entry."""
        return cls(Status.OK, value)

    @classmethod
    def miss(cls) -> "Reply":
        """GET found nothing; never-set and expired keys look the same."""
        return cls(Status.ERROR, MISS)

    @classmethod
    def rejected(cls, reason: str = INVALID_COMMAND) -> "Reply":
        """The request was refused before reaching the cache."""
        return cls(Status.ERROR, reason)

    @property
    def ok(self) -> bool:
        return self.status == Status.OK
