"""
Protocol Parser Module

This module handles parsing of raw protocol commands and formatting of replies.
"""

from .commands import INVALID_DURATION, Command, CommandType, Reply
from .duration import InvalidDurationError, parse_duration
from ..config.settings import settings


class ProtocolParser:
    """
    Parser for the KV-LRU text protocol.

    Protocol Format:
        Request:  <COMMAND> [ARGS...]\n
        Reply:    <STATUS> [TEXT]\n

    Commands:
        SET <key> <value> <duration>  -> OK stored | ERROR invalid duration format
        GET <key>                     -> OK <value> | ERROR key not found or expired
        QUIT                          -> (connection closed)

    Constraints:
        - Keys: max 256 characters, no whitespace
        - Values: max 256 characters, no whitespace
        - Duration: Go duration syntax, e.g. 90s, 1h30m, 250ms
    """

    def __init__(self):
        """Initialize the parser with constraints from settings."""
        self.max_key_length = settings.MAX_KEY_LENGTH
        self.max_value_length = settings.MAX_VALUE_LENGTH

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object representing the parsed request.
            Malformed requests come back as UNKNOWN, or as SET with
            `error` set when only the duration is malformed.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("SET mykey myvalue 1m")
            >>> cmd.type == CommandType.SET
            True
            >>> cmd.ttl
            60.0
        """
        raw = data.strip()
        if not raw:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        parts = raw.split()
        command_name = parts[0].upper()

        if command_name == "SET":
            return self._parse_set(parts, raw)
        if command_name == "GET":
            return self._parse_get(parts, raw)
        if command_name == "QUIT" and len(parts) == 1:
            return Command(type=CommandType.QUIT, raw=raw)

        return Command(type=CommandType.UNKNOWN, raw=raw)

    def _parse_set(self, parts: list, raw: str) -> Command:
        """
        Parse a SET command.

        Format: SET <key> <value> <duration>
        """
        if len(parts) != 4:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key, value = parts[1], parts[2]
        if len(key) > self.max_key_length or len(value) > self.max_value_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        try:
            ttl = parse_duration(parts[3])
        except InvalidDurationError:
            return Command(type=CommandType.SET, key=key, value=value, error=INVALID_DURATION, raw=raw)

        return Command(type=CommandType.SET, key=key, value=value, ttl=ttl, raw=raw)

    def _parse_get(self, parts: list, raw: str) -> Command:
        """
        Parse a GET command.

        Format: GET <key>
        """
        if len(parts) != 2:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key = parts[1]
        if len(key) > self.max_key_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=CommandType.GET, key=key, raw=raw)

    def format_reply(self, reply: Reply) -> str:
        """
        Format a Reply into a protocol line WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_reply(Reply.stored())
            'OK stored\\n'
            >>> parser.format_reply(Reply.hit("hello"))
            'OK hello\\n'
            >>> parser.format_reply(Reply.miss())
            'ERROR key not found or expired\\n'
        """
        if reply.text:
            return f"{reply.status.value} {reply.text}\n"
        return f"{reply.status.value}\n"
