"""
Duration Parsing Module

Parses duration strings in the format used by Go's time.ParseDuration,
which is what clients of the original service send:

    "300ms", "-1.5h", "2h45m", "1h0.5m", "10us", "0"

A duration is an optional sign followed by one or more decimal numbers,
each with an optional fraction and a mandatory unit suffix.

Valid units: "ns", "us" (or "µs"/"μs"), "ms", "s", "m", "h"
"""

import re
from typing import Dict, Tuple

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

UNITS: Dict[str, int] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC Greek letter mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

# Durations are bounded by a signed 64-bit nanosecond count
MAX_DURATION_NS = (1 << 63) - 1

# Fraction digits kept; 10**-18 hours is already far below a nanosecond
FRACTION_DIGITS = 18

_COMPONENT_RE = re.compile(r"(?P<int>[0-9]*)(?:\.(?P<frac>[0-9]*))?(?P<unit>[^0-9.]*)")


class InvalidDurationError(ValueError):
    """Raised when a duration string cannot be parsed."""

    def __init__(self, text: str, reason: str = "invalid duration"):
        super().__init__(f"{reason} {text!r}")
        self.text = text
        self.reason = reason


def parse_duration_ns(text: str) -> int:
    """
    Parse a duration string into a signed number of nanoseconds.

    Args:
        text: Duration string such as "1h30m" or "250ms"

    Returns:
        The duration in nanoseconds

    Raises:
        InvalidDurationError: If the string is empty, a component has no
            digits or no unit, the unit is unknown, or the value overflows
    """
    s = text
    negative = False
    if s[:1] in ("-", "+"):
        negative = s[0] == "-"
        s = s[1:]

    # Special case: a bare zero needs no unit
    if s == "0":
        return 0
    if not s:
        raise InvalidDurationError(text)

    # A negative duration may reach one nanosecond further
    limit = MAX_DURATION_NS + (1 if negative else 0)
    total = 0
    pos = 0
    while pos < len(s):
        match = _COMPONENT_RE.match(s, pos)
        int_part, frac, unit = match.group("int"), match.group("frac"), match.group("unit")

        if not int_part and not frac:
            raise InvalidDurationError(text)
        if not unit:
            raise InvalidDurationError(text, "missing unit in duration")
        if unit not in UNITS:
            raise InvalidDurationError(text, f"unknown unit {unit!r} in duration")

        unit_ns = UNITS[unit]
        total += _leading_int(int_part, limit, text) * unit_ns
        if frac:
            value, scale = _leading_fraction(frac)
            total += value * unit_ns // scale

        if total > limit:
            raise InvalidDurationError(text)
        pos = match.end()

    return -total if negative else total


def _leading_int(digits: str, limit: int, text: str) -> int:
    """Accumulate an integer digit run, failing as soon as it passes `limit`."""
    value = 0
    for digit in digits:
        value = value * 10 + int(digit)
        if value > limit:
            raise InvalidDurationError(text)
    return value


def _leading_fraction(digits: str) -> Tuple[int, int]:
    """
    Accumulate a fraction digit run as (value, scale).

    Digits past FRACTION_DIGITS are below nanosecond precision for every
    unit and are dropped.
    """
    value = 0
    scale = 1
    for digit in digits[:FRACTION_DIGITS]:
        value = value * 10 + int(digit)
        scale *= 10
    return value, scale


def parse_duration(text: str) -> float:
    """
    Parse a duration string into seconds.

    Examples:
        >>> parse_duration("1h")
        3600.0
        >>> parse_duration("1.5s")
        1.5
        >>> parse_duration("-10ms")
        -0.01
    """
    return parse_duration_ns(text) / SECOND
