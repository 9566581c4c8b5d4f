"""
Go-style duration strings as used across gateway configuration files.

Gateway settings express time as `"300ms"`, `"2s"` or `"1m30s"`. The gateway
itself treats an unparseable duration as zero instead of failing, and the
helpers below mirror that.
"""

import re
from datetime import timedelta
from decimal import Decimal
from typing import Any

_UNIT_NANOSECONDS = {
    "ns": Decimal(1),
    "us": Decimal(1_000),
    "µs": Decimal(1_000),
    "μs": Decimal(1_000),
    "ms": Decimal(1_000_000),
    "s": Decimal(1_000_000_000),
    "m": Decimal(60_000_000_000),
    "h": Decimal(3_600_000_000_000),
}

_NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)"
_UNIT = r"(?:ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"^[-+]?(?:{_NUMBER}{_UNIT})+$")
_SEGMENT_RE = re.compile(rf"({_NUMBER})({_UNIT})")

ZERO = timedelta(0)


def parse_duration(value: str) -> timedelta:
    """
    Parse a Go-style duration string.

    Args:
        value: Duration such as "250ms", "2s", "1h15m" or "0"

    Returns:
        The equivalent timedelta (microsecond resolution)

    Raises:
        ValueError: If the string is not a valid duration

    Example:
        >>> parse_duration("1m30s")
        datetime.timedelta(seconds=90)
    """
    text = value.strip()
    if text in ("0", "+0", "-0"):
        return ZERO

    if not _DURATION_RE.match(text):
        raise ValueError(f"invalid duration: {value!r}")

    nanoseconds = sum(
        (Decimal(number) * _UNIT_NANOSECONDS[unit] for number, unit in _SEGMENT_RE.findall(text)),
        Decimal(0),
    )
    if text.startswith("-"):
        nanoseconds = -nanoseconds

    return timedelta(microseconds=int(nanoseconds / 1000))


def duration_or_zero(value: Any) -> timedelta:
    """Lenient conversion: anything that is not a valid duration is zero."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, str):
        try:
            return parse_duration(value)
        except ValueError:
            return ZERO
    return ZERO


def to_milliseconds(value: timedelta) -> int:
    """Whole milliseconds in a timedelta, truncated toward zero."""
    return int(value / timedelta(milliseconds=1))
