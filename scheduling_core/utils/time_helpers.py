from __future__ import annotations

from datetime import datetime, time
import re
from typing import Union

from ..core.exceptions import InvalidTimeError

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

TimeLike = Union[str, time]


def string_to_time(time_str: str) -> time:
    """Parse a 24-hour ``HH:MM`` string into a ``time``.

    Raises:
        InvalidTimeError: if the string is not a valid 24-hour time.
    """
    if not isinstance(time_str, str):
        raise InvalidTimeError(f"Time must be an HH:MM string, got {type(time_str).__name__}")
    match = _HHMM_RE.fullmatch(time_str)
    if not match:
        raise InvalidTimeError(
            f"Invalid time format {time_str!r}. Use HH:MM (24-hour format)",
            details={"value": time_str},
        )
    return time(int(match.group(1)), int(match.group(2)))


def coerce_time(value: TimeLike) -> time:
    """Accept either an ``HH:MM`` string or a ``time`` with no seconds."""
    if isinstance(value, datetime):
        raise InvalidTimeError("Expected a wall-clock time, got a datetime")
    if isinstance(value, time):
        if value.tzinfo is not None:
            raise InvalidTimeError("Wall-clock times must be naive")
        return value.replace(second=0, microsecond=0)
    return string_to_time(value)


def time_to_string(t: time) -> str:
    """Always return HH:MM format"""
    return t.strftime("%H:%M")


def time_to_minutes(t: time) -> int:
    """Minutes since midnight."""
    return t.hour * 60 + t.minute

