"""
Timezone utilities for the scheduling core.

Converts owner-local wall-clock times into UTC instants using the IANA
database shipped with pytz. All instants returned here are timezone-aware
UTC datetimes.
"""

from datetime import date, datetime, time, timedelta
from functools import lru_cache
import logging

import pytz

from ..utils.time_helpers import TimeLike, coerce_time
from .exceptions import InvalidTimeError, InvalidTimezoneError

logger = logging.getLogger(__name__)

_REFERENCE_TIME = time(12, 0)


@lru_cache(maxsize=512)
def get_timezone(timezone_id: str) -> pytz.BaseTzInfo:
    """
    Resolve an IANA timezone identifier.

    Args:
        timezone_id: e.g. 'Australia/Sydney'

    Returns:
        pytz timezone object

    Raises:
        InvalidTimezoneError: if the identifier is not recognized
    """
    if not isinstance(timezone_id, str) or not timezone_id.strip():
        raise InvalidTimezoneError(timezone_id)
    try:
        return pytz.timezone(timezone_id)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezoneError(timezone_id) from None


def _naive_wall_clock(instant: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Render an aware instant in ``tz`` and drop the zone (year..second)."""
    return instant.astimezone(tz).replace(tzinfo=None, microsecond=0)


def _offset_at(instant: datetime, tz: pytz.BaseTzInfo) -> timedelta:
    return _naive_wall_clock(instant, tz) - _naive_wall_clock(instant, pytz.UTC)


def utc_offset_on(local_date: date, timezone_id: str) -> timedelta:
    """
    UTC offset of a zone on a given date.

    The offset is taken at noon UTC on ``local_date``: the reference instant
    is rendered once in UTC and once in the zone, and the difference between
    the two wall clocks is the offset in force that day (DST included).
    """
    tz = get_timezone(timezone_id)
    reference = datetime.combine(local_date, _REFERENCE_TIME, tzinfo=pytz.UTC)
    return _offset_at(reference, tz)


def to_utc_instant(local_date: date, local_time: TimeLike, timezone_id: str) -> datetime:
    """
    Convert a local date and wall-clock time in a zone into a UTC instant.

    Args:
        local_date: Calendar date in the zone
        local_time: 'HH:MM' string or naive time
        timezone_id: IANA timezone identifier

    Returns:
        Aware UTC datetime, exact to the minute

    Raises:
        InvalidTimezoneError: unknown timezone
        InvalidTimeError: malformed time
    """
    if not isinstance(local_date, date) or isinstance(local_date, datetime):
        raise InvalidTimeError(f"Expected a calendar date, got {local_date!r}")
    tz = get_timezone(timezone_id)
    wall = coerce_time(local_time)

    as_if_utc = datetime.combine(local_date, wall, tzinfo=pytz.UTC)
    candidate = as_if_utc - utc_offset_on(local_date, timezone_id)

    # On a transition day the noon offset is wrong for wall times before the
    # switch. Re-derive with the offset actually in force at the candidate.
    actual_offset = _offset_at(candidate, tz)
    corrected = as_if_utc - actual_offset
    if corrected != candidate:
        logger.debug(
            f"DST correction for {local_date} {wall} in {timezone_id}: "
            f"{candidate.isoformat()} -> {corrected.isoformat()}"
        )
    return corrected


def to_local(instant: datetime, timezone_id: str) -> datetime:
    """
    Render a UTC instant in a zone.

    Naive datetimes are assumed to be UTC.
    """
    tz = get_timezone(timezone_id)
    if instant.tzinfo is None:
        instant = pytz.UTC.localize(instant)
    return instant.astimezone(tz)


def ensure_utc(instant: datetime) -> datetime:
    """Normalize an instant to aware UTC; naive values are taken as UTC."""
    if instant.tzinfo is None:
        return pytz.UTC.localize(instant)
    return instant.astimezone(pytz.UTC)


def day_bounds_utc(local_date: date, timezone_id: str) -> tuple[datetime, datetime]:
    """
    UTC instants of local midnight at the start and end of ``local_date``.

    Used by stores to fetch the sessions that fall within an owner's day.
    """
    start = to_utc_instant(local_date, time(0, 0), timezone_id)
    end = to_utc_instant(local_date + timedelta(days=1), time(0, 0), timezone_id)
    return start, end


def weekday_sunday_zero(local_date: date) -> int:
    """Weekday number with Sunday=0 ... Saturday=6."""
    return local_date.isoweekday() % 7
