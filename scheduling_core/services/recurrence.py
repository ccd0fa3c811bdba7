"""
Recurrence expansion for recurring session schedules.

Expansion is recomputed from scratch on every call; there is no cursor
state, so the same rule and anchor always give the same dates.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
import logging
from typing import Iterator, Optional

from ..core.config import get_settings
from ..core.enums import MonthlyMode, RecurrenceFrequency
from ..core.exceptions import InvalidRecurrenceError, InvalidTimeError
from ..core.timezone_utils import to_utc_instant, weekday_sunday_zero
from ..domain.recurrence import RecurrenceRule
from ..utils.time_helpers import TimeLike, coerce_time

logger = logging.getLogger(__name__)

# Upper bound on interval steps, independent of how many dates are emitted
_MAX_STEPS = 100_000


@dataclass(frozen=True)
class Occurrence:
    """One dated instance of a recurring session."""

    date: date
    start_utc: datetime
    end_utc: datetime


def _add_months(year: int, month: int, months: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def _nth_weekday_of_month(year: int, month: int, weekday: int, nth: int) -> Optional[date]:
    """The nth (1-based) ``weekday`` (Sunday=0) of a month, if it exists."""
    first = date(year, month, 1)
    offset = (weekday - weekday_sunday_zero(first)) % 7
    day = 1 + offset + (nth - 1) * 7
    if day > calendar.monthrange(year, month)[1]:
        return None
    return date(year, month, day)


def _add_days(start: date, days: int) -> Optional[date]:
    """``start + days``, or None once the result leaves the supported range."""
    try:
        return start + timedelta(days=days)
    except OverflowError:
        return None


# Each generator stops when the next period falls outside date.min..date.max.


def _weekly_candidates(anchor: date, rule: RecurrenceRule) -> Iterator[tuple[date, date]]:
    weekdays = rule.effective_weekdays(anchor)
    anchor_weekday = weekday_sunday_zero(anchor)
    for step in range(_MAX_STEPS):
        for weekday in weekdays:
            # Offset from the anchor; weeks start on the Sunday of the anchor's week
            offset = step * 7 * rule.interval + weekday - anchor_weekday
            if offset < 0:
                continue
            candidate = _add_days(anchor, offset)
            if candidate is None:
                return
            yield candidate, candidate


def _daily_candidates(anchor: date, rule: RecurrenceRule) -> Iterator[tuple[date, date]]:
    for step in range(_MAX_STEPS):
        candidate = _add_days(anchor, step * rule.interval)
        if candidate is None:
            return
        yield candidate, candidate


def _monthly_candidates(anchor: date, rule: RecurrenceRule) -> Iterator[tuple[Optional[date], date]]:
    nth = (anchor.day - 1) // 7 + 1
    anchor_weekday = weekday_sunday_zero(anchor)
    for step in range(_MAX_STEPS):
        year, month = _add_months(anchor.year, anchor.month, step * rule.interval)
        if year > date.max.year:
            return
        period_start = date(year, month, 1)
        if rule.monthly_mode == MonthlyMode.DAY_OF_WEEK:
            yield _nth_weekday_of_month(year, month, anchor_weekday, nth), period_start
        elif anchor.day <= calendar.monthrange(year, month)[1]:
            yield date(year, month, anchor.day), period_start
        else:
            # Month is too short for the anchor day
            yield None, period_start


def _yearly_candidates(anchor: date, rule: RecurrenceRule) -> Iterator[tuple[Optional[date], date]]:
    for step in range(_MAX_STEPS):
        year = anchor.year + step * rule.interval
        if year > date.max.year:
            return
        period_start = date(year, 1, 1)
        if calendar.isleap(year) or (anchor.month, anchor.day) != (2, 29):
            yield date(year, anchor.month, anchor.day), period_start
        else:
            # Feb 29 outside a leap year
            yield None, period_start

_CANDIDATE_GENERATORS = {
    RecurrenceFrequency.DAILY: _daily_candidates,
    RecurrenceFrequency.WEEKLY: _weekly_candidates,
    RecurrenceFrequency.WEEKDAY: _weekly_candidates,
    RecurrenceFrequency.MONTHLY: _monthly_candidates,
    RecurrenceFrequency.YEARLY: _yearly_candidates,
}


def expand_recurrence(
    anchor_date: date,
    rule: RecurrenceRule,
    *,
    max_occurrences: Optional[int] = None,
) -> list[date]:
    """
    Expand a recurrence rule into its ordered occurrence dates.

    Args:
        anchor_date: First date the series may start on
        rule: Validated recurrence rule
        max_occurrences: Refuse expansions larger than this (defaults to
            the configured ``max_recurrence_occurrences``)

    Returns:
        Ascending list of distinct dates, none before ``anchor_date`` and,
        for ``until`` rules, none after ``until``.

    Raises:
        InvalidRecurrenceError: if the expansion would exceed ``max_occurrences``,
            or a count rule runs out of dates before reaching ``count``
    """
    if max_occurrences is None:
        max_occurrences = get_settings().max_recurrence_occurrences

    if rule.count is not None and rule.count > max_occurrences:
        raise InvalidRecurrenceError(
            f"Recurrence would produce {rule.count} occurrences (max {max_occurrences})",
            details={"count": rule.count, "max_occurrences": max_occurrences},
        )

    dates: list[date] = []
    last: Optional[date] = None
    for candidate, period_start in _CANDIDATE_GENERATORS[rule.frequency](anchor_date, rule):
        if rule.until is not None and period_start > rule.until:
            break
        if candidate is None or candidate < anchor_date:
            continue
        if rule.until is not None and candidate > rule.until:
            break
        if last is not None and candidate <= last:
            continue
        if len(dates) >= max_occurrences:
            raise InvalidRecurrenceError(
                f"Recurrence until {rule.until} produces more than {max_occurrences} occurrences",
                details={"until": str(rule.until), "max_occurrences": max_occurrences},
            )
        dates.append(candidate)
        last = candidate
        if rule.count is not None and len(dates) >= rule.count:
            break
    else:
        # Out of candidates: an until rule has already emitted every date up to until
        if rule.until is None:
            raise InvalidRecurrenceError(
                f"Recurrence ends after {len(dates)} of {rule.count} occurrences: "
                f"no dates beyond {date.max.isoformat()}",
                details={
                    "frequency": rule.frequency.value,
                    "interval": rule.interval,
                    "count": rule.count,
                    "produced": len(dates),
                },
            )

    logger.debug(
        f"Expanded {rule.frequency.value} rule from {anchor_date} into {len(dates)} occurrences"
    )
    return dates


def expand_occurrences(
    anchor_date: date,
    rule: RecurrenceRule,
    start_time: TimeLike,
    duration_minutes: int,
    timezone_id: str,
    *,
    max_occurrences: Optional[int] = None,
) -> list[Occurrence]:
    """
    Expand a recurring session into timezone-correct UTC instances.

    Each occurrence keeps the same local wall-clock start, so a 09:00
    webinar stays at 09:00 local on both sides of a DST change.
    """
    if duration_minutes <= 0:
        raise InvalidTimeError(
            "Session duration must be positive",
            details={"duration_minutes": duration_minutes},
        )
    wall = coerce_time(start_time)
    length = timedelta(minutes=duration_minutes)

    occurrences = []
    for occurrence_date in expand_recurrence(anchor_date, rule, max_occurrences=max_occurrences):
        start_utc = to_utc_instant(occurrence_date, wall, timezone_id)
        occurrences.append(Occurrence(occurrence_date, start_utc, start_utc + length))
    return occurrences
