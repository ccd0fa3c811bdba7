"""Recurrence rules for multi-session (webinar-style) products."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import MonthlyMode, RecurrenceFrequency
from ..core.exceptions import InvalidRecurrenceError
from ..core.timezone_utils import weekday_sunday_zero

WEEKDAYS_MON_TO_FRI = (1, 2, 3, 4, 5)

# Occurrence counts offered by the preset picker
PRESET_COUNTS = {
    RecurrenceFrequency.DAILY: 52,
    RecurrenceFrequency.WEEKLY: 52,
    RecurrenceFrequency.WEEKDAY: 52,
    RecurrenceFrequency.MONTHLY: 12,
    RecurrenceFrequency.YEARLY: 5,
}


@dataclass(frozen=True)
class RecurrenceRule:
    """
    How an event repeats.

    Exactly one termination must be set: ``count`` occurrences or an
    inclusive ``until`` date. ``by_weekday`` uses Sunday=0 numbering and
    only applies to weekly rules.
    """

    frequency: RecurrenceFrequency
    interval: int = 1
    by_weekday: tuple[int, ...] = ()
    count: Optional[int] = None
    until: Optional[date] = None
    monthly_mode: MonthlyMode = MonthlyMode.DAY_OF_MONTH

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "frequency", RecurrenceFrequency(self.frequency))
            object.__setattr__(self, "monthly_mode", MonthlyMode(self.monthly_mode))
        except ValueError as exc:
            raise InvalidRecurrenceError(str(exc)) from None
        object.__setattr__(self, "by_weekday", tuple(sorted(set(self.by_weekday))))

        if not isinstance(self.interval, int) or self.interval < 1:
            raise InvalidRecurrenceError(
                "Recurrence interval must be a positive integer",
                details={"interval": self.interval},
            )
        if self.count is None and self.until is None:
            raise InvalidRecurrenceError("Recurrence rule needs a count or an until date")
        if self.count is not None and self.until is not None:
            raise InvalidRecurrenceError(
                "Recurrence rule must set only one of count or until",
                details={"count": self.count, "until": self.until.isoformat()},
            )
        if self.count is not None and self.count <= 0:
            raise InvalidRecurrenceError(
                "Recurrence count must be positive",
                details={"count": self.count},
            )
        bad_days = [d for d in self.by_weekday if not 0 <= d <= 6]
        if bad_days:
            raise InvalidRecurrenceError(
                "Weekdays must be between 0 (Sunday) and 6 (Saturday)",
                details={"by_weekday": list(self.by_weekday)},
            )

    @classmethod
    def preset(cls, name: str, anchor_date: date) -> "RecurrenceRule":
        """
        Build one of the standard picker presets for an anchor date.

        ``name`` is one of daily, weekly, monthly_day, monthly_weekday,
        yearly or weekday.
        """
        if name == "weekly":
            return cls(
                frequency=RecurrenceFrequency.WEEKLY,
                by_weekday=(weekday_sunday_zero(anchor_date),),
                count=PRESET_COUNTS[RecurrenceFrequency.WEEKLY],
            )
        if name == "monthly_day":
            return cls(
                frequency=RecurrenceFrequency.MONTHLY,
                monthly_mode=MonthlyMode.DAY_OF_MONTH,
                count=PRESET_COUNTS[RecurrenceFrequency.MONTHLY],
            )
        if name == "monthly_weekday":
            return cls(
                frequency=RecurrenceFrequency.MONTHLY,
                monthly_mode=MonthlyMode.DAY_OF_WEEK,
                count=PRESET_COUNTS[RecurrenceFrequency.MONTHLY],
            )
        if name in {"daily", "yearly", "weekday"}:
            frequency = RecurrenceFrequency(name)
            return cls(frequency=frequency, count=PRESET_COUNTS[frequency])
        raise InvalidRecurrenceError(f"Unknown recurrence preset: {name}")

    def effective_weekdays(self, anchor_date: date) -> tuple[int, ...]:
        """Weekdays a weekly-style rule emits on."""
        if self.frequency == RecurrenceFrequency.WEEKDAY:
            return WEEKDAYS_MON_TO_FRI
        return self.by_weekday or (weekday_sunday_zero(anchor_date),)
