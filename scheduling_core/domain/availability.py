"""Availability windows, booked sessions and derived slots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Optional

from ..core.enums import ACTIVE_SESSION_STATUSES, SessionStatus
from ..core.exceptions import InvalidTimeError, ValidationException
from ..core.timezone_utils import ensure_utc, weekday_sunday_zero
from ..utils.time_helpers import TimeLike, coerce_time, time_to_string


@dataclass(frozen=True)
class AvailabilityWindow:
    """When an owner can be booked.

    Recurring windows repeat on ``day_of_week`` (Sunday=0); one-off windows
    apply to ``date`` only. Times are local wall-clock in the owner's zone.
    """

    owner_id: str
    start_time: time
    end_time: time
    is_recurring: bool = True
    day_of_week: Optional[int] = None
    date: Optional[date] = None
    session_duration_minutes: int = 60
    buffer_minutes: int = 0
    is_active: bool = True
    id: Optional[str] = None

    def __post_init__(self) -> None:
        # Frozen: normalize through object.__setattr__
        object.__setattr__(self, "start_time", coerce_time(self.start_time))
        object.__setattr__(self, "end_time", coerce_time(self.end_time))

        if self.start_time >= self.end_time:
            raise InvalidTimeError(
                "endTime must be after startTime",
                details={
                    "start_time": time_to_string(self.start_time),
                    "end_time": time_to_string(self.end_time),
                },
            )
        if self.is_recurring:
            if self.day_of_week is None or not 0 <= self.day_of_week <= 6:
                raise InvalidTimeError(
                    "dayOfWeek (0-6, Sunday=0) is required for recurring availability",
                    details={"day_of_week": self.day_of_week},
                )
        elif self.date is None:
            raise InvalidTimeError("date is required for one-time availability")
        if self.session_duration_minutes <= 0:
            raise InvalidTimeError(
                "Session duration must be positive",
                details={"session_duration_minutes": self.session_duration_minutes},
            )
        if self.buffer_minutes < 0:
            raise InvalidTimeError(
                "Buffer cannot be negative",
                details={"buffer_minutes": self.buffer_minutes},
            )

    @classmethod
    def recurring(
        cls, owner_id: str, day_of_week: int, start: TimeLike, end: TimeLike, **kwargs: Any
    ) -> "AvailabilityWindow":
        return cls(
            owner_id=owner_id,
            start_time=start,  # type: ignore[arg-type]
            end_time=end,  # type: ignore[arg-type]
            is_recurring=True,
            day_of_week=day_of_week,
            **kwargs,
        )

    @classmethod
    def one_off(
        cls, owner_id: str, on_date: date, start: TimeLike, end: TimeLike, **kwargs: Any
    ) -> "AvailabilityWindow":
        return cls(
            owner_id=owner_id,
            start_time=start,  # type: ignore[arg-type]
            end_time=end,  # type: ignore[arg-type]
            is_recurring=False,
            date=on_date,
            **kwargs,
        )

    def applies_to(self, target_date: date) -> bool:
        """True when this active window covers ``target_date``."""
        if not self.is_active:
            return False
        if self.is_recurring:
            return self.day_of_week == weekday_sunday_zero(target_date)
        return self.date == target_date

    @property
    def local_range(self) -> str:
        return f"{time_to_string(self.start_time)}-{time_to_string(self.end_time)}"


@dataclass(frozen=True)
class Session:
    """A booked interval that can block new bookings."""

    id: str
    owner_id: str
    start_utc: datetime
    end_utc: datetime
    status: SessionStatus = SessionStatus.SCHEDULED
    title: Optional[str] = None
    refund_amount_cents: Optional[int] = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_utc", ensure_utc(self.start_utc))
        object.__setattr__(self, "end_utc", ensure_utc(self.end_utc))
        try:
            object.__setattr__(self, "status", SessionStatus(self.status))
        except ValueError:
            raise ValidationException(
                f"Unknown session status: {self.status!r}",
                code="INVALID_SESSION_STATUS",
                details={"session_id": self.id, "status": str(self.status)},
            ) from None
        if self.end_utc <= self.start_utc:
            raise InvalidTimeError(
                "Session must end after it starts",
                details={"session_id": self.id},
            )

    @property
    def is_active(self) -> bool:
        """Scheduled and live sessions take part in conflict checks."""
        return self.status in ACTIVE_SESSION_STATUSES

    @property
    def duration_minutes(self) -> int:
        return int((self.end_utc - self.start_utc).total_seconds() // 60)


@dataclass(frozen=True)
class Slot:
    """A candidate bookable interval. Derived; never persisted."""

    start_utc: datetime
    end_utc: datetime
    duration_minutes: int
    available: bool = True

    def to_payload(self) -> dict[str, object]:
        return {
            "start_utc": self.start_utc.isoformat(),
            "end_utc": self.end_utc.isoformat(),
            "duration_minutes": self.duration_minutes,
            "available": self.available,
        }
