# scheduling_core/schemas/availability.py
"""
Availability schemas.

Request DTOs validate what an owner submits (HH:MM strings, allowed
durations and buffers) and convert to the domain ``AvailabilityWindow``.
"""

import datetime
from typing import Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from ..core.config import get_settings
from ..domain.availability import AvailabilityWindow, Slot
from ..utils.time_helpers import string_to_time
from .base import StandardizedModel, StrictRequestModel

# Type aliases for clarity
DateType = datetime.date
DateTimeType = datetime.datetime

HHMM_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


class AvailabilityWindowCreate(StrictRequestModel):
    """Schema for creating a recurring or one-off availability window."""

    is_recurring: bool = False
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    date: Optional[DateType] = None
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    end_time: str = Field(..., pattern=HHMM_PATTERN)
    session_duration_minutes: Optional[int] = None
    buffer_minutes: Optional[int] = None

    @field_validator("session_duration_minutes")
    @classmethod
    def validate_duration(cls, v: Optional[int]) -> Optional[int]:
        allowed = get_settings().allowed_session_durations
        if v is not None and v not in allowed:
            raise ValueError(f"sessionDuration must be one of {allowed} minutes")
        return v

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, v: Optional[int]) -> Optional[int]:
        allowed = get_settings().allowed_buffer_minutes
        if v is not None and v not in allowed:
            raise ValueError(f"bufferMinutes must be one of {allowed} minutes")
        return v

    @model_validator(mode="after")
    def validate_shape(self) -> "AvailabilityWindowCreate":
        if self.is_recurring and self.day_of_week is None:
            raise ValueError("dayOfWeek is required for recurring availability")
        if not self.is_recurring and self.date is None:
            raise ValueError("date is required for one-time availability")
        if string_to_time(self.start_time) >= string_to_time(self.end_time):
            raise ValueError("endTime must be after startTime")
        return self

    def to_domain(self, owner_id: str) -> AvailabilityWindow:
        settings = get_settings()
        return AvailabilityWindow(
            owner_id=owner_id,
            start_time=string_to_time(self.start_time),
            end_time=string_to_time(self.end_time),
            is_recurring=self.is_recurring,
            day_of_week=self.day_of_week if self.is_recurring else None,
            date=None if self.is_recurring else self.date,
            session_duration_minutes=(
                self.session_duration_minutes or settings.default_session_duration_minutes
            ),
            buffer_minutes=(
                self.buffer_minutes
                if self.buffer_minutes is not None
                else settings.default_buffer_minutes
            ),
        )


class SlotResponse(StandardizedModel):
    """A generated slot as returned to booking clients."""

    start_utc: DateTimeType
    end_utc: DateTimeType
    duration_minutes: int
    available: bool

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotResponse":
        return cls.model_validate(slot)
