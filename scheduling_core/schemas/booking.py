# scheduling_core/schemas/booking.py
"""Recurrence, cancellation policy and cancellation preview schemas."""

import datetime
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from ..core.config import get_settings
from ..core.enums import MonthlyMode, RecurrenceFrequency
from ..domain.recurrence import RecurrenceRule
from ..services.cancellation_service import CancellationPreview
from ..services.refund_policy import CancellationPolicy
from .base import StandardizedModel, StrictRequestModel

DateType = datetime.date
DateTimeType = datetime.datetime


class RecurrenceEnd(StrictRequestModel):
    """Either a number of occurrences or an inclusive end date."""

    after_occurrences: Optional[int] = Field(None, ge=1)
    on_date: Optional[DateType] = None

    @model_validator(mode="after")
    def exactly_one(self) -> "RecurrenceEnd":
        if (self.after_occurrences is None) == (self.on_date is None):
            raise ValueError("Provide exactly one of afterOccurrences or onDate")
        return self


class RecurrenceRuleCreate(StrictRequestModel):
    """Schema for a custom recurrence picked by an owner."""

    frequency: RecurrenceFrequency
    interval: int = Field(1, ge=1, le=30)
    days_of_week: List[int] = Field(default_factory=list)
    monthly_mode: MonthlyMode = MonthlyMode.DAY_OF_MONTH
    end: Optional[RecurrenceEnd] = None

    @model_validator(mode="after")
    def validate_days(self) -> "RecurrenceRuleCreate":
        if any(not 0 <= d <= 6 for d in self.days_of_week):
            raise ValueError("daysOfWeek entries must be between 0 (Sunday) and 6 (Saturday)")
        return self

    def to_domain(self) -> RecurrenceRule:
        """Convert to a rule; a missing end uses the configured default count."""
        end = self.end or RecurrenceEnd(
            after_occurrences=get_settings().default_recurrence_occurrences
        )
        return RecurrenceRule(
            frequency=self.frequency,
            interval=self.interval,
            by_weekday=tuple(self.days_of_week) if self.frequency == RecurrenceFrequency.WEEKLY else (),
            count=end.after_occurrences,
            until=end.on_date,
            monthly_mode=self.monthly_mode,
        )


class CancellationPolicyConfig(StrictRequestModel):
    """A tenant's cancellation settings."""

    cancellation_deadline_hours: float = Field(24, ge=0)
    partial_refund_percent: Optional[float] = Field(None, ge=0, le=100)

    def to_domain(self) -> CancellationPolicy:
        return CancellationPolicy(
            cancellation_deadline_hours=self.cancellation_deadline_hours,
            partial_refund_percent=self.partial_refund_percent,
        )


class CancellationPreviewResponse(StandardizedModel):
    """What a visitor sees before confirming a cancellation."""

    session_id: str
    start_utc: DateTimeType
    end_utc: DateTimeType
    is_paid: bool
    paid_amount_cents: int
    refund_amount_cents: int
    is_full_refund: bool
    refund_kind: Literal["full", "partial", "none"]
    refund_reason: str
    cancellation_deadline_hours: float
    is_before_deadline: bool

    @classmethod
    def from_preview(cls, preview: CancellationPreview) -> "CancellationPreviewResponse":
        return cls(
            session_id=preview.session.id,
            start_utc=preview.session.start_utc,
            end_utc=preview.session.end_utc,
            is_paid=preview.paid_amount_cents > 0,
            paid_amount_cents=preview.paid_amount_cents,
            refund_amount_cents=preview.decision.amount_cents,
            is_full_refund=preview.decision.is_full_refund,
            refund_kind=preview.decision.kind.value,
            refund_reason=preview.decision.reason,
            cancellation_deadline_hours=preview.policy.cancellation_deadline_hours,
            is_before_deadline=preview.is_before_deadline,
        )
