# scheduling_core/core/enums.py
"""
Core enums for the scheduling core.

String-valued so they serialize cleanly when the calling layer persists
or returns them.
"""

from enum import Enum


class SessionStatus(str, Enum):
    """Session lifecycle statuses."""

    SCHEDULED = "scheduled"  # Default - booking succeeded
    LIVE = "live"  # Session in progress
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Only these statuses can block a new booking
ACTIVE_SESSION_STATUSES = frozenset({SessionStatus.SCHEDULED, SessionStatus.LIVE})


class RecurrenceFrequency(str, Enum):
    """How a recurring event repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    WEEKDAY = "weekday"  # Monday to Friday


class MonthlyMode(str, Enum):
    """How a monthly rule picks its day."""

    DAY_OF_MONTH = "day_of_month"  # e.g. the 15th
    DAY_OF_WEEK = "day_of_week"  # e.g. the second Tuesday


class RefundKind(str, Enum):
    """Classification of a refund decision."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"
