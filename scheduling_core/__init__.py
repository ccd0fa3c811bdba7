"""
Scheduling core: availability slots, booking conflicts, recurrence
expansion and cancellation refunds.

The functions re-exported here are pure; ``now`` is always supplied by
the caller.
"""

from .core.timezone_utils import to_local, to_utc_instant
from .services.availability import generate_slots
from .services.conflict_checker import has_conflict, overlaps, validate_booking_request
from .services.recurrence import expand_occurrences, expand_recurrence
from .services.refund_policy import compute_refund

__all__ = [
    "compute_refund",
    "expand_occurrences",
    "expand_recurrence",
    "generate_slots",
    "has_conflict",
    "overlaps",
    "to_local",
    "to_utc_instant",
    "validate_booking_request",
]
