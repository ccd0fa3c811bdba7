"""
Conflict detection for the scheduling core.

Handles:
- Half-open interval overlap
- Checking a candidate interval against an owner's active sessions
- Validating a direct "book this exact time" request

Intervals are treated as half-open ``[start, end)``: back-to-back
sessions (one ending exactly when the next starts) never conflict.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
import logging
from typing import Iterable, List, Optional, Sequence

from ..core.config import get_settings
from ..core.exceptions import (
    InvalidTimeError,
    OutsideAvailabilityError,
    PastBookingError,
    SlotNoLongerAvailableError,
)
from ..core.timezone_utils import ensure_utc, to_local
from ..domain.availability import AvailabilityWindow, Session
from ..utils.time_helpers import time_to_string

logger = logging.getLogger(__name__)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """True iff ``[a_start, a_end)`` and ``[b_start, b_end)`` share any instant."""
    return a_start < b_end and b_start < a_end


def find_conflicts(
    candidate_start: datetime,
    candidate_end: datetime,
    sessions: Iterable[Session],
    exclude_session_id: Optional[str] = None,
) -> List[Session]:
    """
    Active sessions that overlap the candidate interval.

    Args:
        candidate_start: Start of the interval to check
        candidate_end: End of the interval to check
        sessions: Sessions to check against (any status)
        exclude_session_id: Session to ignore, e.g. the one being rescheduled

    Returns:
        Conflicting scheduled/live sessions, in input order
    """
    candidate_start = ensure_utc(candidate_start)
    candidate_end = ensure_utc(candidate_end)
    return [
        session
        for session in sessions
        if session.is_active
        and session.id != exclude_session_id
        and overlaps(candidate_start, candidate_end, session.start_utc, session.end_utc)
    ]


def has_conflict(
    candidate_start: datetime,
    candidate_end: datetime,
    sessions: Iterable[Session],
    exclude_session_id: Optional[str] = None,
) -> bool:
    """Simplified boolean check for quick validation."""
    return bool(find_conflicts(candidate_start, candidate_end, sessions, exclude_session_id))


def _fits_window(
    window: AvailabilityWindow, local_date: date, local_start: datetime, local_end: datetime
) -> bool:
    if not window.applies_to(local_date):
        return False
    if local_end.date() != local_date:
        return False
    return window.start_time <= local_start.time() and local_end.time() <= window.end_time


def validate_booking_request(
    owner_id: str,
    start_utc: datetime,
    end_utc: datetime,
    windows: Sequence[AvailabilityWindow],
    sessions: Iterable[Session],
    now: datetime,
    timezone_id: str,
    minimum_lead_time: Optional[timedelta] = None,
    exclude_session_id: Optional[str] = None,
) -> None:
    """
    Gate for booking an exact interval rather than a generated slot.

    A request is valid iff it starts strictly after ``now + minimum_lead_time``,
    lies fully inside one of the owner's windows for that local day, and
    overlaps none of the owner's active sessions.

    Raises:
        InvalidTimeError: end is not after start
        PastBookingError: the request is in the past or inside the lead time
        OutsideAvailabilityError: no window covers the request
        SlotNoLongerAvailableError: the request overlaps an active session
    """
    start_utc = ensure_utc(start_utc)
    end_utc = ensure_utc(end_utc)
    now = ensure_utc(now)
    if end_utc <= start_utc:
        raise InvalidTimeError(
            "Booking must end after it starts",
            details={"start_utc": start_utc.isoformat(), "end_utc": end_utc.isoformat()},
        )
    if minimum_lead_time is None:
        minimum_lead_time = get_settings().minimum_lead_time

    if start_utc <= now + minimum_lead_time:
        raise PastBookingError(
            required_hours=minimum_lead_time.total_seconds() / 3600,
            provided_hours=(start_utc - now).total_seconds() / 3600,
        )

    local_start = to_local(start_utc, timezone_id)
    local_end = to_local(end_utc, timezone_id)
    local_date = local_start.date()
    owner_windows = [w for w in windows if w.owner_id == owner_id]
    if not any(_fits_window(w, local_date, local_start, local_end) for w in owner_windows):
        raise OutsideAvailabilityError(
            owner_id=owner_id,
            local_range=f"{time_to_string(local_start.time())}-{time_to_string(local_end.time())}",
            local_date=local_date.isoformat(),
        )

    conflicts = find_conflicts(
        start_utc,
        end_utc,
        (s for s in sessions if s.owner_id == owner_id),
        exclude_session_id,
    )
    if conflicts:
        logger.warning(
            f"Found {len(conflicts)} booking conflicts for {owner_id} "
            f"between {start_utc.isoformat()}-{end_utc.isoformat()}"
        )
        raise SlotNoLongerAvailableError(
            details={"conflicting_session_ids": [s.id for s in conflicts]}
        )
