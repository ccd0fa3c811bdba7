from __future__ import annotations

from datetime import date, datetime, timedelta
import logging
from typing import Iterable, List, Optional, Sequence

from ..core.config import get_settings
from ..core.timezone_utils import ensure_utc, to_utc_instant
from ..domain.availability import AvailabilityWindow, Session, Slot
from .conflict_checker import has_conflict

logger = logging.getLogger(__name__)


def select_windows_for_date(
    windows: Iterable[AvailabilityWindow], target_date: date
) -> List[AvailabilityWindow]:
    """
    Active windows covering ``target_date``.

    Recurring and date-specific windows are both kept: a one-off window
    supplements the weekly pattern rather than replacing it.
    """
    return [window for window in windows if window.applies_to(target_date)]


def subdivide_window(
    window: AvailabilityWindow, target_date: date, timezone_id: str
) -> List[tuple[datetime, datetime]]:
    """
    Carve a window into full-length slot intervals in UTC.

    Steps by duration plus buffer; a trailing remainder shorter than one
    session is dropped.
    """
    window_start = to_utc_instant(target_date, window.start_time, timezone_id)
    window_end = to_utc_instant(target_date, window.end_time, timezone_id)
    duration = timedelta(minutes=window.session_duration_minutes)
    step = duration + timedelta(minutes=window.buffer_minutes)

    intervals = []
    cursor = window_start
    while cursor + duration <= window_end:
        intervals.append((cursor, cursor + duration))
        cursor += step
    return intervals


def generate_slots(
    owner_id: str,
    target_date: date,
    windows: Sequence[AvailabilityWindow],
    existing_sessions: Iterable[Session],
    now: datetime,
    timezone_id: str,
    minimum_lead_time: Optional[timedelta] = None,
) -> List[Slot]:
    """
    Generate bookable slots for an owner on one local date.

    Takes into account:
    - Recurring and one-off availability windows for the date
    - Session duration and buffer per window
    - Existing scheduled/live sessions of the same owner
    - Minimum lead time before a slot can be booked

    Unavailable slots are returned with ``available=False`` rather than
    dropped.

    Args:
        owner_id: Calendar owner
        target_date: Local date in the owner's zone
        windows: Candidate availability windows (filtered here)
        existing_sessions: Sessions snapshot from the store
        now: Current instant, supplied by the caller
        timezone_id: Owner's IANA timezone
        minimum_lead_time: Defaults to the configured lead time

    Returns:
        Slots sorted by start instant
    """
    if minimum_lead_time is None:
        minimum_lead_time = get_settings().minimum_lead_time
    earliest_bookable = ensure_utc(now) + minimum_lead_time

    owner_sessions = [s for s in existing_sessions if s.owner_id == owner_id and s.is_active]
    selected = select_windows_for_date(
        (w for w in windows if w.owner_id == owner_id), target_date
    )

    slots: List[Slot] = []
    for window in selected:
        for slot_start, slot_end in subdivide_window(window, target_date, timezone_id):
            available = slot_start > earliest_bookable and not has_conflict(
                slot_start, slot_end, owner_sessions
            )
            slots.append(
                Slot(
                    start_utc=slot_start,
                    end_utc=slot_end,
                    duration_minutes=window.session_duration_minutes,
                    available=available,
                )
            )

    slots.sort(key=lambda slot: slot.start_utc)
    logger.debug(
        f"Generated {len(slots)} slots for {owner_id} on {target_date} "
        f"from {len(selected)} windows ({sum(s.available for s in slots)} available)"
    )
    return slots
