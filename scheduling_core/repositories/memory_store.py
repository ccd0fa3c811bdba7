"""
Thread-safe in-process implementation of ``SchedulingStore``.

Serves as the reference for the conditional-write contract: the overlap
check and the insert happen under one lock, so two concurrent bookings
for the same interval cannot both succeed.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
import logging
import threading
from typing import Dict, List, Optional

from ..core.enums import SessionStatus
from ..core.ulid_helper import generate_ulid
from ..domain.availability import AvailabilityWindow, Session
from ..services.conflict_checker import has_conflict, overlaps

logger = logging.getLogger(__name__)


class InMemorySchedulingStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._windows: Dict[str, AvailabilityWindow] = {}
        self._sessions: Dict[str, Session] = {}

    # Availability windows

    def save_window(self, window: AvailabilityWindow) -> AvailabilityWindow:
        """Insert or replace a window, assigning an id when missing."""
        with self._lock:
            if window.id is None:
                window = replace(window, id=generate_ulid())
            self._windows[window.id] = window
            return window

    def deactivate_windows(self, owner_id: str) -> int:
        """Soft-delete every window of an owner. Returns how many changed."""
        with self._lock:
            changed = 0
            for window_id, window in list(self._windows.items()):
                if window.owner_id == owner_id and window.is_active:
                    self._windows[window_id] = replace(window, is_active=False)
                    changed += 1
            logger.info(f"Deactivated {changed} availability windows for {owner_id}")
            return changed

    def get_windows_for_weekday(self, owner_id: str, day_of_week: int) -> List[AvailabilityWindow]:
        with self._lock:
            return [
                w
                for w in self._windows.values()
                if w.owner_id == owner_id
                and w.is_active
                and w.is_recurring
                and w.day_of_week == day_of_week
            ]

    def get_windows_for_date(self, owner_id: str, on_date: date) -> List[AvailabilityWindow]:
        with self._lock:
            return [
                w
                for w in self._windows.values()
                if w.owner_id == owner_id and w.is_active and not w.is_recurring and w.date == on_date
            ]

    # Sessions

    def get_sessions_between(
        self, owner_id: str, start_utc: datetime, end_utc: datetime
    ) -> List[Session]:
        with self._lock:
            return sorted(
                (
                    s
                    for s in self._sessions.values()
                    if s.owner_id == owner_id and overlaps(s.start_utc, s.end_utc, start_utc, end_utc)
                ),
                key=lambda s: s.start_utc,
            )

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def insert_session_if_free(
        self, session: Session, exclude_session_id: Optional[str] = None
    ) -> bool:
        with self._lock:
            owner_sessions = [s for s in self._sessions.values() if s.owner_id == session.owner_id]
            if has_conflict(session.start_utc, session.end_utc, owner_sessions, exclude_session_id):
                logger.info(
                    f"Conditional insert rejected for {session.owner_id} at {session.start_utc.isoformat()}"
                )
                return False
            self._sessions[session.id] = session
            return True

    def update_session_status(
        self,
        session_id: str,
        status: SessionStatus,
        *,
        expected_status: Optional[SessionStatus] = None,
        refund_amount_cents: Optional[int] = None,
    ) -> Optional[Session]:
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                return None
            if expected_status is not None and current.status != expected_status:
                return None
            changes: dict = {"status": status}
            if refund_amount_cents is not None:
                changes["refund_amount_cents"] = refund_amount_cents
            updated = replace(current, **changes)
            self._sessions[session_id] = updated
            return updated

