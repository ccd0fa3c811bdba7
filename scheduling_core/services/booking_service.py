# scheduling_core/services/booking_service.py
"""
Booking Service for the scheduling core.

Wraps the pure slot and conflict functions with the store round trips a
request handler needs:
- Browsing generated slots for a day
- Booking an exact interval with a conditional write
- Rescheduling a session without conflicting with itself
- Completing a session

Conflicts found while validating are reported as
``SlotNoLongerAvailableError``; so is a lost conditional write, after a
fresh re-read confirms the cause.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import List, Optional

from ..core.enums import SessionStatus
from ..core.exceptions import (
    BusinessRuleException,
    SessionNotFoundError,
    SlotNoLongerAvailableError,
)
from ..core.timezone_utils import day_bounds_utc, ensure_utc, to_local, weekday_sunday_zero
from ..core.ulid_helper import generate_ulid
from ..domain.availability import AvailabilityWindow, Session, Slot
from ..monitoring.prometheus_metrics import prometheus_metrics
from .availability import generate_slots
from .base import BaseService
from .conflict_checker import find_conflicts, validate_booking_request


class BookingService(BaseService):
    """
    Service for browsing slots and committing bookings.

    Every operation takes ``now`` from the caller.
    """

    def get_windows_for_date(self, owner_id: str, target_date: date) -> List[AvailabilityWindow]:
        """Recurring windows for the weekday plus one-off windows for the date."""
        recurring = self.store.get_windows_for_weekday(owner_id, weekday_sunday_zero(target_date))
        one_off = self.store.get_windows_for_date(owner_id, target_date)
        return list(recurring) + list(one_off)

    def _lead_time(self, minimum_lead_time: Optional[timedelta]) -> timedelta:
        """The caller's override, else the configured lead time."""
        return minimum_lead_time if minimum_lead_time is not None else self.settings.minimum_lead_time

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self,
        owner_id: str,
        target_date: date,
        timezone_id: str,
        now: datetime,
        minimum_lead_time: Optional[timedelta] = None,
    ) -> List[Slot]:
        """
        Slots for an owner's local date, flagged available or not.

        Args:
            owner_id: Calendar owner
            target_date: Date in the owner's zone
            timezone_id: Owner's IANA timezone
            now: Current instant
            minimum_lead_time: Overrides the configured lead time

        Returns:
            Slots sorted by start
        """
        windows = self.get_windows_for_date(owner_id, target_date)
        if not windows:
            return []
        day_start, day_end = day_bounds_utc(target_date, timezone_id)
        sessions = self.store.get_sessions_between(owner_id, day_start, day_end)
        return generate_slots(
            owner_id,
            target_date,
            windows,
            sessions,
            now,
            timezone_id,
            self._lead_time(minimum_lead_time),
        )

    def _validate(
        self,
        owner_id: str,
        start_utc: datetime,
        end_utc: datetime,
        timezone_id: str,
        now: datetime,
        minimum_lead_time: Optional[timedelta] = None,
        exclude_session_id: Optional[str] = None,
    ) -> None:
        local_date = to_local(start_utc, timezone_id).date()
        windows = self.get_windows_for_date(owner_id, local_date)
        sessions = self.store.get_sessions_between(owner_id, start_utc, end_utc)
        try:
            validate_booking_request(
                owner_id,
                start_utc,
                end_utc,
                windows,
                sessions,
                now,
                timezone_id,
                self._lead_time(minimum_lead_time),
                exclude_session_id=exclude_session_id,
            )
        except SlotNoLongerAvailableError:
            prometheus_metrics.record_booking_conflict("validation")
            raise

    def _lost_write(
        self,
        owner_id: str,
        start_utc: datetime,
        end_utc: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> SlotNoLongerAvailableError:
        """Re-read after a failed conditional write and describe the conflict."""
        prometheus_metrics.record_booking_conflict("commit")
        fresh = self.store.get_sessions_between(owner_id, start_utc, end_utc)
        conflicts = find_conflicts(start_utc, end_utc, fresh, exclude_session_id)
        self.logger.warning(
            f"Conditional write lost for {owner_id} at {start_utc.isoformat()}: "
            f"{len(conflicts)} conflicting sessions on re-read"
        )
        return SlotNoLongerAvailableError(
            details={"conflicting_session_ids": [s.id for s in conflicts]}
        )

    @BaseService.measure_operation("book_session")
    def book_session(
        self,
        owner_id: str,
        start_utc: datetime,
        end_utc: datetime,
        timezone_id: str,
        now: datetime,
        title: Optional[str] = None,
        minimum_lead_time: Optional[timedelta] = None,
    ) -> Session:
        """
        Book an exact interval.

        Pass the same ``minimum_lead_time`` that was used to list the slots.

        Raises:
            PastBookingError: inside the minimum lead time
            OutsideAvailabilityError: not covered by an availability window
            SlotNoLongerAvailableError: overlaps an active session, either at
                validation or when the conditional write is rejected
        """
        start_utc = ensure_utc(start_utc)
        end_utc = ensure_utc(end_utc)
        self._validate(owner_id, start_utc, end_utc, timezone_id, now, minimum_lead_time)

        session = Session(
            id=generate_ulid(),
            owner_id=owner_id,
            start_utc=start_utc,
            end_utc=end_utc,
            status=SessionStatus.SCHEDULED,
            title=title,
        )
        if not self.store.insert_session_if_free(session):
            raise self._lost_write(owner_id, start_utc, end_utc)

        self.logger.info(f"Booked session {session.id} for {owner_id} at {start_utc.isoformat()}")
        return session

    @BaseService.measure_operation("reschedule_session")
    def reschedule_session(
        self,
        session_id: str,
        new_start_utc: datetime,
        new_end_utc: datetime,
        timezone_id: str,
        now: datetime,
        minimum_lead_time: Optional[timedelta] = None,
    ) -> Session:
        """Move a scheduled session, ignoring its own current interval."""
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.status != SessionStatus.SCHEDULED:
            raise BusinessRuleException(
                f"Only scheduled sessions can be rescheduled (status: {session.status.value})",
                code="SESSION_NOT_RESCHEDULABLE",
                details={"session_id": session_id, "status": session.status.value},
            )

        new_start_utc = ensure_utc(new_start_utc)
        new_end_utc = ensure_utc(new_end_utc)
        self._validate(
            session.owner_id,
            new_start_utc,
            new_end_utc,
            timezone_id,
            now,
            minimum_lead_time,
            exclude_session_id=session_id,
        )

        moved = replace(session, start_utc=new_start_utc, end_utc=new_end_utc)
        if not self.store.insert_session_if_free(moved, exclude_session_id=session_id):
            raise self._lost_write(session.owner_id, new_start_utc, new_end_utc, session_id)

        self.logger.info(
            f"Rescheduled session {session_id} from {session.start_utc.isoformat()} "
            f"to {new_start_utc.isoformat()}"
        )
        return moved

    @BaseService.measure_operation("complete_session")
    def complete_session(self, session_id: str) -> Session:
        """Mark a scheduled or live session as completed."""
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if not session.is_active:
            raise BusinessRuleException(
                f"Session cannot be completed (status: {session.status.value})",
                code="SESSION_NOT_COMPLETABLE",
                details={"session_id": session_id, "status": session.status.value},
            )
        updated = self.store.update_session_status(
            session_id, SessionStatus.COMPLETED, expected_status=session.status
        )
        if updated is None:
            raise BusinessRuleException(
                "Session status changed concurrently",
                code="SESSION_STATUS_CHANGED",
                details={"session_id": session_id},
            )
        return updated
