"""
Collaborator interfaces consumed by the scheduling services.

Persistence and payment execution live outside the core; these protocols
describe exactly what the services need from them.
"""

from datetime import date, datetime
from typing import List, Optional, Protocol

from ..core.enums import SessionStatus
from ..domain.availability import AvailabilityWindow, Session


class SchedulingStore(Protocol):
    def get_windows_for_weekday(self, owner_id: str, day_of_week: int) -> List[AvailabilityWindow]:
        """Active recurring windows for a weekday (Sunday=0)."""
        ...

    def get_windows_for_date(self, owner_id: str, on_date: date) -> List[AvailabilityWindow]:
        """Active one-off windows for an exact date."""
        ...

    def get_sessions_between(
        self, owner_id: str, start_utc: datetime, end_utc: datetime
    ) -> List[Session]:
        """Sessions whose interval overlaps ``[start_utc, end_utc)``, any status."""
        ...

    def get_session(self, session_id: str) -> Optional[Session]:
        ...

    def insert_session_if_free(
        self, session: Session, exclude_session_id: Optional[str] = None
    ) -> bool:
        """
        Conditional write.

        Must atomically insert ``session`` only if no scheduled/live session
        of the same owner (other than ``exclude_session_id``) overlaps it.
        Returns False when the condition fails.
        """
        ...

    def update_session_status(
        self,
        session_id: str,
        status: SessionStatus,
        *,
        expected_status: Optional[SessionStatus] = None,
        refund_amount_cents: Optional[int] = None,
    ) -> Optional[Session]:
        """
        Update a session's status.

        With ``expected_status`` the update is conditional and returns None
        when the stored status differs.
        """
        ...


class PaymentGateway(Protocol):
    """
    Issues refunds. Responsible for recording what already went out, so a
    retried request never refunds twice.
    """

    def refund_full(self, payment_id: str) -> str:
        """Refund the whole payment; returns the gateway refund id."""
        ...

    def refund_partial(self, payment_id: str, amount_cents: int) -> str:
        """Refund part of the payment; returns the gateway refund id."""
        ...
