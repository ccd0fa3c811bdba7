# scheduling_core/services/cancellation_service.py
"""
Cancellation workflow: refund preview and execution.

The refund amount comes from ``compute_refund``; the payment gateway is
only called once a decision exists, and the session is marked cancelled
with a conditional status update so a concurrent cancel cannot refund
twice through this path.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.config import Settings
from ..core.enums import SessionStatus
from ..core.exceptions import SessionNotCancellableError, SessionNotFoundError, ValidationException
from ..domain.availability import Session
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.interfaces import PaymentGateway, SchedulingStore
from .base import BaseService
from .refund_policy import CancellationPolicy, RefundDecision, compute_refund, is_before_deadline


@dataclass(frozen=True)
class CancellationPreview:
    session: Session
    paid_amount_cents: int
    decision: RefundDecision
    policy: CancellationPolicy
    is_before_deadline: bool


@dataclass(frozen=True)
class CancellationResult:
    session: Session
    decision: RefundDecision
    refund_id: Optional[str] = None


class CancellationService(BaseService):
    """Previews and executes session cancellations."""

    def __init__(
        self,
        store: SchedulingStore,
        payment_gateway: PaymentGateway,
        settings: Optional[Settings] = None,
    ):
        super().__init__(store, settings)
        self.payment_gateway = payment_gateway

    def _cancellable_session(self, session_id: str) -> Session:
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.status != SessionStatus.SCHEDULED:
            raise SessionNotCancellableError(session_id, session.status.value)
        return session

    @BaseService.measure_operation("preview_cancellation")
    def preview_cancellation(
        self,
        session_id: str,
        paid_amount_cents: int,
        now: datetime,
        policy: Optional[CancellationPolicy] = None,
    ) -> CancellationPreview:
        """What cancelling right now would refund. No side effects."""
        session = self._cancellable_session(session_id)
        policy = policy or self.settings.default_cancellation_policy()
        decision = compute_refund(paid_amount_cents, session.start_utc, now, policy)
        return CancellationPreview(
            session=session,
            paid_amount_cents=paid_amount_cents,
            decision=decision,
            policy=policy,
            is_before_deadline=is_before_deadline(session.start_utc, now, policy),
        )

    @BaseService.measure_operation("cancel_session")
    def cancel_session(
        self,
        session_id: str,
        now: datetime,
        paid_amount_cents: int = 0,
        payment_id: Optional[str] = None,
        policy: Optional[CancellationPolicy] = None,
    ) -> CancellationResult:
        """
        Cancel a scheduled session and issue its refund.

        Raises:
            SessionNotFoundError: unknown session
            SessionNotCancellableError: session is not scheduled, or was
                cancelled concurrently
            ValidationException: a refund is due but no payment id was given
        """
        session = self._cancellable_session(session_id)
        policy = policy or self.settings.default_cancellation_policy()
        decision = compute_refund(paid_amount_cents, session.start_utc, now, policy)
        prometheus_metrics.record_refund_decision(decision.kind.value)

        refund_id = None
        if decision.amount_cents > 0:
            if not payment_id:
                raise ValidationException(
                    "A payment id is required to refund a paid session",
                    code="PAYMENT_ID_REQUIRED",
                    details={"session_id": session_id},
                )
            if decision.is_full_refund:
                refund_id = self.payment_gateway.refund_full(payment_id)
            else:
                refund_id = self.payment_gateway.refund_partial(payment_id, decision.amount_cents)
            self.logger.info(
                f"Refund issued: {refund_id} amount: {decision.amount_cents} for session {session_id}"
            )

        updated = self.store.update_session_status(
            session_id,
            SessionStatus.CANCELLED,
            expected_status=SessionStatus.SCHEDULED,
            refund_amount_cents=decision.amount_cents,
        )
        if updated is None:
            current = self.store.get_session(session_id)
            status = current.status.value if current else "missing"
            self.logger.error(
                f"Session {session_id} changed to {status} while cancelling; refund {refund_id} already issued"
            )
            raise SessionNotCancellableError(session_id, status)

        self.logger.info(f"Session {session_id} cancelled ({decision.kind.value} refund)")
        return CancellationResult(session=updated, decision=decision, refund_id=refund_id)
