"""Cancellation refund evaluation against a tenant's cancellation policy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.enums import RefundKind
from ..core.exceptions import InvalidCancellationPolicyError, ValidationException
from ..core.timezone_utils import ensure_utc

NO_PAYMENT_REASON = "No payment to refund"


def _format_hours(hours: float) -> str:
    return f"{hours:g}"


@dataclass(frozen=True)
class CancellationPolicy:
    cancellation_deadline_hours: float = 24
    partial_refund_percent: Optional[float] = None

    def __post_init__(self) -> None:
        if self.cancellation_deadline_hours < 0:
            raise InvalidCancellationPolicyError(
                "cancellationDeadlineHours must be >= 0",
                details={"cancellation_deadline_hours": self.cancellation_deadline_hours},
            )
        if self.partial_refund_percent is not None and not 0 <= self.partial_refund_percent <= 100:
            raise InvalidCancellationPolicyError(
                "partialRefundPercent must be between 0 and 100",
                details={"partial_refund_percent": self.partial_refund_percent},
            )

    @property
    def has_partial_tier(self) -> bool:
        return bool(self.partial_refund_percent and self.partial_refund_percent > 0)

    def to_payload(self) -> dict[str, object]:
        return {
            "cancellation_deadline_hours": self.cancellation_deadline_hours,
            "partial_refund_percent": self.partial_refund_percent,
        }


@dataclass(frozen=True)
class RefundDecision:
    amount_cents: int
    is_full_refund: bool
    reason: str

    @property
    def kind(self) -> RefundKind:
        if self.is_full_refund:
            return RefundKind.FULL
        if self.amount_cents > 0:
            return RefundKind.PARTIAL
        return RefundKind.NONE

    def to_payload(self) -> dict[str, object]:
        return {
            "amount_cents": int(self.amount_cents),
            "is_full_refund": self.is_full_refund,
            "reason": self.reason,
            "kind": self.kind.value,
        }


def hours_until(session_start_utc: datetime, now: datetime) -> float:
    """Hours from ``now`` to the session start; negative once it has started."""
    return (ensure_utc(session_start_utc) - ensure_utc(now)).total_seconds() / 3600


def is_before_deadline(
    session_start_utc: datetime, now: datetime, policy: CancellationPolicy
) -> bool:
    """True while a cancellation still earns a full refund."""
    return hours_until(session_start_utc, now) >= policy.cancellation_deadline_hours


def percent_of(amount_cents: int, percent: float) -> int:
    """``amount * percent / 100`` in whole cents, rounding half up."""
    exact = Decimal(amount_cents) * Decimal(str(percent)) / Decimal(100)
    return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_refund(
    paid_amount_cents: int,
    session_start_utc: datetime,
    now: datetime,
    policy: CancellationPolicy,
) -> RefundDecision:
    """
    Decide how much of a payment to refund on cancellation.

    Pure: no gateway calls. The caller issues the refund and should treat
    this decision as advisory until the gateway confirms it.
    """
    if paid_amount_cents < 0:
        raise ValidationException(
            "Paid amount cannot be negative",
            code="INVALID_AMOUNT",
            details={"paid_amount_cents": paid_amount_cents},
        )
    if paid_amount_cents == 0:
        return RefundDecision(amount_cents=0, is_full_refund=True, reason=NO_PAYMENT_REASON)

    deadline = _format_hours(policy.cancellation_deadline_hours)
    if is_before_deadline(session_start_utc, now, policy):
        return RefundDecision(
            amount_cents=paid_amount_cents,
            is_full_refund=True,
            reason=f"Cancelled at least {deadline} hours before start: full refund",
        )

    if policy.has_partial_tier:
        percent = policy.partial_refund_percent or 0
        amount = percent_of(paid_amount_cents, percent)
        return RefundDecision(
            amount_cents=amount,
            is_full_refund=amount == paid_amount_cents,
            reason=(
                f"Late cancellation (less than {deadline} hours before start): "
                f"{_format_hours(percent)}% refund per cancellation policy"
            ),
        )

    return RefundDecision(
        amount_cents=0,
        is_full_refund=False,
        reason=(
            f"Cancelled less than {deadline} hours before start: "
            "no refund under the cancellation policy"
        ),
    )
