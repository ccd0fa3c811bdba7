# scheduling_core/core/exceptions.py
"""
Domain-specific exceptions for the scheduling core.

These exceptions provide clear, business-focused error messages that the
calling layer can translate into user-facing responses. Recoverable
situations (an unavailable slot, a conflict check returning True) are
ordinary return values and never raise.
"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for the calling layer."""
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "retryable": self.retryable,
        }


class ValidationException(DomainException):
    """Raised when input data is malformed. Indicates an upstream data bug."""


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""


# Specific scheduling exceptions


class InvalidTimezoneError(ValidationException):
    """Raised for an unrecognized IANA timezone identifier."""

    def __init__(self, timezone_id: Any):
        super().__init__(
            message=f"Unknown timezone: {timezone_id!r}",
            code="INVALID_TIMEZONE",
            details={"timezone": str(timezone_id)},
        )


class InvalidTimeError(ValidationException):
    """Raised for a malformed wall-clock time or an inverted time range."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_TIME", details=details)


class InvalidRecurrenceError(ValidationException):
    """Raised for a recurrence rule that is malformed or cannot terminate."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_RECURRENCE", details=details)


class InvalidCancellationPolicyError(ValidationException):
    """Raised when a tenant's cancellation policy is misconfigured."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_CANCELLATION_POLICY", details=details)


class SlotNoLongerAvailableError(ConflictException):
    """Raised when the requested interval conflicts with an active session.

    The caller may retry with a different slot, never with the same one.
    """

    retryable = True

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time is no longer available, please pick another",
            code="SLOT_NO_LONGER_AVAILABLE",
            details=details or {},
        )


class PastBookingError(BusinessRuleException):
    """Raised when a booking starts before now plus the minimum lead time."""

    def __init__(self, required_hours: float, provided_hours: float):
        super().__init__(
            message="This time has already passed or is too soon to book",
            code="PAST_BOOKING",
            details={
                "required_hours": required_hours,
                "provided_hours": round(provided_hours, 2),
            },
        )


class OutsideAvailabilityError(BusinessRuleException):
    """Raised when a requested interval is not inside any availability window."""

    def __init__(self, owner_id: str, local_range: str, local_date: str):
        super().__init__(
            message=f"Requested time {local_range} on {local_date} is outside the owner's availability",
            code="OUTSIDE_AVAILABILITY",
            details={"owner_id": owner_id, "range": local_range, "date": local_date},
        )


class SessionNotFoundError(NotFoundException):
    """Raised when a session id does not exist in the store."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session {session_id} not found",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class SessionNotCancellableError(BusinessRuleException):
    """Raised when cancelling a session that is not scheduled."""

    def __init__(self, session_id: str, status: str):
        super().__init__(
            message=f"Session cannot be cancelled (status: {status})",
            code="SESSION_NOT_CANCELLABLE",
            details={"session_id": session_id, "status": status},
        )
