# scheduling_core/core/config.py
"""
Configuration for the scheduling core.

Every business value here is a default supplied by the caller's
environment; the core functions take them as explicit parameters and
never read settings behind the caller's back.
"""

from datetime import timedelta
from functools import lru_cache
import logging
from typing import TYPE_CHECKING, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from ..services.refund_policy import CancellationPolicy

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Scheduling configuration.

    Values are loaded from ``SCHEDULING_``-prefixed environment variables,
    falling back to an optional ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Booking rules
    minimum_lead_time_hours: float = Field(
        default=2.0,
        description="Slots starting sooner than this after 'now' are not bookable",
    )
    default_session_duration_minutes: int = Field(
        default=60,
        description="Session length used when an owner has not configured their own",
    )
    default_buffer_minutes: int = Field(
        default=0,
        description="Gap between consecutive slots when an owner has not configured one",
    )
    allowed_session_durations: List[int] = Field(default_factory=lambda: [30, 60])
    allowed_buffer_minutes: List[int] = Field(default_factory=lambda: [0, 5, 10, 15])

    # Cancellation policy defaults (per-tenant values override these)
    cancellation_deadline_hours: float = Field(default=24.0)
    partial_refund_percent: Optional[float] = Field(
        default=None,
        description="Refund percentage applied after the deadline; None disables it",
    )

    # Recurrence
    max_recurrence_occurrences: int = Field(
        default=366,
        description="Expansions producing more dates than this are rejected",
    )
    default_recurrence_occurrences: int = Field(default=52)

    log_level: str = Field(default="INFO")

    @field_validator(
        "minimum_lead_time_hours",
        "default_buffer_minutes",
        "cancellation_deadline_hours",
    )
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator(
        "default_session_duration_minutes",
        "max_recurrence_occurrences",
        "default_recurrence_occurrences",
    )
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("partial_refund_percent")
    @classmethod
    def _percent_range(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0 <= v <= 100:
            raise ValueError("partial_refund_percent must be between 0 and 100")
        return v

    @property
    def minimum_lead_time(self) -> timedelta:
        return timedelta(hours=self.minimum_lead_time_hours)

    def default_cancellation_policy(self) -> "CancellationPolicy":
        """Policy applied to tenants that have not configured their own."""
        from ..services.refund_policy import CancellationPolicy

        return CancellationPolicy(
            cancellation_deadline_hours=self.cancellation_deadline_hours,
            partial_refund_percent=self.partial_refund_percent,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for scheduling settings.

    Settings are read and validated only once per process.
    """
    settings = Settings()
    logger.debug(
        "Scheduling settings loaded: lead_time=%sh deadline=%sh",
        settings.minimum_lead_time_hours,
        settings.cancellation_deadline_hours,
    )
    return settings
