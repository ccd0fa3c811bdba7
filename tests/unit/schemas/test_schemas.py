# tests/unit/schemas/test_schemas.py
from datetime import date, time

from pydantic import ValidationError
import pytest

from scheduling_core.core.enums import MonthlyMode, RecurrenceFrequency
from scheduling_core.domain.availability import Slot
from scheduling_core.schemas.availability import AvailabilityWindowCreate, SlotResponse
from scheduling_core.schemas.booking import (
    CancellationPolicyConfig,
    CancellationPreviewResponse,
    RecurrenceEnd,
    RecurrenceRuleCreate,
)
from scheduling_core.services.cancellation_service import CancellationPreview
from scheduling_core.services.refund_policy import CancellationPolicy, compute_refund
from tests.helpers.factories import OWNER_ID, make_session, utc


class TestAvailabilityWindowCreate:
    def test_recurring_to_domain_uses_defaults(self):
        payload = AvailabilityWindowCreate(is_recurring=True, day_of_week=1, start_time="09:00", end_time="12:00")
        window = payload.to_domain(OWNER_ID)

        assert window.day_of_week == 1
        assert window.start_time == time(9, 0)
        assert window.session_duration_minutes == 60
        assert window.buffer_minutes == 0

    def test_one_off_with_custom_duration(self):
        payload = AvailabilityWindowCreate(
            date=date(2024, 6, 12),
            start_time="14:00",
            end_time="16:00",
            session_duration_minutes=30,
            buffer_minutes=10,
        )
        window = payload.to_domain(OWNER_ID)
        assert not window.is_recurring
        assert window.date == date(2024, 6, 12)
        assert (window.session_duration_minutes, window.buffer_minutes) == (30, 10)

    @pytest.mark.parametrize(
        "payload",
        [
            {"is_recurring": True, "start_time": "09:00", "end_time": "10:00"},
            {"start_time": "09:00", "end_time": "10:00"},
            {"date": "2024-06-12", "start_time": "10:00", "end_time": "09:00"},
            {"date": "2024-06-12", "start_time": "25:00", "end_time": "26:00"},
            {"date": "2024-06-12", "start_time": "9:00", "end_time": "10:00"},
            {"date": "2024-06-12", "start_time": "09:00", "end_time": "10:00", "session_duration_minutes": 45},
            {"date": "2024-06-12", "start_time": "09:00", "end_time": "10:00", "buffer_minutes": 7},
            {"date": "2024-06-12", "start_time": "09:00", "end_time": "10:00", "timezone": "UTC"},
        ],
    )
    def test_rejects_invalid_payloads(self, payload):
        with pytest.raises(ValidationError):
            AvailabilityWindowCreate(**payload)

    def test_allowed_durations_come_from_settings(self, monkeypatch):
        monkeypatch.setenv("SCHEDULING_ALLOWED_SESSION_DURATIONS", "[45, 90]")
        payload = AvailabilityWindowCreate(
            date=date(2024, 6, 12), start_time="09:00", end_time="12:00", session_duration_minutes=45
        )
        assert payload.session_duration_minutes == 45


class TestRecurrenceRuleCreate:
    def test_weekly_rule(self):
        rule = RecurrenceRuleCreate(
            frequency="weekly", days_of_week=[5, 1, 3], end={"after_occurrences": 6}
        ).to_domain()
        assert rule.frequency is RecurrenceFrequency.WEEKLY
        assert rule.by_weekday == (1, 3, 5)
        assert rule.count == 6

    def test_missing_end_uses_default_count(self):
        rule = RecurrenceRuleCreate(frequency="monthly", monthly_mode="day_of_week").to_domain()
        assert rule.count == 52
        assert rule.monthly_mode is MonthlyMode.DAY_OF_WEEK

    def test_weekdays_ignored_for_non_weekly_rules(self):
        rule = RecurrenceRuleCreate(
            frequency="daily", days_of_week=[1], end={"on_date": "2024-02-01"}
        ).to_domain()
        assert rule.by_weekday == ()
        assert rule.until == date(2024, 2, 1)

    @pytest.mark.parametrize(
        "payload",
        [
            {"frequency": "weekly", "days_of_week": [7]},
            {"frequency": "weekly", "interval": 0},
            {"frequency": "hourly"},
        ],
    )
    def test_invalid_rules(self, payload):
        with pytest.raises(ValidationError):
            RecurrenceRuleCreate(**payload)

    @pytest.mark.parametrize("payload", [{}, {"after_occurrences": 3, "on_date": "2024-02-01"}])
    def test_end_needs_exactly_one_termination(self, payload):
        with pytest.raises(ValidationError):
            RecurrenceEnd(**payload)


def test_cancellation_policy_config():
    assert CancellationPolicyConfig(partial_refund_percent=50).to_domain() == CancellationPolicy(
        cancellation_deadline_hours=24, partial_refund_percent=50
    )
    with pytest.raises(ValidationError):
        CancellationPolicyConfig(partial_refund_percent=150)


def test_cancellation_preview_response():
    session = make_session(utc(2024, 6, 10, 9, 0))
    policy = CancellationPolicy(partial_refund_percent=50)
    now = utc(2024, 6, 10, 7, 0)
    preview = CancellationPreview(
        session=session,
        paid_amount_cents=10000,
        decision=compute_refund(10000, session.start_utc, now, policy),
        policy=policy,
        is_before_deadline=False,
    )

    response = CancellationPreviewResponse.from_preview(preview)

    assert response.is_paid
    assert response.refund_amount_cents == 5000
    assert response.refund_kind == "partial"
    assert response.session_id == "sess_1"


def test_slot_response_from_slot():
    slot = Slot(utc(2024, 6, 10, 9, 0), utc(2024, 6, 10, 9, 30), 30, available=False)
    response = SlotResponse.from_slot(slot)
    assert response.model_dump() == {
        "start_utc": utc(2024, 6, 10, 9, 0),
        "end_utc": utc(2024, 6, 10, 9, 30),
        "duration_minutes": 30,
        "available": False,
    }
