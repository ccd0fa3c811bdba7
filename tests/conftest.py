# tests/conftest.py
"""
Pytest configuration for the scheduling core.

The core never reads the wall clock, so tests pin ``now`` explicitly and
reset cached settings around every test.
"""

import os
from unittest.mock import Mock

import pytest

from scheduling_core.core.config import get_settings
from scheduling_core.domain.availability import AvailabilityWindow
from scheduling_core.repositories.interfaces import PaymentGateway
from scheduling_core.repositories.memory_store import InMemorySchedulingStore
from tests.helpers.factories import OWNER_ID


@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch: pytest.MonkeyPatch):
    for name in list(os.environ):
        if name.startswith("SCHEDULING_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def store() -> InMemorySchedulingStore:
    return InMemorySchedulingStore()


@pytest.fixture
def monday_window() -> AvailabilityWindow:
    """Recurring Monday 09:00-12:00, 30 minute sessions, no buffer."""
    return AvailabilityWindow.recurring(OWNER_ID, 1, "09:00", "12:00", session_duration_minutes=30)


@pytest.fixture
def payment_gateway() -> Mock:
    gateway = Mock(spec=PaymentGateway)
    gateway.refund_full.return_value = "re_full_1"
    gateway.refund_partial.return_value = "re_partial_1"
    return gateway
