"""Shared fixtures for repeatcal tests."""

from collections.abc import Callable
from typing import Any, Optional

import pytest

from repeatcal.id_factory import SequentialIdFactory


def pytest_configure(config: Any) -> None:
    """Register markers used across the suite."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line(
        "markers", "calendar_contract: Fixed calendar-arithmetic business rules"
    )


@pytest.fixture
def id_factory() -> SequentialIdFactory:
    """Deterministic ids: the first id of an expansion is the group id ("evt-1")."""
    return SequentialIdFactory(prefix="evt")


@pytest.fixture
def make_form() -> Callable[..., dict[str, Any]]:
    """Build an event form mapping in wire format.

    Keyword arguments override the top-level fields; ``repeat_type`` and
    ``end_date`` shape the nested rule.
    """

    def _make(
        repeat_type: str = "daily",
        end_date: Optional[str] = "2025-12-31",
        **overrides: Any,
    ) -> dict[str, Any]:
        repeat: dict[str, Any] = {"type": repeat_type, "interval": 1}
        if end_date is not None:
            repeat["endDate"] = end_date
        form: dict[str, Any] = {
            "title": "Daily standup",
            "date": "2025-01-01",
            "startTime": "09:00",
            "endTime": "09:30",
            "description": "Team sync",
            "location": "Room 4",
            "category": "work",
            "repeat": repeat,
            "notificationTime": 10,
        }
        form.update(overrides)
        return form

    return _make
