"""
Pytest fixtures for the attendance reconciliation test suite.

Provides:
- Logging isolation between tests
- Punch and raw-row factories
"""

import itertools
from datetime import datetime

import pytest

from attendance_engines.shift_classifier import classify_shift
from attendance_ingestion.domain.types import RawAttendanceRow
from attendance_kernel.domain.records import Event, PunchStatus
from attendance_kernel.logging_config import LogContext, reset_logging

_STATUS = {"in": PunchStatus.CHECK_IN, "out": PunchStatus.CHECK_OUT}


@pytest.fixture(autouse=True)
def _isolated_logging():
    """Every test starts with an unconfigured, propagating logger tree."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def make_event():
    """Factory for punches: ``make_event("2024-03-04 08:00", "in")``.

    ``original_index`` increments per call unless given.
    """
    counter = itertools.count()

    def _make(
        when: str,
        status: str = "in",
        *,
        employee: str = "1001",
        name: str = "Alice",
        index: int | None = None,
        **overrides,
    ) -> Event:
        timestamp = datetime.fromisoformat(when)
        fields = dict(
            timestamp=timestamp,
            employee_id=employee,
            employee_number=employee,
            name=name,
            department="Production",
            status=_STATUS[status],
            shift_type=classify_shift(timestamp),
            working_week_start=timestamp.date(),
            original_index=next(counter) if index is None else index,
            original_status=_STATUS[status],
        )
        fields.update(overrides)
        return Event(**fields)

    return _make


@pytest.fixture
def raw_row():
    """Factory for raw export rows: ``raw_row("2024-03-04 08:00:00", "in")``."""

    def _make(
        when: str,
        status: str = "in",
        *,
        number: str = "1001",
        name: str = "Alice",
        department: str = "Production",
    ) -> RawAttendanceRow:
        return RawAttendanceRow(
            date_time=when,
            name=name,
            employee_number=number,
            status_label="C/In" if status == "in" else "C/Out",
            department=department,
        )

    return _make
