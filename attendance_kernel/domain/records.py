"""
attendance_kernel.domain.records -- Immutable attendance domain objects.

Responsibility:
    Define the three value types that flow through reconciliation:
    ``Event`` (one terminal punch), ``DailyRecord`` (one employee-day) and
    ``EmployeeRecord`` (one employee's timeline).

Architecture position:
    Kernel -- pure domain layer.  ZERO I/O.  Imported by every other
    package; imports nothing outside the standard library.

Invariants enforced:
    - All objects are frozen.  Corrections produce new instances through
      ``dataclasses.replace`` and keep ``original_index`` as identity.
    - A relabeled event keeps the terminal's label in ``original_status``
      and carries the reason in ``corrections``.
    - ``EmployeeRecord.total_days`` is always ``len(days)``.

Audit relevance:
    ``DailyRecord.all_time_records`` retains every punch that contributed
    to (or was attached to) the day, so a reviewer can always see what the
    terminal originally reported next to what the engine decided.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

OFF_DAY_LABEL = "OFF-DAY"
MISSING_LABEL = "Missing"


class PunchStatus(str, Enum):
    """Direction of a terminal punch."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"

    @property
    def opposite(self) -> PunchStatus:
        if self is PunchStatus.CHECK_IN:
            return PunchStatus.CHECK_OUT
        return PunchStatus.CHECK_IN


class ShiftType(str, Enum):
    """Shift a day is worked (or credited) under."""

    MORNING = "morning"
    EVENING = "evening"
    NIGHT = "night"
    CANTEEN = "canteen"
    OFF_DAY = "off_day"


@dataclass(frozen=True)
class Event:
    """A single check-in or check-out punch from a biometric terminal."""

    timestamp: datetime
    employee_id: str  # Normalized grouping key
    employee_number: str
    name: str
    department: str
    status: PunchStatus
    shift_type: ShiftType
    working_week_start: date
    original_index: int  # Position in the raw input; universal tie-break
    original_status: PunchStatus | None = None  # What the terminal said
    mislabeled: bool = False
    processed: bool = False
    duplicate: bool = False
    cross_day: bool = False
    corrections: tuple[str, ...] = ()

    @property
    def work_date(self) -> date:
        return self.timestamp.date()

    @property
    def is_check_in(self) -> bool:
        return self.status is PunchStatus.CHECK_IN

    @property
    def is_active(self) -> bool:
        """Still open to per-day label corrections."""
        return not self.processed and not self.cross_day

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.timestamp, self.original_index)

    def relabel(self, status: PunchStatus, reason: str) -> Event:
        """Return a copy carrying a corrected label.

        A no-op relabel (same status) returns the event unchanged so that
        only real corrections are flagged.
        """
        if status is self.status:
            return self
        return replace(
            self,
            status=status,
            mislabeled=True,
            original_status=self.original_status or self.status,
            corrections=self.corrections + (reason,),
        )

    def suppress(self, reason: str) -> Event:
        """Return a copy excluded from pairing as a close duplicate."""
        return replace(
            self,
            processed=True,
            duplicate=True,
            corrections=self.corrections + (reason,),
        )


@dataclass(frozen=True)
class DailyRecord:
    """One employee's reconciled attendance for one calendar date."""

    date: date
    first_check_in: datetime | None
    last_check_out: datetime | None
    hours_worked: Decimal
    shift_type: ShiftType
    working_week_start: date
    notes: str = ""
    missing_check_in: bool = False
    missing_check_out: bool = False
    is_late: bool = False
    early_leave: bool = False
    excessive_overtime: bool = False
    penalty_minutes: int = 0
    approved: bool = False
    display_check_in: str = MISSING_LABEL
    display_check_out: str = MISSING_LABEL
    corrected_records: bool = False
    all_time_records: tuple[Event, ...] = ()
    cross_day: bool = False
    is_manual_entry: bool = False

    @property
    def is_off_day(self) -> bool:
        return self.first_check_in is None and self.last_check_out is None

    @property
    def is_complete(self) -> bool:
        return self.first_check_in is not None and self.last_check_out is not None


@dataclass(frozen=True)
class EmployeeRecord:
    """One employee's chronological attendance timeline."""

    employee_number: str
    name: str
    department: str
    days: tuple[DailyRecord, ...] = ()

    @property
    def total_days(self) -> int:
        return len(self.days)

    def day(self, work_date: date) -> DailyRecord | None:
        for record in self.days:
            if record.date == work_date:
                return record
        return None
