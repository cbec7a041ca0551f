"""
Day Synthesizer (``attendance_engines.day_synthesizer``).

Responsibility
--------------
Guarantee a gapless per-employee timeline: every calendar date between an
employee's first and last record gets a record, with OFF-DAY records
filling the gaps.  Also builds the other non-worked records (leave days).

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.

Invariants enforced
-------------------
* OFF-DAY records have no punches, zero hours, ``off_day`` shift type and
  both missing flags set.
* Existing records are never replaced.
* Punches that fell on a synthesized date (e.g. a suppressed duplicate or
  the next-day half of a night shift) are attached for audit.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, timedelta
from decimal import Decimal

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.payable_hours import ZERO_HOURS, round_hours
from attendance_engines.tracer import traced_engine
from attendance_kernel.domain.records import OFF_DAY_LABEL, DailyRecord, Event, ShiftType


def create_off_day_record(
    work_date: date,
    events: Sequence[Event] = (),
) -> DailyRecord:
    return DailyRecord(
        date=work_date,
        first_check_in=None,
        last_check_out=None,
        hours_worked=ZERO_HOURS,
        shift_type=ShiftType.OFF_DAY,
        working_week_start=work_date,
        notes=OFF_DAY_LABEL,
        missing_check_in=True,
        missing_check_out=True,
        display_check_in=OFF_DAY_LABEL,
        display_check_out=OFF_DAY_LABEL,
        all_time_records=tuple(sorted(events, key=lambda e: e.sort_key)),
    )


def create_leave_record(
    work_date: date,
    leave_type: str,
    rules: AttendanceRules | None = None,
) -> DailyRecord:
    """A credited leave day: no punches, full-day hours, leave type as label."""
    hours: Decimal = (rules or DEFAULT_RULES).payable.full_day_hours
    return DailyRecord(
        date=work_date,
        first_check_in=None,
        last_check_out=None,
        hours_worked=round_hours(hours),
        shift_type=ShiftType.OFF_DAY,
        working_week_start=work_date,
        notes=leave_type,
        missing_check_in=True,
        missing_check_out=True,
        display_check_in=leave_type,
        display_check_out=leave_type,
        is_manual_entry=True,
    )


@traced_engine("day_synthesizer", "1.0", fingerprint_fields=("records",))
def synthesize_off_days(
    records: Sequence[DailyRecord],
    events_by_date: Mapping[date, Sequence[Event]] | None = None,
) -> tuple[DailyRecord, ...]:
    """Fill calendar gaps with OFF-DAY records; result is ordered by date."""
    if not records:
        return ()
    events_by_date = events_by_date or {}
    by_date = {r.date: r for r in records}

    first, last = min(by_date), max(by_date)
    filled: list[DailyRecord] = []
    current = first
    while current <= last:
        existing = by_date.get(current)
        if existing is None:
            existing = create_off_day_record(current, events_by_date.get(current, ()))
        filled.append(existing)
        current += timedelta(days=1)
    return tuple(filled)
