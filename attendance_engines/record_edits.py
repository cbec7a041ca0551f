"""
Record Edits (``attendance_engines.record_edits``).

Responsibility
--------------
Operator-side changes to reconciled records: penalties, corrected
punch times, approvals, manual day entries and clearing approved days
after they have been saved elsewhere.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.  Every hours
recalculation goes through ``calculate_payable_hours`` with
``is_manual_edit=True``, the same contract the batch pipeline uses.

Invariants enforced
-------------------
* Records are immutable; every operation returns new objects.
* Clearing both punches turns the day into an OFF-DAY with zero hours
  and no penalty.
* A manual entry replaces the employee's record for that date, or adds
  one; unknown employees are appended, never merged by guesswork beyond
  number-then-name matching.

Failure modes
-------------
* ``ManualEntryError`` -- entry has no employee identity, or a shift
  entry has neither a shift type nor a check-in to classify from.
* ``ValueError`` -- negative penalty minutes.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.payable_hours import calculate_payable_hours, penalty_hours
from attendance_engines.shift_classifier import (
    classify_shift,
    is_early_leave,
    is_excessive_overtime,
    is_late_check_in,
)
from attendance_engines.day_synthesizer import create_leave_record, create_off_day_record
from attendance_kernel.domain.records import (
    OFF_DAY_LABEL,
    DailyRecord,
    EmployeeRecord,
    ShiftType,
)
from attendance_kernel.exceptions import ManualEntryError
from attendance_kernel.logging_config import get_logger

logger = get_logger("engines.record_edits")

MANUAL_ENTRY_NOTE = "Manual entry"
DEFAULT_LEAVE_TYPE = "annual-leave"


class EntryType(str, Enum):
    SHIFT = "shift"
    OFF_DAY = "off-day"
    LEAVE = "leave"


@dataclass(frozen=True)
class ManualEntry:
    """An operator-entered day for one employee."""

    work_date: date
    employee_number: str = ""
    name: str = ""
    department: str = ""
    entry_type: EntryType = EntryType.SHIFT
    shift_type: ShiftType | None = None
    check_in: datetime | None = None
    check_out: datetime | None = None
    leave_type: str | None = None


@dataclass(frozen=True)
class ManualEntryResult:
    employees: tuple[EmployeeRecord, ...]
    employee_index: int
    is_new_employee: bool


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def standard_display_times(
    shift_type: ShiftType,
    rules: AttendanceRules | None = None,
) -> tuple[str, str]:
    """Scheduled start and end of a shift as display strings."""
    rules = rules or DEFAULT_RULES
    if shift_type == ShiftType.OFF_DAY:
        return OFF_DAY_LABEL, OFF_DAY_LABEL
    if shift_type == ShiftType.CANTEEN:
        cohort = rules.canteen_cohorts[0]
        return cohort.start.strftime("%H:%M"), cohort.end.strftime("%H:%M")
    rule = rules.shift(shift_type)
    if rule is None:
        return "", ""
    return rule.start.strftime("%H:%M"), rule.end.strftime("%H:%M")


def _scheduled_punches(
    work_date: date,
    shift_type: ShiftType,
    rules: AttendanceRules,
) -> tuple[datetime, datetime]:
    if shift_type == ShiftType.CANTEEN:
        start, end = rules.canteen_cohorts[0].start, rules.canteen_cohorts[0].end
    else:
        rule = rules.shift(shift_type)
        start, end = rule.start, rule.end
    check_in = datetime.combine(work_date, start)
    check_out = datetime.combine(work_date, end)
    if check_out <= check_in:
        check_out += timedelta(days=1)
    return check_in, check_out


# ---------------------------------------------------------------------------
# Single-day edits
# ---------------------------------------------------------------------------


def apply_penalty_to_day(
    day: DailyRecord,
    penalty_minutes: int,
    rules: AttendanceRules | None = None,
) -> DailyRecord:
    """Record a penalty and recalculate hours from the day's punches.

    A day missing either punch keeps its hours; only the penalty is stored.
    """
    penalty_hours(penalty_minutes)
    if not day.is_complete:
        logger.warning(
            "penalty_not_recalculated",
            extra={"work_date": day.date, "penalty_minutes": penalty_minutes},
        )
        return replace(day, penalty_minutes=penalty_minutes)

    shift_type = day.shift_type
    if shift_type == ShiftType.OFF_DAY:
        shift_type = classify_shift(day.first_check_in, rules)
    hours = calculate_payable_hours(
        day.first_check_in,
        day.last_check_out,
        shift_type,
        penalty_minutes=penalty_minutes,
        is_manual_edit=True,
        rules=rules,
    )
    return replace(day, penalty_minutes=penalty_minutes, shift_type=shift_type, hours_worked=hours)


def update_time_records(
    day: DailyRecord,
    check_in: datetime | None,
    check_out: datetime | None,
    rules: AttendanceRules | None = None,
) -> DailyRecord:
    """Apply operator-corrected punch times to a day.

    Clearing both punches makes the day an OFF-DAY.  Otherwise the given
    punches replace the existing ones, a former OFF-DAY gets a shift type
    classified from its new check-in, and hours are recalculated as a
    manual edit.
    """
    rules = rules or DEFAULT_RULES
    if check_in is None and check_out is None:
        off = create_off_day_record(day.date)
        return replace(
            off,
            approved=day.approved,
            all_time_records=day.all_time_records,
            corrected_records=day.corrected_records,
            is_manual_entry=True,
        )

    first_in = check_in if check_in is not None else day.first_check_in
    last_out = check_out if check_out is not None else day.last_check_out

    shift_type = day.shift_type
    notes = day.notes
    if shift_type == ShiftType.OFF_DAY and first_in is not None:
        shift_type = classify_shift(first_in, rules)
        notes = MANUAL_ENTRY_NOTE

    hours = day.hours_worked
    if first_in is not None and last_out is not None:
        hours = calculate_payable_hours(
            first_in,
            last_out,
            shift_type,
            penalty_minutes=day.penalty_minutes,
            is_manual_edit=True,
            rules=rules,
        )

    display_in, display_out = standard_display_times(shift_type, rules)
    return replace(
        day,
        first_check_in=first_in,
        last_check_out=last_out,
        shift_type=shift_type,
        notes=notes,
        hours_worked=hours,
        missing_check_in=first_in is None,
        missing_check_out=last_out is None,
        is_late=first_in is not None and is_late_check_in(first_in, shift_type, rules),
        early_leave=last_out is not None
        and is_early_leave(last_out, shift_type, first_in, rules),
        excessive_overtime=last_out is not None
        and is_excessive_overtime(last_out, shift_type, rules),
        display_check_in=display_in,
        display_check_out=display_out,
        is_manual_entry=True,
    )


def set_day_approval(day: DailyRecord, approved: bool) -> DailyRecord:
    return replace(day, approved=approved)


def approve_all_days(days: Iterable[DailyRecord]) -> tuple[DailyRecord, ...]:
    return tuple(replace(d, approved=True) for d in days)


# ---------------------------------------------------------------------------
# Manual entries
# ---------------------------------------------------------------------------


def build_manual_day(
    entry: ManualEntry,
    rules: AttendanceRules | None = None,
) -> DailyRecord:
    """Build the record an operator-entered day stands for."""
    rules = rules or DEFAULT_RULES

    if entry.entry_type == EntryType.OFF_DAY or entry.shift_type == ShiftType.OFF_DAY:
        return replace(create_off_day_record(entry.work_date), is_manual_entry=True)
    if entry.entry_type == EntryType.LEAVE:
        return create_leave_record(entry.work_date, entry.leave_type or DEFAULT_LEAVE_TYPE, rules)

    shift_type = entry.shift_type
    if shift_type is None:
        if entry.check_in is None:
            raise ManualEntryError(
                "shift entry needs a shift type or a check-in time",
                employee_number=entry.employee_number or None,
            )
        shift_type = classify_shift(entry.check_in, rules)

    scheduled_in, scheduled_out = _scheduled_punches(entry.work_date, shift_type, rules)
    check_in = entry.check_in or scheduled_in
    check_out = entry.check_out or scheduled_out
    hours = calculate_payable_hours(check_in, check_out, shift_type, is_manual_edit=True, rules=rules)
    display_in, display_out = standard_display_times(shift_type, rules)

    return DailyRecord(
        date=entry.work_date,
        first_check_in=check_in,
        last_check_out=check_out,
        hours_worked=hours,
        shift_type=shift_type,
        working_week_start=entry.work_date,
        notes=MANUAL_ENTRY_NOTE,
        display_check_in=display_in,
        display_check_out=display_out,
        cross_day=check_out.date() != check_in.date(),
        is_manual_entry=True,
    )


def _find_employee(employees: Sequence[EmployeeRecord], entry: ManualEntry) -> int:
    number = entry.employee_number.strip()
    if number:
        for i, employee in enumerate(employees):
            if employee.employee_number.strip() == number:
                return i
    name = entry.name.strip().lower()
    if name:
        for i, employee in enumerate(employees):
            if employee.name.strip().lower() == name:
                return i
    return -1


def add_manual_entry(
    entry: ManualEntry,
    employees: Sequence[EmployeeRecord],
    rules: AttendanceRules | None = None,
) -> ManualEntryResult:
    """Add (or replace) an operator-entered day in the employee records.

    Raises:
        ManualEntryError: If the entry names no employee, or a shift entry
            cannot be given a shift type.
    """
    if not entry.employee_number.strip() and not entry.name.strip():
        raise ManualEntryError("entry names no employee")

    new_day = build_manual_day(entry, rules)
    updated = list(employees)
    index = _find_employee(updated, entry)
    is_new = index < 0

    if is_new:
        updated.append(
            EmployeeRecord(
                employee_number=entry.employee_number.strip(),
                name=entry.name.strip(),
                department=entry.department,
                days=(new_day,),
            )
        )
        index = len(updated) - 1
    else:
        employee = updated[index]
        days = [d for d in employee.days if d.date != entry.work_date]
        days.append(new_day)
        updated[index] = replace(employee, days=tuple(sorted(days, key=lambda d: d.date)))

    logger.info(
        "manual_entry_added",
        extra={
            "employee_number": updated[index].employee_number,
            "work_date": entry.work_date,
            "entry_type": entry.entry_type,
            "is_new_employee": is_new,
        },
    )
    return ManualEntryResult(employees=tuple(updated), employee_index=index, is_new_employee=is_new)


def remove_approved_days(employees: Iterable[EmployeeRecord]) -> tuple[EmployeeRecord, ...]:
    """Drop days already approved and saved; drop employees left empty."""
    remaining = []
    for employee in employees:
        days = tuple(d for d in employee.days if not d.approved)
        if days:
            remaining.append(replace(employee, days=days))
    return tuple(remaining)
