"""
Hours Summary (``attendance_engines.summary``).

Responsibility
--------------
Roll one employee's daily records up into the payroll figures an export
needs: day counts, regular days, overtime, double-time and Fridays
worked.  Also provides the batch-level counters shown after a
reconciliation run.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.  All quantities are
``Decimal``; day equivalents divide by the configured full-day hours.

Invariants enforced
-------------------
* ``working_days + off_days == total_days``.  Off days are ``off_day``
  records with zero hours; credited leave counts as a working day.
* ``total_payable_hours == total_hours + double_time_hours``.
* Overtime is the per-day excess above the full-day hours, summed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.payable_hours import ZERO_HOURS, round_hours
from attendance_kernel.domain.records import DailyRecord, EmployeeRecord, ShiftType

FRIDAY = 4


@dataclass(frozen=True)
class HoursSummary:
    """Payroll roll-up for one employee."""

    employee_number: str
    name: str
    department: str
    total_days: int
    working_days: int
    off_days: int
    total_hours: Decimal
    regular_days: Decimal
    double_time_hours: Decimal
    double_time_days: Decimal
    fridays_worked: int
    overtime_hours: Decimal
    overtime_days: Decimal
    total_payable_hours: Decimal
    approved_days: int


@dataclass(frozen=True)
class BatchSummary:
    employee_count: int
    day_count: int
    total_hours: Decimal
    partial_record_count: int
    corrected_record_count: int
    approved_day_count: int


def is_off_day(day: DailyRecord) -> bool:
    return day.shift_type == ShiftType.OFF_DAY and day.hours_worked == ZERO_HOURS


def summarize_employee_hours(
    employee: EmployeeRecord,
    double_time_dates: Iterable[date] = (),
    rules: AttendanceRules | None = None,
) -> HoursSummary:
    """Summarize an employee's days.

    Args:
        employee: The employee's reconciled records.
        double_time_dates: Dates paid at double time (public holidays).
        rules: Rules table supplying the full-day hours.
    """
    full_day = (rules or DEFAULT_RULES).payable.full_day_hours
    doubles = set(double_time_dates)

    total_hours = sum((d.hours_worked for d in employee.days), ZERO_HOURS)
    double_hours = sum(
        (d.hours_worked for d in employee.days if d.date in doubles), ZERO_HOURS
    )
    overtime = sum(
        (d.hours_worked - full_day for d in employee.days if d.hours_worked > full_day),
        ZERO_HOURS,
    )
    off_days = sum(1 for d in employee.days if is_off_day(d))
    fridays = sum(
        1 for d in employee.days if d.date.weekday() == FRIDAY and d.hours_worked > 0
    )

    return HoursSummary(
        employee_number=employee.employee_number,
        name=employee.name,
        department=employee.department,
        total_days=employee.total_days,
        working_days=employee.total_days - off_days,
        off_days=off_days,
        total_hours=round_hours(total_hours),
        regular_days=round_hours(total_hours / full_day),
        double_time_hours=round_hours(double_hours),
        double_time_days=round_hours(double_hours / full_day),
        fridays_worked=fridays,
        overtime_hours=round_hours(overtime),
        overtime_days=round_hours(overtime / full_day),
        total_payable_hours=round_hours(total_hours + double_hours),
        approved_days=sum(1 for d in employee.days if d.approved),
    )


def calculate_stats(employees: Iterable[EmployeeRecord]) -> tuple[int, int]:
    """Return ``(employee_count, day_count)``."""
    employees = tuple(employees)
    return len(employees), sum(e.total_days for e in employees)


def summarize_batch(employees: Iterable[EmployeeRecord]) -> BatchSummary:
    employees = tuple(employees)
    days = [d for e in employees for d in e.days]
    employee_count, day_count = calculate_stats(employees)
    return BatchSummary(
        employee_count=employee_count,
        day_count=day_count,
        total_hours=round_hours(sum((d.hours_worked for d in days), ZERO_HOURS)),
        partial_record_count=sum(
            1
            for d in days
            if not d.is_off_day and (d.missing_check_in or d.missing_check_out)
        ),
        corrected_record_count=sum(1 for d in days if d.corrected_records),
        approved_day_count=sum(1 for d in days if d.approved),
    )
