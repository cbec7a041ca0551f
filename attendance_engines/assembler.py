"""
Record Assembler (``attendance_engines.assembler``).

Responsibility
--------------
Packages per-employee daily records into ``EmployeeRecord`` objects and
orders the batch.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.  Last step of the
reconciliation pipeline before the summary.

Invariants enforced
-------------------
* Days are sorted ascending by date.
* Employees are sorted by name, with the employee number breaking ties
  so that two people sharing a name never swap places between runs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from attendance_kernel.domain.records import DailyRecord, EmployeeRecord


def assemble_employee(
    employee_number: str,
    name: str,
    department: str,
    days: Sequence[DailyRecord],
) -> EmployeeRecord:
    return EmployeeRecord(
        employee_number=employee_number,
        name=name,
        department=department,
        days=tuple(sorted(days, key=lambda d: d.date)),
    )


def sort_employees(employees: Iterable[EmployeeRecord]) -> tuple[EmployeeRecord, ...]:
    return tuple(sorted(employees, key=lambda e: (e.name, e.employee_number)))
