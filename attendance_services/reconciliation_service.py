"""
attendance_services.reconciliation_service -- Raw punches in, payroll-ready records out.

Responsibility:
    Runs one reconciliation batch: checks the input table, normalizes its
    rows, splits the punches by employee and drives each employee through
    the engine pipeline (night-worker labels, mislabel resolution,
    night-shift linking, day building, off-day synthesis, assembly).

Architecture position:
    Services -- orchestration over ingestion + engines.  Holds the rules
    table and the date/time parser; owns no persistent state.  Every
    computation is delegated to a pure engine.

Invariants enforced:
    - Employees are independent: results do not depend on the order in
      which employees appear in the input, nor on whether they are
      processed in parallel.
    - Within an employee, ``original_index`` breaks every timestamp tie.
    - Identical rows produce identical employee records.

Failure modes:
    - SummaryReportError / MissingColumnsError from the table shape check;
      raised before any row is read.
    - Bad rows are not failures: they come back in
      ``ReconciliationResult.parse_errors``.

Audit relevance:
    - Each batch has a ``batch_id`` bound into every log line it emits,
      together with the employee number while that employee is processed.
    - Every daily record keeps the punches it was built from.

Usage:
    service = AttendanceReconciliationService(rules=get_active_rules())
    result = service.reconcile_table(rows)
    for employee in result.employees:
        ...
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.assembler import assemble_employee, sort_employees
from attendance_engines.day_builder import build_daily_records
from attendance_engines.day_synthesizer import synthesize_off_days
from attendance_engines.mislabel import resolve_mislabels
from attendance_engines.night_shift import apply_night_worker_labels, link_night_shifts
from attendance_ingestion.datetime_parser import parse_date_time
from attendance_ingestion.domain.types import RawAttendanceRow, RowParseError
from attendance_ingestion.normalizer import (
    DateTimeParser,
    check_file_shape,
    normalize_rows,
    rows_from_table,
)
from attendance_kernel.domain.records import EmployeeRecord, Event
from attendance_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.reconciliation")


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of one batch."""

    employees: tuple[EmployeeRecord, ...]
    parse_errors: tuple[RowParseError, ...] = ()
    batch_id: UUID = field(default_factory=uuid4)

    @property
    def total_days(self) -> int:
        return sum(e.total_days for e in self.employees)


def group_by_employee(events: Sequence[Event]) -> dict[str, list[Event]]:
    """Split punches by employee, keeping input order within each group."""
    groups: dict[str, list[Event]] = defaultdict(list)
    for event in sorted(events, key=lambda e: e.original_index):
        groups[event.employee_id].append(event)
    return dict(groups)


def reconcile_employee(
    events: Sequence[Event],
    rules: AttendanceRules | None = None,
) -> EmployeeRecord:
    """Run the engine pipeline for one employee's punches."""
    rules = rules or DEFAULT_RULES
    labelled = apply_night_worker_labels(events, rules)
    resolved = resolve_mislabels(labelled, rules)
    linked = link_night_shifts(resolved, rules)
    worked = build_daily_records(linked.events, linked.links, rules)

    events_by_date: dict[date, list[Event]] = defaultdict(list)
    for event in linked.events:
        events_by_date[event.work_date].append(event)
    days = synthesize_off_days(worked, events_by_date)

    first = min(events, key=lambda e: e.original_index)
    return assemble_employee(first.employee_number, first.name, first.department, days)


class AttendanceReconciliationService:
    """Reconciles one batch of raw terminal punches.

    Contract:
        ``reconcile(rows)`` takes already-extracted ``RawAttendanceRow``
        values; ``reconcile_table(rows)`` takes spreadsheet-style dict rows
        keyed by the configured column names and checks the table shape
        first.  Both return a ``ReconciliationResult``.

    Guarantees:
        - Output employees are sorted by name, then employee number.
        - ``max_workers`` only changes how the work is scheduled, never
          the result.

    Non-goals:
        - Does not read or write files or databases.
        - Does not apply operator edits; see
          ``attendance_engines.record_edits``.
    """

    def __init__(
        self,
        rules: AttendanceRules | None = None,
        parser: DateTimeParser = parse_date_time,
        max_workers: int | None = None,
    ) -> None:
        self._rules = rules or DEFAULT_RULES
        self._parser = parser
        self._max_workers = max_workers

    @property
    def rules(self) -> AttendanceRules:
        return self._rules

    def reconcile_table(self, rows: Sequence[Mapping[str, Any]]) -> ReconciliationResult:
        """Check the table's shape, then reconcile its rows.

        Raises:
            SummaryReportError: The table is an exported summary report.
            MissingColumnsError: None of the required columns are present.
        """
        check_file_shape(rows, self._rules.columns)
        return self.reconcile(rows_from_table(rows, self._rules.columns))

    def reconcile(self, rows: Sequence[RawAttendanceRow]) -> ReconciliationResult:
        batch_id = uuid4()
        started = time.monotonic()

        with LogContext.bind(batch_id=str(batch_id)):
            logger.info(
                "reconciliation_started",
                extra={"row_count": len(rows), "rules_version": self._rules.version},
            )
            ingested = normalize_rows(rows, self._parser, self._rules)
            groups = group_by_employee(ingested.events)

            if self._max_workers and self._max_workers > 1 and len(groups) > 1:
                with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                    employees = list(
                        pool.map(
                            lambda item: self._reconcile_one(str(batch_id), *item),
                            groups.items(),
                        )
                    )
            else:
                employees = [
                    self._reconcile_one(str(batch_id), number, events)
                    for number, events in groups.items()
                ]

            result = ReconciliationResult(
                employees=sort_employees(employees),
                parse_errors=ingested.errors,
                batch_id=batch_id,
            )
            logger.info(
                "reconciliation_completed",
                extra={
                    "employee_count": len(result.employees),
                    "day_count": result.total_days,
                    "parse_error_count": len(result.parse_errors),
                    "duration_ms": round((time.monotonic() - started) * 1000, 3),
                },
            )
        return result

    def _reconcile_one(
        self,
        batch_id: str,
        employee_number: str,
        events: Sequence[Event],
    ) -> EmployeeRecord:
        # Context variables do not cross into pool threads; bind the batch here too.
        with LogContext.bind(batch_id=batch_id, employee_number=employee_number):
            record = reconcile_employee(events, self._rules)
            logger.debug(
                "employee_reconciled",
                extra={"event_count": len(events), "day_count": record.total_days},
            )
            return record
