"""
Row normalization (``attendance_ingestion.normalizer``).

Responsibility
--------------
Turn raw export rows into ``Event`` objects carrying provisional labels.

Architecture position
---------------------
**Ingestion layer**.  ZERO I/O.  Calls the shift classifier for the
provisional shift type; everything else about a punch is decided later by
the engines.

Invariants enforced
-------------------
* ``original_index`` is the row's position in the raw input and never
  changes afterwards.
* A bad row never aborts the batch; it becomes a ``RowParseError`` with
  a 1-indexed row number.
* A table that is not raw attendance data is rejected before any row is
  read.

Failure modes
-------------
* ``SummaryReportError`` -- the table is an exported summary report.
* ``MissingColumnsError`` -- none of the required columns are present.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any

from attendance_config.schema import DEFAULT_RULES, AttendanceRules, IngestionColumns
from attendance_engines.shift_classifier import classify_shift
from attendance_ingestion.datetime_parser import parse_date_time
from attendance_ingestion.domain.types import (
    IngestionResult,
    RawAttendanceRow,
    RowErrorCode,
    RowParseError,
)
from attendance_kernel.domain.records import Event, PunchStatus, ShiftType
from attendance_kernel.exceptions import MissingColumnsError, SummaryReportError
from attendance_kernel.logging_config import get_logger

logger = get_logger("ingestion.normalizer")

DateTimeParser = Callable[[Any], datetime | None]

_REQUIRED_FIELDS = ("date_time", "name", "employee_number", "status_label")


def check_file_shape(
    rows: Sequence[Mapping[str, Any]],
    columns: IngestionColumns | None = None,
) -> None:
    """Reject tables that are not raw attendance exports.

    Only the first row's keys are inspected; an empty table passes.
    """
    if not rows:
        return
    columns = columns or DEFAULT_RULES.columns
    present = tuple(rows[0].keys())

    if all(marker in present for marker in columns.summary_markers):
        raise SummaryReportError(columns.summary_markers, present)
    if not any(name in present for name in columns.required):
        raise MissingColumnsError(columns.required, present)


def _cell(row: Mapping[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def rows_from_table(
    rows: Iterable[Mapping[str, Any]],
    columns: IngestionColumns | None = None,
) -> list[RawAttendanceRow]:
    """Map spreadsheet-style dict rows onto ``RawAttendanceRow``."""
    columns = columns or DEFAULT_RULES.columns
    return [
        RawAttendanceRow(
            date_time=_cell(row, columns.date_time),
            name=_cell(row, columns.name),
            employee_number=_cell(row, columns.employee_number),
            status_label=_cell(row, columns.status),
            department=_cell(row, columns.department),
        )
        for row in rows
    ]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def status_from_label(label: str, columns: IngestionColumns | None = None) -> PunchStatus:
    keyword = (columns or DEFAULT_RULES.columns).check_in_keyword.lower()
    return PunchStatus.CHECK_IN if keyword in label.lower() else PunchStatus.CHECK_OUT


def normalize_row(
    row: RawAttendanceRow,
    timestamp: datetime,
    index: int,
    rules: AttendanceRules | None = None,
) -> Event:
    """Build the provisional event for one valid row."""
    rules = rules or DEFAULT_RULES
    status = status_from_label(row.status_label, rules.columns)
    shift_type = classify_shift(timestamp, rules)

    working_week_start = timestamp.date()
    if (
        shift_type == ShiftType.NIGHT
        and status is PunchStatus.CHECK_OUT
        and timestamp.hour < rules.resolution.noon_hour
    ):
        working_week_start -= timedelta(days=1)

    employee_number = str(row.employee_number).strip()
    return Event(
        timestamp=timestamp,
        employee_id=employee_number,
        employee_number=employee_number,
        name=str(row.name).strip(),
        department=(row.department or "").strip(),
        status=status,
        shift_type=shift_type,
        working_week_start=working_week_start,
        original_index=index,
        original_status=status,
    )


def normalize_rows(
    rows: Sequence[RawAttendanceRow],
    parser: DateTimeParser = parse_date_time,
    rules: AttendanceRules | None = None,
) -> IngestionResult:
    """Normalize raw rows into events, collecting per-row errors."""
    events: list[Event] = []
    errors: list[RowParseError] = []

    for index, row in enumerate(rows):
        row_number = index + 1
        missing = next((f for f in _REQUIRED_FIELDS if _is_blank(getattr(row, f))), None)
        if missing is not None:
            errors.append(
                RowParseError(
                    code=RowErrorCode.MISSING_REQUIRED_FIELD,
                    message=f"Row {row_number}: missing {missing}",
                    row_number=row_number,
                    field=missing,
                )
            )
            continue

        timestamp = parser(row.date_time)
        if timestamp is None:
            errors.append(
                RowParseError(
                    code=RowErrorCode.UNPARSEABLE_TIMESTAMP,
                    message=f"Row {row_number}: cannot parse date/time {row.date_time!r}",
                    row_number=row_number,
                    field="date_time",
                    details={"value": str(row.date_time)},
                )
            )
            continue

        events.append(normalize_row(row, timestamp, index, rules))

    logger.info(
        "rows_normalized",
        extra={"event_count": len(events), "error_count": len(errors)},
    )
    if errors:
        logger.warning(
            "rows_skipped",
            extra={"row_numbers": [e.row_number for e in errors][:50]},
        )
    return IngestionResult(events=tuple(events), errors=tuple(errors))
