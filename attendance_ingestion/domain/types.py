"""
attendance_ingestion.domain.types -- Pure frozen dataclasses for ingestion.

ZERO I/O. Imports only from attendance_kernel/domain/.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime
from enum import Enum
from typing import Any

from attendance_kernel.domain.records import Event


class RowErrorCode(str, Enum):
    """Why a raw row was skipped."""

    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    UNPARSEABLE_TIMESTAMP = "UNPARSEABLE_TIMESTAMP"


@dataclass(frozen=True)
class RawAttendanceRow:
    """One row of a terminal export, cells as the export gave them."""

    date_time: str | datetime | None
    name: str | None
    employee_number: str | None
    status_label: str | None
    department: str | None = None


@dataclass(frozen=True)
class RowParseError:
    """A skipped row.  Collected, never raised."""

    code: RowErrorCode
    message: str
    row_number: int  # 1-indexed position in the raw input
    field: str | None = None
    details: dict[str, Any] = dataclass_field(default_factory=dict)


@dataclass(frozen=True)
class IngestionResult:
    events: tuple[Event, ...]
    errors: tuple[RowParseError, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.events) + len(self.errors)
