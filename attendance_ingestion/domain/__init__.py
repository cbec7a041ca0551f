"""
attendance_ingestion.domain -- Pure types for ingestion.

ZERO I/O. Imports only from attendance_kernel/domain/.
"""

from attendance_ingestion.domain.types import (
    IngestionResult,
    RawAttendanceRow,
    RowErrorCode,
    RowParseError,
)

__all__ = [
    "IngestionResult",
    "RawAttendanceRow",
    "RowErrorCode",
    "RowParseError",
]
