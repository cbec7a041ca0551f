"""
Typed Exception Hierarchy for the Attendance Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll inputs come from many hands: terminal exports, HR spreadsheets and
operator edits. Callers must be able to tell "this file is the wrong kind of
report" apart from "this manual entry is incomplete" without parsing
message strings.

Every exception in this module:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes

Example:
    try:
        result = service.reconcile_table(rows)
    except SummaryReportError as e:
        show_banner(e.code, markers=e.markers)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    AttendanceKernelError (base)
    |
    +-- IngestionError
    |   +-- FileShapeError
    |       +-- SummaryReportError
    |       +-- MissingColumnsError
    |
    +-- ConfigurationError
    |   +-- InvalidRulesError
    |
    +-- RecordEditError
        +-- ManualEntryError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Ingestion       | FILE_SHAPE_ERROR            | Input table is not raw attendance data
                | SUMMARY_REPORT              | Input is an already-summarized report
                | MISSING_COLUMNS             | None of the required columns present
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_RULES               | Rules file fails validation
----------------|-----------------------------|-----------------------------------------
Record edit     | MANUAL_ENTRY_INVALID        | Manual entry lacks identity or times

Row-level problems (a missing field, an unparseable timestamp) are NOT
exceptions. They are collected as ``RowParseError`` values by the ingestion
layer and the batch continues. Programming errors (a negative
penalty) raise ``ValueError``.
"""


class AttendanceKernelError(Exception):
    """
    Base exception for all attendance kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ATTENDANCE_KERNEL_ERROR"


# Ingestion-related exceptions


class IngestionError(AttendanceKernelError):
    """Base exception for ingestion errors."""

    code: str = "INGESTION_ERROR"


class FileShapeError(IngestionError):
    """
    The input table is not raw attendance data.

    Fatal for the whole ingestion call; raised before any row is read.
    """

    code: str = "FILE_SHAPE_ERROR"

    def __init__(self, message: str, columns: tuple[str, ...] = ()):
        self.columns = columns
        super().__init__(message)


class SummaryReportError(FileShapeError):
    """The input is a previously exported summary report."""

    code: str = "SUMMARY_REPORT"

    def __init__(self, markers: tuple[str, ...], columns: tuple[str, ...] = ()):
        self.markers = markers
        super().__init__(
            "This appears to be a summary report rather than raw attendance "
            f"data (found columns: {', '.join(markers)}). Please upload the "
            "raw terminal export.",
            columns,
        )


class MissingColumnsError(FileShapeError):
    """None of the required raw attendance columns are present."""

    code: str = "MISSING_COLUMNS"

    def __init__(self, required: tuple[str, ...], columns: tuple[str, ...] = ()):
        self.required = required
        super().__init__(
            "Input is missing the required attendance columns "
            f"({', '.join(required)})",
            columns,
        )


# Configuration exceptions


class ConfigurationError(AttendanceKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidRulesError(ConfigurationError):
    """Attendance rules failed validation."""

    code: str = "INVALID_RULES"

    def __init__(self, errors: list[str], source: str | None = None):
        self.errors = errors
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(
            f"Attendance rules invalid{where}: {len(errors)} error(s)\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


# Record-edit exceptions


class RecordEditError(AttendanceKernelError):
    """Base exception for edits to reconciled records."""

    code: str = "RECORD_EDIT_ERROR"


class ManualEntryError(RecordEditError):
    """A manual entry cannot be applied."""

    code: str = "MANUAL_ENTRY_INVALID"

    def __init__(self, reason: str, employee_number: str | None = None):
        self.reason = reason
        self.employee_number = employee_number
        super().__init__(f"Manual entry rejected: {reason}")

