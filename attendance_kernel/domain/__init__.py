"""
Pure domain layer.

Immutable punch events, daily records and employee records, with NO
dependencies on storage, clocks or I/O.
"""

from attendance_kernel.domain.records import (
    DailyRecord,
    EmployeeRecord,
    Event,
    PunchStatus,
    ShiftType,
)

__all__ = [
    "DailyRecord",
    "EmployeeRecord",
    "Event",
    "PunchStatus",
    "ShiftType",
]
