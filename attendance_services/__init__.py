"""
attendance_services -- Batch orchestration over ingestion and engines.

Services hold configuration (rules, parser, worker count) and drive the
pure engines; they own no persistent state.
"""

from attendance_services.reconciliation_service import (
    AttendanceReconciliationService,
    ReconciliationResult,
)

__all__ = [
    "AttendanceReconciliationService",
    "ReconciliationResult",
]
