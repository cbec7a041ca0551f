"""
Module: attendance_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    reconciliation engines.  This is the import surface for
    attendance_services and for callers applying operator edits.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import attendance_kernel and attendance_config (and sibling engine
    modules).  MUST NOT import attendance_ingestion or attendance_services.

Invariants enforced:
    - Purity: engines never read the clock.  Every date and time they
      work with comes from a punch or an argument.
    - Decimal-only hours, quantized to two places.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Pipeline stages are wrapped by ``@traced_engine`` (see
    ``attendance_engines.tracer``), emitting ATTENDANCE_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.
"""

from attendance_engines.assembler import assemble_employee, sort_employees
from attendance_engines.check_in_register import (
    IDLE,
    AwaitingCheckout,
    ClosureKind,
    Idle,
    ShiftClosure,
)
from attendance_engines.day_builder import build_daily_records
from attendance_engines.day_synthesizer import (
    create_leave_record,
    create_off_day_record,
    synthesize_off_days,
)
from attendance_engines.mislabel import resolve_mislabels
from attendance_engines.night_shift import (
    NightLinkResult,
    NightShiftLink,
    apply_night_worker_labels,
    is_likely_night_shift_worker,
    link_night_shifts,
)
from attendance_engines.payable_hours import (
    calculate_hours_worked,
    calculate_payable_hours,
)
from attendance_engines.record_edits import (
    EntryType,
    ManualEntry,
    ManualEntryResult,
    add_manual_entry,
    apply_penalty_to_day,
    approve_all_days,
    remove_approved_days,
    set_day_approval,
    update_time_records,
)
from attendance_engines.shift_classifier import (
    classify_shift,
    is_early_leave,
    is_excessive_overtime,
    is_late_check_in,
)
from attendance_engines.summary import (
    BatchSummary,
    HoursSummary,
    calculate_stats,
    summarize_batch,
    summarize_employee_hours,
)

__all__ = [
    "IDLE",
    "AwaitingCheckout",
    "BatchSummary",
    "ClosureKind",
    "EntryType",
    "HoursSummary",
    "Idle",
    "ManualEntry",
    "ManualEntryResult",
    "NightLinkResult",
    "NightShiftLink",
    "ShiftClosure",
    "add_manual_entry",
    "apply_night_worker_labels",
    "apply_penalty_to_day",
    "approve_all_days",
    "assemble_employee",
    "build_daily_records",
    "calculate_hours_worked",
    "calculate_payable_hours",
    "calculate_stats",
    "classify_shift",
    "create_leave_record",
    "create_off_day_record",
    "is_early_leave",
    "is_excessive_overtime",
    "is_late_check_in",
    "is_likely_night_shift_worker",
    "link_night_shifts",
    "remove_approved_days",
    "resolve_mislabels",
    "set_day_approval",
    "sort_employees",
    "summarize_batch",
    "summarize_employee_hours",
    "synthesize_off_days",
    "update_time_records",
]
