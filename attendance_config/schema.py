"""
Attendance rules schema.

Every business constant the engines use lives here, in one immutable
``AttendanceRules`` table: classification cutoffs, shift windows, grace
tolerances, early-leave thresholds, overtime cutoffs, payable-hours
thresholds, mislabel heuristics and the night-worker heuristic.  YAML
files are parsed into these types by the loader; ``DEFAULT_RULES``
mirrors ``sets/default.yaml`` so pure engine calls work without touching
the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from decimal import Decimal

from attendance_kernel.domain.records import ShiftType

# ---------------------------------------------------------------------------
# Shift table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ShiftRule:
    """Window and thresholds for one working shift."""

    shift_type: ShiftType
    start: time
    end: time
    early_leave: time  # Check-outs before this are early leaves
    late_grace_minutes: int
    overtime_from_hour: int  # Check-out hour at/after which overtime is excessive
    overtime_until_hour: int | None = None  # Inclusive upper bound, if any


@dataclass(frozen=True)
class CanteenCohort:
    """One of the canteen start cohorts (07:00 and 08:00 starts)."""

    name: str
    start: time
    end: time
    early_leave: time
    max_check_in_hour: int  # Check-ins up to this hour belong to the cohort


# ---------------------------------------------------------------------------
# Engine thresholds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassificationRules:
    """Wall-clock cutoffs for classifying a check-in into a shift."""

    canteen_from: time = time(6, 0)
    canteen_until: time = time(8, 0)  # Inclusive
    night_from: time = time(20, 0)  # Window wraps midnight
    night_until: time = time(4, 30)  # Exclusive
    morning_until: time = time(12, 30)  # Exclusive; later check-ins are evening


@dataclass(frozen=True)
class PayableHoursRules:
    hours_cap: Decimal = Decimal("15")
    overtime_rounding_above: Decimal = Decimal("9.5")
    overtime_rounding_step: Decimal = Decimal("0.25")
    full_day_hours: Decimal = Decimal("9")
    full_day_credit_from: Decimal = Decimal("8.5")


@dataclass(frozen=True)
class ResolutionRules:
    """Thresholds for the per-day mislabel correction passes."""

    close_duplicate_minutes: int = 60
    flipped_pair_min_hours: Decimal = Decimal("7")
    flipped_pair_max_hours: Decimal = Decimal("11")
    segment_gap_hours: Decimal = Decimal("1.5")
    noon_hour: int = 12


@dataclass(frozen=True)
class NightWorkerThresholds:
    """Tunable heuristic for "likely night-shift worker"."""

    check_in_share: Decimal = Decimal("0.30")
    night_check_in_from_hour: int = 20  # Window wraps midnight
    night_check_in_until_hour: int = 4  # Exclusive
    early_check_out_from_hour: int = 5
    early_check_out_until_hour: int = 8  # Exclusive
    min_early_check_outs: int = 2
    min_events: int = 2


@dataclass(frozen=True)
class NightLinkWindows:
    """Hour windows (inclusive) for pairing a cross-midnight shift."""

    check_in_from_hour: int = 20
    check_in_until_hour: int = 23
    check_out_from_hour: int = 5
    check_out_until_hour: int = 7
    check_out_noon_hour: int = 12  # Night check-outs before this belong to the prior day


@dataclass(frozen=True)
class IngestionColumns:
    """Column names of the raw terminal export."""

    date_time: str = "Date/Time"
    name: str = "Name"
    employee_number: str = "No."
    status: str = "Status"
    department: str = "Department"
    check_in_keyword: str = "in"
    summary_markers: tuple[str, ...] = ("Employee Number", "Total Days", "Regular Hours")

    @property
    def required(self) -> tuple[str, ...]:
        return (self.date_time, self.name, self.employee_number, self.status)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttendanceRules:
    """The complete, immutable rules table injected into every engine."""

    version: str
    shifts: tuple[ShiftRule, ...]
    canteen_cohorts: tuple[CanteenCohort, ...]
    classification: ClassificationRules = ClassificationRules()
    payable: PayableHoursRules = PayableHoursRules()
    resolution: ResolutionRules = ResolutionRules()
    night_worker: NightWorkerThresholds = NightWorkerThresholds()
    night_link: NightLinkWindows = NightLinkWindows()
    columns: IngestionColumns = IngestionColumns()
    checksum: str = ""

    def shift(self, shift_type: ShiftType) -> ShiftRule | None:
        for rule in self.shifts:
            if rule.shift_type == shift_type:
                return rule
        return None

    def canteen_cohort_for(self, check_in_hour: int) -> CanteenCohort:
        """Pick the canteen cohort a check-in hour belongs to."""
        for cohort in self.canteen_cohorts:
            if check_in_hour <= cohort.max_check_in_hour:
                return cohort
        return self.canteen_cohorts[-1]

    def canteen_cohort_starting(self, hour: int) -> CanteenCohort | None:
        for cohort in self.canteen_cohorts:
            if cohort.start.hour == hour:
                return cohort
        return None


DEFAULT_RULES = AttendanceRules(
    version="default",
    shifts=(
        ShiftRule(
            shift_type=ShiftType.MORNING,
            start=time(5, 0),
            end=time(14, 0),
            early_leave=time(13, 30),
            late_grace_minutes=0,
            overtime_from_hour=15,
        ),
        ShiftRule(
            shift_type=ShiftType.EVENING,
            start=time(13, 0),
            end=time(22, 0),
            early_leave=time(21, 30),
            late_grace_minutes=0,
            overtime_from_hour=23,
        ),
        ShiftRule(
            shift_type=ShiftType.NIGHT,
            start=time(21, 0),
            end=time(6, 0),
            early_leave=time(5, 30),
            late_grace_minutes=30,
            overtime_from_hour=7,
            overtime_until_hour=12,
        ),
        ShiftRule(
            shift_type=ShiftType.CANTEEN,
            start=time(7, 0),
            end=time(16, 0),
            early_leave=time(15, 30),
            late_grace_minutes=10,
            overtime_from_hour=18,
        ),
    ),
    canteen_cohorts=(
        CanteenCohort(
            name="early",
            start=time(7, 0),
            end=time(16, 0),
            early_leave=time(15, 30),
            max_check_in_hour=7,
        ),
        CanteenCohort(
            name="late",
            start=time(8, 0),
            end=time(17, 0),
            early_leave=time(16, 30),
            max_check_in_hour=23,
        ),
    ),
)
