"""
Shift Classifier and Flag Functions (``attendance_engines.shift_classifier``).

Responsibility
--------------
* ``classify_shift`` -- map a check-in wall-clock time to a shift type.
* ``is_late_check_in`` / ``is_early_leave`` / ``is_excessive_overtime`` --
  per-day flags evaluated against the shift table in ``AttendanceRules``.
* ``early_leave_threshold`` -- the check-out time from which a day counts
  as a completed shift (shared with the payable-hours calculator).

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Imports only the kernel domain and the rules schema.

Invariants enforced
-------------------
* Classification priority is fixed: canteen, night, morning, then
  evening.  The cutoffs come from ``AttendanceRules.classification``.
* The canteen window (06:00 to 08:00 inclusive by default) is checked
  first, so it overlaps the morning window and wins.
* Canteen and night flags use fixed-hour cutoffs (no cross-midnight
  offset arithmetic), so a 02:00 night check-in is never "late".
* A missing or off-day shift type never raises a flag.
"""

from __future__ import annotations

from datetime import datetime, time

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_kernel.domain.records import ShiftType


def _clock(value: datetime | time) -> time:
    return time(value.hour, value.minute)


def classify_shift(
    check_in: datetime | time,
    rules: AttendanceRules | None = None,
) -> ShiftType:
    """Classify the shift a check-in belongs to."""
    cutoffs = (rules or DEFAULT_RULES).classification
    clock = _clock(check_in)

    if cutoffs.canteen_from <= clock <= cutoffs.canteen_until:
        return ShiftType.CANTEEN
    if clock >= cutoffs.night_from or clock < cutoffs.night_until:
        return ShiftType.NIGHT
    if clock < cutoffs.morning_until:
        return ShiftType.MORNING
    return ShiftType.EVENING


def is_late_check_in(
    check_in: datetime | time,
    shift_type: ShiftType | None,
    rules: AttendanceRules | None = None,
) -> bool:
    """Return True if the check-in is past the shift start plus grace."""
    rules = rules or DEFAULT_RULES
    if shift_type is None or shift_type == ShiftType.OFF_DAY:
        return False
    rule = rules.shift(shift_type)
    if rule is None:
        return False

    hour, minute = check_in.hour, check_in.minute

    if shift_type == ShiftType.CANTEEN:
        cohort = rules.canteen_cohort_starting(hour)
        if cohort is not None:
            return minute > cohort.start.minute + rule.late_grace_minutes
        return hour > rules.canteen_cohorts[-1].start.hour

    if hour > rule.start.hour:
        return True
    return hour == rule.start.hour and minute > rule.start.minute + rule.late_grace_minutes


def early_leave_threshold(
    shift_type: ShiftType | None,
    check_in: datetime | time | None = None,
    rules: AttendanceRules | None = None,
) -> time | None:
    """Check-out time from which the shift counts as completed.

    Canteen thresholds depend on the cohort the check-in belongs to; with
    no check-in the earliest cohort applies.
    """
    rules = rules or DEFAULT_RULES
    if shift_type is None or shift_type == ShiftType.OFF_DAY:
        return None
    if shift_type == ShiftType.CANTEEN:
        if check_in is None:
            return rules.canteen_cohorts[0].early_leave
        return rules.canteen_cohort_for(check_in.hour).early_leave
    rule = rules.shift(shift_type)
    return rule.early_leave if rule is not None else None


def is_early_leave(
    check_out: datetime | time,
    shift_type: ShiftType | None,
    check_in: datetime | time | None = None,
    rules: AttendanceRules | None = None,
) -> bool:
    """Return True if the check-out is before the early-leave threshold."""
    threshold = early_leave_threshold(shift_type, check_in, rules)
    if threshold is None:
        return False
    return _clock(check_out) < threshold


def is_excessive_overtime(
    check_out: datetime | time,
    shift_type: ShiftType | None,
    rules: AttendanceRules | None = None,
) -> bool:
    """Return True if the check-out falls in the shift's overtime window."""
    rules = rules or DEFAULT_RULES
    if shift_type is None or shift_type == ShiftType.OFF_DAY:
        return False
    rule = rules.shift(shift_type)
    if rule is None:
        return False
    hour = check_out.hour
    if hour < rule.overtime_from_hour:
        return False
    return rule.overtime_until_hour is None or hour <= rule.overtime_until_hour
