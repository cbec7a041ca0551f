"""
Payable-Hours Calculator (``attendance_engines.payable_hours``).

Responsibility
--------------
Turn a (check-in, check-out, shift type, penalty) tuple into the hours
credited for payroll.  The same contract serves batch reconciliation and
operator edits, so UI-driven and batch-computed hours never diverge.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.

Rules (in order)
----------------
1. Night shifts: a same-day check-out earlier than the check-in moves to
   the next day; a check-out more than one day away (or before the
   check-in date) is clamped to check-in date + 1, keeping its time.
2. ``raw`` = whole elapsed minutes / 60.
3. Manual edits: ``max(0, raw - penalty)`` and nothing else.
4. Standardization: above the cap -> cap; above the overtime bucket ->
   nearest quarter hour; otherwise a check-out at/after the shift's
   early-leave threshold, or ``raw >= 8.5``, earns the full 9.0 hours.
5. Penalty: a penalty of a full day or more zeroes the day; otherwise it
   is subtracted, floored at zero.
6. Round half-up to 2 decimals.

Invariants enforced
-------------------
* Every result is a ``Decimal`` in ``[0, hours_cap]`` with 2 places,
  manual edits included.
* ``penalty_minutes`` must be non-negative (``ValueError`` otherwise).
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.shift_classifier import classify_shift, early_leave_threshold
from attendance_kernel.domain.records import ShiftType

HOURS_PLACES = Decimal("0.01")
ZERO_HOURS = Decimal("0.00")
_MINUTES_PER_HOUR = Decimal(60)
_ONE_DAY = timedelta(days=1)


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(HOURS_PLACES, rounding=ROUND_HALF_UP)


def penalty_hours(penalty_minutes: int) -> Decimal:
    if penalty_minutes < 0:
        raise ValueError(f"penalty_minutes must be >= 0, got {penalty_minutes}")
    return Decimal(penalty_minutes) / _MINUTES_PER_HOUR


def elapsed_hours(check_in: datetime, check_out: datetime) -> Decimal:
    """Elapsed whole minutes between two punches, in hours (unrounded)."""
    minutes = int((check_out - check_in) / timedelta(minutes=1))
    return Decimal(minutes) / _MINUTES_PER_HOUR


def calculate_hours_worked(check_in: datetime, check_out: datetime) -> Decimal:
    """Raw hours worked; a check-out before the check-in rolls to the next day."""
    if check_out < check_in:
        check_out = check_out + _ONE_DAY
    return round_hours(elapsed_hours(check_in, check_out))


def normalize_night_check_out(check_in: datetime, check_out: datetime) -> datetime:
    """Place a night-shift check-out on the calendar day after the check-in."""
    if check_out.date() == check_in.date() and check_out < check_in:
        check_out = check_out + _ONE_DAY
    day_delta = (check_out.date() - check_in.date()).days
    if day_delta > 1 or day_delta < 0:
        check_out = datetime.combine(check_in.date() + _ONE_DAY, check_out.time())
    return check_out


def _clamp(hours: Decimal, cap: Decimal) -> Decimal:
    return round_hours(min(max(hours, Decimal(0)), cap))


def _quarter_hours(hours: Decimal, step: Decimal) -> Decimal:
    return (hours / step).quantize(Decimal(1), rounding=ROUND_HALF_UP) * step


def calculate_payable_hours(
    check_in: datetime,
    check_out: datetime,
    shift_type: ShiftType | None,
    penalty_minutes: int = 0,
    is_manual_edit: bool = False,
    rules: AttendanceRules | None = None,
) -> Decimal:
    """Compute payable hours for one worked day.

    Args:
        check_in: First check-in of the day.
        check_out: Last check-out (may be on the next calendar day).
        shift_type: Shift the day is worked under; ``None`` classifies it
            from the check-in.
        penalty_minutes: Minutes deducted by an operator.
        is_manual_edit: Operator-entered times bypass standardization.
        rules: Rules table; defaults to the built-in table.

    Returns:
        Payable hours in ``[0, hours_cap]``, rounded to 2 places.
    """
    rules = rules or DEFAULT_RULES
    payable = rules.payable
    penalty = penalty_hours(penalty_minutes)

    if shift_type is None:
        shift_type = classify_shift(check_in, rules)
    if shift_type == ShiftType.NIGHT:
        check_out = normalize_night_check_out(check_in, check_out)

    raw = elapsed_hours(check_in, check_out)

    if is_manual_edit:
        return _clamp(raw - penalty, payable.hours_cap)

    if raw > payable.hours_cap:
        hours = payable.hours_cap
    elif raw > payable.overtime_rounding_above:
        hours = _quarter_hours(raw, payable.overtime_rounding_step)
    else:
        threshold = early_leave_threshold(shift_type, check_in, rules)
        checked_out_at = time(check_out.hour, check_out.minute)
        if threshold is not None and checked_out_at >= threshold:
            hours = payable.full_day_hours
        elif raw >= payable.full_day_credit_from:
            hours = payable.full_day_hours
        else:
            hours = raw

    if penalty >= payable.full_day_hours:
        hours = Decimal(0)
    else:
        hours = hours - penalty

    return _clamp(hours, payable.hours_cap)
