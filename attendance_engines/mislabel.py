"""
Mislabel Resolution Engine (``attendance_engines.mislabel``).

Responsibility
--------------
Correct inconsistent check-in / check-out labels within one employee-day.
Terminals are often pressed on the wrong key, pressed twice, or pressed
for several short shifts in one day; these passes repair the labels so
the day builder can pair punches.

Each pass is a pure function ``(day_events, rules) -> day_events`` that
returns a list of the same length in the same order.  ``resolve_day``
composes them in ``DAY_PASSES`` order:

1. ``suppress_close_duplicates`` -- same-status punches under 60 minutes
   apart: the earlier check-out / the later check-in is excluded.
2. ``fix_flipped_pair`` -- exactly two punches out of order (or equal)
   and 7 to 11 hours apart become check-in then check-out.
3. ``segment_multiple_shifts`` -- three or more punches are split on gaps
   of at least 1.5 hours; each segment opens with a check-in and closes
   with a check-out.
4. ``fix_residual_runs`` -- remaining same-status neighbours: near pairs
   are suppressed as in pass 1, far pairs are flipped.
5. ``enforce_day_bounds`` -- with more than two punches, the earliest is a
   check-in and the latest a check-out.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.

Invariants enforced
-------------------
* Only active punches (not processed, not pinned to a cross-day shift)
  are examined or changed.
* Within a pass, punches are visited in ``(timestamp, original_index)``
  order.
* Every relabel sets ``mislabeled``, keeps ``original_status`` and appends
  a reason; suppressions set ``processed`` and ``duplicate`` with a reason.
  Nothing is overwritten silently and nothing is dropped.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import date, timedelta

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.payable_hours import elapsed_hours
from attendance_engines.shift_classifier import classify_shift
from attendance_engines.tracer import traced_engine
from attendance_kernel.domain.records import Event, PunchStatus, ShiftType
from attendance_kernel.logging_config import get_logger

logger = get_logger("engines.mislabel")

DayPass = Callable[[list[Event], AttendanceRules], list[Event]]

_IN = PunchStatus.CHECK_IN
_OUT = PunchStatus.CHECK_OUT


def _active_positions(events: Sequence[Event]) -> list[int]:
    """Positions of active punches, in timestamp order."""
    positions = [i for i, e in enumerate(events) if e.is_active]
    return sorted(positions, key=lambda i: events[i].sort_key)


def _minutes_between(earlier: Event, later: Event) -> int:
    return int((later.timestamp - earlier.timestamp) / timedelta(minutes=1))


def _suppress_near_pair(
    result: list[Event], first: int, second: int, rules: AttendanceRules
) -> bool:
    """Suppress one of two same-status punches if they are too close.

    Returns True if a punch was suppressed.
    """
    a, b = result[first], result[second]
    if _minutes_between(a, b) >= rules.resolution.close_duplicate_minutes:
        return False
    if a.is_check_in:
        result[second] = b.suppress("Duplicate check-in, too close to previous punch")
    else:
        result[first] = a.suppress("Duplicate check-out, too close to next punch")
    return True


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------


def suppress_close_duplicates(
    events: list[Event], rules: AttendanceRules = DEFAULT_RULES
) -> list[Event]:
    """Exclude same-status punches that repeat within the duplicate window."""
    result = list(events)
    anchor: int | None = None
    for pos in _active_positions(result):
        if anchor is None or result[anchor].status is not result[pos].status:
            anchor = pos
            continue
        suppressed = _suppress_near_pair(result, anchor, pos, rules)
        # A kept check-in stays the anchor for the punches that follow it
        if suppressed and result[anchor].is_active:
            continue
        anchor = pos
    return result


def fix_flipped_pair(
    events: list[Event], rules: AttendanceRules = DEFAULT_RULES
) -> list[Event]:
    """Reorder a two-punch day whose labels cannot form a shift."""
    result = list(events)
    positions = _active_positions(result)
    if len(positions) != 2:
        return result

    first_pos, second_pos = positions
    first, second = result[first_pos], result[second_pos]
    if first.status is _IN and second.status is _OUT:
        return result

    span = elapsed_hours(first.timestamp, second.timestamp)
    resolution = rules.resolution
    if not resolution.flipped_pair_min_hours <= span <= resolution.flipped_pair_max_hours:
        return result

    shift_type = classify_shift(first.timestamp, rules)
    reason = f"Valid {span:.2f}-hour shift pattern detected"
    first = replace(first.relabel(_IN, f"Changed to check-in: {reason}"), shift_type=shift_type)
    second = replace(second.relabel(_OUT, f"Changed to check-out: {reason}"), shift_type=shift_type)
    if shift_type == ShiftType.NIGHT:
        anchor = first.work_date
        first = replace(first, working_week_start=anchor)
        second = replace(second, working_week_start=anchor)

    result[first_pos], result[second_pos] = first, second
    return result


def segment_multiple_shifts(
    events: list[Event], rules: AttendanceRules = DEFAULT_RULES
) -> list[Event]:
    """Split a busy day on long gaps and label each segment as a shift."""
    result = list(events)
    positions = _active_positions(result)
    if len(positions) < 3:
        return result

    gap = rules.resolution.segment_gap_hours
    segments: list[list[int]] = [[positions[0]]]
    for prev, pos in zip(positions, positions[1:]):
        if elapsed_hours(result[prev].timestamp, result[pos].timestamp) >= gap:
            segments.append([pos])
        else:
            segments[-1].append(pos)
    if len(segments) == 1:
        return result

    noon = rules.resolution.noon_hour
    for segment in segments:
        if len(segment) == 1:
            pos = segment[0]
            event = result[pos]
            if event.timestamp.hour < noon:
                result[pos] = event.relabel(_IN, "Changed to check-in: lone morning punch in multi-shift day")
            else:
                result[pos] = event.relabel(_OUT, "Changed to check-out: lone afternoon punch in multi-shift day")
            continue
        head, tail = segment[0], segment[-1]
        result[head] = result[head].relabel(_IN, "Changed to check-in: multiple shift pattern detected")
        result[tail] = result[tail].relabel(_OUT, "Changed to check-out: multiple shift pattern detected")
    return result


def fix_residual_runs(
    events: list[Event], rules: AttendanceRules = DEFAULT_RULES
) -> list[Event]:
    """Break up any same-status neighbours that earlier passes left."""
    result = list(events)
    positions = _active_positions(result)
    for curr_pos, next_pos in zip(positions, positions[1:]):
        curr, nxt = result[curr_pos], result[next_pos]
        if not (curr.is_active and nxt.is_active) or curr.status is not nxt.status:
            continue
        if _suppress_near_pair(result, curr_pos, next_pos, rules):
            continue
        if curr.is_check_in:
            result[next_pos] = nxt.relabel(_OUT, "Changed from check-in to check-out: repeated check-in pattern")
        else:
            result[curr_pos] = curr.relabel(_IN, "Changed from check-out to check-in: repeated check-out pattern")
    return result


def enforce_day_bounds(
    events: list[Event], rules: AttendanceRules = DEFAULT_RULES
) -> list[Event]:
    """Make the earliest punch a check-in and the latest a check-out."""
    result = list(events)
    positions = _active_positions(result)
    if len(positions) <= 2:
        return result
    first, last = positions[0], positions[-1]
    result[first] = result[first].relabel(_IN, "Changed earliest punch of the day to check-in")
    result[last] = result[last].relabel(_OUT, "Changed latest punch of the day to check-out")
    return result


DAY_PASSES: tuple[DayPass, ...] = (
    suppress_close_duplicates,
    fix_flipped_pair,
    segment_multiple_shifts,
    fix_residual_runs,
    enforce_day_bounds,
)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def resolve_day(
    events: Sequence[Event],
    rules: AttendanceRules | None = None,
    passes: Sequence[DayPass] = DAY_PASSES,
) -> list[Event]:
    """Run the correction passes over one employee-day."""
    rules = rules or DEFAULT_RULES
    result = list(events)
    if len(result) < 2:
        return result
    for day_pass in passes:
        result = day_pass(result, rules)
    return result


@traced_engine("mislabel_resolution", "1.0", fingerprint_fields=("events",))
def resolve_mislabels(
    events: Sequence[Event],
    rules: AttendanceRules | None = None,
) -> tuple[Event, ...]:
    """Correct labels across one employee's punches, day by day.

    Returns the corrected punches in their input order.
    """
    rules = rules or DEFAULT_RULES
    by_date: dict[date, list[int]] = defaultdict(list)
    for i, event in enumerate(events):
        by_date[event.work_date].append(i)

    result = list(events)
    for work_date in sorted(by_date):
        positions = sorted(by_date[work_date], key=lambda i: events[i].original_index)
        resolved = resolve_day([events[i] for i in positions], rules)
        for pos, event in zip(positions, resolved):
            result[pos] = event

    corrected = sum(1 for before, after in zip(events, result) if before != after)
    if corrected:
        logger.info(
            "mislabels_resolved",
            extra={
                "event_count": len(result),
                "corrected_count": corrected,
                "suppressed_count": sum(1 for e in result if e.duplicate),
            },
        )
    return tuple(result)
