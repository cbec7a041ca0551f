"""
Day Builder (``attendance_engines.day_builder``).

Responsibility
--------------
Turn one employee's corrected punches (and the night-shift links found
for them) into ``DailyRecord`` objects, one per worked date.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.  Uses the
check-in register for pairing and the payable-hours calculator and flag
functions for every record it emits.

Invariants enforced
-------------------
* Linked night shifts are built first and seal their anchor date; any
  other punch of that date is attached to the night record for audit and
  not paired again.
* Remaining punches are paired in ``(timestamp, original_index)`` order
  through the register; orphans become partial records flagged
  ``missing_check_in`` / ``missing_check_out`` rather than being dropped.
* At most one record per date: a second shift on the same date is merged
  (earliest check-in, latest check-out, hours recomputed).  Hours cover
  the whole span, so the break between the merged shifts is paid.
* Every punch of a date, plus the next-day check-out of a cross-day
  shift, is kept in the record's ``all_time_records``.  When that next
  day has no record of its own, all of its punches go to the cross-day
  record.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.check_in_register import (
    IDLE,
    ClosureKind,
    RegisterState,
    ShiftClosure,
    finish,
    step,
)
from attendance_engines.night_shift import NightShiftLink
from attendance_engines.payable_hours import ZERO_HOURS, calculate_payable_hours
from attendance_engines.shift_classifier import (
    classify_shift,
    is_early_leave,
    is_excessive_overtime,
    is_late_check_in,
)
from attendance_engines.tracer import traced_engine
from attendance_kernel.domain.records import (
    MISSING_LABEL,
    DailyRecord,
    Event,
    ShiftType,
)
from attendance_kernel.logging_config import get_logger

logger = get_logger("engines.day_builder")

NOTE_NIGHT_SHIFT = "Night shift (spans to next day)"
NOTE_CROSS_DAY = "Cross-day shift"
NOTE_MISSING_CHECK_IN = "Missing check-in"
NOTE_MISSING_CHECK_OUT = "Missing check-out"
NOTE_MERGED = "Multiple shifts merged"


def display_time(value: datetime | None) -> str:
    return value.strftime("%H:%M") if value is not None else MISSING_LABEL


def make_record(
    work_date: date,
    check_in: datetime | None,
    check_out: datetime | None,
    shift_type: ShiftType,
    working_week_start: date,
    notes: str = "",
    cross_day: bool = False,
    rules: AttendanceRules | None = None,
) -> DailyRecord:
    """Build a record from its punches, computing hours and flags."""
    rules = rules or DEFAULT_RULES
    hours: Decimal = ZERO_HOURS
    if check_in is not None and check_out is not None:
        hours = calculate_payable_hours(check_in, check_out, shift_type, rules=rules)

    return DailyRecord(
        date=work_date,
        first_check_in=check_in,
        last_check_out=check_out,
        hours_worked=hours,
        shift_type=shift_type,
        working_week_start=working_week_start,
        notes=notes,
        missing_check_in=check_in is None,
        missing_check_out=check_out is None,
        is_late=check_in is not None and is_late_check_in(check_in, shift_type, rules),
        early_leave=check_out is not None
        and is_early_leave(check_out, shift_type, check_in, rules),
        excessive_overtime=check_in is not None
        and check_out is not None
        and is_excessive_overtime(check_out, shift_type, rules),
        display_check_in=display_time(check_in),
        display_check_out=display_time(check_out),
        cross_day=cross_day,
    )


def night_shift_record(link: NightShiftLink, rules: AttendanceRules | None = None) -> DailyRecord:
    return make_record(
        link.anchor_date,
        link.check_in.timestamp,
        link.check_out.timestamp,
        ShiftType.NIGHT,
        link.anchor_date,
        notes=NOTE_NIGHT_SHIFT,
        cross_day=True,
        rules=rules,
    )


def closure_record(closure: ShiftClosure, rules: AttendanceRules | None = None) -> DailyRecord:
    """Build the record for one shift closed by the register."""
    if closure.kind == ClosureKind.MISSING_CHECK_OUT:
        check_in = closure.check_in
        return make_record(
            check_in.work_date,
            check_in.timestamp,
            None,
            check_in.shift_type,
            check_in.working_week_start,
            notes=NOTE_MISSING_CHECK_OUT,
            rules=rules,
        )

    if closure.kind == ClosureKind.MISSING_CHECK_IN:
        check_out = closure.check_out
        return make_record(
            check_out.work_date,
            None,
            check_out.timestamp,
            check_out.shift_type,
            check_out.working_week_start,
            notes=NOTE_MISSING_CHECK_IN,
            rules=rules,
        )

    check_in, check_out = closure.check_in, closure.check_out
    cross_day = check_out.work_date != check_in.work_date
    night_hour = (rules or DEFAULT_RULES).night_link.check_in_from_hour
    if cross_day and check_in.timestamp.hour >= night_hour:
        shift_type = ShiftType.NIGHT
    else:
        shift_type = check_in.shift_type
    return make_record(
        check_in.work_date,
        check_in.timestamp,
        check_out.timestamp,
        shift_type,
        check_in.working_week_start,
        notes=NOTE_CROSS_DAY if cross_day else "",
        cross_day=cross_day,
        rules=rules,
    )


def merge_records(
    existing: DailyRecord,
    incoming: DailyRecord,
    rules: AttendanceRules | None = None,
) -> DailyRecord:
    """Fold a second shift on the same date into one record."""
    check_ins = [r.first_check_in for r in (existing, incoming) if r.first_check_in is not None]
    check_outs = [r.last_check_out for r in (existing, incoming) if r.last_check_out is not None]
    first_in = min(check_ins) if check_ins else None
    last_out = max(check_outs) if check_outs else None

    if first_in is not None and incoming.first_check_in == first_in:
        shift_type = incoming.shift_type
    else:
        shift_type = existing.shift_type
    if shift_type == ShiftType.OFF_DAY and first_in is not None:
        shift_type = classify_shift(first_in, rules)

    notes = [n for n in (existing.notes, incoming.notes) if n]
    if first_in is not None and last_out is not None:
        notes = [n for n in notes if n not in (NOTE_MISSING_CHECK_IN, NOTE_MISSING_CHECK_OUT)]
    notes.append(NOTE_MERGED)

    return make_record(
        existing.date,
        first_in,
        last_out,
        shift_type,
        existing.working_week_start,
        notes="; ".join(dict.fromkeys(notes)),
        cross_day=existing.cross_day or incoming.cross_day,
        rules=rules,
    )


def _attach_audit_trail(
    record: DailyRecord,
    events_by_date: dict[date, list[Event]],
    partners: Sequence[Event] = (),
) -> DailyRecord:
    trail = {e.original_index: e for e in events_by_date.get(record.date, ())}
    for event in partners:
        trail.setdefault(event.original_index, event)
    ordered = tuple(sorted(trail.values(), key=lambda e: e.sort_key))
    return replace(
        record,
        all_time_records=ordered,
        corrected_records=any(e.mislabeled or e.duplicate for e in ordered),
    )


@traced_engine("day_builder", "1.0", fingerprint_fields=("events",))
def build_daily_records(
    events: Sequence[Event],
    links: Sequence[NightShiftLink] = (),
    rules: AttendanceRules | None = None,
) -> tuple[DailyRecord, ...]:
    """Build one employee's worked-day records, ordered by date."""
    rules = rules or DEFAULT_RULES
    records: dict[date, DailyRecord] = {}
    # Next-day check-outs that belong to an earlier date's shift
    partners: dict[date, list[Event]] = defaultdict(list)

    def place(record: DailyRecord, check_out: Event | None = None) -> None:
        current = records.get(record.date)
        records[record.date] = record if current is None else merge_records(current, record, rules)
        if check_out is not None and check_out.work_date != record.date:
            partners[record.date].append(check_out)

    for link in links:
        place(night_shift_record(link, rules), link.check_out)
    sealed = {link.anchor_date for link in links}

    pending = sorted(
        (e for e in events if not e.processed and e.work_date not in sealed),
        key=lambda e: e.sort_key,
    )
    state: RegisterState = IDLE
    for event in pending:
        state, closures = step(state, event)
        for closure in closures:
            place(closure_record(closure, rules), closure.check_out)
    for closure in finish(state):
        place(closure_record(closure, rules), closure.check_out)

    events_by_date: dict[date, list[Event]] = defaultdict(list)
    for event in events:
        events_by_date[event.work_date].append(event)

    # A next-day date with no record of its own hands all its punches to
    # the shift that reached into it
    for check_outs in partners.values():
        for spill_date in {e.work_date for e in check_outs} - records.keys():
            check_outs.extend(events_by_date.get(spill_date, ()))

    built = tuple(
        _attach_audit_trail(records[d], events_by_date, partners.get(d, ()))
        for d in sorted(records)
    )
    logger.info(
        "daily_records_built",
        extra={
            "record_count": len(built),
            "night_shift_count": len(sealed),
            "partial_count": sum(1 for r in built if r.missing_check_in or r.missing_check_out),
        },
    )
    return built
