"""
Night-Shift Cross-Day Linker (``attendance_engines.night_shift``).

Responsibility
--------------
Recognise shifts that start in the evening of day D and end in the
morning of day D+1, and bind the two punches into one logical shift
anchored at D.

* ``is_likely_night_shift_worker`` -- per-employee heuristic.
* ``apply_night_worker_labels`` -- for likely night workers, force the
  evening punch of D and the morning punch of D+1 to check-in/check-out
  and pin them so per-day mislabel passes leave them alone.
* ``link_night_shifts`` -- for any employee, pair an evening check-in on
  D with a morning check-out on D+1.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.

Invariants enforced
-------------------
* Only calendar-consecutive dates are linked.
* A linked pair shares ``working_week_start = D`` and ``shift_type =
  night``; both punches are marked ``processed`` and ``cross_day``.
* Linking consumes only the two paired punches; every other punch of D+1
  stays available to the day builder.

Failure modes
-------------
* None raised.  An employee with fewer than two punches is never a
  likely night worker.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal

from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_engines.tracer import traced_engine
from attendance_kernel.domain.records import Event, PunchStatus, ShiftType
from attendance_kernel.logging_config import get_logger

logger = get_logger("engines.night_shift")

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class NightShiftLink:
    """An evening check-in on ``anchor_date`` bound to next morning's check-out."""

    anchor_date: date
    check_in: Event
    check_out: Event


@dataclass(frozen=True)
class NightLinkResult:
    events: tuple[Event, ...]
    links: tuple[NightShiftLink, ...]


def is_likely_night_shift_worker(
    events: Sequence[Event],
    rules: AttendanceRules | None = None,
) -> bool:
    """Heuristic: does this employee mostly work nights?

    True when enough check-ins fall in the night window, or enough
    check-outs fall in the early-morning window.
    """
    thresholds = (rules or DEFAULT_RULES).night_worker
    if len(events) < thresholds.min_events:
        return False

    check_ins = [e for e in events if e.status is PunchStatus.CHECK_IN]
    night_check_ins = sum(
        1
        for e in check_ins
        if e.timestamp.hour >= thresholds.night_check_in_from_hour
        or e.timestamp.hour < thresholds.night_check_in_until_hour
    )
    if check_ins and Decimal(night_check_ins) / Decimal(len(check_ins)) >= thresholds.check_in_share:
        return True

    early_check_outs = sum(
        1
        for e in events
        if e.status is PunchStatus.CHECK_OUT
        and thresholds.early_check_out_from_hour
        <= e.timestamp.hour
        < thresholds.early_check_out_until_hour
    )
    return early_check_outs >= thresholds.min_early_check_outs


def _positions_by_date(events: Sequence[Event]) -> dict[date, list[int]]:
    by_date: dict[date, list[int]] = defaultdict(list)
    for i, event in enumerate(events):
        by_date[event.work_date].append(i)
    for positions in by_date.values():
        positions.sort(key=lambda i: events[i].sort_key)
    return by_date


def _first_matching(
    events: Sequence[Event],
    positions: Sequence[int],
    predicate: Callable[[Event], bool],
) -> int | None:
    for pos in positions:
        if predicate(events[pos]):
            return pos
    return None


def _consecutive_dates(by_date: dict[date, list[int]]) -> list[tuple[date, date]]:
    dates = sorted(by_date)
    return [(d, n) for d, n in zip(dates, dates[1:]) if n - d == _ONE_DAY]


def apply_night_worker_labels(
    events: Sequence[Event],
    rules: AttendanceRules | None = None,
) -> tuple[Event, ...]:
    """Pin evening/morning punch pairs of a likely night worker."""
    rules = rules or DEFAULT_RULES
    result = list(events)
    if not is_likely_night_shift_worker(result, rules):
        return tuple(result)

    windows = rules.night_link
    by_date = _positions_by_date(result)
    pinned = 0
    for day, next_day in _consecutive_dates(by_date):
        evening = _first_matching(
            result,
            by_date[day],
            lambda e: e.is_active
            and windows.check_in_from_hour <= e.timestamp.hour <= windows.check_in_until_hour,
        )
        morning = _first_matching(
            result,
            by_date[next_day],
            lambda e: e.is_active
            and windows.check_out_from_hour <= e.timestamp.hour <= windows.check_out_until_hour,
        )
        if evening is None or morning is None:
            continue

        result[evening] = replace(
            result[evening].relabel(
                PunchStatus.CHECK_IN, "Changed evening punch to check-in: night shift pattern"
            ),
            shift_type=ShiftType.NIGHT,
            cross_day=True,
            working_week_start=day,
        )
        result[morning] = replace(
            result[morning].relabel(
                PunchStatus.CHECK_OUT, "Changed morning punch to check-out: night shift pattern"
            ),
            shift_type=ShiftType.NIGHT,
            cross_day=True,
            working_week_start=day,
        )
        pinned += 1

    if pinned:
        logger.info("night_worker_pairs_pinned", extra={"pair_count": pinned})
    return tuple(result)


@traced_engine("night_shift_linker", "1.0", fingerprint_fields=("events",))
def link_night_shifts(
    events: Sequence[Event],
    rules: AttendanceRules | None = None,
) -> NightLinkResult:
    """Bind evening check-ins to the following morning's check-outs."""
    rules = rules or DEFAULT_RULES
    windows = rules.night_link
    result = list(events)
    by_date = _positions_by_date(result)
    links: list[NightShiftLink] = []

    for day, next_day in _consecutive_dates(by_date):
        evening = _first_matching(
            result,
            by_date[day],
            lambda e: not e.processed
            and e.status is PunchStatus.CHECK_IN
            and windows.check_in_from_hour <= e.timestamp.hour <= windows.check_in_until_hour,
        )
        morning = _first_matching(
            result,
            by_date[next_day],
            lambda e: not e.processed
            and e.status is PunchStatus.CHECK_OUT
            and windows.check_out_from_hour <= e.timestamp.hour <= windows.check_out_until_hour,
        )
        if evening is None or morning is None:
            continue

        linked: dict[int, Event] = {}
        for pos in (evening, morning):
            linked[pos] = replace(
                result[pos],
                shift_type=ShiftType.NIGHT,
                working_week_start=day,
                processed=True,
                cross_day=True,
            )
            result[pos] = linked[pos]
        links.append(NightShiftLink(anchor_date=day, check_in=linked[evening], check_out=linked[morning]))

    if links:
        logger.info(
            "night_shifts_linked",
            extra={"link_count": len(links), "anchor_dates": [link.anchor_date for link in links]},
        )
    return NightLinkResult(events=tuple(result), links=tuple(links))
