"""
Open Check-in Register (``attendance_engines.check_in_register``).

Responsibility
--------------
Pair one employee's punches into shifts.  The register is a one-slot
state machine, fed punches in ``(timestamp, original_index)`` order;
every punch moves it to a new state and may close zero, one or two
shifts:

    Idle               + check-in   -> AwaitingCheckout
    Idle               + check-out  -> Idle, closes MISSING_CHECK_IN
    AwaitingCheckout   + check-in   -> AwaitingCheckout(new), closes MISSING_CHECK_OUT
    AwaitingCheckout   + check-out  -> Idle, closes PAIRED
                                       (or both orphans if the check-out is
                                        more than one calendar day later)

``finish`` drains a register left open at the end of the punches.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.  Imports only the
kernel domain; the day builder turns each ``ShiftClosure`` into a record.

Invariants enforced
-------------------
* At most one check-in is open at a time.
* Every punch fed in comes back out in exactly one closure.
* A check-out never pairs with a check-in more than ``max_span_days``
  calendar days earlier.

Failure modes
-------------
None raised; orphan punches are closures, not errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from attendance_kernel.domain.records import Event


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingCheckout:
    check_in: Event


RegisterState = Idle | AwaitingCheckout

IDLE = Idle()


class ClosureKind(str, Enum):
    PAIRED = "paired"
    MISSING_CHECK_OUT = "missing_check_out"
    MISSING_CHECK_IN = "missing_check_in"


@dataclass(frozen=True)
class ShiftClosure:
    """A shift the register has finished with."""

    kind: ClosureKind
    check_in: Event | None = None
    check_out: Event | None = None


def _orphan_check_in(event: Event) -> ShiftClosure:
    return ShiftClosure(ClosureKind.MISSING_CHECK_OUT, check_in=event)


def _orphan_check_out(event: Event) -> ShiftClosure:
    return ShiftClosure(ClosureKind.MISSING_CHECK_IN, check_out=event)


def step(
    state: RegisterState,
    event: Event,
    max_span_days: int = 1,
) -> tuple[RegisterState, tuple[ShiftClosure, ...]]:
    """Feed one punch to the register."""
    if event.is_check_in:
        if isinstance(state, AwaitingCheckout):
            return AwaitingCheckout(event), (_orphan_check_in(state.check_in),)
        return AwaitingCheckout(event), ()

    if isinstance(state, Idle):
        return IDLE, (_orphan_check_out(event),)

    check_in = state.check_in
    span_days = (event.work_date - check_in.work_date).days
    if span_days > max_span_days:
        return IDLE, (_orphan_check_in(check_in), _orphan_check_out(event))
    return IDLE, (ShiftClosure(ClosureKind.PAIRED, check_in=check_in, check_out=event),)


def finish(state: RegisterState) -> tuple[ShiftClosure, ...]:
    """Close whatever the register still holds."""
    if isinstance(state, AwaitingCheckout):
        return (_orphan_check_in(state.check_in),)
    return ()
