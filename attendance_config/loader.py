"""
Rules Loader (``attendance_config.loader``).

Responsibility
--------------
Loads a YAML rules file and parses it into the typed, frozen
``attendance_config.schema`` dataclasses.  The single public entry point
for runtime rules is ``attendance_config.get_active_rules()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends only on the kernel
domain enums; no engine or service imports.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Sections omitted from the YAML fall back to the schema defaults; keys
  that are present but malformed raise ``ValueError`` / ``KeyError``.
* ``validate_rules`` reports structural problems (missing shifts,
  inverted thresholds, out-of-range hours) as a list of messages.
* ``compute_checksum`` produces a deterministic SHA-256 hash.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad time / decimal literal -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from datetime import time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from attendance_config.schema import (
    AttendanceRules,
    CanteenCohort,
    ClassificationRules,
    IngestionColumns,
    NightLinkWindows,
    NightWorkerThresholds,
    PayableHoursRules,
    ResolutionRules,
    ShiftRule,
)
from attendance_kernel.domain.records import ShiftType

_WORKING_SHIFTS = (
    ShiftType.MORNING,
    ShiftType.EVENING,
    ShiftType.NIGHT,
    ShiftType.CANTEEN,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_time(value: Any) -> time:
    """Parse an ``HH:MM`` wall-clock value.

    YAML 1.1 reads unquoted ``05:00`` as a sexagesimal integer (300), so
    integers are accepted as minutes past midnight.
    """
    if isinstance(value, time):
        return value
    if isinstance(value, int):
        return time(value // 60, value % 60)
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise ValueError(f"Cannot parse time from {value!r}")


def parse_decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot parse decimal from {value!r}") from exc


def parse_shift_rule(shift_type: ShiftType, data: dict[str, Any]) -> ShiftRule:
    until = data.get("overtime_until_hour")
    return ShiftRule(
        shift_type=shift_type,
        start=parse_time(data["start"]),
        end=parse_time(data["end"]),
        early_leave=parse_time(data["early_leave"]),
        late_grace_minutes=int(data.get("late_grace_minutes", 0)),
        overtime_from_hour=int(data["overtime_from_hour"]),
        overtime_until_hour=int(until) if until is not None else None,
    )


def parse_canteen_cohort(data: dict[str, Any]) -> CanteenCohort:
    return CanteenCohort(
        name=data["name"],
        start=parse_time(data["start"]),
        end=parse_time(data["end"]),
        early_leave=parse_time(data["early_leave"]),
        max_check_in_hour=int(data["max_check_in_hour"]),
    )


def _parse_section(cls: type, data: dict[str, Any] | None) -> Any:
    """Build a flat thresholds dataclass, coercing by the default's type."""
    if not data:
        return cls()
    defaults = cls()
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        raw = data[f.name]
        current = getattr(defaults, f.name)
        if isinstance(current, Decimal):
            kwargs[f.name] = parse_decimal(raw)
        elif isinstance(current, time):
            kwargs[f.name] = parse_time(raw)
        elif isinstance(current, bool):
            kwargs[f.name] = bool(raw)
        elif isinstance(current, int):
            kwargs[f.name] = int(raw)
        elif isinstance(current, tuple):
            kwargs[f.name] = tuple(str(v) for v in raw)
        else:
            kwargs[f.name] = str(raw)
    unknown = set(data) - {f.name for f in fields(cls)}
    if unknown:
        raise KeyError(f"Unknown keys for {cls.__name__}: {sorted(unknown)}")
    return cls(**kwargs)


def parse_rules(data: dict[str, Any]) -> AttendanceRules:
    """
    Parse a full ``AttendanceRules`` table from a dict.

    Postconditions:
        - Shift rules are ordered morning, evening, night, canteen
          (whichever are present).
        - ``checksum`` is the checksum of ``data``.
    Raises:
        KeyError: if a required shift key is missing.
        ValueError: if a time or decimal literal is malformed.
    """
    shifts_data = data.get("shifts", {})
    shifts = tuple(
        parse_shift_rule(st, shifts_data[st.value])
        for st in _WORKING_SHIFTS
        if st.value in shifts_data
    )
    cohorts = tuple(
        parse_canteen_cohort(c) for c in data.get("canteen_cohorts", [])
    )
    return AttendanceRules(
        version=str(data.get("version", "unversioned")),
        shifts=shifts,
        canteen_cohorts=cohorts,
        classification=_parse_section(ClassificationRules, data.get("classification")),
        payable=_parse_section(PayableHoursRules, data.get("payable_hours")),
        resolution=_parse_section(ResolutionRules, data.get("resolution")),
        night_worker=_parse_section(NightWorkerThresholds, data.get("night_worker")),
        night_link=_parse_section(NightLinkWindows, data.get("night_link")),
        columns=_parse_section(IngestionColumns, data.get("columns")),
        checksum=compute_checksum(data),
    )


def validate_rules(rules: AttendanceRules) -> list[str]:
    """Return a list of structural problems; empty means valid."""
    errors: list[str] = []

    for st in _WORKING_SHIFTS:
        if rules.shift(st) is None:
            errors.append(f"Missing shift rule for '{st.value}'")
    for rule in rules.shifts:
        if rule.late_grace_minutes < 0:
            errors.append(f"{rule.shift_type.value}: late_grace_minutes must be >= 0")
        if not 0 <= rule.overtime_from_hour <= 23:
            errors.append(f"{rule.shift_type.value}: overtime_from_hour out of range")
        if (
            rule.overtime_until_hour is not None
            and rule.overtime_until_hour < rule.overtime_from_hour
        ):
            errors.append(
                f"{rule.shift_type.value}: overtime_until_hour precedes overtime_from_hour"
            )

    if not rules.canteen_cohorts:
        errors.append("At least one canteen cohort is required")
    hours = [c.max_check_in_hour for c in rules.canteen_cohorts]
    if hours != sorted(hours):
        errors.append("Canteen cohorts must be ordered by max_check_in_hour")

    payable = rules.payable
    if payable.hours_cap <= 0:
        errors.append("hours_cap must be positive")
    if payable.full_day_credit_from > payable.full_day_hours:
        errors.append("full_day_credit_from must not exceed full_day_hours")
    if payable.overtime_rounding_above >= payable.hours_cap:
        errors.append("overtime_rounding_above must be below hours_cap")
    if payable.overtime_rounding_step <= 0:
        errors.append("overtime_rounding_step must be positive")

    resolution = rules.resolution
    if resolution.flipped_pair_min_hours > resolution.flipped_pair_max_hours:
        errors.append("flipped_pair_min_hours must not exceed flipped_pair_max_hours")
    if resolution.close_duplicate_minutes <= 0:
        errors.append("close_duplicate_minutes must be positive")

    share = rules.night_worker.check_in_share
    if not Decimal("0") < share <= Decimal("1"):
        errors.append("night_worker.check_in_share must be in (0, 1]")

    classification = rules.classification
    if classification.canteen_from > classification.canteen_until:
        errors.append("classification canteen window is inverted")
    if classification.night_until > classification.night_from:
        errors.append("classification night window must wrap midnight")
    if not classification.night_until <= classification.morning_until <= classification.night_from:
        errors.append("classification morning_until must fall between night_until and night_from")

    link = rules.night_link
    if link.check_in_from_hour > link.check_in_until_hour:
        errors.append("night_link check-in window is inverted")
    if link.check_out_from_hour > link.check_out_until_hour:
        errors.append("night_link check-out window is inverted")

    return errors


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
