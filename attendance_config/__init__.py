"""
attendance_config -- single public entrypoint for attendance rules.

Responsibility:
    Provides the ONLY way to obtain a rules table from a file at runtime
    through ``get_active_rules()``.  Engines never read files; they receive
    an ``AttendanceRules`` instance (or fall back to ``DEFAULT_RULES``).

Architecture position:
    Configuration -- sits above ``attendance_kernel`` and below
    ``attendance_engines`` / ``attendance_services``.  The kernel MUST
    NEVER import from ``attendance_config``.

Invariants enforced:
    - Single entrypoint: file-backed rules flow through ``get_active_rules()``.
    - Validation: a table that fails ``validate_rules`` is never returned.
    - Deterministic: the same YAML always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the rules file does not exist.
    - ``InvalidRulesError`` -- the rules file parses but fails validation,
      or a value in it is malformed.

Audit relevance:
    Every successful call emits an ``ATTENDANCE_CONFIG_TRACE`` log entry
    with the rules version and checksum, tying each reconciliation batch to
    the exact thresholds that produced its payable hours.
"""

from __future__ import annotations

import logging
from pathlib import Path

from attendance_config.loader import load_yaml_file, parse_rules, validate_rules
from attendance_config.schema import DEFAULT_RULES, AttendanceRules
from attendance_kernel.exceptions import InvalidRulesError

_logger = logging.getLogger("attendance_kernel.config")

_DEFAULT_RULES_FILE = Path(__file__).parent / "sets" / "default.yaml"

__all__ = ["AttendanceRules", "DEFAULT_RULES", "get_active_rules"]


def get_active_rules(rules_file: Path | None = None) -> AttendanceRules:
    """Load, validate and return the active attendance rules.

    Args:
        rules_file: Override path to a rules YAML file.
            Defaults to attendance_config/sets/default.yaml.

    Returns:
        A frozen ``AttendanceRules`` carrying the source checksum.

    Raises:
        FileNotFoundError: If the rules file does not exist.
        InvalidRulesError: If parsing or validation fails.
    """
    path = rules_file or _DEFAULT_RULES_FILE
    data = load_yaml_file(path)

    try:
        rules = parse_rules(data)
    except (KeyError, ValueError) as exc:
        raise InvalidRulesError([str(exc)], source=str(path)) from exc

    errors = validate_rules(rules)
    if errors:
        raise InvalidRulesError(errors, source=str(path))

    _logger.info(
        "ATTENDANCE_CONFIG_TRACE",
        extra={
            "trace_type": "ATTENDANCE_CONFIG_TRACE",
            "rules_version": rules.version,
            "checksum": rules.checksum,
            "rules_file": str(path),
            "shift_count": len(rules.shifts),
            "canteen_cohort_count": len(rules.canteen_cohorts),
        },
    )
    return rules
