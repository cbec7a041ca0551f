"""Tests for the ATTENDANCE_ENGINE_TRACE decorator."""

import logging
from datetime import date
from decimal import Decimal

from attendance_engines.night_shift import link_night_shifts
from attendance_engines.tracer import compute_input_fingerprint, traced_engine
from attendance_kernel.domain.records import ShiftType


@traced_engine("sample_engine", "2.1", fingerprint_fields=("values", "label"))
def _sample(values, label=None):
    return sum(values)


def _traces(caplog):
    return [r for r in caplog.records if r.getMessage() == "ATTENDANCE_ENGINE_TRACE"]


class TestTracedEngine:
    def test_result_unchanged(self):
        assert _sample([1, 2, 3]) == 6

    def test_trace_emitted(self, caplog):
        with caplog.at_level(logging.INFO, logger="attendance_kernel"):
            _sample([Decimal("1.5")], label="x")

        (trace,) = _traces(caplog)
        assert trace.engine_name == "sample_engine"
        assert trace.engine_version == "2.1"
        assert len(trace.input_fingerprint) == 16
        assert trace.function.endswith("_sample")

    def test_positional_and_keyword_calls_match(self, caplog):
        with caplog.at_level(logging.INFO, logger="attendance_kernel"):
            _sample([1], "x")
            _sample(values=[1], label="x")

        first, second = _traces(caplog)
        assert first.input_fingerprint == second.input_fingerprint

    def test_pipeline_engines_traced(self, caplog, make_event):
        with caplog.at_level(logging.INFO, logger="attendance_kernel"):
            link_night_shifts([make_event("2024-03-04 21:00", "in")])

        assert [t.engine_name for t in _traces(caplog)] == ["night_shift_linker"]


class TestInputFingerprint:
    def test_deterministic(self):
        args = {"when": date(2024, 3, 4), "shift": ShiftType.NIGHT, "hours": Decimal("9.00")}
        fields = ("when", "shift", "hours")

        assert compute_input_fingerprint(fields, args) == compute_input_fingerprint(fields, dict(args))

    def test_sensitive_to_values(self):
        assert compute_input_fingerprint(("a",), {"a": 1}) != compute_input_fingerprint(("a",), {"a": 2})

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(("a",), {"a": None})
