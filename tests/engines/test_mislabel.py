"""
Tests for the mislabel resolution passes.

Covers:
- Close-duplicate suppression (anchor kept for repeated check-ins)
- Flipped two-punch days
- Multi-shift segmentation
- Residual same-status runs
- Day-bound safety net
- Composition: input order preserved, pinned punches untouched
"""

from dataclasses import replace
from datetime import time

from attendance_config.schema import DEFAULT_RULES, ClassificationRules
from attendance_engines.mislabel import (
    enforce_day_bounds,
    fix_flipped_pair,
    fix_residual_runs,
    resolve_day,
    resolve_mislabels,
    segment_multiple_shifts,
    suppress_close_duplicates,
)
from attendance_kernel.domain.records import PunchStatus, ShiftType

IN = PunchStatus.CHECK_IN
OUT = PunchStatus.CHECK_OUT


def _statuses(events):
    return [e.status for e in events]


class TestSuppressCloseDuplicates:
    """Same-status punches under 60 minutes apart."""

    def test_later_check_in_suppressed(self, make_event):
        events = [make_event("2024-03-04 08:00", "in"), make_event("2024-03-04 08:20", "in")]
        result = suppress_close_duplicates(events, DEFAULT_RULES)

        assert result[0].processed is False
        assert result[1].processed is True
        assert result[1].duplicate is True
        assert result[1].corrections

    def test_earlier_check_out_suppressed(self, make_event):
        events = [make_event("2024-03-04 17:00", "out"), make_event("2024-03-04 17:30", "out")]
        result = suppress_close_duplicates(events, DEFAULT_RULES)

        assert result[0].duplicate is True
        assert result[1].duplicate is False

    def test_kept_check_in_stays_anchor(self, make_event):
        events = [
            make_event("2024-03-04 08:00", "in"),
            make_event("2024-03-04 08:20", "in"),
            make_event("2024-03-04 08:40", "in"),
        ]
        result = suppress_close_duplicates(events, DEFAULT_RULES)

        assert [e.duplicate for e in result] == [False, True, True]

    def test_an_hour_apart_not_suppressed(self, make_event):
        events = [make_event("2024-03-04 08:00", "in"), make_event("2024-03-04 09:00", "in")]
        result = suppress_close_duplicates(events, DEFAULT_RULES)

        assert not any(e.processed for e in result)

    def test_duplicate_is_not_relabeled(self, make_event):
        events = [make_event("2024-03-04 08:00", "in"), make_event("2024-03-04 08:05", "in")]
        result = suppress_close_duplicates(events, DEFAULT_RULES)

        assert result[1].mislabeled is False
        assert result[1].status is IN


class TestFixFlippedPair:
    """Two punches, wrong order or same label, 7 to 11 hours apart."""

    def test_flipped_pair_relabeled(self, make_event):
        events = [make_event("2024-03-04 08:00", "out"), make_event("2024-03-04 17:00", "in")]
        result = fix_flipped_pair(events, DEFAULT_RULES)

        assert _statuses(result) == [IN, OUT]
        assert all(e.mislabeled for e in result)
        assert result[0].original_status is OUT
        assert result[1].original_status is IN
        assert result[0].shift_type == ShiftType.CANTEEN

    def test_relabeled_shift_uses_rules_cutoffs(self, make_event):
        rules = replace(DEFAULT_RULES, classification=ClassificationRules(canteen_until=time(7, 59)))
        events = [make_event("2024-03-04 08:00", "out"), make_event("2024-03-04 17:00", "in")]

        assert fix_flipped_pair(events, rules)[0].shift_type == ShiftType.MORNING

    def test_same_label_pair_relabeled(self, make_event):
        events = [make_event("2024-03-04 05:00", "in"), make_event("2024-03-04 14:00", "in")]
        result = fix_flipped_pair(events, DEFAULT_RULES)

        assert _statuses(result) == [IN, OUT]
        assert result[0].mislabeled is False
        assert result[1].mislabeled is True

    def test_short_span_left_alone(self, make_event):
        events = [make_event("2024-03-04 08:00", "out"), make_event("2024-03-04 14:00", "in")]
        assert fix_flipped_pair(events, DEFAULT_RULES) == events

    def test_canonical_pair_left_alone(self, make_event):
        events = [make_event("2024-03-04 05:00", "in"), make_event("2024-03-04 14:00", "out")]
        assert fix_flipped_pair(events, DEFAULT_RULES) == events


class TestSegmentMultipleShifts:
    """Busy days split on gaps of 1.5 hours or more."""

    def test_segments_labeled(self, make_event):
        events = [
            make_event("2024-03-04 08:00", "out"),
            make_event("2024-03-04 12:00", "out"),
            make_event("2024-03-04 13:00", "in"),
            make_event("2024-03-04 17:00", "in"),
        ]
        result = segment_multiple_shifts(events, DEFAULT_RULES)

        # [08:00] lone morning, [12:00, 13:00], [17:00] lone afternoon
        assert _statuses(result) == [IN, IN, OUT, OUT]

    def test_no_gap_left_alone(self, make_event):
        events = [
            make_event("2024-03-04 08:00", "out"),
            make_event("2024-03-04 08:30", "in"),
            make_event("2024-03-04 09:00", "out"),
        ]
        assert segment_multiple_shifts(events, DEFAULT_RULES) == events


class TestFixResidualRuns:
    """Leftover same-status neighbours."""

    def test_far_check_ins_flipped(self, make_event):
        events = [make_event("2024-03-04 05:00", "in"), make_event("2024-03-04 14:00", "in")]
        result = fix_residual_runs(events, DEFAULT_RULES)

        assert _statuses(result) == [IN, OUT]
        assert result[1].mislabeled is True

    def test_far_check_outs_flipped(self, make_event):
        events = [make_event("2024-03-04 05:00", "out"), make_event("2024-03-04 14:00", "out")]
        result = fix_residual_runs(events, DEFAULT_RULES)

        assert _statuses(result) == [IN, OUT]
        assert result[0].mislabeled is True

    def test_near_check_outs_suppressed(self, make_event):
        events = [make_event("2024-03-04 17:00", "out"), make_event("2024-03-04 17:30", "out")]
        result = fix_residual_runs(events, DEFAULT_RULES)

        assert result[0].duplicate is True
        assert result[1].status is OUT


class TestEnforceDayBounds:
    """First punch in, last punch out, on days with more than two punches."""

    def test_bounds_enforced(self, make_event):
        events = [
            make_event("2024-03-04 08:00", "out"),
            make_event("2024-03-04 12:00", "in"),
            make_event("2024-03-04 17:00", "in"),
        ]
        result = enforce_day_bounds(events, DEFAULT_RULES)

        assert _statuses(result) == [IN, IN, OUT]
        assert result[1].mislabeled is False

    def test_two_punches_left_alone(self, make_event):
        events = [make_event("2024-03-04 08:00", "out"), make_event("2024-03-04 17:00", "out")]
        assert enforce_day_bounds(events, DEFAULT_RULES) == events


class TestResolveMislabels:
    """Composition across an employee's days."""

    def test_flipped_day_corrected(self, make_event):
        events = [make_event("2024-03-04 08:00", "out"), make_event("2024-03-04 17:00", "in")]
        result = resolve_mislabels(events)

        assert _statuses(result) == [IN, OUT]
        assert all(e.mislabeled for e in result)

    def test_input_order_preserved(self, make_event):
        events = [
            make_event("2024-03-05 17:00", "in", index=3),
            make_event("2024-03-04 05:00", "in", index=0),
            make_event("2024-03-05 08:00", "out", index=2),
            make_event("2024-03-04 14:00", "out", index=1),
        ]
        result = resolve_mislabels(events)

        assert [e.original_index for e in result] == [3, 0, 2, 1]
        # 2024-03-04 was already canonical
        assert result[1] == events[1]
        assert result[3] == events[3]
        assert result[2].status is IN
        assert result[0].status is OUT

    def test_pinned_punches_untouched(self, make_event):
        pinned = make_event("2024-03-04 21:00", "out", cross_day=True)
        events = [
            make_event("2024-03-04 05:00", "out"),
            pinned,
            make_event("2024-03-04 14:00", "out"),
        ]
        result = resolve_day(events, DEFAULT_RULES)

        assert result[1] == pinned

    def test_single_punch_day_unchanged(self, make_event):
        events = [make_event("2024-03-04 08:00", "out")]
        assert resolve_mislabels(events) == tuple(events)
