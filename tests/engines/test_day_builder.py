"""
Tests for the day builder.

Covers:
- Paired, partial and cross-day records
- Linked night shifts sealing their anchor date
- Merging several shifts on one date
- Audit trail: no punch is lost
"""

from datetime import date, datetime
from decimal import Decimal

from attendance_engines.day_builder import (
    NOTE_CROSS_DAY,
    NOTE_MERGED,
    NOTE_MISSING_CHECK_IN,
    NOTE_MISSING_CHECK_OUT,
    NOTE_NIGHT_SHIFT,
    build_daily_records,
)
from attendance_engines.mislabel import resolve_mislabels
from attendance_engines.night_shift import link_night_shifts
from attendance_kernel.domain.records import MISSING_LABEL, ShiftType


def _build(events):
    linked = link_night_shifts(events)
    return build_daily_records(linked.events, linked.links)


class TestPairedRecords:
    """One check-in and one check-out on a date."""

    def test_morning_shift(self, make_event):
        records = _build([
            make_event("2024-03-04 05:00", "in"),
            make_event("2024-03-04 14:00", "out"),
        ])

        assert len(records) == 1
        record = records[0]
        assert record.date == date(2024, 3, 4)
        assert record.shift_type == ShiftType.MORNING
        assert record.hours_worked == Decimal("9.00")
        assert record.is_late is False
        assert record.early_leave is False
        assert record.display_check_in == "05:00"
        assert record.display_check_out == "14:00"
        assert len(record.all_time_records) == 2
        assert record.corrected_records is False

    def test_late_and_early_flags(self, make_event):
        record = _build([
            make_event("2024-03-04 05:20", "in"),
            make_event("2024-03-04 11:00", "out"),
        ])[0]

        assert record.is_late is True
        assert record.early_leave is True
        assert record.hours_worked == Decimal("5.67")

    def test_cross_day_pair_outside_link_window(self, make_event):
        records = _build([
            make_event("2024-03-04 22:00", "in"),
            make_event("2024-03-05 08:30", "out"),
        ])

        assert len(records) == 1
        record = records[0]
        assert record.date == date(2024, 3, 4)
        assert record.shift_type == ShiftType.NIGHT
        assert record.cross_day is True
        assert record.notes == NOTE_CROSS_DAY
        assert record.hours_worked == Decimal("10.50")
        assert len(record.all_time_records) == 2


class TestPartialRecords:
    """Orphan punches become flagged partial records."""

    def test_missing_check_out(self, make_event):
        record = _build([make_event("2024-03-04 05:00", "in")])[0]

        assert record.missing_check_out is True
        assert record.missing_check_in is False
        assert record.hours_worked == Decimal("0.00")
        assert record.display_check_out == MISSING_LABEL
        assert record.notes == NOTE_MISSING_CHECK_OUT

    def test_missing_check_in(self, make_event):
        record = _build([make_event("2024-03-04 14:00", "out")])[0]

        assert record.missing_check_in is True
        assert record.display_check_in == MISSING_LABEL
        assert record.notes == NOTE_MISSING_CHECK_IN

    def test_span_over_one_day_becomes_two_partials(self, make_event):
        records = _build([
            make_event("2024-03-04 05:00", "in"),
            make_event("2024-03-06 14:00", "out"),
        ])

        assert [r.date for r in records] == [date(2024, 3, 4), date(2024, 3, 6)]
        assert records[0].missing_check_out is True
        assert records[1].missing_check_in is True


class TestNightShiftRecords:
    """Linked night shifts."""

    def test_single_record_on_anchor_date(self, make_event):
        records = _build([
            make_event("2024-03-04 21:00", "in"),
            make_event("2024-03-05 05:30", "out"),
        ])

        assert len(records) == 1
        record = records[0]
        assert record.date == date(2024, 3, 4)
        assert record.shift_type == ShiftType.NIGHT
        assert record.hours_worked == Decimal("9.00")
        assert record.notes == NOTE_NIGHT_SHIFT
        assert record.last_check_out == datetime(2024, 3, 5, 5, 30)
        assert len(record.all_time_records) == 2

    def test_anchor_date_sealed(self, make_event):
        stray = make_event("2024-03-04 10:00", "in")
        records = _build([
            stray,
            make_event("2024-03-04 21:00", "in"),
            make_event("2024-03-05 05:30", "out"),
        ])

        assert len(records) == 1
        assert records[0].first_check_in == datetime(2024, 3, 4, 21, 0)
        assert stray.original_index in {e.original_index for e in records[0].all_time_records}

    def test_next_day_shift_kept(self, make_event):
        records = _build([
            make_event("2024-03-04 21:00", "in"),
            make_event("2024-03-05 05:30", "out"),
            make_event("2024-03-05 13:00", "in"),
            make_event("2024-03-05 22:00", "out"),
        ])

        assert [r.date for r in records] == [date(2024, 3, 4), date(2024, 3, 5)]
        assert records[1].shift_type == ShiftType.EVENING
        assert records[1].hours_worked == Decimal("9.00")

    def test_duplicate_on_trailing_morning_kept_for_audit(self, make_event):
        events = [
            make_event("2024-03-04 21:00", "in"),
            make_event("2024-03-05 05:30", "out"),
            make_event("2024-03-05 05:40", "out"),
        ]
        records = _build(resolve_mislabels(events))

        assert len(records) == 1
        trail = {e.original_index for e in records[0].all_time_records}
        assert trail == {e.original_index for e in events}


class TestMerging:
    """Several shifts on one date collapse into one record."""

    def test_two_shifts_merged(self, make_event):
        records = build_daily_records([
            make_event("2024-03-04 05:00", "in"),
            make_event("2024-03-04 09:00", "out"),
            make_event("2024-03-04 13:00", "in"),
            make_event("2024-03-04 17:00", "out"),
        ])

        assert len(records) == 1
        record = records[0]
        assert record.first_check_in == datetime(2024, 3, 4, 5, 0)
        assert record.last_check_out == datetime(2024, 3, 4, 17, 0)
        assert record.shift_type == ShiftType.MORNING
        assert record.hours_worked == Decimal("12.00")
        assert NOTE_MERGED in record.notes
        assert len(record.all_time_records) == 4

    def test_gap_between_shifts_is_credited(self, make_event):
        """The merged day spans first check-in to last check-out."""
        record = build_daily_records([
            make_event("2024-03-04 06:00", "in"),
            make_event("2024-03-04 10:00", "out"),
            make_event("2024-03-04 14:00", "in"),
            make_event("2024-03-04 18:00", "out"),
        ])[0]

        assert record.hours_worked == Decimal("12.00")
        assert record.first_check_in == datetime(2024, 3, 4, 6, 0)
        assert record.last_check_out == datetime(2024, 3, 4, 18, 0)

    def test_partial_merged_into_pair(self, make_event):
        records = build_daily_records([
            make_event("2024-03-04 05:00", "in"),
            make_event("2024-03-04 14:00", "out"),
            make_event("2024-03-04 16:00", "out"),
        ])

        record = records[0]
        assert len(records) == 1
        assert record.missing_check_in is False
        assert record.last_check_out == datetime(2024, 3, 4, 16, 0)
        assert NOTE_MISSING_CHECK_IN not in record.notes

    def test_processed_punches_not_paired(self, make_event):
        records = build_daily_records([
            make_event("2024-03-04 05:00", "in"),
            make_event("2024-03-04 05:10", "in", processed=True, duplicate=True),
            make_event("2024-03-04 14:00", "out"),
        ])

        assert len(records) == 1
        assert records[0].first_check_in == datetime(2024, 3, 4, 5, 0)
        assert records[0].corrected_records is True
        assert len(records[0].all_time_records) == 3


class TestSameInstantPunches:
    """Punches sharing a timestamp pair in original row order."""

    @staticmethod
    def _events(make_event, out_index, in_index):
        return [
            make_event("2024-03-04 22:00", "in", index=0),
            make_event("2024-03-05 06:00", "out", index=out_index),
            make_event("2024-03-05 06:00", "in", index=in_index),
            make_event("2024-03-05 15:00", "out", index=3),
        ]

    def test_check_out_first_closes_overnight_shift(self, make_event):
        first, second = build_daily_records(self._events(make_event, out_index=1, in_index=2))

        assert first.date == date(2024, 3, 4)
        assert first.missing_check_out is False
        assert first.last_check_out == datetime(2024, 3, 5, 6, 0)
        assert second.first_check_in == datetime(2024, 3, 5, 6, 0)
        assert second.last_check_out == datetime(2024, 3, 5, 15, 0)
        assert second.missing_check_in is False

    def test_check_in_first_leaves_overnight_shift_open(self, make_event):
        first, second = build_daily_records(self._events(make_event, out_index=2, in_index=1))

        assert first.date == date(2024, 3, 4)
        assert first.missing_check_out is True
        assert first.last_check_out is None
        assert second.first_check_in == datetime(2024, 3, 5, 6, 0)
        assert second.last_check_out == datetime(2024, 3, 5, 15, 0)
