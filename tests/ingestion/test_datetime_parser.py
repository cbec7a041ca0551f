"""Tests for date/time cell parsing."""

from datetime import date, datetime, timezone

import pytest

from attendance_ingestion.datetime_parser import parse_date_time, parse_shift_times


class TestParseDateTime:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2024-03-04 08:15:30", datetime(2024, 3, 4, 8, 15, 30)),
            ("2024-03-04 08:15", datetime(2024, 3, 4, 8, 15)),
            ("2024-03-04T08:15", datetime(2024, 3, 4, 8, 15)),
            ("2024/03/04 21:05", datetime(2024, 3, 4, 21, 5)),
            ("03/04/2024 21:05", datetime(2024, 3, 4, 21, 5)),
            ("3/4/2024 21:05:09", datetime(2024, 3, 4, 21, 5, 9)),
            ("3/4/2024 1:05 PM", datetime(2024, 3, 4, 13, 5)),
            ("03/04/2024 12:05 AM", datetime(2024, 3, 4, 0, 5)),
            ("  2024-03-04 08:15  ", datetime(2024, 3, 4, 8, 15)),
        ],
    )
    def test_known_layouts(self, text, expected):
        assert parse_date_time(text) == expected

    def test_regex_fallback_with_meridiem(self):
        assert parse_date_time("2024-3-4 8:15 pm") == datetime(2024, 3, 4, 20, 15)

    def test_datetime_cell_passthrough(self):
        value = datetime(2024, 3, 4, 8, 15, tzinfo=timezone.utc)
        assert parse_date_time(value) == datetime(2024, 3, 4, 8, 15)

    @pytest.mark.parametrize("value", [None, "", "   ", "garbage", "2024-13-45 10:00"])
    def test_unparseable(self, value):
        assert parse_date_time(value) is None


class TestParseShiftTimes:
    def test_day_shift_same_date(self):
        check_in, check_out = parse_shift_times(date(2024, 3, 4), "05:00", "14:00")

        assert check_in == datetime(2024, 3, 4, 5, 0)
        assert check_out == datetime(2024, 3, 4, 14, 0)

    def test_night_check_out_next_day(self):
        _, check_out = parse_shift_times(date(2024, 3, 4), "21:00", "06:00", "night")
        assert check_out == datetime(2024, 3, 5, 6, 0)

    def test_check_out_before_check_in_rolls(self):
        _, check_out = parse_shift_times(date(2024, 3, 4), "22:00", "02:00", "evening")
        assert check_out == datetime(2024, 3, 5, 2, 0)

    def test_twelve_hour_input(self):
        check_in, _ = parse_shift_times(date(2024, 3, 4), "1:00 PM", "10:00 PM")
        assert check_in == datetime(2024, 3, 4, 13, 0)

    def test_bad_time_rejected(self):
        with pytest.raises(ValueError):
            parse_shift_times(date(2024, 3, 4), "late", "14:00")
