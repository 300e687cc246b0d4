"""Tests for date and time arithmetic."""

from datetime import date, datetime

import pytest

from dispatchsched.domain.intervals import (
    block_window,
    date_range,
    day_of_week,
    format_hours,
    is_next_day,
    is_valid_date,
    is_valid_time,
    overlaps,
    parse_date,
    parse_time,
    shift_duration_hours,
    shift_window,
    time_off_window,
    week_start,
    week_start_key,
)


class TestParsing:
    """Tests for date and time parsing."""

    def test_valid_dates(self):
        assert is_valid_date("2025-01-05")
        assert is_valid_date("2024-02-29")

    def test_invalid_dates(self):
        assert not is_valid_date("2025-1-5")
        assert not is_valid_date("2025-02-30")
        assert not is_valid_date("05/01/2025")
        assert not is_valid_date(None)

    def test_valid_times(self):
        assert is_valid_time("00:00")
        assert is_valid_time("23:59")

    def test_invalid_times(self):
        assert not is_valid_time("24:00")
        assert not is_valid_time("9:00")
        assert not is_valid_time("12:60")

    def test_parse_date_passes_dates_through(self):
        assert parse_date(date(2025, 1, 5)) == date(2025, 1, 5)
        assert parse_date(datetime(2025, 1, 5, 9, 30)) == date(2025, 1, 5)

    def test_parse_date_rejects_malformed(self):
        with pytest.raises(ValueError):
            parse_date("2025-13-01")

    def test_parse_time_minutes(self):
        assert parse_time("05:30") == 330

    def test_parse_time_rejects_malformed(self):
        with pytest.raises(ValueError):
            parse_time("5:30")


class TestShiftDuration:
    """Tests for midnight-aware duration."""

    def test_same_day(self):
        assert shift_duration_hours("07:00", "17:00") == 10

    def test_crosses_midnight(self):
        assert shift_duration_hours("20:00", "06:00") == 10
        assert shift_duration_hours("18:00", "06:00") == 12

    def test_ends_at_midnight(self):
        assert shift_duration_hours("14:00", "00:00") == 10

    def test_format_hours(self):
        assert format_hours(48.0) == "48"
        assert format_hours(7.5) == "7.5"


class TestCalendar:
    """Tests for weekday and week arithmetic."""

    def test_day_of_week_starts_on_sunday(self):
        assert day_of_week("2025-01-05") == 0  # Sunday
        assert day_of_week("2025-01-06") == 1
        assert day_of_week("2025-01-11") == 6

    def test_week_start(self):
        assert week_start("2025-01-08") == date(2025, 1, 5)
        assert week_start("2025-01-05") == date(2025, 1, 5)
        assert week_start_key("2025-01-11") == "2025-01-05"
        assert week_start_key("2025-01-12") == "2025-01-12"

    def test_is_next_day(self):
        assert is_next_day("2024-12-31", "2025-01-01")
        assert not is_next_day("2025-01-01", "2025-01-03")
        assert not is_next_day("2025-01-02", "2025-01-01")

    def test_date_range_inclusive(self):
        days = date_range("2025-01-05", "2025-01-07")
        assert days == [date(2025, 1, 5), date(2025, 1, 6), date(2025, 1, 7)]


class TestWindows:
    """Tests for absolute windows and overlap."""

    def test_overlaps_half_open(self):
        assert overlaps(0, 10, 5, 15)
        assert not overlaps(0, 10, 10, 20)
        assert overlaps(0, 10, 2, 3)

    def test_overnight_shift_window(self):
        start, end = shift_window("2025-01-05", "20:00", "06:00")
        assert start == datetime(2025, 1, 5, 20, 0)
        assert end == datetime(2025, 1, 6, 6, 0)

    def test_time_off_window_covers_last_day(self):
        start, end = time_off_window("2025-01-06", "2025-01-07")
        assert start == datetime(2025, 1, 6)
        assert end == datetime(2025, 1, 8)

    def test_overnight_block_window(self):
        start, end = block_window("2025-01-05", "23:00", "05:00")
        assert start == datetime(2025, 1, 5, 23, 0)
        assert end == datetime(2025, 1, 6, 5, 0)

    def test_full_day_block(self):
        start, end = block_window("2025-01-05", "00:00", "00:00")
        assert (end - start).total_seconds() == 24 * 3600
