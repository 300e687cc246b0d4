"""Tests for weekly-hours totals and the 40-hour cap."""

from dispatchsched.domain.models import ShiftAssignment
from dispatchsched.validation.weekly_hours import (
    MAX_WEEKLY_HOURS,
    calculate_weekly_hours,
    validate_weekly_hours,
)


def make_shift(day, start, end):
    return ShiftAssignment(employee_id="e1", date=day, start_time=start, end_time=end)


class TestWeeklyHours:
    """Tests for calculate_weekly_hours and validate_weekly_hours."""

    def test_overnight_shifts_counted_once(self):
        shifts = [
            make_shift("2025-01-06", "20:00", "06:00"),
            make_shift("2025-01-07", "20:00", "06:00"),
        ]
        assert calculate_weekly_hours(shifts) == 20

    def test_empty(self):
        assert calculate_weekly_hours([]) == 0

    def test_additive(self):
        a = [make_shift("2025-01-06", "06:00", "18:00"), make_shift("2025-01-07", "17:00", "21:00")]
        b = [make_shift("2025-01-08", "20:00", "06:00")]
        total = calculate_weekly_hours(a + b)
        assert total == calculate_weekly_hours(a) + calculate_weekly_hours(b)

    def test_over_cap_without_overtime(self):
        shifts = [make_shift(f"2025-01-0{d}", "06:00", "18:00") for d in (6, 7, 8, 9)]
        result = validate_weekly_hours(shifts, overtime_approved=False)
        assert not result.is_valid
        assert result.errors == ["Weekly hours (48) exceed maximum allowed (40)"]

    def test_over_cap_with_overtime(self):
        shifts = [make_shift(f"2025-01-0{d}", "06:00", "18:00") for d in (6, 7, 8, 9)]
        assert validate_weekly_hours(shifts, overtime_approved=True).is_valid

    def test_exactly_at_cap(self):
        shifts = [make_shift(f"2025-01-0{d}", "07:00", "17:00") for d in (6, 7, 8, 9)]
        assert calculate_weekly_hours(shifts) == MAX_WEEKLY_HOURS
        assert validate_weekly_hours(shifts).is_valid

    def test_malformed_times_reported_not_raised(self):
        shifts = [
            make_shift("2025-01-06", "9am", "17:00"),
            make_shift("2025-01-07", "07:00", "7:00"),
            make_shift("2025-01-08", "07:00", "17:00"),
        ]
        result = validate_weekly_hours(shifts)
        assert result.errors == [
            "Invalid time format: start_time '9am' must be in HH:mm format",
            "Invalid time format: end_time '7:00' must be in HH:mm format",
        ]

    def test_malformed_times_left_out_of_total(self):
        shifts = [make_shift(f"2025-01-0{d}", "06:00", "18:00") for d in (6, 7, 8)]
        shifts.append(make_shift("2025-01-09", "6:00", "18:00"))
        result = validate_weekly_hours(shifts)
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Invalid time format: start_time")
