"""Tests for shift-pattern and consecutive-day validation."""

from datetime import date, timedelta
from itertools import combinations

import pytest

from dispatchsched.domain.models import ShiftAssignment
from dispatchsched.validation.shift_pattern import check_consecutive_days, validate_shift_pattern


def make_shift(day, start="07:00", end="17:00"):
    return ShiftAssignment(employee_id="e1", date=day, start_time=start, end_time=end)


class TestValidateShiftPattern:
    """Tests for validate_shift_pattern."""

    def test_valid_four_ten(self):
        shifts = [make_shift(f"2025-01-0{d}") for d in (6, 7, 8, 9)]
        result = validate_shift_pattern(shifts, "4x10")
        assert result.is_valid
        assert result.errors == []

    def test_valid_three_twelve_plus_four_in_any_order(self):
        shifts = [
            make_shift("2025-01-09", "07:00", "11:00"),
            make_shift("2025-01-07", "06:00", "18:00"),
            make_shift("2025-01-06", "18:00", "06:00"),
            make_shift("2025-01-08", "06:00", "18:00"),
        ]
        assert validate_shift_pattern(shifts, "three_twelve_plus_four").is_valid

    def test_wrong_count(self):
        shifts = [make_shift(f"2025-01-0{d}") for d in (6, 7, 8)]
        result = validate_shift_pattern(shifts, "4x10")
        assert result.errors == ["Pattern requires 4 shifts, but found 3"]

    def test_wrong_length(self):
        shifts = [make_shift(f"2025-01-0{d}") for d in (6, 7, 8)]
        shifts.append(make_shift("2025-01-09", "06:00", "18:00"))
        result = validate_shift_pattern(shifts, "4x10")
        assert result.errors == ["Shift on 2025-01-09 is not 10 hours long"]

    def test_last_shift_not_four_hours(self):
        shifts = [make_shift(f"2025-01-0{d}", "06:00", "18:00") for d in (6, 7, 8, 9)]
        result = validate_shift_pattern(shifts, "3x12+4")
        assert result.errors == ["Last shift on 2025-01-09 is not 4 hours long"]

    def test_unknown_pattern(self):
        result = validate_shift_pattern([], "5x8")
        assert not result.is_valid
        assert result.errors == ["Unknown shift pattern: 5x8"]

    def test_gap_is_reported(self):
        shifts = [make_shift(f"2025-01-{d:02d}") for d in (6, 7, 8, 10)]
        result = validate_shift_pattern(shifts, "4x10")
        assert result.errors == ["Shifts must be on consecutive days"]

    def test_malformed_time_reported_not_raised(self):
        shifts = [make_shift(f"2025-01-0{d}") for d in (6, 7, 8)]
        shifts.append(make_shift("2025-01-09", "9am", "17:00"))
        result = validate_shift_pattern(shifts, "4x10")
        assert not result.is_valid
        assert result.errors == ["Invalid time format: start_time '9am' must be in HH:mm format"]

    def test_malformed_date_reported_not_raised(self):
        shifts = [make_shift(f"2025-01-0{d}") for d in (6, 7, 8)]
        shifts.append(make_shift("01/09/2025"))
        result = validate_shift_pattern(shifts, "4x10")
        assert result.errors == ["Invalid date format: '01/09/2025' must be YYYY-MM-DD"]


class TestCheckConsecutiveDays:
    """Tests for check_consecutive_days."""

    def test_gap_fails(self):
        shifts = [make_shift(d) for d in ("2025-01-01", "2025-01-03", "2025-01-04")]
        result = check_consecutive_days(shifts)
        assert not result.is_valid
        assert result.errors == ["Shifts must be on consecutive days"]

    def test_trivially_valid(self):
        assert check_consecutive_days([]).is_valid
        assert check_consecutive_days([make_shift("2025-01-01")]).is_valid

    def test_across_month_boundary(self):
        shifts = [make_shift(d) for d in ("2025-02-01", "2025-01-31", "2025-01-30")]
        assert check_consecutive_days(shifts).is_valid

    def test_valid_iff_adjacent_days(self):
        base = date(2025, 1, 1)
        for size in range(2, 5):
            for offsets in combinations(range(6), size):
                shifts = [make_shift((base + timedelta(days=o)).isoformat()) for o in offsets]
                expected = all(b - a == 1 for a, b in zip(offsets, offsets[1:]))
                assert check_consecutive_days(shifts).is_valid == expected

    def test_malformed_date_raises(self):
        with pytest.raises(ValueError):
            check_consecutive_days([make_shift("2025-01-01"), make_shift("01/02/2025")])
