"""Tests for staffing validation and staffing-level analysis."""

import pytest

from dispatchsched.domain.models import ShiftAssignment, ShiftStatus, StaffingRequirement
from dispatchsched.validation.staffing import (
    calculate_staffing_levels,
    find_understaffed_periods,
    get_applicable_requirements,
    measure_block,
    suggest_shift_adjustments,
    validate_schedule,
    validate_shift_assignment,
)


def make_shift(day, start="05:00", end="15:00", employee_id="e1", **kwargs):
    return ShiftAssignment(
        employee_id=employee_id, date=day, start_time=start, end_time=end, **kwargs
    )


class TestValidateSchedule:
    """Tests for validate_schedule."""

    @pytest.fixture
    def morning(self):
        return StaffingRequirement("r1", "05:00", "09:00", min_employees=6)

    def test_insufficient_staffing(self, morning):
        shifts = [make_shift("2024-03-15", employee_id=f"e{i}") for i in range(3)]
        result = validate_schedule(shifts, [morning])
        assert not result.is_valid
        assert result.errors == [
            "Insufficient staffing during 05:00-09:00: 3 employees scheduled, minimum 6 required"
        ]

    def test_met(self, morning):
        shifts = [make_shift("2024-03-15", employee_id=f"e{i}") for i in range(6)]
        assert validate_schedule(shifts, [morning]).is_valid

    def test_idempotent(self, morning):
        shifts = [make_shift("2024-03-15", employee_id=f"e{i}") for i in range(2)]
        requirements = [morning, StaffingRequirement("r2", "09:00", "17:00", 1, min_supervisors=1)]
        first = validate_schedule(shifts, requirements)
        second = validate_schedule(shifts, requirements)
        assert first.errors == second.errors
        assert first.is_valid == second.is_valid

    def test_no_supervisor(self):
        requirement = StaffingRequirement("r1", "07:00", "17:00", 1, min_supervisors=1)
        result = validate_schedule([make_shift("2025-01-06", "07:00", "17:00")], [requirement])
        assert result.errors == ["No supervisor scheduled during 07:00-17:00"]

    def test_too_few_supervisors(self):
        requirement = StaffingRequirement("r1", "07:00", "17:00", 2, min_supervisors=2)
        shifts = [
            make_shift("2025-01-06", "07:00", "17:00", employee_id="s1", is_supervisor=True),
            make_shift("2025-01-06", "07:00", "17:00", employee_id="e1"),
        ]
        result = validate_schedule(shifts, [requirement])
        assert result.errors == [
            "Insufficient supervisors during 07:00-17:00: 1 supervisors scheduled, "
            "minimum 2 required"
        ]

    def test_cancelled_shifts_do_not_count(self, morning):
        shifts = [make_shift("2024-03-15", employee_id=f"e{i}") for i in range(6)]
        shifts[0].status = ShiftStatus.CANCELLED
        result = validate_schedule(shifts, [morning])
        assert "5 employees scheduled" in result.errors[0]

    def test_explicit_dates_report_empty_days(self, morning):
        result = validate_schedule([], [morning], dates=["2025-01-06"])
        assert result.errors == [
            "Insufficient staffing during 05:00-09:00: 0 employees scheduled, minimum 6 required"
        ]


class TestStaffingLevels:
    """Tests for block measurement."""

    def test_overnight_shift_counts_next_morning(self):
        requirement = StaffingRequirement("r1", "05:00", "09:00", 1)
        shift = make_shift("2025-01-05", "20:00", "06:00")
        level = measure_block([shift], requirement, "2025-01-06")
        assert level.current_staff == 1
        assert level.is_met

    def test_shift_ending_at_block_start_does_not_count(self):
        requirement = StaffingRequirement("r1", "17:00", "23:00", 1)
        shift = make_shift("2025-01-06", "07:00", "17:00")
        level = measure_block([shift], requirement, "2025-01-06")
        assert level.current_staff == 0
        assert level.staff_shortfall == 1

    def test_overnight_block(self):
        requirement = StaffingRequirement("r1", "23:00", "05:00", 1)
        shift = make_shift("2025-01-06", "20:00", "06:00")
        level = measure_block([shift], requirement, "2025-01-06")
        assert level.current_staff == 1

    def test_after_midnight_shift_counts_toward_wrapping_block(self):
        requirement = StaffingRequirement("r1", "22:00", "06:00", min_employees=2)
        shifts = [
            make_shift("2025-01-05", "22:00", "08:00", "e1"),
            make_shift("2025-01-06", "00:00", "04:00", "e2"),
        ]
        assert measure_block(shifts, requirement, "2025-01-05").current_staff == 2
        result = validate_schedule(shifts, [requirement], dates=["2025-01-05"])
        assert result.is_valid
        assert result.errors == []

    def test_next_day_shift_outside_block_does_not_count(self):
        requirement = StaffingRequirement("r1", "22:00", "06:00", min_employees=1)
        shift = make_shift("2025-01-06", "06:00", "16:00")
        assert measure_block([shift], requirement, "2025-01-05").current_staff == 0

    def test_levels_ordered_by_date_then_block(self):
        requirements = [
            StaffingRequirement("a", "05:00", "09:00", 1),
            StaffingRequirement("b", "09:00", "17:00", 1),
        ]
        shifts = [make_shift("2025-01-07"), make_shift("2025-01-06")]
        levels = calculate_staffing_levels(shifts, requirements)
        assert [(lv.date, lv.requirement.id) for lv in levels] == [
            ("2025-01-06", "a"),
            ("2025-01-06", "b"),
            ("2025-01-07", "a"),
            ("2025-01-07", "b"),
        ]

    def test_find_understaffed(self):
        requirements = [StaffingRequirement("a", "05:00", "09:00", 2)]
        shifts = [
            make_shift("2025-01-06"),
            make_shift("2025-01-07"),
            make_shift("2025-01-07", employee_id="e2"),
        ]
        understaffed = find_understaffed_periods(shifts, requirements)
        assert [lv.date for lv in understaffed] == ["2025-01-06"]


class TestApplicableRequirements:
    """Tests for weekday and holiday selection."""

    @pytest.fixture
    def requirements(self):
        return [
            StaffingRequirement("regular", "07:00", "17:00", 3),
            StaffingRequirement("sunday", "05:00", "09:00", 1, day_of_week=0),
            StaffingRequirement("holiday", "07:00", "17:00", 1, is_holiday=True),
        ]

    def test_weekday(self, requirements):
        ids = [r.id for r in get_applicable_requirements(requirements, "2025-01-06")]
        assert ids == ["regular"]

    def test_sunday(self, requirements):
        ids = [r.id for r in get_applicable_requirements(requirements, "2025-01-05")]
        assert ids == ["regular", "sunday"]

    def test_holiday_replaces_regular(self, requirements):
        ids = [r.id for r in get_applicable_requirements(requirements, "2025-01-06", True)]
        assert ids == ["holiday"]

    def test_holiday_without_holiday_blocks(self, requirements):
        regular_only = requirements[:2]
        ids = [r.id for r in get_applicable_requirements(regular_only, "2025-01-06", True)]
        assert ids == ["regular"]

    def test_holiday_dates_in_levels(self, requirements):
        levels = calculate_staffing_levels(
            [make_shift("2025-01-06", "07:00", "17:00")],
            requirements,
            holidays=["2025-01-06"],
        )
        assert [lv.requirement.id for lv in levels] == ["holiday"]
        assert levels[0].is_met


class TestSuggestions:
    """Tests for suggest_shift_adjustments."""

    def test_understaffed_with_supervisor(self):
        requirement = StaffingRequirement("r1", "07:00", "17:00", 3, min_supervisors=1)
        adjustments = suggest_shift_adjustments(
            [make_shift("2025-01-06", "07:00", "17:00")], [requirement]
        )
        assert adjustments.suggestions == [
            "Need 2 more staff during 07:00-17:00 on 2025-01-06 "
            "(including at least one supervisor)"
        ]

    def test_supervisor_only(self):
        requirement = StaffingRequirement("r1", "07:00", "17:00", 1, min_supervisors=1)
        adjustments = suggest_shift_adjustments(
            [make_shift("2025-01-06", "07:00", "17:00")], [requirement]
        )
        assert adjustments.suggestions == [
            "Need 1 more supervisor(s) during 07:00-17:00 on 2025-01-06"
        ]

    def test_overstaffed(self):
        requirement = StaffingRequirement("r1", "07:00", "17:00", 1)
        shifts = [make_shift("2025-01-06", "07:00", "17:00", employee_id=f"e{i}") for i in range(4)]
        adjustments = suggest_shift_adjustments(shifts, [requirement])
        assert len(adjustments.overstaffed) == 1
        assert adjustments.suggestions == [
            "Consider reducing staff by 3 during 07:00-17:00 on 2025-01-06"
        ]

    def test_one_extra_is_not_overstaffed(self):
        requirement = StaffingRequirement("r1", "07:00", "17:00", 1)
        shifts = [make_shift("2025-01-06", "07:00", "17:00", employee_id=f"e{i}") for i in range(2)]
        assert suggest_shift_adjustments(shifts, [requirement]).suggestions == []


class TestValidateShiftAssignment:
    """Tests for field-level shift checks."""

    def test_eight_hour_shift(self):
        result = validate_shift_assignment(make_shift("2024-03-15", "09:00", "17:00"))
        assert result.errors == ["Invalid shift duration: must be either 4, 10, or 12 hours"]

    @pytest.mark.parametrize(
        "start,end", [("07:00", "17:00"), ("18:00", "06:00"), ("17:00", "21:00")]
    )
    def test_valid_durations(self, start, end):
        assert validate_shift_assignment(make_shift("2024-03-15", start, end)).is_valid

    def test_bad_date(self):
        result = validate_shift_assignment(make_shift("2024-3-15", "07:00", "17:00"))
        assert result.errors == ["Invalid date format: must be YYYY-MM-DD"]

    def test_bad_times_skip_duration(self):
        result = validate_shift_assignment(make_shift("2024-03-15", "7:00", "25:00"))
        assert result.errors == [
            "Invalid time format: start_time must be in HH:mm format",
            "Invalid time format: end_time must be in HH:mm format",
        ]
