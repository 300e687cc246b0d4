"""Tests for domain models and shift-pattern policies."""

import pytest

from dispatchsched.domain.models import (
    Employee,
    EmployeeRole,
    ShiftAssignment,
    ShiftCategory,
    ShiftOption,
    ShiftPattern,
    ShiftStatus,
    StaffingRequirement,
    TimeOffRequest,
    TimeOffStatus,
    TimeOffType,
)
from dispatchsched.domain.patterns import (
    FourTenPolicy,
    ThreeTwelvePlusFourPolicy,
    get_pattern_policy,
)


class TestShiftPattern:
    """Tests for pattern name resolution."""

    @pytest.mark.parametrize("name", ["four_ten", "4x10", "Pattern_A", ShiftPattern.FOUR_TEN])
    def test_four_ten_aliases(self, name):
        assert ShiftPattern.from_name(name) is ShiftPattern.FOUR_TEN

    @pytest.mark.parametrize("name", ["three_twelve_plus_four", "3x12+4", "pattern_b"])
    def test_three_twelve_aliases(self, name):
        assert ShiftPattern.from_name(name) is ShiftPattern.THREE_TWELVE_PLUS_FOUR

    def test_unknown_pattern(self):
        with pytest.raises(ValueError, match="Unknown shift pattern: 5x8"):
            ShiftPattern.from_name("5x8")

    def test_labels(self):
        assert ShiftPattern.FOUR_TEN.label == "4x10"
        assert ShiftPattern.THREE_TWELVE_PLUS_FOUR.label == "3x12+4"


class TestPatternPolicies:
    """Tests for pattern policies."""

    def test_four_ten(self):
        policy = get_pattern_policy("4x10")
        assert isinstance(policy, FourTenPolicy)
        assert policy.cycle_length() == 4
        assert policy.is_allowed_duration(10)
        assert not policy.is_allowed_duration(12)
        assert policy.max_consecutive_days() == 4

    def test_three_twelve_plus_four(self):
        policy = get_pattern_policy(ShiftPattern.THREE_TWELVE_PLUS_FOUR)
        assert isinstance(policy, ThreeTwelvePlusFourPolicy)
        assert policy.allowed_durations() == frozenset({12, 4})
        assert [policy.expected_duration(i) for i in range(4)] == [12, 12, 12, 4]

    def test_expected_duration_wraps(self):
        policy = ThreeTwelvePlusFourPolicy()
        assert policy.expected_duration(4) == 12
        assert policy.expected_duration(7) == 4


class TestEmployee:
    """Tests for Employee."""

    def test_defaults(self):
        employee = Employee(id="e1", shift_pattern="4x10")
        assert employee.name == "e1"
        assert employee.role is EmployeeRole.DISPATCHER
        assert employee.weekly_hours_cap == 40
        assert not employee.is_supervisor

    def test_from_record_camel_case(self):
        employee = Employee.from_record(
            {
                "id": 7,
                "full_name": "Dana",
                "role": "Supervisor",
                "shiftPattern": "3x12+4",
                "weeklyHoursCap": None,
                "preferredShiftCategory": "graveyard",
            }
        )
        assert employee.id == "7"
        assert employee.name == "Dana"
        assert employee.is_supervisor
        assert employee.shift_pattern is ShiftPattern.THREE_TWELVE_PLUS_FOUR
        assert employee.weekly_hours_cap == 40
        assert employee.preferred_shift_category is ShiftCategory.GRAVEYARD


class TestShiftOptionAndAssignment:
    """Tests for shift templates and assignments."""

    def test_option_duration_derived(self):
        option = ShiftOption("g", "graveyard", "20:00", "06:00")
        assert option.duration_hours == 10
        assert option.crosses_midnight
        assert option.category is ShiftCategory.GRAVEYARD

    def test_from_option_copies_supervisor_flag(self):
        supervisor = Employee(id="s1", role=EmployeeRole.SUPERVISOR)
        option = ShiftOption("d", ShiftCategory.DAY, "07:00", "17:00")
        assignment = ShiftAssignment.from_option(supervisor, "2025-01-06", option, "p1")
        assert assignment.is_supervisor
        assert assignment.shift_option_id == "d"
        assert assignment.status is ShiftStatus.SCHEDULED
        assert assignment.duration_hours == 10

    def test_record_round_trip_keeps_id(self):
        assignment = ShiftAssignment.from_record(
            {
                "id": "shift-1",
                "employeeId": "e1",
                "date": "2025-01-06",
                "startTime": "07:00",
                "endTime": "17:00",
                "status": "completed",
            }
        )
        record = assignment.to_record()
        assert record["id"] == "shift-1"
        assert record["status"] == "completed"
        assert record["employee_id"] == "e1"


class TestStaffingRequirement:
    """Tests for StaffingRequirement."""

    def test_legacy_supervisor_flag(self):
        requirement = StaffingRequirement.from_record(
            {
                "id": "r1",
                "start_time": "05:00",
                "end_time": "09:00",
                "min_employees": 6,
                "requires_supervisor": True,
            }
        )
        assert requirement.min_supervisors == 1
        assert requirement.requires_supervisor
        assert requirement.label == "05:00-09:00"

    def test_weekday_restriction(self):
        requirement = StaffingRequirement("r1", "07:00", "17:00", 2, day_of_week=0)
        assert requirement.applies_on("2025-01-05")
        assert not requirement.applies_on("2025-01-06")


class TestTimeOffRequest:
    def test_from_record(self):
        request = TimeOffRequest.from_record(
            {
                "id": "t1",
                "employeeId": "e1",
                "startDate": "2025-01-06",
                "endDate": "2025-01-07",
                "status": "approved",
                "type": "jury-duty",
            }
        )
        assert request.is_approved
        assert request.status is TimeOffStatus.APPROVED
        assert request.request_type is TimeOffType.JURY_DUTY
