"""Tests for the CP-SAT planner."""

from collections import Counter
from datetime import date, timedelta

import pytest

from dispatchsched.domain.models import (
    Employee,
    EmployeeRole,
    ShiftCategory,
    ShiftOption,
    StaffingRequirement,
    TimeOffRequest,
    TimeOffStatus,
)
from dispatchsched.scheduling.cpsat_solver import (
    CPSATSolver,
    PlannedShift,
    SolverConfig,
    group_plan_by_date,
)


def period(days: int, start: date = date(2025, 1, 5)) -> list[date]:
    return [start + timedelta(days=i) for i in range(days)]


class TestCPSATSolver:
    """Tests for CPSATSolver."""

    @pytest.fixture
    def solver(self):
        return CPSATSolver(SolverConfig(time_limit_seconds=10.0, num_workers=1))

    @pytest.fixture
    def options(self):
        return [
            ShiftOption("day-10", ShiftCategory.DAY, "07:00", "17:00"),
            ShiftOption("day-12", ShiftCategory.DAY, "06:00", "18:00"),
        ]

    @pytest.fixture
    def block(self):
        return StaffingRequirement("day", "07:00", "17:00", min_employees=1)

    def test_covers_every_block(self, solver, options, block):
        employees = [Employee(id=f"e{i}") for i in range(3)]
        dates = period(3)
        result = solver.solve(employees, dates, [(d, block) for d in dates], options, [])

        assert result.is_feasible
        assert result.shortfall == 0
        assert sorted({p.date for p in result.plan}) == dates

    def test_one_shift_per_employee_per_day(self, solver, options, block):
        employees = [Employee(id=f"e{i}") for i in range(3)]
        dates = period(5)
        result = solver.solve(employees, dates, [(d, block) for d in dates], options, [])

        counts = Counter((p.employee_id, p.date) for p in result.plan)
        assert max(counts.values()) == 1

    def test_pattern_lengths_only(self, solver, options, block):
        employees = [
            Employee(id="e1", shift_pattern="4x10"),
            Employee(id="e2", shift_pattern="3x12+4"),
        ]
        dates = period(2)
        result = solver.solve(employees, dates, [(d, block) for d in dates], options, [])

        for planned in result.plan:
            expected = 10 if planned.employee_id == "e1" else 12
            assert planned.option.duration_hours == expected

    def test_consecutive_day_cap(self, solver, options, block):
        employee = Employee(id="e1", weekly_hours_cap=60)
        dates = period(6)
        result = solver.solve([employee], dates, [(d, block) for d in dates], options, [])

        worked = [p.date for p in result.plan]
        # A full four-day run ends the employee's availability, so one block is lost.
        assert result.shortfall == 1
        assert len(worked) == 5
        run = longest = 0
        for day in dates:
            run = run + 1 if day in worked else 0
            longest = max(longest, run)
        assert longest <= 4

    def test_weekly_ceiling(self, solver, options, block):
        employee = Employee(id="e1", weekly_hours_cap=20)
        dates = period(4)
        result = solver.solve([employee], dates, [(d, block) for d in dates], options, [])

        assert sum(p.option.duration_hours for p in result.plan) <= 20
        assert result.shortfall == 2

    def test_time_off_respected(self, solver, options, block):
        employees = [Employee(id="e1"), Employee(id="e2")]
        dates = period(2)
        time_off = [
            TimeOffRequest("t1", "e1", "2025-01-05", "2025-01-06", status=TimeOffStatus.APPROVED)
        ]
        result = solver.solve(employees, dates, [(d, block) for d in dates], options, time_off)

        assert all(p.employee_id == "e2" for p in result.plan)
        assert result.shortfall == 0

    def test_no_overlap_across_midnight(self, solver):
        options = [
            ShiftOption("early", ShiftCategory.EARLY, "05:00", "15:00"),
            ShiftOption("grave", ShiftCategory.GRAVEYARD, "20:00", "06:00"),
        ]
        sunday, monday = period(2)
        blocks = [
            (sunday, StaffingRequirement("night", "22:00", "02:00", min_employees=1)),
            (monday, StaffingRequirement("morning", "07:00", "09:00", min_employees=1)),
        ]
        result = solver.solve([Employee(id="e1")], [sunday, monday], blocks, options, [])

        assert result.is_feasible
        assert len(result.plan) == 1
        assert result.shortfall == 1

    def test_supervisor_coverage(self, solver, options):
        employees = [Employee(id="e1"), Employee(id="s1", role=EmployeeRole.SUPERVISOR)]
        dates = period(1)
        block = StaffingRequirement("day", "07:00", "17:00", min_employees=1, min_supervisors=1)
        result = solver.solve(employees, dates, [(dates[0], block)], options, [])

        assert [p.employee_id for p in result.plan] == ["s1"]

    def test_plan_sorted_by_date_then_roster(self, solver, options):
        employees = [Employee(id="e1"), Employee(id="e2")]
        dates = period(2)
        block = StaffingRequirement("day", "07:00", "17:00", min_employees=2)
        result = solver.solve(employees, dates, [(d, block) for d in dates], options, [])

        assert [(p.date, p.employee_id) for p in result.plan] == [
            (dates[0], "e1"),
            (dates[0], "e2"),
            (dates[1], "e1"),
            (dates[1], "e2"),
        ]

    def test_group_plan_by_date(self, options):
        day_one, day_two = period(2)
        plan = [
            PlannedShift("e1", day_one, options[0]),
            PlannedShift("e2", day_one, options[0]),
            PlannedShift("e1", day_two, options[0]),
        ]
        grouped = group_plan_by_date(plan)
        assert [p.employee_id for p in grouped[day_one]] == ["e1", "e2"]
        assert len(grouped[day_two]) == 1
