"""OR-Tools CP-SAT planner for a whole schedule period.

The greedy generator fills one block at a time and can paint itself into a
corner: hours spent early in the week are gone when a later block needs
them. This planner looks at the entire period at once. It applies the same
hard rules as the eligibility gate (one shift per day, weekly ceiling,
pattern-legal lengths, the consecutive-day cap, approved time off) and
minimises staffing and supervisor shortfall, then hours worked, with a small
bonus for preferred shift categories.

The plan it returns is advisory: the generator replays it through the
eligibility gate in date order, so the gate stays the single authority on
what may be placed.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ortools.sat.python import cp_model

from dispatchsched.domain.intervals import (
    block_window,
    overlaps,
    shift_window,
    week_start_key,
)
from dispatchsched.domain.models import Employee, ShiftOption, StaffingRequirement, TimeOffRequest
from dispatchsched.domain.patterns import get_pattern_policy
from dispatchsched.scheduling.helpers import has_time_off_conflict
from dispatchsched.scheduling.tracking import weekly_ceiling

logger = logging.getLogger(__name__)


@dataclass
class SolverConfig:
    """Configuration for the CP-SAT planner.

    Attributes:
        time_limit_seconds: Maximum solver runtime.
        num_workers: Number of parallel workers (0 = auto).
        shortfall_penalty: Cost of each missing seat in a staffing block.
        supervisor_penalty: Cost of each missing supervisor in a block.
        hours_weight: Cost per scheduled hour; keeps the plan from overstaffing.
        preference_weight: Bonus for a shift in the employee's preferred category.
    """

    time_limit_seconds: float = 30.0
    num_workers: int = 0
    shortfall_penalty: int = 100
    supervisor_penalty: int = 100
    hours_weight: int = 1
    preference_weight: int = 2


@dataclass(frozen=True)
class PlannedShift:
    """One shift chosen by the planner."""

    employee_id: str
    date: date
    option: ShiftOption


@dataclass
class SolverResult:
    """Result from the CP-SAT planner.

    Attributes:
        plan: Chosen shifts ordered by date then roster order, or None.
        status: Solver status (OPTIMAL, FEASIBLE, etc.).
        objective_value: Final objective value.
        solve_time_seconds: Time taken to solve.
        num_branches: Number of branches explored.
        num_conflicts: Number of conflicts encountered.
    """

    plan: Optional[list[PlannedShift]]
    status: str
    objective_value: int = 0
    solve_time_seconds: float = 0.0
    num_branches: int = 0
    num_conflicts: int = 0
    shortfall: int = 0

    @property
    def is_optimal(self) -> bool:
        return self.status == "OPTIMAL"

    @property
    def is_feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE")


_STATUS_NAMES = {
    cp_model.OPTIMAL: "OPTIMAL",
    cp_model.FEASIBLE: "FEASIBLE",
    cp_model.INFEASIBLE: "INFEASIBLE",
    cp_model.MODEL_INVALID: "MODEL_INVALID",
    cp_model.UNKNOWN: "UNKNOWN",
}


@dataclass
class _Block:
    day_index: int
    requirement: StaffingRequirement
    covering: list = field(default_factory=list)
    supervisors: list = field(default_factory=list)


class CPSATSolver:
    """Constraint Programming planner using OR-Tools CP-SAT."""

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config or SolverConfig()

    def solve(
        self,
        employees: list[Employee],
        dates: list[date],
        blocks: list[tuple[date, StaffingRequirement]],
        shift_options: list[ShiftOption],
        time_off: list[TimeOffRequest],
        allow_overtime: bool = False,
    ) -> SolverResult:
        """Plan every shift of the period.

        Args:
            employees: Active employees, in roster order.
            dates: Consecutive dates of the period, ascending.
            blocks: (date, requirement) for every applicable staffing block.
            shift_options: Shift templates that may be placed.
            time_off: Approved time off overlapping the period.
            allow_overtime: Whether overtime allowances raise the weekly ceiling.

        Returns:
            SolverResult with the plan and solver statistics.
        """
        model = cp_model.CpModel()
        day_index = {d: i for i, d in enumerate(dates)}

        # Decision variables: x[(e, d, o)] = 1 if employee e works option o on date d
        x: dict[tuple[int, int, int], cp_model.IntVar] = {}
        for e_idx, employee in enumerate(employees):
            policy = get_pattern_policy(employee.shift_pattern)
            for d_idx, day in enumerate(dates):
                for o_idx, option in enumerate(shift_options):
                    if not policy.is_allowed_duration(option.duration_hours):
                        continue
                    if has_time_off_conflict(employee, day, option, time_off):
                        continue
                    x[(e_idx, d_idx, o_idx)] = model.new_bool_var(f"x_{e_idx}_{d_idx}_{o_idx}")

        # worked[e][d] = 1 if employee e has any shift on date d
        worked: dict[tuple[int, int], list] = {}
        for (e_idx, d_idx, o_idx), var in x.items():
            worked.setdefault((e_idx, d_idx), []).append(var)

        # Constraint 1: at most one shift per employee per date
        for day_vars in worked.values():
            model.add_at_most_one(day_vars)

        # Constraint 1b: an overnight shift and the next day's shift never overlap
        windows = {
            (d_idx, o_idx): shift_window(day, option.start_time, option.end_time)
            for d_idx, day in enumerate(dates)
            for o_idx, option in enumerate(shift_options)
        }
        for (e_idx, d_idx, o_idx), var in x.items():
            start, end = windows[(d_idx, o_idx)]
            for o_next in range(len(shift_options)):
                following = x.get((e_idx, d_idx + 1, o_next))
                if following is not None and overlaps(start, end, *windows[(d_idx + 1, o_next)]):
                    model.add(var + following <= 1)

        # Constraint 2: weekly ceiling, in minutes
        for e_idx, employee in enumerate(employees):
            ceiling = int(round(weekly_ceiling(employee, allow_overtime) * 60))
            weeks: dict[str, list] = {}
            for (e, d_idx, o_idx), var in x.items():
                if e != e_idx:
                    continue
                minutes = int(round(shift_options[o_idx].duration_hours * 60))
                weeks.setdefault(week_start_key(dates[d_idx]), []).append(var * minutes)
            for terms in weeks.values():
                model.add(sum(terms) <= ceiling)

        # Constraint 3: once a full run of consecutive days is worked, no more shifts
        for e_idx, employee in enumerate(employees):
            run = get_pattern_policy(employee.shift_pattern).max_consecutive_days()
            done_prev = None
            for d_idx in range(len(dates)):
                done = model.new_bool_var(f"done_{e_idx}_{d_idx}")
                if done_prev is not None:
                    model.add(done >= done_prev)
                if d_idx + 1 >= run:
                    window = []
                    for k in range(d_idx - run + 1, d_idx + 1):
                        window.extend(worked.get((e_idx, k), []))
                    model.add(done >= sum(window) - (run - 1))
                if d_idx + 1 < len(dates):
                    for var in worked.get((e_idx, d_idx + 1), []):
                        model.add(var + done <= 1)
                done_prev = done

        # Coverage of each staffing block by shifts dated the day before through the day after
        model_blocks = []
        for day, requirement in blocks:
            d_idx = day_index[day]
            block_start, block_end = block_window(day, requirement.start_time, requirement.end_time)
            block = _Block(day_index=d_idx, requirement=requirement)
            for (e_idx, shift_d, o_idx), var in x.items():
                if shift_d not in (d_idx - 1, d_idx, d_idx + 1):
                    continue
                start, end = windows[(shift_d, o_idx)]
                if overlaps(start, end, block_start, block_end):
                    block.covering.append(var)
                    if employees[e_idx].is_supervisor:
                        block.supervisors.append(var)
            model_blocks.append(block)

        objective_terms = []
        shortfalls = []
        for b_idx, block in enumerate(model_blocks):
            need = block.requirement.min_employees
            if need > 0:
                short = model.new_int_var(0, need, f"short_{b_idx}")
                model.add(sum(block.covering) + short >= need)
                objective_terms.append(short * self.config.shortfall_penalty)
                shortfalls.append(short)
            need_sup = block.requirement.min_supervisors
            if need_sup > 0:
                sup_short = model.new_int_var(0, need_sup, f"sup_short_{b_idx}")
                model.add(sum(block.supervisors) + sup_short >= need_sup)
                objective_terms.append(sup_short * self.config.supervisor_penalty)

        for (e_idx, d_idx, o_idx), var in x.items():
            option = shift_options[o_idx]
            if self.config.hours_weight > 0:
                hours = int(round(option.duration_hours))
                objective_terms.append(var * hours * self.config.hours_weight)
            preferred = employees[e_idx].preferred_shift_category
            if self.config.preference_weight > 0 and preferred is option.category:
                objective_terms.append(-var * self.config.preference_weight)

        model.minimize(sum(objective_terms))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.config.time_limit_seconds
        if self.config.num_workers > 0:
            solver.parameters.num_workers = self.config.num_workers

        logger.debug(
            "CP-SAT model: %d decision variables, %d staffing blocks", len(x), len(model_blocks)
        )
        status = solver.solve(model)
        status_str = _STATUS_NAMES.get(status, "UNKNOWN")

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            logger.warning("CP-SAT returned %s", status_str)
            return SolverResult(plan=None, status=status_str, solve_time_seconds=solver.wall_time)

        plan = self._extract_plan(solver, x, employees, dates, shift_options)
        result = SolverResult(
            plan=plan,
            status=status_str,
            objective_value=int(solver.objective_value),
            solve_time_seconds=solver.wall_time,
            num_branches=solver.num_branches,
            num_conflicts=solver.num_conflicts,
            shortfall=sum(solver.value(s) for s in shortfalls),
        )
        logger.info(
            "CP-SAT %s: %d shifts planned, %d seats short, %.2fs",
            status_str,
            len(plan),
            result.shortfall,
            result.solve_time_seconds,
        )
        return result

    def _extract_plan(
        self,
        solver: cp_model.CpSolver,
        x: dict[tuple[int, int, int], cp_model.IntVar],
        employees: list[Employee],
        dates: list[date],
        shift_options: list[ShiftOption],
    ) -> list[PlannedShift]:
        """Read the chosen shifts out of the solved model."""
        chosen = [key for key, var in x.items() if solver.value(var) == 1]
        chosen.sort(key=lambda key: (key[1], key[0]))
        return [
            PlannedShift(employees[e_idx].id, dates[d_idx], shift_options[o_idx])
            for e_idx, d_idx, o_idx in chosen
        ]


def group_plan_by_date(plan: list[PlannedShift]) -> dict[date, list[PlannedShift]]:
    """Bucket a plan by date, keeping its order within each date."""
    grouped: dict[date, list[PlannedShift]] = {}
    for planned in plan:
        grouped.setdefault(planned.date, []).append(planned)
    return grouped
