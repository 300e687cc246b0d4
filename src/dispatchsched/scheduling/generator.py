"""Schedule generation.

The ScheduleGenerator runs a small state machine,
LOADING_INPUTS -> ASSIGNING -> VALIDATING -> DONE, moving to FAILED from
any stage that raises.

LOADING_INPUTS reads the period, roster, staffing blocks, shift templates,
approved time off and holidays from a DataClient and checks them. Contract
violations (bad period, missing inputs) raise ScheduleGenerationError; data
client errors propagate unchanged.

ASSIGNING walks every date and every applicable staffing block, placing
eligible employees until the block's headcount and supervisor minimums are
met or nobody eligible is left. Every placement goes through the eligibility
gate, updates both trackers and is written through the data client.

VALIDATING measures every block of every date; blocks still short are
reported as unfilled requirements. Shortfalls never fail the run.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from dispatchsched.domain.intervals import date_range, format_date, overlaps, shift_window
from dispatchsched.domain.models import (
    Employee,
    SchedulePeriod,
    ShiftAssignment,
    ShiftOption,
    StaffingRequirement,
    TimeOffRequest,
)
from dispatchsched.errors import ScheduleGenerationError
from dispatchsched.scheduling.cpsat_solver import (
    CPSATSolver,
    PlannedShift,
    SolverConfig,
    group_plan_by_date,
)
from dispatchsched.scheduling.data_client import DataClient
from dispatchsched.scheduling.helpers import (
    get_applicable_requirements,
    get_matching_shift_options,
    has_time_off_conflict,
    validate_schedule_period,
)
from dispatchsched.scheduling.scoring import ScoringContext, score_candidate
from dispatchsched.scheduling.tracking import (
    can_assign_shift,
    get_weekly_hours,
    initialize_tracking,
    record_assignment,
)
from dispatchsched.validation.staffing import (
    StaffingLevel,
    calculate_staffing_levels,
    measure_block,
)

logger = logging.getLogger(__name__)


class GenerationState(Enum):
    """Stages of a generation run."""

    IDLE = "idle"
    LOADING_INPUTS = "loading_inputs"
    ASSIGNING = "assigning"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"


class SolverType(Enum):
    """How the ASSIGNING stage chooses placements."""

    GREEDY = "greedy"
    CPSAT = "cpsat"


@dataclass
class GenerationParams:
    """Options for a generation run.

    Attributes:
        start_date: Narrow the period to start here (defaults to the period start).
        end_date: Narrow the period to end here (defaults to the period end).
        schedule_period_id: Stamped on every generated assignment
            (defaults to the period id being generated).
        consider_preferences: Balance load by weekly hours and rank ties by
            candidate score. When False, candidates are taken in roster order.
        allow_overtime: Let an employee's overtime allowance raise their cap.
        solver: GREEDY fills block by block; CPSAT plans the period first.
        solver_config: Settings for the CP-SAT planner.
    """

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    schedule_period_id: Optional[str] = None
    consider_preferences: bool = True
    allow_overtime: bool = False
    solver: SolverType = SolverType.GREEDY
    solver_config: SolverConfig = field(default_factory=SolverConfig)


@dataclass
class ScheduleGenerationResult:
    """Outcome of a generation run.

    Attributes:
        success: Always True; hard failures raise instead.
        shifts_generated: Number of assignments written.
        unfilled_requirements: Blocks still below their minimums.
        errors: Reserved for non-fatal errors; empty on a normal run.
        assignments: The assignments written, in placement order.
        staffing_levels: Coverage of every block of every date.
    """

    success: bool
    shifts_generated: int
    unfilled_requirements: int
    errors: list[str] = field(default_factory=list)
    assignments: list[ShiftAssignment] = field(default_factory=list)
    staffing_levels: list[StaffingLevel] = field(default_factory=list)

    @property
    def understaffed(self) -> list[StaffingLevel]:
        return [level for level in self.staffing_levels if not level.is_met]


@dataclass
class GenerationInputs:
    """Everything LOADING_INPUTS hands to the later stages."""

    period_id: str
    start: date
    end: date
    employees: list[Employee]
    requirements: list[StaffingRequirement]
    shift_options: list[ShiftOption]
    time_off: list[TimeOffRequest]
    holidays: frozenset = frozenset()

    @property
    def dates(self) -> list[date]:
        return date_range(self.start, self.end)

    def is_holiday(self, day: date) -> bool:
        return day.isoformat() in self.holidays


class ScheduleGenerator:
    """Generates a schedule for one period through a DataClient.

    Example:
        >>> generator = ScheduleGenerator(client, GenerationParams(allow_overtime=True))
        >>> result = generator.generate("period-1")
        >>> result.shifts_generated, result.unfilled_requirements
        (42, 0)
    """

    def __init__(self, data_client: DataClient, params: Optional[GenerationParams] = None):
        self.data_client = data_client
        self.params = params or GenerationParams()
        self.state = GenerationState.IDLE
        self.assignments: list[ShiftAssignment] = []
        self._weekly_hours: dict = {}
        self._shift_patterns: dict = {}
        self._working: dict[str, set[str]] = defaultdict(set)
        self._windows: dict[str, list[tuple[datetime, datetime]]] = defaultdict(list)

    def generate(self, period_id: str) -> ScheduleGenerationResult:
        """Run every stage for ``period_id``.

        Raises:
            ScheduleGenerationError: If the period or inputs are invalid.
            Exception: Whatever the data client raised, unchanged.
        """
        try:
            self._set_state(GenerationState.LOADING_INPUTS)
            inputs = self.load_inputs(period_id)

            self._set_state(GenerationState.ASSIGNING)
            self.assign(inputs)

            self._set_state(GenerationState.VALIDATING)
            levels = calculate_staffing_levels(
                self.assignments, inputs.requirements, inputs.dates, inputs.holidays
            )
        except Exception:
            self._set_state(GenerationState.FAILED)
            raise

        unfilled = sum(1 for level in levels if not level.is_met)
        for level in levels:
            if not level.is_met:
                logger.warning(
                    "Unfilled block %s on %s: %d/%d staff, %d/%d supervisors",
                    level.time_range,
                    level.date,
                    level.current_staff,
                    level.required_staff,
                    level.supervisors,
                    level.required_supervisors,
                )

        self._set_state(GenerationState.DONE)
        logger.info(
            "Generated %d shifts for %s..%s, %d unfilled requirements",
            len(self.assignments),
            inputs.start,
            inputs.end,
            unfilled,
        )
        return ScheduleGenerationResult(
            success=True,
            shifts_generated=len(self.assignments),
            unfilled_requirements=unfilled,
            errors=[],
            assignments=list(self.assignments),
            staffing_levels=levels,
        )

    def _set_state(self, state: GenerationState) -> None:
        logger.info("Schedule generation: %s -> %s", self.state.value, state.value)
        self.state = state

    # Stage 1

    def load_inputs(self, period_id: str) -> GenerationInputs:
        """Read and check everything the run needs."""
        period = self.data_client.get_schedule_period(period_id)
        if isinstance(period, dict):
            period = SchedulePeriod.from_record(period)
        if period is None:
            raise ScheduleGenerationError(
                "Invalid schedule period", details={"period_id": period_id}
            )

        start = self.params.start_date or period.start_date
        end = self.params.end_date or period.end_date
        if not (
            validate_schedule_period(period.start_date, period.end_date)
            and validate_schedule_period(start, end)
        ):
            raise ScheduleGenerationError(
                "Invalid schedule period", details={"start_date": start, "end_date": end}
            )
        start, end = format_date(start), format_date(end)
        if start < format_date(period.start_date) or end > format_date(period.end_date):
            raise ScheduleGenerationError(
                "Invalid schedule period",
                details={
                    "start_date": start,
                    "end_date": end,
                    "period_start": period.start_date,
                    "period_end": period.end_date,
                },
            )

        roster = self.data_client.get_roster(period_id)
        requirements = self.data_client.get_staffing_requirements()
        shift_options = self.data_client.get_shift_options()
        if not roster or not requirements or not shift_options:
            raise ScheduleGenerationError(
                "Failed to fetch required data",
                details={
                    "roster": len(roster or []),
                    "requirements": len(requirements or []),
                    "shift_options": len(shift_options or []),
                },
            )

        time_off = self.data_client.get_approved_time_off(start, end) or []
        time_off = [r for r in time_off if r.is_approved]
        holidays = self.data_client.get_holidays(start, end) or []
        holidays = frozenset(format_date(h) for h in holidays)

        employees = [e for e in roster if e.is_active]
        if len(employees) < len(roster):
            logger.info("Skipping %d inactive employees", len(roster) - len(employees))

        logger.info(
            "Loaded %d employees, %d staffing blocks, %d shift options, %d time-off requests",
            len(employees),
            len(requirements),
            len(shift_options),
            len(time_off),
        )
        return GenerationInputs(
            period_id=period_id,
            start=date.fromisoformat(start),
            end=date.fromisoformat(end),
            employees=employees,
            requirements=list(requirements),
            shift_options=list(shift_options),
            time_off=time_off,
            holidays=holidays,
        )

    # Stage 2

    def assign(self, inputs: GenerationInputs) -> list[ShiftAssignment]:
        """Place shifts for every date and block of the period."""
        self.assignments = []
        self._working = defaultdict(set)
        self._windows = defaultdict(list)
        self._weekly_hours, self._shift_patterns = initialize_tracking(inputs.employees)

        plan = None
        if self.params.solver is SolverType.CPSAT:
            plan = self._plan(inputs)

        for day in inputs.dates:
            if plan is not None:
                self._replay(inputs, day, plan.get(day, []))
            blocks = get_applicable_requirements(
                inputs.requirements, day, is_holiday=inputs.is_holiday(day)
            )
            for requirement in blocks:
                self._fill_block(inputs, day, requirement)
        return self.assignments

    def _plan(self, inputs: GenerationInputs) -> Optional[dict[date, list[PlannedShift]]]:
        blocks = [
            (day, requirement)
            for day in inputs.dates
            for requirement in get_applicable_requirements(
                inputs.requirements, day, is_holiday=inputs.is_holiday(day)
            )
        ]
        solver = CPSATSolver(self.params.solver_config)
        result = solver.solve(
            inputs.employees,
            inputs.dates,
            blocks,
            inputs.shift_options,
            inputs.time_off,
            allow_overtime=self.params.allow_overtime,
        )
        if not result.is_feasible or result.plan is None:
            logger.warning("CP-SAT found no plan (%s); falling back to greedy", result.status)
            return None
        return group_plan_by_date(result.plan)

    def _replay(self, inputs: GenerationInputs, day: date, planned: list[PlannedShift]) -> None:
        """Place a day's planned shifts that still pass the gate."""
        employees = {e.id: e for e in inputs.employees}
        for shift in planned:
            employee = employees[shift.employee_id]
            if self._is_eligible(inputs, employee, day, shift.option):
                self._place(inputs, employee, day, shift.option)
            else:
                logger.debug(
                    "Planned shift for %s on %s rejected by eligibility gate", employee.id, day
                )

    def _fill_block(
        self, inputs: GenerationInputs, day: date, requirement: StaffingRequirement
    ) -> None:
        options = get_matching_shift_options(requirement, inputs.shift_options, day)
        if not options:
            logger.warning("No shift option covers %s on %s", requirement.label, day)
            return

        level = measure_block(self.assignments, requirement, day)
        staff_needed = level.staff_shortfall
        supervisors_needed = level.supervisor_shortfall

        while staff_needed > 0 or supervisors_needed > 0:
            choice = self._pick_candidate(
                inputs,
                day,
                requirement,
                options,
                need_supervisor=supervisors_needed > 0,
                need_staff=staff_needed > 0,
            )
            if choice is None:
                break
            employee, option = choice
            self._place(inputs, employee, day, option)
            staff_needed -= 1
            if employee.is_supervisor:
                supervisors_needed -= 1

    def _is_eligible(
        self, inputs: GenerationInputs, employee: Employee, day: date, option: ShiftOption
    ) -> bool:
        if employee.id in self._working[day.isoformat()]:
            return False
        start, end = shift_window(day, option.start_time, option.end_time)
        if any(overlaps(start, end, s, e) for s, e in self._windows[employee.id]):
            return False
        if has_time_off_conflict(employee, day, option, inputs.time_off):
            return False
        return can_assign_shift(
            employee,
            day,
            option,
            self._weekly_hours,
            self._shift_patterns,
            allow_overtime=self.params.allow_overtime,
        )

    def _pick_candidate(
        self,
        inputs: GenerationInputs,
        day: date,
        requirement: StaffingRequirement,
        options: list[ShiftOption],
        need_supervisor: bool,
        need_staff: bool,
    ) -> Optional[tuple[Employee, ShiftOption]]:
        """Choose the next employee and shift for a block.

        Supervisors go first while the block lacks them. After that, with
        preferences on, the lightest-loaded employee this week wins, ties
        broken by score and then roster order; with preferences off, roster
        order decides.
        """
        context = None
        if self.params.consider_preferences:
            context = ScoringContext(
                weekly_hours=self._weekly_hours,
                shift_patterns=self._shift_patterns,
                assignments=self.assignments,
                holidays=inputs.holidays,
            )

        ranked = []
        for position, employee in enumerate(inputs.employees):
            if not need_staff and not employee.is_supervisor:
                continue
            eligible = [o for o in options if self._is_eligible(inputs, employee, day, o)]
            if not eligible:
                continue

            if context is None:
                option, score = eligible[0], 0.0
            else:
                scored = [
                    (score_candidate(employee, day, o, context, requirement), o) for o in eligible
                ]
                best = max(s for s, _ in scored)
                option = next(o for s, o in scored if s == best)
                score = best

            supervisor_rank = 0 if (need_supervisor and employee.is_supervisor) else 1
            if context is None:
                key = (supervisor_rank, position)
            else:
                key = (
                    supervisor_rank,
                    get_weekly_hours(self._weekly_hours, employee.id, day),
                    -score,
                    position,
                )
            ranked.append((key, employee, option))

        if not ranked:
            return None
        _, employee, option = min(ranked, key=lambda item: item[0])
        return employee, option

    def _place(
        self, inputs: GenerationInputs, employee: Employee, day: date, option: ShiftOption
    ) -> None:
        assignment = ShiftAssignment.from_option(
            employee,
            day.isoformat(),
            option,
            schedule_period_id=self.params.schedule_period_id or inputs.period_id,
        )
        stored = self.data_client.insert_assignment(assignment)
        if isinstance(stored, ShiftAssignment):
            assignment = stored

        self._weekly_hours, self._shift_patterns = record_assignment(
            self._weekly_hours,
            self._shift_patterns,
            employee.id,
            day,
            option.duration_hours,
        )
        self._working[day.isoformat()].add(employee.id)
        self._windows[employee.id].append(
            shift_window(day, option.start_time, option.end_time)
        )
        self.assignments.append(assignment)
        logger.debug(
            "Placed %s on %s %s-%s (%s)",
            employee.id,
            assignment.date,
            assignment.start_time,
            assignment.end_time,
            option.id,
        )


def generate_schedule(
    data_client: DataClient,
    period_id: str,
    params: Optional[GenerationParams] = None,
) -> ScheduleGenerationResult:
    """Generate and persist a schedule for a period.

    Args:
        data_client: Source of inputs and sink for assignments.
        period_id: Schedule period to generate.
        params: Generation options.

    Returns:
        ScheduleGenerationResult; shortfalls are reported, not raised.

    Raises:
        ScheduleGenerationError: If the period or inputs are invalid.
    """
    return ScheduleGenerator(data_client, params).generate(period_id)
