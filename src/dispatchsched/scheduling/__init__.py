"""Scheduling engine: trackers, eligibility gate, planners and generator."""

from dispatchsched.scheduling.cpsat_solver import (
    CPSATSolver,
    PlannedShift,
    SolverConfig,
    SolverResult,
)
from dispatchsched.scheduling.data_client import DataClient, InMemoryDataClient
from dispatchsched.scheduling.generator import (
    GenerationParams,
    GenerationState,
    ScheduleGenerationResult,
    ScheduleGenerator,
    SolverType,
    generate_schedule,
)
from dispatchsched.scheduling.helpers import (
    MAX_PERIOD_DAYS,
    get_applicable_requirements,
    get_available_employees,
    get_matching_shift_options,
    is_employee_available,
    validate_schedule_period,
)
from dispatchsched.scheduling.lifecycle import (
    can_mutate_assignment,
    cancel_assignment,
    transition_status,
    update_assignment,
)
from dispatchsched.scheduling.scoring import ScoringContext, score_candidate
from dispatchsched.scheduling.tracking import (
    PatternState,
    ShiftPatternTracking,
    WeeklyHoursTracking,
    can_assign_shift,
    initialize_tracking,
    update_shift_pattern,
    update_weekly_hours,
)

__all__ = [
    # Generator
    "GenerationParams",
    "GenerationState",
    "ScheduleGenerationResult",
    "ScheduleGenerator",
    "SolverType",
    "generate_schedule",
    # Data access
    "DataClient",
    "InMemoryDataClient",
    # Solvers
    "CPSATSolver",
    "PlannedShift",
    "SolverConfig",
    "SolverResult",
    # Tracking
    "PatternState",
    "ShiftPatternTracking",
    "WeeklyHoursTracking",
    "can_assign_shift",
    "initialize_tracking",
    "update_shift_pattern",
    "update_weekly_hours",
    # Helpers
    "MAX_PERIOD_DAYS",
    "get_applicable_requirements",
    "get_available_employees",
    "get_matching_shift_options",
    "is_employee_available",
    "validate_schedule_period",
    # Scoring
    "ScoringContext",
    "score_candidate",
    # Lifecycle
    "can_mutate_assignment",
    "cancel_assignment",
    "transition_status",
    "update_assignment",
]
