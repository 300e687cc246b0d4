"""Candidate scoring for preference-aware assignment.

Scores are only used to order candidates that already passed the
eligibility gate; they never make an ineligible employee eligible.
Each factor is in [0, 1] and higher is better.
"""

from dataclasses import dataclass, field
from typing import Optional

from dispatchsched.domain.intervals import DateLike, format_date, is_next_day, parse_time
from dispatchsched.domain.models import (
    Employee,
    ShiftAssignment,
    ShiftCategory,
    ShiftOption,
    StaffingRequirement,
)
from dispatchsched.domain.patterns import get_pattern_policy
from dispatchsched.scheduling.tracking import (
    ShiftPatternTracking,
    WeeklyHoursTracking,
    get_weekly_hours,
)

SCORE_WEIGHTS = {
    "hours_balance": 0.3,
    "pattern_adherence": 0.25,
    "preference_match": 0.2,
    "supervisor_fit": 0.15,
    "fairness": 0.1,
}


@dataclass
class ScoringContext:
    """Running state the scorer reads.

    Attributes:
        weekly_hours: Hours tracker for the run.
        shift_patterns: Pattern tracker for the run.
        assignments: Shifts placed so far.
        holidays: YYYY-MM-DD dates treated as holidays.
    """

    weekly_hours: WeeklyHoursTracking = field(default_factory=dict)
    shift_patterns: ShiftPatternTracking = field(default_factory=dict)
    assignments: list[ShiftAssignment] = field(default_factory=list)
    holidays: frozenset = frozenset()


@dataclass
class ScoreBreakdown:
    hours_balance: float = 1.0
    pattern_adherence: float = 1.0
    preference_match: float = 1.0
    supervisor_fit: float = 1.0
    fairness: float = 1.0

    @property
    def total(self) -> float:
        return sum(getattr(self, name) * weight for name, weight in SCORE_WEIGHTS.items())


def is_undesirable(start_time: str, category: Optional[ShiftCategory] = None) -> bool:
    """Graveyard shifts and anything starting before 06:00 or after 22:00."""
    if category is ShiftCategory.GRAVEYARD:
        return True
    hour = parse_time(start_time) // 60
    return hour < 6 or hour > 22


def hours_balance_score(
    employee: Employee, on_date: DateLike, option: ShiftOption, context: ScoringContext
) -> float:
    """1.0 when the shift lands the week exactly on the cap.

    Going over costs 0.1 per hour, staying under costs 0.05 per hour.
    """
    projected = get_weekly_hours(context.weekly_hours, employee.id, on_date) + option.duration_hours
    cap = employee.weekly_hours_cap
    if projected == cap:
        return 1.0
    if projected > cap:
        return max(0.0, 1 - (projected - cap) / 10)
    return max(0.0, 1 - (cap - projected) / 20)


def pattern_adherence_score(
    employee: Employee, on_date: DateLike, option: ShiftOption, context: ScoringContext
) -> float:
    """1.0 when the shift has the length the pattern expects next, else 0.5."""
    policy = get_pattern_policy(employee.shift_pattern)
    state = context.shift_patterns.get(employee.id)
    position = 0
    if state is not None and state.last_shift_date is not None:
        if is_next_day(state.last_shift_date, on_date):
            position = state.consecutive_days
    return 1.0 if option.duration_hours == policy.expected_duration(position) else 0.5


def preference_match_score(employee: Employee, option: ShiftOption) -> float:
    if employee.preferred_shift_category is None:
        return 1.0
    return 1.0 if option.category is employee.preferred_shift_category else 0.7


def supervisor_fit_score(employee: Employee, requirement: Optional[StaffingRequirement]) -> float:
    if requirement is not None and requirement.requires_supervisor and not employee.is_supervisor:
        return 0.5
    return 1.0


def fairness_score(
    employee: Employee, on_date: DateLike, option: ShiftOption, context: ScoringContext
) -> float:
    """Favour employees who have worked fewer graveyard and holiday shifts."""
    score = 1.0
    mine = [a for a in context.assignments if a.employee_id == employee.id]
    if is_undesirable(option.start_time, option.category):
        count = sum(1 for a in mine if is_undesirable(a.start_time))
        score *= max(0.5, 1 - count * 0.1)
    if format_date(on_date) in context.holidays:
        count = sum(1 for a in mine if a.date in context.holidays)
        score *= max(0.5, 1 - count * 0.1)
    return score


def score_breakdown(
    employee: Employee,
    on_date: DateLike,
    option: ShiftOption,
    context: ScoringContext,
    requirement: Optional[StaffingRequirement] = None,
) -> ScoreBreakdown:
    return ScoreBreakdown(
        hours_balance=hours_balance_score(employee, on_date, option, context),
        pattern_adherence=pattern_adherence_score(employee, on_date, option, context),
        preference_match=preference_match_score(employee, option),
        supervisor_fit=supervisor_fit_score(employee, requirement),
        fairness=fairness_score(employee, on_date, option, context),
    )


def score_candidate(
    employee: Employee,
    on_date: DateLike,
    option: ShiftOption,
    context: ScoringContext,
    requirement: Optional[StaffingRequirement] = None,
) -> float:
    """Weighted score of placing ``employee`` on ``option``; higher is better."""
    return score_breakdown(employee, on_date, option, context, requirement).total
