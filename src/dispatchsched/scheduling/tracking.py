"""Per-run trackers and the assignment eligibility gate.

Trackers are plain values passed in and returned. Update functions build a
new mapping and never touch their input, so a caller can keep an earlier
snapshot or construct any tracker state directly.
"""

from dataclasses import dataclass, replace
from typing import Optional

from dispatchsched.domain.intervals import DateLike, format_date, is_next_day, week_start_key
from dispatchsched.domain.models import Employee, ShiftOption, ShiftPattern
from dispatchsched.domain.patterns import get_pattern_policy


@dataclass(frozen=True)
class PatternState:
    """Where an employee is in their current run of working days.

    Attributes:
        current_pattern: The employee's shift pattern.
        consecutive_days: Length of the current run of back-to-back days.
        last_shift_date: YYYY-MM-DD of the most recent placed shift, if any.
    """

    current_pattern: Optional[ShiftPattern] = None
    consecutive_days: int = 0
    last_shift_date: Optional[str] = None


# employee_id -> week-start ISO date -> hours
WeeklyHoursTracking = dict[str, dict[str, float]]
# employee_id -> PatternState
ShiftPatternTracking = dict[str, PatternState]


def initialize_tracking(
    employees: list[Employee],
) -> tuple[WeeklyHoursTracking, ShiftPatternTracking]:
    """Fresh trackers for a generation run."""
    weekly_hours = {e.id: {} for e in employees}
    shift_patterns = {e.id: PatternState(current_pattern=e.shift_pattern) for e in employees}
    return weekly_hours, shift_patterns


def get_weekly_hours(tracking: WeeklyHoursTracking, employee_id: str, on_date: DateLike) -> float:
    """Hours already placed in the Sunday-started week containing ``on_date``."""
    return tracking.get(employee_id, {}).get(week_start_key(on_date), 0)


def update_weekly_hours(
    tracking: WeeklyHoursTracking, employee_id: str, on_date: DateLike, hours: float
) -> WeeklyHoursTracking:
    """Return a copy of ``tracking`` with ``hours`` added to the date's week."""
    week = week_start_key(on_date)
    employee_weeks = dict(tracking.get(employee_id, {}))
    employee_weeks[week] = employee_weeks.get(week, 0) + hours
    updated = dict(tracking)
    updated[employee_id] = employee_weeks
    return updated


def update_shift_pattern(
    tracking: ShiftPatternTracking, employee_id: str, on_date: DateLike
) -> ShiftPatternTracking:
    """Return a copy of ``tracking`` with a shift on ``on_date`` recorded.

    The run grows by one when the date is exactly one day after the last
    shift; otherwise it restarts at 1.
    """
    state = tracking.get(employee_id) or PatternState()
    shift_date = format_date(on_date)
    if state.last_shift_date is not None and is_next_day(state.last_shift_date, shift_date):
        consecutive = state.consecutive_days + 1
    else:
        consecutive = 1
    updated = dict(tracking)
    updated[employee_id] = replace(state, consecutive_days=consecutive, last_shift_date=shift_date)
    return updated


def record_assignment(
    weekly_hours: WeeklyHoursTracking,
    shift_patterns: ShiftPatternTracking,
    employee_id: str,
    on_date: DateLike,
    hours: float,
) -> tuple[WeeklyHoursTracking, ShiftPatternTracking]:
    """Apply both tracker updates for one placed shift."""
    return (
        update_weekly_hours(weekly_hours, employee_id, on_date, hours),
        update_shift_pattern(shift_patterns, employee_id, on_date),
    )


def weekly_ceiling(employee: Employee, allow_overtime: bool = True) -> float:
    """Most hours the employee may work in one week."""
    if allow_overtime and employee.max_overtime_hours and employee.max_overtime_hours > 0:
        return employee.weekly_hours_cap + employee.max_overtime_hours
    return employee.weekly_hours_cap


def can_assign_shift(
    employee: Employee,
    on_date: DateLike,
    shift_option: ShiftOption,
    weekly_hours: WeeklyHoursTracking,
    shift_patterns: ShiftPatternTracking,
    allow_overtime: bool = True,
) -> bool:
    """Decide whether an employee may take a shift, given the running trackers.

    Checks, stopping at the first failure:
        1. The week's hours plus this shift stay within the cap (raised by the
           overtime allowance when one is set and overtime is allowed).
        2. The shift length is legal for the employee's pattern.
        3. The employee has not already worked the pattern's maximum run of
           consecutive days.

    Nothing is mutated; the caller applies the tracker updates after placing.

    Args:
        employee: Candidate employee.
        on_date: Date the shift starts on.
        shift_option: Candidate shift template.
        weekly_hours: Hours tracker.
        shift_patterns: Pattern tracker.
        allow_overtime: When False, ``max_overtime_hours`` is ignored.

    Returns:
        True if all checks pass.
    """
    projected = get_weekly_hours(weekly_hours, employee.id, on_date) + shift_option.duration_hours
    if projected > weekly_ceiling(employee, allow_overtime):
        return False

    policy = get_pattern_policy(employee.shift_pattern)
    if not policy.is_allowed_duration(shift_option.duration_hours):
        return False

    state = shift_patterns.get(employee.id)
    if state is not None and state.consecutive_days >= policy.max_consecutive_days():
        return False

    return True
