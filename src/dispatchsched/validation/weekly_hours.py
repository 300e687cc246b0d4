"""Weekly-hours totals and cap validation."""

from dispatchsched.domain.intervals import format_hours, is_valid_date, is_valid_time
from dispatchsched.domain.models import ShiftAssignment
from dispatchsched.validation.result import ValidationResult

MAX_WEEKLY_HOURS = 40


def format_errors(assignment: ShiftAssignment, check_date: bool = True) -> list[str]:
    """Messages for each malformed date or time field of a shift."""
    errors = []
    if check_date and not is_valid_date(assignment.date):
        errors.append(f"Invalid date format: {assignment.date!r} must be YYYY-MM-DD")
    for field_name in ("start_time", "end_time"):
        value = getattr(assignment, field_name)
        if not is_valid_time(value):
            errors.append(f"Invalid time format: {field_name} {value!r} must be in HH:mm format")
    return errors


def calculate_weekly_hours(assignments: list[ShiftAssignment]) -> float:
    """Total midnight-aware hours across the given shifts.

    This is a plain sum over the set, not bucketed by week; callers choose
    the window. Cancelled shifts are counted if passed in.

    Raises:
        ValueError: If a shift has a malformed time.
    """
    return sum(a.duration_hours for a in assignments)


def validate_weekly_hours(
    assignments: list[ShiftAssignment], overtime_approved: bool = False
) -> ValidationResult:
    """Check a set of shifts against the 40-hour cap.

    Approved overtime waives the check entirely. Shifts with a malformed
    time are reported and left out of the total.
    """
    result = ValidationResult()
    if overtime_approved:
        return result

    measurable = []
    for assignment in assignments:
        errors = format_errors(assignment, check_date=False)
        for error in errors:
            result.add_error(error)
        if not errors:
            measurable.append(assignment)

    total = calculate_weekly_hours(measurable)
    if total > MAX_WEEKLY_HOURS:
        result.add_error(
            f"Weekly hours ({format_hours(total)}) exceed maximum allowed ({MAX_WEEKLY_HOURS})"
        )
    return result
