"""Shift-pattern shape and consecutive-day validation."""

from dispatchsched.domain.intervals import format_hours, is_next_day, parse_date
from dispatchsched.domain.models import ShiftAssignment, ShiftPattern
from dispatchsched.domain.patterns import get_pattern_policy
from dispatchsched.validation.result import ValidationResult
from dispatchsched.validation.weekly_hours import format_errors


def _sorted_by_date(assignments: list[ShiftAssignment]) -> list[ShiftAssignment]:
    return sorted(assignments, key=lambda a: parse_date(a.date))


def validate_shift_pattern(assignments: list[ShiftAssignment], pattern_name) -> ValidationResult:
    """Check one work cycle of an employee against a pattern's shape.

    The cycle must contain exactly as many shifts as the pattern (4 for both
    supported patterns). When the count is right, each shift, taken in date
    order, must have the length the pattern expects at that position. The
    shifts must also fall on consecutive days.

    Args:
        assignments: One employee's shifts for the cycle, in any order.
        pattern_name: "4x10", "3x12+4", any accepted alias, or a ShiftPattern.

    Returns:
        ValidationResult with every problem found. Malformed dates or times are
        reported and stop the shape checks.
    """
    result = ValidationResult()
    try:
        policy = get_pattern_policy(pattern_name)
    except ValueError:
        result.add_error(f"Unknown shift pattern: {pattern_name}")
        return result

    malformed = False
    for assignment in assignments:
        for error in format_errors(assignment):
            result.add_error(error)
            malformed = True
    if malformed:
        return result

    ordered = _sorted_by_date(assignments)
    expected_count = policy.cycle_length()

    if len(ordered) != expected_count:
        result.add_error(f"Pattern requires {expected_count} shifts, but found {len(ordered)}")
    else:
        last = len(ordered) - 1
        for position, assignment in enumerate(ordered):
            expected = policy.expected_duration(position)
            if assignment.duration_hours == expected:
                continue
            # The short closing shift of 3x12+4 gets its own wording.
            if policy.pattern is ShiftPattern.THREE_TWELVE_PLUS_FOUR and position == last:
                result.add_error(
                    f"Last shift on {assignment.date} is not {format_hours(expected)} hours long"
                )
            else:
                result.add_error(
                    f"Shift on {assignment.date} is not {format_hours(expected)} hours long"
                )

    result.merge(check_consecutive_days(ordered))
    return result


def check_consecutive_days(assignments: list[ShiftAssignment]) -> ValidationResult:
    """Check that shifts, sorted by date, fall on back-to-back calendar days.

    Only the first gap is reported. Zero or one shift is trivially valid.

    Raises:
        ValueError: If any date is malformed.
    """
    result = ValidationResult()
    if len(assignments) <= 1:
        return result

    ordered = _sorted_by_date(assignments)
    for previous, current in zip(ordered, ordered[1:]):
        if not is_next_day(previous.date, current.date):
            result.add_error("Shifts must be on consecutive days")
            break
    return result
