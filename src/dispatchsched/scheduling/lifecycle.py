"""Guards for changing assignments after they are created.

Assignments dated before today are frozen. Status moves one way only:
scheduled to completed or cancelled. A cancellation is refused when it
would leave a staffing block the shift covers below its minimum.

Every function returns a new ShiftAssignment; the input is left untouched.
"""

import logging
from dataclasses import replace
from datetime import timedelta
from typing import Iterable

from dispatchsched.domain.intervals import (
    DateLike,
    block_window,
    overlaps,
    parse_date,
    shift_window,
)
from dispatchsched.domain.models import ShiftAssignment, ShiftStatus, StaffingRequirement
from dispatchsched.errors import AssignmentMutationError
from dispatchsched.validation.staffing import get_applicable_requirements, measure_block

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ShiftStatus.SCHEDULED: frozenset({ShiftStatus.COMPLETED, ShiftStatus.CANCELLED}),
    ShiftStatus.COMPLETED: frozenset(),
    ShiftStatus.CANCELLED: frozenset(),
}

_IMMUTABLE_FIELDS = frozenset({"id", "employee_id", "status"})


def can_mutate_assignment(assignment: ShiftAssignment, today: DateLike) -> bool:
    """True unless the assignment is dated before ``today``."""
    return parse_date(assignment.date) >= parse_date(today)


def transition_status(
    assignment: ShiftAssignment, new_status, today: DateLike
) -> ShiftAssignment:
    """Move an assignment to a new status.

    A shift can be completed once its date has arrived and cancelled only
    while it is not in the past.

    Raises:
        AssignmentMutationError: If the transition is not allowed.
    """
    new_status = ShiftStatus(new_status)
    _check_transition(assignment, new_status, today)
    logger.info(
        "Assignment %s: %s -> %s", assignment.id, assignment.status.value, new_status.value
    )
    return replace(assignment, status=new_status)


def _check_transition(
    assignment: ShiftAssignment, new_status: ShiftStatus, today: DateLike
) -> None:
    if new_status not in ALLOWED_TRANSITIONS[assignment.status]:
        raise AssignmentMutationError(
            f"Cannot change status from {assignment.status.value} to {new_status.value}",
            details={"assignment_id": assignment.id},
        )
    if new_status is ShiftStatus.CANCELLED and not can_mutate_assignment(assignment, today):
        raise AssignmentMutationError(
            "Cannot modify past assignments", details={"assignment_id": assignment.id}
        )
    if new_status is ShiftStatus.COMPLETED and parse_date(assignment.date) > parse_date(today):
        raise AssignmentMutationError(
            "Cannot complete a shift that has not started",
            details={"assignment_id": assignment.id},
        )


def update_assignment(
    assignment: ShiftAssignment, today: DateLike, **changes
) -> ShiftAssignment:
    """Move or resize a scheduled assignment.

    Only date, time, shift option and supervisor fields can change here;
    status changes go through ``transition_status``.

    Raises:
        AssignmentMutationError: If the assignment is past, not scheduled,
            or a protected field is being changed.
    """
    protected = _IMMUTABLE_FIELDS.intersection(changes)
    if protected:
        raise AssignmentMutationError(
            f"Cannot change {', '.join(sorted(protected))} with an update",
            details={"assignment_id": assignment.id},
        )
    if assignment.status is not ShiftStatus.SCHEDULED:
        raise AssignmentMutationError(
            f"Cannot modify a {assignment.status.value} assignment",
            details={"assignment_id": assignment.id},
        )
    if not can_mutate_assignment(assignment, today):
        raise AssignmentMutationError(
            "Cannot modify past assignments", details={"assignment_id": assignment.id}
        )
    updated = replace(assignment, **changes)
    if not can_mutate_assignment(updated, today):
        raise AssignmentMutationError(
            "Cannot move an assignment into the past", details={"assignment_id": assignment.id}
        )
    return updated


def _covered_blocks(
    assignment: ShiftAssignment,
    requirements: list[StaffingRequirement],
    holidays: frozenset,
):
    """(date, requirement) pairs whose window the assignment overlaps."""
    start, end = shift_window(assignment.date, assignment.start_time, assignment.end_time)
    first = parse_date(assignment.date)
    for day in (first - timedelta(days=1), first, first + timedelta(days=1)):
        applicable = get_applicable_requirements(
            requirements, day, is_holiday=day.isoformat() in holidays
        )
        for requirement in applicable:
            block_start, block_end = block_window(day, requirement.start_time, requirement.end_time)
            if overlaps(start, end, block_start, block_end):
                yield day, requirement


def cancel_assignment(
    assignment: ShiftAssignment,
    assignments: list[ShiftAssignment],
    requirements: list[StaffingRequirement],
    today: DateLike,
    holidays: Iterable[DateLike] = (),
) -> ShiftAssignment:
    """Cancel an assignment unless that would break a staffing floor.

    Args:
        assignment: The assignment to cancel.
        assignments: The full schedule it belongs to (it may be included).
        requirements: Staffing blocks to protect.
        today: Current date.
        holidays: Dates on which holiday blocks apply.

    Returns:
        The cancelled copy of the assignment.

    Raises:
        AssignmentMutationError: If the assignment is past, not scheduled,
            or is needed to keep a block at its minimum.
    """
    _check_transition(assignment, ShiftStatus.CANCELLED, today)
    holiday_set = frozenset(parse_date(h).isoformat() for h in holidays)
    remaining = [
        a
        for a in assignments
        if a is not assignment and (assignment.id is None or a.id != assignment.id)
    ]

    for day, requirement in _covered_blocks(assignment, requirements, holiday_set):
        level = measure_block(remaining, requirement, day)
        short_staff = level.current_staff < requirement.min_employees
        short_supervisor = (
            assignment.is_supervisor and level.supervisors < requirement.min_supervisors
        )
        if short_staff or short_supervisor:
            raise AssignmentMutationError(
                f"Cancelling would leave {requirement.label} on {day.isoformat()} "
                "below minimum staffing",
                details={
                    "assignment_id": assignment.id,
                    "current_staff": level.current_staff,
                    "required_staff": requirement.min_employees,
                },
            )

    return transition_status(assignment, ShiftStatus.CANCELLED, today)
