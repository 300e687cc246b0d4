"""Conflict detection between shifts and time off.

Time-off conflicts compare absolute windows: a shift covers
``[date + start, date + start + duration)`` and a time-off request covers
``[start_date 00:00, end_date + 1 day 00:00)``. Only approved requests count.

Malformed dates raise ValueError from the interval helpers; nothing here
substitutes a default.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional

from dispatchsched.domain.intervals import (
    format_hours,
    overlaps,
    shift_window,
    time_off_window,
    week_start,
)
from dispatchsched.domain.models import Employee, ShiftAssignment, TimeOffRequest
from dispatchsched.domain.patterns import get_pattern_policy


class ConflictType(Enum):
    """How a shift and a time-off request intersect."""

    FULL_OVERLAP = "full_overlap"
    PARTIAL_OVERLAP = "partial_overlap"


@dataclass
class TimeOffConflict:
    """A shift that intersects an approved time-off request."""

    time_off_request: TimeOffRequest
    shift: ShiftAssignment
    conflict_type: ConflictType


def _classify(shift: ShiftAssignment, request: TimeOffRequest) -> Optional[ConflictType]:
    shift_start, shift_end = shift_window(shift.date, shift.start_time, shift.end_time)
    off_start, off_end = time_off_window(request.start_date, request.end_date)
    if not overlaps(shift_start, shift_end, off_start, off_end):
        return None
    if off_start <= shift_start and shift_end <= off_end:
        return ConflictType.FULL_OVERLAP
    return ConflictType.PARTIAL_OVERLAP


def check_time_off_conflicts(
    shift: ShiftAssignment, time_off_requests: list[TimeOffRequest]
) -> list[TimeOffConflict]:
    """Find the approved time-off requests a shift runs into.

    Args:
        shift: The shift to check.
        time_off_requests: Requests for any employees, in any status.

    Returns:
        Conflicts in the order the requests were given; empty if none.
    """
    conflicts = []
    for request in time_off_requests:
        if request.employee_id != shift.employee_id or not request.is_approved:
            continue
        conflict_type = _classify(shift, request)
        if conflict_type is not None:
            conflicts.append(TimeOffConflict(request, shift, conflict_type))
    return conflicts


def check_shift_conflicts(
    time_off_request: TimeOffRequest, shifts: list[ShiftAssignment]
) -> list[TimeOffConflict]:
    """Find the shifts that an approved time-off request would collide with.

    Cancelled shifts and other employees' shifts are ignored. An unapproved
    request has no conflicts.
    """
    if not time_off_request.is_approved:
        return []
    conflicts = []
    for shift in shifts:
        if shift.employee_id != time_off_request.employee_id or shift.is_cancelled:
            continue
        conflict_type = _classify(shift, time_off_request)
        if conflict_type is not None:
            conflicts.append(TimeOffConflict(time_off_request, shift, conflict_type))
    return conflicts


def check_time_off_request_conflicts(
    request: TimeOffRequest, existing_requests: list[TimeOffRequest]
) -> bool:
    """True if another approved request of the same employee overlaps this one."""
    start, end = time_off_window(request.start_date, request.end_date)
    for other in existing_requests:
        if other is request or (request.id and other.id == request.id):
            continue
        if other.employee_id != request.employee_id:
            continue
        if not other.is_approved:
            continue
        other_start, other_end = time_off_window(other.start_date, other.end_date)
        if overlaps(start, end, other_start, other_end):
            return True
    return False


class ShiftConflictType(Enum):
    """Problems found when placing a shift by hand."""

    OVERLAP = "overlap"
    REST_PERIOD = "rest_period"
    WEEKLY_HOURS = "weekly_hours"
    PATTERN_VIOLATION = "pattern_violation"


HARD_CONFLICTS = frozenset({ShiftConflictType.OVERLAP, ShiftConflictType.REST_PERIOD})


@dataclass
class ShiftConflict:
    conflict_type: ShiftConflictType
    details: str


@dataclass
class ConflictResolution:
    """Whether a manual placement may go ahead.

    Attributes:
        can_proceed: False when any hard conflict exists.
        requires_override: True when only soft conflicts exist.
        message: Summary for the person making the change.
    """

    can_proceed: bool
    requires_override: bool
    message: str


def check_assignment_conflicts(
    candidate: ShiftAssignment,
    existing: list[ShiftAssignment],
    employee: Employee,
    min_rest_hours: float = 10,
) -> list[ShiftConflict]:
    """Check a manually placed shift against the employee's other shifts.

    Args:
        candidate: The shift being created or moved.
        existing: Other shifts; entries with the candidate's id are skipped.
        employee: The employee the candidate belongs to.
        min_rest_hours: Required gap between the end of one shift and the
            start of the next.

    Returns:
        One conflict per rule broken, in the order OVERLAP, REST_PERIOD,
        WEEKLY_HOURS, PATTERN_VIOLATION.
    """
    start, end = shift_window(candidate.date, candidate.start_time, candidate.end_time)
    rest = timedelta(hours=min_rest_hours)
    week = week_start(candidate.date)

    others = [
        s
        for s in existing
        if s.employee_id == candidate.employee_id
        and not s.is_cancelled
        and (candidate.id is None or s.id != candidate.id)
    ]

    overlapping = []
    too_close = False
    week_hours = 0.0
    for shift in others:
        other_start, other_end = shift_window(shift.date, shift.start_time, shift.end_time)
        if overlaps(start, end, other_start, other_end):
            overlapping.append(shift.id or shift.date)
        elif other_end <= start < other_end + rest or end <= other_start < end + rest:
            too_close = True
        if week_start(shift.date) == week:
            week_hours += shift.duration_hours

    conflicts = []
    if overlapping:
        conflicts.append(
            ShiftConflict(
                ShiftConflictType.OVERLAP,
                f"Overlaps with existing shift(s): {', '.join(overlapping)}",
            )
        )
    if too_close:
        conflicts.append(
            ShiftConflict(ShiftConflictType.REST_PERIOD, "Insufficient rest period between shifts")
        )

    projected = week_hours + candidate.duration_hours
    if projected > employee.weekly_hours_cap:
        allowance = employee.max_overtime_hours
        if not allowance or projected > employee.weekly_hours_cap + allowance:
            conflicts.append(
                ShiftConflict(
                    ShiftConflictType.WEEKLY_HOURS,
                    f"Exceeds weekly hours cap ({format_hours(employee.weekly_hours_cap)} hours)",
                )
            )

    policy = get_pattern_policy(employee.shift_pattern)
    if not policy.is_allowed_duration(candidate.duration_hours):
        conflicts.append(
            ShiftConflict(
                ShiftConflictType.PATTERN_VIOLATION,
                f"{format_hours(candidate.duration_hours)}-hour shift does not fit "
                f"the {employee.shift_pattern.label} pattern",
            )
        )
    return conflicts


def resolve_conflicts(conflicts: list[ShiftConflict]) -> ConflictResolution:
    """Decide whether a placement with these conflicts may proceed."""
    kinds = {c.conflict_type for c in conflicts}
    if kinds & HARD_CONFLICTS:
        return ConflictResolution(
            can_proceed=False,
            requires_override=False,
            message=(
                "Cannot proceed due to hard conflicts (overlapping shifts or insufficient rest)"
            ),
        )
    if kinds:
        return ConflictResolution(
            can_proceed=True,
            requires_override=True,
            message="Can proceed with manager override (exceeds weekly hours or pattern violation)",
        )
    return ConflictResolution(
        can_proceed=True, requires_override=False, message="No conflicts detected"
    )
