"""Lookup helpers used by the schedule generator."""

from dispatchsched.domain.intervals import (
    DateLike,
    block_window,
    covers,
    date_range,
    format_date,
    parse_date,
    shift_window,
)
from dispatchsched.domain.models import (
    Employee,
    ShiftAssignment,
    ShiftOption,
    StaffingRequirement,
    TimeOffRequest,
)
from dispatchsched.validation.conflicts import check_time_off_conflicts
from dispatchsched.validation.staffing import get_applicable_requirements

MAX_PERIOD_DAYS = 180

__all__ = [
    "MAX_PERIOD_DAYS",
    "date_range",
    "get_applicable_requirements",
    "get_available_employees",
    "get_matching_shift_options",
    "has_time_off_conflict",
    "is_employee_available",
    "option_covers_block",
    "validate_schedule_period",
]


def is_employee_available(
    employee_id: str, on_date: DateLike, time_off_requests: list[TimeOffRequest]
) -> bool:
    """False if an approved request covers the whole calendar date."""
    day = parse_date(on_date)
    for request in time_off_requests:
        if request.employee_id != employee_id or not request.is_approved:
            continue
        if parse_date(request.start_date) <= day <= parse_date(request.end_date):
            return False
    return True


def get_available_employees(
    employees: list[Employee], on_date: DateLike, time_off_requests: list[TimeOffRequest]
) -> list[Employee]:
    """Employees not on approved time off on the date, in roster order."""
    return [e for e in employees if is_employee_available(e.id, on_date, time_off_requests)]


def has_time_off_conflict(
    employee: Employee,
    on_date: DateLike,
    option: ShiftOption,
    time_off_requests: list[TimeOffRequest],
) -> bool:
    """True if working ``option`` on ``on_date`` would run into approved time off.

    Unlike ``is_employee_available`` this sees an overnight shift that spills
    into the first day of a time-off request.
    """
    candidate = ShiftAssignment(
        employee_id=employee.id,
        date=format_date(on_date),
        start_time=option.start_time,
        end_time=option.end_time,
    )
    return bool(check_time_off_conflicts(candidate, time_off_requests))


def option_covers_block(
    requirement: StaffingRequirement, option: ShiftOption, on_date: DateLike, shift_date=None
) -> bool:
    """True if ``option`` worked on ``shift_date`` spans the whole block on ``on_date``.

    ``shift_date`` defaults to the block's date; pass the previous day to
    ask whether an overnight shift carries through a morning block.
    """
    block_start, block_end = block_window(on_date, requirement.start_time, requirement.end_time)
    start, end = shift_window(
        on_date if shift_date is None else shift_date, option.start_time, option.end_time
    )
    return covers(start, end, block_start, block_end)


def get_matching_shift_options(
    requirement: StaffingRequirement, shift_options: list[ShiftOption], on_date: DateLike
) -> list[ShiftOption]:
    """Shift options that cover a staffing block on a date.

    An option placed on the block's date matches when its window starts no
    later than the block and ends no earlier. Options are returned in the
    order given.
    """
    day = parse_date(on_date)
    return [o for o in shift_options if option_covers_block(requirement, o, day)]


def validate_schedule_period(start_date, end_date) -> bool:
    """A period is valid when both dates parse, end is after start and it spans at most 180 days."""
    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError:
        return False
    if end <= start:
        return False
    return (end - start).days <= MAX_PERIOD_DAYS
