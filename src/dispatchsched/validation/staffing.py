"""Staffing-requirement validation and staffing-level analysis.

A staffing block is evaluated per date. An assignment counts toward a block
on date D when it is not cancelled, starts on D, the day before or the day
after, and its absolute window overlaps the block's absolute window. The
neighbouring days let an overnight shift from the previous evening count, and
let a shift starting after midnight count toward a block that wraps into D+1.
Overlapping blocks are evaluated independently; each imposes its own floor.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from dispatchsched.domain.intervals import (
    DateLike,
    block_window,
    format_date,
    is_valid_date,
    is_valid_time,
    overlaps,
    parse_date,
    shift_duration_hours,
    shift_window,
)
from dispatchsched.domain.models import ShiftAssignment, StaffingRequirement
from dispatchsched.domain.patterns import VALID_SHIFT_DURATIONS
from dispatchsched.validation.result import ValidationResult


@dataclass
class StaffingLevel:
    """Coverage of one staffing block on one date.

    Attributes:
        date: YYYY-MM-DD date of the block.
        requirement: The block being measured.
        current_staff: Non-cancelled shifts overlapping the block.
        supervisors: How many of those are supervisor shifts.
    """

    date: str
    requirement: StaffingRequirement
    current_staff: int = 0
    supervisors: int = 0

    @property
    def required_staff(self) -> int:
        return self.requirement.min_employees

    @property
    def required_supervisors(self) -> int:
        return self.requirement.min_supervisors

    @property
    def time_range(self) -> str:
        return self.requirement.label

    @property
    def has_supervisor(self) -> bool:
        return self.supervisors > 0

    @property
    def staff_shortfall(self) -> int:
        return max(0, self.required_staff - self.current_staff)

    @property
    def supervisor_shortfall(self) -> int:
        return max(0, self.required_supervisors - self.supervisors)

    @property
    def is_met(self) -> bool:
        return self.staff_shortfall == 0 and self.supervisor_shortfall == 0


@dataclass
class StaffingAdjustments:
    """Understaffed and overstaffed blocks with human-readable suggestions."""

    understaffed: list[StaffingLevel] = field(default_factory=list)
    overstaffed: list[StaffingLevel] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def get_applicable_requirements(
    requirements: list[StaffingRequirement],
    block_date: DateLike,
    is_holiday: bool = False,
) -> list[StaffingRequirement]:
    """Blocks that apply on a date.

    Weekday-restricted blocks apply only on their weekday. On a holiday the
    holiday blocks replace the regular ones; if none are defined the regular
    blocks apply. Holiday blocks never apply on ordinary days.
    """
    on_day = [r for r in requirements if r.applies_on(block_date)]
    regular = [r for r in on_day if not r.is_holiday]
    if is_holiday:
        holiday = [r for r in on_day if r.is_holiday]
        return holiday or regular
    return regular


def _is_well_formed(assignment: ShiftAssignment) -> bool:
    return (
        is_valid_date(assignment.date)
        and is_valid_time(assignment.start_time)
        and is_valid_time(assignment.end_time)
    )


def _index_by_date(assignments: Iterable[ShiftAssignment]) -> dict[date, list[ShiftAssignment]]:
    by_date = defaultdict(list)
    for assignment in assignments:
        if assignment.is_cancelled or not _is_well_formed(assignment):
            continue
        by_date[parse_date(assignment.date)].append(assignment)
    return by_date


def _measure(
    by_date: dict[date, list[ShiftAssignment]],
    requirement: StaffingRequirement,
    block_date: date,
) -> StaffingLevel:
    block_start, block_end = block_window(block_date, requirement.start_time, requirement.end_time)
    level = StaffingLevel(date=block_date.isoformat(), requirement=requirement)
    for day in (block_date - timedelta(days=1), block_date, block_date + timedelta(days=1)):
        for assignment in by_date.get(day, ()):
            start, end = shift_window(day, assignment.start_time, assignment.end_time)
            if overlaps(start, end, block_start, block_end):
                level.current_staff += 1
                if assignment.is_supervisor:
                    level.supervisors += 1
    return level


def measure_block(
    assignments: list[ShiftAssignment],
    requirement: StaffingRequirement,
    block_date: DateLike,
) -> StaffingLevel:
    """Coverage of a single block on a single date."""
    return _measure(_index_by_date(assignments), requirement, parse_date(block_date))


def _resolve_dates(
    assignments: list[ShiftAssignment], dates: Optional[Iterable[DateLike]]
) -> list[date]:
    if dates is None:
        return sorted({parse_date(a.date) for a in assignments if is_valid_date(a.date)})
    return [parse_date(d) for d in dates]


def calculate_staffing_levels(
    assignments: list[ShiftAssignment],
    requirements: list[StaffingRequirement],
    dates: Optional[Iterable[DateLike]] = None,
    holidays: Iterable[DateLike] = (),
) -> list[StaffingLevel]:
    """Coverage of every applicable block on every date.

    Args:
        assignments: Shifts to measure; cancelled and malformed ones are ignored.
        requirements: Staffing blocks.
        dates: Dates to evaluate. Defaults to the dates the assignments fall on.
        holidays: Dates on which holiday blocks replace the regular ones.

    Returns:
        One StaffingLevel per (date, block), dates ascending and blocks in
        the order given.
    """
    by_date = _index_by_date(assignments)
    holiday_set = {format_date(h) for h in holidays}
    levels = []
    for day in _resolve_dates(assignments, dates):
        applicable = get_applicable_requirements(
            requirements, day, is_holiday=day.isoformat() in holiday_set
        )
        for requirement in applicable:
            levels.append(_measure(by_date, requirement, day))
    return levels


def find_understaffed_periods(
    assignments: list[ShiftAssignment],
    requirements: list[StaffingRequirement],
    dates: Optional[Iterable[DateLike]] = None,
    holidays: Iterable[DateLike] = (),
) -> list[StaffingLevel]:
    """Blocks whose headcount or supervisor minimum is not met."""
    levels = calculate_staffing_levels(assignments, requirements, dates, holidays)
    return [level for level in levels if not level.is_met]


def suggest_shift_adjustments(
    assignments: list[ShiftAssignment],
    requirements: list[StaffingRequirement],
    dates: Optional[Iterable[DateLike]] = None,
    holidays: Iterable[DateLike] = (),
) -> StaffingAdjustments:
    """Suggest where to add or remove staff.

    A block is overstaffed when it has more than one person above its minimum.
    """
    levels = calculate_staffing_levels(assignments, requirements, dates, holidays)
    adjustments = StaffingAdjustments()

    for level in levels:
        if not level.is_met:
            adjustments.understaffed.append(level)
        elif level.current_staff > level.required_staff + 1:
            adjustments.overstaffed.append(level)

    for level in adjustments.understaffed:
        where = f"{level.time_range} on {level.date}"
        if level.staff_shortfall:
            suggestion = f"Need {level.staff_shortfall} more staff during {where}"
            if level.supervisor_shortfall:
                suggestion += " (including at least one supervisor)"
        else:
            suggestion = f"Need {level.supervisor_shortfall} more supervisor(s) during {where}"
        adjustments.suggestions.append(suggestion)

    for level in adjustments.overstaffed:
        excess = level.current_staff - level.required_staff
        adjustments.suggestions.append(
            f"Consider reducing staff by {excess} during {level.time_range} on {level.date}"
        )
    return adjustments


def validate_schedule(
    assignments: list[ShiftAssignment],
    requirements: list[StaffingRequirement],
    dates: Optional[Iterable[DateLike]] = None,
    holidays: Iterable[DateLike] = (),
) -> ValidationResult:
    """Check headcount and supervisor coverage of every staffing block.

    Pure: the same inputs always give the same errors in the same order.

    Args:
        assignments: Shifts to check.
        requirements: Staffing blocks.
        dates: Dates to evaluate. Defaults to the dates the assignments fall on.
        holidays: Dates on which holiday blocks replace the regular ones.

    Returns:
        ValidationResult with one error per unmet floor.
    """
    result = ValidationResult()
    for level in calculate_staffing_levels(assignments, requirements, dates, holidays):
        block = level.time_range
        if level.current_staff < level.required_staff:
            result.add_error(
                f"Insufficient staffing during {block}: {level.current_staff} employees "
                f"scheduled, minimum {level.required_staff} required"
            )
        if level.requirement.requires_supervisor:
            if not level.has_supervisor:
                result.add_error(f"No supervisor scheduled during {block}")
            elif level.supervisors < level.required_supervisors:
                result.add_error(
                    f"Insufficient supervisors during {block}: {level.supervisors} supervisors "
                    f"scheduled, minimum {level.required_supervisors} required"
                )
    return result


def validate_shift_assignment(assignment: ShiftAssignment) -> ValidationResult:
    """Field-level checks of one shift: date, time formats and shift length."""
    result = ValidationResult()
    if not is_valid_date(assignment.date):
        result.add_error("Invalid date format: must be YYYY-MM-DD")

    times_ok = True
    for field_name in ("start_time", "end_time"):
        if not is_valid_time(getattr(assignment, field_name)):
            result.add_error(f"Invalid time format: {field_name} must be in HH:mm format")
            times_ok = False

    if times_ok:
        duration = shift_duration_hours(assignment.start_time, assignment.end_time)
        if duration not in VALID_SHIFT_DURATIONS:
            result.add_error("Invalid shift duration: must be either 4, 10, or 12 hours")
    return result
