"""Whole-schedule audit.

ScheduleValidator runs every rule over a finished schedule in one pass:
field checks, per-employee hour caps and pattern fit, consecutive-day runs,
time-off collisions, double booking and staffing coverage. It is what the
generator's output and hand-edited schedules are checked against before
they are published.
"""

from collections import defaultdict
from typing import Iterable, Optional

from dispatchsched.domain.intervals import (
    DateLike,
    format_hours,
    is_next_day,
    overlaps,
    parse_date,
    shift_window,
    week_start_key,
)
from dispatchsched.domain.models import (
    Employee,
    ShiftAssignment,
    StaffingRequirement,
    TimeOffRequest,
)
from dispatchsched.domain.patterns import MAX_CONSECUTIVE_DAYS, get_pattern_policy
from dispatchsched.validation.conflicts import check_time_off_conflicts
from dispatchsched.validation.result import ValidationResult
from dispatchsched.validation.staffing import validate_schedule, validate_shift_assignment


class ScheduleValidator:
    """Validates a schedule against all constraints.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(assignments, employees_map, requirements)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, max_consecutive_days: int = MAX_CONSECUTIVE_DAYS):
        self.max_consecutive_days = max_consecutive_days

    def validate(
        self,
        assignments: list[ShiftAssignment],
        employees_map: dict[str, Employee],
        requirements: list[StaffingRequirement],
        time_off: Iterable[TimeOffRequest] = (),
        dates: Optional[Iterable[DateLike]] = None,
        holidays: Iterable[DateLike] = (),
    ) -> ValidationResult:
        """Validate a complete schedule.

        Args:
            assignments: Every shift in the schedule.
            employees_map: Dict mapping employee IDs to Employee objects.
            requirements: Staffing blocks to check coverage against.
            time_off: Time-off requests; only approved ones matter.
            dates: Dates to check coverage on (defaults to the shift dates).
            holidays: Dates on which holiday blocks apply.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult()
        time_off = list(time_off)
        active = [a for a in assignments if not a.is_cancelled]

        well_formed = []
        for assignment in active:
            field_check = validate_shift_assignment(assignment)
            if not field_check.is_valid:
                for error in field_check.errors:
                    result.add_error(f"Employee {assignment.employee_id}: {error}")
                continue
            well_formed.append(assignment)

        by_employee = defaultdict(list)
        for assignment in well_formed:
            by_employee[assignment.employee_id].append(assignment)

        for employee_id, shifts in by_employee.items():
            employee = employees_map.get(employee_id)
            if employee is None:
                result.add_error(f"Unknown employee ID: {employee_id}")
                continue
            if not employee.is_active:
                result.add_warning(f"Employee {employee_id}: scheduled while inactive")
            shifts = sorted(shifts, key=lambda a: (parse_date(a.date), a.start_time))
            self._validate_pattern_fit(employee, shifts, result)
            self._validate_weekly_caps(employee, shifts, result)
            self._validate_consecutive_runs(employee, shifts, result)
            self._validate_double_booking(employee, shifts, result)
            self._validate_time_off(employee, shifts, time_off, result)

        result.merge(validate_schedule(well_formed, requirements, dates, holidays))
        return result

    def _validate_pattern_fit(
        self, employee: Employee, shifts: list[ShiftAssignment], result: ValidationResult
    ) -> None:
        policy = get_pattern_policy(employee.shift_pattern)
        for shift in shifts:
            if not policy.is_allowed_duration(shift.duration_hours):
                result.add_error(
                    f"Employee {employee.id}: {format_hours(shift.duration_hours)}-hour shift on "
                    f"{shift.date} does not fit the {employee.shift_pattern.label} pattern"
                )

    def _validate_weekly_caps(
        self, employee: Employee, shifts: list[ShiftAssignment], result: ValidationResult
    ) -> None:
        ceiling = employee.weekly_hours_cap + (employee.max_overtime_hours or 0)
        totals = defaultdict(float)
        for shift in shifts:
            totals[week_start_key(shift.date)] += shift.duration_hours
        for week, total in sorted(totals.items()):
            if total > ceiling:
                result.add_error(
                    f"Employee {employee.id}: Weekly hours ({format_hours(total)}) for week of "
                    f"{week} exceed maximum allowed ({format_hours(ceiling)})"
                )

    def _validate_consecutive_runs(
        self, employee: Employee, shifts: list[ShiftAssignment], result: ValidationResult
    ) -> None:
        days = sorted({parse_date(s.date) for s in shifts})
        run = 0
        previous = None
        for day in days:
            run = run + 1 if previous is not None and is_next_day(previous, day) else 1
            previous = day
            if run == self.max_consecutive_days + 1:
                result.add_error(
                    f"Employee {employee.id}: more than {self.max_consecutive_days} "
                    f"consecutive days ending {day.isoformat()}"
                )

    def _validate_double_booking(
        self, employee: Employee, shifts: list[ShiftAssignment], result: ValidationResult
    ) -> None:
        windows = [(s, *shift_window(s.date, s.start_time, s.end_time)) for s in shifts]
        for i, (shift, start, end) in enumerate(windows):
            for other, other_start, other_end in windows[i + 1:]:
                if overlaps(start, end, other_start, other_end):
                    result.add_error(
                        f"Employee {employee.id}: shift on {shift.date} {shift.start_time} "
                        f"overlaps shift on {other.date} {other.start_time}"
                    )

    def _validate_time_off(
        self,
        employee: Employee,
        shifts: list[ShiftAssignment],
        time_off: list[TimeOffRequest],
        result: ValidationResult,
    ) -> None:
        if not time_off:
            return
        for shift in shifts:
            for conflict in check_time_off_conflicts(shift, time_off):
                result.add_error(
                    f"Employee {employee.id}: shift on {shift.date} conflicts with approved "
                    f"time off {conflict.time_off_request.start_date} to "
                    f"{conflict.time_off_request.end_date}"
                )
