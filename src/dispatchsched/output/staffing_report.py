"""Plain-text staffing report.

The report shows, for a generated or hand-built schedule:
- Coverage of every staffing block on every date
- Suggested adjustments for under- and overstaffed blocks
- Hours per employee per Sunday-started week
"""

from collections import defaultdict
from pathlib import Path
from typing import Iterable, Optional, Union

from dispatchsched.domain.intervals import DateLike, format_hours, week_start_key
from dispatchsched.domain.models import Employee, ShiftAssignment, StaffingRequirement
from dispatchsched.validation.staffing import (
    calculate_staffing_levels,
    suggest_shift_adjustments,
)


class StaffingReportGenerator:
    """Generates a text report of staffing coverage and hours.

    Example:
        >>> report = StaffingReportGenerator()
        >>> print(report.generate_to_string(assignments, employees_map, requirements))
    """

    def generate(
        self,
        assignments: list[ShiftAssignment],
        employees_map: dict[str, Employee],
        requirements: list[StaffingRequirement],
        output_path: Union[str, Path],
        dates: Optional[Iterable[DateLike]] = None,
        holidays: Iterable[DateLike] = (),
    ) -> str:
        """Generate the report and save it to a file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(assignments, employees_map, requirements, dates, holidays)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        assignments: list[ShiftAssignment],
        employees_map: dict[str, Employee],
        requirements: list[StaffingRequirement],
        dates: Optional[Iterable[DateLike]] = None,
        holidays: Iterable[DateLike] = (),
    ) -> str:
        """Generate the report and return it as a string.

        Args:
            assignments: Shifts in the schedule; cancelled ones are skipped.
            employees_map: Dict mapping employee IDs to Employee objects.
            requirements: Staffing blocks.
            dates: Dates to report on (defaults to the shift dates).
            holidays: Dates on which holiday blocks apply.

        Returns:
            The generated text content.
        """
        dates = list(dates) if dates is not None else None
        holidays = list(holidays)
        active = [a for a in assignments if not a.is_cancelled]
        levels = calculate_staffing_levels(active, requirements, dates, holidays)
        adjustments = suggest_shift_adjustments(active, requirements, dates, holidays)

        lines = []
        lines.append("=" * 80)
        lines.append("STAFFING REPORT")
        lines.append("=" * 80)
        lines.append("")
        lines.append(f"Shifts scheduled: {len(active)}")
        lines.append(f"Employees scheduled: {len({a.employee_id for a in active})}")
        lines.append(f"Blocks evaluated: {len(levels)}")
        lines.append(f"Blocks below minimum: {len(adjustments.understaffed)}")
        lines.append("")

        lines.append("-" * 80)
        lines.append("COVERAGE BY BLOCK")
        lines.append("-" * 80)
        lines.append(f"{'Date':<12} {'Block':<13} {'Staff':>9} {'Supervisors':>12}  Status")
        lines.append("-" * 80)
        for level in levels:
            staff = f"{level.current_staff}/{level.required_staff}"
            supervisors = f"{level.supervisors}/{level.required_supervisors}"
            status = "OK" if level.is_met else "SHORT"
            lines.append(
                f"{level.date:<12} {level.time_range:<13} {staff:>9} {supervisors:>12}  {status}"
            )
        lines.append("")

        lines.append("-" * 80)
        lines.append("SUGGESTED ADJUSTMENTS")
        lines.append("-" * 80)
        if adjustments.suggestions:
            for suggestion in adjustments.suggestions:
                lines.append(f"  - {suggestion}")
        else:
            lines.append("  None")
        lines.append("")

        lines.extend(self._hours_section(active, employees_map))
        return "\n".join(lines) + "\n"

    def _hours_section(
        self, assignments: list[ShiftAssignment], employees_map: dict[str, Employee]
    ) -> list[str]:
        """Hours per employee per week, flagging weeks above the cap."""
        hours = defaultdict(lambda: defaultdict(float))
        for assignment in assignments:
            week = week_start_key(assignment.date)
            hours[assignment.employee_id][week] += assignment.duration_hours
        weeks = sorted({week for per_week in hours.values() for week in per_week})

        lines = ["-" * 80, "HOURS BY WEEK (week starting)", "-" * 80]
        lines.append(f"{'Employee':<22} {'Pattern':<8}" + "".join(f" {w:>11}" for w in weeks))
        lines.append("-" * 80)

        def sort_key(employee_id):
            employee = employees_map.get(employee_id)
            return (employee.name if employee else employee_id, employee_id)

        for employee_id in sorted(hours, key=sort_key):
            employee = employees_map.get(employee_id)
            name = (employee.name if employee else employee_id)[:22]
            pattern = employee.shift_pattern.label if employee else "?"
            cells = []
            for week in weeks:
                total = hours[employee_id].get(week, 0)
                flag = "*" if employee and total > employee.weekly_hours_cap else " "
                cells.append(f" {format_hours(total):>10}{flag}")
            lines.append(f"{name:<22} {pattern:<8}" + "".join(cells))
        lines.append("")
        lines.append("* above weekly hours cap")
        return lines
