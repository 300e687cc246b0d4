"""Command-line interface for the dispatch scheduling tool."""

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from dispatchsched.domain.intervals import date_range, week_start
from dispatchsched.domain.models import (
    Employee,
    EmployeeRole,
    SchedulePeriod,
    ShiftAssignment,
    ShiftCategory,
    ShiftOption,
    ShiftPattern,
    StaffingRequirement,
    TimeOffRequest,
    TimeOffStatus,
    TimeOffType,
)
from dispatchsched.errors import SchedulingError
from dispatchsched.output.pdf_generator import RosterPDFGenerator
from dispatchsched.output.staffing_report import StaffingReportGenerator
from dispatchsched.scheduling.cpsat_solver import SolverConfig
from dispatchsched.scheduling.data_client import InMemoryDataClient
from dispatchsched.scheduling.generator import GenerationParams, SolverType, generate_schedule
from dispatchsched.validation.result import ValidationResult
from dispatchsched.validation.staffing import validate_schedule, validate_shift_assignment
from dispatchsched.validation.validator import ScheduleValidator

logger = logging.getLogger(__name__)

DEMO_PERIOD_ID = "demo-period"


def create_sample_employees(count: int = 16) -> list[Employee]:
    """Create a sample dispatch roster.

    Every fourth employee is a supervisor; patterns alternate between 4x10
    and 3x12+4.
    """
    names = [
        "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry",
        "Ivy", "Jack", "Kate", "Leo", "Mia", "Noah", "Olivia", "Paul",
        "Quinn", "Rose", "Sam", "Tina", "Uma", "Victor", "Wendy", "Xavier",
    ]
    categories = list(ShiftCategory)

    employees = []
    for i in range(count):
        name = names[i % len(names)]
        if i >= len(names):
            name = f"{name}{i // len(names) + 1}"
        employees.append(
            Employee(
                id=f"emp-{i + 1:03d}",
                name=name,
                role=EmployeeRole.SUPERVISOR if i % 4 == 0 else EmployeeRole.DISPATCHER,
                shift_pattern=(
                    ShiftPattern.FOUR_TEN if i % 2 == 0 else ShiftPattern.THREE_TWELVE_PLUS_FOUR
                ),
                max_overtime_hours=8 if i % 3 == 0 else 0,
                preferred_shift_category=categories[i % len(categories)],
            )
        )
    return employees


def create_sample_shift_options() -> list[ShiftOption]:
    return [
        ShiftOption("early-10", ShiftCategory.EARLY, "05:00", "15:00"),
        ShiftOption("day-10", ShiftCategory.DAY, "07:00", "17:00"),
        ShiftOption("swing-10", ShiftCategory.SWING, "14:00", "00:00"),
        ShiftOption("grave-10", ShiftCategory.GRAVEYARD, "20:00", "06:00"),
        ShiftOption("day-12", ShiftCategory.DAY, "06:00", "18:00"),
        ShiftOption("night-12", ShiftCategory.GRAVEYARD, "18:00", "06:00"),
        ShiftOption("evening-4", ShiftCategory.SWING, "17:00", "21:00"),
    ]


def create_sample_requirements() -> list[StaffingRequirement]:
    return [
        StaffingRequirement("morning", "05:00", "09:00", min_employees=2, min_supervisors=1,
                            name="Morning"),
        StaffingRequirement("day", "09:00", "17:00", min_employees=3, min_supervisors=1,
                            name="Day"),
        StaffingRequirement("evening", "17:00", "23:00", min_employees=2, name="Evening"),
        StaffingRequirement("overnight", "23:00", "05:00", min_employees=1, name="Overnight"),
        StaffingRequirement("holiday-day", "07:00", "17:00", min_employees=2, min_supervisors=1,
                            is_holiday=True, name="Holiday day"),
    ]


def create_demo_client(count: int, days: int) -> InMemoryDataClient:
    """Build an in-memory data client holding a demo period and roster."""
    start = week_start(date.today()) + timedelta(days=7)
    end = start + timedelta(days=max(days, 2) - 1)
    employees = create_sample_employees(count)

    time_off = []
    if len(employees) > 2:
        time_off.append(
            TimeOffRequest(
                id="to-1",
                employee_id=employees[2].id,
                start_date=(start + timedelta(days=1)).isoformat(),
                end_date=(start + timedelta(days=2)).isoformat(),
                status=TimeOffStatus.APPROVED,
                request_type=TimeOffType.VACATION,
            )
        )

    return InMemoryDataClient(
        periods=[SchedulePeriod(DEMO_PERIOD_ID, start.isoformat(), end.isoformat())],
        employees=employees,
        requirements=create_sample_requirements(),
        shift_options=create_sample_shift_options(),
        time_off=time_off,
    )


def run_demo(
    count: int = 16,
    days: int = 7,
    solver: str = "greedy",
    consider_preferences: bool = True,
    allow_overtime: bool = False,
    report_path: Optional[str] = None,
    pdf_path: Optional[str] = None,
) -> int:
    """Generate a demo schedule and print a summary."""
    print(f"Generating demo schedule for {count} employees over {days} days...")
    client = create_demo_client(count, days)
    params = GenerationParams(
        consider_preferences=consider_preferences,
        allow_overtime=allow_overtime,
        solver=SolverType(solver),
        solver_config=SolverConfig(time_limit_seconds=10.0),
    )
    result = generate_schedule(client, DEMO_PERIOD_ID, params)

    period = client.get_schedule_period(DEMO_PERIOD_ID)
    employees_map = {e.id: e for e in client.employees}
    requirements = client.get_staffing_requirements()

    print(f"\n{'=' * 60}")
    print(f"Dispatch Schedule: {period.start_date} to {period.end_date}")
    print(f"{'=' * 60}")
    print(f"  Solver: {params.solver.value}")
    print(f"  Shifts generated: {result.shifts_generated}")
    print(f"  Unfilled requirements: {result.unfilled_requirements}")
    for level in result.understaffed[:5]:
        print(
            f"    - {level.date} {level.time_range}: {level.current_staff}/{level.required_staff} "
            f"staff, {level.supervisors}/{level.required_supervisors} supervisors"
        )
    if len(result.understaffed) > 5:
        print(f"    ... and {len(result.understaffed) - 5} more")

    dates = [d.isoformat() for d in date_range(period.start_date, period.end_date)]
    validation = ScheduleValidator().validate(
        result.assignments,
        employees_map,
        requirements,
        time_off=client.time_off,
        dates=dates,
    )
    _print_validation(validation)

    print("\nHours per employee:")
    for employee in client.employees:
        shifts = [a for a in result.assignments if a.employee_id == employee.id]
        hours = sum(a.duration_hours for a in shifts)
        print(
            f"  {employee.name} ({employee.id}, {employee.shift_pattern.label}): "
            f"{len(shifts)} shifts, {hours:.1f}h"
        )

    if report_path:
        StaffingReportGenerator().generate(
            result.assignments, employees_map, requirements, report_path, dates=dates
        )
        print(f"\nReport written to {report_path}")
    if pdf_path:
        print(f"\nGenerating PDF: {pdf_path}")
        RosterPDFGenerator().generate(
            result.assignments, employees_map, pdf_path, requirements, dates=dates
        )
        print("  PDF created successfully!")
    return 0


def _print_validation(result: ValidationResult) -> None:
    if result.is_valid:
        print("\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:10]:
            print(f"    - {error}")
        if len(result.errors) > 10:
            print(f"    ... and {len(result.errors) - 10} more errors")
    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings[:5]:
            print(f"    - {warning}")


def run_validate(path: str) -> int:
    """Validate a schedule stored as JSON.

    The file holds ``assignments`` and ``requirements`` lists and optionally
    ``employees``, ``time_off``, ``dates`` and ``holidays``. With employees
    present the full audit runs; without them only shift fields and staffing
    coverage are checked.
    """
    data = json.loads(Path(path).read_text())
    assignments = [ShiftAssignment.from_record(r) for r in data.get("assignments", [])]
    requirements = [StaffingRequirement.from_record(r) for r in data.get("requirements", [])]
    dates = data.get("dates")
    holidays = data.get("holidays", [])

    if data.get("employees"):
        employees = [Employee.from_record(r) for r in data["employees"]]
        time_off = [TimeOffRequest.from_record(r) for r in data.get("time_off", [])]
        result = ScheduleValidator().validate(
            assignments,
            {e.id: e for e in employees},
            requirements,
            time_off=time_off,
            dates=dates,
            holidays=holidays,
        )
    else:
        result = ValidationResult()
        for assignment in assignments:
            result.merge(validate_shift_assignment(assignment))
        result.merge(validate_schedule(assignments, requirements, dates, holidays))

    print(f"Checked {len(assignments)} assignments against {len(requirements)} staffing blocks")
    _print_validation(result)
    return 0 if result.is_valid else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Dispatch shift scheduling tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                          Generate a week for 16 dispatchers
  %(prog)s demo --count 24 --days 14     Larger roster, two weeks
  %(prog)s demo --solver cpsat           Plan the period with CP-SAT first
  %(prog)s demo --pdf roster.pdf         Write a printable roster

  %(prog)s validate schedule.json        Check a saved schedule
        """,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser(
        "demo", parents=[common], help="Generate a demo schedule"
    )
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=16,
        help="Number of employees to generate (default: 16)",
    )
    demo_parser.add_argument(
        "--days", "-d",
        type=int,
        default=7,
        help="Number of days to schedule (default: 7)",
    )
    demo_parser.add_argument(
        "--solver", "-s",
        type=str,
        default="greedy",
        choices=["greedy", "cpsat"],
        help="greedy (block by block, default) or cpsat (plan the period first)",
    )
    demo_parser.add_argument(
        "--no-preferences",
        action="store_true",
        help="Take candidates in roster order instead of ranking them",
    )
    demo_parser.add_argument(
        "--allow-overtime",
        action="store_true",
        help="Let overtime allowances raise weekly caps",
    )
    demo_parser.add_argument("--report", "-r", type=str, help="Write a text staffing report")
    demo_parser.add_argument("--pdf", "-o", type=str, help="Output PDF file path")

    validate_parser = subparsers.add_parser(
        "validate", parents=[common], help="Validate a schedule JSON file"
    )
    validate_parser.add_argument(
        "file", type=str, help="JSON file with assignments and requirements"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "demo":
            return run_demo(
                args.count,
                args.days,
                args.solver,
                consider_preferences=not args.no_preferences,
                allow_overtime=args.allow_overtime,
                report_path=args.report,
                pdf_path=args.pdf,
            )
        elif args.command == "validate":
            return run_validate(args.file)
        else:
            parser.print_help()
            return 1
    except SchedulingError as e:
        logger.error("Scheduling failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
