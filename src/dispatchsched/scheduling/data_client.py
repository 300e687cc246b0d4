"""Data-access interface consumed by the schedule generator.

The generator never talks to a database directly. It reads the period,
roster, staffing blocks, shift templates and approved time off through a
DataClient and writes each placed shift back through it. Implementations
raise DataAccessError (or any exception) on failure; the generator lets it
propagate.
"""

import logging
from abc import ABC, abstractmethod
from itertools import count
from typing import Iterable, Optional

from dispatchsched.domain.intervals import DateLike, overlaps, parse_date, time_off_window
from dispatchsched.domain.models import (
    Employee,
    SchedulePeriod,
    ShiftAssignment,
    ShiftOption,
    StaffingRequirement,
    TimeOffRequest,
)

logger = logging.getLogger(__name__)


class DataClient(ABC):
    """Abstract base class for schedule data access."""

    @abstractmethod
    def get_schedule_period(self, period_id: str) -> Optional[SchedulePeriod]:
        """Bounds of a schedule period, or None if it doesn't exist."""
        pass

    @abstractmethod
    def get_roster(self, period_id: str) -> list[Employee]:
        """Employees available to schedule in the period."""
        pass

    @abstractmethod
    def get_staffing_requirements(self) -> list[StaffingRequirement]:
        pass

    @abstractmethod
    def get_shift_options(self) -> list[ShiftOption]:
        pass

    @abstractmethod
    def get_approved_time_off(self, start_date: str, end_date: str) -> list[TimeOffRequest]:
        """Approved requests overlapping the inclusive date range."""
        pass

    @abstractmethod
    def insert_assignment(self, assignment: ShiftAssignment) -> ShiftAssignment:
        """Persist one assignment and return it as stored (with its id).

        Raises:
            DataAccessError: If the write fails.
        """
        pass

    @abstractmethod
    def insert_assignments(self, assignments: list[ShiftAssignment]) -> list[ShiftAssignment]:
        """Persist several assignments in one call."""
        pass

    def get_holidays(self, start_date: str, end_date: str) -> list[str]:
        """Holiday dates within the range. None by default."""
        return []


class InMemoryDataClient(DataClient):
    """Dict-backed DataClient for tests, demos and offline validation.

    Example:
        >>> client = InMemoryDataClient(
        ...     periods=[SchedulePeriod("p1", "2025-01-05", "2025-01-11")],
        ...     employees=employees,
        ...     requirements=requirements,
        ...     shift_options=options,
        ... )
        >>> result = generate_schedule(client, "p1")
    """

    def __init__(
        self,
        periods: Iterable[SchedulePeriod] = (),
        employees: Iterable[Employee] = (),
        requirements: Iterable[StaffingRequirement] = (),
        shift_options: Iterable[ShiftOption] = (),
        time_off: Iterable[TimeOffRequest] = (),
        holidays: Iterable[DateLike] = (),
        assignments: Iterable[ShiftAssignment] = (),
    ):
        self.periods = {p.id: p for p in periods}
        self.employees = list(employees)
        self.requirements = list(requirements)
        self.shift_options = list(shift_options)
        self.time_off = list(time_off)
        self.holidays = sorted({parse_date(h) for h in holidays})
        self.assignments: list[ShiftAssignment] = list(assignments)
        self._ids = count(len(self.assignments) + 1)

    def get_schedule_period(self, period_id: str) -> Optional[SchedulePeriod]:
        return self.periods.get(period_id)

    def get_roster(self, period_id: str) -> list[Employee]:
        return list(self.employees)

    def get_staffing_requirements(self) -> list[StaffingRequirement]:
        return list(self.requirements)

    def get_shift_options(self) -> list[ShiftOption]:
        return list(self.shift_options)

    def get_approved_time_off(self, start_date: str, end_date: str) -> list[TimeOffRequest]:
        start, end = time_off_window(start_date, end_date)
        approved = []
        for request in self.time_off:
            if not request.is_approved:
                continue
            req_start, req_end = time_off_window(request.start_date, request.end_date)
            if overlaps(start, end, req_start, req_end):
                approved.append(request)
        return approved

    def get_holidays(self, start_date: str, end_date: str) -> list[str]:
        first, last = parse_date(start_date), parse_date(end_date)
        return [h.isoformat() for h in self.holidays if first <= h <= last]

    def insert_assignment(self, assignment: ShiftAssignment) -> ShiftAssignment:
        if assignment.id is None:
            assignment.id = f"shift-{next(self._ids)}"
        self.assignments.append(assignment)
        logger.debug(
            "Stored %s: %s on %s %s-%s",
            assignment.id,
            assignment.employee_id,
            assignment.date,
            assignment.start_time,
            assignment.end_time,
        )
        return assignment

    def insert_assignments(self, assignments: list[ShiftAssignment]) -> list[ShiftAssignment]:
        return [self.insert_assignment(a) for a in assignments]
