"""Domain models for dispatcher scheduling.

This module contains the core data structures shared by the validators and
the schedule generator: employees, shift templates, shift assignments,
time-off requests, staffing requirements and schedule periods.

Dates are kept as ``YYYY-MM-DD`` strings and times as ``HH:mm`` strings, the
form they arrive in from the backend, so that validators can report malformed
values instead of failing at construction time.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from dispatchsched.domain.intervals import (
    day_of_week,
    parse_time,
    shift_duration_hours,
)

_MISSING = object()


def _pick(record: dict, *keys: str, default: Any = _MISSING) -> Any:
    """Return the first key present in a backend record."""
    for key in keys:
        if key in record:
            return record[key]
    if default is _MISSING:
        raise KeyError(f"Record is missing required field {keys[0]!r}")
    return default


def _coerce_enum(enum_cls, value):
    """Build an enum member from a member or a case-insensitive value string."""
    if isinstance(value, enum_cls):
        return value
    return enum_cls(str(value).strip().lower().replace("-", "_"))


class EmployeeRole(Enum):
    """Employee roles."""

    DISPATCHER = "dispatcher"
    SUPERVISOR = "supervisor"
    MANAGER = "manager"


class ShiftPattern(Enum):
    """Work-cycle shapes an employee can be scheduled on.

    FOUR_TEN is Pattern A (four consecutive 10-hour shifts).
    THREE_TWELVE_PLUS_FOUR is Pattern B (three 12-hour shifts then one 4-hour).
    """

    FOUR_TEN = "four_ten"
    THREE_TWELVE_PLUS_FOUR = "three_twelve_plus_four"

    @property
    def label(self) -> str:
        """Short name used in messages, e.g. ``4x10``."""
        return "4x10" if self is ShiftPattern.FOUR_TEN else "3x12+4"

    @classmethod
    def from_name(cls, name) -> "ShiftPattern":
        """Resolve any of the names the backend has used for a pattern.

        Raises:
            ValueError: If the name is not a known pattern.
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        try:
            return _PATTERN_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown shift pattern: {name}") from None


_PATTERN_ALIASES = {
    "four_ten": ShiftPattern.FOUR_TEN,
    "4x10": ShiftPattern.FOUR_TEN,
    "4_10": ShiftPattern.FOUR_TEN,
    "pattern_a": ShiftPattern.FOUR_TEN,
    "three_twelve_plus_four": ShiftPattern.THREE_TWELVE_PLUS_FOUR,
    "3x12+4": ShiftPattern.THREE_TWELVE_PLUS_FOUR,
    "3x12_plus_4": ShiftPattern.THREE_TWELVE_PLUS_FOUR,
    "3_12_4": ShiftPattern.THREE_TWELVE_PLUS_FOUR,
    "3_12_plus_4": ShiftPattern.THREE_TWELVE_PLUS_FOUR,
    "pattern_b": ShiftPattern.THREE_TWELVE_PLUS_FOUR,
}


class ShiftCategory(Enum):
    """Time-of-day category of a shift template."""

    EARLY = "early"
    DAY = "day"
    SWING = "swing"
    GRAVEYARD = "graveyard"


class ShiftStatus(Enum):
    """Lifecycle status of a shift assignment."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TimeOffStatus(Enum):
    """Approval status of a time-off request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimeOffType(Enum):
    """Reason given for a time-off request."""

    VACATION = "vacation"
    SICK = "sick"
    PERSONAL = "personal"
    BEREAVEMENT = "bereavement"
    JURY_DUTY = "jury_duty"


@dataclass
class Employee:
    """A member of the dispatch roster.

    Attributes:
        id: Unique identifier.
        name: Display name.
        role: Dispatcher, supervisor or manager.
        shift_pattern: Work-cycle shape; decides which shift lengths are legal.
        weekly_hours_cap: Regular hours allowed per Sunday-started week.
        max_overtime_hours: Extra hours allowed above the cap (0 = none).
        preferred_shift_category: Soft preference used when ranking candidates.
        is_active: Inactive employees are never scheduled.
    """

    id: str
    name: str = ""
    role: EmployeeRole = EmployeeRole.DISPATCHER
    shift_pattern: ShiftPattern = ShiftPattern.FOUR_TEN
    weekly_hours_cap: float = 40
    max_overtime_hours: float = 0
    preferred_shift_category: Optional[ShiftCategory] = None
    is_active: bool = True

    def __post_init__(self):
        self.role = _coerce_enum(EmployeeRole, self.role)
        self.shift_pattern = ShiftPattern.from_name(self.shift_pattern)
        if self.preferred_shift_category is not None:
            self.preferred_shift_category = _coerce_enum(
                ShiftCategory, self.preferred_shift_category
            )
        if not self.name:
            self.name = self.id

    @property
    def is_supervisor(self) -> bool:
        """Whether this employee counts toward supervisor coverage."""
        return self.role is EmployeeRole.SUPERVISOR

    @classmethod
    def from_record(cls, record: dict) -> "Employee":
        """Build an employee from a backend row."""
        return cls(
            id=str(_pick(record, "id")),
            name=_pick(record, "name", "full_name", default=""),
            role=_pick(record, "role", default=EmployeeRole.DISPATCHER),
            shift_pattern=_pick(record, "shift_pattern", "shiftPattern"),
            weekly_hours_cap=_pick(record, "weekly_hours_cap", "weeklyHoursCap", default=40) or 40,
            max_overtime_hours=_pick(
                record, "max_overtime_hours", "maxOvertimeHours", default=0
            ) or 0,
            preferred_shift_category=_pick(
                record, "preferred_shift_category", "preferredShiftCategory", default=None
            ),
            is_active=_pick(record, "is_active", "isActive", default=True),
        )


@dataclass(frozen=True)
class ShiftOption:
    """A reusable shift template.

    Attributes:
        id: Unique identifier.
        category: Early, day, swing or graveyard.
        start_time: HH:mm start.
        end_time: HH:mm end; earlier than start_time for overnight shifts.
        duration_hours: Length in hours; derived from the times when omitted.
    """

    id: str
    category: ShiftCategory
    start_time: str
    end_time: str
    duration_hours: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "category", _coerce_enum(ShiftCategory, self.category))
        if self.duration_hours is None:
            object.__setattr__(
                self, "duration_hours", shift_duration_hours(self.start_time, self.end_time)
            )

    @property
    def crosses_midnight(self) -> bool:
        """Whether the shift ends on the following calendar day."""
        return parse_time(self.end_time) <= parse_time(self.start_time)

    @classmethod
    def from_record(cls, record: dict) -> "ShiftOption":
        """Build a shift option from a backend row."""
        return cls(
            id=str(_pick(record, "id")),
            category=_pick(record, "category"),
            start_time=_pick(record, "start_time", "startTime"),
            end_time=_pick(record, "end_time", "endTime"),
            duration_hours=_pick(record, "duration_hours", "durationHours", default=None),
        )


@dataclass
class ShiftAssignment:
    """One employee working one shift on one date.

    Attributes:
        employee_id: ID of the employee.
        date: YYYY-MM-DD date the shift starts on.
        start_time: HH:mm start.
        end_time: HH:mm end (may be before start_time when crossing midnight).
        shift_option_id: Template the shift was created from, if any.
        is_supervisor: Whether the shift counts toward supervisor coverage.
        status: Scheduled, completed or cancelled.
        id: Backend identifier once persisted.
        schedule_period_id: Period the shift was generated for.
    """

    employee_id: str
    date: str
    start_time: str
    end_time: str
    shift_option_id: Optional[str] = None
    is_supervisor: bool = False
    status: ShiftStatus = ShiftStatus.SCHEDULED
    id: Optional[str] = None
    schedule_period_id: Optional[str] = None

    def __post_init__(self):
        self.status = _coerce_enum(ShiftStatus, self.status)

    @property
    def duration_hours(self) -> float:
        """Midnight-aware length of the shift."""
        return shift_duration_hours(self.start_time, self.end_time)

    @property
    def is_cancelled(self) -> bool:
        return self.status is ShiftStatus.CANCELLED

    @classmethod
    def from_option(
        cls,
        employee: Employee,
        shift_date: str,
        option: ShiftOption,
        schedule_period_id: Optional[str] = None,
    ) -> "ShiftAssignment":
        """Create a scheduled assignment of ``employee`` to ``option``."""
        return cls(
            employee_id=employee.id,
            date=shift_date,
            start_time=option.start_time,
            end_time=option.end_time,
            shift_option_id=option.id,
            is_supervisor=employee.is_supervisor,
            schedule_period_id=schedule_period_id,
        )

    @classmethod
    def from_record(cls, record: dict) -> "ShiftAssignment":
        """Build an assignment from a backend row or JSON object."""
        return cls(
            employee_id=str(_pick(record, "employee_id", "employeeId")),
            date=_pick(record, "date"),
            start_time=_pick(record, "start_time", "startTime"),
            end_time=_pick(record, "end_time", "endTime"),
            shift_option_id=_pick(
                record, "shift_option_id", "shiftOptionId", "shift_id", "shiftId", default=None
            ),
            is_supervisor=bool(_pick(record, "is_supervisor", "isSupervisor", default=False)),
            status=_pick(record, "status", default=ShiftStatus.SCHEDULED),
            id=_pick(record, "id", default=None),
            schedule_period_id=_pick(
                record, "schedule_period_id", "schedulePeriodId", default=None
            ),
        )

    def to_record(self) -> dict:
        """Row payload for the persistence layer."""
        record = {
            "employee_id": self.employee_id,
            "shift_option_id": self.shift_option_id,
            "schedule_period_id": self.schedule_period_id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_supervisor": self.is_supervisor,
            "status": self.status.value,
        }
        if self.id is not None:
            record["id"] = self.id
        return record


@dataclass
class TimeOffRequest:
    """A request to be away for an inclusive range of dates.

    Only approved requests block scheduling.
    """

    id: str
    employee_id: str
    start_date: str
    end_date: str
    status: TimeOffStatus = TimeOffStatus.PENDING
    request_type: Optional[TimeOffType] = None

    def __post_init__(self):
        self.status = _coerce_enum(TimeOffStatus, self.status)
        if self.request_type is not None:
            self.request_type = _coerce_enum(TimeOffType, self.request_type)

    @property
    def is_approved(self) -> bool:
        return self.status is TimeOffStatus.APPROVED

    @classmethod
    def from_record(cls, record: dict) -> "TimeOffRequest":
        """Build a time-off request from a backend row."""
        return cls(
            id=str(_pick(record, "id")),
            employee_id=str(_pick(record, "employee_id", "employeeId")),
            start_date=_pick(record, "start_date", "startDate"),
            end_date=_pick(record, "end_date", "endDate"),
            status=_pick(record, "status", default=TimeOffStatus.PENDING),
            request_type=_pick(record, "request_type", "type", default=None),
        )


@dataclass
class StaffingRequirement:
    """Minimum staffing for a time-of-day block.

    A block whose end time is not after its start time wraps past midnight.
    Overlapping blocks are evaluated independently; each imposes its own floor.

    Attributes:
        id: Unique identifier.
        start_time: HH:mm start of the block.
        end_time: HH:mm end of the block.
        min_employees: Minimum headcount on shift during the block.
        min_supervisors: Minimum supervisors on shift during the block.
        day_of_week: Restrict the block to one weekday (0 = Sunday), or None for every day.
        is_holiday: Holiday blocks replace regular blocks on holidays.
        name: Optional label, e.g. "Morning peak".
    """

    id: str
    start_time: str
    end_time: str
    min_employees: int
    min_supervisors: int = 0
    day_of_week: Optional[int] = None
    is_holiday: bool = False
    name: str = ""

    @property
    def requires_supervisor(self) -> bool:
        return self.min_supervisors >= 1

    @property
    def label(self) -> str:
        """``HH:mm-HH:mm`` form used in messages."""
        return f"{self.start_time}-{self.end_time}"

    def applies_on(self, block_date) -> bool:
        """Whether the block's weekday restriction admits this date."""
        return self.day_of_week is None or self.day_of_week == day_of_week(block_date)

    @classmethod
    def from_record(cls, record: dict) -> "StaffingRequirement":
        """Build a requirement from a backend row.

        A legacy ``requires_supervisor`` flag without a supervisor count
        means one supervisor.
        """
        min_supervisors = _pick(
            record, "min_supervisors", "minSupervisors", "min_total_supervisors", default=None
        )
        if min_supervisors is None:
            requires = _pick(record, "requires_supervisor", "requiresSupervisor", default=False)
            min_supervisors = 1 if requires else 0
        return cls(
            id=str(_pick(record, "id", default="")),
            start_time=_pick(record, "start_time", "startTime", "time_block_start"),
            end_time=_pick(record, "end_time", "endTime", "time_block_end"),
            min_employees=int(
                _pick(record, "min_employees", "minEmployees", "min_total_staff")
            ),
            min_supervisors=int(min_supervisors),
            day_of_week=_pick(record, "day_of_week", "dayOfWeek", default=None),
            is_holiday=bool(_pick(record, "is_holiday", "isHoliday", default=False)),
            name=_pick(record, "name", "time_block", default=""),
        )


@dataclass
class SchedulePeriod:
    """Bounds of a schedule period (both dates inclusive)."""

    id: str
    start_date: str
    end_date: str

    @classmethod
    def from_record(cls, record: dict) -> "SchedulePeriod":
        return cls(
            id=str(_pick(record, "id", default="")),
            start_date=_pick(record, "start_date", "startDate"),
            end_date=_pick(record, "end_date", "endDate"),
        )
