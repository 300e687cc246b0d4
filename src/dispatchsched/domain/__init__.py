"""Domain models, time arithmetic and shift-pattern rules."""

from dispatchsched.domain.intervals import (
    covers,
    date_range,
    day_of_week,
    format_hours,
    overlaps,
    parse_date,
    parse_time,
    shift_duration_hours,
    week_start,
    week_start_key,
)
from dispatchsched.domain.models import (
    Employee,
    EmployeeRole,
    SchedulePeriod,
    ShiftAssignment,
    ShiftCategory,
    ShiftOption,
    ShiftPattern,
    ShiftStatus,
    StaffingRequirement,
    TimeOffRequest,
    TimeOffStatus,
    TimeOffType,
)
from dispatchsched.domain.patterns import (
    MAX_CONSECUTIVE_DAYS,
    VALID_SHIFT_DURATIONS,
    FourTenPolicy,
    PatternPolicy,
    ThreeTwelvePlusFourPolicy,
    get_pattern_policy,
)

__all__ = [
    # Models
    "Employee",
    "EmployeeRole",
    "SchedulePeriod",
    "ShiftAssignment",
    "ShiftCategory",
    "ShiftOption",
    "ShiftPattern",
    "ShiftStatus",
    "StaffingRequirement",
    "TimeOffRequest",
    "TimeOffStatus",
    "TimeOffType",
    # Intervals
    "covers",
    "date_range",
    "day_of_week",
    "format_hours",
    "overlaps",
    "parse_date",
    "parse_time",
    "shift_duration_hours",
    "week_start",
    "week_start_key",
    # Policies
    "MAX_CONSECUTIVE_DAYS",
    "VALID_SHIFT_DURATIONS",
    "FourTenPolicy",
    "PatternPolicy",
    "ThreeTwelvePlusFourPolicy",
    "get_pattern_policy",
]
