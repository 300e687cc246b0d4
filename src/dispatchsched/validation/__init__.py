"""Validators for shifts, patterns, hours, staffing and time off."""

from dispatchsched.validation.conflicts import (
    ConflictResolution,
    ConflictType,
    ShiftConflict,
    ShiftConflictType,
    TimeOffConflict,
    check_assignment_conflicts,
    check_shift_conflicts,
    check_time_off_conflicts,
    check_time_off_request_conflicts,
    resolve_conflicts,
)
from dispatchsched.validation.result import ValidationResult
from dispatchsched.validation.shift_pattern import check_consecutive_days, validate_shift_pattern
from dispatchsched.validation.staffing import (
    StaffingAdjustments,
    StaffingLevel,
    calculate_staffing_levels,
    find_understaffed_periods,
    get_applicable_requirements,
    measure_block,
    suggest_shift_adjustments,
    validate_schedule,
    validate_shift_assignment,
)
from dispatchsched.validation.time_off import validate_time_off_request
from dispatchsched.validation.validator import ScheduleValidator
from dispatchsched.validation.weekly_hours import (
    MAX_WEEKLY_HOURS,
    calculate_weekly_hours,
    validate_weekly_hours,
)

__all__ = [
    # Results
    "ValidationResult",
    "ScheduleValidator",
    # Conflicts
    "ConflictResolution",
    "ConflictType",
    "ShiftConflict",
    "ShiftConflictType",
    "TimeOffConflict",
    "check_assignment_conflicts",
    "check_shift_conflicts",
    "check_time_off_conflicts",
    "check_time_off_request_conflicts",
    "resolve_conflicts",
    # Patterns and hours
    "MAX_WEEKLY_HOURS",
    "calculate_weekly_hours",
    "check_consecutive_days",
    "validate_shift_pattern",
    "validate_weekly_hours",
    # Staffing
    "StaffingAdjustments",
    "StaffingLevel",
    "calculate_staffing_levels",
    "find_understaffed_periods",
    "get_applicable_requirements",
    "measure_block",
    "suggest_shift_adjustments",
    "validate_schedule",
    "validate_shift_assignment",
    # Time off
    "validate_time_off_request",
]
