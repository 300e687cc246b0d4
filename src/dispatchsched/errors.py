"""Error types raised by the scheduling core.

Validators never raise for bad data; they return a ValidationResult.
The exceptions here cover caller contract violations (bad period, missing
inputs), persistence failures reported by a data client, and refused
mutations of existing assignments.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Categories of scheduling errors."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    CONFLICT = "conflict"
    OPERATION_FAILED = "operation_failed"
    UNKNOWN_ERROR = "unknown_error"


class SchedulingError(Exception):
    """Base class for all errors raised by dispatchsched.

    Attributes:
        message: Human-readable description.
        code: Error category.
        details: Optional extra context (the underlying error, offending ids...).
    """

    default_code = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def __str__(self) -> str:
        return self.message


class ScheduleGenerationError(SchedulingError):
    """Schedule generation could not start (bad period, missing inputs)."""

    default_code = ErrorCode.VALIDATION_ERROR


class DataAccessError(SchedulingError):
    """A data client failed to read or write."""

    default_code = ErrorCode.DATABASE


class AssignmentMutationError(SchedulingError):
    """An update, cancellation or deletion of an assignment was refused."""

    default_code = ErrorCode.CONFLICT
