"""Validation of incoming time-off requests."""

from typing import Union

from dispatchsched.domain.intervals import is_valid_date, parse_date
from dispatchsched.domain.models import TimeOffRequest, TimeOffStatus, TimeOffType
from dispatchsched.validation.result import ValidationResult

_VALID_TYPES = {t.value for t in TimeOffType}
_VALID_STATUSES = {s.value for s in TimeOffStatus}


def _field(request, *names):
    if isinstance(request, dict):
        for name in names:
            if name in request:
                return request[name]
        return None
    return getattr(request, names[0], None)


def _enum_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (TimeOffType, TimeOffStatus)):
        return value.value
    return str(value).strip().lower().replace("-", "_")


def validate_time_off_request(request: Union[TimeOffRequest, dict]) -> ValidationResult:
    """Check a time-off request before it is stored.

    Accepts a TimeOffRequest or the raw submitted record (snake_case or
    camelCase keys). A request may start and end on the same day.
    """
    result = ValidationResult()
    start = _field(request, "start_date", "startDate")
    end = _field(request, "end_date", "endDate")

    if not is_valid_date(start):
        result.add_error("Invalid date format: start_date must be YYYY-MM-DD")
    if not is_valid_date(end):
        result.add_error("Invalid date format: end_date must be YYYY-MM-DD")
    if is_valid_date(start) and is_valid_date(end) and parse_date(start) > parse_date(end):
        result.add_error("End date must be after start date")

    if _enum_text(_field(request, "request_type", "type")) not in _VALID_TYPES:
        result.add_error("Invalid time off type")
    if _enum_text(_field(request, "status")) not in _VALID_STATUSES:
        result.add_error("Invalid status")
    return result
