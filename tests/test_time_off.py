"""Tests for time-off request validation."""

import pytest

from dispatchsched.domain.models import TimeOffRequest, TimeOffStatus, TimeOffType
from dispatchsched.validation.time_off import validate_time_off_request


class TestValidateTimeOffRequest:
    """Tests for validate_time_off_request."""

    @pytest.fixture
    def record(self):
        return {
            "employeeId": "e1",
            "startDate": "2025-01-06",
            "endDate": "2025-01-08",
            "type": "vacation",
            "status": "pending",
        }

    def test_valid_record(self, record):
        result = validate_time_off_request(record)
        assert result.is_valid
        assert result.errors == []

    def test_single_day(self, record):
        record["endDate"] = record["startDate"]
        assert validate_time_off_request(record).is_valid

    def test_end_before_start(self, record):
        record["endDate"] = "2025-01-05"
        assert validate_time_off_request(record).errors == ["End date must be after start date"]

    def test_bad_dates(self, record):
        record["startDate"] = "01/06/2025"
        record["endDate"] = "2025-02-30"
        assert validate_time_off_request(record).errors == [
            "Invalid date format: start_date must be YYYY-MM-DD",
            "Invalid date format: end_date must be YYYY-MM-DD",
        ]

    def test_unknown_type(self, record):
        record["type"] = "holiday"
        assert validate_time_off_request(record).errors == ["Invalid time off type"]

    def test_missing_type(self, record):
        del record["type"]
        assert validate_time_off_request(record).errors == ["Invalid time off type"]

    def test_unknown_status(self, record):
        record["status"] = "maybe"
        assert validate_time_off_request(record).errors == ["Invalid status"]

    def test_snake_case_keys(self):
        record = {
            "start_date": "2025-01-06",
            "end_date": "2025-01-06",
            "request_type": "jury-duty",
            "status": "APPROVED",
        }
        assert validate_time_off_request(record).is_valid

    def test_model_instance(self):
        request = TimeOffRequest(
            "t1",
            "e1",
            "2025-01-06",
            "2025-01-07",
            status=TimeOffStatus.APPROVED,
            request_type=TimeOffType.SICK,
        )
        assert validate_time_off_request(request).is_valid

    def test_model_instance_without_type(self):
        request = TimeOffRequest("t1", "e1", "2025-01-06", "2025-01-07")
        assert validate_time_off_request(request).errors == ["Invalid time off type"]
