"""Date and time arithmetic shared by every validator.

Dates travel as ``YYYY-MM-DD`` strings and times as ``HH:mm`` 24-hour strings.
A shift whose end time is not after its start time crosses midnight, so all
duration math goes through ``shift_duration_hours`` and is taken modulo 24h.
"""

import re
from datetime import date, datetime, timedelta
from typing import Union

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

MINUTES_PER_DAY = 24 * 60

DateLike = Union[str, date]


def is_valid_date(value: str) -> bool:
    """Check a string is a real calendar date in YYYY-MM-DD form."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_valid_time(value: str) -> bool:
    """Check a string is an HH:mm 24-hour time."""
    return isinstance(value, str) and bool(TIME_PATTERN.match(value))


def parse_date(value: DateLike) -> date:
    """Parse a YYYY-MM-DD string (or pass a date through).

    Raises:
        ValueError: If the value is not a valid date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_valid_date(value):
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    return date.fromisoformat(value)


def format_date(value: DateLike) -> str:
    """Normalize a date to its YYYY-MM-DD string."""
    return parse_date(value).isoformat()


def parse_time(value: str) -> int:
    """Parse an HH:mm string into minutes after midnight.

    Raises:
        ValueError: If the value is not a valid HH:mm time.
    """
    if not is_valid_time(value):
        raise ValueError(f"Invalid time: {value!r} (expected HH:mm)")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def shift_duration_minutes(start_time: str, end_time: str) -> int:
    """Minutes between two times of day, wrapping past midnight."""
    return (parse_time(end_time) - parse_time(start_time)) % MINUTES_PER_DAY


def shift_duration_hours(start_time: str, end_time: str) -> float:
    """Hours between two times of day, wrapping past midnight.

    ``shift_duration_hours("20:00", "06:00")`` is 10.0.
    """
    return shift_duration_minutes(start_time, end_time) / 60.0


def format_hours(hours: float) -> str:
    """Render an hour count without a trailing ``.0``."""
    return f"{hours:g}"


def day_of_week(value: DateLike) -> int:
    """Day index with 0 = Sunday ... 6 = Saturday."""
    return (parse_date(value).weekday() + 1) % 7


def week_start(value: DateLike) -> date:
    """The most recent Sunday on or before the date."""
    d = parse_date(value)
    return d - timedelta(days=day_of_week(d))


def week_start_key(value: DateLike) -> str:
    """ISO string of ``week_start``; the key used by weekly-hours trackers."""
    return week_start(value).isoformat()


def is_next_day(previous: DateLike, current: DateLike) -> bool:
    """True if ``current`` is exactly one calendar day after ``previous``."""
    return (parse_date(current) - parse_date(previous)).days == 1


def date_range(start: DateLike, end: DateLike) -> list[date]:
    """All dates from start to end, inclusive."""
    current = parse_date(start)
    last = parse_date(end)
    dates = []
    while current <= last:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Check whether closed-open intervals [a_start, a_end) and [b_start, b_end) intersect.

    Works for any mutually comparable bounds (datetimes, dates, minutes).
    """
    return a_start < b_end and b_start < a_end


def covers(outer_start, outer_end, inner_start, inner_end) -> bool:
    """True if [outer_start, outer_end) contains all of [inner_start, inner_end)."""
    return outer_start <= inner_start and inner_end <= outer_end


def shift_window(
    shift_date: DateLike, start_time: str, end_time: str
) -> tuple[datetime, datetime]:
    """Absolute [start, end) of a shift starting on ``shift_date``."""
    d = parse_date(shift_date)
    start = datetime(d.year, d.month, d.day) + timedelta(minutes=parse_time(start_time))
    return start, start + timedelta(minutes=shift_duration_minutes(start_time, end_time))


def time_off_window(start_date: DateLike, end_date: DateLike) -> tuple[datetime, datetime]:
    """Absolute [start, end) covered by an inclusive time-off date range."""
    first = parse_date(start_date)
    last = parse_date(end_date) + timedelta(days=1)
    return (
        datetime(first.year, first.month, first.day),
        datetime(last.year, last.month, last.day),
    )


def block_window(
    block_date: DateLike, start_time: str, end_time: str
) -> tuple[datetime, datetime]:
    """Absolute [start, end) of a staffing block on ``block_date``.

    A block whose end equals its start spans the whole day.
    """
    d = parse_date(block_date)
    start = datetime(d.year, d.month, d.day) + timedelta(minutes=parse_time(start_time))
    length = shift_duration_minutes(start_time, end_time) or MINUTES_PER_DAY
    return start, start + timedelta(minutes=length)
