"""Wall-clock time helpers for appointment slots"""

import re
from datetime import date, datetime, time

from ...errors import FormatError

# Used with fullmatch; "$" alone would accept a trailing newline
TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")


def is_valid_time(value: object) -> bool:
    """True when value is a 24-hour HH:MM string"""
    return isinstance(value, str) and TIME_PATTERN.fullmatch(value) is not None


def to_minutes(time_string: str) -> int:
    """Convert 'HH:MM' into minutes since midnight"""
    if not is_valid_time(time_string):
        raise FormatError(f"Time must be in HH:MM format, got {time_string!r}.")
    hours, minutes = time_string.split(":")
    return int(hours) * 60 + int(minutes)


def start_instant(day: date, start_time: str) -> datetime:
    """Naive local datetime at which a slot starting at start_time on day begins"""
    minutes = to_minutes(start_time)
    return datetime.combine(day, time(hour=minutes // 60, minute=minutes % 60))


def minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute
