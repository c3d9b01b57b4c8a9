"""
Time-of-day values used by recurring schedules.
"""

import re
from dataclasses import dataclass
from datetime import date

import pendulum
from pendulum import DateTime

from .exceptions import InvalidTimeFormatError

_TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    A wall-clock time without a date, e.g. 09:30.

    Invariant: 0 <= hour <= 23 and 0 <= minute <= 59.
    """
    hour: int
    minute: int

    def __post_init__(self):
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise InvalidTimeFormatError(
                f"Invalid time of day {self.hour}:{self.minute}. "
                "Hour must be 0-23 and minute 0-59."
            )

    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute

    def on(self, day: date, tz: str) -> DateTime:
        """Place this time of day on a calendar date in the given timezone."""
        return pendulum.datetime(day.year, day.month, day.day, self.hour, self.minute, tz=tz)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_time_string(text: str) -> TimeOfDay:
    """
    Parse a strict 24-hour ``HH:MM`` string.

    Args:
        text: Time string such as ``"09:05"``

    Returns:
        TimeOfDay instance

    Raises:
        InvalidTimeFormatError: If the string is not exactly HH:MM with
            hour 00-23 and minute 00-59
    """
    if not isinstance(text, str):
        raise InvalidTimeFormatError(f'Invalid time format: {text!r}. Expected format: "HH:MM"')

    match = _TIME_PATTERN.fullmatch(text)
    if match is None:
        raise InvalidTimeFormatError(f'Invalid time format: {text!r}. Expected format: "HH:MM"')

    return TimeOfDay(hour=int(match.group(1)), minute=int(match.group(2)))
