"""
Application of date-specific availability exceptions to generated slots.
"""

from datetime import date
from typing import Iterable, List

from .models import AvailabilityException, TimeSlot


def apply_exceptions(
    time_slots: Iterable[TimeSlot],
    exceptions: Iterable[AvailabilityException],
    tz: str = "UTC",
) -> List[TimeSlot]:
    """
    Apply availability exceptions to a set of generated slots.

    Every exception suppresses the slots that start on its date (in ``tz``).
    Overrides then contribute their replacement slots. Several exceptions on
    the same date combine: the day stays suppressed and all replacement
    slots are kept, whatever order the exceptions come in.

    Args:
        time_slots: Slots generated from the recurring schedule
        exceptions: Exceptions to apply
        tz: Provider timezone used to find a slot's date

    Returns:
        Surviving generated slots followed by replacement slots
    """
    exception_list = list(exceptions)
    excepted_dates = {exception.date for exception in exception_list}

    result = [slot for slot in time_slots if slot.local_date(tz) not in excepted_dates]

    for exception in exception_list:
        result.extend(exception.alternative_slots)

    return result


def exceptions_for_date(
    exceptions: Iterable[AvailabilityException],
    day: date,
) -> List[AvailabilityException]:
    """Return the exceptions that target a given calendar date."""
    return [exception for exception in exceptions if exception.date == day]
