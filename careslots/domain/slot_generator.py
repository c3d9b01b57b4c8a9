"""
Expansion of recurring weekly schedules into concrete time slots.

Pure domain logic: the same schedules and range always produce the same
slots, including their ids.
"""

from datetime import date
from typing import Iterable, List

from pendulum import DateTime

from .models import DateRange, DayOfWeek, RecurringSchedule, TimeSlot
from .service_types import ServiceType


def generate_time_slots(
    recurring_schedules: Iterable[RecurringSchedule],
    date_range: DateRange,
    provider_id: str,
    tz: str = "UTC",
) -> List[TimeSlot]:
    """
    Generate unbooked time slots for every date in the range.

    Algorithm:
    1. Walk every calendar date in the range (both ends included)
    2. Pick the schedules whose day of week matches the date
    3. For each service type of a schedule, lay back-to-back slots of the
       type's default duration from the schedule start
    4. Stop as soon as the next slot would end after the schedule end

    Overlapping schedules produce overlapping slots; nothing is merged here.

    Args:
        recurring_schedules: Weekly schedule entries
        date_range: Dates to expand over
        provider_id: Provider that owns the generated slots
        tz: Provider timezone the schedule times are expressed in

    Returns:
        List of TimeSlot objects in generation order
    """
    schedules = list(recurring_schedules)
    slots: List[TimeSlot] = []

    for day in date_range.dates():
        day_of_week = DayOfWeek.from_date(day)

        for schedule in schedules:
            if schedule.day_of_week is not day_of_week:
                continue

            window_start, window_end = schedule.window_on(day, tz)

            for service_type in schedule.service_types:
                slots.extend(
                    _fill_window(schedule, service_type, day, window_start, window_end, provider_id)
                )

    return slots


def _fill_window(
    schedule: RecurringSchedule,
    service_type: ServiceType,
    day: date,
    window_start: DateTime,
    window_end: DateTime,
    provider_id: str,
) -> List[TimeSlot]:
    """Lay consecutive slots of one service type inside a schedule window."""
    slots: List[TimeSlot] = []
    duration = service_type.default_duration

    slot_start = window_start
    slot_end = slot_start.add(minutes=duration)

    while slot_end <= window_end:
        slots.append(
            TimeSlot(
                id=generated_slot_id(schedule.id, day, service_type, slot_start),
                provider_id=provider_id,
                start=slot_start,
                end=slot_end,
                service_type=service_type,
            )
        )
        slot_start = slot_end
        slot_end = slot_start.add(minutes=duration)

    return slots


def generated_slot_id(schedule_id: str, day: date, service_type: ServiceType, start: DateTime) -> str:
    """Stable identifier for a generated slot."""
    return f"{schedule_id}:{day.isoformat()}:{service_type.value}:{start.format('HHmm')}"
