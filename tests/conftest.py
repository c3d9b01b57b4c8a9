"""
Shared fixtures for the availability tests.

2024-11-25 is a Monday; the provider works in Europe/Berlin.
"""

import pendulum
import pytest

from careslots.domain.models import DayBlocked, DayOverridden, RecurringSchedule, TimeSlot
from careslots.domain.provider_availability import ProviderAvailability
from careslots.domain.service_types import ServiceType

PROVIDER_ID = "prov-1"
TZ = "Europe/Berlin"


def at(text: str) -> pendulum.DateTime:
    """Parse a local wall-clock time in the provider timezone."""
    return pendulum.parse(text, tz=TZ)


@pytest.fixture
def make_slot():
    def _make_slot(
        slot_id,
        start,
        end,
        service_type=ServiceType.PHYSICAL_THERAPY,
        is_booked=False,
        booking_id=None,
        provider_id=PROVIDER_ID,
    ):
        return TimeSlot(
            id=slot_id,
            provider_id=provider_id,
            start=at(start),
            end=at(end),
            service_type=service_type,
            is_booked=is_booked,
            booking_id=booking_id,
        )

    return _make_slot


@pytest.fixture
def monday_schedule():
    """Monday 09:00-11:00, physical therapy only."""
    return RecurringSchedule(
        id="sched-mon",
        provider_id=PROVIDER_ID,
        day_of_week="MONDAY",
        start_time="09:00",
        end_time="11:00",
        service_types=[ServiceType.PHYSICAL_THERAPY],
    )


@pytest.fixture
def availability(monday_schedule):
    return ProviderAvailability(
        provider_id=PROVIDER_ID,
        timezone=TZ,
        recurring_schedules=[monday_schedule],
    )


@pytest.fixture
def monday_blocked():
    return DayBlocked(id="exc-block", provider_id=PROVIDER_ID, date=pendulum.date(2024, 11, 25), reason="Holiday")


@pytest.fixture
def monday_overridden(make_slot):
    return DayOverridden(
        id="exc-override",
        provider_id=PROVIDER_ID,
        date=pendulum.date(2024, 11, 25),
        slots=(make_slot("alt-1", "2024-11-25 14:00", "2024-11-25 15:00"),),
    )
