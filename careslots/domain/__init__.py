"""
Domain layer - Pure scheduling logic without I/O.
"""

from .conflicts import find_conflicts, is_time_slot_conflict
from .exception_rules import apply_exceptions
from .models import (
    AvailabilityException,
    DateRange,
    DayBlocked,
    DayOfWeek,
    DayOverridden,
    RecurringSchedule,
    TimeSlot,
)
from .provider_availability import ProviderAvailability
from .service_types import ServiceCategory, ServiceType
from .slot_generator import generate_time_slots
from .time_of_day import TimeOfDay, parse_time_string

__all__ = [
    "AvailabilityException",
    "DateRange",
    "DayBlocked",
    "DayOfWeek",
    "DayOverridden",
    "ProviderAvailability",
    "RecurringSchedule",
    "ServiceCategory",
    "ServiceType",
    "TimeOfDay",
    "TimeSlot",
    "apply_exceptions",
    "find_conflicts",
    "generate_time_slots",
    "is_time_slot_conflict",
    "parse_time_string",
]
