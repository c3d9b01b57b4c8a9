"""
Plain-record (snapshot) form of a ProviderAvailability aggregate.

The record shape mirrors what the persistence tier stores: camelCase keys
and ISO-8601 timestamps. snake_case keys are accepted on input as well.
"""

from datetime import date
from typing import Any, Dict, List, Mapping, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..domain.exceptions import AvailabilityValidationError, SnapshotError
from ..domain.models import (
    AvailabilityException,
    DayBlocked,
    DayOfWeek,
    DayOverridden,
    RecurringSchedule,
    TimeSlot,
)
from ..domain.provider_availability import ProviderAvailability, check_timezone
from ..domain.service_types import ServiceType


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeSlotRecord(_Record):
    id: str
    provider_id: str
    start_time: str
    end_time: str
    service_type: ServiceType
    is_booked: bool = False
    booking_id: Optional[str] = None


class RecurringScheduleRecord(_Record):
    id: str
    provider_id: str
    day_of_week: DayOfWeek
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    service_types: List[ServiceType]


class AvailabilityExceptionRecord(_Record):
    id: str
    provider_id: str
    date: str
    is_available: bool
    reason: Optional[str] = None
    alternative_slots: Optional[List[TimeSlotRecord]] = None


class ProviderAvailabilityRecord(_Record):
    provider_id: str
    timezone: str = "UTC"
    slots: List[TimeSlotRecord] = Field(default_factory=list)
    recurring_schedule: List[RecurringScheduleRecord] = Field(default_factory=list)
    exceptions: List[AvailabilityExceptionRecord] = Field(default_factory=list)
    last_updated: Optional[str] = None
    version: int = 0


def availability_to_record(availability: ProviderAvailability) -> Dict[str, Any]:
    """Serialize an aggregate to a JSON-compatible dict."""
    record = ProviderAvailabilityRecord(
        provider_id=availability.provider_id,
        timezone=availability.timezone,
        slots=[_slot_to_record(slot) for slot in availability.slots],
        recurring_schedule=[_schedule_to_record(s) for s in availability.recurring_schedules],
        exceptions=[_exception_to_record(e) for e in availability.exceptions],
        last_updated=availability.last_updated.to_iso8601_string(),
        version=availability.version,
    )
    return record.model_dump(by_alias=True, mode="json")


def _slot_to_record(slot: TimeSlot) -> TimeSlotRecord:
    return TimeSlotRecord(
        id=slot.id,
        provider_id=slot.provider_id,
        start_time=slot.start.to_iso8601_string(),
        end_time=slot.end.to_iso8601_string(),
        service_type=slot.service_type,
        is_booked=slot.is_booked,
        booking_id=slot.booking_id,
    )


def _schedule_to_record(schedule: RecurringSchedule) -> RecurringScheduleRecord:
    return RecurringScheduleRecord(
        id=schedule.id,
        provider_id=schedule.provider_id,
        day_of_week=schedule.day_of_week,
        start_time=str(schedule.start_time),
        end_time=str(schedule.end_time),
        service_types=list(schedule.service_types),
    )


def _exception_to_record(exception: AvailabilityException) -> AvailabilityExceptionRecord:
    alternatives = exception.alternative_slots
    return AvailabilityExceptionRecord(
        id=exception.id,
        provider_id=exception.provider_id,
        date=exception.date.isoformat(),
        is_available=exception.is_available,
        reason=exception.reason,
        alternative_slots=[_slot_to_record(slot) for slot in alternatives] if alternatives else None,
    )


def availability_from_record(data: Mapping[str, Any]) -> ProviderAvailability:
    """
    Rebuild an aggregate from its plain record.

    Raises:
        SnapshotError: If the record is malformed or any contained value
            violates its invariants
    """
    try:
        record = ProviderAvailabilityRecord.model_validate(data)
    except ValidationError as exc:
        raise SnapshotError(f"Invalid availability record: {exc}") from exc

    try:
        tz = check_timezone(record.timezone)
        return ProviderAvailability(
            provider_id=record.provider_id,
            timezone=tz,
            slots=[_slot_from_record(slot) for slot in record.slots],
            recurring_schedules=[_schedule_from_record(s) for s in record.recurring_schedule],
            exceptions=[_exception_from_record(e, tz) for e in record.exceptions],
            last_updated=_parse_timestamp(record.last_updated) if record.last_updated else None,
            version=record.version,
        )
    except AvailabilityValidationError as exc:
        raise SnapshotError(
            f"Invalid availability record for provider {record.provider_id}: {exc}"
        ) from exc


def _slot_from_record(record: TimeSlotRecord) -> TimeSlot:
    return TimeSlot(
        id=record.id,
        provider_id=record.provider_id,
        start=_parse_timestamp(record.start_time),
        end=_parse_timestamp(record.end_time),
        service_type=record.service_type,
        is_booked=record.is_booked,
        booking_id=record.booking_id,
    )


def _schedule_from_record(record: RecurringScheduleRecord) -> RecurringSchedule:
    return RecurringSchedule(
        id=record.id,
        provider_id=record.provider_id,
        day_of_week=record.day_of_week,
        start_time=record.start_time,
        end_time=record.end_time,
        service_types=tuple(record.service_types),
    )


def _exception_from_record(record: AvailabilityExceptionRecord, tz: str) -> AvailabilityException:
    day = _parse_exception_date(record.date, tz)
    alternatives = [_slot_from_record(slot) for slot in record.alternative_slots or []]

    if alternatives and not record.is_available:
        raise SnapshotError(
            f"Exception {record.id} blocks {record.date} but also lists alternative slots"
        )
    if not alternatives and record.is_available:
        raise SnapshotError(
            f"Exception {record.id} marks {record.date} available without alternative slots"
        )

    if alternatives:
        return DayOverridden(
            id=record.id,
            provider_id=record.provider_id,
            date=day,
            reason=record.reason,
            slots=tuple(alternatives),
        )
    return DayBlocked(id=record.id, provider_id=record.provider_id, date=day, reason=record.reason)


def _parse_timestamp(value: str) -> DateTime:
    try:
        parsed = pendulum.parse(value)
    except (ValueError, TypeError) as exc:
        raise SnapshotError(f"Invalid ISO-8601 timestamp: {value!r}") from exc

    if not isinstance(parsed, DateTime):
        raise SnapshotError(f"Expected an ISO-8601 datetime, got {value!r}")
    return parsed


def _parse_exception_date(value: str, tz: str) -> date:
    """
    Read an exception date in the provider timezone.

    Plain dates are taken as they are. Timestamps (the persistence tier
    stores local midnight as UTC, e.g. ``2024-11-24T23:00:00.000Z`` for
    Berlin) are converted to ``tz`` before the date is taken.
    """
    try:
        parsed = pendulum.parse(value, exact=True, tz=tz)
    except (ValueError, TypeError) as exc:
        raise SnapshotError(f"Invalid ISO-8601 timestamp: {value!r}") from exc

    if isinstance(parsed, DateTime):
        return parsed.in_timezone(tz).date()
    if isinstance(parsed, pendulum.Date):
        return parsed
    raise SnapshotError(f"Expected an ISO-8601 date, got {value!r}")
