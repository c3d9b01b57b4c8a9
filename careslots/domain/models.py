"""
Domain models for provider availability.

All values here are immutable. Invariants are checked at construction and
can be re-checked with ``ensure_valid()``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterator, Optional, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import AvailabilityValidationError
from .service_types import ServiceType
from .time_of_day import TimeOfDay, parse_time_string


class DayOfWeek(str, Enum):
    """Days of the week, Monday first to match ``date.weekday()``."""
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_date(cls, day: date) -> "DayOfWeek":
        """Map a calendar date to its day of week."""
        return _WEEK[day.weekday()]


_WEEK: Tuple[DayOfWeek, ...] = tuple(DayOfWeek)


def _coerce_service_type(value) -> ServiceType:
    if isinstance(value, ServiceType):
        return value
    try:
        return ServiceType(value)
    except ValueError as exc:
        raise AvailabilityValidationError(f"Invalid service type: {value!r}") from exc


def _coerce_datetime(value, field_name: str) -> DateTime:
    if not isinstance(value, datetime):
        raise AvailabilityValidationError(f"{field_name} must be a datetime, got {value!r}")
    if value.tzinfo is None:
        raise AvailabilityValidationError(f"{field_name} must be timezone-aware, got {value}")
    return pendulum.instance(value)


def _coerce_date(value, field_name: str) -> date:
    # A datetime contributes its own wall-clock date; callers holding UTC
    # timestamps convert to the provider timezone first.
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise AvailabilityValidationError(f"{field_name} must be a date, got {value!r}")
    return value


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive range of calendar dates.

    Invariant: start must not be after end.
    """
    start: date
    end: date

    def __post_init__(self):
        object.__setattr__(self, "start", _coerce_date(self.start, "start"))
        object.__setattr__(self, "end", _coerce_date(self.end, "end"))
        if self.start > self.end:
            raise AvailabilityValidationError(
                f"Start date {self.start} must not be after end date {self.end}"
            )

    def dates(self) -> Iterator[date]:
        """Iterate over every calendar date in the range, both ends included."""
        current = self.start
        while current <= self.end:
            yield current
            current = current + timedelta(days=1)

    def contains_date(self, day: date) -> bool:
        return self.start <= day <= self.end

    def bounds(self, tz: str) -> Tuple[DateTime, DateTime]:
        """Return the half-open ``[start 00:00, end + 1 day 00:00)`` window in ``tz``."""
        lower = pendulum.datetime(self.start.year, self.start.month, self.start.day, tz=tz)
        upper = pendulum.datetime(self.end.year, self.end.month, self.end.day, tz=tz).add(days=1)
        return lower, upper


@dataclass(frozen=True)
class TimeSlot:
    """
    One concrete bookable interval of provider time.

    Invariants: start < end, both timezone-aware; service_type is a known
    ServiceType; booking_id is set if and only if is_booked.
    """
    id: str
    provider_id: str
    start: DateTime
    end: DateTime
    service_type: ServiceType
    is_booked: bool = False
    booking_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "start", _coerce_datetime(self.start, "start"))
        object.__setattr__(self, "end", _coerce_datetime(self.end, "end"))
        object.__setattr__(self, "service_type", _coerce_service_type(self.service_type))
        self.ensure_valid()

    def ensure_valid(self) -> None:
        if not self.id:
            raise AvailabilityValidationError("Time slot id must not be empty")
        if not self.provider_id:
            raise AvailabilityValidationError(f"Time slot {self.id} has no provider id")
        if self.start >= self.end:
            raise AvailabilityValidationError(
                f"Start time {self.start} must be before end time {self.end}"
            )
        if not isinstance(self.service_type, ServiceType):
            raise AvailabilityValidationError(f"Invalid service type: {self.service_type!r}")
        if self.is_booked and not self.booking_id:
            raise AvailabilityValidationError(f"Booked time slot {self.id} has no booking id")
        if not self.is_booked and self.booking_id is not None:
            raise AvailabilityValidationError(
                f"Unbooked time slot {self.id} carries booking id {self.booking_id}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeSlot") -> bool:
        """Check if this slot overlaps another; touching endpoints do not."""
        return self.start < other.end and self.end > other.start

    def local_date(self, tz: str) -> date:
        """Calendar date of the slot start in the given timezone."""
        return self.start.in_timezone(tz).date()

    def book(self, booking_id: str) -> "TimeSlot":
        """Return a booked copy of this slot."""
        if self.is_booked:
            raise AvailabilityValidationError(
                f"Time slot {self.id} is already booked by {self.booking_id}"
            )
        return replace(self, is_booked=True, booking_id=booking_id)

    def unbook(self) -> "TimeSlot":
        """Return a free copy of this slot."""
        if not self.is_booked:
            raise AvailabilityValidationError(f"Time slot {self.id} is not booked")
        return replace(self, is_booked=False, booking_id=None)

    def __str__(self) -> str:
        return (
            f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')} "
            f"{self.service_type.value}"
        )


@dataclass(frozen=True)
class RecurringSchedule:
    """
    A standing weekly availability window.

    ``"HH:MM"`` strings, day names and service type values are converted on
    construction; anything unparseable raises AvailabilityValidationError.
    """
    id: str
    provider_id: str
    day_of_week: DayOfWeek
    start_time: TimeOfDay
    end_time: TimeOfDay
    service_types: Tuple[ServiceType, ...]

    def __post_init__(self):
        if not isinstance(self.day_of_week, DayOfWeek):
            try:
                object.__setattr__(self, "day_of_week", DayOfWeek(self.day_of_week))
            except ValueError as exc:
                raise AvailabilityValidationError(
                    f"Invalid day of week: {self.day_of_week!r}"
                ) from exc
        if isinstance(self.start_time, str):
            object.__setattr__(self, "start_time", parse_time_string(self.start_time))
        if isinstance(self.end_time, str):
            object.__setattr__(self, "end_time", parse_time_string(self.end_time))
        if isinstance(self.service_types, (str, ServiceType)):
            raise AvailabilityValidationError("service_types must be a collection, not a single value")
        object.__setattr__(
            self,
            "service_types",
            tuple(_coerce_service_type(value) for value in self.service_types),
        )
        self.ensure_valid()

    def ensure_valid(self) -> None:
        if not self.id:
            raise AvailabilityValidationError("Recurring schedule id must not be empty")
        if not self.provider_id:
            raise AvailabilityValidationError(f"Recurring schedule {self.id} has no provider id")
        if not isinstance(self.start_time, TimeOfDay) or not isinstance(self.end_time, TimeOfDay):
            raise AvailabilityValidationError(f"Recurring schedule {self.id} has invalid times")
        if self.start_time >= self.end_time:
            raise AvailabilityValidationError(
                f"Schedule start {self.start_time} must be before end {self.end_time}"
            )
        if not self.service_types:
            raise AvailabilityValidationError(
                f"Recurring schedule {self.id} must cover at least one service type"
            )
        if len(set(self.service_types)) != len(self.service_types):
            raise AvailabilityValidationError(
                f"Recurring schedule {self.id} lists a service type more than once"
            )

    def window_on(self, day: date, tz: str) -> Tuple[DateTime, DateTime]:
        """Return the schedule's start and end on a given date."""
        return self.start_time.on(day, tz), self.end_time.on(day, tz)

    def covers(self, start: DateTime, end: DateTime, service_type: ServiceType, tz: str) -> bool:
        """
        Check whether ``[start, end)`` lies inside this schedule's window.

        The day of week is taken from ``start`` in the provider timezone.
        A range that runs past midnight is never covered.
        """
        if service_type not in self.service_types:
            return False

        local_day = start.in_timezone(tz).date()
        if DayOfWeek.from_date(local_day) is not self.day_of_week:
            return False

        window_start, window_end = self.window_on(local_day, tz)
        return window_start <= start and end <= window_end


@dataclass(frozen=True)
class AvailabilityException(ABC):
    """
    Date-specific override of the recurring pattern.

    Use one of the concrete variants: DayBlocked or DayOverridden.
    """
    id: str
    provider_id: str
    date: date
    reason: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "date", _coerce_date(self.date, "date"))
        self.ensure_valid()

    def ensure_valid(self) -> None:
        if not self.id:
            raise AvailabilityValidationError("Availability exception id must not be empty")
        if not self.provider_id:
            raise AvailabilityValidationError(f"Availability exception {self.id} has no provider id")

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """True if the day stays bookable through replacement slots."""

    @property
    def alternative_slots(self) -> Tuple[TimeSlot, ...]:
        return ()


@dataclass(frozen=True)
class DayBlocked(AvailabilityException):
    """The provider is unavailable for the whole day."""

    @property
    def is_available(self) -> bool:
        return False


@dataclass(frozen=True)
class DayOverridden(AvailabilityException):
    """The recurring pattern for the day is replaced by explicit slots."""
    slots: Tuple[TimeSlot, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "slots", tuple(self.slots))
        super().__post_init__()

    def ensure_valid(self) -> None:
        super().ensure_valid()
        if not self.slots:
            raise AvailabilityValidationError(
                f"Exception {self.id} overrides {self.date} but provides no slots; "
                "use DayBlocked to block the day"
            )
        for slot in self.slots:
            if not isinstance(slot, TimeSlot):
                raise AvailabilityValidationError(
                    f"Exception {self.id} has a non-TimeSlot alternative: {slot!r}"
                )
            slot.ensure_valid()
            if slot.provider_id != self.provider_id:
                raise AvailabilityValidationError(
                    f"Alternative slot {slot.id} belongs to provider {slot.provider_id}, "
                    f"not {self.provider_id}"
                )

    @property
    def is_available(self) -> bool:
        return True

    @property
    def alternative_slots(self) -> Tuple[TimeSlot, ...]:
        return self.slots
