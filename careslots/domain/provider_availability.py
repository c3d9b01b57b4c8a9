"""
ProviderAvailability aggregate.

Binds one provider's directly held slots, recurring schedules and
availability exceptions, and answers availability queries over them.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

import pendulum
from pendulum import DateTime
from pendulum.tz.exceptions import InvalidTimezone

from .conflicts import find_conflicts, is_time_slot_conflict
from .exception_rules import apply_exceptions, exceptions_for_date
from .exceptions import AvailabilityValidationError
from .models import AvailabilityException, DateRange, RecurringSchedule, TimeSlot
from .service_types import ServiceType
from .slot_generator import generate_time_slots

logger = logging.getLogger(__name__)

CANDIDATE_SLOT_ID = "candidate"


def check_timezone(tz: str) -> str:
    """Return ``tz`` if pendulum knows it, else raise AvailabilityValidationError."""
    try:
        pendulum.timezone(tz)
    except (InvalidTimezone, ValueError) as exc:
        raise AvailabilityValidationError(f"Unknown timezone: {tz!r}") from exc
    return tz


class ProviderAvailability:
    """
    Aggregate root for a single provider's availability.

    Contained values are immutable and addressed by id. Every successful
    mutation swaps in new values, increments ``version`` and refreshes
    ``last_updated``; a rejected mutation leaves the aggregate untouched.

    The aggregate is not safe for unsynchronized concurrent mutation. Callers
    that share one instance across threads must serialize access to it.
    """

    def __init__(
        self,
        provider_id: str,
        timezone: str = "UTC",
        slots: Iterable[TimeSlot] = (),
        recurring_schedules: Iterable[RecurringSchedule] = (),
        exceptions: Iterable[AvailabilityException] = (),
        last_updated: Optional[datetime] = None,
        version: int = 0,
    ):
        """
        Build an aggregate, typically from a persisted snapshot.

        Bulk-loaded values are not conflict-checked; call ``validate()``
        afterwards when full-aggregate guarantees are needed.

        Raises:
            AvailabilityValidationError: If the provider id is empty, the
                timezone is unknown or two values share an id
        """
        if not provider_id:
            raise AvailabilityValidationError("Provider id must not be empty")

        self.provider_id = provider_id
        self.timezone = check_timezone(timezone)
        self._slots: Dict[str, TimeSlot] = _index(slots, "time slot")
        self._schedules: Dict[str, RecurringSchedule] = _index(recurring_schedules, "recurring schedule")
        self._exceptions: Dict[str, AvailabilityException] = _index(exceptions, "availability exception")
        self.last_updated: DateTime = (
            pendulum.instance(last_updated) if last_updated is not None else pendulum.now("UTC")
        )
        self.version = version

    @property
    def slots(self) -> Tuple[TimeSlot, ...]:
        """Directly held slots in insertion order."""
        return tuple(self._slots.values())

    @property
    def recurring_schedules(self) -> Tuple[RecurringSchedule, ...]:
        return tuple(self._schedules.values())

    @property
    def exceptions(self) -> Tuple[AvailabilityException, ...]:
        return tuple(self._exceptions.values())

    def get_time_slot(self, slot_id: str) -> Optional[TimeSlot]:
        return self._slots.get(slot_id)

    def add_time_slot(self, time_slot: TimeSlot) -> bool:
        """
        Add a directly held slot.

        Returns:
            True if added, False if it overlaps an existing directly held slot

        Raises:
            AvailabilityValidationError: If the slot belongs to another
                provider or its id is already taken
        """
        self._check_owner(time_slot.provider_id, f"time slot {time_slot.id}")
        self._check_new_id(self._slots, time_slot.id, "time slot")

        conflicts = find_conflicts(time_slot, self._slots.values())
        if conflicts:
            logger.debug(
                "Rejected slot %s for provider %s: overlaps %s",
                time_slot.id,
                self.provider_id,
                ", ".join(slot.id for slot in conflicts),
            )
            return False

        self._slots[time_slot.id] = time_slot
        self._touch()
        return True

    def remove_time_slot(self, slot_id: str) -> bool:
        """Remove a directly held slot. Returns False if it does not exist."""
        if self._slots.pop(slot_id, None) is None:
            return False
        self._touch()
        return True

    def add_recurring_schedule(self, schedule: RecurringSchedule) -> bool:
        self._check_owner(schedule.provider_id, f"recurring schedule {schedule.id}")
        self._check_new_id(self._schedules, schedule.id, "recurring schedule")
        self._schedules[schedule.id] = schedule
        self._touch()
        return True

    def remove_recurring_schedule(self, schedule_id: str) -> bool:
        if self._schedules.pop(schedule_id, None) is None:
            return False
        self._touch()
        return True

    def add_exception(self, exception: AvailabilityException) -> bool:
        self._check_owner(exception.provider_id, f"availability exception {exception.id}")
        self._check_new_id(self._exceptions, exception.id, "availability exception")
        self._exceptions[exception.id] = exception
        self._touch()
        return True

    def remove_exception(self, exception_id: str) -> bool:
        if self._exceptions.pop(exception_id, None) is None:
            return False
        self._touch()
        return True

    def book_slot(self, slot_id: str, booking_id: str) -> bool:
        """
        Mark a directly held slot as booked.

        Returns:
            True on success, False if the slot is missing or already booked.
            An existing booking is never overwritten.
        """
        if not booking_id:
            raise AvailabilityValidationError("Booking id must not be empty")

        slot = self._slots.get(slot_id)
        if slot is None or slot.is_booked:
            return False

        self._slots[slot_id] = slot.book(booking_id)
        self._touch()
        return True

    def unbook_slot(self, slot_id: str) -> bool:
        """Release a booked slot. Returns False if it is missing or not booked."""
        slot = self._slots.get(slot_id)
        if slot is None or not slot.is_booked:
            return False

        self._slots[slot_id] = slot.unbook()
        self._touch()
        return True

    def get_available_time_slots(
        self,
        date_range: DateRange,
        service_type: Optional[ServiceType] = None,
    ) -> List[TimeSlot]:
        """
        Return every bookable slot in a date range, sorted by start time.

        Steps:
        1. Expand recurring schedules over the range
        2. Apply the exceptions dated inside the range
        3. Drop generated slots that collide with booked directly held slots
        4. Add unbooked directly held slots lying inside the range
        5. Filter by service type, if given
        """
        tz = self.timezone
        generated = generate_time_slots(self._schedules.values(), date_range, self.provider_id, tz)

        in_range_exceptions = [
            exception for exception in self._exceptions.values()
            if date_range.contains_date(exception.date)
        ]
        candidates = apply_exceptions(generated, in_range_exceptions, tz)

        booked = [slot for slot in self._slots.values() if slot.is_booked]
        if booked:
            candidates = [slot for slot in candidates if not is_time_slot_conflict(slot, booked)]

        lower, upper = date_range.bounds(tz)
        candidates.extend(
            slot for slot in self._slots.values()
            if not slot.is_booked and lower <= slot.start and slot.end <= upper
        )

        available = [slot for slot in candidates if not slot.is_booked]
        if service_type is not None:
            available = [slot for slot in available if slot.service_type is service_type]

        available.sort(key=lambda slot: (slot.start, slot.end, slot.id))
        return available

    def is_available(self, start: datetime, end: datetime, service_type: ServiceType) -> bool:
        """
        Check whether the provider can take a booking for ``[start, end)``.

        Order of checks:
        1. Any overlap with a booked directly held slot means unavailable
        2. If exceptions exist for the day, only an unbooked replacement slot
           of the type containing the window makes it available
        3. Otherwise an unbooked directly held slot of the type containing
           the window makes it available
        4. Otherwise a recurring schedule for the weekday, covering the
           service type and containing the window, makes it available

        Raises:
            AvailabilityValidationError: If start is not before end or the
                service type is unknown
        """
        candidate = TimeSlot(
            id=CANDIDATE_SLOT_ID,
            provider_id=self.provider_id,
            start=start,
            end=end,
            service_type=service_type,
        )

        booked = [slot for slot in self._slots.values() if slot.is_booked]
        if is_time_slot_conflict(candidate, booked):
            return False

        day_exceptions = exceptions_for_date(self._exceptions.values(), candidate.local_date(self.timezone))
        if day_exceptions:
            return any(
                _contains(slot, candidate)
                for exception in day_exceptions
                for slot in exception.alternative_slots
                if not slot.is_booked
            )

        if any(
            _contains(slot, candidate) for slot in self._slots.values() if not slot.is_booked
        ):
            return True

        return any(
            schedule.covers(candidate.start, candidate.end, candidate.service_type, self.timezone)
            for schedule in self._schedules.values()
        )

    def validate(self) -> bool:
        """
        Check every contained value against its own invariants.

        Read-only; mutations do not call this. Returns False on the first
        failure and logs the reason.
        """
        try:
            check_timezone(self.timezone)
            for slot in self._slots.values():
                slot.ensure_valid()
                self._check_owner(slot.provider_id, f"time slot {slot.id}")
            for schedule in self._schedules.values():
                schedule.ensure_valid()
                self._check_owner(schedule.provider_id, f"recurring schedule {schedule.id}")
            for exception in self._exceptions.values():
                exception.ensure_valid()
                self._check_owner(exception.provider_id, f"availability exception {exception.id}")
        except AvailabilityValidationError as exc:
            logger.warning("Availability for provider %s is invalid: %s", self.provider_id, exc)
            return False
        return True

    def _touch(self) -> None:
        self.version += 1
        self.last_updated = pendulum.now("UTC")

    def _check_owner(self, provider_id: str, what: str) -> None:
        if provider_id != self.provider_id:
            raise AvailabilityValidationError(
                f"{what} belongs to provider {provider_id}, not {self.provider_id}"
            )

    @staticmethod
    def _check_new_id(index: Dict, value_id: str, what: str) -> None:
        if value_id in index:
            raise AvailabilityValidationError(f"Duplicate {what} id: {value_id}")

    def __repr__(self) -> str:
        return (
            f"ProviderAvailability(provider_id={self.provider_id!r}, timezone={self.timezone!r}, "
            f"slots={len(self._slots)}, schedules={len(self._schedules)}, "
            f"exceptions={len(self._exceptions)}, version={self.version})"
        )


def _index(values: Iterable, what: str) -> Dict:
    index: Dict = {}
    for value in values:
        if value.id in index:
            raise AvailabilityValidationError(f"Duplicate {what} id: {value.id}")
        index[value.id] = value
    return index


def _contains(slot: TimeSlot, candidate: TimeSlot) -> bool:
    return (
        slot.service_type is candidate.service_type
        and slot.start <= candidate.start
        and candidate.end <= slot.end
    )
