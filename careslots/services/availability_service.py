"""
Application service for provider availability.

The service loads aggregates through a repository adapter, delegates all
scheduling decisions to the domain-level ``ProviderAvailability`` and
persists the result. The repository is described by a simple protocol so
tests can use the in-memory implementation.
"""

from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Protocol

from ..domain.conflicts import find_conflicts
from ..domain.exceptions import AvailabilityValidationError, ProviderNotFoundError
from ..domain.models import DateRange, TimeSlot
from ..domain.provider_availability import ProviderAvailability
from ..domain.service_types import ServiceType

logger = logging.getLogger(__name__)


class AvailabilityRepositoryProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    def get(self, provider_id: str) -> Optional[ProviderAvailability]:
        """Return the provider's aggregate, or None if unknown."""

    def save(self, availability: ProviderAvailability) -> None:
        """Persist the aggregate."""

    def delete(self, provider_id: str) -> bool:
        """Remove the provider's aggregate; False if it did not exist."""

    def list_provider_ids(self) -> List[str]:
        """Return every stored provider id."""


class AvailabilityService:
    """
    Orchestrates availability reads and booking mutations.

    Mutations for the same provider are serialized with a per-provider lock,
    so two concurrent booking attempts on one slot cannot both succeed.
    """

    def __init__(self, repository: AvailabilityRepositoryProtocol) -> None:
        self._repository = repository
        # An entry disappears once no caller holds or waits on its lock.
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @contextmanager
    def _provider_lock(self, provider_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(provider_id, threading.Lock())
        with lock:
            yield

    def get_availability(self, provider_id: str) -> ProviderAvailability:
        """
        Retrieve a provider's availability aggregate.

        Raises:
            ProviderNotFoundError: If no availability exists for the provider
        """
        logger.info("Retrieving availability for provider %s", provider_id)
        availability = self._repository.get(provider_id)
        if availability is None:
            raise ProviderNotFoundError(f"Availability not found for provider with ID: {provider_id}")
        return availability

    def find_available_time_slots(
        self,
        provider_id: str,
        date_range: DateRange,
        service_type: Optional[ServiceType] = None,
    ) -> List[TimeSlot]:
        """Return bookable slots for a provider; empty if the provider is unknown."""
        availability = self._repository.get(provider_id)
        if availability is None:
            return []
        return availability.get_available_time_slots(date_range, service_type)

    def check_availability(
        self,
        provider_id: str,
        start: datetime,
        end: datetime,
        service_type: ServiceType,
    ) -> bool:
        """Check a specific window; unknown providers are never available."""
        logger.info("Checking availability for provider %s", provider_id)
        availability = self._repository.get(provider_id)
        if availability is None:
            return False
        return availability.is_available(start, end, service_type)

    def find_providers_by_availability(
        self,
        date_range: DateRange,
        service_type: ServiceType,
    ) -> List[str]:
        """Return ids of providers with at least one open slot of the type in the range."""
        provider_ids: List[str] = []

        for provider_id in self._repository.list_provider_ids():
            if self.find_available_time_slots(provider_id, date_range, service_type):
                provider_ids.append(provider_id)

        return provider_ids

    def update_availability(self, availability: ProviderAvailability) -> ProviderAvailability:
        """
        Validate and persist a whole aggregate.

        Raises:
            AvailabilityValidationError: If the aggregate fails validation
        """
        logger.info("Updating availability for provider %s", availability.provider_id)
        if not availability.validate():
            raise AvailabilityValidationError(
                f"Availability for provider {availability.provider_id} is invalid"
            )
        with self._provider_lock(availability.provider_id):
            self._repository.save(availability)
        return availability

    def add_time_slot(self, provider_id: str, time_slot: TimeSlot) -> bool:
        """Add a directly held slot; False if it conflicts with an existing one."""
        with self._provider_lock(provider_id):
            availability = self.get_availability(provider_id)

            if not availability.add_time_slot(time_slot):
                conflicts = find_conflicts(time_slot, availability.slots)
                logger.warning(
                    "Time slot %s conflicts with existing slots %s",
                    time_slot.id,
                    [slot.id for slot in conflicts],
                    extra={"provider_id": provider_id},
                )
                return False

            self._repository.save(availability)
            return True

    def remove_time_slot(self, provider_id: str, slot_id: str) -> bool:
        with self._provider_lock(provider_id):
            availability = self.get_availability(provider_id)
            if not availability.remove_time_slot(slot_id):
                logger.warning("Time slot %s not found for removal", slot_id, extra={"provider_id": provider_id})
                return False
            self._repository.save(availability)
            return True

    def book_time_slot(self, provider_id: str, slot_id: str, booking_id: str) -> bool:
        """
        Book a directly held slot.

        Returns:
            True if booked, False if the provider or slot is unknown or the
            slot is already booked
        """
        with self._provider_lock(provider_id):
            availability = self._repository.get(provider_id)
            if availability is None:
                logger.warning("No availability for provider %s; cannot book %s", provider_id, slot_id)
                return False

            slot = availability.get_time_slot(slot_id)
            if not availability.book_slot(slot_id, booking_id):
                if slot is None:
                    logger.warning(
                        "Time slot %s not found for booking", slot_id, extra={"provider_id": provider_id}
                    )
                else:
                    logger.warning(
                        "Time slot %s already booked by %s",
                        slot_id,
                        slot.booking_id,
                        extra={"provider_id": provider_id},
                    )
                return False

            self._repository.save(availability)

        logger.info("Booked slot %s for provider %s (booking %s)", slot_id, provider_id, booking_id)
        return True

    def unbook_time_slot(self, provider_id: str, slot_id: str) -> bool:
        """Release a booked slot; False if unknown or not booked."""
        with self._provider_lock(provider_id):
            availability = self._repository.get(provider_id)
            if availability is None:
                logger.warning("No availability for provider %s; cannot unbook %s", provider_id, slot_id)
                return False

            if not availability.unbook_slot(slot_id):
                logger.warning(
                    "Time slot %s not found or not currently booked",
                    slot_id,
                    extra={"provider_id": provider_id},
                )
                return False

            self._repository.save(availability)

        logger.info("Released slot %s for provider %s", slot_id, provider_id)
        return True

    def delete_availability(self, provider_id: str) -> bool:
        with self._provider_lock(provider_id):
            deleted = self._repository.delete(provider_id)
        if deleted:
            logger.info("Deleted availability for provider %s", provider_id)
        return deleted
