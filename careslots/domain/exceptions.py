"""
Domain-specific exception hierarchy for the availability engine.
"""


class CareSlotsError(Exception):
    """Base class for all application-level errors."""


class AvailabilityValidationError(CareSlotsError, ValueError):
    """Raised when a slot, schedule or exception violates its invariants."""


class InvalidTimeFormatError(AvailabilityValidationError):
    """Raised when a time-of-day string is not in strict HH:MM form."""


class ProviderNotFoundError(CareSlotsError, LookupError):
    """Raised when no availability record exists for a provider."""


class SnapshotError(CareSlotsError):
    """Raised when a persisted availability snapshot cannot be read or written."""
