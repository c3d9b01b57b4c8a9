"""
Service layer helpers that orchestrate repositories and domain logic.
"""

from .availability_service import AvailabilityRepositoryProtocol, AvailabilityService

__all__ = ["AvailabilityRepositoryProtocol", "AvailabilityService"]
