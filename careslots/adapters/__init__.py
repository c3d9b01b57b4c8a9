"""
Adapters layer - Snapshot records and repositories.
"""

from .json_repository import JsonFileAvailabilityRepository
from .memory_repository import InMemoryAvailabilityRepository
from .snapshot import availability_from_record, availability_to_record

__all__ = [
    "InMemoryAvailabilityRepository",
    "JsonFileAvailabilityRepository",
    "availability_from_record",
    "availability_to_record",
]
