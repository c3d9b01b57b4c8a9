"""
In-memory availability repository.
"""

import copy
from typing import Any, Dict, List, Optional

from ..domain.provider_availability import ProviderAvailability
from .snapshot import availability_from_record, availability_to_record


class InMemoryAvailabilityRepository:
    """
    Repository keeping serialized snapshots in a dict.

    Records are stored rather than live aggregates, so every ``get`` returns
    a fresh instance and callers cannot mutate stored state by accident.
    """

    def __init__(self, records: Optional[Dict[str, Dict[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = copy.deepcopy(records) if records else {}

    def get(self, provider_id: str) -> Optional[ProviderAvailability]:
        record = self._records.get(provider_id)
        if record is None:
            return None
        return availability_from_record(record)

    def save(self, availability: ProviderAvailability) -> None:
        self._records[availability.provider_id] = availability_to_record(availability)

    def delete(self, provider_id: str) -> bool:
        return self._records.pop(provider_id, None) is not None

    def list_provider_ids(self) -> List[str]:
        return sorted(self._records)
