"""
Tests for the in-memory and JSON file repositories.
"""

import json

import pytest

from careslots.adapters.json_repository import JsonFileAvailabilityRepository
from careslots.adapters.memory_repository import InMemoryAvailabilityRepository
from careslots.domain.exceptions import SnapshotError
from careslots.domain.provider_availability import ProviderAvailability


class TestInMemoryRepository:
    """Tests for InMemoryAvailabilityRepository."""

    def test_save_and_get_returns_fresh_copy(self, availability, make_slot):
        repository = InMemoryAvailabilityRepository()
        repository.save(availability)

        loaded = repository.get("prov-1")
        loaded.add_time_slot(make_slot("s1", "2024-11-26 09:00", "2024-11-26 10:00"))

        assert loaded is not availability
        assert repository.get("prov-1").slots == ()

    def test_missing_provider(self):
        assert InMemoryAvailabilityRepository().get("nobody") is None

    def test_delete_and_list(self, availability):
        repository = InMemoryAvailabilityRepository()
        repository.save(availability)
        repository.save(ProviderAvailability(provider_id="a-first"))

        assert repository.list_provider_ids() == ["a-first", "prov-1"]
        assert repository.delete("prov-1")
        assert not repository.delete("prov-1")
        assert repository.list_provider_ids() == ["a-first"]


class TestJsonFileRepository:
    """Tests for JsonFileAvailabilityRepository."""

    def test_save_writes_camel_case_json(self, tmp_path, availability):
        repository = JsonFileAvailabilityRepository(tmp_path / "snapshots")

        repository.save(availability)

        data = json.loads((tmp_path / "snapshots" / "prov-1.json").read_text(encoding="utf-8"))
        assert data["providerId"] == "prov-1"
        assert data["recurringSchedule"][0]["id"] == "sched-mon"

    def test_round_trip(self, tmp_path, availability, make_slot):
        availability.add_time_slot(make_slot("s1", "2024-11-26 09:00", "2024-11-26 10:00"))
        availability.book_slot("s1", "b-1")
        repository = JsonFileAvailabilityRepository(tmp_path)

        repository.save(availability)
        loaded = repository.get("prov-1")

        assert loaded.slots == availability.slots
        assert loaded.version == 2
        assert loaded.timezone == "Europe/Berlin"

    def test_missing_file(self, tmp_path):
        assert JsonFileAvailabilityRepository(tmp_path).get("nobody") is None

    def test_corrupted_file(self, tmp_path):
        (tmp_path / "prov-1.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(SnapshotError, match="Corrupted snapshot"):
            JsonFileAvailabilityRepository(tmp_path).get("prov-1")

    def test_non_object_file(self, tmp_path):
        (tmp_path / "prov-1.json").write_text("[]", encoding="utf-8")

        with pytest.raises(SnapshotError, match="JSON object"):
            JsonFileAvailabilityRepository(tmp_path).get("prov-1")

    @pytest.mark.parametrize("provider_id", ["../escape", "a/b", "..", ""])
    def test_unsafe_provider_ids_are_rejected(self, tmp_path, provider_id):
        with pytest.raises(SnapshotError, match="Invalid provider id"):
            JsonFileAvailabilityRepository(tmp_path).get(provider_id)

    def test_list_and_delete(self, tmp_path, availability):
        repository = JsonFileAvailabilityRepository(tmp_path)
        repository.save(availability)
        (tmp_path / ".tmp-leftover.json").write_text("{}", encoding="utf-8")

        assert repository.list_provider_ids() == ["prov-1"]
        assert repository.delete("prov-1")
        assert not repository.delete("prov-1")
        assert repository.list_provider_ids() == []

    def test_list_without_directory(self, tmp_path):
        assert JsonFileAvailabilityRepository(tmp_path / "missing").list_provider_ids() == []
