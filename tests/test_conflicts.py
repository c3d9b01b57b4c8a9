"""
Tests for conflict detection.
"""

import pytest

from careslots.domain.conflicts import find_conflicts, is_time_slot_conflict
from careslots.domain.service_types import ServiceType


class TestIsTimeSlotConflict:
    """Tests for is_time_slot_conflict."""

    @pytest.mark.parametrize(
        "start,end",
        [
            ("2024-11-26 09:30", "2024-11-26 10:30"),  # overlaps the end
            ("2024-11-26 08:30", "2024-11-26 09:30"),  # overlaps the start
            ("2024-11-26 09:15", "2024-11-26 09:45"),  # inside
            ("2024-11-26 08:00", "2024-11-26 11:00"),  # surrounds
            ("2024-11-26 09:00", "2024-11-26 10:00"),  # identical
        ],
    )
    def test_proper_overlaps_conflict(self, make_slot, start, end):
        existing = make_slot("s1", "2024-11-26 09:00", "2024-11-26 10:00")
        candidate = make_slot("c", start, end)

        assert is_time_slot_conflict(candidate, [existing])

    @pytest.mark.parametrize(
        "start,end",
        [
            ("2024-11-26 10:00", "2024-11-26 11:00"),  # touches the end
            ("2024-11-26 08:00", "2024-11-26 09:00"),  # touches the start
            ("2024-11-26 12:00", "2024-11-26 13:00"),
            ("2024-11-27 09:00", "2024-11-27 10:00"),
        ],
    )
    def test_disjoint_or_touching_do_not_conflict(self, make_slot, start, end):
        existing = make_slot("s1", "2024-11-26 09:00", "2024-11-26 10:00")
        candidate = make_slot("c", start, end)

        assert not is_time_slot_conflict(candidate, [existing])

    def test_no_existing_slots(self, make_slot):
        assert not is_time_slot_conflict(make_slot("c", "2024-11-26 09:00", "2024-11-26 10:00"), [])

    def test_service_type_does_not_matter(self, make_slot):
        existing = make_slot("s1", "2024-11-26 09:00", "2024-11-26 10:00", service_type=ServiceType.COUNSELING)
        candidate = make_slot("c", "2024-11-26 09:30", "2024-11-26 10:00")

        assert is_time_slot_conflict(candidate, [existing])


class TestFindConflicts:
    """Tests for find_conflicts."""

    def test_returns_overlapping_slots_in_order(self, make_slot):
        existing = [
            make_slot("early", "2024-11-26 08:00", "2024-11-26 09:00"),
            make_slot("a", "2024-11-26 09:00", "2024-11-26 10:00"),
            make_slot("b", "2024-11-26 10:00", "2024-11-26 11:00"),
            make_slot("late", "2024-11-26 11:00", "2024-11-26 12:00"),
        ]
        candidate = make_slot("c", "2024-11-26 09:30", "2024-11-26 10:30")

        assert [slot.id for slot in find_conflicts(candidate, existing)] == ["a", "b"]
