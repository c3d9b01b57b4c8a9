"""
Temporal conflict detection between time slots.
"""

from typing import Iterable, List

from .models import TimeSlot


def is_time_slot_conflict(candidate: TimeSlot, existing_slots: Iterable[TimeSlot]) -> bool:
    """
    Check whether a slot overlaps any of the existing slots.

    Overlap is half-open: ``candidate.start < other.end and candidate.end > other.start``.
    Slots that only touch at an endpoint do not conflict.
    """
    return any(candidate.overlaps(existing) for existing in existing_slots)


def find_conflicts(candidate: TimeSlot, existing_slots: Iterable[TimeSlot]) -> List[TimeSlot]:
    """Return every existing slot the candidate overlaps, in input order."""
    return [existing for existing in existing_slots if candidate.overlaps(existing)]
