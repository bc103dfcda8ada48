"""
Domain layer - Pure scheduling logic without storage or I/O.
"""

from .booking_validator import BookingValidator
from .models import (
    AnnotatedSlot,
    Booking,
    BookingRequest,
    BookingStatus,
    ClosedReason,
    DayAvailability,
    Decision,
    ScheduleConfig,
    Slot,
)
from .overlap import find_collisions, overlaps
from .slot_generator import SlotGenerator, generate_slots

__all__ = [
    "AnnotatedSlot",
    "Booking",
    "BookingRequest",
    "BookingStatus",
    "BookingValidator",
    "ClosedReason",
    "DayAvailability",
    "Decision",
    "ScheduleConfig",
    "Slot",
    "SlotGenerator",
    "find_collisions",
    "generate_slots",
    "overlaps",
]
