"""
Slot generation for a single calendar date.

Pure domain logic: the generator receives the schedule and the bookings
and never touches storage.
"""

from typing import Iterable, List

from .clock import from_minutes, parse_date
from .models import AnnotatedSlot, Booking, ClosedReason, DayAvailability, ScheduleConfig, Slot
from .overlap import find_collisions


class SlotGenerator:
    """
    Lays out a day's slots and marks the ones occupied by bookings.

    Algorithm:
    1. Reject blocked dates and weekdays without service
    2. Walk from start to end in steps of the default duration
    3. Keep every slot that ends inside the window
    4. Mark a slot unavailable when an active booking overlaps it
    """

    def __init__(self, config: ScheduleConfig):
        self.config = config

    def generate(self, date, bookings: Iterable[Booking]) -> DayAvailability:
        """
        Build the availability for ``date``.

        Args:
            date: ISO date string (or date object) to query
            bookings: Existing bookings; other dates and cancelled
                bookings are filtered out here

        Returns:
            DayAvailability with the annotated slots, or an empty slot
            list and the reason the date is closed

        Raises:
            InvalidDateError: If ``date`` cannot be parsed
        """
        day = parse_date(date)
        day_str = day.isoformat()

        if self.config.is_blocked(day):
            return DayAvailability(date=day_str, reason=ClosedReason.BLOCKED)

        if not self.config.is_working_day(day):
            return DayAvailability(date=day_str, reason=ClosedReason.NO_SERVICE_DAY)

        booking_list = list(bookings)
        slots = [
            AnnotatedSlot(
                time=slot.time,
                duration_minutes=slot.duration_minutes,
                available=not find_collisions(
                    day_str,
                    slot.start_minutes,
                    slot.duration_minutes,
                    booking_list,
                    self.config.default_duration_minutes,
                ),
            )
            for slot in self.layout()
        ]

        return DayAvailability(date=day_str, slots=slots)

    def layout(self) -> List[Slot]:
        """
        Generate the back-to-back slots of one working day.

        Example:
        Window: 07:00 - 09:30, duration 60
        Result: [07:00, 08:00] (08:30 + 60 would pass the end)
        """
        duration = self.config.default_duration_minutes
        end = self.config.end_minutes

        slots: List[Slot] = []
        current = self.config.start_minutes
        while current + duration <= end:
            slots.append(Slot(time=from_minutes(current), duration_minutes=duration))
            current += duration

        return slots


def generate_slots(date, config: ScheduleConfig, bookings: Iterable[Booking]) -> DayAvailability:
    """Shorthand for ``SlotGenerator(config).generate(date, bookings)``."""
    return SlotGenerator(config).generate(date, bookings)
