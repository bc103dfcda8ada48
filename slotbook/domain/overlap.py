"""
Interval overlap detection.

Every availability and collision check in the package goes through
``overlaps``; intervals are half-open ``[start, start + duration)`` minute
ranges, so back-to-back intervals do not collide.
"""

from typing import Iterable, List

from .clock import to_minutes
from .models import Booking


def overlaps(start_a: int, duration_a: int, start_b: int, duration_b: int) -> bool:
    """Check if two ``(start, duration)`` minute intervals intersect."""
    return max(start_a, start_b) < min(start_a + duration_a, start_b + duration_b)


def find_collisions(
    day: str,
    start_minutes: int,
    duration_minutes: int,
    bookings: Iterable[Booking],
    default_duration_minutes: int,
) -> List[Booking]:
    """
    Return the active bookings on ``day`` overlapping the given interval.

    Cancelled bookings and bookings on other dates are ignored. Bookings
    stored without a duration are treated as lasting the default duration.
    """
    return [
        booking
        for booking in bookings
        if booking.date == day
        and booking.is_active
        and overlaps(
            start_minutes,
            duration_minutes,
            to_minutes(booking.time),
            booking.duration_minutes or default_duration_minutes,
        )
    ]
