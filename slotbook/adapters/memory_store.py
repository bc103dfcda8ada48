"""
In-memory booking store for tests and dry runs.
"""

import threading
from typing import Any, Dict, List, Optional

from ..domain.exceptions import BookingNotFoundError
from ..domain.models import Booking, ScheduleConfig


class InMemoryBookingStore:
    """
    Store that keeps configuration and bookings in process memory.

    Implements the same interface as ``JsonBookingStore`` without any
    file access, so services can be exercised without touching disk.
    """

    def __init__(
        self,
        config: Optional[ScheduleConfig] = None,
        bookings: Optional[List[Booking]] = None,
    ):
        self._config = config or ScheduleConfig()
        self._bookings: List[Booking] = list(bookings or [])
        self._lock = threading.RLock()

    def read_config(self) -> ScheduleConfig:
        with self._lock:
            return self._config

    def write_config(self, config: ScheduleConfig) -> None:
        with self._lock:
            self._config = config

    def read_bookings(self, date: str) -> List[Booking]:
        with self._lock:
            return [booking for booking in self._bookings if booking.date == date]

    def list_bookings(self) -> List[Booking]:
        with self._lock:
            return list(self._bookings)

    def append_booking(self, booking: Booking) -> None:
        with self._lock:
            self._bookings.append(booking)

    def update_booking(self, booking_id: str, changes: Dict[str, Any]) -> Booking:
        with self._lock:
            index = self._index_of(booking_id)
            updated = self._bookings[index].with_changes(changes)
            self._bookings[index] = updated
            return updated

    def delete_booking(self, booking_id: str) -> None:
        with self._lock:
            del self._bookings[self._index_of(booking_id)]

    def _index_of(self, booking_id: str) -> int:
        for index, booking in enumerate(self._bookings):
            if booking.id == booking_id:
                return index
        raise BookingNotFoundError(booking_id)
