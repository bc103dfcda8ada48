"""
Validation of booking requests against the schedule.
"""

import uuid
from typing import Callable, Iterable, Optional

import pendulum
from pendulum import DateTime

from .clock import to_minutes, parse_date
from .exceptions import (
    BlockedDateError,
    InvalidTimeFormatError,
    MissingFieldError,
    NonWorkingDayError,
    OutsideWindowError,
)
from .models import Booking, BookingRequest, BookingStatus, Decision, ScheduleConfig
from .overlap import find_collisions

REQUIRED_FIELDS = ("customer_name", "date", "time")


def _utc_now() -> DateTime:
    return pendulum.now("UTC")


def _new_id() -> str:
    return str(uuid.uuid4())


class BookingValidator:
    """
    Turns a booking request into a booking decision.

    Collisions are a soft conflict: the booking is always built, and an
    overlap with an active booking only lowers its status to pending.
    """

    def __init__(
        self,
        config: ScheduleConfig,
        clock: Optional[Callable[[], DateTime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.config = config
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_id

    def validate(self, request: BookingRequest, bookings: Iterable[Booking]) -> Decision:
        """
        Validate ``request`` and build the resulting booking.

        Args:
            request: The customer's booking request
            bookings: Existing bookings; only active ones on the same
                date are considered for collisions

        Returns:
            Decision with the new booking and whether it collided

        Raises:
            MissingFieldError: If name, date or time is absent
            InvalidDateError: If the date cannot be parsed
            BlockedDateError: If the date is blocked
            NonWorkingDayError: If the weekday has no service
            InvalidTimeFormatError: If the time cannot be parsed
            OutsideWindowError: If the interval leaves the working window
        """
        missing = [
            name for name in REQUIRED_FIELDS
            if not (getattr(request, name) or "").strip()
        ]
        if missing:
            raise MissingFieldError(missing)

        duration = self._resolve_duration(request.duration_minutes)

        day = parse_date(request.date)
        day_str = day.isoformat()
        if self.config.is_blocked(day):
            raise BlockedDateError(f"Date {day_str} is blocked", field="date")
        if not self.config.is_working_day(day):
            raise NonWorkingDayError(f"No service on {day_str}", field="date")

        start = self._parse_time(request.time)
        if start < self.config.start_minutes or start + duration > self.config.end_minutes:
            raise OutsideWindowError(
                f"{request.time.strip()} for {duration} minutes is outside working hours "
                f"{self.config.start_time}-{self.config.end_time}",
                field="time",
            )

        collisions = find_collisions(
            day_str, start, duration, bookings, self.config.default_duration_minutes
        )
        had_collision = bool(collisions)

        if request.auto_confirm and not had_collision:
            status = BookingStatus.CONFIRMED
        else:
            status = BookingStatus.PENDING

        booking = Booking(
            id=self._id_factory(),
            customer_name=request.customer_name,
            contact_phone=request.contact_phone or "",
            service_label=request.service_label or "",
            date=day_str,
            time=request.time,
            duration_minutes=duration,
            status=status,
            created_at=self._clock().to_iso8601_string(),
        )

        return Decision(
            booking=booking,
            had_collision=had_collision,
            conflicting_ids=[existing.id for existing in collisions],
        )

    def _resolve_duration(self, requested: Optional[int]) -> int:
        if requested is not None and requested > 0:
            return requested
        return self.config.default_duration_minutes

    @staticmethod
    def _parse_time(value: str) -> int:
        try:
            return to_minutes(value)
        except InvalidTimeFormatError as exc:
            raise InvalidTimeFormatError(str(exc), field="time") from exc
