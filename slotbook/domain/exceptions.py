"""
Domain-specific exception hierarchy for the slotbook application.
"""

from typing import Optional, Sequence


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class InvalidRequestError(SchedulingError):
    """Raised when caller input is rejected; ``field`` names the culprit."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidTimeFormatError(InvalidRequestError):
    """Raised when a clock time is not a valid ``HH:MM`` value."""


class InvalidDateError(InvalidRequestError):
    """Raised when a calendar date is not a valid ``YYYY-MM-DD`` value."""


class MissingFieldError(InvalidRequestError):
    """Raised when required booking fields are absent or blank."""

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)
        super().__init__(
            f"Missing required field(s): {', '.join(self.fields)}",
            field=self.fields[0] if self.fields else None,
        )


class BlockedDateError(InvalidRequestError):
    """Raised when a booking targets a blocked date."""


class NonWorkingDayError(InvalidRequestError):
    """Raised when a booking targets a weekday without service."""


class OutsideWindowError(InvalidRequestError):
    """Raised when a booking does not fit inside the working window."""


class InvalidUpdateError(InvalidRequestError):
    """Raised when an administrative update names a field that cannot change."""


class BookingNotFoundError(SchedulingError):
    """Raised when no booking with the given id exists."""

    def __init__(self, booking_id: str):
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id


class StoreError(SchedulingError):
    """Raised when the booking store cannot be read or parsed."""


class AuthenticationError(SchedulingError):
    """Raised when an administrator credential is missing or wrong."""
