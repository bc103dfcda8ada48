"""
Domain models for schedule configuration, slots and bookings.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .clock import normalize_date, normalize_time, to_minutes, weekday_number
from .exceptions import InvalidRequestError

PHONE_PLACEHOLDER = "(contact visible to admin only)"


def _clock_field(value: str) -> str:
    try:
        return normalize_time(value)
    except InvalidRequestError as exc:
        raise ValueError(str(exc)) from exc


def _date_field(value) -> str:
    try:
        return normalize_date(value)
    except InvalidRequestError as exc:
        raise ValueError(str(exc)) from exc


class ScheduleConfig(BaseModel):
    """
    Weekly working schedule of the service provider.

    Weekdays use 0=Sunday through 6=Saturday.
    """
    start_time: str = "07:00"
    end_time: str = "16:00"
    default_duration_minutes: int = 60
    working_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])
    blocked_dates: List[str] = Field(default_factory=list)
    admin_secret: str = Field(default="1234", repr=False)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock_time(cls, value: str) -> str:
        """Ensure times are valid HH:MM values and store them zero-padded."""
        return _clock_field(value)

    @field_validator("default_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure slot duration is positive."""
        if value <= 0:
            raise ValueError("default_duration_minutes must be greater than zero")
        return value

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"working_days must be between 0 and 6, got {invalid_days}")
        return sorted(set(value))

    @field_validator("blocked_dates", mode="before")
    @classmethod
    def validate_blocked_dates(cls, value: Any) -> List[str]:
        """
        Normalize blocked dates to ISO form, dropping duplicates.

        Runs before type validation so unquoted YAML dates, which load as
        ``date`` objects, are accepted.
        """
        if not isinstance(value, (list, tuple, set)):
            raise ValueError("blocked_dates must be a list of YYYY-MM-DD dates")
        return sorted({_date_field(item) for item in value})

    @model_validator(mode="after")
    def validate_window(self) -> "ScheduleConfig":
        """Ensure the window opens before it closes and fits one slot."""
        if self.end_minutes <= self.start_minutes:
            raise ValueError("end_time must be later than start_time")
        if self.default_duration_minutes > self.window_minutes:
            raise ValueError(
                f"default_duration_minutes ({self.default_duration_minutes}) "
                f"exceeds the working window of {self.window_minutes} minutes"
            )
        return self

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end_time)

    @property
    def window_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def is_blocked(self, day: date) -> bool:
        """Check if a given date is explicitly blocked."""
        return day.isoformat() in self.blocked_dates

    def is_working_day(self, day: date) -> bool:
        """Check if a given date falls on a working weekday."""
        return weekday_number(day) in self.working_days

    def public_view(self) -> Dict[str, Any]:
        """Configuration without the administrator secret."""
        return self.model_dump(exclude={"admin_secret"})


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(BaseModel):
    """A customer's reservation of an interval on a date."""
    id: str
    customer_name: str
    contact_phone: str = ""
    service_label: str = ""
    date: str
    time: str
    duration_minutes: Optional[int] = None
    status: BookingStatus = BookingStatus.PENDING
    created_at: str
    updated_at: Optional[str] = None

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("customer_name must not be blank")
        return value.strip()

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return _date_field(value)

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _clock_field(value)

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @property
    def is_active(self) -> bool:
        """Cancelled bookings are kept as records but occupy no time."""
        return self.status != BookingStatus.CANCELLED

    def with_changes(self, changes: Dict[str, Any]) -> "Booking":
        """Return a re-validated copy with ``changes`` applied."""
        return Booking.model_validate({**self.model_dump(), **changes})

    def public_view(self) -> Dict[str, Any]:
        """Booking as shown to the public, with the phone number masked."""
        data = self.model_dump(mode="json")
        data["contact_phone"] = PHONE_PLACEHOLDER if self.contact_phone else ""
        return data


@dataclass(frozen=True)
class Slot:
    """A candidate interval generated from the schedule."""
    time: str
    duration_minutes: int

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes


@dataclass(frozen=True)
class AnnotatedSlot(Slot):
    """A slot marked with whether any active booking occupies it."""
    available: bool = True


class ClosedReason(str, Enum):
    BLOCKED = "blocked"
    NO_SERVICE_DAY = "no-service-day"


@dataclass
class DayAvailability:
    """Slots for one date, or the reason the date offers none."""
    date: str
    slots: List[AnnotatedSlot] = field(default_factory=list)
    reason: Optional[ClosedReason] = None

    @property
    def available_slots(self) -> List[AnnotatedSlot]:
        return [slot for slot in self.slots if slot.available]


@dataclass
class BookingRequest:
    """Incoming booking request as supplied by a customer."""
    customer_name: Optional[str]
    date: Optional[str]
    time: Optional[str]
    contact_phone: str = ""
    service_label: str = ""
    duration_minutes: Optional[int] = None
    auto_confirm: bool = True


@dataclass
class Decision:
    """
    Outcome of validating a booking request.

    A collision never rejects the request; it only demotes the new booking
    to pending and is reported through ``had_collision``.
    """
    booking: Booking
    had_collision: bool
    conflicting_ids: List[str] = field(default_factory=list)
