"""
Application service for slot queries, bookings and administration.

The service coordinates the booking store and the domain-level
``SlotGenerator`` and ``BookingValidator``. Booking requests for the same
date are serialized, so two overlapping requests cannot both be confirmed.
The store is reached only through the ``BookingStore`` protocol, which keeps
the JSON store and the in-memory store interchangeable in tests.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.booking_validator import BookingValidator
from ..domain.clock import normalize_date, to_minutes
from ..domain.exceptions import InvalidRequestError, InvalidUpdateError, MissingFieldError
from ..domain.models import (
    Booking,
    BookingRequest,
    BookingStatus,
    DayAvailability,
    Decision,
    ScheduleConfig,
)
from ..domain.overlap import find_collisions
from ..domain.slot_generator import SlotGenerator
from .admin_gate import AdminGate

logger = logging.getLogger(__name__)

UPDATABLE_BOOKING_FIELDS = frozenset(
    {"status", "customer_name", "contact_phone", "service_label", "date", "time", "duration_minutes"}
)
REQUIRED_CONFIG_FIELDS = ("start_time", "end_time", "default_duration_minutes")


class BookingStore(Protocol):
    """Protocol describing the record store behaviour needed by the service."""

    def read_config(self) -> ScheduleConfig:
        """Return the current schedule configuration."""

    def write_config(self, config: ScheduleConfig) -> None:
        """Replace the schedule configuration."""

    def read_bookings(self, date: str) -> List[Booking]:
        """Return every booking on ``date``, whatever its status."""

    def list_bookings(self) -> List[Booking]:
        """Return all bookings."""

    def append_booking(self, booking: Booking) -> None:
        """Persist a new booking."""

    def update_booking(self, booking_id: str, changes: Dict[str, Any]) -> Booking:
        """Apply field changes; raise BookingNotFoundError for unknown ids."""

    def delete_booking(self, booking_id: str) -> None:
        """Remove a booking; raise BookingNotFoundError for unknown ids."""


class SchedulingService:
    """
    Entry point used by the CLI for every scheduling operation.

    Mutating and private operations take the caller's credential and check
    it with the injected ``AdminGate``; the domain layer never sees it.
    """

    def __init__(
        self,
        store: BookingStore,
        admin_gate: AdminGate,
        clock: Optional[Callable[[], DateTime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._store = store
        self._admin_gate = admin_gate
        self._clock = clock or (lambda: pendulum.now("UTC"))
        self._id_factory = id_factory
        self._date_locks: Dict[str, threading.Lock] = {}
        self._date_locks_guard = threading.Lock()
        # Always taken after a date lock, never before one
        self._config_lock = threading.RLock()

    # Configuration

    def get_config(self) -> ScheduleConfig:
        return self._store.read_config()

    def public_config(self) -> Dict[str, Any]:
        """Configuration as visible to anyone, without the admin secret."""
        return self._store.read_config().public_view()

    def update_config(self, credential: Optional[str], changes: Mapping[str, Any]) -> ScheduleConfig:
        """
        Merge ``changes`` into the stored configuration.

        Start time, end time and default duration must always be supplied;
        working days, blocked dates and the secret keep their stored values
        when omitted.

        Raises:
            AuthenticationError: If the credential is rejected
            MissingFieldError: If a required field is absent
            InvalidUpdateError: If an unknown field is supplied
            pydantic.ValidationError: If the merged configuration is invalid
        """
        self._admin_gate.require(credential)

        supplied = {key: value for key, value in changes.items() if value is not None}
        # A blank secret keeps the stored one; it would match no credential
        secret = supplied.get("admin_secret")
        if isinstance(secret, str) and not secret.strip():
            del supplied["admin_secret"]
        missing = [name for name in REQUIRED_CONFIG_FIELDS if name not in supplied]
        if missing:
            raise MissingFieldError(missing)

        return self._save_config(supplied)

    def block_date(self, credential: Optional[str], date: str) -> ScheduleConfig:
        """Add ``date`` to the blocked dates."""
        self._admin_gate.require(credential)
        day = normalize_date(date)
        with self._lock_for(day), self._config_lock:
            blocked = self._store.read_config().blocked_dates
            return self._save_config({"blocked_dates": [*blocked, day]})

    def unblock_date(self, credential: Optional[str], date: str) -> ScheduleConfig:
        """Remove ``date`` from the blocked dates, if present."""
        self._admin_gate.require(credential)
        day = normalize_date(date)
        with self._lock_for(day), self._config_lock:
            blocked = self._store.read_config().blocked_dates
            return self._save_config({"blocked_dates": [item for item in blocked if item != day]})

    def _save_config(self, changes: Dict[str, Any]) -> ScheduleConfig:
        unknown = sorted(set(changes) - set(ScheduleConfig.model_fields))
        if unknown:
            raise InvalidUpdateError(
                f"Unknown configuration field(s): {', '.join(unknown)}", field=unknown[0]
            )

        with self._config_lock:
            current = self._store.read_config()
            updated = ScheduleConfig.model_validate({**current.model_dump(), **changes})
            self._store.write_config(updated)
        logger.info(
            "Schedule updated: %s-%s every %d min, days %s, %d blocked date(s)",
            updated.start_time,
            updated.end_time,
            updated.default_duration_minutes,
            updated.working_days,
            len(updated.blocked_dates),
        )
        return updated

    # Slots and bookings

    def available_slots(self, date: str) -> DayAvailability:
        """Return the annotated slots of ``date``."""
        day = normalize_date(date)
        config = self._store.read_config()
        return SlotGenerator(config).generate(day, self._store.read_bookings(day))

    def request_booking(self, request: BookingRequest) -> Decision:
        """
        Validate and store a booking request.

        The reads of the configuration and the date's bookings, the
        validation and the append happen under the date's lock. A collision
        yields a pending booking, never a rejection.
        """
        day_key = self._booking_day(request)

        with self._lock_for(day_key):
            decision = self._validator().validate(request, self._store.read_bookings(day_key))
            self._store.append_booking(decision.booking)

        booking = decision.booking
        if decision.had_collision:
            logger.warning(
                "Booking %s on %s at %s collides with %s; stored as %s",
                booking.id,
                booking.date,
                booking.time,
                ", ".join(decision.conflicting_ids),
                booking.status.value,
            )
        else:
            logger.info(
                "Booking %s on %s at %s stored as %s",
                booking.id,
                booking.date,
                booking.time,
                booking.status.value,
            )
        return decision

    def list_bookings(self, credential: Optional[str], date: Optional[str] = None) -> List[Booking]:
        """All bookings (optionally for one date), ordered by date and time."""
        self._admin_gate.require(credential)
        return self._bookings_for(date)

    def list_public_bookings(self, date: Optional[str] = None) -> List[Dict[str, Any]]:
        """Bookings with contact phone numbers masked."""
        return [booking.public_view() for booking in self._bookings_for(date)]

    def update_booking(
        self,
        credential: Optional[str],
        booking_id: str,
        changes: Mapping[str, Any],
    ) -> Booking:
        """
        Apply administrative changes to a booking.

        Any status may be set from any status. The change is not re-checked
        against the schedule; a warning is logged if the result overlaps
        another active booking.

        Raises:
            AuthenticationError: If the credential is rejected
            InvalidUpdateError: If a field outside the updatable set is given
            BookingNotFoundError: If no booking has ``booking_id``
            pydantic.ValidationError: If a new value is invalid
        """
        self._admin_gate.require(credential)

        unknown = sorted(set(changes) - UPDATABLE_BOOKING_FIELDS)
        if unknown:
            raise InvalidUpdateError(
                f"Field(s) cannot be updated: {', '.join(unknown)}", field=unknown[0]
            )

        supplied = {key: value for key, value in changes.items() if value is not None}
        supplied["updated_at"] = self._clock().to_iso8601_string()

        updated = self._store.update_booking(booking_id, supplied)
        logger.info("Booking %s updated (%s)", booking_id, ", ".join(sorted(supplied)))
        self._warn_on_overlap(updated)
        return updated

    def set_status(self, credential: Optional[str], booking_id: str, status: BookingStatus) -> Booking:
        """Shorthand for changing only the status of a booking."""
        return self.update_booking(credential, booking_id, {"status": status})

    def delete_booking(self, credential: Optional[str], booking_id: str) -> None:
        self._admin_gate.require(credential)
        self._store.delete_booking(booking_id)
        logger.info("Booking %s deleted", booking_id)

    def _bookings_for(self, date: Optional[str]) -> List[Booking]:
        if date:
            bookings = self._store.read_bookings(normalize_date(date))
        else:
            bookings = self._store.list_bookings()
        return sorted(bookings, key=lambda booking: (booking.date, to_minutes(booking.time)))

    def _warn_on_overlap(self, booking: Booking) -> None:
        if not booking.is_active:
            return
        config = self._store.read_config()
        duration = booking.duration_minutes or config.default_duration_minutes
        others = [item for item in self._store.read_bookings(booking.date) if item.id != booking.id]
        collisions = find_collisions(
            booking.date,
            to_minutes(booking.time),
            duration,
            others,
            config.default_duration_minutes,
        )
        if collisions:
            logger.warning(
                "Booking %s now overlaps active booking(s) %s",
                booking.id,
                ", ".join(item.id for item in collisions),
            )

    def _validator(self) -> BookingValidator:
        with self._config_lock:
            config = self._store.read_config()
        return BookingValidator(config, clock=self._clock, id_factory=self._id_factory)

    def _booking_day(self, request: BookingRequest) -> str:
        """Normalized request date, or the validation error the request earns."""
        try:
            return normalize_date(request.date)
        except InvalidRequestError:
            # Missing fields are reported ahead of a bad date
            self._validator().validate(request, [])
            raise

    def _lock_for(self, day: str) -> threading.Lock:
        with self._date_locks_guard:
            return self._date_locks.setdefault(day, threading.Lock())
