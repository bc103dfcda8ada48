"""
Booking store persisted as a single JSON document.

Document layout::

    {
        "config": {...ScheduleConfig...},
        "bookings": [{...Booking...}, ...]
    }

Every read-modify-write happens under one re-entrant lock and the file is
replaced atomically, so readers never see a half-written document.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..domain.exceptions import BookingNotFoundError, StoreError
from ..domain.models import Booking, ScheduleConfig

logger = logging.getLogger(__name__)


class JsonBookingStore:
    """
    File-backed store for the schedule configuration and bookings.

    A missing file is created on first access, seeded with
    ``initial_config`` and no bookings.
    """

    def __init__(self, path: Path, initial_config: Optional[ScheduleConfig] = None):
        self.path = Path(path)
        self._initial_config = initial_config or ScheduleConfig()
        self._lock = threading.RLock()

    def read_config(self) -> ScheduleConfig:
        with self._lock:
            document = self._load()
        try:
            return ScheduleConfig.model_validate(document["config"])
        except ValidationError as exc:
            raise StoreError(f"Invalid configuration in {self.path}: {exc}") from exc

    def write_config(self, config: ScheduleConfig) -> None:
        with self._lock:
            document = self._load()
            document["config"] = config.model_dump(mode="json")
            self._save(document)

    def read_bookings(self, date: str) -> List[Booking]:
        return [booking for booking in self.list_bookings() if booking.date == date]

    def list_bookings(self) -> List[Booking]:
        with self._lock:
            document = self._load()
        return self._parse_bookings(document)

    def append_booking(self, booking: Booking) -> None:
        with self._lock:
            document = self._load()
            document["bookings"].append(booking.model_dump(mode="json"))
            self._save(document)

    def update_booking(self, booking_id: str, changes: Dict[str, Any]) -> Booking:
        with self._lock:
            document = self._load()
            bookings = self._parse_bookings(document)
            index = self._index_of(bookings, booking_id)
            updated = bookings[index].with_changes(changes)
            document["bookings"][index] = updated.model_dump(mode="json")
            self._save(document)
            return updated

    def delete_booking(self, booking_id: str) -> None:
        with self._lock:
            document = self._load()
            index = self._index_of(self._parse_bookings(document), booking_id)
            del document["bookings"][index]
            self._save(document)

    def _load(self) -> Dict[str, Any]:
        """Read the document, creating the seed document if the file is missing."""
        if not self.path.exists():
            document = {
                "config": self._initial_config.model_dump(mode="json"),
                "bookings": [],
            }
            logger.debug("Creating booking store at %s", self.path)
            self._save(document)
            return document

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as exc:
            logger.error("Booking store %s is not valid JSON: %s", self.path, exc)
            raise StoreError(f"Invalid JSON in {self.path}: {exc}") from exc

        if not isinstance(document, dict) or not isinstance(document.get("config"), dict):
            raise StoreError(f"Booking store {self.path} must contain a 'config' mapping.")
        if not isinstance(document.setdefault("bookings", []), list):
            raise StoreError(f"Booking store {self.path} must contain a 'bookings' list.")

        return document

    def _save(self, document: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d booking(s) to %s", len(document["bookings"]), self.path)

    def _parse_bookings(self, document: Dict[str, Any]) -> List[Booking]:
        try:
            return [Booking.model_validate(item) for item in document["bookings"]]
        except ValidationError as exc:
            raise StoreError(f"Invalid booking record in {self.path}: {exc}") from exc

    @staticmethod
    def _index_of(bookings: List[Booking], booking_id: str) -> int:
        for index, booking in enumerate(bookings):
            if booking.id == booking_id:
                return index
        raise BookingNotFoundError(booking_id)
