"""
Tests for the booking store adapters.
"""

import json

import pytest
from pydantic import ValidationError

from slotbook.adapters.json_store import JsonBookingStore
from slotbook.adapters.memory_store import InMemoryBookingStore
from slotbook.domain.exceptions import BookingNotFoundError, StoreError
from slotbook.domain.models import Booking, BookingStatus, ScheduleConfig


def _booking(booking_id, date="2024-11-25", time="09:00"):
    return Booking(
        id=booking_id,
        customer_name="Ana",
        date=date,
        time=time,
        duration_minutes=60,
        status=BookingStatus.CONFIRMED,
        created_at="2024-11-20T08:00:00Z",
    )


@pytest.fixture(params=["json", "memory"])
def store(request, tmp_path):
    if request.param == "json":
        return JsonBookingStore(tmp_path / "store.json")
    return InMemoryBookingStore()


class TestBookingStores:
    """Behaviour shared by every store implementation."""

    def test_default_config(self, store):
        """Test a fresh store holds the default schedule."""
        assert store.read_config() == ScheduleConfig()

    def test_write_config(self, store):
        """Test that written configuration is read back."""
        config = ScheduleConfig(start_time="08:00", end_time="12:00", default_duration_minutes=30)

        store.write_config(config)

        assert store.read_config() == config

    def test_append_and_read_by_date(self, store):
        """Test bookings are filtered by date."""
        store.append_booking(_booking("a"))
        store.append_booking(_booking("b", date="2024-11-26"))

        assert [b.id for b in store.read_bookings("2024-11-25")] == ["a"]
        assert [b.id for b in store.list_bookings()] == ["a", "b"]

    def test_read_bookings_returns_all_statuses(self, store):
        """Test cancelled bookings are still returned; filtering is the caller's job."""
        store.append_booking(_booking("a"))
        store.update_booking("a", {"status": "cancelled"})

        assert store.read_bookings("2024-11-25")[0].status is BookingStatus.CANCELLED

    def test_update_booking(self, store):
        """Test field changes are applied and persisted."""
        store.append_booking(_booking("a"))

        updated = store.update_booking("a", {"time": "11:00", "updated_at": "2024-11-21T10:00:00Z"})

        assert updated.time == "11:00"
        assert store.read_bookings("2024-11-25")[0].time == "11:00"
        assert store.read_bookings("2024-11-25")[0].updated_at == "2024-11-21T10:00:00Z"

    def test_update_invalid_value_leaves_record(self, store):
        """Test an invalid change raises and is not stored."""
        store.append_booking(_booking("a"))

        with pytest.raises(ValidationError):
            store.update_booking("a", {"time": "99:99"})

        assert store.read_bookings("2024-11-25")[0].time == "09:00"

    def test_update_unknown_booking(self, store):
        """Test updating a missing id raises BookingNotFoundError."""
        with pytest.raises(BookingNotFoundError) as exc_info:
            store.update_booking("missing", {"status": "confirmed"})

        assert exc_info.value.booking_id == "missing"

    def test_delete_booking(self, store):
        """Test deletion removes only the given booking."""
        store.append_booking(_booking("a"))
        store.append_booking(_booking("b"))

        store.delete_booking("a")

        assert [b.id for b in store.list_bookings()] == ["b"]

    def test_delete_unknown_booking(self, store):
        """Test deleting a missing id raises BookingNotFoundError."""
        with pytest.raises(BookingNotFoundError):
            store.delete_booking("missing")


class TestJsonBookingStore:
    """Tests specific to the JSON document store."""

    def test_seeds_missing_file(self, tmp_path):
        """Test the first access writes the initial configuration."""
        path = tmp_path / "nested" / "store.json"
        initial = ScheduleConfig(start_time="08:00", working_days=[2, 4])

        store = JsonBookingStore(path, initial_config=initial)
        assert store.read_config() == initial

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["bookings"] == []
        assert document["config"]["working_days"] == [2, 4]

    def test_data_survives_new_instance(self, tmp_path):
        """Test bookings are read back by a fresh store on the same file."""
        path = tmp_path / "store.json"
        JsonBookingStore(path).append_booking(_booking("a"))

        bookings = JsonBookingStore(path).list_bookings()

        assert bookings == [_booking("a")]

    def test_existing_file_ignores_initial_config(self, tmp_path):
        """Test the seed is only used when the file does not exist."""
        path = tmp_path / "store.json"
        JsonBookingStore(path).read_config()

        store = JsonBookingStore(path, initial_config=ScheduleConfig(start_time="10:00"))

        assert store.read_config().start_time == "07:00"

    def test_no_temp_files_left(self, tmp_path):
        """Test atomic writes clean up after themselves."""
        store = JsonBookingStore(tmp_path / "store.json")
        store.append_booking(_booking("a"))
        store.append_booking(_booking("b"))

        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_corrupt_json(self, tmp_path):
        """Test unparsable content raises StoreError."""
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreError, match="Invalid JSON"):
            JsonBookingStore(path).list_bookings()

    def test_missing_config_section(self, tmp_path):
        """Test a document without config is rejected."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"bookings": []}), encoding="utf-8")

        with pytest.raises(StoreError, match="'config' mapping"):
            JsonBookingStore(path).read_config()

    def test_invalid_stored_config(self, tmp_path):
        """Test an invalid stored schedule raises StoreError."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"config": {"start_time": "18:00", "end_time": "08:00"}}), encoding="utf-8")

        with pytest.raises(StoreError, match="Invalid configuration"):
            JsonBookingStore(path).read_config()

    def test_invalid_stored_booking(self, tmp_path):
        """Test an invalid booking record raises StoreError."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"config": {}, "bookings": [{"id": "x"}]}), encoding="utf-8")

        with pytest.raises(StoreError, match="Invalid booking record"):
            JsonBookingStore(path).list_bookings()
