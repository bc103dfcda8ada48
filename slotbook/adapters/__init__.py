"""
Adapters layer - Booking store implementations.
"""

from .json_store import JsonBookingStore
from .memory_store import InMemoryBookingStore

__all__ = ["JsonBookingStore", "InMemoryBookingStore"]
