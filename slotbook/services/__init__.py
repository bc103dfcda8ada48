"""
Service layer helpers that orchestrate the store, the admin gate and domain logic.
"""

from .admin_gate import AdminGate
from .scheduling_service import BookingStore, SchedulingService

__all__ = ["AdminGate", "BookingStore", "SchedulingService"]
