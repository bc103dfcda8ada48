"""
slotbook - appointment slots and bookings for a single service provider.
"""

__version__ = "0.1.0"
