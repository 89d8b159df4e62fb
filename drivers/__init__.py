"""
Drivers domain package.

Public API:
- Domain models: DriverTrip, DriverTripStatus
"""
from .models import BOOKABLE_TRIP_STATUSES, DriverTrip, DriverTripStatus

__all__ = ["DriverTrip", "DriverTripStatus", "BOOKABLE_TRIP_STATUSES"]
