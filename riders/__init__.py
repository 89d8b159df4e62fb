"""
Riders domain package.

Public API:
- Domain models: RiderRequest, RiderPreferences, RiderLocation, RiderRequestStatus
"""
from .models import RiderLocation, RiderPreferences, RiderRequest, RiderRequestStatus

__all__ = [
    "RiderRequest",
    "RiderPreferences",
    "RiderLocation",
    "RiderRequestStatus",
]
