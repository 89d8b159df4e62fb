"""
Purpose: Domain models for the Riders capability.
What it does:
- Defines core data structures:
- RiderRequest (id, rider id, pickup/dropoff points, departure window, seats needed, status)
- RiderPreferences (max walk km, max detour minutes, min driver rating, gender preference)
- RiderLocation (pickup/dropoff pair the pool optimizer routes through)

Defines enums/constants:
- RiderRequestStatus = pending | matched | confirmed | in_progress | completed | cancelled | expired

Rule: No matching logic, no storage. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from routing.geo import GeoPoint

LatLon = Tuple[float, float]


class RiderRequestStatus(str, Enum):
    PENDING = "pending"
    MATCHED = "matched"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@dataclass(frozen=True)
class RiderPreferences:
    """
    Per-rider overrides. Anything left as None falls back to MatchConfig.
    max_walk_distance_km applies to both pickup and dropoff.
    """
    max_walk_distance_km: Optional[float] = None
    max_detour_minutes: Optional[float] = None
    min_driver_rating: Optional[float] = None
    gender_preference: Optional[str] = None


@dataclass(frozen=True)
class RiderRequest:
    """
    A pending pickup request. Departure window bounds are epoch milliseconds.
    """
    id: str
    rider_id: str
    pickup: GeoPoint
    dropoff: GeoPoint
    earliest_departure: int
    latest_departure: int
    seats_needed: int = 1
    status: RiderRequestStatus = RiderRequestStatus.PENDING
    preferences: Optional[RiderPreferences] = None
    organization_id: Optional[str] = None

    @property
    def location(self) -> RiderLocation:
        return RiderLocation(pickup=self.pickup, dropoff=self.dropoff)

    @classmethod
    def new(
        cls,
        request_id: str,
        rider_id: str,
        pickup: LatLon,
        dropoff: LatLon,
        earliest_departure: int,
        latest_departure: int,
        seats_needed: int = 1,
        status: str | RiderRequestStatus = RiderRequestStatus.PENDING,
        preferences: Optional[RiderPreferences] = None,
        organization_id: Optional[str] = None,
    ) -> RiderRequest:
        if isinstance(status, str):
            status = RiderRequestStatus(status)

        return cls(
            id=request_id,
            rider_id=rider_id,
            pickup=GeoPoint(*pickup),
            dropoff=GeoPoint(*dropoff),
            earliest_departure=earliest_departure,
            latest_departure=latest_departure,
            seats_needed=seats_needed,
            status=status,
            preferences=preferences,
            organization_id=organization_id,
        )


@dataclass(frozen=True)
class RiderLocation:
    """Where a rider boards and alights. Keyed by rider id in the optimizer."""
    pickup: GeoPoint
    dropoff: GeoPoint
