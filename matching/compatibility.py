"""
Purpose: Phase 2 of matching, route compatibility.
What it does:
- measures how far the rider's pickup and dropoff are from the driver's route
  (segment aware when the trip has a real polyline, endpoints otherwise)
- applies the walk limits (rider preference overrides both global limits)
- rejects riders travelling against the route direction

Rule: non-finite distances (NaN coordinates, empty geometry) always reject.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from drivers.models import DriverTrip
from riders.models import RiderRequest
from routing.geo import haversine, min_distance_to_route

from .config import MatchConfig
from .models import RejectReason


@dataclass(frozen=True)
class RouteFit:
    passed: bool
    pickup_distance_km: float
    dropoff_distance_km: float
    pickup_segment_index: int
    dropoff_segment_index: int
    reason: Optional[RejectReason] = None


def check_route_compatibility(rider: RiderRequest, driver: DriverTrip, config: MatchConfig) -> RouteFit:
    if driver.has_route:
        pickup = min_distance_to_route(rider.pickup, driver.route_polyline)
        dropoff = min_distance_to_route(rider.dropoff, driver.route_polyline)
        pickup_km, pickup_index = pickup.distance, pickup.segment_index
        dropoff_km, dropoff_index = dropoff.distance, dropoff.segment_index
    else:
        # No polyline yet: nearest trip endpoint, direction unknown
        pickup_km = min(haversine(rider.pickup, driver.departure), haversine(rider.pickup, driver.destination))
        dropoff_km = min(haversine(rider.dropoff, driver.departure), haversine(rider.dropoff, driver.destination))
        pickup_index = dropoff_index = 0

    max_walk = rider.preferences.max_walk_distance_km if rider.preferences else None
    max_pickup = max_walk if max_walk is not None else config.thresholds.max_pickup_distance_km
    max_dropoff = max_walk if max_walk is not None else config.thresholds.max_dropoff_distance_km

    def _reject(reason: RejectReason) -> RouteFit:
        return RouteFit(False, pickup_km, dropoff_km, pickup_index, dropoff_index, reason)

    # written as not (<=) so NaN fails the comparison and rejects
    if not pickup_km <= max_pickup:
        return _reject(RejectReason.PICKUP_TOO_FAR)
    if not dropoff_km <= max_dropoff:
        return _reject(RejectReason.DROPOFF_TOO_FAR)

    if driver.has_route and pickup_index > dropoff_index:
        return _reject(RejectReason.WRONG_DIRECTION)

    return RouteFit(True, pickup_km, dropoff_km, pickup_index, dropoff_index)
