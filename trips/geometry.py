"""
Purpose: Everything derived from a trip's route once, at creation time.
What it does:
- falls back to [departure, destination] when no polyline was supplied
- bounding box (drives the indexed pre-filter query)
- encoded polyline (None when the driver gave no real route)
- route length in km (the supplied one wins)
- simplified polyline at 100 m tolerance for cheap fallbacks

Rule: pure, no Django. Shared by the ORM repository and the in-memory store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from drivers.models import DriverTrip
from routing.geo import BoundingBox, GeoPoint, build_bounding_box, polyline_length
from routing.polyline import encode_polyline, simplify_polyline

SIMPLIFY_TOLERANCE_KM = 0.1


@dataclass(frozen=True)
class TripGeometry:
    route: List[GeoPoint]
    bounding_box: BoundingBox
    encoded_polyline: Optional[str]
    simplified_polyline: str
    distance_km: float


def derive_trip_geometry(trip: DriverTrip) -> TripGeometry:
    route = list(trip.route_polyline) if trip.has_route else [trip.departure, trip.destination]
    distance_km = trip.route_distance_km if trip.route_distance_km is not None else polyline_length(route)

    return TripGeometry(
        route=route,
        bounding_box=build_bounding_box(route),
        encoded_polyline=encode_polyline(route) if trip.has_route else None,
        simplified_polyline=encode_polyline(simplify_polyline(route, SIMPLIFY_TOLERANCE_KM)),
        distance_km=distance_km,
    )
