"""
Purpose: Core data models for the drivers domain.
What it does:
Defines the structure of a DriverTrip offer and its lifecycle status without relying on Django ORM constraints.
The trips app persists these; the matching core only ever reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from routing.geo import BoundingBox, GeoPoint

LatLon = Tuple[float, float]


class DriverTripStatus(str, Enum):
    """
    Lifecycle of an offered ride.
    Only OFFERED and ACTIVE trips can take riders.
    """
    OFFERED = "offered"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


BOOKABLE_TRIP_STATUSES = frozenset({DriverTripStatus.OFFERED, DriverTripStatus.ACTIVE})


@dataclass(frozen=True)
class DriverTrip:
    """
    A purely stateless snapshot of a driver's trip offer.
    Geometry is fixed when the trip is created (no re-routing mid-lifecycle).
    Times are epoch milliseconds.
    """
    id: str
    driver_id: str
    departure: GeoPoint
    destination: GeoPoint
    departure_time: int
    available_seats: int
    total_seats: int

    route_polyline: List[GeoPoint] = field(default_factory=list)
    status: DriverTripStatus = DriverTripStatus.OFFERED

    # Optional data the matching engine can utilize.
    shift_location: Optional[GeoPoint] = None
    arrival_time: Optional[int] = None
    bounding_box: Optional[BoundingBox] = None
    route_distance_km: Optional[float] = None
    driver_rating: Optional[float] = None
    organization_id: Optional[str] = None

    @property
    def has_route(self) -> bool:
        """True when the trip carries a real polyline (two or more points)."""
        return len(self.route_polyline) >= 2

    @property
    def is_bookable(self) -> bool:
        return self.status in BOOKABLE_TRIP_STATUSES

    @classmethod
    def new(
        cls,
        trip_id: str,
        driver_id: str,
        departure: LatLon,
        destination: LatLon,
        departure_time: int,
        available_seats: int = 4,
        total_seats: Optional[int] = None,
        route: Optional[Sequence[LatLon]] = None,
        status: str | DriverTripStatus = DriverTripStatus.OFFERED,
        shift_location: Optional[LatLon] = None,
        driver_rating: Optional[float] = None,
        organization_id: Optional[str] = None,
        bounding_box: Optional[BoundingBox] = None,
        route_distance_km: Optional[float] = None,
        arrival_time: Optional[int] = None,
    ) -> DriverTrip:
        if isinstance(status, str):
            status = DriverTripStatus(status)

        return cls(
            id=trip_id,
            driver_id=driver_id,
            departure=GeoPoint(*departure),
            destination=GeoPoint(*destination),
            departure_time=departure_time,
            available_seats=available_seats,
            total_seats=total_seats if total_seats is not None else available_seats,
            route_polyline=[GeoPoint(lat, lng) for lat, lng in (route or [])],
            status=status,
            shift_location=GeoPoint(*shift_location) if shift_location else None,
            arrival_time=arrival_time,
            bounding_box=bounding_box,
            route_distance_km=route_distance_km,
            driver_rating=driver_rating,
            organization_id=organization_id,
        )
