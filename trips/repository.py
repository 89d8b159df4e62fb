"""
Purpose: Django ORM access for driver trips and matching config.
What it does:
- save_driver_trip: persists a trip with its bbox, encoded + simplified
  polyline and route length (routing through OSRM first when the driver
  gave only endpoints and a client is supplied), then warms the polyline cache
- find_candidates: the indexed bbox / seats / status / time-window query
- get_driver_trip, reserve_seats, release_seats, update_status
- get_match_config / save_match_config: per-organization overrides

Rule: storage failures on the read path are logged and surface as an empty
result, never as an exception into matching.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Optional

from django.db import DatabaseError, transaction
from django.db.models import F

from dispatch.candidate_filter import MAX_CANDIDATES, CandidateQuery, CandidateRecord
from drivers.models import BOOKABLE_TRIP_STATUSES, DriverTrip, DriverTripStatus
from matching.config import MatchConfig, default_config, merge_config
from routing.geo import GeoPoint
from routing.osrm_client import OSRMClient, OSRMError
from routing.polyline import decode_polyline

from .cache import PolylineCache
from .geometry import derive_trip_geometry
from .models import DriverTripRecord, MatchConfigRecord

logger = logging.getLogger(__name__)


class DriverTripRepository:
    def __init__(self, cache: Optional[PolylineCache] = None, osrm_client: Optional[OSRMClient] = None):
        self.cache = cache
        self.osrm_client = osrm_client

    # -------------------------
    # Driver trips
    # -------------------------

    def save_driver_trip(self, trip: DriverTrip) -> DriverTrip:
        """
        Insert or replace a trip. Returns the trip with bounding_box,
        route_distance_km and (when routed) route_polyline filled in.
        """
        if not trip.has_route and self.osrm_client is not None:
            trip = self._route_with_osrm(trip)

        geometry = derive_trip_geometry(trip)
        box = geometry.bounding_box
        shift = trip.shift_location

        DriverTripRecord.objects.update_or_create(
            id=trip.id,
            defaults={
                "driver_id": trip.driver_id,
                "departure_lat": trip.departure.lat,
                "departure_lng": trip.departure.lng,
                "destination_lat": trip.destination.lat,
                "destination_lng": trip.destination.lng,
                "shift_lat": shift.lat if shift else None,
                "shift_lng": shift.lng if shift else None,
                "departure_time": trip.departure_time,
                "arrival_time": trip.arrival_time,
                "available_seats": trip.available_seats,
                "total_seats": trip.total_seats,
                "bbox_min_lat": box.min_lat,
                "bbox_max_lat": box.max_lat,
                "bbox_min_lng": box.min_lng,
                "bbox_max_lng": box.max_lng,
                "route_polyline_encoded": geometry.encoded_polyline,
                "simplified_polyline_encoded": geometry.simplified_polyline,
                "route_point_count": len(geometry.route),
                "route_distance_km": geometry.distance_km,
                "status": trip.status.value,
                "driver_rating": trip.driver_rating,
                "organization_id": trip.organization_id,
            },
        )

        if self.cache is not None and trip.has_route:
            self.cache.put(trip.id, geometry.route)

        return replace(trip, bounding_box=box, route_distance_km=geometry.distance_km)

    def find_candidates(self, query: CandidateQuery) -> List[CandidateRecord]:
        limit = min(query.limit, MAX_CANDIDATES)
        box = query.padded_box

        rows = (
            DriverTripRecord.objects.exclude(status__in=[status.value for status in query.excluded_statuses])
            .filter(
                available_seats__gte=query.min_seats,
                departure_time__gte=query.window_start,
                departure_time__lte=query.window_end,
                # stored bbox overlaps the rider's padded bbox
                bbox_max_lat__gte=box.min_lat,
                bbox_min_lat__lte=box.max_lat,
                bbox_max_lng__gte=box.min_lng,
                bbox_min_lng__lte=box.max_lng,
            )
            .order_by("departure_time", "id")[:limit]
        )

        candidates: List[CandidateRecord] = []
        try:
            for row in rows:
                try:
                    trip = row.to_driver_trip()
                except ValueError:
                    # skip the bad row, keep the rest
                    logger.warning("Skipping unreadable driver trip %s (status %r)", row.id, row.status)
                    continue
                candidates.append(CandidateRecord(trip=trip, encoded_polyline=row.route_polyline_encoded))
        except DatabaseError:
            logger.exception("Candidate pre-filter query failed; matching with no candidates")
            return []
        return candidates

    def get_driver_trip(self, trip_id: str) -> Optional[DriverTrip]:
        row = DriverTripRecord.objects.filter(id=trip_id).first()
        if row is None:
            return None

        route: Optional[List[GeoPoint]] = None
        if self.cache is not None:
            route = self.cache.get(trip_id)
        if not route and row.route_polyline_encoded:
            route = decode_polyline(row.route_polyline_encoded)
        return row.to_driver_trip(route)

    def reserve_seats(self, trip_id: str, seats: int = 1) -> bool:
        """
        Conditional decrement: only succeeds while enough seats remain on a
        bookable trip. Safe against concurrent bookings.
        """
        updated = DriverTripRecord.objects.filter(
            id=trip_id,
            available_seats__gte=seats,
            status__in=[status.value for status in BOOKABLE_TRIP_STATUSES],
        ).update(available_seats=F("available_seats") - seats)
        return updated > 0

    def release_seats(self, trip_id: str, seats: int = 1) -> bool:
        """Compensating increment, never past total_seats."""
        updated = DriverTripRecord.objects.filter(
            id=trip_id,
            available_seats__lte=F("total_seats") - seats,
        ).update(available_seats=F("available_seats") + seats)
        return updated > 0

    def update_status(self, trip_id: str, status: DriverTripStatus) -> bool:
        updated = DriverTripRecord.objects.filter(id=trip_id).update(status=status.value)
        if self.cache is not None and status not in BOOKABLE_TRIP_STATUSES:
            self.cache.delete(trip_id)
        return updated > 0

    # -------------------------
    # Matching config
    # -------------------------

    def get_match_config(self, organization_id: Optional[str]) -> MatchConfig:
        """
        Organization overrides merged over defaults. Missing or unreadable
        overrides fall back to the defaults.
        """
        base = default_config()
        if not organization_id:
            return base

        try:
            row = MatchConfigRecord.objects.filter(organization_id=organization_id).first()
        except DatabaseError:
            logger.exception("Could not load matching config for organization %s", organization_id)
            return base

        if row is None:
            return base

        try:
            return merge_config(base, row.config_json)
        except ValueError:
            logger.warning("Ignoring invalid matching config for organization %s", organization_id, exc_info=True)
            return base

    @transaction.atomic
    def save_match_config(self, organization_id: str, overrides: Mapping[str, Any]) -> MatchConfig:
        """
        Validates by merging over the defaults first; raises ValueError
        without writing anything when the overrides are invalid.
        """
        merged = merge_config(default_config(), overrides)
        MatchConfigRecord.objects.update_or_create(
            organization_id=organization_id,
            defaults={"config_json": dict(overrides)},
        )
        return merged

    # -------------------------
    # Internal helpers
    # -------------------------

    def _route_with_osrm(self, trip: DriverTrip) -> DriverTrip:
        try:
            geometry = self.osrm_client.fetch_route([trip.departure, trip.destination])
        except OSRMError:
            logger.warning("OSRM routing failed for trip %s; storing endpoints only", trip.id, exc_info=True)
            return trip

        if len(geometry.points) < 2:
            return trip
        return replace(trip, route_polyline=geometry.points, route_distance_km=geometry.distance_km)
