#Purpose: Candidate pre-filter (the only matching step that touches storage).
#Narrows an unbounded driver-trip population to at most ~200 plausible trips
#before the O(N) matching pass:
#rider bbox over {pickup, dropoff}, padded by the configured degrees
#stored trip bbox must overlap it (indexed columns)
#seats >= seats needed, bookable status, departure inside the rider window
#earliest departure first, capped
#Then hydrates each trip's polyline: cache -> stored encoded polyline -> [departure, destination].

#Output: DriverTrips ready for matching (still unscored).

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Protocol, Sequence

from drivers.models import DriverTrip, DriverTripStatus
from matching.config import MatchConfig, default_config
from riders.models import RiderRequest
from routing.geo import BoundingBox, GeoPoint, build_bounding_box, pad_bounding_box
from routing.polyline import decode_polyline

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 200

EXCLUDED_TRIP_STATUSES: FrozenSet[DriverTripStatus] = frozenset(
    {DriverTripStatus.COMPLETED, DriverTripStatus.CANCELLED, DriverTripStatus.EXPIRED}
)


@dataclass(frozen=True)
class CandidateQuery:
    """The storage-facing spatial query. Times are epoch ms, inclusive."""
    padded_box: BoundingBox
    min_seats: int
    window_start: int
    window_end: int
    excluded_statuses: FrozenSet[DriverTripStatus] = EXCLUDED_TRIP_STATUSES
    limit: int = MAX_CANDIDATES


@dataclass(frozen=True)
class CandidateRecord:
    """A stored trip (no polyline yet, bbox set) plus its encoded route, if any."""
    trip: DriverTrip
    encoded_polyline: Optional[str] = None


class TripStore(Protocol):
    def find_candidates(self, query: CandidateQuery) -> List[CandidateRecord]:
        ...


class PolylineStore(Protocol):
    def get(self, trip_id: str) -> Optional[List[GeoPoint]]:
        ...

    def put(self, trip_id: str, points: Sequence[GeoPoint], ttl: Optional[int] = None) -> None:
        ...


def build_candidate_query(rider: RiderRequest, config: MatchConfig, limit: int = MAX_CANDIDATES) -> CandidateQuery:
    box = pad_bounding_box(
        build_bounding_box([rider.pickup, rider.dropoff]),
        config.thresholds.bounding_box_padding_deg,
    )
    return CandidateQuery(
        padded_box=box,
        min_seats=rider.seats_needed,
        window_start=rider.earliest_departure,
        window_end=rider.latest_departure,
        limit=limit,
    )


def find_candidate_trips(
    rider: RiderRequest,
    store: TripStore,
    config: Optional[MatchConfig] = None,
    cache: Optional[PolylineStore] = None,
    limit: int = MAX_CANDIDATES,
) -> List[DriverTrip]:
    """
    Query storage, then hydrate polylines. Stores report their own failures
    and hand back fewer (or no) records; this never raises for I/O.
    """
    config = config or default_config()
    query = build_candidate_query(rider, config, limit)

    records = store.find_candidates(query)
    trips = [hydrate_polyline(record, cache) for record in records[:limit]]

    logger.debug("Pre-filter for rider request %s returned %d candidate trips", rider.id, len(trips))
    return trips


def hydrate_polyline(record: CandidateRecord, cache: Optional[PolylineStore] = None) -> DriverTrip:
    trip = record.trip
    points: Optional[List[GeoPoint]] = None

    if cache is not None:
        points = cache.get(trip.id)

    if not points and record.encoded_polyline:
        points = decode_polyline(record.encoded_polyline)
        if len(points) >= 2 and cache is not None:
            cache.put(trip.id, points)

    if not points or len(points) < 2:
        # degraded: straight line between the trip endpoints
        points = [trip.departure, trip.destination]

    return replace(trip, route_polyline=points)
