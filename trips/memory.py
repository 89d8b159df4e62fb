"""
Purpose: In-process trip store with the same query semantics as the ORM repository.
What it does:
Used by the simulation script and by tests that do not need a database.
Trips are stored the way the database stores them: bbox computed, polyline
kept only in encoded form, so hydration follows the same path.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from dispatch.candidate_filter import MAX_CANDIDATES, CandidateQuery, CandidateRecord
from drivers.models import DriverTrip
from matching.config import MatchConfig, default_config, merge_config
from routing.geo import bounding_boxes_overlap

from .geometry import derive_trip_geometry


class InMemoryTripStore:
    def __init__(self):
        self._records: Dict[str, Tuple[DriverTrip, Optional[str]]] = {}
        self._configs: Dict[str, Dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._records)

    def save_driver_trip(self, trip: DriverTrip) -> DriverTrip:
        geometry = derive_trip_geometry(trip)
        stored = replace(
            trip,
            route_polyline=[],
            bounding_box=geometry.bounding_box,
            route_distance_km=geometry.distance_km,
        )
        self._records[trip.id] = (stored, geometry.encoded_polyline)
        return replace(trip, bounding_box=geometry.bounding_box, route_distance_km=geometry.distance_km)

    def find_candidates(self, query: CandidateQuery) -> List[CandidateRecord]:
        excluded = {status.value for status in query.excluded_statuses}

        matches = [
            CandidateRecord(trip=trip, encoded_polyline=encoded)
            for trip, encoded in self._records.values()
            if trip.status.value not in excluded
            and trip.available_seats >= query.min_seats
            and query.window_start <= trip.departure_time <= query.window_end
            and trip.bounding_box is not None
            and bounding_boxes_overlap(trip.bounding_box, query.padded_box)
        ]
        matches.sort(key=lambda record: (record.trip.departure_time, record.trip.id))
        return matches[: min(query.limit, MAX_CANDIDATES)]

    def save_match_config(self, organization_id: str, overrides: Mapping[str, Any]) -> MatchConfig:
        merged = merge_config(default_config(), overrides)
        self._configs[organization_id] = dict(overrides)
        return merged

    def get_match_config(self, organization_id: Optional[str]) -> MatchConfig:
        overrides = self._configs.get(organization_id) if organization_id else None
        return merge_config(default_config(), overrides)
