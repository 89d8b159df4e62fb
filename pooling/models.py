"""
Purpose: Domain models for pooling several riders onto one driver trip.
What it does:
- Defines core data structures:
- PoolStop (type PICKUP/DROPOFF, rider id, location, distance from previous stop)
- PoolAssignment (accepted riders, aggregate metrics, ordered stops)
- DriverCandidates (one driver trip plus the matches competing for it)

Defines enums/constants:
- StopType = pickup | dropoff

Rule: No optimizer logic here. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional

from drivers.models import DriverTrip
from matching.models import MatchResult
from routing.geo import GeoPoint


class StopType(str, Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"


@dataclass(frozen=True)
class PoolStop:
    """
    A stop in a pooled route. For precedence constraints:
    each rider has a PICKUP stop that must occur before their DROPOFF stop.
    """
    stop_type: StopType
    rider_id: str
    location: GeoPoint
    distance_from_prev_km: Optional[float] = None


@dataclass(frozen=True)
class PoolAssignment:
    """
    The optimizer's answer for one driver trip.
    riders keeps acceptance (score) order; ordered_stops is the driving order.
    """
    driver_trip_id: str
    driver_id: str
    riders: List[MatchResult]
    total_score: float
    average_score: float
    seats_used: int
    seats_remaining: int
    cumulative_detour_km: float
    total_detour_minutes: float
    total_carbon_saved_kg: float
    ordered_stops: List[PoolStop]

    @property
    def rider_ids(self) -> List[str]:
        return [match.rider_id for match in self.riders]


class DriverCandidates(NamedTuple):
    driver: DriverTrip
    matches: List[MatchResult]
