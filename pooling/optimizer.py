"""
Purpose: Choose which riders share one driver trip, and in what stop order.
What it does:

Greedy cheapest insertion with a cumulative absolute detour budget:

1) walk candidates best score first
2) stop once max_riders_per_pool riders are accepted
3) skip a rider whose seats would overflow the trip, or whose locations are unknown
4) marginal_km = cost of inserting pickup + dropoff into the CURRENT stop order
5) accept if cumulative_km + marginal_km <= max_pool_detour_km,
   then rebuild the stop order from scratch over everyone accepted

The budget is for the whole pool, not per rider: the pool can never
lengthen the route by more than max_pool_detour_km however many riders join.

Rule: No backtracking, no global optimum. Rebuilding stops after each
acceptance is O(k^2) in pool size, fine for k around 4.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from drivers.models import DriverTrip
from matching.config import MatchConfig, default_config
from matching.models import MatchResult
from riders.models import RiderLocation
from routing.geo import estimate_detour_minutes

from .insertion import marginal_detour_km
from .models import DriverCandidates, PoolAssignment, PoolStop
from .stops import order_stops

logger = logging.getLogger(__name__)


def optimize_pool(
    driver: DriverTrip,
    ranked_candidates: Sequence[MatchResult],
    rider_locations: Mapping[str, RiderLocation],
    config: Optional[MatchConfig] = None,
) -> Optional[PoolAssignment]:
    """
    Returns None when the trip has no seats, there are no candidates, or no
    candidate fits. None is a normal "no pool" outcome, not an error.
    """
    config = config or default_config()

    if driver.available_seats <= 0 or not ranked_candidates:
        return None

    max_riders = config.max_riders_per_pool if config.enable_multi_rider else 1

    selected: List[MatchResult] = []
    seats_used = 0
    cumulative_km = 0.0
    stops: List[PoolStop] = []

    for candidate in ranked_candidates:
        if len(selected) >= max_riders:
            break

        if seats_used + candidate.seats_needed > driver.available_seats:
            continue

        location = rider_locations.get(candidate.rider_id)
        if location is None:
            logger.warning("No pickup/dropoff for rider %s, skipping in pool for trip %s", candidate.rider_id, driver.id)
            continue

        marginal_km = marginal_detour_km(
            driver.departure,
            driver.destination,
            location.pickup,
            location.dropoff,
            [stop.location for stop in stops],
        )

        if not cumulative_km + marginal_km <= config.max_pool_detour_km:
            logger.debug(
                "Trip %s: rider %s adds %.2f km, budget %.2f/%.2f km used",
                driver.id, candidate.rider_id, marginal_km, cumulative_km, config.max_pool_detour_km,
            )
            continue

        selected.append(candidate)
        seats_used += candidate.seats_needed
        cumulative_km += marginal_km
        stops = order_stops(driver, selected, rider_locations)

    if not selected:
        return None

    total_score = sum(match.score for match in selected)
    total_carbon = sum(match.carbon_saved_kg for match in selected)

    return PoolAssignment(
        driver_trip_id=driver.id,
        driver_id=driver.driver_id,
        riders=selected,
        total_score=total_score,
        average_score=total_score / len(selected),
        seats_used=seats_used,
        seats_remaining=driver.available_seats - seats_used,
        cumulative_detour_km=cumulative_km,
        total_detour_minutes=round(estimate_detour_minutes(cumulative_km), 1),
        total_carbon_saved_kg=round(total_carbon, 2),
        ordered_stops=stops,
    )


def optimize_multi_driver_pools(
    groups: Mapping[str, DriverCandidates],
    rider_locations: Mapping[str, RiderLocation],
    config: Optional[MatchConfig] = None,
    trip_configs: Optional[Mapping[str, MatchConfig]] = None,
) -> List[PoolAssignment]:
    """
    One pool per driver trip, best average score first.
    Riders may still appear in several pools; dispatch resolves that.

    trip_configs: driver trip id -> config for that trip's pool (its
    organization's override); trips not listed use config.
    """
    config = config or default_config()
    trip_configs = trip_configs or {}

    pools: List[PoolAssignment] = []
    for trip_id, group in groups.items():
        pool = optimize_pool(group.driver, group.matches, rider_locations, trip_configs.get(trip_id, config))
        if pool is not None:
            pools.append(pool)

    pools.sort(key=lambda pool: pool.average_score)
    return pools
