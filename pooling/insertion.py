"""
Purpose: Marginal detour of adding one rider to an existing stop sequence.
What it does:

Cheapest insertion over the waypoint chain

[departure, *current_stops, destination]

1) pickup goes where d(prev, P) + d(P, next) - d(prev, next) is smallest
2) dropoff goes where the same cost is smallest, strictly after the pickup

marginal_km = pickup_cost + dropoff_cost, floored at 0

Shared legs already driven for earlier riders are not counted twice:
a rider whose pickup sits beside an existing stop costs close to nothing.

Rule: straight-line (haversine) legs only. No routing engine.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from routing.geo import GeoPoint, haversine


def marginal_detour_km(
    departure: GeoPoint,
    destination: GeoPoint,
    pickup: GeoPoint,
    dropoff: GeoPoint,
    current_stops: Sequence[GeoPoint] = (),
) -> float:
    waypoints: List[GeoPoint] = [departure, *current_stops, destination]

    pickup_cost, pickup_index = _cheapest_insertion(waypoints, pickup, start=1)
    with_pickup = waypoints[:pickup_index] + [pickup] + waypoints[pickup_index:]

    dropoff_cost, _ = _cheapest_insertion(with_pickup, dropoff, start=pickup_index + 1)

    marginal = pickup_cost + dropoff_cost
    if math.isnan(marginal):
        return math.inf
    return max(0.0, marginal)


# -------------------------
# Internal helpers
# -------------------------

def _insertion_cost(before: GeoPoint, point: GeoPoint, after: GeoPoint) -> float:
    return haversine(before, point) + haversine(point, after) - haversine(before, after)


def _cheapest_insertion(chain: Sequence[GeoPoint], point: GeoPoint, start: int) -> Tuple[float, int]:
    """
    Returns (cost, index) where index is the position point would take in
    chain (inserted between chain[index - 1] and chain[index]).
    """
    best_cost = math.inf
    best_index = start
    for index in range(start, len(chain)):
        cost = _insertion_cost(chain[index - 1], point, chain[index])
        if cost < best_cost:
            best_cost = cost
            best_index = index
    return best_cost, best_index
