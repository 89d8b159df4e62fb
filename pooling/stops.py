"""
Purpose: Turn a set of accepted riders into a driving order.
What it does:
- projects every pickup and dropoff onto the driver's route
- sorts stops by nearest segment, then by offset along the route
- moves a rider's pickup to just before their dropoff when projection put it later
- annotates each stop (except the first) with the straight-line km from the previous stop

Trips without a real polyline are treated as the single segment departure -> destination.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Mapping, Sequence

from drivers.models import DriverTrip
from matching.models import MatchResult
from riders.models import RiderLocation
from routing.geo import haversine, project_onto_route

from .models import PoolStop, StopType


def order_stops(
    driver: DriverTrip,
    riders: Sequence[MatchResult],
    rider_locations: Mapping[str, RiderLocation],
) -> List[PoolStop]:
    route = driver.route_polyline if driver.has_route else [driver.departure, driver.destination]

    keyed = []
    for match in riders:
        location = rider_locations.get(match.rider_id)
        if location is None:
            continue
        for stop_type, point in ((StopType.PICKUP, location.pickup), (StopType.DROPOFF, location.dropoff)):
            projection = project_onto_route(point, route)
            stop = PoolStop(stop_type=stop_type, rider_id=match.rider_id, location=point)
            keyed.append(((projection.segment_index, projection.along_route_km), stop))

    # stable: equal keys keep acceptance order, pickup before dropoff
    keyed.sort(key=lambda item: item[0])
    return enforce_pickup_before_dropoff([stop for _, stop in keyed])


def enforce_pickup_before_dropoff(stops: Sequence[PoolStop]) -> List[PoolStop]:
    """
    Guarantee every rider's pickup precedes their dropoff, then fill in
    distance_from_prev_km.
    """
    result = list(stops)
    picked_up = set()

    index = 0
    while index < len(result):
        stop = result[index]
        if stop.stop_type is StopType.PICKUP:
            picked_up.add(stop.rider_id)
        elif stop.rider_id not in picked_up:
            # dropoff seen first: pull this rider's pickup forward to sit right before it
            for later in range(index + 1, len(result)):
                candidate = result[later]
                if candidate.stop_type is StopType.PICKUP and candidate.rider_id == stop.rider_id:
                    result.insert(index, result.pop(later))
                    picked_up.add(stop.rider_id)
                    index += 1  # the dropoff moved one slot right
                    break
        index += 1

    annotated: List[PoolStop] = []
    for position, stop in enumerate(result):
        if position == 0:
            annotated.append(replace(stop, distance_from_prev_km=None))
        else:
            annotated.append(replace(stop, distance_from_prev_km=haversine(result[position - 1].location, stop.location)))
    return annotated
