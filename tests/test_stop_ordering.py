import pytest

from conftest import make_match, make_trip
from pooling.models import PoolStop, StopType
from pooling.stops import enforce_pickup_before_dropoff, order_stops
from riders.models import RiderLocation
from routing.geo import GeoPoint, haversine

ROUTE = [(-26.20, 28.05), (-26.146, 28.05)]


@pytest.fixture
def trip():
    return make_trip(departure=ROUTE[0], destination=ROUTE[1], route=ROUTE)


def _labels(stops):
    return [f"{stop.stop_type.value[0].upper()}:{stop.rider_id}" for stop in stops]


def test_nested_riders_are_ordered_along_the_route(trip):
    """r2 boards after r1 and leaves before r1: P1, P2, D2, D1."""
    locations = {
        "r1": RiderLocation(GeoPoint(-26.195, 28.05), GeoPoint(-26.150, 28.05)),
        "r2": RiderLocation(GeoPoint(-26.190, 28.05), GeoPoint(-26.160, 28.05)),
    }

    stops = order_stops(trip, [make_match("r1"), make_match("r2")], locations)

    assert _labels(stops) == ["P:r1", "P:r2", "D:r2", "D:r1"]


def test_acceptance_order_does_not_matter(trip):
    locations = {
        "r1": RiderLocation(GeoPoint(-26.195, 28.05), GeoPoint(-26.150, 28.05)),
        "r2": RiderLocation(GeoPoint(-26.190, 28.05), GeoPoint(-26.160, 28.05)),
    }

    stops = order_stops(trip, [make_match("r2"), make_match("r1")], locations)

    assert _labels(stops) == ["P:r1", "P:r2", "D:r2", "D:r1"]


def test_rider_travelling_backwards_still_boards_first(trip):
    locations = {"r1": RiderLocation(GeoPoint(-26.150, 28.05), GeoPoint(-26.190, 28.05))}

    stops = order_stops(trip, [make_match("r1")], locations)

    assert _labels(stops) == ["P:r1", "D:r1"]


def test_stop_distances_are_annotated(trip):
    locations = {
        "r1": RiderLocation(GeoPoint(-26.195, 28.05), GeoPoint(-26.150, 28.05)),
        "r2": RiderLocation(GeoPoint(-26.190, 28.05), GeoPoint(-26.160, 28.05)),
    }

    stops = order_stops(trip, [make_match("r1"), make_match("r2")], locations)

    assert stops[0].distance_from_prev_km is None
    for previous, stop in zip(stops, stops[1:]):
        assert stop.distance_from_prev_km == pytest.approx(haversine(previous.location, stop.location))


def test_trip_without_polyline_orders_along_the_straight_line():
    trip = make_trip(departure=ROUTE[0], destination=ROUTE[1], route=None)
    locations = {
        "r1": RiderLocation(GeoPoint(-26.170, 28.051), GeoPoint(-26.150, 28.051)),
        "r2": RiderLocation(GeoPoint(-26.195, 28.049), GeoPoint(-26.180, 28.049)),
    }

    stops = order_stops(trip, [make_match("r1"), make_match("r2")], locations)

    assert _labels(stops) == ["P:r2", "D:r2", "P:r1", "D:r1"]


def test_riders_without_location_are_left_out(trip):
    locations = {"r1": RiderLocation(GeoPoint(-26.195, 28.05), GeoPoint(-26.150, 28.05))}

    stops = order_stops(trip, [make_match("r1"), make_match("ghost")], locations)

    assert {stop.rider_id for stop in stops} == {"r1"}


def test_enforce_moves_pickup_before_dropoff():
    p1 = PoolStop(StopType.PICKUP, "r1", GeoPoint(-26.19, 28.05))
    d1 = PoolStop(StopType.DROPOFF, "r1", GeoPoint(-26.15, 28.05))

    fixed = enforce_pickup_before_dropoff([d1, p1])

    assert [(s.stop_type, s.rider_id) for s in fixed] == [(StopType.PICKUP, "r1"), (StopType.DROPOFF, "r1")]
    assert fixed[0].distance_from_prev_km is None
    assert fixed[1].distance_from_prev_km == pytest.approx(haversine(p1.location, d1.location))


def test_enforce_only_moves_the_offending_rider():
    p1 = PoolStop(StopType.PICKUP, "r1", GeoPoint(-26.19, 28.05))
    d1 = PoolStop(StopType.DROPOFF, "r1", GeoPoint(-26.15, 28.05))
    p2 = PoolStop(StopType.PICKUP, "r2", GeoPoint(-26.18, 28.05))
    d2 = PoolStop(StopType.DROPOFF, "r2", GeoPoint(-26.17, 28.05))

    fixed = enforce_pickup_before_dropoff([p1, d2, d1, p2])

    assert _labels(fixed) == ["P:r1", "P:r2", "D:r2", "D:r1"]


def test_enforce_empty():
    assert enforce_pickup_before_dropoff([]) == []
