from dataclasses import replace

import pytest

from conftest import JHB_CBD, KEMPTON_PARK, ROSEBANK, SANDTON, make_match, make_trip
from matching.config import default_config
from pooling.insertion import marginal_detour_km
from pooling.models import DriverCandidates, StopType
from pooling.optimizer import optimize_multi_driver_pools, optimize_pool
from riders.models import RiderLocation
from routing.geo import GeoPoint, haversine

ORIGIN = GeoPoint(-26.2, 28.0)
DEST = GeoPoint(-26.1, 28.0)

# ~6 km straight run north along one meridian
SHORT_ROUTE = [(-26.20, 28.05), (-26.146, 28.05)]


def _location(pickup, dropoff) -> RiderLocation:
    return RiderLocation(pickup=GeoPoint(*pickup), dropoff=GeoPoint(*dropoff))


def _cbd_to_sandton(**overrides):
    values = dict(departure=JHB_CBD, destination=SANDTON, route=[JHB_CBD, SANDTON], available_seats=3, total_seats=4)
    values.update(overrides)
    return make_trip(**values)


def _short_trip(**overrides):
    values = dict(departure=SHORT_ROUTE[0], destination=SHORT_ROUTE[1], route=SHORT_ROUTE)
    values.update(overrides)
    return make_trip(**values)


@pytest.fixture
def on_route_locations():
    """Four riders strung along SHORT_ROUTE, all travelling with the driver."""
    return {
        "r1": _location((-26.195, 28.05), (-26.150, 28.05)),
        "r2": _location((-26.190, 28.051), (-26.160, 28.051)),
        "r3": _location((-26.185, 28.049), (-26.170, 28.049)),
        "r4": _location((-26.180, 28.050), (-26.155, 28.050)),
    }


# -------------------------
# marginal_detour_km
# -------------------------

def test_marginal_for_rider_on_the_direct_route_is_near_zero():
    marginal = marginal_detour_km(ORIGIN, DEST, GeoPoint(-26.15, 28.0), DEST)
    assert marginal < 0.5


def test_marginal_for_off_route_rider_is_positive():
    marginal = marginal_detour_km(ORIGIN, DEST, GeoPoint(-26.15, 28.04), DEST)
    assert marginal > 0


def test_existing_nearby_stop_reduces_marginal():
    stop_c = GeoPoint(-26.15, 28.03)
    pickup = GeoPoint(-26.15, 28.04)

    without = marginal_detour_km(ORIGIN, DEST, pickup, DEST)
    with_stop = marginal_detour_km(ORIGIN, DEST, pickup, DEST, [stop_c])

    assert with_stop < without


def test_marginal_is_never_negative_or_nan():
    assert marginal_detour_km(ORIGIN, DEST, ORIGIN, DEST) >= 0
    assert marginal_detour_km(ORIGIN, DEST, GeoPoint(float("nan"), 28.0), DEST) == float("inf")


def test_marginal_kempton_park_is_large():
    marginal = marginal_detour_km(GeoPoint(*JHB_CBD), GeoPoint(*SANDTON), GeoPoint(*KEMPTON_PARK), GeoPoint(*SANDTON))
    assert marginal > 10


# -------------------------
# optimize_pool
# -------------------------

def test_scenario_two_seats_three_riders(on_route_locations):
    """Two seats, three compatible riders: the best two are taken."""
    trip = _short_trip(available_seats=2, total_seats=2)
    candidates = [make_match("r1", 0.1), make_match("r2", 0.2), make_match("r3", 0.3)]

    pool = optimize_pool(trip, candidates, on_route_locations)

    assert pool is not None
    assert pool.rider_ids == ["r1", "r2"]
    assert pool.seats_used == 2
    assert pool.seats_remaining == 0
    assert pool.cumulative_detour_km <= default_config().max_pool_detour_km
    assert pool.total_score == pytest.approx(0.3)
    assert pool.average_score == pytest.approx(0.15)
    assert pool.total_carbon_saved_kg == pytest.approx(2.0)
    assert len(pool.ordered_stops) == 4


def test_budget_rejects_kempton_park_and_keeps_rosebank():
    trip = _cbd_to_sandton()
    locations = {
        "r1": _location(ROSEBANK, SANDTON),
        "r2": _location(KEMPTON_PARK, SANDTON),
    }
    config = replace(default_config(), max_pool_detour_km=2)

    pool = optimize_pool(trip, [make_match("r1", 0.2), make_match("r2", 0.3)], locations, config)

    assert pool is not None
    assert pool.rider_ids == ["r1"]


def test_high_marginal_rider_skipped_and_later_rider_accepted():
    trip = _cbd_to_sandton()
    locations = {
        "r1": _location(KEMPTON_PARK, SANDTON),
        "r2": _location(ROSEBANK, SANDTON),
    }
    config = replace(default_config(), max_pool_detour_km=3)

    pool = optimize_pool(trip, [make_match("r1", 0.1), make_match("r2", 0.4)], locations, config)

    assert pool is not None
    assert "r2" in pool.rider_ids
    assert "r1" not in pool.rider_ids


def test_near_route_riders_accepted_within_default_budget():
    trip = _cbd_to_sandton()
    locations = {
        "r1": _location((-26.18, 28.045), SANDTON),
        "r2": _location(ROSEBANK, SANDTON),
    }

    pool = optimize_pool(trip, [make_match("r1", 0.2), make_match("r2", 0.3)], locations)

    assert pool is not None
    assert len(pool.riders) > 0
    assert pool.cumulative_detour_km < default_config().max_pool_detour_km + 0.1


def test_rider_that_overflows_seats_is_skipped_not_fatal(on_route_locations):
    trip = _short_trip(available_seats=2, total_seats=4)
    candidates = [make_match("r1", 0.1, seats_needed=3), make_match("r2", 0.2), make_match("r3", 0.3)]

    pool = optimize_pool(trip, candidates, on_route_locations)

    assert pool.rider_ids == ["r2", "r3"]
    assert pool.seats_used == 2


def test_max_riders_per_pool(on_route_locations):
    trip = _short_trip(available_seats=4)
    candidates = [make_match(rider_id, 0.1 * i) for i, rider_id in enumerate(["r1", "r2", "r3", "r4"], start=1)]
    config = replace(default_config(), max_riders_per_pool=2)

    pool = optimize_pool(trip, candidates, on_route_locations, config)

    assert pool.rider_ids == ["r1", "r2"]
    assert pool.seats_remaining == 2


def test_multi_rider_disabled_takes_only_the_best(on_route_locations):
    trip = _short_trip(available_seats=4)
    candidates = [make_match("r1", 0.1), make_match("r2", 0.2)]
    config = replace(default_config(), enable_multi_rider=False)

    pool = optimize_pool(trip, candidates, on_route_locations, config)

    assert pool.rider_ids == ["r1"]


def test_rider_without_location_is_skipped(on_route_locations):
    trip = _short_trip()
    candidates = [make_match("ghost", 0.05), make_match("r1", 0.1)]

    pool = optimize_pool(trip, candidates, on_route_locations)

    assert pool.rider_ids == ["r1"]
    assert {stop.rider_id for stop in pool.ordered_stops} == {"r1"}


def test_no_pool_cases(on_route_locations):
    # 1. No seats
    assert optimize_pool(_short_trip(available_seats=0), [make_match("r1")], on_route_locations) is None

    # 2. No candidates
    assert optimize_pool(_short_trip(), [], on_route_locations) is None

    # 3. Every candidate blows the budget
    trip = _cbd_to_sandton()
    locations = {"r1": _location(KEMPTON_PARK, SANDTON)}
    config = replace(default_config(), max_pool_detour_km=2)
    assert optimize_pool(trip, [make_match("r1")], locations, config) is None


@pytest.mark.parametrize("budget_km", [0.5, 1, 2, 5, 10, 30])
@pytest.mark.parametrize("seats", [1, 2, 3])
def test_pool_never_exceeds_budget_or_seats(budget_km, seats):
    trip = _cbd_to_sandton(available_seats=seats)
    locations = {
        "near": _location((-26.18, 28.045), SANDTON),
        "rosebank": _location(ROSEBANK, SANDTON),
        "kempton": _location(KEMPTON_PARK, SANDTON),
        "backwards": _location(SANDTON, JHB_CBD),
    }
    candidates = [make_match(rider_id, 0.1 * i) for i, rider_id in enumerate(locations, start=1)]
    config = replace(default_config(), max_pool_detour_km=budget_km)

    pool = optimize_pool(trip, candidates, locations, config)

    if pool is None:
        return
    assert pool.cumulative_detour_km <= budget_km
    assert 0 < pool.seats_used <= seats
    assert pool.seats_remaining == seats - pool.seats_used
    assert len(pool.ordered_stops) == 2 * len(pool.riders)


def test_pool_stops_keep_pickup_before_dropoff(on_route_locations):
    trip = _short_trip()
    candidates = [make_match(rider_id, 0.1) for rider_id in on_route_locations]

    pool = optimize_pool(trip, candidates, on_route_locations)

    position = {(stop.rider_id, stop.stop_type): i for i, stop in enumerate(pool.ordered_stops)}
    for rider_id in pool.rider_ids:
        assert position[(rider_id, StopType.PICKUP)] < position[(rider_id, StopType.DROPOFF)]


def test_detour_minutes_follow_cumulative_km():
    trip = _cbd_to_sandton()
    locations = {"r1": _location(ROSEBANK, SANDTON)}

    pool = optimize_pool(trip, [make_match("r1")], locations)

    assert pool.total_detour_minutes == pytest.approx(round(pool.cumulative_detour_km / 30 * 60, 1))
    assert pool.cumulative_detour_km < haversine(GeoPoint(*JHB_CBD), GeoPoint(*ROSEBANK))


# -------------------------
# optimize_multi_driver_pools
# -------------------------

def test_multi_driver_pools_sorted_by_average_score(on_route_locations):
    good = _short_trip(trip_id="good")
    okay = _short_trip(trip_id="okay")
    empty = _short_trip(trip_id="empty", available_seats=0)

    groups = {
        "okay": DriverCandidates(okay, [make_match("r1", 0.5, trip_id="okay")]),
        "good": DriverCandidates(good, [make_match("r1", 0.1, trip_id="good"), make_match("r2", 0.2, trip_id="good")]),
        "empty": DriverCandidates(empty, [make_match("r3", 0.0, trip_id="empty")]),
    }

    pools = optimize_multi_driver_pools(groups, on_route_locations)

    assert [pool.driver_trip_id for pool in pools] == ["good", "okay"]
    assert pools[0].average_score == pytest.approx(0.15)


def test_multi_driver_pools_use_each_trip_config(on_route_locations):
    solo = replace(default_config(), enable_multi_rider=False)
    groups = {
        trip_id: DriverCandidates(
            _short_trip(trip_id=trip_id),
            [make_match("r1", 0.1, trip_id=trip_id), make_match("r2", 0.2, trip_id=trip_id)],
        )
        for trip_id in ("shared", "solo")
    }

    pools = optimize_multi_driver_pools(groups, on_route_locations, default_config(), {"solo": solo})

    riders_by_trip = {pool.driver_trip_id: pool.rider_ids for pool in pools}
    assert riders_by_trip == {"shared": ["r1", "r2"], "solo": ["r1"]}
