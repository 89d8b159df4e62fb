import os

import pytest

from drivers.models import DriverTrip
from matching.models import MatchResult, ScoreBreakdown
from riders.models import RiderRequest

os.environ.setdefault("MATCHING_DB_NAME", ":memory:")
os.environ.setdefault("MATCHING_CACHE_BACKEND", "django.core.cache.backends.locmem.LocMemCache")

# Johannesburg landmarks used across the suite
JHB_CBD = (-26.2041, 28.0473)
SANDTON = (-26.1076, 28.0567)
ROSEBANK = (-26.1451, 28.0397)
KEMPTON_PARK = (-26.1004, 28.2328)

T0 = 1_700_000_000_000  # fixed epoch ms so tests are deterministic
MINUTE_MS = 60_000


def pytest_configure(config):
    from django.core.management import call_command

    from trips.conf import setup_django

    setup_django()
    call_command("migrate", verbosity=0)


@pytest.fixture
def db():
    """Every test that touches the ORM runs inside a rolled back transaction."""
    from django.core.cache import cache
    from django.db import transaction

    with transaction.atomic():
        yield
        transaction.set_rollback(True)
    cache.clear()


def make_rider(**overrides) -> RiderRequest:
    values = dict(
        request_id="req-1",
        rider_id="rider-1",
        pickup=(-26.20, 28.05),
        dropoff=(-26.11, 28.06),
        earliest_departure=T0,
        latest_departure=T0 + 20 * MINUTE_MS,
    )
    values.update(overrides)
    return RiderRequest.new(**values)


def make_trip(**overrides) -> DriverTrip:
    values = dict(
        trip_id="trip-1",
        driver_id="driver-1",
        departure=(-26.21, 28.04),
        destination=(-26.10, 28.07),
        departure_time=T0 + 5 * MINUTE_MS,
        available_seats=4,
        total_seats=4,
        route=[(-26.21, 28.04), (-26.10, 28.07)],
    )
    values.update(overrides)
    return DriverTrip.new(**values)


def make_match(rider_id: str, score: float = 0.3, trip_id: str = "trip-1", seats_needed: int = 1) -> MatchResult:
    """A hand-built match for optimizer and dispatch tests (breakdown is irrelevant there)."""
    breakdown = ScoreBreakdown(
        pickup_distance_km=0.0,
        pickup_score=0.0,
        dropoff_distance_km=0.0,
        dropoff_score=0.0,
        time_diff_minutes=0.0,
        time_score=0.0,
        seat_score=0.0,
        shift_score=0.0,
        detour_distance_km=0.0,
        detour_score=0.0,
        rating_score=0.0,
    )
    return MatchResult(
        driver_trip_id=trip_id,
        driver_id=f"driver-of-{trip_id}",
        rider_request_id=f"req-{rider_id}",
        rider_id=rider_id,
        score=score,
        explanation="test match",
        breakdown=breakdown,
        estimated_pickup_time=T0,
        estimated_detour_minutes=0.0,
        carbon_saved_kg=1.0,
        seats_needed=seats_needed,
    )


@pytest.fixture
def rider() -> RiderRequest:
    return make_rider()


@pytest.fixture
def trip() -> DriverTrip:
    return make_trip()
