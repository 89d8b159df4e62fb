"""
Purpose: Phase 3 of matching, weighted multi-factor scoring.
What it does:

Computes seven sub-scores, each in [0, 1], lower = better:

pickup = min(pickup_km / max_pickup_km, 1)

dropoff = min(dropoff_km / max_dropoff_km, 1)

time = min(|departure - earliest| minutes / max_time_diff, 1)

seats = 0 when the rider fills the car, else min((available - needed) / total, 1)

shift = min(haversine(dropoff, shift_location) / 5 km, 1), 0 without a shift location

detour = min(detour_km / (route_km * max_detour_fraction), 1), 0 without a polyline

rating = max(0, (5 - rating) / 5), 0 when unknown

composite = sum(sub_score * weight)

Also builds the human-readable explanation string.

Rule: Scoring ranks; it never rejects. Gates live in the engine.
"""

from __future__ import annotations

from typing import Tuple

from drivers.models import DriverTrip
from riders.models import RiderRequest
from routing.geo import estimate_detour_km, haversine

from .compatibility import RouteFit
from .config import MatchConfig
from .models import ScoreBreakdown

# Route length assumed when a trip was stored without one
DEFAULT_ROUTE_DISTANCE_KM = 20.0

# Shift locations further than this from the dropoff score the full penalty
SHIFT_NORMALISATION_KM = 5.0

MS_PER_MINUTE = 60_000


def compute_score(
    rider: RiderRequest,
    driver: DriverTrip,
    fit: RouteFit,
    config: MatchConfig,
) -> Tuple[float, ScoreBreakdown]:
    w = config.weights
    t = config.thresholds

    pickup_score = min(fit.pickup_distance_km / t.max_pickup_distance_km, 1.0)
    dropoff_score = min(fit.dropoff_distance_km / t.max_dropoff_distance_km, 1.0)

    time_diff_minutes = abs(driver.departure_time - rider.earliest_departure) / MS_PER_MINUTE
    time_score = min(time_diff_minutes / t.max_time_diff_minutes, 1.0)

    # A car the rider fills exactly beats a near-empty one
    if driver.available_seats <= rider.seats_needed or driver.total_seats <= 0:
        seat_score = 0.0
    else:
        seat_score = min((driver.available_seats - rider.seats_needed) / driver.total_seats, 1.0)

    shift_score = 0.0
    if driver.shift_location is not None:
        shift_score = min(haversine(rider.dropoff, driver.shift_location) / SHIFT_NORMALISATION_KM, 1.0)

    detour_km = 0.0
    detour_score = 0.0
    if driver.has_route:
        detour_km = estimate_detour_km(rider.pickup, rider.dropoff, driver.route_polyline)
        route_km = driver.route_distance_km or DEFAULT_ROUTE_DISTANCE_KM
        detour_score = min(detour_km / (route_km * t.max_detour_fraction), 1.0)

    rating_score = 0.0
    if driver.driver_rating is not None:
        rating_score = max(0.0, (5 - driver.driver_rating) / 5)

    score = (
        pickup_score * w.pickup_distance
        + dropoff_score * w.dropoff_distance
        + time_score * w.time_match
        + seat_score * w.seat_availability
        + shift_score * w.shift_alignment
        + detour_score * w.detour_cost
        + rating_score * w.driver_rating
    )

    breakdown = ScoreBreakdown(
        pickup_distance_km=fit.pickup_distance_km,
        pickup_score=pickup_score,
        dropoff_distance_km=fit.dropoff_distance_km,
        dropoff_score=dropoff_score,
        time_diff_minutes=time_diff_minutes,
        time_score=time_score,
        seat_score=seat_score,
        shift_score=shift_score,
        detour_distance_km=detour_km,
        detour_score=detour_score,
        rating_score=rating_score,
    )
    return score, breakdown


def build_explanation(b: ScoreBreakdown, score: float) -> str:
    parts = []

    if b.pickup_distance_km < 0.5:
        parts.append("pickup is very close to route")
    elif b.pickup_distance_km < 1.0:
        parts.append(f"pickup is {b.pickup_distance_km:.1f} km from route")
    else:
        parts.append(f"pickup is {b.pickup_distance_km:.1f} km from route (moderate)")

    if b.dropoff_distance_km < 0.5:
        parts.append("dropoff is very close")
    else:
        parts.append(f"dropoff is {b.dropoff_distance_km:.1f} km from route")

    if b.time_diff_minutes <= 5:
        parts.append("departure times align well")
    else:
        parts.append(f"{round(b.time_diff_minutes)} min departure difference")

    if b.detour_distance_km > 0:
        parts.append(f"~{b.detour_distance_km:.1f} km detour")

    return "; ".join(parts) + f" (score: {score:.3f})"
