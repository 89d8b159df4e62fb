"""
Purpose: The matching "one call" entry point.
What it does:
For one rider against a pre-filtered candidate list of driver trips, runs

Phase 1 - hard filters (filters.py)
Phase 2 - route compatibility (compatibility.py)
Phase 3 - weighted scoring (scoring.py) followed by the detour gates

and returns matches sorted best-first (lower score) with pipeline stats.

Deterministic: same inputs, same output order and values. A malformed
candidate is rejected on its own and never aborts the rest of the batch.

Rule: No storage, no OSRM. Candidates are handed in by the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional, Sequence

from drivers.models import DriverTrip
from riders.models import RiderRequest
from routing.geo import estimate_carbon_saved_kg, estimate_detour_minutes, haversine

from .compatibility import check_route_compatibility
from .config import MatchConfig, default_config
from .filters import apply_hard_filters
from .models import MatchingStats, MatchOutcome, MatchResult, RejectReason
from .scoring import MS_PER_MINUTE, build_explanation, compute_score

logger = logging.getLogger(__name__)


def match_rider_to_drivers(
    rider: RiderRequest,
    candidates: Sequence[DriverTrip],
    config: Optional[MatchConfig] = None,
) -> MatchOutcome:
    """
    Score every candidate trip for one rider.

    Output is sorted ascending by score (ties keep candidate order) and
    truncated to config.max_results.
    """
    config = config or default_config()
    started = time.perf_counter()
    stats = MatchingStats(candidates_total=len(candidates))

    results: List[MatchResult] = []

    for driver in candidates:
        # --- Phase 1: Hard Filters ---
        hard = apply_hard_filters(rider, driver, config)
        if not hard.passed:
            stats.reject(hard.reason)
            continue
        stats.passed_phase1 += 1

        # --- Phase 2: Route Compatibility ---
        fit = check_route_compatibility(rider, driver, config)
        if not fit.passed:
            stats.reject(fit.reason)
            continue
        stats.passed_phase2 += 1

        # --- Phase 3: Scoring ---
        score, breakdown = compute_score(rider, driver, fit, config)

        detour_km = breakdown.detour_distance_km
        detour_minutes = estimate_detour_minutes(detour_km)
        max_detour_minutes = _rider_max_detour_minutes(rider, config)
        if not detour_minutes <= max_detour_minutes:
            stats.reject(RejectReason.DETOUR_TOO_LONG)
            continue
        if not detour_km <= config.thresholds.max_absolute_detour_km:
            stats.reject(RejectReason.DETOUR_EXCEEDS_CAP)
            continue

        # side output only, never fed back into the score
        carbon_saved = estimate_carbon_saved_kg(haversine(rider.pickup, rider.dropoff), detour_km)

        results.append(
            MatchResult(
                driver_trip_id=driver.id,
                driver_id=driver.driver_id,
                rider_request_id=rider.id,
                rider_id=rider.rider_id,
                score=score,
                explanation=build_explanation(breakdown, score),
                breakdown=breakdown,
                estimated_pickup_time=driver.departure_time
                + round(breakdown.time_diff_minutes * MS_PER_MINUTE * 0.5),
                estimated_detour_minutes=round(detour_minutes, 1),
                carbon_saved_kg=round(carbon_saved, 2),
                seats_needed=rider.seats_needed,
            )
        )

    # list.sort is stable: equal scores keep candidate order
    results.sort(key=lambda match: match.score)
    limited = results[: config.max_results]

    stats.matches_returned = len(limited)
    stats.execution_time_ms = (time.perf_counter() - started) * 1000

    logger.debug(
        "rider request %s: %d candidates, %d passed phase 1, %d passed phase 2, %d matches (%.2f ms) rejections=%s",
        rider.id,
        stats.candidates_total,
        stats.passed_phase1,
        stats.passed_phase2,
        stats.matches_returned,
        stats.execution_time_ms,
        stats.rejections,
    )

    return MatchOutcome(matches=limited, stats=stats)


def batch_match_riders(
    riders: Sequence[RiderRequest],
    drivers: Sequence[DriverTrip],
    config: Optional[MatchConfig] = None,
) -> Dict[str, MatchOutcome]:
    """
    Match several riders against the same driver pool, keyed by request id.
    Riders do not interact here; conflicts are resolved at dispatch.
    """
    config = config or default_config()
    return {rider.id: match_rider_to_drivers(rider, drivers, config) for rider in riders}


# -------------------------
# Internal helpers
# -------------------------

def _rider_max_detour_minutes(rider: RiderRequest, config: MatchConfig) -> float:
    if rider.preferences and rider.preferences.max_detour_minutes is not None:
        return rider.preferences.max_detour_minutes
    return config.max_pool_detour_minutes
