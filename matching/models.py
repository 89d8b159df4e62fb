"""
Purpose: Output models for the matching engine.
What it does:
- ScoreBreakdown (every sub-score, for auditability)
- MatchResult (one scored rider <-> driver pair)
- MatchingStats / MatchOutcome (ranked matches plus pipeline diagnostics)
- RejectReason (why a candidate was dropped)

Rule: Models only. Results are new value objects; trips and requests are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class RejectReason(str, Enum):
    # Phase 1: hard filters
    NO_SEATS = "no_seats"
    INSUFFICIENT_SEATS = "insufficient_seats"
    TRIP_NOT_AVAILABLE = "trip_not_available"
    OUTSIDE_TIME_WINDOW = "outside_time_window"
    ORGANIZATION_MISMATCH = "organization_mismatch"
    DRIVER_RATING_TOO_LOW = "driver_rating_too_low"
    OUTSIDE_BOUNDING_BOX = "outside_bounding_box"

    # Phase 2: route compatibility
    PICKUP_TOO_FAR = "pickup_too_far"
    DROPOFF_TOO_FAR = "dropoff_too_far"
    WRONG_DIRECTION = "wrong_direction"

    # Post-scoring gates
    DETOUR_TOO_LONG = "detour_too_long"
    DETOUR_EXCEEDS_CAP = "detour_exceeds_cap"


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Raw measurements next to their normalised [0, 1] scores (lower is better).
    """
    pickup_distance_km: float
    pickup_score: float
    dropoff_distance_km: float
    dropoff_score: float
    time_diff_minutes: float
    time_score: float
    seat_score: float
    shift_score: float
    detour_distance_km: float
    detour_score: float
    rating_score: float


@dataclass(frozen=True)
class MatchResult:
    """
    A single driver trip <-> rider request match. Lower score = better.
    """
    driver_trip_id: str
    driver_id: str
    rider_request_id: str
    rider_id: str
    score: float
    explanation: str
    breakdown: ScoreBreakdown
    estimated_pickup_time: int  # epoch ms
    estimated_detour_minutes: float
    carbon_saved_kg: float
    seats_needed: int = 1


@dataclass
class MatchingStats:
    """Diagnostic only. Nothing downstream branches on these numbers."""
    candidates_total: int = 0
    passed_phase1: int = 0
    passed_phase2: int = 0
    matches_returned: int = 0
    execution_time_ms: float = 0.0
    rejections: Dict[str, int] = field(default_factory=dict)

    def reject(self, reason: RejectReason) -> None:
        self.rejections[reason.value] = self.rejections.get(reason.value, 0) + 1


@dataclass(frozen=True)
class MatchOutcome:
    matches: List[MatchResult]
    stats: MatchingStats

    @property
    def best(self) -> Optional[MatchResult]:
        return self.matches[0] if self.matches else None
