"""
Purpose: Central configuration for matching and pooling behavior (single source of truth).
What it does:

Stores all tunable weights/thresholds/caps:

WEIGHTS = pickup 0.30, dropoff 0.30, time 0.15, seats 0.05, shift 0.02, detour 0.13, rating 0.05

MAX_PICKUP_DISTANCE_KM = 2.0, MAX_DROPOFF_DISTANCE_KM = 2.0

MAX_TIME_DIFF_MINUTES = 20

BOUNDING_BOX_PADDING_DEG = 0.03

MAX_ABSOLUTE_DETOUR_KM = 10, MAX_POOL_DETOUR_KM = 10

Organization overrides arrive as partial nested mappings (stored as JSON);
merge_config() lays them over complete defaults field by field so a partial
override can never leave a weight or threshold undefined.

Rule: No matching logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class MatchWeights:
    """
    Weight per scoring dimension. Every sub-score is in [0, 1] and lower is
    better, so the composite is a weighted sum of penalties.
    Defaults sum to 1.0 (route efficiency outranks seats and shift).
    """
    pickup_distance: float = 0.30
    dropoff_distance: float = 0.30
    time_match: float = 0.15
    seat_availability: float = 0.05
    shift_alignment: float = 0.02
    detour_cost: float = 0.13
    driver_rating: float = 0.05

    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def validate(self) -> None:
        for f in fields(self):
            # written as not (>=) so NaN fails too
            if not getattr(self, f.name) >= 0:
                raise ValueError(f"weight {f.name} must be >= 0")


@dataclass(frozen=True)
class MatchThresholds:
    """
    Hard limits. Distances in km, time in minutes, padding in degrees.
    """
    # --- Walk limits (rider -> nearest point on the driver's route) ---
    max_pickup_distance_km: float = 2.0
    max_dropoff_distance_km: float = 2.0

    # --- Departure alignment ---
    max_time_diff_minutes: float = 20.0

    # Detour normaliser for scoring: detour / (route_km * fraction)
    max_detour_fraction: float = 0.30

    # ~3.3 km at the equator, less east-west at higher latitudes
    bounding_box_padding_deg: float = 0.03

    # No single rider may add more than this to a driver's route
    max_absolute_detour_km: float = 10.0

    def validate(self) -> None:
        if self.max_pickup_distance_km <= 0:
            raise ValueError("max_pickup_distance_km must be > 0")

        if self.max_dropoff_distance_km <= 0:
            raise ValueError("max_dropoff_distance_km must be > 0")

        if self.max_time_diff_minutes <= 0:
            raise ValueError("max_time_diff_minutes must be > 0")

        if self.max_detour_fraction <= 0:
            raise ValueError("max_detour_fraction must be > 0")

        if self.bounding_box_padding_deg < 0:
            raise ValueError("bounding_box_padding_deg must be >= 0")

        if self.max_absolute_detour_km < 0:
            raise ValueError("max_absolute_detour_km must be >= 0")


@dataclass(frozen=True)
class MatchConfig:
    """
    Full matching configuration passed explicitly into the engine and the
    pool optimizer. Nothing in the core reads config from anywhere else.
    """
    weights: MatchWeights = field(default_factory=MatchWeights)
    thresholds: MatchThresholds = field(default_factory=MatchThresholds)

    # --- Result shaping ---
    max_results: int = 20

    # --- Pooling ---
    enable_multi_rider: bool = True
    max_riders_per_pool: int = 4

    # Per-rider detour gate in minutes (rider preference wins when set)
    max_pool_detour_minutes: float = 20.0

    # Cumulative marginal detour budget for a whole pool
    max_pool_detour_km: float = 10.0

    def validate(self) -> None:
        """
        Basic sanity checks. merge_config() calls this on every merged result.
        """
        self.weights.validate()
        self.thresholds.validate()

        if self.max_results < 1:
            raise ValueError("max_results must be >= 1")

        if self.max_riders_per_pool < 1:
            raise ValueError("max_riders_per_pool must be >= 1")

        if self.max_pool_detour_minutes < 0:
            raise ValueError("max_pool_detour_minutes must be >= 0")

        if self.max_pool_detour_km < 0:
            raise ValueError("max_pool_detour_km must be >= 0")


def default_config() -> MatchConfig:
    """
    Convenience factory for the default configuration.
    """
    c = MatchConfig()
    c.validate()
    return c


def merge_config(base: MatchConfig, overrides: Optional[Mapping[str, Any]]) -> MatchConfig:
    """
    Lay a partial override mapping over a complete config.

    Nested sections ("weights", "thresholds") merge field by field, so
    {"weights": {"pickup_distance": 0.5}} keeps the other six weights.
    Unknown keys are ignored (older stored overrides may carry retired
    fields); values of the wrong type raise ValueError.
    """
    if not overrides:
        return base
    if not isinstance(overrides, Mapping):
        raise ValueError("config overrides must be a mapping")

    weights = _merge_section(base.weights, overrides.get("weights"))
    thresholds = _merge_section(base.thresholds, overrides.get("thresholds"))

    top_level = {
        key: value
        for key, value in overrides.items()
        if key not in ("weights", "thresholds")
    }
    merged = _merge_section(base, top_level)
    merged = replace(merged, weights=weights, thresholds=thresholds)
    merged.validate()
    return merged


# -------------------------
# Internal helpers
# -------------------------

def _merge_section(section, values: Optional[Mapping[str, Any]]):
    if not values:
        return section
    if not isinstance(values, Mapping):
        raise ValueError(f"config section for {type(section).__name__} must be a mapping")

    changes = {}
    for f in fields(section):
        if f.name not in values or f.name in ("weights", "thresholds"):
            continue
        changes[f.name] = _coerce(f.name, getattr(section, f.name), values[f.name])
    return replace(section, **changes)


def _coerce(name: str, current: Any, value: Any) -> Any:
    # bool is an int subclass, check it first
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be a boolean")
        return value

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    # NaN passes every < / <= check in validate()
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")

    if isinstance(current, int):
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{name} must be a whole number")
        return int(value)
    return float(value)
