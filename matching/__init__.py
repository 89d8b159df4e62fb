"""
Matching domain package.

Public API:
- Configuration: MatchConfig, MatchWeights, MatchThresholds, default_config, merge_config
- Results: MatchResult, ScoreBreakdown, MatchingStats, MatchOutcome, RejectReason
- Entry points: match_rider_to_drivers, batch_match_riders
"""
from .config import MatchConfig, MatchThresholds, MatchWeights, default_config, merge_config
from .engine import batch_match_riders, match_rider_to_drivers
from .models import MatchingStats, MatchOutcome, MatchResult, RejectReason, ScoreBreakdown

__all__ = [
    "MatchConfig",
    "MatchThresholds",
    "MatchWeights",
    "default_config",
    "merge_config",
    "batch_match_riders",
    "match_rider_to_drivers",
    "MatchingStats",
    "MatchOutcome",
    "MatchResult",
    "RejectReason",
    "ScoreBreakdown",
]
