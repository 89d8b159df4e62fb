"""
Purpose: Orchestrator / decision pipeline (the "glue").
What it does:
Takes every rider's ranked matches, builds one pool per driver trip, and
makes sure no rider ends up in two pools: each rider keeps the occurrence
with the lowest score.

Dispatcher.run_cycle() is the batch entry point for cron-style callers:
per rider resolve config (organization override or default), pre-filter
candidates, match; then assign across all drivers at once, pooling each
driver trip under its own organization's config. A rider with several
pending requests is matched one request per cycle (earliest window first).

Rule: No persistence. Seat reservation and status changes belong to the
caller, which decides what to do with the returned assignments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from drivers.models import DriverTrip
from matching.config import MatchConfig, default_config
from matching.engine import match_rider_to_drivers
from matching.models import MatchOutcome, MatchResult
from pooling.models import DriverCandidates, PoolAssignment
from pooling.optimizer import optimize_multi_driver_pools
from riders.models import RiderLocation, RiderRequest, RiderRequestStatus

from .candidate_filter import PolylineStore, TripStore, find_candidate_trips

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    pool: PoolAssignment
    match: MatchResult


@dataclass
class DispatchResult:
    outcomes: Dict[str, MatchOutcome] = field(default_factory=dict)  # by rider request id
    assignments: Dict[str, Assignment] = field(default_factory=dict)  # by rider id
    deferred_request_ids: List[str] = field(default_factory=list)  # later request of a rider already in this cycle

    @property
    def unassigned_request_ids(self) -> List[str]:
        assigned = {assignment.match.rider_request_id for assignment in self.assignments.values()}
        return [request_id for request_id in self.outcomes if request_id not in assigned]


class ConfigStore(Protocol):
    def get_match_config(self, organization_id: Optional[str]) -> MatchConfig:
        ...


def assign_riders_to_drivers(
    rider_matches: Mapping[str, Sequence[MatchResult]],
    drivers_by_id: Mapping[str, DriverTrip],
    rider_locations: Mapping[str, RiderLocation],
    config: Optional[MatchConfig] = None,
    trip_configs: Optional[Mapping[str, MatchConfig]] = None,
) -> Dict[str, Assignment]:
    """
    rider_matches: rider id -> that rider's matches (any order)
    drivers_by_id: driver trip id -> trip
    trip_configs: driver trip id -> pooling config for that trip (optional)
    Returns rider id -> the single pool (and match) the rider was kept in.
    """
    config = config or default_config()

    # 1. Group by driver trip
    groups: Dict[str, DriverCandidates] = {}
    for matches in rider_matches.values():
        for match in matches:
            driver = drivers_by_id.get(match.driver_trip_id)
            if driver is None:
                continue
            if match.driver_trip_id not in groups:
                groups[match.driver_trip_id] = DriverCandidates(driver=driver, matches=[])
            groups[match.driver_trip_id].matches.append(match)

    # 2. One entry per rider per trip (best score), best first
    for trip_id, group in groups.items():
        best_per_rider: Dict[str, MatchResult] = {}
        for match in group.matches:
            existing = best_per_rider.get(match.rider_id)
            if existing is None or match.score < existing.score:
                best_per_rider[match.rider_id] = match
        groups[trip_id] = DriverCandidates(
            driver=group.driver,
            matches=sorted(best_per_rider.values(), key=lambda match: match.score),
        )

    # 3. Pool per driver, each under its own trip's config
    pools = optimize_multi_driver_pools(groups, rider_locations, config, trip_configs)

    # 4. A rider can only ride once: keep the lowest score across pools
    assignments: Dict[str, Assignment] = {}
    for pool in pools:
        for match in pool.riders:
            existing = assignments.get(match.rider_id)
            if existing is None or match.score < existing.match.score:
                assignments[match.rider_id] = Assignment(pool=pool, match=match)

    logger.debug("Dispatch: %d driver groups, %d pools, %d riders assigned", len(groups), len(pools), len(assignments))
    return assignments


def select_next_requests(riders: Sequence[RiderRequest]) -> Tuple[List[RiderRequest], List[RiderRequest]]:
    """
    Pending requests that can run in one cycle, and the ones held back.

    Pools and locations are keyed by rider, so a rider with several pending
    requests (say a morning and an evening commute) has only the one with
    the earliest departure window matched this cycle; ties keep input order.
    The rest stay pending for a later cycle.
    """
    earliest: Dict[str, RiderRequest] = {}
    for rider in riders:
        if rider.status is not RiderRequestStatus.PENDING:
            continue
        current = earliest.get(rider.rider_id)
        if current is None or rider.earliest_departure < current.earliest_departure:
            earliest[rider.rider_id] = rider

    selected: List[RiderRequest] = []
    deferred: List[RiderRequest] = []
    for rider in riders:
        if rider.status is not RiderRequestStatus.PENDING:
            logger.debug("Skipping rider request %s in status %s", rider.id, rider.status.value)
            continue
        if earliest[rider.rider_id] is rider:
            selected.append(rider)
        else:
            deferred.append(rider)
    return selected, deferred


class Dispatcher:
    """
    Coordinates one matching cycle over a batch of pending rider requests.
    """
    def __init__(
        self,
        trip_store: TripStore,
        polyline_cache: Optional[PolylineStore] = None,
        config_store: Optional[ConfigStore] = None,
        default: Optional[MatchConfig] = None,
    ):
        self.trip_store = trip_store
        self.polyline_cache = polyline_cache
        self.config_store = config_store
        self.default = default or default_config()

    def config_for_organization(self, organization_id: Optional[str]) -> MatchConfig:
        if organization_id and self.config_store is not None:
            return self.config_store.get_match_config(organization_id)
        return self.default

    def resolve_config(self, rider: RiderRequest) -> MatchConfig:
        return self.config_for_organization(rider.organization_id)

    def run_cycle(self, riders: Sequence[RiderRequest]) -> DispatchResult:
        result = DispatchResult()
        rider_matches: Dict[str, List[MatchResult]] = {}
        rider_locations: Dict[str, RiderLocation] = {}
        drivers_by_id: Dict[str, DriverTrip] = {}
        configs: Dict[Optional[str], MatchConfig] = {}

        def config_for(organization_id: Optional[str]) -> MatchConfig:
            if organization_id not in configs:
                configs[organization_id] = self.config_for_organization(organization_id)
            return configs[organization_id]

        selected, deferred = select_next_requests(riders)
        for rider in deferred:
            logger.info("Deferring rider request %s: rider %s has an earlier pending request", rider.id, rider.rider_id)
            result.deferred_request_ids.append(rider.id)

        for rider in selected:
            config = config_for(rider.organization_id)

            candidates = find_candidate_trips(rider, self.trip_store, config, self.polyline_cache)
            outcome = match_rider_to_drivers(rider, candidates, config)
            result.outcomes[rider.id] = outcome

            for trip in candidates:
                drivers_by_id.setdefault(trip.id, trip)
            rider_matches.setdefault(rider.rider_id, []).extend(outcome.matches)
            rider_locations[rider.rider_id] = rider.location

        # Pool capacity and detour budget belong to the driver's organization
        trip_configs = {trip_id: config_for(trip.organization_id) for trip_id, trip in drivers_by_id.items()}
        result.assignments = assign_riders_to_drivers(
            rider_matches, drivers_by_id, rider_locations, self.default, trip_configs
        )

        logger.info(
            "Dispatch cycle: %d requests, %d assigned, %d unassigned, %d deferred",
            len(result.outcomes),
            len(result.assignments),
            len(result.unassigned_request_ids),
            len(result.deferred_request_ids),
        )
        return result
