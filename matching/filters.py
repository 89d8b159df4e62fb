"""
Purpose: Phase 1 of matching, hard eligibility filtering (rule gates).
What it does:
Cheap boolean rejects evaluated in a fixed order; the first failure short-circuits:

1. seats (none left / not enough for the rider)
2. trip status (offered or active only)
3. departure inside the rider's window (inclusive)
4. organization (only when both sides carry one)
5. minimum driver rating (only when both sides carry one)
6. padded stored bounding box must contain pickup or dropoff

Output: FilterResult (passed + reason). No geometry beyond the bbox check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from drivers.models import DriverTrip
from riders.models import RiderRequest
from routing.geo import is_inside_bounding_box, pad_bounding_box

from .config import MatchConfig
from .models import RejectReason


@dataclass(frozen=True)
class FilterResult:
    passed: bool
    reason: Optional[RejectReason] = None


PASSED = FilterResult(passed=True)


def apply_hard_filters(rider: RiderRequest, driver: DriverTrip, config: MatchConfig) -> FilterResult:
    """
    Returns the first failing rule, or PASSED.
    """
    # 1. Seats
    if driver.available_seats <= 0:
        return FilterResult(False, RejectReason.NO_SEATS)
    if driver.available_seats < rider.seats_needed:
        return FilterResult(False, RejectReason.INSUFFICIENT_SEATS)

    # 2. Status
    if not driver.is_bookable:
        return FilterResult(False, RejectReason.TRIP_NOT_AVAILABLE)

    # 3. Time window (inverted windows reject everything)
    if not rider.earliest_departure <= driver.departure_time <= rider.latest_departure:
        return FilterResult(False, RejectReason.OUTSIDE_TIME_WINDOW)

    # 4. Organization alignment
    if rider.organization_id and driver.organization_id and rider.organization_id != driver.organization_id:
        return FilterResult(False, RejectReason.ORGANIZATION_MISMATCH)

    # 5. Driver rating preference
    min_rating = rider.preferences.min_driver_rating if rider.preferences else None
    if min_rating is not None and driver.driver_rating is not None and driver.driver_rating < min_rating:
        return FilterResult(False, RejectReason.DRIVER_RATING_TOO_LOW)

    # 6. Bounding box (stale or skipped pre-filter)
    if driver.bounding_box is not None:
        padded = pad_bounding_box(driver.bounding_box, config.thresholds.bounding_box_padding_deg)
        if not is_inside_bounding_box(rider.pickup, padded) and not is_inside_bounding_box(rider.dropoff, padded):
            return FilterResult(False, RejectReason.OUTSIDE_BOUNDING_BOX)

    return PASSED
