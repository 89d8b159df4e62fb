"""
Purpose: Fast lookup of decoded route polylines, keyed by trip id.
What it does:
get(trip_id) -> points or None on a miss
put(trip_id, points, ttl) -> stores [lat, lng] pairs

Backed by the Django cache framework (CACHES["default"] unless another alias
is given), so locmem, Redis or memcached are a settings change away.

Rule: a cache outage is a miss, never an error. Failures are logged and
the caller falls back to decoding the stored polyline.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from django.conf import settings
from django.core.cache import caches

from routing.geo import GeoPoint

logger = logging.getLogger(__name__)

DEFAULT_POLYLINE_TTL_SECONDS = 24 * 60 * 60


class PolylineCache:
    def __init__(self, alias: str = "default", ttl_seconds: Optional[int] = None):
        self.alias = alias
        self.ttl_seconds = ttl_seconds or getattr(settings, "MATCHING_POLYLINE_TTL_SECONDS", DEFAULT_POLYLINE_TTL_SECONDS)

    @staticmethod
    def key(trip_id: str) -> str:
        return f"polyline:{trip_id}"

    def get(self, trip_id: str) -> Optional[List[GeoPoint]]:
        try:
            cached = caches[self.alias].get(self.key(trip_id))
        except Exception:
            logger.warning("Polyline cache read failed for trip %s", trip_id, exc_info=True)
            return None

        if not cached:
            return None
        return [GeoPoint(lat, lng) for lat, lng in cached]

    def put(self, trip_id: str, points: Sequence[GeoPoint], ttl: Optional[int] = None) -> None:
        try:
            caches[self.alias].set(
                self.key(trip_id),
                [[point.lat, point.lng] for point in points],
                timeout=ttl or self.ttl_seconds,
            )
        except Exception:
            logger.warning("Polyline cache write failed for trip %s", trip_id, exc_info=True)

    def delete(self, trip_id: str) -> None:
        try:
            caches[self.alias].delete(self.key(trip_id))
        except Exception:
            logger.warning("Polyline cache delete failed for trip %s", trip_id, exc_info=True)
