"""
Purpose: Geometry primitives for route-aware matching.
What it does:

- great-circle distance (haversine)
- point -> segment and point -> polyline distance (segment aware)
- bounding box build / pad / containment / overlap
- detour and carbon estimates used by scoring and pooling

Rule: pure functions only. No I/O, no state, no config lookups.
Degenerate input (empty routes, NaN coordinates) yields a defined value
(inf, 0, empty) instead of an exception.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence

# Mean Earth radius (WGS-84 volumetric)
EARTH_RADIUS_KM = 6371.0088

# Average CO2 per km for a single-occupancy car (kg)
CO2_PER_KM_SINGLE = 0.21

# Urban average used to turn detour km into minutes
URBAN_SPEED_KMH = 30.0

_EPSILON_KM = 1e-9


@dataclass(frozen=True)
class GeoPoint:
    """A WGS-84 coordinate pair in degrees."""
    lat: float
    lng: float


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned envelope in degree space.
    Degrees are not metres: a longitude degree shrinks with latitude,
    so padding is only a rough radius.
    """
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


class RouteDistance(NamedTuple):
    distance: float  # km
    segment_index: int


class RouteProjection(NamedTuple):
    distance: float  # km from the point to the route
    segment_index: int
    along_route_km: float  # km from route start to the projected foot


# -------------------------
# Distances
# -------------------------

def haversine(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in km."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # rounding can push h a hair above 1 for antipodal points
    if h > 1.0:
        h = 1.0
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def _segment_foot(point: GeoPoint, seg_a: GeoPoint, seg_b: GeoPoint):
    """
    Returns (distance_km, along_km) where along_km is the offset of the
    perpendicular foot from seg_a, clamped to the segment.
    """
    d_ap = haversine(seg_a, point)
    d_bp = haversine(seg_b, point)
    d_ab = haversine(seg_a, seg_b)

    if d_ap < _EPSILON_KM:
        return 0.0, 0.0
    if d_bp < _EPSILON_KM:
        return 0.0, d_ab
    if d_ab < _EPSILON_KM:
        return d_ap, 0.0

    # angle at A from the law of cosines
    cos_a = (d_ap * d_ap + d_ab * d_ab - d_bp * d_bp) / (2 * d_ap * d_ab)
    if cos_a < 0:
        return d_ap, 0.0

    along = d_ap * cos_a
    if along > d_ab:
        return d_bp, d_ab

    sin_a = math.sqrt(max(0.0, 1 - cos_a * cos_a))
    return d_ap * sin_a, along


def point_to_segment_distance(point: GeoPoint, seg_a: GeoPoint, seg_b: GeoPoint) -> float:
    """
    Cross-track distance (km) from point to the segment seg_a -> seg_b.
    When the perpendicular foot falls outside the segment the nearer
    endpoint distance is returned instead (no extrapolation).
    """
    distance, _ = _segment_foot(point, seg_a, seg_b)
    return distance


def min_distance_to_route(point: GeoPoint, route: Sequence[GeoPoint]) -> RouteDistance:
    """
    Segment-aware minimum distance from point to a polyline, plus the
    index of the nearest segment (route[i] -> route[i + 1]).

    Empty route -> (inf, -1). Single point -> (haversine, 0).
    """
    if not route:
        return RouteDistance(math.inf, -1)
    if len(route) == 1:
        return RouteDistance(haversine(point, route[0]), 0)

    best = math.inf
    best_index = 0
    for index in range(len(route) - 1):
        distance = point_to_segment_distance(point, route[index], route[index + 1])
        if distance < best:
            best = distance
            best_index = index
    return RouteDistance(best, best_index)


def project_onto_route(point: GeoPoint, route: Sequence[GeoPoint]) -> RouteProjection:
    """
    Like min_distance_to_route but also reports how far along the route
    (km from route[0]) the nearest foot lies.
    """
    if not route:
        return RouteProjection(math.inf, -1, 0.0)
    if len(route) == 1:
        return RouteProjection(haversine(point, route[0]), 0, 0.0)

    best = math.inf
    best_index = 0
    best_along = 0.0
    travelled = 0.0
    for index in range(len(route) - 1):
        distance, along = _segment_foot(point, route[index], route[index + 1])
        if distance < best:
            best = distance
            best_index = index
            best_along = travelled + along
        travelled += haversine(route[index], route[index + 1])
    return RouteProjection(best, best_index, best_along)


def min_distance_to_route_simple(point: GeoPoint, route: Sequence[GeoPoint]) -> float:
    """Vertex-only distance. Cheaper and coarser, good for rough screening."""
    return min((haversine(point, vertex) for vertex in route), default=math.inf)


def polyline_length(route: Sequence[GeoPoint]) -> float:
    """Total polyline length in km."""
    return sum(haversine(a, b) for a, b in zip(route[:-1], route[1:]))


# -------------------------
# Bounding boxes
# -------------------------

def build_bounding_box(points: Sequence[GeoPoint]) -> BoundingBox:
    if not points:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    return BoundingBox(min(lats), max(lats), min(lngs), max(lngs))


def pad_bounding_box(box: BoundingBox, padding_deg: float) -> BoundingBox:
    return BoundingBox(
        min_lat=box.min_lat - padding_deg,
        max_lat=box.max_lat + padding_deg,
        min_lng=box.min_lng - padding_deg,
        max_lng=box.max_lng + padding_deg,
    )


def is_inside_bounding_box(point: GeoPoint, box: BoundingBox) -> bool:
    return box.min_lat <= point.lat <= box.max_lat and box.min_lng <= point.lng <= box.max_lng


def bounding_boxes_overlap(a: BoundingBox, b: BoundingBox) -> bool:
    return not (
        a.max_lat < b.min_lat
        or a.min_lat > b.max_lat
        or a.max_lng < b.min_lng
        or a.min_lng > b.max_lng
    )


# -------------------------
# Route ordering / detour
# -------------------------

def is_pickup_before_dropoff(pickup: GeoPoint, dropoff: GeoPoint, route: Sequence[GeoPoint]) -> bool:
    """Pickup must project onto the same or an earlier segment than dropoff."""
    return min_distance_to_route(pickup, route).segment_index <= min_distance_to_route(dropoff, route).segment_index


def estimate_detour_km(pickup: GeoPoint, dropoff: GeoPoint, route: Sequence[GeoPoint]) -> float:
    """
    Extra km a driver incurs serving one rider:

        detour = off_route(pickup) + dist(pickup, dropoff) + off_route(dropoff)
                 - along_route(foot(pickup), foot(dropoff))

    Approximation only: real detour needs re-routing through the road
    network. Routes with fewer than two points fall back to the rider's
    direct distance.
    """
    if len(route) < 2:
        return haversine(pickup, dropoff)

    pickup_projection = project_onto_route(pickup, route)
    dropoff_projection = project_onto_route(dropoff, route)

    skipped_route_km = abs(dropoff_projection.along_route_km - pickup_projection.along_route_km)
    detour_path_km = pickup_projection.distance + haversine(pickup, dropoff) + dropoff_projection.distance

    detour = detour_path_km - skipped_route_km
    if math.isnan(detour):
        return math.inf
    return max(0.0, detour)


def estimate_detour_minutes(detour_km: float, avg_speed_kmh: float = URBAN_SPEED_KMH) -> float:
    return detour_km / avg_speed_kmh * 60


def estimate_carbon_saved_kg(rider_distance_km: float, detour_km: float) -> float:
    """
    CO2 avoided by the rider not driving alone, minus half of the
    driver's detour emissions (shared cost).
    """
    saved = rider_distance_km * CO2_PER_KM_SINGLE
    cost = detour_km * CO2_PER_KM_SINGLE * 0.5
    return max(0.0, saved - cost)
