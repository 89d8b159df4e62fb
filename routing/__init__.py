#Marks routing as a package.
#Re-exports the geometry primitives, the polyline codec and the OSRM client
#so other modules import from routing without knowing internal file names.
#No business logic.

from .geo import (
    BoundingBox,
    GeoPoint,
    RouteDistance,
    RouteProjection,
    bounding_boxes_overlap,
    build_bounding_box,
    estimate_carbon_saved_kg,
    estimate_detour_km,
    estimate_detour_minutes,
    haversine,
    is_inside_bounding_box,
    is_pickup_before_dropoff,
    min_distance_to_route,
    min_distance_to_route_simple,
    pad_bounding_box,
    point_to_segment_distance,
    polyline_length,
    project_onto_route,
)
from .polyline import decode_polyline, encode_polyline, simplify_polyline
from .osrm_client import OSRMClient, OSRMError, RouteGeometry

__all__ = [
    "BoundingBox",
    "GeoPoint",
    "RouteDistance",
    "RouteProjection",
    "bounding_boxes_overlap",
    "build_bounding_box",
    "estimate_carbon_saved_kg",
    "estimate_detour_km",
    "estimate_detour_minutes",
    "haversine",
    "is_inside_bounding_box",
    "is_pickup_before_dropoff",
    "min_distance_to_route",
    "min_distance_to_route_simple",
    "pad_bounding_box",
    "point_to_segment_distance",
    "polyline_length",
    "project_onto_route",
    "decode_polyline",
    "encode_polyline",
    "simplify_polyline",
    "OSRMClient",
    "OSRMError",
    "RouteGeometry",
]
