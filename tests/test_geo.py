import itertools
import math

import pytest

from routing.geo import (
    BoundingBox,
    GeoPoint,
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

JHB_CBD = GeoPoint(-26.2041, 28.0473)
SANDTON = GeoPoint(-26.1076, 28.0567)
ROSEBANK = GeoPoint(-26.1451, 28.0397)
KEMPTON_PARK = GeoPoint(-26.1004, 28.2328)

# One degree of latitude on the mean-radius sphere
KM_PER_DEG = 2 * math.pi * 6371.0088 / 360


@pytest.fixture
def sample_points():
    return [JHB_CBD, SANDTON, ROSEBANK, KEMPTON_PARK, GeoPoint(0.0, 0.0), GeoPoint(51.5, -0.12)]


def test_haversine_known_distance():
    """CBD -> Sandton is roughly 10.8 km as the crow flies."""
    assert haversine(JHB_CBD, SANDTON) == pytest.approx(10.77, abs=0.05)


def test_haversine_identity_and_symmetry(sample_points):
    for a in sample_points:
        assert haversine(a, a) == 0

    for a, b in itertools.combinations(sample_points, 2):
        assert haversine(a, b) == pytest.approx(haversine(b, a))


def test_haversine_triangle_inequality(sample_points):
    for a, b, c in itertools.permutations(sample_points, 3):
        assert haversine(a, c) <= haversine(a, b) + haversine(b, c) + 1e-9


def test_haversine_antipodal_points_do_not_fail():
    d = haversine(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
    assert d == pytest.approx(math.pi * 6371.0088, rel=1e-9)


def test_point_to_segment_perpendicular_distance():
    """A point 0.01 deg east of a north-south segment's middle."""
    seg_a = GeoPoint(-26.2, 28.0)
    seg_b = GeoPoint(-26.1, 28.0)
    point = GeoPoint(-26.15, 28.01)

    expected = 0.01 * KM_PER_DEG * math.cos(math.radians(26.15))
    assert point_to_segment_distance(point, seg_a, seg_b) == pytest.approx(expected, abs=0.01)


def test_point_to_segment_clamps_to_nearer_endpoint():
    seg_a = GeoPoint(-26.2, 28.0)
    seg_b = GeoPoint(-26.1, 28.0)

    beyond_b = GeoPoint(-26.05, 28.0)
    before_a = GeoPoint(-26.25, 28.0)

    assert point_to_segment_distance(beyond_b, seg_a, seg_b) == pytest.approx(haversine(beyond_b, seg_b))
    assert point_to_segment_distance(before_a, seg_a, seg_b) == pytest.approx(haversine(before_a, seg_a))


def test_point_to_segment_degenerate_inputs_are_not_nan():
    a = GeoPoint(-26.2, 28.0)
    b = GeoPoint(-26.1, 28.0)
    p = GeoPoint(-26.15, 28.02)

    # 1. Point on an endpoint
    assert point_to_segment_distance(a, a, b) == 0
    assert point_to_segment_distance(b, a, b) == 0

    # 2. Zero-length segment
    assert point_to_segment_distance(p, a, a) == pytest.approx(haversine(p, a))


def test_min_distance_to_route_empty_and_single_point():
    p = GeoPoint(-26.15, 28.02)

    empty = min_distance_to_route(p, [])
    assert empty.distance == math.inf
    assert empty.segment_index == -1

    single = min_distance_to_route(p, [p])
    assert single.distance == 0
    assert single.segment_index == 0


def test_min_distance_to_route_picks_nearest_segment():
    route = [GeoPoint(-26.30, 28.0), GeoPoint(-26.20, 28.0), GeoPoint(-26.10, 28.0), GeoPoint(-26.00, 28.0)]
    point = GeoPoint(-26.15, 28.005)

    result = min_distance_to_route(point, route)
    assert result.segment_index == 1
    assert result.distance < 1.0


def test_min_distance_to_route_nan_point_is_not_finite():
    route = [GeoPoint(-26.2, 28.0), GeoPoint(-26.1, 28.0)]
    result = min_distance_to_route(GeoPoint(float("nan"), 28.0), route)
    assert not math.isfinite(result.distance)


def test_project_onto_route_reports_along_route_offset():
    route = [GeoPoint(-26.30, 28.0), GeoPoint(-26.20, 28.0), GeoPoint(-26.10, 28.0)]
    point = GeoPoint(-26.15, 28.0)

    projection = project_onto_route(point, route)
    assert projection.segment_index == 1
    assert projection.distance == pytest.approx(0.0, abs=1e-3)
    assert projection.along_route_km == pytest.approx(0.15 * KM_PER_DEG, abs=0.01)


def test_vertex_distance_is_never_below_segment_distance():
    route = [GeoPoint(-26.30, 28.0), GeoPoint(-26.10, 28.0)]
    point = GeoPoint(-26.20, 28.01)

    assert min_distance_to_route_simple(point, route) >= min_distance_to_route(point, route).distance
    assert min_distance_to_route_simple(point, []) == math.inf


def test_polyline_length_sums_legs():
    route = [JHB_CBD, ROSEBANK, SANDTON]
    assert polyline_length(route) == pytest.approx(haversine(JHB_CBD, ROSEBANK) + haversine(ROSEBANK, SANDTON))
    assert polyline_length([JHB_CBD]) == 0
    assert polyline_length([]) == 0


def test_bounding_box_build_pad_and_contains():
    box = build_bounding_box([JHB_CBD, SANDTON, ROSEBANK])
    assert box == BoundingBox(min_lat=-26.2041, max_lat=-26.1076, min_lng=28.0397, max_lng=28.0567)

    assert is_inside_bounding_box(ROSEBANK, box)
    assert not is_inside_bounding_box(KEMPTON_PARK, box)

    padded = pad_bounding_box(box, 0.03)
    assert padded.min_lat == pytest.approx(box.min_lat - 0.03)
    assert padded.max_lng == pytest.approx(box.max_lng + 0.03)
    assert is_inside_bounding_box(GeoPoint(-26.10, 28.07), padded)


def test_bounding_boxes_overlap():
    a = BoundingBox(-26.3, -26.1, 28.0, 28.1)
    touching = BoundingBox(-26.1, -26.0, 28.1, 28.2)
    apart = BoundingBox(-25.9, -25.8, 28.0, 28.1)

    assert bounding_boxes_overlap(a, a)
    assert bounding_boxes_overlap(a, touching)
    assert not bounding_boxes_overlap(a, apart)
    assert not bounding_boxes_overlap(apart, a)


def test_is_pickup_before_dropoff_follows_route_direction():
    route = [GeoPoint(-26.30, 28.0), GeoPoint(-26.20, 28.0), GeoPoint(-26.10, 28.0)]
    early = GeoPoint(-26.28, 28.001)
    late = GeoPoint(-26.12, 28.001)

    assert is_pickup_before_dropoff(early, late, route)
    assert not is_pickup_before_dropoff(late, early, route)


def test_detour_is_small_for_rider_on_route():
    route = [GeoPoint(-26.30, 28.0), GeoPoint(-26.10, 28.0)]
    detour = estimate_detour_km(GeoPoint(-26.25, 28.0), GeoPoint(-26.15, 28.0), route)
    assert detour == pytest.approx(0.0, abs=0.01)


def test_detour_grows_with_distance_from_route():
    route = [GeoPoint(-26.30, 28.0), GeoPoint(-26.10, 28.0)]
    near = estimate_detour_km(GeoPoint(-26.25, 28.005), GeoPoint(-26.15, 28.005), route)
    far = estimate_detour_km(GeoPoint(-26.25, 28.02), GeoPoint(-26.15, 28.02), route)
    assert 0 < near < far


def test_detour_for_two_point_scenario_route():
    """Rider running parallel to a straight route about 0.7 km off it, both ends."""
    route = [GeoPoint(-26.21, 28.04), GeoPoint(-26.10, 28.07)]
    detour = estimate_detour_km(GeoPoint(-26.20, 28.05), GeoPoint(-26.11, 28.06), route)
    assert detour == pytest.approx(1.5, abs=0.1)


def test_detour_without_route_falls_back_to_direct_distance():
    pickup, dropoff = ROSEBANK, SANDTON
    assert estimate_detour_km(pickup, dropoff, []) == pytest.approx(haversine(pickup, dropoff))
    assert estimate_detour_km(pickup, dropoff, [JHB_CBD]) == pytest.approx(haversine(pickup, dropoff))


def test_detour_with_nan_coordinates_is_infinite():
    route = [GeoPoint(-26.30, 28.0), GeoPoint(-26.10, 28.0)]
    assert estimate_detour_km(GeoPoint(float("nan"), 28.0), GeoPoint(-26.15, 28.0), route) == math.inf


def test_detour_minutes_at_urban_speed():
    assert estimate_detour_minutes(15) == pytest.approx(30)
    assert estimate_detour_minutes(10, avg_speed_kmh=60) == pytest.approx(10)


def test_carbon_saved_formula_and_floor():
    assert estimate_carbon_saved_kg(10, 2) == pytest.approx(10 * 0.21 - 2 * 0.21 * 0.5)
    assert estimate_carbon_saved_kg(1, 10) == 0
