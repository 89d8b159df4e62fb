"""
Purpose: Polyline codec and simplification.

Encoded polylines are the interchange format with mapping providers
(OSRM, Google, Mapbox): signed deltas, zig-zag, 5-bit groups, offset 63,
1e5 precision. Simplification (Ramer-Douglas-Peucker) is used to shrink
cached/stored routes.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .geo import GeoPoint, point_to_segment_distance

PRECISION = 1e5


def encode_polyline(points: Sequence[GeoPoint]) -> str:
    chunks: List[str] = []
    prev_lat = 0
    prev_lng = 0

    for point in points:
        lat = int(round(point.lat * PRECISION))
        lng = int(round(point.lng * PRECISION))
        chunks.append(_encode_value(lat - prev_lat))
        chunks.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng

    return "".join(chunks)


def decode_polyline(encoded: str) -> List[GeoPoint]:
    """
    Decode an encoded polyline. A truncated string stops at the last
    complete coordinate pair instead of raising.
    """
    points: List[GeoPoint] = []
    index = 0
    lat = 0
    lng = 0
    length = len(encoded)

    while index < length:
        d_lat, index = _decode_value(encoded, index)
        if index > length:
            break
        d_lng, index = _decode_value(encoded, index)
        if index > length:
            break
        lat += d_lat
        lng += d_lng
        points.append(GeoPoint(lat / PRECISION, lng / PRECISION))

    return points


def simplify_polyline(points: Sequence[GeoPoint], tolerance_km: float) -> List[GeoPoint]:
    """
    Ramer-Douglas-Peucker with point_to_segment_distance as the deviation
    metric. Iterative (explicit stack) so long routes cannot hit the
    recursion limit. Always keeps both endpoints.
    """
    if len(points) <= 2:
        return list(points)

    keep = [False] * len(points)
    keep[0] = keep[-1] = True

    stack: List[Tuple[int, int]] = [(0, len(points) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        max_distance = 0.0
        max_index = first
        for index in range(first + 1, last):
            distance = point_to_segment_distance(points[index], points[first], points[last])
            if distance > max_distance:
                max_distance = distance
                max_index = index

        if max_distance > tolerance_km:
            keep[max_index] = True
            stack.append((first, max_index))
            stack.append((max_index, last))

    return [point for point, kept in zip(points, keep) if kept]


# -------------------------
# Internal helpers
# -------------------------

def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    out = []
    while value >= 0x20:
        out.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    out.append(chr(value + 63))
    return "".join(out)


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    """Returns (value, next_index); next_index > len(encoded) when truncated."""
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            return 0, len(encoded) + 1
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index
