"""Polygon validity checks and approximate shape matching.

OpenAir sources routinely re-digitize the same real-world boundary with
slightly different vertex sampling, so shape equality here is deliberately
approximate: two polygons "match" when their vertex counts, vertex centroids
and bounding-box dimensions are all close. Circles match when their centers
and radii are close.

Typical usage:
    from airspacekit.geometry.validation import is_valid_polygon, polygons_match

    if is_valid_polygon(vertices) and polygons_match(vertices, other):
        ...
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from airspacekit.geometry.coordinates import Coordinate, coordinates_to_array

MIN_POLYGON_SPAN_DEG = 0.0009
MATCH_DISTANCE_DEG = 0.008
VERTEX_COUNT_TOLERANCE = 0.2
BBOX_TOLERANCE = 0.1
RADIUS_TOLERANCE = 0.05

# Floors for the relative-difference denominators.
_MIN_SPAN_DENOMINATOR = 0.001
_MIN_RADIUS_DENOMINATOR = 0.1


def is_valid_polygon(
    polygon: Sequence[Coordinate] | None, min_span_deg: float = MIN_POLYGON_SPAN_DEG
) -> bool:
    """Check that a vertex ring describes a usable polygon.

    A polygon is valid when it has at least three vertices, every vertex is
    finite and within lat/lon bounds, and its bounding box spans at least
    ``min_span_deg`` in one axis (roughly 100 m by default).

    Args:
        polygon: Vertex ring, or None.
        min_span_deg: Minimum bounding-box span in degrees.

    Returns:
        True if the polygon is valid.

    Examples:
        >>> is_valid_polygon([Coordinate(0, 0), Coordinate(1, 0)])
        False
    """
    if not polygon or len(polygon) < 3:
        return False

    array = coordinates_to_array(polygon)
    if not np.all(np.isfinite(array)):
        return False
    if np.any(np.abs(array[:, 0]) > 90) or np.any(np.abs(array[:, 1]) > 180):
        return False

    lat_range, lon_range = array.max(axis=0) - array.min(axis=0)
    return not (lat_range < min_span_deg and lon_range < min_span_deg)


@dataclass(frozen=True)
class PolygonSummary:
    """Precomputed features used for approximate polygon matching.

    Attributes:
        vertex_count: Number of vertices (closing vertex included).
        centroid_lat: Mean vertex latitude.
        centroid_lon: Mean vertex longitude.
        width: Bounding-box longitude span.
        height: Bounding-box latitude span.
    """

    vertex_count: int
    centroid_lat: float
    centroid_lon: float
    width: float
    height: float


def summarize_polygon(polygon: Sequence[Coordinate]) -> PolygonSummary:
    """Compute the matching features of a non-empty vertex ring.

    The centroid is the plain vertex mean, not the area centroid.
    """
    array = coordinates_to_array(polygon)
    centroid_lat, centroid_lon = array.mean(axis=0)
    height, width = array.max(axis=0) - array.min(axis=0)
    return PolygonSummary(
        vertex_count=len(polygon),
        centroid_lat=float(centroid_lat),
        centroid_lon=float(centroid_lon),
        width=float(width),
        height=float(height),
    )


def polygon_centroid(polygon: Sequence[Coordinate]) -> Coordinate:
    """Vertex-mean centroid of a non-empty polygon."""
    summary = summarize_polygon(polygon)
    return Coordinate(summary.centroid_lat, summary.centroid_lon)


def summaries_match(
    first: PolygonSummary,
    second: PolygonSummary,
    match_distance_deg: float = MATCH_DISTANCE_DEG,
    vertex_count_tolerance: float = VERTEX_COUNT_TOLERANCE,
    bbox_tolerance: float = BBOX_TOLERANCE,
) -> bool:
    """Compare two precomputed polygon summaries."""
    if first.vertex_count < 3 or second.vertex_count < 3:
        return False

    count_diff = abs(first.vertex_count - second.vertex_count)
    if count_diff / max(first.vertex_count, second.vertex_count) > vertex_count_tolerance:
        return False

    centroid_dist = math.hypot(
        first.centroid_lat - second.centroid_lat, first.centroid_lon - second.centroid_lon
    )
    if centroid_dist > match_distance_deg:
        return False

    width_diff = abs(first.width - second.width) / max(
        first.width, second.width, _MIN_SPAN_DENOMINATOR
    )
    height_diff = abs(first.height - second.height) / max(
        first.height, second.height, _MIN_SPAN_DENOMINATOR
    )
    return width_diff < bbox_tolerance and height_diff < bbox_tolerance


def polygons_match(
    first: Sequence[Coordinate] | None,
    second: Sequence[Coordinate] | None,
    match_distance_deg: float = MATCH_DISTANCE_DEG,
    vertex_count_tolerance: float = VERTEX_COUNT_TOLERANCE,
    bbox_tolerance: float = BBOX_TOLERANCE,
) -> bool:
    """Check whether two polygons describe approximately the same shape.

    Polygons match iff (a) their vertex counts differ by at most
    ``vertex_count_tolerance`` relative to the larger, (b) their vertex
    centroids are within ``match_distance_deg`` and (c) their bounding-box
    widths and heights each differ by less than ``bbox_tolerance``.

    Args:
        first: First vertex ring.
        second: Second vertex ring.
        match_distance_deg: Max centroid separation in degrees.
        vertex_count_tolerance: Max relative vertex count difference.
        bbox_tolerance: Max relative bounding-box dimension difference.

    Returns:
        True if the polygons match.
    """
    if not first or not second or len(first) < 3 or len(second) < 3:
        return False
    return summaries_match(
        summarize_polygon(first),
        summarize_polygon(second),
        match_distance_deg,
        vertex_count_tolerance,
        bbox_tolerance,
    )


def circles_match(
    center1: Coordinate | None,
    radius1: float | None,
    center2: Coordinate | None,
    radius2: float | None,
    match_distance_deg: float = MATCH_DISTANCE_DEG,
    radius_tolerance: float = RADIUS_TOLERANCE,
) -> bool:
    """Check whether two circles are approximately identical.

    Args:
        center1: Center of the first circle.
        radius1: Radius of the first circle in NM.
        center2: Center of the second circle.
        radius2: Radius of the second circle in NM.
        match_distance_deg: Max center separation in degrees.
        radius_tolerance: Max relative radius difference (exclusive).

    Returns:
        True if centers and radii are close.
    """
    if center1 is None or center2 is None or radius1 is None or radius2 is None:
        return False

    center_dist = math.hypot(
        center1.latitude - center2.latitude, center1.longitude - center2.longitude
    )
    if center_dist > match_distance_deg:
        return False

    radius_diff = abs(radius1 - radius2) / max(radius1, radius2, _MIN_RADIUS_DENOMINATOR)
    return radius_diff < radius_tolerance


def _ccw(a: Coordinate, b: Coordinate, c: Coordinate) -> bool:
    return (c.longitude - a.longitude) * (b.latitude - a.latitude) > (
        b.longitude - a.longitude
    ) * (c.latitude - a.latitude)


def segments_intersect(p1: Coordinate, p2: Coordinate, p3: Coordinate, p4: Coordinate) -> bool:
    """Check whether segment p1-p2 properly crosses segment p3-p4."""
    return _ccw(p1, p3, p4) != _ccw(p2, p3, p4) and _ccw(p1, p2, p3) != _ccw(p1, p2, p4)


def has_self_intersection(vertices: Sequence[Coordinate]) -> bool:
    """Check whether any two non-adjacent edges of a ring cross.

    The ring is treated as implicitly closed. This is an O(n^2) diagnostic
    and is not part of polygon validity.
    """
    if len(vertices) > 1 and vertices[0] == vertices[-1]:
        vertices = vertices[:-1]
    n = len(vertices)
    if n < 4:
        return False

    for i in range(n):
        p1 = vertices[i]
        p2 = vertices[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            if segments_intersect(p1, p2, vertices[j], vertices[(j + 1) % n]):
                return True
    return False
