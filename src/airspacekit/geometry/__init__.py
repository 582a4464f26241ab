"""Coordinate parsing, great-circle math, arc sampling and shape matching.

Typical usage:
    from airspacekit.geometry import Coordinate, arc_to_polygon_points, is_valid_polygon

    center = Coordinate(40.0, -100.0)
    valid = is_valid_polygon(vertices)
"""

from airspacekit.geometry.arcs import (
    AngleArcDefinition,
    ArcDefinition,
    angle_arc_points,
    arc_by_angles,
    arc_to_polygon_points,
    sweep_angle,
)
from airspacekit.geometry.coordinates import (
    BoundingBox,
    Coordinate,
    parse_coordinate,
    parse_coordinate_pair,
)
from airspacekit.geometry.great_circle import (
    EARTH_RADIUS_NM,
    bearing,
    destination,
    distance,
    km_to_nm,
)
from airspacekit.geometry.validation import (
    PolygonSummary,
    circles_match,
    has_self_intersection,
    is_valid_polygon,
    polygon_centroid,
    polygons_match,
    summarize_polygon,
)

__all__ = [
    "AngleArcDefinition",
    "ArcDefinition",
    "BoundingBox",
    "Coordinate",
    "EARTH_RADIUS_NM",
    "PolygonSummary",
    "angle_arc_points",
    "arc_by_angles",
    "arc_to_polygon_points",
    "bearing",
    "circles_match",
    "destination",
    "distance",
    "has_self_intersection",
    "is_valid_polygon",
    "km_to_nm",
    "parse_coordinate",
    "parse_coordinate_pair",
    "polygon_centroid",
    "polygons_match",
    "summarize_polygon",
    "sweep_angle",
]
