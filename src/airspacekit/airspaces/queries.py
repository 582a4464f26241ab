"""Spatial queries over airspace records.

All queries are pure functions over an in-memory record list. Cached
``bounds`` are used for fast rejection where present; polygon tests use
even-odd ray casting in plain lat/lon space and circle tests use
great-circle distance.

Nearby and polygon-intersection queries are approximate: nearby accepts a
polygon on bounding-box proximity alone, and intersection only checks
vertex containment in both directions. Two polygons that cross without
either containing a vertex of the other are not reported.

Typical usage:
    from airspacekit.airspaces.queries import find_airspaces_at_point

    hits = find_airspaces_at_point(Coordinate(40.0, -100.0), records)
"""

import logging
import math
from collections.abc import Iterable, Sequence

import numpy as np

from airspacekit.airspaces.model import AirspaceRecord, CircleGeometry, PointGeometry, PolygonGeometry
from airspacekit.geometry.coordinates import BoundingBox, Coordinate, coordinates_to_array
from airspacekit.geometry.great_circle import KM_PER_DEGREE_LAT, KM_PER_NM, distance
from airspacekit.geometry.validation import is_valid_polygon

logger = logging.getLogger(__name__)


def point_in_bounding_box(point: Coordinate, bounds: BoundingBox) -> bool:
    """Inclusive bounding-box containment."""
    return bounds.contains(point)


def point_in_polygon(point: Coordinate, polygon: Sequence[Coordinate]) -> bool:
    """Even-odd ray casting test.

    Invalid polygons (see :func:`is_valid_polygon`) contain nothing. Points
    exactly on an edge may fall either way.

    Args:
        point: Query point.
        polygon: Vertex ring.

    Returns:
        True if the point is inside the polygon.
    """
    if not is_valid_polygon(polygon):
        return False

    vertices = coordinates_to_array(polygon)
    lats = vertices[:, 0]
    lons = vertices[:, 1]
    lat, lon = point.latitude, point.longitude
    if lat < lats.min() or lat > lats.max() or lon < lons.min() or lon > lons.max():
        return False

    # Edge i runs from vertex i-1 to vertex i, closing the ring implicitly.
    lat_i, lon_i = lats, lons
    lat_j, lon_j = np.roll(lats, 1), np.roll(lons, 1)
    crosses = (lat_i > lat) != (lat_j > lat)
    with np.errstate(divide="ignore", invalid="ignore"):
        intersect_lon = (lon_j - lon_i) * (lat - lat_i) / (lat_j - lat_i) + lon_i
    hits = crosses & (lat_j != lat_i) & (lon < intersect_lon)
    return bool(np.count_nonzero(hits) % 2)


def point_in_circle(point: Coordinate, center: Coordinate, radius_nm: float) -> bool:
    """Check great-circle distance from the center is within the radius."""
    return distance(point.latitude, point.longitude, center.latitude, center.longitude) <= radius_nm


def point_in_airspace(point: Coordinate, record: AirspaceRecord) -> bool:
    """Containment test for a single record.

    Uses cached bounds for rejection, then the polygon test for records with
    more than two vertices, else the circle test. Records with neither
    contain nothing.
    """
    if record.bounds is not None and not point_in_bounding_box(point, record.bounds):
        return False

    geometry = record.geometry
    if isinstance(geometry, PolygonGeometry) and len(geometry.vertices) > 2:
        return point_in_polygon(point, geometry.vertices)
    if isinstance(geometry, CircleGeometry) and geometry.radius_nm:
        return point_in_circle(point, geometry.center, geometry.radius_nm)
    return False


def find_airspaces_at_point(point: Coordinate, records: Iterable[AirspaceRecord]) -> list[AirspaceRecord]:
    """All records containing the point, in input order."""
    return [record for record in records if point_in_airspace(point, record)]


def _near(point: Coordinate, radius_km: float, record: AirspaceRecord) -> bool:
    if point_in_airspace(point, record):
        return True

    geometry = record.geometry
    if isinstance(geometry, CircleGeometry) and geometry.radius_nm:
        center = geometry.center
        dist = distance(point.latitude, point.longitude, center.latitude, center.longitude)
        return dist <= geometry.radius_nm + radius_km / KM_PER_NM

    if isinstance(geometry, PolygonGeometry) and len(geometry.vertices) > 2:
        bounds = record.bounds or BoundingBox.from_points(geometry.vertices)
    elif isinstance(geometry, PointGeometry):
        bounds = record.bounds or BoundingBox.from_points([geometry.center])
    else:
        return False

    lat_delta = radius_km / KM_PER_DEGREE_LAT
    lon_delta = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(point.latitude)))
    return point_in_bounding_box(point, bounds.expanded(lat_delta, lon_delta))


def find_airspaces_nearby(
    point: Coordinate, radius_km: float, records: Iterable[AirspaceRecord]
) -> list[AirspaceRecord]:
    """Records containing or near the point.

    Includes containment hits, circles whose edge is within ``radius_km``,
    and polygons or bare points whose bounding box, expanded by
    ``radius_km``, contains the point.

    Args:
        point: Query point.
        radius_km: Search radius in kilometres; zero or negative behaves
            like :func:`find_airspaces_at_point`.
        records: Records to search.

    Returns:
        Matching records in input order.
    """
    if radius_km <= 0:
        return find_airspaces_at_point(point, records)
    return [record for record in records if _near(point, radius_km, record)]


def polygon_intersects_airspace(polygon: Sequence[Coordinate], record: AirspaceRecord) -> bool:
    """Approximate overlap test between a query polygon and a record.

    True if any query vertex lies inside the record, any record vertex lies
    inside the query polygon, or (for circles) the center lies inside the
    query polygon.
    """
    if any(point_in_airspace(vertex, record) for vertex in polygon):
        return True

    geometry = record.geometry
    if isinstance(geometry, PolygonGeometry) and len(geometry.vertices) > 2:
        return any(point_in_polygon(vertex, polygon) for vertex in geometry.vertices)

    if isinstance(geometry, CircleGeometry) and geometry.radius_nm:
        if point_in_polygon(geometry.center, polygon):
            return True
        return any(point_in_circle(vertex, geometry.center, geometry.radius_nm) for vertex in polygon)

    return False


def find_airspaces_in_polygon(
    polygon: Sequence[Coordinate], records: Iterable[AirspaceRecord]
) -> list[AirspaceRecord]:
    """Records overlapping the query polygon, in input order."""
    return [record for record in records if polygon_intersects_airspace(polygon, record)]
