"""Airspace records, consolidation and spatial queries.

Typical usage:
    from airspacekit.airspaces import consolidate_similar_airspaces, find_airspaces_at_point

    merged = consolidate_similar_airspaces(records)
    hits = find_airspaces_at_point(Coordinate(40.0, -100.0), merged)
"""

from airspacekit.airspaces.cache import (
    CacheStore,
    ConsolidationCache,
    ConsolidationMapping,
    JsonFileCacheStore,
    MemoryCacheStore,
    calculate_data_hash,
    calculate_source_hash,
    content_hash,
)
from airspacekit.airspaces.consolidation import (
    AirspaceConsolidator,
    ClusterFinder,
    consolidate_similar_airspaces,
    merge_cluster,
)
from airspacekit.airspaces.filtering import attach_bounds, filter_valid_airspaces, has_usable_geometry
from airspacekit.airspaces.matching import AirspaceMatcher, airspaces_match
from airspacekit.airspaces.model import (
    AirspaceMetadata,
    AirspaceRecord,
    AirspaceSource,
    AltitudeBand,
    CircleGeometry,
    Geometry,
    PointGeometry,
    PolygonGeometry,
    compute_bounds,
)
from airspacekit.airspaces.queries import (
    find_airspaces_at_point,
    find_airspaces_in_polygon,
    find_airspaces_nearby,
    point_in_airspace,
    point_in_bounding_box,
    point_in_circle,
    point_in_polygon,
    polygon_intersects_airspace,
)
from airspacekit.airspaces.routes import (
    RNAV_PATTERN,
    RouteConsolidator,
    consolidate_rnav_routes,
    extract_route_id,
    get_route_base_name,
    is_route_airspace,
)
from airspacekit.airspaces.spatial_index import GridIndex

__all__ = [
    "AirspaceConsolidator",
    "AirspaceMatcher",
    "AirspaceMetadata",
    "AirspaceRecord",
    "AirspaceSource",
    "AltitudeBand",
    "CacheStore",
    "CircleGeometry",
    "ClusterFinder",
    "ConsolidationCache",
    "ConsolidationMapping",
    "Geometry",
    "GridIndex",
    "JsonFileCacheStore",
    "MemoryCacheStore",
    "PointGeometry",
    "PolygonGeometry",
    "RNAV_PATTERN",
    "RouteConsolidator",
    "airspaces_match",
    "attach_bounds",
    "calculate_data_hash",
    "calculate_source_hash",
    "compute_bounds",
    "consolidate_rnav_routes",
    "consolidate_similar_airspaces",
    "content_hash",
    "extract_route_id",
    "filter_valid_airspaces",
    "find_airspaces_at_point",
    "find_airspaces_in_polygon",
    "find_airspaces_nearby",
    "get_route_base_name",
    "has_usable_geometry",
    "is_route_airspace",
    "merge_cluster",
    "point_in_airspace",
    "point_in_bounding_box",
    "point_in_circle",
    "point_in_polygon",
    "polygon_intersects_airspace",
]
