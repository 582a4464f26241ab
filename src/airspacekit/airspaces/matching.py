"""Airspace-level equivalence used by consolidation.

Two records are equivalent when they share the exact altitude band and
their geometries approximately coincide. Records with different geometry
kinds, or bare points, never match.

Typical usage:
    from airspacekit.airspaces.matching import AirspaceMatcher

    matcher = AirspaceMatcher()
    if matcher.matches(first, second):
        ...
"""

import logging

from airspacekit.airspaces.model import AirspaceRecord, CircleGeometry, PolygonGeometry
from airspacekit.core.config import DEFAULT_SETTINGS, AirspaceSettings
from airspacekit.geometry.validation import (
    PolygonSummary,
    circles_match,
    summaries_match,
    summarize_polygon,
)

logger = logging.getLogger(__name__)


class AirspaceMatcher:
    """Approximate geometry matcher with per-record feature caching.

    Polygon summaries (vertex count, centroid, bounding box) are computed
    once per geometry, which keeps repeated comparisons during clustering
    cheap.

    Examples:
        >>> matcher = AirspaceMatcher()
        >>> matcher.matches(record, record)
        True
    """

    def __init__(self, settings: AirspaceSettings = DEFAULT_SETTINGS) -> None:
        """Initialize matcher.

        Args:
            settings: Thresholds for polygon and circle matching.
        """
        self.settings = settings
        self._summaries: dict[int, tuple[PolygonGeometry, PolygonSummary]] = {}

    def summary(self, record: AirspaceRecord) -> PolygonSummary | None:
        """Polygon features for a record, or None for non-polygons."""
        geometry = record.geometry
        if not isinstance(geometry, PolygonGeometry) or not geometry.vertices:
            return None
        # Keyed by identity; the geometry is kept alive alongside its summary.
        cached = self._summaries.get(id(geometry))
        if cached is not None and cached[0] is geometry:
            return cached[1]
        summary = summarize_polygon(geometry.vertices)
        self._summaries[id(geometry)] = (geometry, summary)
        return summary

    def anchor(self, record: AirspaceRecord) -> tuple[float, float] | None:
        """Point compared by the distance test: polygon centroid or circle center."""
        summary = self.summary(record)
        if summary is not None:
            return summary.centroid_lat, summary.centroid_lon
        if isinstance(record.geometry, CircleGeometry):
            c = record.geometry.center
            return c.latitude, c.longitude
        return None

    def polygons_match(self, first: AirspaceRecord, second: AirspaceRecord) -> bool:
        """Compare only the polygon geometry of two records."""
        a = self.summary(first)
        b = self.summary(second)
        if a is None or b is None:
            return False
        s = self.settings
        return summaries_match(
            a, b, s.match_distance_deg, s.vertex_count_tolerance, s.bbox_tolerance
        )

    def matches(self, first: AirspaceRecord, second: AirspaceRecord) -> bool:
        """Check full airspace equivalence (altitude band plus geometry)."""
        if first.altitude != second.altitude:
            return False

        g1, g2 = first.geometry, second.geometry
        if isinstance(g1, PolygonGeometry) and isinstance(g2, PolygonGeometry):
            return self.polygons_match(first, second)

        if isinstance(g1, CircleGeometry) and isinstance(g2, CircleGeometry):
            return circles_match(
                g1.center,
                g1.radius_nm,
                g2.center,
                g2.radius_nm,
                self.settings.match_distance_deg,
                self.settings.radius_tolerance,
            )

        return False


def airspaces_match(
    first: AirspaceRecord, second: AirspaceRecord, settings: AirspaceSettings = DEFAULT_SETTINGS
) -> bool:
    """Check whether two records describe the same airspace.

    Requires identical altitude floor and ceiling, then compares polygons
    with polygons or circles with circles.

    Args:
        first: First record.
        second: Second record.
        settings: Matching thresholds.

    Returns:
        True if the records are equivalent.
    """
    return AirspaceMatcher(settings).matches(first, second)
