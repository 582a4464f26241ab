"""Geometry filtering and bounds caching for record collections.

Typical usage:
    from airspacekit.airspaces.filtering import attach_bounds, filter_valid_airspaces

    records = attach_bounds(filter_valid_airspaces(records))
"""

import logging
from collections.abc import Iterable

from airspacekit.airspaces.model import AirspaceRecord, PolygonGeometry
from airspacekit.geometry.validation import MIN_POLYGON_SPAN_DEG, is_valid_polygon

logger = logging.getLogger(__name__)


def has_usable_geometry(record: AirspaceRecord, min_span_deg: float = MIN_POLYGON_SPAN_DEG) -> bool:
    """Check whether a record can take part in spatial queries.

    Polygonal records are judged only on polygon validity. Circles and bare
    points are kept; a record without any geometry is not.
    """
    if isinstance(record.geometry, PolygonGeometry):
        return is_valid_polygon(record.geometry.vertices, min_span_deg)
    return record.geometry is not None


def filter_valid_airspaces(
    records: Iterable[AirspaceRecord], min_span_deg: float = MIN_POLYGON_SPAN_DEG
) -> list[AirspaceRecord]:
    """Drop records whose geometry is unusable.

    Args:
        records: Records to filter.
        min_span_deg: Minimum polygon bounding-box span in degrees.

    Returns:
        Records with usable geometry, in input order.
    """
    records = list(records)
    kept = [r for r in records if has_usable_geometry(r, min_span_deg)]
    if len(kept) != len(records):
        logger.info("Filtered out %d airspaces with invalid geometry", len(records) - len(kept))
    return kept


def attach_bounds(records: Iterable[AirspaceRecord]) -> list[AirspaceRecord]:
    """Return copies of the records with cached bounding boxes."""
    return [record.with_bounds() for record in records]
