"""Conversion of parsed OpenAir airspaces into canonical records.

Typical usage:
    from airspacekit.openair.converter import convert_to_api_format
    from airspacekit.openair.parser import parse_openair_file

    records = convert_to_api_format(parse_openair_file(text, "CA"), "CA")
"""

import logging
import re
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from airspacekit.airspaces.model import (
    DEFAULT_CEILING_FT,
    AirspaceRecord,
    AirspaceSource,
    AltitudeBand,
    CircleGeometry,
    Geometry,
    PointGeometry,
    PolygonGeometry,
)
from airspacekit.openair.parser import OpenAirAirspace

logger = logging.getLogger(__name__)

# OpenAir carries no validity data; records get a fixed placeholder window.
VALIDITY_WINDOW = timedelta(days=365)

_FIRST_INTEGER_RE = re.compile(r"(\d+)")


def parse_altitude(text: str | None) -> int:
    """Convert OpenAir altitude text to feet.

    Takes the first integer in the text; ``FL`` multiplies it by 100.
    ``GND``/``SFC`` and text without digits yield 0.

    Args:
        text: Altitude text such as ``"5000ft"``, ``"FL180"`` or ``"GND"``.

    Returns:
        Altitude in feet.

    Examples:
        >>> parse_altitude("FL180")
        18000
        >>> parse_altitude("2500 MSL")
        2500
        >>> parse_altitude("SFC")
        0
    """
    if not text:
        return 0

    match = _FIRST_INTEGER_RE.search(text)
    if not match:
        return 0

    value = int(match.group(1))
    if "FL" in text.upper():
        value *= 100
    return value


def parse_altitude_band(
    low: str | None, high: str | None, default_ceiling_ft: int = DEFAULT_CEILING_FT
) -> AltitudeBand:
    """Build an altitude band from raw AL/AH text.

    A ceiling that parses to 0 (absent, unparseable or ``GND``) falls back
    to ``default_ceiling_ft``.
    """
    floor = parse_altitude(low)
    ceiling = parse_altitude(high) or default_ceiling_ft
    return AltitudeBand(floor=floor, ceiling=ceiling)


def build_geometry(airspace: OpenAirAirspace) -> Geometry | None:
    """Choose the record geometry for a parsed airspace.

    Polygons win over circles, circles over bare points. The representative
    point is the arc/circle center when one was given, else the first
    explicit point.
    """
    representative = airspace.center or (airspace.coordinates[0] if airspace.coordinates else None)

    if airspace.polygon:
        vertices = tuple(airspace.polygon)
        anchor = representative if representative != vertices[0] else None
        return PolygonGeometry(vertices, anchor)

    if representative is not None and airspace.radius is not None:
        return CircleGeometry(representative, airspace.radius)

    if representative is not None:
        return PointGeometry(representative)

    return None


def convert_to_api_format(
    parsed: Sequence[OpenAirAirspace],
    source: AirspaceSource | str = AirspaceSource.US,
    default_ceiling_ft: int = DEFAULT_CEILING_FT,
    now: datetime | None = None,
) -> list[AirspaceRecord]:
    """Map parsed airspaces onto canonical :class:`AirspaceRecord` objects.

    Args:
        parsed: Output of the OpenAir parser.
        source: Dataset the records come from; prefixes every id.
        default_ceiling_ft: Ceiling used when AH is absent or unparseable.
        now: Start of the placeholder validity window (defaults to now, UTC).

    Returns:
        Records with ids of the form ``<source>-<parser id>-<index>``.

    Raises:
        ValueError: If ``source`` is not a known source.
    """
    source = AirspaceSource.coerce(source)
    start = now or datetime.now(timezone.utc)
    effective_start = start.isoformat()
    effective_end = (start + VALIDITY_WINDOW).isoformat()

    records: list[AirspaceRecord] = []
    for index, airspace in enumerate(parsed):
        records.append(
            AirspaceRecord(
                id=f"{source.value}-{airspace.id}-{index}",
                notam_number=airspace.name,
                type=airspace.type,
                location=airspace.name,
                effective_start=effective_start,
                effective_end=effective_end,
                message=(
                    f"{airspace.type}: {airspace.name} "
                    f"({airspace.altitude_low} to {airspace.altitude_high})"
                ),
                geometry=build_geometry(airspace),
                altitude=parse_altitude_band(
                    airspace.altitude_low, airspace.altitude_high, default_ceiling_ft
                ),
            )
        )

    logger.debug("Converted %d %s airspaces", len(records), source.value)
    return records
