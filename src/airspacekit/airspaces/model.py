"""Canonical airspace record and its geometry variants.

Every airspace carries exactly one geometry kind:

* :class:`PolygonGeometry` - closed vertex ring (plus an optional anchor
  point, e.g. the arc center the ring was built around);
* :class:`CircleGeometry` - center and radius in nautical miles;
* :class:`PointGeometry` - a bare position, the degraded fallback.

Records are immutable. Operations that change a record (attaching bounds or
metadata, merging) return new instances via ``dataclasses.replace``.

Typical usage:
    from airspacekit.airspaces.model import AirspaceRecord, CircleGeometry

    record = AirspaceRecord(
        id="US-airspace-0-0",
        notam_number="Test Class D",
        type="Class D",
        geometry=CircleGeometry(Coordinate(40.0, -100.0), 5.0),
    ).with_bounds()
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from airspacekit.geometry.coordinates import BoundingBox, Coordinate

DEFAULT_CEILING_FT = 18000


class AirspaceSource(Enum):
    """Origin of an airspace record, used as its id prefix.

    Attributes:
        US: Built-in United States dataset.
        CA: Built-in Canadian dataset.
        USER: User-supplied file.
    """

    US = "US"
    CA = "CA"
    USER = "USER"

    @classmethod
    def coerce(cls, value: "AirspaceSource | str") -> "AirspaceSource":
        """Accept either an enum member or its string value.

        Raises:
            ValueError: If the string is not a known source.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


@dataclass(frozen=True)
class AltitudeBand:
    """Vertical extent of an airspace in feet.

    Floor <= ceiling is expected but not enforced.

    Attributes:
        floor: Lower limit in feet (0 for GND/SFC).
        ceiling: Upper limit in feet.
    """

    floor: int = 0
    ceiling: int = DEFAULT_CEILING_FT

    def to_dict(self) -> dict[str, int]:
        """Serialize to the JSON boundary shape."""
        return {"floor": self.floor, "ceiling": self.ceiling}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AltitudeBand":
        """Build from a ``{"floor", "ceiling"}`` mapping."""
        return cls(floor=int(data.get("floor", 0)), ceiling=int(data.get("ceiling", DEFAULT_CEILING_FT)))


@dataclass(frozen=True)
class PolygonGeometry:
    """Closed polygon boundary.

    Attributes:
        vertices: Ordered vertex ring; first equals last for closed rings.
        anchor: Representative point when it differs from the first vertex
            (for example the ``V X=`` center of an arc-bounded sector).
    """

    vertices: tuple[Coordinate, ...]
    anchor: Coordinate | None = None

    @property
    def representative(self) -> Coordinate | None:
        """Anchor if set, otherwise the first vertex."""
        if self.anchor is not None:
            return self.anchor
        return self.vertices[0] if self.vertices else None


@dataclass(frozen=True)
class CircleGeometry:
    """Circular airspace.

    Attributes:
        center: Circle center.
        radius_nm: Radius in nautical miles.
    """

    center: Coordinate
    radius_nm: float

    @property
    def representative(self) -> Coordinate:
        return self.center


@dataclass(frozen=True)
class PointGeometry:
    """Bare position without extent."""

    center: Coordinate

    @property
    def representative(self) -> Coordinate:
        return self.center


Geometry = PolygonGeometry | CircleGeometry | PointGeometry


def compute_bounds(geometry: Geometry) -> BoundingBox:
    """Compute the axis-aligned bounding box of a geometry.

    Circles use the flat approximation 1 NM = 1/60 degree of latitude and
    1/(60 cos lat) degree of longitude.

    Args:
        geometry: Geometry to bound.

    Returns:
        Bounding box. Empty polygons yield an inverted (empty) box.
    """
    if isinstance(geometry, PolygonGeometry):
        if not geometry.vertices:
            return BoundingBox(north=-90.0, south=90.0, east=-180.0, west=180.0)
        return BoundingBox.from_points(geometry.vertices)

    if isinstance(geometry, CircleGeometry):
        c = geometry.center
        lat_delta = geometry.radius_nm / 60
        cos_lat = math.cos(math.radians(c.latitude))
        lon_delta = geometry.radius_nm / (60 * cos_lat) if cos_lat > 1e-12 else 180.0
        return BoundingBox(
            north=c.latitude + lat_delta,
            south=c.latitude - lat_delta,
            east=c.longitude + lon_delta,
            west=c.longitude - lon_delta,
        )

    c = geometry.center
    return BoundingBox(north=c.latitude, south=c.latitude, east=c.longitude, west=c.longitude)


@dataclass(frozen=True)
class AirspaceMetadata:
    """Provenance of a record; not part of its geometric identity.

    Attributes:
        file_name: Source file name.
        file_size: Source size in bytes (0 when unknown).
        last_modified: ISO-8601 modification or upload time.
        source: Human-readable source label, e.g. ``"Built-in (US)"``.
    """

    file_name: str
    file_size: int
    last_modified: str
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "lastModified": self.last_modified,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AirspaceMetadata":
        return cls(
            file_name=str(data.get("fileName", "")),
            file_size=int(data.get("fileSize", 0)),
            last_modified=str(data.get("lastModified", "")),
            source=str(data.get("source", "")),
        )


@dataclass(frozen=True)
class AirspaceRecord:
    """Canonical airspace entity.

    Attributes:
        id: Unique id prefixed by source (``US-``, ``CA-``, ``USER-``) or
            ``merged-`` for consolidated records.
        notam_number: Display name (the field name is historical).
        type: Airspace class label, e.g. ``"Class B"`` or ``"Restricted"``.
        location: Display location, normally equal to the name.
        effective_start: ISO-8601 start of the validity window.
        effective_end: ISO-8601 end of the validity window.
        message: Human-readable summary.
        geometry: The record's single geometry, or None when it has none.
        altitude: Vertical extent.
        bounds: Cached bounding box; must match ``geometry`` when present.
        metadata: Provenance, attached late.
    """

    id: str
    notam_number: str
    type: str
    location: str = ""
    effective_start: str = ""
    effective_end: str = ""
    message: str = ""
    geometry: Geometry | None = None
    altitude: AltitudeBand | None = None
    bounds: BoundingBox | None = field(default=None, compare=False)
    metadata: AirspaceMetadata | None = field(default=None, compare=False)

    @property
    def name(self) -> str:
        """Display name, falling back to location."""
        return self.notam_number or self.location

    @property
    def polygon(self) -> tuple[Coordinate, ...] | None:
        """Vertex ring for polygonal airspaces, else None."""
        if isinstance(self.geometry, PolygonGeometry):
            return self.geometry.vertices
        return None

    @property
    def coordinates(self) -> Coordinate | None:
        """Representative point: circle center, anchor or first vertex."""
        if self.geometry is None:
            return None
        return self.geometry.representative

    @property
    def radius(self) -> float | None:
        """Radius in NM for circular airspaces, else None."""
        if isinstance(self.geometry, CircleGeometry):
            return self.geometry.radius_nm
        return None

    def with_bounds(self) -> "AirspaceRecord":
        """Return a copy with bounds computed from the current geometry."""
        if self.geometry is None:
            return replace(self, bounds=None)
        return replace(self, bounds=compute_bounds(self.geometry))

    def with_geometry(self, geometry: Geometry | None) -> "AirspaceRecord":
        """Return a copy with new geometry, recomputing bounds if cached."""
        updated = replace(self, geometry=geometry)
        if self.bounds is not None:
            return updated.with_bounds()
        return updated

    def with_metadata(self, metadata: AirspaceMetadata | None) -> "AirspaceRecord":
        """Return a copy with the given provenance."""
        return replace(self, metadata=metadata)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON boundary shape (camelCase keys)."""
        data: dict[str, Any] = {
            "id": self.id,
            "notamNumber": self.notam_number,
            "type": self.type,
            "location": self.location,
            "effectiveStart": self.effective_start,
            "effectiveEnd": self.effective_end,
            "message": self.message,
        }
        coordinates = self.coordinates
        if coordinates is not None:
            data["coordinates"] = coordinates.to_dict()
        if self.radius is not None:
            data["radius"] = self.radius
        if self.polygon is not None:
            data["polygon"] = [p.to_dict() for p in self.polygon]
        if self.altitude is not None:
            data["altitude"] = self.altitude.to_dict()
        if self.bounds is not None:
            data["bounds"] = self.bounds.to_dict()
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AirspaceRecord":
        """Build a record from its JSON boundary shape.

        Geometry is chosen as polygon first, then circle (coordinates plus
        radius), then bare point.
        """
        coordinates = Coordinate.from_dict(data["coordinates"]) if data.get("coordinates") else None
        radius = data.get("radius")

        geometry: Geometry | None = None
        if data.get("polygon") is not None:
            vertices = tuple(Coordinate.from_dict(p) for p in data["polygon"])
            anchor = coordinates if vertices and coordinates != vertices[0] else None
            geometry = PolygonGeometry(vertices, anchor)
        elif coordinates is not None and radius is not None:
            geometry = CircleGeometry(coordinates, float(radius))
        elif coordinates is not None:
            geometry = PointGeometry(coordinates)

        return cls(
            id=str(data["id"]),
            notam_number=str(data.get("notamNumber", "")),
            type=str(data.get("type", "Unknown")),
            location=str(data.get("location", "")),
            effective_start=str(data.get("effectiveStart", "")),
            effective_end=str(data.get("effectiveEnd", "")),
            message=str(data.get("message", "")),
            geometry=geometry,
            altitude=AltitudeBand.from_dict(data["altitude"]) if data.get("altitude") else None,
            bounds=BoundingBox.from_dict(data["bounds"]) if data.get("bounds") else None,
            metadata=AirspaceMetadata.from_dict(data["metadata"]) if data.get("metadata") else None,
        )
