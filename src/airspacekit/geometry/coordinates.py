"""Geographic coordinates and OpenAir sexagesimal coordinate parsing.

OpenAir files write positions as ``DD:MM:SS.S`` followed by a hemisphere
letter, e.g. ``49:03:17 N 122:07:24 W``. This module converts those tokens
into signed decimal degrees and provides the small value types shared by the
rest of the package.

Typical usage:
    from airspacekit.geometry.coordinates import parse_coordinate_pair

    point = parse_coordinate_pair("49:03:17 N 122:07:24 W")
    print(point.latitude, point.longitude)
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

_COORDINATE_PAIR_RE = re.compile(
    r"(\d{1,2}:\d{2}:\d{2}(?:\.\d+)?)\s*([NS])\s+(\d{1,3}:\d{2}:\d{2}(?:\.\d+)?)\s*([EW])"
)
_TOKEN_SPLIT_RE = re.compile(r"[:\s]+")


@dataclass(frozen=True)
class Coordinate:
    """Geographic position in decimal degrees.

    Attributes:
        latitude: Latitude in degrees, positive north.
        longitude: Longitude in degrees, positive east.

    Examples:
        >>> Coordinate(40.0, -100.0).is_valid()
        True
        >>> Coordinate(91.0, 0.0).is_valid()
        False
    """

    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """Check the coordinate is finite and within lat/lon bounds."""
        if math.isnan(self.latitude) or math.isnan(self.longitude):
            return False
        return abs(self.latitude) <= 90 and abs(self.longitude) <= 180

    def to_dict(self) -> dict[str, float]:
        """Serialize to the JSON boundary shape."""
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: dict[str, float]) -> "Coordinate":
        """Build from a ``{"latitude", "longitude"}`` mapping."""
        return cls(float(data["latitude"]), float(data["longitude"]))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lon rectangle used as a fast-reject filter.

    Attributes:
        north: Maximum latitude.
        south: Minimum latitude.
        east: Maximum longitude.
        west: Minimum longitude.
    """

    north: float
    south: float
    east: float
    west: float

    @property
    def width(self) -> float:
        """Longitude span in degrees."""
        return self.east - self.west

    @property
    def height(self) -> float:
        """Latitude span in degrees."""
        return self.north - self.south

    def contains(self, point: Coordinate) -> bool:
        """Check whether a point lies inside or on the box edges."""
        return (
            self.south <= point.latitude <= self.north
            and self.west <= point.longitude <= self.east
        )

    def expanded(self, lat_delta: float, lon_delta: float) -> "BoundingBox":
        """Return a copy grown by the given deltas on every side."""
        return BoundingBox(
            north=self.north + lat_delta,
            south=self.south - lat_delta,
            east=self.east + lon_delta,
            west=self.west - lon_delta,
        )

    @classmethod
    def from_points(cls, points: Iterable[Coordinate]) -> "BoundingBox":
        """Compute the bounding box of a non-empty sequence of points.

        Raises:
            ValueError: If ``points`` is empty.
        """
        array = coordinates_to_array(points)
        if array.size == 0:
            raise ValueError("Cannot compute bounds of an empty point sequence")
        lat_min, lon_min = array.min(axis=0)
        lat_max, lon_max = array.max(axis=0)
        return cls(
            north=float(lat_max), south=float(lat_min), east=float(lon_max), west=float(lon_min)
        )

    def to_dict(self) -> dict[str, float]:
        """Serialize to the JSON boundary shape."""
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}

    @classmethod
    def from_dict(cls, data: dict[str, float]) -> "BoundingBox":
        """Build from a ``{"north", "south", "east", "west"}`` mapping."""
        return cls(
            north=float(data["north"]),
            south=float(data["south"]),
            east=float(data["east"]),
            west=float(data["west"]),
        )


def coordinates_to_array(points: Iterable[Coordinate]) -> np.ndarray:
    """Stack coordinates into an ``(n, 2)`` float array of (lat, lon) rows."""
    rows = [(p.latitude, p.longitude) for p in points]
    if not rows:
        return np.empty((0, 2), dtype=float)
    return np.asarray(rows, dtype=float)


def parse_coordinate(token: str) -> float:
    """Convert a ``DD:MM:SS.S X`` token into signed decimal degrees.

    The hemisphere letter is the last whitespace/colon separated part; ``S``
    and ``W`` negate the value. Tokens with fewer than three parts yield 0.

    Args:
        token: Coordinate text such as ``"49:03:17 N"``.

    Returns:
        Decimal degrees.

    Examples:
        >>> parse_coordinate("40:30:00 N")
        40.5
        >>> parse_coordinate("100:15:00 W")
        -100.25
    """
    parts = [p for p in _TOKEN_SPLIT_RE.split(token.strip()) if p]
    if len(parts) < 3:
        return 0.0

    hemisphere = parts[-1].upper() if parts[-1].isalpha() else ""
    numbers = parts[:-1] if hemisphere else parts

    try:
        degrees = float(numbers[0])
        minutes = float(numbers[1]) if len(numbers) > 1 else 0.0
        seconds = float(numbers[2]) if len(numbers) > 2 else 0.0
    except ValueError:
        return 0.0

    decimal = degrees + minutes / 60 + seconds / 3600
    if hemisphere in ("S", "W"):
        decimal = -decimal
    return decimal


def parse_coordinate_pair(line: str) -> Coordinate | None:
    """Extract a latitude/longitude pair from free-form text.

    Args:
        line: Text containing e.g. ``"49:03:17 N 122:07:24 W"``.

    Returns:
        Parsed coordinate, or None when the text holds no coordinate pair.

    Examples:
        >>> parse_coordinate_pair("DP 40:00:00 N 100:00:00 W")
        Coordinate(latitude=40.0, longitude=-100.0)
        >>> parse_coordinate_pair("AN Nothing here") is None
        True
    """
    match = _COORDINATE_PAIR_RE.search(line)
    if not match:
        return None

    latitude = parse_coordinate(f"{match.group(1)} {match.group(2)}")
    longitude = parse_coordinate(f"{match.group(3)} {match.group(4)}")
    return Coordinate(latitude, longitude)
