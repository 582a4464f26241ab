"""Pytest configuration and fixtures for all tests."""

from collections.abc import Callable

import pytest

from airspacekit.airspaces.model import AirspaceRecord, AltitudeBand, CircleGeometry, PolygonGeometry
from airspacekit.geometry.coordinates import Coordinate

SAMPLE_OPENAIR = """\
* Sample airspace file
AC D
AN Test Class D
AL SFC
AH 2500 MSL
V X=40:00:00 N 100:00:00 W
DC 5

AC R
AN Test Restricted
AL GND
AH FL180
DP 41:00:00 N 101:00:00 W
DP 41:10:00 N 101:00:00 W
DP 41:10:00 N 100:50:00 W
DP 41:00:00 N 100:50:00 W
*
"""


def square_ring(lat: float, lon: float, size: float = 0.1) -> tuple[Coordinate, ...]:
    """Closed square ring with its south-west corner at (lat, lon)."""
    return (
        Coordinate(lat, lon),
        Coordinate(lat + size, lon),
        Coordinate(lat + size, lon + size),
        Coordinate(lat, lon + size),
        Coordinate(lat, lon),
    )


@pytest.fixture
def sample_openair() -> str:
    """Two-airspace OpenAir document: a Class D circle and a restricted square."""
    return SAMPLE_OPENAIR


@pytest.fixture
def make_polygon_record() -> Callable[..., AirspaceRecord]:
    """Factory for square polygon records."""

    def _make(
        record_id: str,
        lat: float = 40.0,
        lon: float = -100.0,
        size: float = 0.1,
        name: str | None = None,
        airspace_type: str = "Class D",
        floor: int = 0,
        ceiling: int = 2500,
    ) -> AirspaceRecord:
        label = name if name is not None else record_id
        return AirspaceRecord(
            id=record_id,
            notam_number=label,
            type=airspace_type,
            location=label,
            message=f"{airspace_type}: {label}",
            geometry=PolygonGeometry(square_ring(lat, lon, size)),
            altitude=AltitudeBand(floor, ceiling),
        )

    return _make


@pytest.fixture
def make_circle_record() -> Callable[..., AirspaceRecord]:
    """Factory for circular records."""

    def _make(
        record_id: str,
        lat: float = 40.0,
        lon: float = -100.0,
        radius_nm: float = 5.0,
        name: str | None = None,
        airspace_type: str = "Class D",
        floor: int = 0,
        ceiling: int = 2500,
    ) -> AirspaceRecord:
        label = name if name is not None else record_id
        return AirspaceRecord(
            id=record_id,
            notam_number=label,
            type=airspace_type,
            location=label,
            geometry=CircleGeometry(Coordinate(lat, lon), radius_nm),
            altitude=AltitudeBand(floor, ceiling),
        )

    return _make


@pytest.fixture
def square() -> Callable[..., tuple[Coordinate, ...]]:
    """Factory for closed square rings."""
    return square_ring
