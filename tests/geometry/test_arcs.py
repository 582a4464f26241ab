"""Tests for arc sampling."""

import pytest

from airspacekit.geometry.arcs import (
    AngleArcDefinition,
    ArcDefinition,
    angle_arc_points,
    arc_by_angles,
    arc_to_polygon_points,
    sweep_angle,
)
from airspacekit.geometry.coordinates import Coordinate
from airspacekit.geometry.great_circle import bearing, destination, distance

CENTER = Coordinate(40.0, -100.0)


def point_at(bearing_deg: float, radius_nm: float = 10.0) -> Coordinate:
    lat, lon = destination(CENTER.latitude, CENTER.longitude, bearing_deg, radius_nm)
    return Coordinate(lat, lon)


def bearings_of(points: list[Coordinate]) -> list[float]:
    return [bearing(CENTER.latitude, CENTER.longitude, p.latitude, p.longitude) for p in points]


class TestSweepAngle:
    """Test direction-aware sweep normalization."""

    @pytest.mark.parametrize(
        ("start", "end", "clockwise", "expected"),
        [
            (0.0, 90.0, True, 90.0),
            (90.0, 0.0, True, 270.0),
            (350.0, 10.0, True, 20.0),
            (350.0, 10.0, False, -340.0),
            (90.0, 0.0, False, -90.0),
            (45.0, 45.0, True, 0.0),
            (45.0, 45.0, False, 0.0),
        ],
    )
    def test_sweep(self, start: float, end: float, clockwise: bool, expected: float) -> None:
        """Test the sweep follows the requested direction, not the short way."""
        assert sweep_angle(start, end, clockwise) == pytest.approx(expected)


class TestArcToPolygonPoints:
    """Test center/start/end arcs."""

    def test_quarter_arc_bearings_increase(self) -> None:
        """Test a clockwise 0-90 arc yields monotonically increasing bearings."""
        arc = ArcDefinition(CENTER, point_at(0.0), point_at(90.0), clockwise=True)
        points = arc_to_polygon_points(arc, num_points=18)
        assert len(points) == 19

        bearings = bearings_of(points)
        # First bearing may read as ~360 instead of ~0.
        unwrapped = [b - 360.0 if b > 180.0 else b for b in bearings]
        assert all(b2 > b1 for b1, b2 in zip(unwrapped, unwrapped[1:]))
        assert unwrapped[0] == pytest.approx(0.0, abs=1e-6)
        assert unwrapped[-1] == pytest.approx(90.0, abs=1e-3)

    def test_counterclockwise_takes_long_way(self) -> None:
        """Test a counterclockwise 0-90 arc sweeps through west."""
        arc = ArcDefinition(CENTER, point_at(0.0), point_at(90.0), clockwise=False)
        points = arc_to_polygon_points(arc, num_points=4)
        expected = [0.0, 292.5, 225.0, 157.5, 90.0]
        for actual, wanted in zip(bearings_of(points), expected):
            diff = (actual - wanted + 180.0) % 360.0 - 180.0
            assert diff == pytest.approx(0.0, abs=1e-3)

    def test_radius_from_start_point(self) -> None:
        """Test all points sit at the start point's distance."""
        arc = ArcDefinition(CENTER, point_at(10.0, 5.0), point_at(80.0, 8.0))
        for p in arc_to_polygon_points(arc, num_points=10):
            assert distance(CENTER.latitude, CENTER.longitude, p.latitude, p.longitude) == pytest.approx(
                5.0, rel=1e-6
            )

    def test_invalid_point_count(self) -> None:
        """Test non-positive segment counts are rejected."""
        arc = ArcDefinition(CENTER, point_at(0.0), point_at(90.0))
        with pytest.raises(ValueError):
            arc_to_polygon_points(arc, num_points=0)


class TestArcByAngles:
    """Test radius/angle arcs."""

    def test_endpoints_and_radius(self) -> None:
        """Test DA arcs start and end on the given angles."""
        points = arc_by_angles(CENTER, 3.0, 270.0, 30.0, clockwise=True, num_points=12)
        assert len(points) == 13
        bearings = bearings_of(points)
        assert bearings[0] == pytest.approx(270.0, abs=1e-3)
        assert bearings[-1] == pytest.approx(30.0, abs=1e-3)
        for p in points:
            assert distance(CENTER.latitude, CENTER.longitude, p.latitude, p.longitude) == pytest.approx(
                3.0, rel=1e-6
            )

    def test_angle_arc_definition(self) -> None:
        """Test the dataclass wrapper delegates to arc_by_angles."""
        arc = AngleArcDefinition(CENTER, 2.0, 0.0, 180.0, clockwise=False)
        assert angle_arc_points(arc, 6) == arc_by_angles(CENTER, 2.0, 0.0, 180.0, False, 6)

    def test_invalid_point_count(self) -> None:
        """Test non-positive segment counts are rejected."""
        with pytest.raises(ValueError):
            arc_by_angles(CENTER, 2.0, 0.0, 90.0, True, num_points=-1)
