"""Tests for airspace-level matching."""

import pytest

from airspacekit.airspaces.matching import AirspaceMatcher, airspaces_match
from airspacekit.airspaces.model import AirspaceRecord, PointGeometry
from airspacekit.core.config import AirspaceSettings
from airspacekit.geometry.coordinates import Coordinate


class TestAirspacesMatch:
    """Test the equivalence predicate."""

    def test_near_duplicate_polygons(self, make_polygon_record) -> None:
        """Test polygons 0.001 degrees apart with the same band match."""
        assert airspaces_match(make_polygon_record("a"), make_polygon_record("b", lat=40.001))

    def test_distant_polygons(self, make_polygon_record) -> None:
        """Test polygons one degree apart do not match."""
        assert not airspaces_match(make_polygon_record("a"), make_polygon_record("b", lat=41.0))

    def test_altitude_must_be_identical(self, make_polygon_record) -> None:
        """Test a different ceiling prevents a match."""
        assert not airspaces_match(make_polygon_record("a"), make_polygon_record("b", ceiling=3000))

    def test_circles(self, make_circle_record) -> None:
        """Test circle records compare centers and radii."""
        assert airspaces_match(make_circle_record("a"), make_circle_record("b", radius_nm=5.1))
        assert not airspaces_match(make_circle_record("a"), make_circle_record("b", radius_nm=6.0))

    def test_mixed_kinds_never_match(self, make_polygon_record, make_circle_record) -> None:
        """Test a polygon never matches a circle."""
        assert not airspaces_match(make_polygon_record("a"), make_circle_record("b"))

    def test_points_never_match(self) -> None:
        """Test bare points never match, even themselves."""
        point = AirspaceRecord(
            id="p", notam_number="P", type="Class E", geometry=PointGeometry(Coordinate(40.0, -100.0))
        )
        assert not airspaces_match(point, point)

    def test_settings_thresholds(self, make_polygon_record) -> None:
        """Test a wider match distance admits farther polygons."""
        first = make_polygon_record("a")
        second = make_polygon_record("b", lat=40.02)
        assert not airspaces_match(first, second)
        assert airspaces_match(first, second, AirspaceSettings(match_distance_deg=0.05))


class TestAirspaceMatcher:
    """Test matcher caching and anchors."""

    def test_summary_cached(self, make_polygon_record) -> None:
        """Test summaries are computed once per geometry."""
        matcher = AirspaceMatcher()
        record = make_polygon_record("a")
        assert matcher.summary(record) is matcher.summary(record)

    def test_anchor(self, make_polygon_record, make_circle_record) -> None:
        """Test anchors are polygon centroids and circle centers."""
        matcher = AirspaceMatcher()
        lat, lon = matcher.anchor(make_polygon_record("a"))
        assert lat == pytest.approx((40.0 * 3 + 40.1 * 2) / 5)
        assert lon == pytest.approx((-100.0 * 3 + -99.9 * 2) / 5)
        assert matcher.anchor(make_circle_record("b")) == (40.0, -100.0)

    def test_polygons_match_ignores_altitude(self, make_polygon_record) -> None:
        """Test the polygon-only comparison skips the altitude check."""
        matcher = AirspaceMatcher()
        assert matcher.polygons_match(make_polygon_record("a"), make_polygon_record("b", ceiling=9000))
