"""Tests for the in-memory airspace database."""

import pytest

from airspacekit.geometry.coordinates import Coordinate
from airspacekit.pipeline.database import AirspaceDatabase


@pytest.fixture
def db(sample_openair: str) -> AirspaceDatabase:
    """Database loaded with the sample file."""
    database = AirspaceDatabase()
    database.load_openair_text(sample_openair, "US")
    return database


class TestAirspaceDatabase:
    """Test AirspaceDatabase loading and queries."""

    def test_load(self, db: AirspaceDatabase) -> None:
        """Test records are loaded with bounds."""
        assert len(db) == 2
        assert all(r.bounds is not None for r in db.records)

    def test_get(self, db: AirspaceDatabase) -> None:
        """Test lookup by id."""
        record = db.get("US-airspace-0-0")
        assert record is not None
        assert record.name == "Test Class D"
        assert db.get("missing") is None

    def test_find_at_point(self, db: AirspaceDatabase) -> None:
        """Test point queries hit the circle only."""
        hits = db.find_at_point(Coordinate(40.0, -100.0))
        assert [r.name for r in hits] == ["Test Class D"]

    def test_find_nearby(self, db: AirspaceDatabase) -> None:
        """Test radius queries reach the restricted square."""
        point = Coordinate(40.9, -100.9)
        assert db.find_nearby(point, 5.0) == []
        assert [r.name for r in db.find_nearby(point, 15.0)] == ["Test Restricted"]

    def test_find_in_polygon(self, db: AirspaceDatabase) -> None:
        """Test polygon queries."""
        query = [
            Coordinate(40.9, -101.1),
            Coordinate(41.05, -101.1),
            Coordinate(41.05, -100.9),
            Coordinate(40.9, -100.9),
        ]
        assert [r.name for r in db.find_in_polygon(query)] == ["Test Restricted"]

    def test_types(self, db: AirspaceDatabase) -> None:
        """Test type listing and filtering."""
        assert db.get_types() == ["Class D", "Restricted"]
        assert [r.name for r in db.find_by_type("Restricted")] == ["Test Restricted"]
        assert db.find_by_type("Class B") == []

    def test_reload_replaces(self, db: AirspaceDatabase) -> None:
        """Test loading new text replaces previous contents."""
        count = db.load_openair_text("AC D\nAN Solo\nV X=10:00:00 N 10:00:00 E\nDC 2\n*", "USER")
        assert count == 1
        assert db.get("US-airspace-0-0") is None
        assert db.get("USER-airspace-0-0").name == "Solo"

    def test_clear(self, db: AirspaceDatabase) -> None:
        """Test clearing empties the database."""
        db.clear()
        assert len(db) == 0
        assert db.find_at_point(Coordinate(40.0, -100.0)) == []

    def test_load_file(self, tmp_path, sample_openair: str) -> None:
        """Test loading from disk."""
        path = tmp_path / "airspace.txt"
        path.write_text(sample_openair, encoding="utf-8")
        database = AirspaceDatabase()
        assert database.load_openair_file(path, "CA") == 2
        assert database.records[0].id.startswith("CA-")

    def test_load_missing_file(self, tmp_path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            AirspaceDatabase().load_openair_file(tmp_path / "missing.txt")
