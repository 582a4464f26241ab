"""In-memory airspace database with spatial querying.

The database holds one immutable list of records and is rebuilt wholesale
when data is reloaded; queries never mutate it.

Typical usage:
    db = AirspaceDatabase()
    db.load_openair_file("data/allusa.txt", "US")

    record = db.get("US-airspace-0-0")
    overhead = db.find_at_point(Coordinate(40.0, -100.0))
    nearby = db.find_nearby(Coordinate(40.0, -100.0), radius_km=25)
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from airspacekit.airspaces.filtering import attach_bounds
from airspacekit.airspaces.model import AirspaceRecord, AirspaceSource
from airspacekit.airspaces.queries import (
    find_airspaces_at_point,
    find_airspaces_in_polygon,
    find_airspaces_nearby,
)
from airspacekit.geometry.coordinates import Coordinate
from airspacekit.pipeline.loader import AirspaceLoader

logger = logging.getLogger(__name__)


class AirspaceDatabase:
    """Airspace collection with point, radius and polygon queries.

    Examples:
        >>> db = AirspaceDatabase()
        >>> db.load_openair_text(text, "USER")
        2
        >>> [r.name for r in db.find_at_point(Coordinate(40.0, -100.0))]
        ['Test Class D']
    """

    def __init__(self, loader: AirspaceLoader | None = None) -> None:
        """Initialize empty database.

        Args:
            loader: Pipeline used by the OpenAir loading methods.
        """
        self.loader = loader or AirspaceLoader()
        self._records: tuple[AirspaceRecord, ...] = ()
        self._by_id: dict[str, AirspaceRecord] = {}

    @property
    def records(self) -> tuple[AirspaceRecord, ...]:
        """All records, in load order."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def load_records(self, records: Iterable[AirspaceRecord]) -> None:
        """Replace the contents with the given records, caching their bounds."""
        self._records = tuple(attach_bounds(records))
        self._by_id = {record.id: record for record in self._records}
        logger.info("Loaded %d airspaces into database", len(self._records))

    def load_openair_text(self, text: str, source: AirspaceSource | str = AirspaceSource.USER) -> int:
        """Parse an OpenAir document and replace the contents with it.

        Returns:
            Number of records loaded.
        """
        self.load_records(self.loader.process_openair_text(text, source))
        return len(self._records)

    def load_openair_file(self, path: str | Path, source: AirspaceSource | str = AirspaceSource.USER) -> int:
        """Load an OpenAir file from disk.

        Args:
            path: File to read (UTF-8; undecodable bytes are replaced).
            source: Source the records are attributed to.

        Returns:
            Number of records loaded.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"OpenAir file not found: {path}")

        logger.info("Loading airspaces from %s", path)
        text = path.read_text(encoding="utf-8", errors="replace")
        return self.load_openair_text(text, source)

    def get(self, record_id: str) -> AirspaceRecord | None:
        """Look up a record by id."""
        return self._by_id.get(record_id)

    def find_at_point(self, point: Coordinate) -> list[AirspaceRecord]:
        """Records containing the point."""
        return find_airspaces_at_point(point, self._records)

    def find_nearby(self, point: Coordinate, radius_km: float) -> list[AirspaceRecord]:
        """Records containing or near the point (see :func:`find_airspaces_nearby`)."""
        return find_airspaces_nearby(point, radius_km, self._records)

    def find_in_polygon(self, polygon: Sequence[Coordinate]) -> list[AirspaceRecord]:
        """Records overlapping the query polygon."""
        return find_airspaces_in_polygon(polygon, self._records)

    def find_by_type(self, airspace_type: str) -> list[AirspaceRecord]:
        """Records of one class label, e.g. ``"Class D"``."""
        return [record for record in self._records if record.type == airspace_type]

    def get_types(self) -> list[str]:
        """Sorted distinct class labels present in the database."""
        return sorted({record.type for record in self._records})

    def clear(self) -> None:
        """Remove all records."""
        self._records = ()
        self._by_id = {}
