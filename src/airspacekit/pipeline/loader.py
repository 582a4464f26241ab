"""End-to-end dataset loading: OpenAir text to query-ready records.

Composes the parser, converter, geometry filter, bounds caching and the two
consolidation passes, and persists processed datasets in a
:class:`~airspacekit.airspaces.cache.CacheStore`:

* the built-in base dataset (US and CA sources), keyed by a hash of the
  raw source texts and route-consolidated;
* user uploads, keyed by a hash of the file content and consolidated with
  the general pass.

Metadata is never served from the cache; it is re-attached on every load
so file sizes and timestamps stay current.

Typical usage:
    from airspacekit.pipeline.loader import AirspaceLoader

    loader = AirspaceLoader(cache_store=JsonFileCacheStore("data/cache"))
    records = loader.load_base_dataset({"US": us_text, "CA": ca_text})
"""

import logging
import time
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from airspacekit.airspaces.cache import (
    CacheStore,
    MemoryCacheStore,
    calculate_source_hash,
    content_hash,
)
from airspacekit.airspaces.consolidation import consolidate_similar_airspaces
from airspacekit.airspaces.filtering import attach_bounds, filter_valid_airspaces
from airspacekit.airspaces.model import AirspaceMetadata, AirspaceRecord, AirspaceSource
from airspacekit.airspaces.routes import consolidate_rnav_routes
from airspacekit.core.config import DEFAULT_SETTINGS, AirspaceSettings
from airspacekit.core.errors import CacheError, ConsolidationTimeoutError
from airspacekit.openair.converter import convert_to_api_format
from airspacekit.openair.parser import parse_openair_file

logger = logging.getLogger(__name__)

BASE_DATASET_KEY = "base-dataset"
UPLOAD_SOURCE_LABEL = "User Upload"

BUILT_IN_FILES: dict[str, tuple[str, str]] = {
    "US": ("allusa.txt", "Built-in (US)"),
    "CA": ("CanAirspace318nolowE.txt", "Built-in (CA)"),
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def built_in_metadata(label: str, path: str | Path | None = None) -> AirspaceMetadata:
    """Metadata for a built-in source, using file stats when a path is given.

    Args:
        label: Source label (``US`` or ``CA``).
        path: Local file the source was read from; remote sources pass None.

    Raises:
        KeyError: If the label is not a built-in source.
    """
    file_name, source = BUILT_IN_FILES[label]
    file_size = 0
    last_modified = _utc_now_iso()
    if path is not None:
        try:
            stat = Path(path).stat()
        except OSError:
            logger.debug("No file stats for %s", path)
        else:
            file_size = stat.st_size
            last_modified = datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat()
    return AirspaceMetadata(file_name, file_size, last_modified, source)


def _records_to_json(records: Sequence[AirspaceRecord]) -> list[dict[str, Any]]:
    # Metadata is re-attached on load, so it is not stored.
    return [record.with_metadata(None).to_dict() for record in records]


def _records_from_json(data: Any) -> list[AirspaceRecord]:
    if not isinstance(data, list):
        raise CacheError("Cached dataset is not a list of records")
    try:
        return [AirspaceRecord.from_dict(item) for item in data]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise CacheError(f"Malformed cached record: {e}") from e


class AirspaceLoader:
    """Processing pipeline with dataset caching.

    Examples:
        >>> loader = AirspaceLoader()
        >>> records = loader.process_openair_text(text, "USER")
        >>> merged = loader.process_uploaded_file(text, "local.txt")
    """

    def __init__(
        self,
        cache_store: CacheStore | None = None,
        settings: AirspaceSettings = DEFAULT_SETTINGS,
        deadline_seconds: float | None = None,
    ) -> None:
        """Initialize loader.

        Args:
            cache_store: Store for processed datasets and consolidation
                mappings. Defaults to a private in-memory store.
            settings: Parser and matching settings.
            deadline_seconds: Budget for each consolidation run; on overrun
                the unconsolidated records are returned instead.
        """
        self.cache_store = cache_store if cache_store is not None else MemoryCacheStore()
        self.settings = settings
        self.deadline_seconds = deadline_seconds

    def _deadline(self) -> float | None:
        if self.deadline_seconds is None:
            return None
        return time.monotonic() + self.deadline_seconds

    def process_openair_text(
        self,
        text: str,
        source: AirspaceSource | str,
        metadata: AirspaceMetadata | None = None,
    ) -> list[AirspaceRecord]:
        """Parse, convert and filter one OpenAir document.

        Args:
            text: OpenAir document.
            source: Source the records are attributed to.
            metadata: Provenance to attach to every record.

        Returns:
            Records with valid geometry, in file order.
        """
        source = AirspaceSource.coerce(source)
        parsed = parse_openair_file(
            text,
            source.value,
            arc_points=self.settings.arc_points,
            closure_tolerance_deg=self.settings.closure_tolerance_deg,
        )
        records = convert_to_api_format(parsed, source, self.settings.default_ceiling_ft)
        records = filter_valid_airspaces(records, self.settings.min_polygon_span_deg)
        if metadata is not None:
            records = [record.with_metadata(metadata) for record in records]
        return records

    def _consolidate_routes(self, records: list[AirspaceRecord]) -> list[AirspaceRecord]:
        try:
            return consolidate_rnav_routes(
                records, self.cache_store, self.settings, deadline=self._deadline()
            )
        except ConsolidationTimeoutError:
            logger.warning("RNAV consolidation exceeded %.1fs; using unconsolidated data", self.deadline_seconds)
            return records

    def _consolidate_all(self, records: list[AirspaceRecord]) -> list[AirspaceRecord]:
        try:
            return consolidate_similar_airspaces(records, self.settings, deadline=self._deadline())
        except ConsolidationTimeoutError:
            logger.warning("Consolidation exceeded %.1fs; using unconsolidated data", self.deadline_seconds)
            return records

    def _read_cached_records(self, key: str, source_hash: str | None = None) -> list[AirspaceRecord] | None:
        try:
            entry = self.cache_store.get(key)
            if entry is None:
                return None
            if source_hash is not None and entry.get("sourceHash") != source_hash:
                logger.info("Cached dataset %s is outdated", key)
                return None
            return _records_from_json(entry.get("records"))
        except CacheError as e:
            logger.warning("Ignoring unreadable cached dataset %s: %s", key, e)
            return None

    def _write_cached_records(
        self, key: str, records: Sequence[AirspaceRecord], source_hash: str | None = None
    ) -> None:
        entry: dict[str, Any] = {"records": _records_to_json(records)}
        if source_hash is not None:
            entry["sourceHash"] = source_hash
        try:
            self.cache_store.put(key, entry)
        except CacheError as e:
            logger.warning("Failed to save cached dataset %s: %s", key, e)

    def build_base_dataset(self, sources: Mapping[str, str | None]) -> list[AirspaceRecord]:
        """Process the built-in sources without touching the dataset cache.

        Args:
            sources: Raw OpenAir text per source label; None marks a source
                that could not be fetched and contributes nothing.

        Returns:
            Concatenated, filtered, bounded and route-consolidated records.
        """
        records: list[AirspaceRecord] = []
        for label, text in sources.items():
            if text is None:
                logger.warning("Airspace source %s is missing", label)
                continue
            loaded = self.process_openair_text(text, label)
            logger.info("Loaded %d %s airspace entries", len(loaded), label)
            records.extend(loaded)

        logger.info("Total airspace entries after filtering: %d", len(records))
        records = self._consolidate_routes(attach_bounds(records))
        logger.info("Total airspace entries after consolidation: %d", len(records))
        return records

    def load_base_dataset(
        self,
        sources: Mapping[str, str | None],
        metadata: Mapping[str, AirspaceMetadata] | None = None,
    ) -> list[AirspaceRecord]:
        """Load the built-in dataset, replaying the cached result when current.

        Args:
            sources: Raw OpenAir text per source label (``US``, ``CA``).
            metadata: Provenance per source label. Defaults to
                :func:`built_in_metadata` without file stats.

        Returns:
            Query-ready records with metadata attached by id prefix.
        """
        source_hash = calculate_source_hash(dict(sources))
        records = self._read_cached_records(BASE_DATASET_KEY, source_hash)
        if records is not None:
            logger.info("Using cached concatenated base airspace data (%d entries)", len(records))
        else:
            logger.info("Concatenated data not found or outdated, processing...")
            records = self.build_base_dataset(sources)
            self._write_cached_records(BASE_DATASET_KEY, records, source_hash)

        if metadata is None:
            metadata = {label: built_in_metadata(label) for label in sources if label in BUILT_IN_FILES}
        return [self._attach_source_metadata(record, metadata) for record in records]

    @staticmethod
    def _attach_source_metadata(
        record: AirspaceRecord, metadata: Mapping[str, AirspaceMetadata]
    ) -> AirspaceRecord:
        for label, meta in metadata.items():
            if record.id.startswith(f"{label}-"):
                return record.with_metadata(meta)
        return record

    def process_uploaded_file(
        self, text: str, file_name: str, uploaded_at: str | None = None
    ) -> list[AirspaceRecord]:
        """Process a user-supplied OpenAir file, replaying the cached result.

        Args:
            text: File content.
            file_name: Original file name, kept in metadata.
            uploaded_at: ISO-8601 upload time (defaults to now, UTC).

        Returns:
            Filtered and consolidated ``USER`` records with upload metadata.
        """
        key = f"uploaded-{content_hash(text)}"
        metadata = AirspaceMetadata(
            file_name=file_name,
            file_size=len(text.encode("utf-8")),
            last_modified=uploaded_at or _utc_now_iso(),
            source=UPLOAD_SOURCE_LABEL,
        )

        records = self._read_cached_records(key)
        if records is not None:
            logger.info("Loaded %d cached entries for %s", len(records), file_name)
        else:
            logger.info("Processing uploaded file: %s", file_name)
            records = self.process_openair_text(text, AirspaceSource.USER)
            logger.info("After filtering: %d entries", len(records))
            records = self._consolidate_all(records)
            logger.info("After consolidation: %d entries (simplified)", len(records))
            self._write_cached_records(key, records)

        return [record.with_metadata(metadata) for record in records]
