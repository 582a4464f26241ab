"""Persistent caches for consolidation results and processed datasets.

Consolidation is the slow part of loading a dataset, so its outcome is
stored as a list of id mappings keyed by a content hash of the input. A
later run over identical input can replay the mappings instead of
re-clustering.

Storage is abstracted behind :class:`CacheStore` so callers can choose an
in-memory store (tests, one-shot CLI runs) or JSON files on disk.

Typical usage:
    from airspacekit.airspaces.cache import JsonFileCacheStore, calculate_data_hash

    store = JsonFileCacheStore("data/cache")
    entry = store.get("rnav-consolidation")
"""

import hashlib
import json
import logging
import os
import re
import tempfile
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from airspacekit.airspaces.model import AirspaceRecord
from airspacekit.core.errors import CacheError

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_MAX_AGE_DAYS = 7.0

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class CacheStore(ABC):
    """Abstract key/value store for JSON-compatible cache entries.

    Examples:
        >>> class DictStore(CacheStore):
        ...     def get(self, key): ...
        ...     def put(self, key, value): ...
        ...     def invalidate(self, key): ...
    """

    @abstractmethod
    def get(self, key: str) -> dict[str, Any] | None:
        """Read an entry.

        Args:
            key: Entry key.

        Returns:
            The stored mapping, or None if absent.

        Raises:
            CacheError: If the entry exists but cannot be read.
        """

    @abstractmethod
    def put(self, key: str, value: dict[str, Any]) -> None:
        """Write an entry, replacing any previous value.

        Raises:
            CacheError: If the entry cannot be written.
        """

    @abstractmethod
    def invalidate(self, key: str) -> None:
        """Remove an entry if present."""


class MemoryCacheStore(CacheStore):
    """Process-local store backed by a dict."""

    def __init__(self) -> None:
        self.entries: dict[str, dict[str, Any]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        return self.entries.get(key)

    def put(self, key: str, value: dict[str, Any]) -> None:
        self.entries[key] = value

    def invalidate(self, key: str) -> None:
        self.entries.pop(key, None)


class JsonFileCacheStore(CacheStore):
    """Store that keeps one JSON file per key in a directory.

    Writes go to a temporary file first and are moved into place, so a
    reader never sees a partially written entry.

    Examples:
        >>> store = JsonFileCacheStore("/tmp/airspace-cache")
        >>> store.put("rnav-consolidation", {"dataHash": "abc"})
        >>> store.get("rnav-consolidation")["dataHash"]
        'abc'
    """

    def __init__(self, directory: str | Path) -> None:
        """Initialize store.

        Args:
            directory: Directory holding the entry files; created on first write.
        """
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise CacheError(f"Invalid cache key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CacheError(f"Failed to read cache entry {path}: {e}") from e
        if not isinstance(data, dict):
            raise CacheError(f"Cache entry {path} is not a JSON object")
        return data

    def put(self, key: str, value: dict[str, Any]) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise CacheError(f"Failed to write cache entry {path}: {e}") from e
        logger.debug("Wrote cache entry %s", path)

    def invalidate(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise CacheError(f"Failed to remove cache entry {path}: {e}") from e


@dataclass(frozen=True)
class ConsolidationMapping:
    """One merged group: the member ids and the record that replaced them."""

    ids: tuple[str, ...]
    merged_id: str
    merged_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"ids": list(self.ids), "mergedId": self.merged_id, "mergedName": self.merged_name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConsolidationMapping":
        return cls(
            ids=tuple(str(i) for i in data["ids"]),
            merged_id=str(data["mergedId"]),
            merged_name=str(data["mergedName"]),
        )


@dataclass(frozen=True)
class ConsolidationCache:
    """Stored outcome of a consolidation run.

    Attributes:
        data_hash: Hash of the input records (see :func:`calculate_data_hash`).
        mappings: Merged groups, in output order.
        timestamp: Creation time, seconds since the epoch.
    """

    data_hash: str
    mappings: tuple[ConsolidationMapping, ...] = field(default_factory=tuple)
    timestamp: float = 0.0

    def is_expired(self, max_age_days: float = DEFAULT_MAX_AGE_DAYS, now: float | None = None) -> bool:
        """Check whether the entry is older than ``max_age_days``."""
        current = time.time() if now is None else now
        return current - self.timestamp > max_age_days * SECONDS_PER_DAY

    def is_valid_for(
        self, data_hash: str, max_age_days: float = DEFAULT_MAX_AGE_DAYS, now: float | None = None
    ) -> bool:
        """Check the entry matches ``data_hash`` and has not expired."""
        return self.data_hash == data_hash and not self.is_expired(max_age_days, now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dataHash": self.data_hash,
            "mappings": [m.to_dict() for m in self.mappings],
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConsolidationCache":
        """Rebuild an entry from its stored form.

        Raises:
            CacheError: If the stored form is malformed.
        """
        try:
            return cls(
                data_hash=str(data["dataHash"]),
                mappings=tuple(ConsolidationMapping.from_dict(m) for m in data.get("mappings", [])),
                timestamp=float(data.get("timestamp", 0.0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CacheError(f"Malformed consolidation cache entry: {e}") from e


def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def calculate_data_hash(records: Iterable[AirspaceRecord]) -> str:
    """Hash the identity-relevant fields of a record list.

    Covers id, type, name, altitude band, polygon vertex count and whether
    the record is a circle. Two lists that hash equal consolidate to the
    same groups.
    """
    summary = []
    for record in records:
        polygon = record.polygon
        summary.append(
            {
                "id": record.id,
                "type": record.type,
                "notamNumber": record.notam_number,
                "altitude": record.altitude.to_dict() if record.altitude else None,
                "polygonLength": len(polygon) if polygon else 0,
                "hasRadius": bool(record.radius),
            }
        )
    return _sha256(json.dumps(summary, sort_keys=True, separators=(",", ":")))


def calculate_source_hash(sources: dict[str, str | None]) -> str:
    """Hash raw source texts keyed by label; a missing source hashes as such."""
    parts = [f"{label}:{text if text is not None else 'missing'}" for label, text in sources.items()]
    return _sha256("\n".join(parts))


def content_hash(text: str) -> str:
    """Hash one file's content, used to key uploaded-file results."""
    return _sha256(text)
