"""Configuration loader and tunable settings.

Settings are read from YAML files with dot-notation access. The
``airspace`` section maps onto :class:`AirspaceSettings`, which carries the
thresholds used by the parser, the geometry matchers and the consolidation
cache.

Typical usage example:
    from airspacekit.core.config import AirspaceSettings, ConfigLoader

    config = ConfigLoader.load("config/airspacekit.yaml")
    settings = AirspaceSettings.from_config(config)
    print(settings.match_distance_deg)
"""

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from airspacekit.core.errors import ConfigError

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Dot-addressable view over an airspacekit YAML settings file.

    Examples:
        >>> config = ConfigLoader.load("config/airspacekit.yaml")
        >>> max_age = config.get("airspace.cache_max_age_days", default=7)
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data if data is not None else {}

    @classmethod
    def load(cls, path: str | Path) -> "ConfigLoader":
        """Read settings from ``path``.

        An empty file yields an empty configuration.

        Raises:
            ConfigError: The file is missing, is not valid YAML, or its
                top level is not a mapping.
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Settings file does not exist: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read settings from {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")

        logger.info("Settings read from %s", path)
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``"airspace.arc_points"``.

        Returns ``default`` as soon as a path segment is missing or the
        value above it is not a mapping.
        """
        node: Any = self._data

        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]

        return node

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under a dotted key, creating sections on the way."""
        *parents, leaf = key.split(".")
        node = self._data

        for part in parents:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]

        node[leaf] = value

    def get_section(self, key: str) -> dict[str, Any]:
        """Return the mapping stored under a dotted key.

        Raises:
            ConfigError: Nothing is stored under ``key`` or the value is a scalar.
        """
        section = self.get(key)

        if section is None:
            raise ConfigError(f"No settings section named {key!r}")
        if not isinstance(section, dict):
            raise ConfigError(f"Settings key {key!r} holds a scalar, not a section")

        return section

    def save(self, path: str | Path) -> None:
        """Write the current settings back to YAML, keeping key order.

        Raises:
            ConfigError: The file could not be written.
        """
        path = Path(path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(self._data, f, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not write settings to {path}: {e}") from e

        logger.info("Settings written to %s", path)

    def to_dict(self) -> dict[str, Any]:
        """Shallow copy of the underlying mapping."""
        return self._data.copy()


@dataclass
class AirspaceSettings:
    """Tunable thresholds for parsing, matching and caching.

    Attributes:
        arc_points: Number of segments used when sampling DB/DA arcs.
        closure_tolerance_deg: Max gap between first and last vertex before
            the parser re-appends the first vertex to close a ring.
        min_polygon_span_deg: Minimum bounding-box span (in at least one axis)
            for a polygon to be considered valid (~100 m).
        default_ceiling_ft: Ceiling used when the AH text is absent or unparseable.
        match_distance_deg: Max centroid (or circle center) separation for two
            shapes to be considered the same (~0.5 NM).
        vertex_count_tolerance: Max relative vertex count difference for
            polygon matching.
        bbox_tolerance: Max relative bounding-box width/height difference for
            polygon matching (exclusive).
        radius_tolerance: Max relative radius difference for circle matching
            (exclusive).
        cache_max_age_days: Age after which a consolidation cache entry expires.
        cache_dir: Directory used by the file-backed cache store.
        use_spatial_index: Prune consolidation candidate pairs with a grid index.
    """

    arc_points: int = 30
    closure_tolerance_deg: float = 0.0001
    min_polygon_span_deg: float = 0.0009
    default_ceiling_ft: int = 18000
    match_distance_deg: float = 0.008
    vertex_count_tolerance: float = 0.2
    bbox_tolerance: float = 0.1
    radius_tolerance: float = 0.05
    cache_max_age_days: float = 7.0
    cache_dir: str = "data/cache"
    use_spatial_index: bool = True

    @classmethod
    def from_config(cls, config: ConfigLoader, section: str = "airspace") -> "AirspaceSettings":
        """Build settings from the given configuration section.

        Missing keys keep their defaults; unknown keys are logged and ignored.

        Args:
            config: Loaded configuration.
            section: Name of the section holding airspace settings.

        Returns:
            Populated settings.

        Raises:
            ConfigError: If a value cannot be coerced to the field's type.
        """
        values = config.get(section, default={}) or {}
        if not isinstance(values, dict):
            raise ConfigError(f"Configuration key is not a section: {section}")

        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            if key not in known:
                logger.warning("Ignoring unknown airspace setting: %s", key)
                continue
            default = getattr(cls, key)
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    raise ConfigError(f"Invalid value for {section}.{key}: {value!r}")
                kwargs[key] = value
                continue
            try:
                kwargs[key] = type(default)(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for {section}.{key}: {value!r}") from e

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return settings as a plain dictionary."""
        return asdict(self)


DEFAULT_SETTINGS = AirspaceSettings()
