"""Consolidation of segmented RNAV and airway route airspaces.

Published route airspaces are split into many short segments, often one per
route id ("T601 Fixed RNAV Route", "T602 Fixed RNAV Route", ...). Segments
with the same type, altitude band and base name (the name with route ids
stripped) whose polygons match are merged into one record named after all
of their route ids.

Matching is the expensive step, so the resulting groups are stored in a
:class:`~airspacekit.airspaces.cache.CacheStore` keyed by a hash of the
route records and replayed on later runs over the same input.

Typical usage:
    from airspacekit.airspaces.routes import consolidate_rnav_routes

    records = consolidate_rnav_routes(records, cache_store=store)
"""

import logging
import re
import time
from collections.abc import Sequence
from dataclasses import replace

from airspacekit.airspaces.cache import (
    CacheStore,
    ConsolidationCache,
    ConsolidationMapping,
    calculate_data_hash,
)
from airspacekit.airspaces.consolidation import ClusterFinder, altitude_text, bucket_key, merged_id
from airspacekit.airspaces.matching import AirspaceMatcher
from airspacekit.airspaces.model import AirspaceRecord
from airspacekit.core.config import DEFAULT_SETTINGS, AirspaceSettings
from airspacekit.core.errors import CacheError

logger = logging.getLogger(__name__)

CACHE_KEY = "rnav-consolidation"

RNAV_PATTERN = re.compile(r"RNAV|Fixed.*Route|T\d{3}|Q\d{3}|V\d{3}|J\d{3}", re.IGNORECASE)
ROUTE_ID_PATTERN = re.compile(r"([A-Z]\d+)", re.IGNORECASE)
ROUTE_ID_STRIP_PATTERN = re.compile(r"[A-Z]\d+\s*", re.IGNORECASE)


def is_route_airspace(record: AirspaceRecord) -> bool:
    """Check whether a record's name or location looks like an RNAV or airway route."""
    return bool(RNAV_PATTERN.search(record.notam_number) or RNAV_PATTERN.search(record.location))


def extract_route_id(name: str) -> str | None:
    """Return the first route id in a name, e.g. ``"T601"``.

    Examples:
        >>> extract_route_id("T601 Fixed RNAV Route")
        'T601'
        >>> extract_route_id("Fixed Route") is None
        True
    """
    match = ROUTE_ID_PATTERN.search(name)
    return match.group(1) if match else None


def get_route_base_name(name: str) -> str:
    """Strip all route ids from a name.

    Examples:
        >>> get_route_base_name("T601 Fixed RNAV Route")
        'Fixed RNAV Route'
    """
    return ROUTE_ID_STRIP_PATTERN.sub("", name).strip()


def route_group_key(record: AirspaceRecord) -> tuple[str, int, int, str]:
    """Grouping key: type, altitude band and base name."""
    return (*bucket_key(record), get_route_base_name(record.notam_number))


def combined_route_name(routes: Sequence[AirspaceRecord], fallback: str) -> str:
    """Name for merged routes, e.g. ``"Other T601, T602 Fixed RNAV Route"``.

    Args:
        routes: Merged route records.
        fallback: Name used when no member carries a route id.
    """
    route_ids = sorted(
        route_id for route_id in (extract_route_id(r.notam_number) for r in routes) if route_id
    )
    if not route_ids:
        return fallback
    first = routes[0]
    return f"{first.type} {', '.join(route_ids)} {get_route_base_name(first.notam_number)}"


def merge_routes(routes: Sequence[AirspaceRecord], record_id: str, name: str) -> AirspaceRecord:
    """Build the merged record for a group of route segments."""
    first = routes[0]
    return replace(
        first,
        id=record_id,
        notam_number=name,
        location=name,
        message=f"{first.type}: {name} ({altitude_text(first)}) - {len(routes)} routes merged",
    )


class RouteConsolidator:
    """Route-specific consolidation with replayable results.

    Examples:
        >>> consolidator = RouteConsolidator(cache_store=MemoryCacheStore())
        >>> merged = consolidator.consolidate(records)
    """

    def __init__(
        self,
        cache_store: CacheStore | None = None,
        settings: AirspaceSettings = DEFAULT_SETTINGS,
    ) -> None:
        """Initialize consolidator.

        Args:
            cache_store: Where group mappings are persisted; None disables caching.
            settings: Matching thresholds and cache lifetime.
        """
        self.cache_store = cache_store
        self.settings = settings
        self.matcher = AirspaceMatcher(settings)

    def consolidate(
        self,
        records: Sequence[AirspaceRecord],
        now: float | None = None,
        deadline: float | None = None,
    ) -> list[AirspaceRecord]:
        """Merge matching route segments.

        Args:
            records: All records; only route airspaces are considered.
            now: Current time in epoch seconds (defaults to ``time.time()``).
            deadline: Optional ``time.monotonic()`` cutoff for matching.

        Returns:
            Non-route records in input order, followed by the consolidated
            routes.

        Raises:
            ConsolidationTimeoutError: If matching runs past the deadline.
        """
        routes = [r for r in records if is_route_airspace(r)]
        if not routes:
            return list(records)
        others = [r for r in records if not is_route_airspace(r)]
        current = time.time() if now is None else now

        data_hash = calculate_data_hash(routes)
        cached = self._load_cache()
        if cached is not None and cached.is_valid_for(data_hash, self.settings.cache_max_age_days, current):
            logger.info("Using cached consolidation mappings (%d groups)", len(cached.mappings))
            consolidated = self._replay(routes, cached)
            logger.info(
                "Consolidated %d RNAV routes into %d (from cache)", len(routes), len(consolidated)
            )
            return others + consolidated

        logger.info("Performing geometry matching for RNAV consolidation...")
        consolidated, mappings = self._match(routes, deadline)
        self._save_cache(ConsolidationCache(data_hash, tuple(mappings), current))
        logger.info("Consolidated %d RNAV routes into %d", len(routes), len(consolidated))
        return others + consolidated

    def _match(
        self, routes: list[AirspaceRecord], deadline: float | None
    ) -> tuple[list[AirspaceRecord], list[ConsolidationMapping]]:
        groups: dict[tuple[str, int, int, str], list[AirspaceRecord]] = {}
        for route in routes:
            groups.setdefault(route_group_key(route), []).append(route)

        finder = ClusterFinder(self.matcher, self.settings.use_spatial_index, deadline)
        consolidated: list[AirspaceRecord] = []
        mappings: list[ConsolidationMapping] = []

        for group in groups.values():
            if len(group) == 1:
                consolidated.append(group[0])
                continue

            for cluster in finder.find_clusters(group, self.matcher.polygons_match):
                if len(cluster) == 1:
                    consolidated.append(cluster[0])
                    continue
                name = combined_route_name(cluster, cluster[0].notam_number)
                record_id = merged_id(cluster)
                consolidated.append(merge_routes(cluster, record_id, name))
                mappings.append(ConsolidationMapping(tuple(r.id for r in cluster), record_id, name))

        return consolidated, mappings

    def _replay(self, routes: list[AirspaceRecord], cached: ConsolidationCache) -> list[AirspaceRecord]:
        by_id = {route.id: route for route in routes}
        consolidated: list[AirspaceRecord] = []
        seen: set[str] = set()

        for mapping in cached.mappings:
            members = [by_id[i] for i in mapping.ids if i in by_id]
            if not members:
                continue
            seen.update(r.id for r in members)
            if len(members) == 1:
                consolidated.append(members[0])
            else:
                name = combined_route_name(members, mapping.merged_name)
                consolidated.append(merge_routes(members, mapping.merged_id, name))

        consolidated.extend(r for r in routes if r.id not in seen)
        return consolidated

    def _load_cache(self) -> ConsolidationCache | None:
        if self.cache_store is None:
            return None
        try:
            data = self.cache_store.get(CACHE_KEY)
            if data is None:
                return None
            return ConsolidationCache.from_dict(data)
        except CacheError as e:
            logger.warning("Ignoring unreadable consolidation cache: %s", e)
            return None

    def _save_cache(self, entry: ConsolidationCache) -> None:
        if self.cache_store is None:
            return
        try:
            self.cache_store.put(CACHE_KEY, entry.to_dict())
        except CacheError as e:
            logger.warning("Failed to save consolidation cache: %s", e)


def consolidate_rnav_routes(
    records: Sequence[AirspaceRecord],
    cache_store: CacheStore | None = None,
    settings: AirspaceSettings = DEFAULT_SETTINGS,
    now: float | None = None,
    deadline: float | None = None,
) -> list[AirspaceRecord]:
    """Merge segmented route airspaces, replaying cached groups when valid.

    Args:
        records: Records to process.
        cache_store: Optional store for group mappings.
        settings: Matching thresholds and cache lifetime.
        now: Current time in epoch seconds.
        deadline: Optional ``time.monotonic()`` cutoff.

    Returns:
        Non-route records followed by consolidated routes.
    """
    return RouteConsolidator(cache_store, settings).consolidate(records, now, deadline)
