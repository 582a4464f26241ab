"""Tests for RNAV route consolidation and its cache."""

from dataclasses import replace
from typing import Any

import pytest

from airspacekit.airspaces.cache import ConsolidationCache, MemoryCacheStore
from airspacekit.airspaces.routes import (
    CACHE_KEY,
    RouteConsolidator,
    combined_route_name,
    consolidate_rnav_routes,
    extract_route_id,
    get_route_base_name,
    is_route_airspace,
)
from airspacekit.core.errors import CacheError

NOW = 1_700_000_000.0
DAY = 24 * 60 * 60


class FailingStore(MemoryCacheStore):
    """Store whose reads and writes always fail."""

    def get(self, key: str) -> dict[str, Any] | None:
        raise CacheError("disk on fire")

    def put(self, key: str, value: dict[str, Any]) -> None:
        raise CacheError("disk on fire")


@pytest.fixture
def routes(make_polygon_record):
    """Two matching route segments plus one unrelated airspace."""
    return [
        make_polygon_record("seg-1", name="T601 Fixed RNAV Route", airspace_type="Class E"),
        make_polygon_record("other", lat=45.0, name="Test Class D"),
        make_polygon_record("seg-2", lat=40.001, name="T602 Fixed RNAV Route", airspace_type="Class E"),
    ]


class TestRouteNames:
    """Test route name helpers."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("T601 Fixed RNAV Route", True),
            ("Q100 Airway", True),
            ("Victor Airway V123", True),
            ("Some Fixed Wing Route", True),
            ("Test Class D", False),
        ],
    )
    def test_is_route_airspace(self, make_polygon_record, name: str, expected: bool) -> None:
        """Test route detection by name."""
        assert is_route_airspace(make_polygon_record("x", name=name)) is expected

    def test_is_route_airspace_by_location(self, make_polygon_record) -> None:
        """Test a route named only in its location is still detected."""
        record = replace(make_polygon_record("x", name="Segment 4"), location="T601 Fixed RNAV Route")
        assert is_route_airspace(record)
        assert not is_route_airspace(replace(record, location="Town"))

    def test_extract_and_strip(self) -> None:
        """Test ids are extracted and stripped from names."""
        assert extract_route_id("T601 Fixed RNAV Route") == "T601"
        assert extract_route_id("Fixed RNAV Route") is None
        assert get_route_base_name("T601 Fixed RNAV Route") == "Fixed RNAV Route"
        assert get_route_base_name("J60 J64 Jet Route") == "Jet Route"

    def test_combined_name_sorted(self, make_polygon_record) -> None:
        """Test route ids are sorted in the combined name."""
        segments = [
            make_polygon_record("b", name="T602 Fixed RNAV Route", airspace_type="Class E"),
            make_polygon_record("a", name="T601 Fixed RNAV Route", airspace_type="Class E"),
        ]
        assert combined_route_name(segments, "fallback") == "Class E T601, T602 Fixed RNAV Route"

    def test_combined_name_fallback(self, make_polygon_record) -> None:
        """Test the fallback is used when no member has a route id."""
        segments = [make_polygon_record("a", name="Fixed Route"), make_polygon_record("b", name="Fixed Route")]
        assert combined_route_name(segments, "Fixed Route") == "Fixed Route"


class TestConsolidateRnavRoutes:
    """Test route merging and output order."""

    def test_merges_matching_segments(self, routes) -> None:
        """Test matching segments merge and non-routes come first."""
        result = consolidate_rnav_routes(routes, now=NOW)
        assert [r.id for r in result] == ["other", "merged-seg-1-seg-2"]

        merged = result[1]
        assert merged.notam_number == "Class E T601, T602 Fixed RNAV Route"
        assert merged.message == (
            "Class E: Class E T601, T602 Fixed RNAV Route (0 to 2500 ft) - 2 routes merged"
        )

    def test_no_routes_returns_input(self, make_polygon_record) -> None:
        """Test lists without routes are returned unchanged."""
        records = [make_polygon_record("a"), make_polygon_record("b", lat=40.001)]
        assert consolidate_rnav_routes(records) == records

    def test_different_base_names_stay_apart(self, make_polygon_record) -> None:
        """Test segments with different base names never merge."""
        records = [
            make_polygon_record("a", name="T601 Fixed RNAV Route"),
            make_polygon_record("b", lat=40.001, name="V601 Victor Airway"),
        ]
        assert [r.id for r in consolidate_rnav_routes(records)] == ["a", "b"]

    def test_distant_segments_stay_apart(self, make_polygon_record) -> None:
        """Test segments with the same base name but far apart stay separate."""
        records = [
            make_polygon_record("a", name="T601 Fixed RNAV Route"),
            make_polygon_record("b", lat=41.0, name="T602 Fixed RNAV Route"),
        ]
        assert [r.id for r in consolidate_rnav_routes(records)] == ["a", "b"]


class TestRouteCache:
    """Test caching and replay of route groups."""

    def test_mapping_saved(self, routes) -> None:
        """Test the computed groups are written to the store."""
        store = MemoryCacheStore()
        consolidate_rnav_routes(routes, cache_store=store, now=NOW)

        entry = ConsolidationCache.from_dict(store.get(CACHE_KEY))
        assert entry.timestamp == NOW
        assert len(entry.mappings) == 1
        assert entry.mappings[0].ids == ("seg-1", "seg-2")
        assert entry.mappings[0].merged_id == "merged-seg-1-seg-2"

    def test_replay_skips_matching(self, routes, make_polygon_record) -> None:
        """Test a valid entry is replayed without re-running geometry matching."""
        store = MemoryCacheStore()
        consolidate_rnav_routes(routes, cache_store=store, now=NOW)

        # Same ids, names and vertex counts hash identically; the second
        # segment now lies far away, so only a replay can merge it.
        moved = [
            routes[0],
            routes[1],
            make_polygon_record("seg-2", lat=43.0, name="T602 Fixed RNAV Route", airspace_type="Class E"),
        ]
        result = consolidate_rnav_routes(moved, cache_store=store, now=NOW + DAY)
        assert [r.id for r in result] == ["other", "merged-seg-1-seg-2"]
        assert result[1].notam_number == "Class E T601, T602 Fixed RNAV Route"

    def test_expired_entry_recomputed(self, routes, make_polygon_record) -> None:
        """Test an entry older than the max age is ignored."""
        store = MemoryCacheStore()
        consolidate_rnav_routes(routes, cache_store=store, now=NOW)

        moved = [
            routes[0],
            make_polygon_record("seg-2", lat=43.0, name="T602 Fixed RNAV Route", airspace_type="Class E"),
        ]
        result = consolidate_rnav_routes(moved, cache_store=store, now=NOW + 8 * DAY)
        assert [r.id for r in result] == ["seg-1", "seg-2"]
        assert ConsolidationCache.from_dict(store.get(CACHE_KEY)).timestamp == NOW + 8 * DAY

    def test_changed_input_recomputed(self, routes) -> None:
        """Test a different input hash ignores the stored groups."""
        store = MemoryCacheStore()
        consolidate_rnav_routes(routes, cache_store=store, now=NOW)

        result = consolidate_rnav_routes(routes[:2], cache_store=store, now=NOW)
        assert [r.id for r in result] == ["other", "seg-1"]

    def test_replay_keeps_unmapped_routes(self, routes, make_polygon_record) -> None:
        """Test routes absent from the mappings follow the merged groups."""
        store = MemoryCacheStore()
        consolidator = RouteConsolidator(store)
        data = routes + [make_polygon_record("seg-3", lat=44.0, name="T603 Fixed RNAV Route")]
        first = consolidator.consolidate(data, now=NOW)
        second = consolidator.consolidate(data, now=NOW)
        assert [r.id for r in first] == [r.id for r in second]
        assert [r.id for r in second] == ["other", "merged-seg-1-seg-2", "seg-3"]

    def test_unreadable_store_degrades(self, routes) -> None:
        """Test read and write failures fall back to a fresh computation."""
        result = RouteConsolidator(FailingStore()).consolidate(routes, now=NOW)
        assert [r.id for r in result] == ["other", "merged-seg-1-seg-2"]

    def test_malformed_entry_ignored(self, routes) -> None:
        """Test a malformed stored entry is treated as a miss."""
        store = MemoryCacheStore()
        store.put(CACHE_KEY, {"mappings": "nonsense"})
        result = consolidate_rnav_routes(routes, cache_store=store, now=NOW)
        assert [r.id for r in result] == ["other", "merged-seg-1-seg-2"]
        assert store.get(CACHE_KEY)["dataHash"]
