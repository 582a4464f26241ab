"""Consolidation of near-duplicate airspace records.

Overlapping source files often describe the same real airspace several
times. Consolidation buckets records by ``(type, floor, ceiling)``, finds
connected components of the pairwise match relation inside each bucket and
merges every multi-member component into a single new record.

The component search is the dominant cost of the whole pipeline (O(n^2) per
bucket). When ``use_spatial_index`` is enabled, a grid index over polygon
centroids and circle centers prunes candidate pairs that cannot be within
the match distance. The pruned search visits the same candidates in the same
order as the exhaustive scan, so both produce identical output.

Typical usage:
    from airspacekit.airspaces.consolidation import consolidate_similar_airspaces

    merged = consolidate_similar_airspaces(records)
"""

import heapq
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace

from airspacekit.airspaces.matching import AirspaceMatcher
from airspacekit.airspaces.model import DEFAULT_CEILING_FT, AirspaceRecord
from airspacekit.airspaces.spatial_index import GridIndex
from airspacekit.core.config import DEFAULT_SETTINGS, AirspaceSettings
from airspacekit.core.errors import ConsolidationTimeoutError

logger = logging.getLogger(__name__)

MAX_MERGED_ID_LENGTH = 100

MatchPredicate = Callable[[AirspaceRecord, AirspaceRecord], bool]


def bucket_key(record: AirspaceRecord) -> tuple[str, int, int]:
    """Exact-match grouping key; only records sharing it can merge."""
    altitude = record.altitude
    floor = altitude.floor if altitude else 0
    ceiling = altitude.ceiling if altitude else 0
    return record.type, floor or 0, ceiling or 0


def merged_id(cluster: Sequence[AirspaceRecord]) -> str:
    """Synthetic id for a merged cluster, truncated after the prefix."""
    return "merged-" + "-".join(r.id for r in cluster)[:MAX_MERGED_ID_LENGTH]


def altitude_text(record: AirspaceRecord) -> str:
    """``"<floor> to <ceiling> ft"`` summary used in merged messages."""
    altitude = record.altitude
    floor = altitude.floor if altitude and altitude.floor else 0
    ceiling = altitude.ceiling if altitude and altitude.ceiling else DEFAULT_CEILING_FT
    return f"{floor} to {ceiling} ft"


def merge_cluster(cluster: Sequence[AirspaceRecord]) -> AirspaceRecord:
    """Merge a multi-member cluster into one new record.

    All fields come from the first member except the id, the names and the
    message. Names are de-duplicated in cluster order; several distinct
    names are prefixed with the airspace type.

    Args:
        cluster: Records to merge (at least two).

    Returns:
        New merged record; the inputs are not modified.
    """
    first = cluster[0]
    names: list[str] = []
    for record in cluster:
        name = record.notam_number or record.location
        if name not in names:
            names.append(name)

    if len(names) > 1:
        merged_name = f"{first.type}: {', '.join(names)}"
    else:
        merged_name = names[0] or first.notam_number or first.location

    return replace(
        first,
        id=merged_id(cluster),
        notam_number=merged_name,
        location=merged_name,
        message=(
            f"{first.type}: {merged_name} ({altitude_text(first)}) - "
            f"{len(cluster)} airspaces merged"
        ),
    )


class ClusterFinder:
    """Connected-components search over an approximate match relation.

    For each unprocessed seed record, repeatedly scans the remaining records
    in index order and adds any that match a current cluster member, until a
    full pass adds nothing (transitive closure of pairwise matches).

    Examples:
        >>> finder = ClusterFinder(AirspaceMatcher())
        >>> clusters = finder.find_clusters(records, finder.matcher.matches)
        >>> [len(c) for c in clusters]
        [2, 1]
    """

    def __init__(
        self,
        matcher: AirspaceMatcher,
        use_spatial_index: bool = True,
        deadline: float | None = None,
    ) -> None:
        """Initialize the finder.

        Args:
            matcher: Matcher providing anchors and thresholds.
            use_spatial_index: Prune candidate pairs with a grid index.
            deadline: ``time.monotonic()`` value after which the search aborts.
        """
        self.matcher = matcher
        self.use_spatial_index = use_spatial_index
        self.deadline = deadline
        self.comparisons = 0

    def _check_deadline(self) -> None:
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise ConsolidationTimeoutError("Consolidation exceeded its deadline")

    def find_clusters(
        self, records: Sequence[AirspaceRecord], predicate: MatchPredicate
    ) -> list[list[AirspaceRecord]]:
        """Partition records into clusters of mutually reachable matches.

        Args:
            records: Records of one bucket.
            predicate: Pairwise match test; must only accept pairs whose
                anchors are within the matcher's match distance when the
                spatial index is enabled.

        Returns:
            Clusters in seed order; members in the order they were added.

        Raises:
            ConsolidationTimeoutError: If the deadline passes mid-search.
        """
        if len(records) < 2:
            return [list(records)]

        if self.use_spatial_index:
            index_clusters = self._indexed_clusters(records, predicate)
        else:
            index_clusters = self._exhaustive_clusters(records, predicate)
        return [[records[i] for i in cluster] for cluster in index_clusters]

    def _matches_cluster(
        self,
        records: Sequence[AirspaceRecord],
        cluster: list[int],
        candidate: int,
        predicate: MatchPredicate,
    ) -> bool:
        for member in cluster:
            self.comparisons += 1
            if predicate(records[member], records[candidate]):
                return True
        return False

    def _exhaustive_clusters(
        self, records: Sequence[AirspaceRecord], predicate: MatchPredicate
    ) -> list[list[int]]:
        processed: set[int] = set()
        clusters: list[list[int]] = []

        for seed in range(len(records)):
            if seed in processed:
                continue
            self._check_deadline()

            cluster = [seed]
            processed.add(seed)
            found_new = True
            while found_new:
                found_new = False
                for j in range(len(records)):
                    if j in processed:
                        continue
                    if self._matches_cluster(records, cluster, j, predicate):
                        cluster.append(j)
                        processed.add(j)
                        found_new = True
            clusters.append(cluster)

        return clusters

    def _build_neighbours(self, records: Sequence[AirspaceRecord]) -> list[list[int]]:
        distance = self.matcher.settings.match_distance_deg
        index: GridIndex[int] = GridIndex(cell_size_deg=distance)
        anchors = [self.matcher.anchor(r) for r in records]

        for i, anchor in enumerate(anchors):
            if anchor is not None:
                index.insert(anchor[0], anchor[1], i)

        neighbours: list[list[int]] = []
        for i, anchor in enumerate(anchors):
            if anchor is None:
                neighbours.append([])
                continue
            neighbours.append(
                sorted(j for j in index.query_box(anchor[0], anchor[1], distance) if j != i)
            )
        return neighbours

    def _indexed_clusters(
        self, records: Sequence[AirspaceRecord], predicate: MatchPredicate
    ) -> list[list[int]]:
        neighbours = self._build_neighbours(records)
        processed: set[int] = set()
        clusters: list[list[int]] = []

        for seed in range(len(records)):
            if seed in processed:
                continue
            self._check_deadline()

            cluster = [seed]
            processed.add(seed)
            found_new = True
            while found_new:
                found_new = False
                # One pass: visit candidates in ascending order, admitting
                # neighbours of new members only ahead of the current position.
                queued = {j for member in cluster for j in neighbours[member] if j not in processed}
                heap = list(queued)
                heapq.heapify(heap)
                while heap:
                    j = heapq.heappop(heap)
                    if j in processed:
                        continue
                    if self._matches_cluster(records, cluster, j, predicate):
                        cluster.append(j)
                        processed.add(j)
                        found_new = True
                        for k in neighbours[j]:
                            if k > j and k not in processed and k not in queued:
                                queued.add(k)
                                heapq.heappush(heap, k)
            clusters.append(cluster)

        return clusters


class AirspaceConsolidator:
    """General consolidation over all airspace types.

    Examples:
        >>> consolidator = AirspaceConsolidator()
        >>> merged = consolidator.consolidate(records)
    """

    def __init__(self, settings: AirspaceSettings = DEFAULT_SETTINGS) -> None:
        """Initialize consolidator.

        Args:
            settings: Matching thresholds and index toggle.
        """
        self.settings = settings
        self.matcher = AirspaceMatcher(settings)

    def consolidate(
        self, records: Sequence[AirspaceRecord], deadline: float | None = None
    ) -> list[AirspaceRecord]:
        """Merge near-duplicate records.

        Args:
            records: Records to consolidate.
            deadline: Optional ``time.monotonic()`` cutoff.

        Returns:
            Singletons unchanged and one merged record per multi-member
            cluster, bucket by bucket in first-appearance order.

        Raises:
            ConsolidationTimeoutError: If the deadline passes.
        """
        if not records:
            return []

        logger.info("Consolidating similar airspaces from %d entries...", len(records))

        buckets: dict[tuple[str, int, int], list[AirspaceRecord]] = {}
        for record in records:
            buckets.setdefault(bucket_key(record), []).append(record)

        finder = ClusterFinder(self.matcher, self.settings.use_spatial_index, deadline)
        consolidated: list[AirspaceRecord] = []
        total_merged = 0

        for group in buckets.values():
            if len(group) == 1:
                consolidated.append(group[0])
                continue

            for cluster in finder.find_clusters(group, self.matcher.matches):
                if len(cluster) == 1:
                    consolidated.append(cluster[0])
                else:
                    total_merged += len(cluster) - 1
                    consolidated.append(merge_cluster(cluster))

        logger.info(
            "Consolidated %d airspaces into %d (merged %d duplicates, %d comparisons)",
            len(records),
            len(consolidated),
            total_merged,
            finder.comparisons,
        )
        return consolidated


def consolidate_similar_airspaces(
    records: Sequence[AirspaceRecord],
    settings: AirspaceSettings = DEFAULT_SETTINGS,
    deadline: float | None = None,
) -> list[AirspaceRecord]:
    """Collapse near-duplicate records into merged records.

    Args:
        records: Records to consolidate.
        settings: Matching thresholds.
        deadline: Optional ``time.monotonic()`` cutoff.

    Returns:
        Consolidated records. Empty input returns an empty list.

    Raises:
        ConsolidationTimeoutError: If the deadline passes.
    """
    return AirspaceConsolidator(settings).consolidate(records, deadline)
