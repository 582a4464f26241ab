"""Grid-based spatial index over lat/lon anchor points.

Divides the plane into square cells of ``cell_size_deg`` and buckets items
by the cell of their anchor point. Used to prune candidate pairs before the
comparatively expensive similarity predicate during consolidation: with a
cell size at least as large as the match distance, every pair within that
distance lies in the same or an adjacent cell.

Typical usage:
    from airspacekit.airspaces.spatial_index import GridIndex

    index = GridIndex(cell_size_deg=0.008)
    index.insert(40.0, -100.0, 0)
    candidates = index.query_box(40.0, -100.0, 0.008)
"""

import logging
import math
from collections import defaultdict
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GridIndex(Generic[T]):
    """Uniform grid keyed by (latitude, longitude) cells.

    Performance:
        - Insert: O(1)
        - Query box: O(k) where k = items in cells overlapping the box

    Examples:
        >>> index = GridIndex(cell_size_deg=1.0)
        >>> index.insert(37.5, -122.0, "KPAO")
        >>> index.query_box(37.5, -122.0, 0.5)
        ['KPAO']
    """

    def __init__(self, cell_size_deg: float = 1.0) -> None:
        """Initialize spatial index.

        Args:
            cell_size_deg: Size of grid cells in degrees.

        Raises:
            ValueError: If the cell size is not positive.
        """
        if cell_size_deg <= 0:
            raise ValueError(f"cell_size_deg must be positive, got {cell_size_deg}")
        self.cell_size_deg = cell_size_deg
        self.grid: dict[tuple[int, int], list[T]] = defaultdict(list)
        self.item_count = 0

    def _get_cell(self, latitude: float, longitude: float) -> tuple[int, int]:
        return (
            int(math.floor(latitude / self.cell_size_deg)),
            int(math.floor(longitude / self.cell_size_deg)),
        )

    def insert(self, latitude: float, longitude: float, data: T) -> None:
        """Insert an item at the given anchor point."""
        self.grid[self._get_cell(latitude, longitude)].append(data)
        self.item_count += 1

    def query_box(self, latitude: float, longitude: float, delta_deg: float) -> list[T]:
        """Return items whose cells overlap the box ``point +/- delta_deg``.

        The result is a superset of the items within ``delta_deg`` on both
        axes; callers apply their own exact test.
        """
        lat_min, lon_min = self._get_cell(latitude - delta_deg, longitude - delta_deg)
        lat_max, lon_max = self._get_cell(latitude + delta_deg, longitude + delta_deg)

        results: list[T] = []
        for cell_lat in range(lat_min, lat_max + 1):
            for cell_lon in range(lon_min, lon_max + 1):
                items = self.grid.get((cell_lat, cell_lon))
                if items:
                    results.extend(items)
        return results

    def get_item_count(self) -> int:
        """Get total number of items in the index."""
        return self.item_count

    def get_cell_count(self) -> int:
        """Get number of non-empty cells."""
        return len(self.grid)

    def clear(self) -> None:
        """Remove all items from the index."""
        self.grid.clear()
        self.item_count = 0
