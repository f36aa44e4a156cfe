"""
Frontier detection and clustering.

Identifies boundaries between known-free and unknown space in the occupancy
grid and turns them into an ordered FrontierMap in world coordinates.
"""
from typing import List, Optional, Tuple
import numpy as np
from scipy import ndimage

from drobot_exploration.config import Config
from drobot_exploration.types import Frontier, FrontierMap, MapInfo
from drobot_exploration import utils

# 8-connected clusters
_CLUSTER_STRUCTURE = np.ones((3, 3), dtype=bool)


class FrontierDetector:
    """Detects and clusters frontier cells in occupancy grids."""

    def __init__(
        self,
        min_frontier_size: int = Config.MIN_FRONTIER_SIZE,
        lethal_cost: int = Config.LETHAL_COST
    ):
        """
        Initialize frontier detector.

        Args:
            min_frontier_size: Minimum cluster size to keep (cells)
            lethal_cost: Costmap value at which frontier cells are dropped
        """
        self.min_frontier_size = min_frontier_size
        self.lethal_cost = lethal_cost

    def find_frontiers(self, map_info: MapInfo, costmap: Optional[MapInfo] = None) -> np.ndarray:
        """
        Find frontier cells in the occupancy grid.

        Frontiers are free cells 4-adjacent to unknown cells. Cells that are
        lethal in the costmap are removed.

        Args:
            map_info: Map data and metadata
            costmap: Optional costmap used to drop unreachable cells

        Returns:
            Array of (row, col) frontier cell indices
        """
        if not map_info.is_valid():
            return np.empty((0, 2), dtype=int)

        map_data = map_info.data
        free = (map_data == 0)
        unknown = (map_data == -1)

        unknown_dilated = ndimage.binary_dilation(unknown, iterations=1)
        frontier_mask = free & unknown_dilated

        cells = np.argwhere(frontier_mask)
        if costmap is not None and costmap.is_valid() and len(cells) > 0:
            cells = cells[~self._lethal_mask(cells, map_info, costmap)]
        return cells

    def _lethal_mask(self, cells: np.ndarray, map_info: MapInfo, costmap: MapInfo) -> np.ndarray:
        """Mark cells whose costmap value is lethal; cells off the costmap are kept."""
        cost_cells = utils.world_to_cells(utils.cells_to_world(cells, map_info), costmap)
        rows, cols = cost_cells[:, 0], cost_cells[:, 1]
        inside = (rows >= 0) & (rows < costmap.height) & (cols >= 0) & (cols < costmap.width)

        lethal = np.zeros(len(cells), dtype=bool)
        lethal[inside] = costmap.data[rows[inside], cols[inside]] >= self.lethal_cost
        return lethal

    def cluster_frontiers(
        self,
        frontier_cells: np.ndarray,
        map_shape: Tuple[int, int]
    ) -> List[np.ndarray]:
        """
        Group frontier cells into connected clusters.

        Args:
            frontier_cells: Array of (row, col) frontier indices
            map_shape: (height, width) of the map

        Returns:
            One (row, col) array per cluster, largest first
        """
        if len(frontier_cells) == 0:
            return []

        frontier_mask = np.zeros(map_shape, dtype=bool)
        frontier_mask[frontier_cells[:, 0], frontier_cells[:, 1]] = True

        labeled, num_features = ndimage.label(frontier_mask, structure=_CLUSTER_STRUCTURE)

        clusters = []
        for i in range(1, num_features + 1):
            cells = np.argwhere(labeled == i)
            if len(cells) >= self.min_frontier_size:
                clusters.append(cells)

        # Stable sort keeps scan order between equal sizes
        clusters.sort(key=len, reverse=True)
        return clusters

    def detect(self, map_info: MapInfo, costmap: Optional[MapInfo] = None) -> FrontierMap:
        """
        Build the frontier snapshot of a map.

        Args:
            map_info: Occupancy grid
            costmap: Optional costmap

        Returns:
            FrontierMap with boundary points in world coordinates
        """
        cells = self.find_frontiers(map_info, costmap)
        clusters = self.cluster_frontiers(cells, (map_info.height, map_info.width))
        return FrontierMap(
            tuple(
                Frontier(tuple(map(tuple, utils.cells_to_world(cluster, map_info))))
                for cluster in clusters
            ),
            stamp=map_info.stamp,
        )
