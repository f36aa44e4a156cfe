"""
Map service.

Turns occupancy grid updates into frontier snapshots, hands them to the
subscribed callbacks and keeps the consume-once "new map" flag read by the
controller loop.
"""
from typing import Callable, List, Optional
import threading

from drobot_exploration.frontier import FrontierDetector
from drobot_exploration.types import FrontierMap, MapInfo

FrontierCallback = Callable[[FrontierMap], None]


class MapService:
    """Frontier snapshot holder with a consume-once new-map flag."""

    def __init__(
        self,
        detector: Optional[FrontierDetector] = None,
        logger: Optional[Callable] = None
    ):
        """
        Initialize map service.

        Args:
            detector: Frontier detector applied to each grid update
            logger: Optional logger function
        """
        self.detector = detector or FrontierDetector()
        self.logger = logger or (lambda msg: None)

        self.map_topic: Optional[str] = None
        self.costmap_topic: Optional[str] = None
        self.maps_received = 0

        # Guards snapshot, costmap and flag for multi-threaded executors
        self._lock = threading.Lock()
        self._callbacks: List[FrontierCallback] = []
        self._frontier_map = FrontierMap()
        self._costmap: Optional[MapInfo] = None
        self._new_map = False

    # ==================== Subscriptions ====================

    def subscribe_map(self, topic: str, callback: FrontierCallback) -> None:
        """
        Deliver frontier snapshots built from the grid on topic to callback.

        Args:
            topic: Occupancy grid topic
            callback: Called with every new FrontierMap
        """
        self.map_topic = topic
        self._callbacks.append(callback)

    def subscribe_costmap(self, topic: str) -> None:
        """Use the costmap on topic to filter frontier cells."""
        self.costmap_topic = topic

    # ==================== Updates ====================

    def update_map(self, map_info: MapInfo) -> FrontierMap:
        """Extract frontiers from a new occupancy grid and publish them."""
        frontier_map = self.detector.detect(map_info, self.costmap)
        self.update_frontiers(frontier_map)
        return frontier_map

    def update_costmap(self, costmap: MapInfo) -> None:
        with self._lock:
            self._costmap = costmap

    def update_frontiers(self, frontier_map: FrontierMap) -> None:
        """
        Replace the snapshot, notify subscribers, then raise the flag.

        The flag is raised last so a reader that sees it also sees the
        snapshot it refers to.
        """
        with self._lock:
            self._frontier_map = frontier_map
            self.maps_received += 1

        self.logger(f'New map: {len(frontier_map)} frontiers')
        for callback in self._callbacks:
            callback(frontier_map)

        with self._lock:
            self._new_map = True

    # ==================== Consumer Side ====================

    def has_new_map(self) -> bool:
        with self._lock:
            return self._new_map

    def mark_consumed(self) -> None:
        """Clear the new-map flag until the next snapshot arrives."""
        with self._lock:
            self._new_map = False

    @property
    def frontier_map(self) -> FrontierMap:
        with self._lock:
            return self._frontier_map

    @property
    def costmap(self) -> Optional[MapInfo]:
        with self._lock:
            return self._costmap
