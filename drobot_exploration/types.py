"""
Data type definitions for the exploration controller.

Value types shared by the map service, the goal selectors and the controller.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Sequence, Tuple
import math

import numpy as np

Point = Tuple[float, float]


@dataclass(frozen=True)
class Pose2D:
    """Planar pose in the global frame."""
    x: float = 0.0
    y: float = 0.0
    yaw: float = 0.0

    def distance_to(self, x: float, y: float) -> float:
        """Euclidean distance from this pose to a point."""
        return math.hypot(x - self.x, y - self.y)


@dataclass(frozen=True)
class Goal(Pose2D):
    """Target pose commanded to the navigation stack."""


@dataclass(frozen=True)
class Frontier:
    """Connected boundary between known-free and unknown space."""
    points: Tuple[Point, ...] = field(repr=False)

    def __post_init__(self):
        object.__setattr__(
            self, 'points', tuple((float(x), float(y)) for x, y in self.points)
        )

    @property
    def size(self) -> int:
        return len(self.points)

    @property
    def centroid(self) -> Optional[Point]:
        """Mean of the boundary points, None for an empty frontier."""
        if not self.points:
            return None
        xs, ys = zip(*self.points)
        return sum(xs) / len(xs), sum(ys) / len(ys)


@dataclass(frozen=True)
class FrontierMap:
    """
    Ordered snapshot of all frontiers in one map update.

    Snapshots are never modified; a new map replaces the whole object.
    """
    frontiers: Tuple[Frontier, ...] = ()
    stamp: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'frontiers', tuple(self.frontiers))

    def __iter__(self) -> Iterator[Frontier]:
        return iter(self.frontiers)

    def __len__(self) -> int:
        return len(self.frontiers)

    def __getitem__(self, index: int) -> Frontier:
        return self.frontiers[index]

    @classmethod
    def from_points(cls, point_lists: Sequence[Sequence[Point]], stamp: float = 0.0) -> 'FrontierMap':
        """Build a snapshot from one point sequence per frontier."""
        return cls(tuple(Frontier(tuple(points)) for points in point_lists), stamp)


class ExplorationState(Enum):
    WAITING_FOR_MAP = 0
    EXPLORING = 1
    FINISHED = 2


@dataclass
class MapInfo:
    """Occupancy grid (or costmap) data with its metadata."""
    data: Optional[np.ndarray] = field(default=None, repr=False)
    resolution: float = 0.05
    origin_x: float = 0.0
    origin_y: float = 0.0
    width: int = 0
    height: int = 0
    stamp: float = 0.0

    def is_valid(self) -> bool:
        """Check if map data is available."""
        return self.data is not None and self.width > 0 and self.height > 0


@dataclass
class ExplorationStats:
    """Exploration progress counters."""
    maps_received: int = 0
    goals_sent: int = 0
    pose_failures: int = 0
    no_goal_count: int = 0
    goals_dropped: int = 0

    def summary(self) -> str:
        return (
            f'Maps: {self.maps_received} | Goals: {self.goals_sent} | '
            f'Dropped: {self.goals_dropped} | '
            f'Pose failures: {self.pose_failures} | No goal: {self.no_goal_count}'
        )
