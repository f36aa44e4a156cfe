"""
Utility functions for the exploration controller.

Common coordinate transformations and math utilities.
"""
import math
from typing import Tuple

import numpy as np

from drobot_exploration.types import MapInfo


def cells_to_world(cells: np.ndarray, map_info: MapInfo) -> np.ndarray:
    """
    Convert grid cells to world coordinates (cell centres).

    Args:
        cells: Array of (row, col) grid indices
        map_info: Map metadata

    Returns:
        Array of (x, y) world coordinates
    """
    cells = np.asarray(cells).reshape(-1, 2)
    wx = map_info.origin_x + (cells[:, 1] + 0.5) * map_info.resolution
    wy = map_info.origin_y + (cells[:, 0] + 0.5) * map_info.resolution
    return np.column_stack((wx, wy))


def world_to_cells(points: np.ndarray, map_info: MapInfo) -> np.ndarray:
    """
    Convert world coordinates to (row, col) grid indices.

    Indices may fall outside the map; callers check bounds.

    Args:
        points: Array of (x, y) world coordinates
        map_info: Map metadata

    Returns:
        Integer array of (row, col) grid indices
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    cols = np.floor((points[:, 0] - map_info.origin_x) / map_info.resolution)
    rows = np.floor((points[:, 1] - map_info.origin_y) / map_info.resolution)
    return np.column_stack((rows, cols)).astype(int)


def normalize_angle(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi]."""
    return math.atan2(math.sin(angle), math.cos(angle))


def euclidean_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def quaternion_to_yaw(x: float, y: float, z: float, w: float) -> float:
    """Yaw of a planar rotation quaternion."""
    siny = 2.0 * (w * z + x * y)
    cosy = 1.0 - 2.0 * (y * y + z * z)
    return math.atan2(siny, cosy)


def yaw_to_quaternion(yaw: float) -> Tuple[float, float, float, float]:
    """(x, y, z, w) quaternion of a rotation about z."""
    half = yaw / 2.0
    return (0.0, 0.0, math.sin(half), math.cos(half))
