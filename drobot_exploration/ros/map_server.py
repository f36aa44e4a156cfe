"""
ROS 2 map server.

Feeds nav_msgs/OccupancyGrid messages from the map and costmap topics into
the MapService.
"""
from typing import Optional

import numpy as np
from rclpy.node import Node
from rclpy.qos import QoSProfile, ReliabilityPolicy, HistoryPolicy, DurabilityPolicy
from nav_msgs.msg import OccupancyGrid

from drobot_exploration.frontier import FrontierDetector
from drobot_exploration.map_service import FrontierCallback, MapService
from drobot_exploration.types import MapInfo


def grid_to_map_info(msg: OccupancyGrid) -> MapInfo:
    """Convert an OccupancyGrid message into MapInfo."""
    return MapInfo(
        data=np.array(msg.data, dtype=np.int16).reshape((msg.info.height, msg.info.width)),
        resolution=msg.info.resolution,
        origin_x=msg.info.origin.position.x,
        origin_y=msg.info.origin.position.y,
        width=msg.info.width,
        height=msg.info.height,
        stamp=msg.header.stamp.sec + msg.header.stamp.nanosec * 1e-9,
    )


class RosMapServer(MapService):
    """MapService fed by ROS 2 occupancy grid subscriptions."""

    def __init__(self, node: Node, detector: Optional[FrontierDetector] = None):
        super().__init__(detector=detector, logger=node.get_logger().debug)
        self.node = node
        self.map_sub = None
        self.costmap_sub = None

        # Map servers latch their grids
        self.qos = QoSProfile(
            depth=1,
            reliability=ReliabilityPolicy.RELIABLE,
            durability=DurabilityPolicy.TRANSIENT_LOCAL,
            history=HistoryPolicy.KEEP_LAST,
        )

    def subscribe_map(self, topic: str, callback: FrontierCallback) -> None:
        super().subscribe_map(topic, callback)
        self.map_sub = self.node.create_subscription(
            OccupancyGrid, topic, self._map_callback, self.qos
        )

    def subscribe_costmap(self, topic: str) -> None:
        super().subscribe_costmap(topic)
        self.costmap_sub = self.node.create_subscription(
            OccupancyGrid, topic, self._costmap_callback, self.qos
        )

    def _map_callback(self, msg: OccupancyGrid) -> None:
        self.update_map(grid_to_map_info(msg))

    def _costmap_callback(self, msg: OccupancyGrid) -> None:
        self.update_costmap(grid_to_map_info(msg))
