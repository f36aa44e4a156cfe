"""
RViz marker publisher with named channels.

Each channel owns a topic and a marker shape; the controller publishes to
channels by name ('f_goal', 'goal').
"""
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from rclpy.node import Node
from rclpy.publisher import Publisher
from geometry_msgs.msg import Point as PointMsg
from visualization_msgs.msg import Marker

from drobot_exploration.types import Point, Pose2D
from drobot_exploration import utils

SHAPES = {
    'arrow': Marker.ARROW,
    'points': Marker.POINTS,
    'line_strip': Marker.LINE_STRIP,
    'sphere': Marker.SPHERE,
}


@dataclass
class _Channel:
    publisher: Publisher
    shape: int
    scale: Tuple[float, float, float]
    color: Tuple[float, float, float, float]


class RosMarkerPublisher:
    """Publishes visualization markers on named channels."""

    def __init__(self, node: Node, frame_id: str = 'map'):
        self.node = node
        self.frame_id = frame_id
        self.logger = node.get_logger()
        self._channels: Dict[str, _Channel] = {}

    def add(
        self,
        name: str,
        topic: str,
        shape: str = 'points',
        scale: Tuple[float, float, float] = (0.05, 0.05, 0.05),
        color: Tuple[float, float, float, float] = (0.0, 1.0, 0.0, 0.8)
    ) -> None:
        if shape not in SHAPES:
            raise ValueError(f'Unknown marker shape {shape}')
        self._channels[name] = _Channel(
            publisher=self.node.create_publisher(Marker, topic, 10),
            shape=SHAPES[shape],
            scale=tuple(scale),
            color=tuple(color),
        )

    def publish_points(self, name: str, points: Sequence[Point]) -> None:
        marker = self._marker(name)
        if marker is None:
            return
        marker.pose.orientation.w = 1.0
        marker.points = [PointMsg(x=float(x), y=float(y), z=0.0) for x, y in points]
        self._channels[name].publisher.publish(marker)

    def publish_pose(self, name: str, pose: Pose2D) -> None:
        marker = self._marker(name)
        if marker is None:
            return
        marker.pose.position.x = pose.x
        marker.pose.position.y = pose.y
        qx, qy, qz, qw = utils.yaw_to_quaternion(pose.yaw)
        marker.pose.orientation.x = qx
        marker.pose.orientation.y = qy
        marker.pose.orientation.z = qz
        marker.pose.orientation.w = qw
        self._channels[name].publisher.publish(marker)

    def _marker(self, name: str):
        channel = self._channels.get(name)
        if channel is None:
            self.logger.warn(f'Marker channel {name} has not been added')
            return None

        marker = Marker()
        marker.header.frame_id = self.frame_id
        marker.header.stamp = self.node.get_clock().now().to_msg()
        marker.ns = name
        marker.id = 0
        marker.type = channel.shape
        marker.action = Marker.ADD
        marker.scale.x, marker.scale.y, marker.scale.z = channel.scale
        marker.color.r, marker.color.g, marker.color.b, marker.color.a = channel.color
        return marker
