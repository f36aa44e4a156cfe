"""
ROS 2 adapters for the exploration controller.

Map subscriptions, tf/Nav2 robot motion and RViz markers.
"""
from .map_server import RosMapServer, grid_to_map_info
from .markers import RosMarkerPublisher
from .robot_motion import RosRobotMotion

__all__ = ['RosMapServer', 'RosMarkerPublisher', 'RosRobotMotion', 'grid_to_map_info']
