#!/usr/bin/env python3
"""
Frontier Explorer Node

Runs the exploration controller at a fixed rate on a single-threaded
executor. Map and service callbacks are dispatched between ticks.
"""
import sys

import rclpy
from rclpy.logging import get_logger
from rclpy.node import Node
from std_srvs.srv import Trigger

from drobot_exploration.config import Config, ExplorationParams, params_to_tree
from drobot_exploration.controller import ExplorationController
from drobot_exploration.errors import ConfigurationError
from drobot_exploration.frontier import FrontierDetector
from drobot_exploration.ros import RosMapServer, RosMarkerPublisher, RosRobotMotion


class FrontierExplorer(Node):
    """Frontier exploration node."""

    def __init__(self):
        super().__init__(
            'frontier_explorer',
            automatically_declare_parameters_from_overrides=True,
        )

        self._declare_defaults()
        self.params = self._read_params()
        self.finished = False

        self.robot = RosRobotMotion(
            self,
            global_frame=self.params.global_frame,
            base_frame=self.params.robot_base_frame,
        )
        self.map_server = RosMapServer(
            self,
            FrontierDetector(
                min_frontier_size=self.params.min_frontier_size,
                lethal_cost=self.params.lethal_cost,
            ),
        )
        self.markers = RosMarkerPublisher(self, frame_id=self.params.global_frame)
        self.controller = ExplorationController(
            self.robot,
            self.map_server,
            self.markers,
            self.get_logger(),
            params=self.params,
            on_finish=self._on_finish,
        )
        self.timer = None

    def _declare_defaults(self):
        """Declare scalar parameters not given as overrides."""
        defaults = {
            'loop_rate': Config.LOOP_RATE,
            'map_topic': Config.MAP_TOPIC,
            'costmap_topic': Config.COSTMAP_TOPIC,
            'global_frame': Config.GLOBAL_FRAME,
            'robot_base_frame': Config.ROBOT_BASE_FRAME,
            'min_frontier_size': Config.MIN_FRONTIER_SIZE,
            'lethal_cost': Config.LETHAL_COST,
            'empty_maps_to_finish': Config.EMPTY_MAPS_TO_FINISH,
        }
        for name, value in defaults.items():
            if not self.has_parameter(name):
                self.declare_parameter(name, value)

    def _read_params(self) -> ExplorationParams:
        flat = {
            name: param.value
            for name, param in self.get_parameters_by_prefix('').items()
        }
        return ExplorationParams.from_tree(params_to_tree(flat))

    def start(self):
        """
        Configure the controller and start the loop timer.

        Raises:
            ConfigurationError: invalid goal selector configuration
        """
        self.controller.start()
        self.finish_srv = self.create_service(
            Trigger, '~/finish_exploration', self._finish_callback
        )
        self.timer = self.create_timer(1.0 / self.params.loop_rate, self.controller.tick)
        self.get_logger().info(
            f'Frontier Explorer started ({self.params.loop_rate:.1f} Hz, '
            f'map: {self.params.map_topic}, causes: {self.controller.replaner.names})'
        )

    def _finish_callback(self, request, response):
        self.controller.request_finish()
        response.success = True
        response.message = 'Exploration will finish on the next map update'
        return response

    def _on_finish(self):
        self.finished = True


def main(args=None):
    rclpy.init(args=args)
    try:
        node = FrontierExplorer()
    except ConfigurationError as e:
        get_logger('frontier_explorer').fatal(f'Configuration error: {e}')
        rclpy.shutdown()
        return 1

    try:
        node.start()
    except ConfigurationError as e:
        node.get_logger().fatal(f'Configuration error: {e}')
        node.destroy_node()
        rclpy.shutdown()
        return 1

    try:
        while rclpy.ok() and not node.finished:
            rclpy.spin_once(node, timeout_sec=0.1)
    except KeyboardInterrupt:
        node.get_logger().info(f'\n=== Final Stats ===\n{node.controller.stats.summary()}')
    finally:
        node.destroy_node()
        if rclpy.ok():
            rclpy.shutdown()
    return 0


if __name__ == '__main__':
    sys.exit(main())
