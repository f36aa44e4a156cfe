"""
ROS 2 robot motion handler.

Robot pose from tf2, navigation through the Nav2 NavigateToPose action.
"""
from typing import Optional

from rclpy.action import ActionClient
from rclpy.duration import Duration
from rclpy.node import Node
from rclpy.time import Time
from action_msgs.msg import GoalStatus
from nav2_msgs.action import NavigateToPose
from tf2_ros import Buffer, TransformListener, TransformException

from drobot_exploration.config import Config
from drobot_exploration.types import Goal, Pose2D
from drobot_exploration import utils


class RosRobotMotion:
    """Pose lookup and fire-and-forget Nav2 goals."""

    def __init__(
        self,
        node: Node,
        global_frame: str = Config.GLOBAL_FRAME,
        base_frame: str = Config.ROBOT_BASE_FRAME,
        action_name: str = Config.NAV_ACTION,
        tf_timeout: float = Config.TF_TIMEOUT,
        server_timeout: float = Config.NAV_SERVER_TIMEOUT
    ):
        """
        Initialize robot motion handler.

        Args:
            node: ROS node owning the tf listener and action client
            global_frame: Frame goals and poses are expressed in
            base_frame: Robot base frame
            action_name: NavigateToPose action name
            tf_timeout: Pose lookup timeout (sec)
            server_timeout: Wait for the action server before each goal (sec)
        """
        self.node = node
        self.logger = node.get_logger()
        self.global_frame = global_frame
        self.base_frame = base_frame
        self.tf_timeout = tf_timeout
        self.server_timeout = server_timeout
        self.action_name = action_name

        self.buffer = Buffer()
        self.tf_listener = TransformListener(self.buffer, node)
        self.nav_client = ActionClient(node, NavigateToPose, action_name)

        self.pose: Optional[Pose2D] = None
        self.current_goal: Optional[Goal] = None
        self._goal_handle = None
        self._goal_seq = 0
        self._moving = False
        self._cancel_requested = False

    # ==================== Pose ====================

    def refresh_pose(self) -> bool:
        try:
            tf = self.buffer.lookup_transform(
                self.global_frame,
                self.base_frame,
                Time(),
                Duration(seconds=self.tf_timeout),
            )
        except TransformException as exc:
            self.logger.debug(f'Failed transform {self.base_frame}->{self.global_frame}: {exc}')
            return False

        t = tf.transform.translation
        q = tf.transform.rotation
        self.pose = Pose2D(t.x, t.y, utils.quaternion_to_yaw(q.x, q.y, q.z, q.w))
        return True

    # ==================== Navigation ====================

    def is_moving(self) -> bool:
        return self._moving

    def go_to(self, goal: Goal) -> bool:
        if not self.nav_client.wait_for_server(timeout_sec=self.server_timeout):
            self.logger.warn(f'Action server {self.action_name} not ready, goal dropped')
            return False

        goal_msg = NavigateToPose.Goal()
        goal_msg.pose.header.frame_id = self.global_frame
        goal_msg.pose.header.stamp = self.node.get_clock().now().to_msg()
        goal_msg.pose.pose.position.x = goal.x
        goal_msg.pose.pose.position.y = goal.y
        qx, qy, qz, qw = utils.yaw_to_quaternion(goal.yaw)
        goal_msg.pose.pose.orientation.x = qx
        goal_msg.pose.pose.orientation.y = qy
        goal_msg.pose.pose.orientation.z = qz
        goal_msg.pose.pose.orientation.w = qw

        # Nav2 preempts the previous goal; stale responses are ignored by seq
        self._goal_seq += 1
        seq = self._goal_seq
        self.current_goal = goal
        self._moving = True
        self._cancel_requested = False

        future = self.nav_client.send_goal_async(goal_msg)
        future.add_done_callback(lambda fut: self._goal_response_callback(fut, seq))
        return True

    def cancel_goal(self) -> None:
        if self._goal_handle is not None:
            self.logger.info('Cancelling current goal')
            self._goal_handle.cancel_goal_async()
        else:
            # Goal not accepted yet, cancel on acceptance
            self._cancel_requested = True
        self._moving = False

    def _goal_response_callback(self, future, seq: int) -> None:
        if seq != self._goal_seq:
            return
        goal_handle = future.result()
        if goal_handle is None or not goal_handle.accepted:
            self.logger.warn('Goal rejected')
            self._moving = False
            return

        self._goal_handle = goal_handle
        if self._cancel_requested:
            goal_handle.cancel_goal_async()
            return

        result_future = goal_handle.get_result_async()
        result_future.add_done_callback(lambda fut: self._goal_result_callback(fut, seq))

    def _goal_result_callback(self, future, seq: int) -> None:
        if seq != self._goal_seq:
            return
        status = future.result().status
        if status == GoalStatus.STATUS_SUCCEEDED:
            self.logger.info('Goal reached!')
        else:
            self.logger.warn(f'Goal finished with status {status}')
        self._moving = False
        self._goal_handle = None

    def print_status(self) -> None:
        if self.pose is None:
            self.logger.info('Robot pose unknown')
            return
        goal = 'none' if self.current_goal is None else (
            f'({self.current_goal.x:.2f}, {self.current_goal.y:.2f})'
        )
        self.logger.info(
            f'Robot at ({self.pose.x:.2f}, {self.pose.y:.2f}, yaw={self.pose.yaw:.2f}) | '
            f'moving={self._moving} | goal={goal}'
        )
