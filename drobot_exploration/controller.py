"""
Exploration controller.

Owns the exploration state machine: waits for the first map, decides a goal
on the first frontier snapshot and whenever the replan gate asks for it,
and finishes once exploration is complete.
"""
from typing import Callable, Optional
import time

from drobot_exploration.config import Config, ExplorationParams
from drobot_exploration.errors import ConfigurationError, NoAcceptableGoal
from drobot_exploration.goal_selector import GoalSelector, create_goal_selector, select_goal
from drobot_exploration.map_service import MapService
from drobot_exploration.protocols import MarkerPublisher, RobotMotion
from drobot_exploration.replan import ReplanContext, ReplanGate
from drobot_exploration.types import (
    ExplorationState,
    ExplorationStats,
    FrontierMap,
    Goal,
)


class ExplorationController:
    """Frontier exploration loop driven by a fixed-rate tick."""

    def __init__(
        self,
        robot: RobotMotion,
        map_service: MapService,
        markers: MarkerPublisher,
        logger,
        params: Optional[ExplorationParams] = None,
        on_finish: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize controller.

        Args:
            robot: Robot motion handler
            map_service: Source of frontier snapshots
            markers: Visualization publisher
            logger: Node logger (info/warn/error, rclpy style)
            params: Exploration parameters
            on_finish: Called once when exploration finishes
            clock: Time source for goal age, in seconds
        """
        self.robot = robot
        self.map_service = map_service
        self.markers = markers
        self.logger = logger
        self.params = params or ExplorationParams()
        self.on_finish = on_finish or (lambda: None)
        self.clock = clock

        self.replaner = ReplanGate(logger=logger.info)
        self.goal_selector: Optional[GoalSelector] = None
        self.frontier_map = FrontierMap()

        self.state = ExplorationState.WAITING_FOR_MAP
        self.first_time = True
        self.exploration_finished = False
        self.stats = ExplorationStats()

        self.current_goal: Optional[Goal] = None
        self._goal_sent_time: Optional[float] = None
        self._goal_start_yaw: Optional[float] = None
        self._empty_maps = 0

    # ==================== Setup ====================

    def start(self) -> None:
        """
        Configure strategy and causes, set up markers and subscribe to maps.

        Raises:
            ConfigurationError: no valid goal selector is configured
        """
        self.map_service.subscribe_map(self.params.map_topic, self._on_frontiers)
        self.map_service.subscribe_costmap(self.params.costmap_topic)

        self.markers.add(Config.FRONTIER_CHANNEL, Config.FRONTIER_TOPIC,
                         shape='points', scale=Config.FRONTIER_MARKER_SCALE)
        self.markers.add(Config.GOAL_CHANNEL, Config.GOAL_TOPIC,
                         shape='arrow', scale=Config.GOAL_MARKER_SCALE)

        self.configure()

    def configure(self) -> None:
        """
        Register replanning causes and install the goal selector.

        Invalid causes are reported and skipped. An invalid goal selector is
        reported and raised; goal decision stays disabled.
        """
        if not self.params.replan_conditions:
            self.logger.info(
                'No replaning conditions configured, goals are only decided on the first map'
            )
        for name in self.params.replan_conditions:
            self.logger.info(f'processing {name}')
            try:
                if name in self.params.replan_params:
                    self.replaner.add_cause(name, self.params.replan_params[name])
                else:
                    self.logger.info(f'No parameters found for replaning cause {name}')
                    self.replaner.add_cause(name)
            except ConfigurationError as e:
                self.logger.error(str(e))

        self.goal_selector = None
        try:
            self.goal_selector = create_goal_selector(
                self.params.goal_selector_type, self.params.goal_selector_params
            )
        except ConfigurationError as e:
            self.logger.error(str(e))
            raise
        self.logger.info(f'Goal selector: {self.goal_selector.name}')

    # ==================== Callbacks ====================

    def _on_frontiers(self, frontier_map: FrontierMap) -> None:
        self.frontier_map = frontier_map

    def request_finish(self) -> None:
        """Mark exploration complete; takes effect on the next map tick."""
        self.exploration_finished = True

    # ==================== Main Loop ====================

    def tick(self) -> None:
        """One iteration of the exploration loop."""
        if self.state is ExplorationState.FINISHED:
            return

        if not self.map_service.has_new_map():
            if self.state is ExplorationState.WAITING_FOR_MAP:
                self.logger.info('Waiting for first map', once=True)
            return

        self.map_service.mark_consumed()
        frontier_map = self.frontier_map
        self.stats.maps_received += 1

        if self.state is ExplorationState.WAITING_FOR_MAP:
            self.logger.info('First map received!', once=True)
            self.state = ExplorationState.EXPLORING
            self.first_time = True

        self._check_completion(frontier_map)
        if self.exploration_finished:
            self.finish()
            return

        if not self.robot.refresh_pose():
            self.stats.pose_failures += 1
            self.logger.warn("Couldn't get robot position!")
            return

        if self.replaner.replan(self._replan_context(frontier_map)) or self.first_time:
            self.robot.print_status()
            self._plan(frontier_map)

    def _plan(self, frontier_map: FrontierMap) -> None:
        try:
            goal = self.decide_goal(frontier_map)
        except NoAcceptableGoal as e:
            self.stats.no_goal_count += 1
            self.logger.warn(str(e))
            return
        except ConfigurationError as e:
            self.logger.error(str(e))
            return

        if not self.robot.go_to(goal):
            self.stats.goals_dropped += 1
            self.logger.warn('Goal not sent, retrying on the next map')
            return

        self.first_time = False
        self.current_goal = goal
        self._goal_sent_time = self.clock()
        pose = self.robot.pose
        self._goal_start_yaw = pose.yaw if pose is not None else None
        self.stats.goals_sent += 1
        self.logger.info(f'Going to ({goal.x:.2f}, {goal.y:.2f}, yaw={goal.yaw:.2f})')

    def decide_goal(self, frontier_map: Optional[FrontierMap] = None) -> Goal:
        """
        Pick the goal of the first accepted frontier and visualize it.

        Args:
            frontier_map: Snapshot to decide on, defaults to the latest one

        Returns:
            Goal pose

        Raises:
            ConfigurationError: no goal selector installed
            NoAcceptableGoal: no frontier accepted
        """
        if self.goal_selector is None:
            raise ConfigurationError('No valid goal selector configured, cannot decide goal')
        if frontier_map is None:
            frontier_map = self.frontier_map

        frontier, goal = select_goal(frontier_map, self.goal_selector)

        self.markers.publish_points(Config.FRONTIER_CHANNEL, frontier.points)
        self.markers.publish_pose(Config.GOAL_CHANNEL, goal)
        return goal

    def _replan_context(self, frontier_map: FrontierMap) -> ReplanContext:
        goal_age = None
        if self._goal_sent_time is not None:
            goal_age = self.clock() - self._goal_sent_time
        return ReplanContext(
            pose=self.robot.pose,
            goal=self.current_goal,
            is_moving=self.robot.is_moving(),
            goal_age=goal_age,
            goal_start_yaw=self._goal_start_yaw,
            frontier_map=frontier_map,
        )

    def _check_completion(self, frontier_map: FrontierMap) -> None:
        limit = self.params.empty_maps_to_finish
        if limit <= 0:
            return
        if self._has_acceptable_frontier(frontier_map):
            self._empty_maps = 0
        else:
            self._empty_maps += 1
        if self._empty_maps >= limit and not self.exploration_finished:
            self.logger.info(
                f'No acceptable frontier left in {self._empty_maps} consecutive maps'
            )
            self.exploration_finished = True

    def _has_acceptable_frontier(self, frontier_map: FrontierMap) -> bool:
        # Without a selector only an empty map counts as explored
        if self.goal_selector is None:
            return len(frontier_map) > 0
        return any(self.goal_selector.decide_goal(f) is not None for f in frontier_map)

    # ==================== Termination ====================

    def finish(self) -> None:
        """Cancel active motion and stop; repeated calls do nothing."""
        if self.state is ExplorationState.FINISHED:
            return
        self.state = ExplorationState.FINISHED
        self.exploration_finished = True

        if self.robot.is_moving():
            self.robot.cancel_goal()

        self.logger.info(f'Exploration finished. {self.stats.summary()}')
        self.on_finish()
