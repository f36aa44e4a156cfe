#!/usr/bin/env python3
"""Unit tests for the exploration controller loop."""
import pytest

from drobot_exploration.config import Config, ExplorationParams
from drobot_exploration.controller import ExplorationController
from drobot_exploration.errors import ConfigurationError
from drobot_exploration.protocols import MarkerPublisher, RobotMotion
from drobot_exploration.types import ExplorationState, FrontierMap


def long_frontier(x=5.0, size=8):
    return FrontierMap.from_points([[(x, float(i)) for i in range(size)]])


# ==================== Startup ====================

class TestStartup:
    def test_fakes_satisfy_protocols(self, robot, markers):
        assert isinstance(robot, RobotMotion)
        assert isinstance(markers, MarkerPublisher)

    def test_marker_channels(self, make_controller, markers):
        make_controller()
        assert markers.channels[Config.FRONTIER_CHANNEL]['topic'] == 'goal_frontier'
        assert markers.channels[Config.FRONTIER_CHANNEL]['shape'] == 'points'
        assert markers.channels[Config.GOAL_CHANNEL] == {
            'topic': 'goal_marker', 'shape': 'arrow', 'scale': (0.5, 0.2, 0.1)
        }

    def test_map_subscription(self, make_controller, map_service):
        make_controller(map_topic='/map')
        assert map_service.map_topic == '/map'
        assert map_service.costmap_topic == Config.COSTMAP_TOPIC

    def test_causes_registered(self, make_controller):
        controller = make_controller(
            replan_conditions=['distance', 'rotation'],
            replan_params={'distance': {'threshold': '1.0'}},
        )
        assert controller.replaner.names == ['distance', 'rotation']
        assert controller.replaner.causes[0].params == {'threshold': '1.0'}
        assert controller.replaner.causes[1].params == {}

    def test_missing_cause_params_logged(self, make_controller, logger):
        make_controller(replan_conditions=['distance'])
        logger.info.assert_any_call('processing distance')
        logger.info.assert_any_call('No parameters found for replaning cause distance')

    def test_unknown_cause_skipped(self, make_controller, logger):
        controller = make_controller(replan_conditions=['teleport', 'not_moving'])
        assert controller.replaner.names == ['not_moving']
        assert logger.error.called

    def test_unknown_goal_selector(self, robot, map_service, markers, logger, two_frontiers):
        params = ExplorationParams(goal_selector_type='unknown_strategy')
        controller = ExplorationController(robot, map_service, markers, logger, params=params)
        with pytest.raises(ConfigurationError, match='unknown_strategy'):
            controller.start()
        assert 'unknown_strategy' in logger.error.call_args[0][0]

        with pytest.raises(ConfigurationError):
            controller.decide_goal(two_frontiers)

        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert robot.goals == []

    def test_missing_goal_selector(self, make_controller):
        with pytest.raises(ConfigurationError, match='not been configured'):
            make_controller(goal_selector_type=None)


# ==================== Main Loop ====================

class TestTick:
    def test_waiting_for_first_map(self, make_controller, robot, logger):
        controller = make_controller()
        controller.tick()
        controller.tick()
        assert controller.state is ExplorationState.WAITING_FOR_MAP
        assert robot.goals == []
        logger.info.assert_any_call('Waiting for first map', once=True)

    def test_first_map_sends_goal(self, make_controller, map_service, robot, two_frontiers):
        controller = make_controller()
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert controller.state is ExplorationState.EXPLORING
        assert len(robot.goals) == 1
        assert controller.first_time is False
        assert controller.current_goal == robot.goals[0]
        assert robot.status_count == 1

    def test_map_consumed_once(self, make_controller, map_service, robot, two_frontiers):
        controller = make_controller(replan_conditions=['not_moving'])
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        robot.moving = False
        controller.tick()
        controller.tick()
        assert len(robot.goals) == 1
        assert controller.stats.maps_received == 1

    def test_rejected_frontier_skipped(self, make_controller, map_service, robot, markers,
                                       two_frontiers):
        controller = make_controller(goal_selector_params={'min_size': '3'})
        map_service.update_frontiers(two_frontiers)
        controller.tick()

        f2 = two_frontiers[1]
        goal = robot.goals[0]
        assert (goal.x, goal.y) == (2.0, 2.0)
        assert markers.points[Config.FRONTIER_CHANNEL] == f2.points
        assert markers.poses[Config.GOAL_CHANNEL] == goal
        assert controller.state is ExplorationState.EXPLORING

    def test_pose_failures_delay_goal(self, make_controller, map_service, robot, logger,
                                      two_frontiers):
        controller = make_controller()
        robot.pose_results = [False, False, False]
        for _ in range(3):
            map_service.update_frontiers(two_frontiers)
            controller.tick()
            assert robot.goals == []
        assert controller.stats.pose_failures == 3
        logger.warn.assert_any_call("Couldn't get robot position!")

        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert len(robot.goals) == 1

    def test_no_causes_decides_only_once(self, make_controller, map_service, robot,
                                         two_frontiers):
        controller = make_controller()
        for _ in range(5):
            map_service.update_frontiers(two_frontiers)
            robot.moving = False
            controller.tick()
        assert len(robot.goals) == 1
        assert len(controller.replaner) == 0

    def test_not_moving_triggers_new_goal(self, make_controller, map_service, robot,
                                          two_frontiers):
        controller = make_controller(replan_conditions=['not_moving'])
        map_service.update_frontiers(two_frontiers)
        controller.tick()

        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert len(robot.goals) == 1

        robot.moving = False
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert len(robot.goals) == 2
        assert robot.status_count == 2

    def test_goal_timeout(self, make_controller, map_service, robot, clock, two_frontiers):
        controller = make_controller(
            replan_conditions=['time'], replan_params={'time': {'timeout': '10'}}
        )
        map_service.update_frontiers(two_frontiers)
        controller.tick()

        clock.now = 5.0
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert len(robot.goals) == 1

        clock.now = 11.0
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert len(robot.goals) == 2

    def test_no_acceptable_goal_keeps_first_time(self, make_controller, map_service, robot,
                                                 logger, two_frontiers):
        controller = make_controller(goal_selector_params={'min_size': '6'})
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert robot.goals == []
        assert controller.first_time is True
        assert controller.stats.no_goal_count == 1
        assert logger.warn.called

        map_service.update_frontiers(long_frontier())
        controller.tick()
        assert len(robot.goals) == 1
        assert controller.first_time is False

    def test_refused_goal_retried(self, make_controller, map_service, robot, logger,
                                  two_frontiers):
        controller = make_controller()
        robot.accept_goals = False
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert len(robot.refused) == 1
        assert controller.first_time is True
        assert controller.current_goal is None
        assert controller.stats.goals_sent == 0
        assert controller.stats.goals_dropped == 1
        assert logger.warn.called

        robot.accept_goals = True
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert len(robot.goals) == 1
        assert controller.current_goal == robot.goals[0]
        assert controller.stats.goals_sent == 1

    def test_decide_goal_uses_latest_snapshot(self, make_controller, map_service, two_frontiers):
        controller = make_controller()
        map_service.update_frontiers(two_frontiers)
        goal = controller.decide_goal()
        assert (goal.x, goal.y) == (0.0, 1.0)


# ==================== Termination ====================

class TestFinish:
    def feed_empty_maps(self, controller, map_service, count):
        for _ in range(count):
            map_service.update_frontiers(FrontierMap())
            controller.tick()

    def test_finish_after_empty_maps(self, make_controller, map_service, robot, two_frontiers):
        controller = make_controller()
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert robot.moving is True

        self.feed_empty_maps(controller, map_service, 2)
        assert controller.state is ExplorationState.EXPLORING

        self.feed_empty_maps(controller, map_service, 1)
        assert controller.state is ExplorationState.FINISHED
        assert robot.cancel_count == 1
        assert controller.finish_calls == 1

    def test_empty_count_resets(self, make_controller, map_service, two_frontiers):
        controller = make_controller()
        self.feed_empty_maps(controller, map_service, 2)
        map_service.update_frontiers(two_frontiers)
        controller.tick()
        self.feed_empty_maps(controller, map_service, 2)
        assert controller.state is ExplorationState.EXPLORING

    def test_finish_when_no_frontier_accepted(self, make_controller, map_service, robot):
        controller = make_controller(goal_selector_params={'min_size': '5'})
        small = FrontierMap.from_points([[(1.0, 0.0), (1.0, 1.0), (1.0, 2.0)]])
        for _ in range(3):
            map_service.update_frontiers(small)
            controller.tick()
        assert robot.goals == []
        assert controller.stats.no_goal_count == 2
        assert controller.state is ExplorationState.FINISHED
        assert controller.finish_calls == 1

    def test_acceptable_frontier_resets_count(self, make_controller, map_service, robot):
        controller = make_controller(goal_selector_params={'min_size': '5'})
        small = FrontierMap.from_points([[(1.0, 0.0), (1.0, 1.0), (1.0, 2.0)]])
        for fmap in [small, small, long_frontier(), small, small]:
            map_service.update_frontiers(fmap)
            controller.tick()
        assert controller.state is ExplorationState.EXPLORING
        assert len(robot.goals) == 1

    def test_no_cancel_when_idle(self, make_controller, map_service, robot):
        controller = make_controller(empty_maps_to_finish=1)
        self.feed_empty_maps(controller, map_service, 1)
        assert controller.state is ExplorationState.FINISHED
        assert robot.cancel_count == 0
        assert controller.finish_calls == 1

    def test_completion_disabled(self, make_controller, map_service):
        controller = make_controller(empty_maps_to_finish=0)
        self.feed_empty_maps(controller, map_service, 5)
        assert controller.state is ExplorationState.EXPLORING

    def test_request_finish(self, make_controller, map_service, robot, two_frontiers):
        controller = make_controller()
        map_service.update_frontiers(two_frontiers)
        controller.tick()

        controller.request_finish()
        controller.tick()
        assert controller.state is ExplorationState.EXPLORING

        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert controller.state is ExplorationState.FINISHED
        assert robot.cancel_count == 1

    def test_finish_is_idempotent(self, make_controller, map_service, robot, two_frontiers):
        controller = make_controller()
        map_service.update_frontiers(two_frontiers)
        controller.tick()

        controller.finish()
        controller.finish()
        assert robot.cancel_count == 1
        assert controller.finish_calls == 1

    def test_ticks_after_finish_do_nothing(self, make_controller, map_service, robot,
                                           two_frontiers):
        controller = make_controller(empty_maps_to_finish=1)
        self.feed_empty_maps(controller, map_service, 1)

        map_service.update_frontiers(two_frontiers)
        controller.tick()
        assert robot.goals == []
        assert map_service.has_new_map() is True
        assert controller.finish_calls == 1
