"""Shared fixtures and collaborator fakes for the exploration tests."""
import os
import sys
from typing import List, Optional
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from drobot_exploration.config import ExplorationParams
from drobot_exploration.controller import ExplorationController
from drobot_exploration.map_service import MapService
from drobot_exploration.types import FrontierMap, Goal, Pose2D


class FakeRobot:
    """Robot motion stub with scripted pose availability."""

    def __init__(self, pose: Pose2D = Pose2D(0.0, 0.0, 0.0)):
        self._next_pose = pose
        self.pose: Optional[Pose2D] = None
        self.pose_results: List[bool] = []
        self.moving = False
        self.goals: List[Goal] = []
        self.refused: List[Goal] = []
        self.accept_goals = True
        self.cancel_count = 0
        self.status_count = 0

    def refresh_pose(self) -> bool:
        ok = self.pose_results.pop(0) if self.pose_results else True
        if ok:
            self.pose = self._next_pose
        return ok

    def move_to(self, pose: Pose2D) -> None:
        self._next_pose = pose

    def is_moving(self) -> bool:
        return self.moving

    def go_to(self, goal: Goal) -> bool:
        if not self.accept_goals:
            self.refused.append(goal)
            return False
        self.goals.append(goal)
        self.moving = True
        return True

    def cancel_goal(self) -> None:
        self.cancel_count += 1
        self.moving = False

    def print_status(self) -> None:
        self.status_count += 1


class FakeMarkers:
    """Marker publisher stub recording everything published."""

    def __init__(self):
        self.channels = {}
        self.points = {}
        self.poses = {}

    def add(self, name, topic, shape='points', scale=(0.05, 0.05, 0.05)):
        self.channels[name] = {'topic': topic, 'shape': shape, 'scale': tuple(scale)}

    def publish_points(self, name, points):
        self.points[name] = tuple(points)

    def publish_pose(self, name, pose):
        self.poses[name] = pose


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# ==================== Fixtures ====================

@pytest.fixture
def robot():
    return FakeRobot()


@pytest.fixture
def markers():
    return FakeMarkers()


@pytest.fixture
def map_service():
    return MapService()


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def two_frontiers():
    """Small frontier F1 followed by a larger frontier F2."""
    return FrontierMap.from_points([
        [(0.0, 0.0), (0.0, 1.0)],
        [(2.0, 0.0), (2.0, 1.0), (2.0, 2.0), (2.0, 3.0), (2.0, 4.0)],
    ])


@pytest.fixture
def make_controller(robot, map_service, markers, logger, clock):
    """Factory for started controllers; extra kwargs become parameters."""
    def factory(**param_overrides):
        kwargs = {'goal_selector_type': 'mid_point'}
        kwargs.update(param_overrides)
        params = ExplorationParams(**kwargs)
        controller = ExplorationController(
            robot, map_service, markers, logger, params=params, clock=clock
        )
        controller.finish_calls = 0

        def on_finish():
            controller.finish_calls += 1
        controller.on_finish = on_finish
        controller.start()
        return controller
    return factory
