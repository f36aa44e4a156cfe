"""
Drobot Exploration Package

Frontier-based autonomous exploration: a fixed-rate controller that picks
goals on frontier snapshots, replans on configurable causes and stops when
no frontiers remain.
"""
from .config import Config, ExplorationParams, load_params
from .errors import ConfigurationError, ExplorationError, NoAcceptableGoal
from .types import (
    ExplorationState,
    ExplorationStats,
    Frontier,
    FrontierMap,
    Goal,
    MapInfo,
    Pose2D,
)
from .goal_selector import GoalSelector, MidPoint, create_goal_selector, register_goal_selector
from .replan import ReplanCause, ReplanContext, ReplanGate, register_cause
from .frontier import FrontierDetector
from .map_service import MapService
from .controller import ExplorationController

__version__ = '1.0.0'
__all__ = [
    'Config',
    'ExplorationParams',
    'load_params',
    'ConfigurationError',
    'ExplorationError',
    'NoAcceptableGoal',
    'ExplorationState',
    'ExplorationStats',
    'Frontier',
    'FrontierMap',
    'Goal',
    'MapInfo',
    'Pose2D',
    'GoalSelector',
    'MidPoint',
    'create_goal_selector',
    'register_goal_selector',
    'ReplanCause',
    'ReplanContext',
    'ReplanGate',
    'register_cause',
    'FrontierDetector',
    'MapService',
    'ExplorationController',
]
