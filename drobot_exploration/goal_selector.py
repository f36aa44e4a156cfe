"""
Goal selection strategies.

A goal selector looks at one frontier at a time and either rejects it or
turns it into a navigation goal. Strategies are registered by name so the
node can pick one from the 'goal_selector/type' parameter.
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Type
import math

from drobot_exploration import utils
from drobot_exploration.errors import ConfigurationError, NoAcceptableGoal
from drobot_exploration.types import Frontier, FrontierMap, Goal


class GoalSelector(ABC):
    """Decides whether a frontier yields an acceptable goal."""

    name = ''

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> 'GoalSelector':
        """Build the selector from its string parameters."""
        return cls()

    @abstractmethod
    def decide_goal(self, frontier: Frontier) -> Optional[Goal]:
        """
        Turn a frontier into a goal.

        Args:
            frontier: Candidate frontier

        Returns:
            Goal pose, or None if the frontier is rejected
        """


_GOAL_SELECTORS: Dict[str, Type[GoalSelector]] = {}


def register_goal_selector(name: str) -> Callable[[Type[GoalSelector]], Type[GoalSelector]]:
    """Class decorator adding a strategy to the registry under name."""
    def decorator(cls: Type[GoalSelector]) -> Type[GoalSelector]:
        cls.name = name
        _GOAL_SELECTORS[name] = cls
        return cls
    return decorator


def available_goal_selectors() -> List[str]:
    return sorted(_GOAL_SELECTORS)


def create_goal_selector(
    name: Optional[str],
    params: Optional[Mapping[str, str]] = None
) -> GoalSelector:
    """
    Instantiate a registered goal selector.

    Args:
        name: Registered strategy name
        params: String parameters forwarded to the strategy

    Returns:
        New GoalSelector instance

    Raises:
        ConfigurationError: name is missing or unknown
    """
    if not name:
        raise ConfigurationError('Parameter goal_selector has not been configured')
    try:
        selector_cls = _GOAL_SELECTORS[name]
    except KeyError:
        raise ConfigurationError(
            f'String {name} does not name a valid goal selector '
            f'(available: {", ".join(available_goal_selectors())})'
        ) from None
    return selector_cls.from_params(params or {})


def select_goal(frontier_map: FrontierMap, selector: GoalSelector) -> Tuple[Frontier, Goal]:
    """
    Return the first frontier, in map order, that the selector accepts.

    Args:
        frontier_map: Current frontier snapshot
        selector: Strategy deciding each frontier

    Returns:
        Tuple of (frontier, goal)

    Raises:
        NoAcceptableGoal: every frontier was rejected (or the map is empty)
    """
    for frontier in frontier_map:
        goal = selector.decide_goal(frontier)
        if goal is not None:
            return frontier, goal
    raise NoAcceptableGoal(len(frontier_map))


@register_goal_selector('mid_point')
class MidPoint(GoalSelector):
    """Goal at the middle boundary point, facing across the frontier."""

    def __init__(self, min_size: int = 1):
        self.min_size = max(1, min_size)

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> 'MidPoint':
        try:
            min_size = int(params.get('min_size', 1))
        except ValueError:
            raise ConfigurationError(
                f'goal_selector/min_size must be an integer, got {params["min_size"]!r}'
            ) from None
        return cls(min_size=min_size)

    def decide_goal(self, frontier: Frontier) -> Optional[Goal]:
        if frontier.size < self.min_size:
            return None

        points = frontier.points
        x, y = points[len(points) // 2]

        (x0, y0), (x1, y1) = points[0], points[-1]
        if (x0, y0) == (x1, y1):
            yaw = 0.0
        else:
            yaw = utils.normalize_angle(math.atan2(y1 - y0, x1 - x0) + math.pi / 2)

        return Goal(x, y, yaw)
