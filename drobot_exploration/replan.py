"""
Replanning gate.

The gate holds an ordered list of named causes. Each cause wraps a predicate
over a ReplanContext; the gate asks for a new goal as soon as one of them
holds. Causes are created by name from a registry, with string parameters
taken from 'replaning/<cause>'.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

from drobot_exploration.config import Config
from drobot_exploration.errors import ConfigurationError
from drobot_exploration.types import FrontierMap, Goal, Pose2D
from drobot_exploration import utils


@dataclass(frozen=True)
class ReplanContext:
    """Read-only view of the exploration state handed to cause predicates."""
    pose: Optional[Pose2D] = None
    goal: Optional[Goal] = None
    is_moving: bool = False
    goal_age: Optional[float] = None        # sec since the goal was sent
    goal_start_yaw: Optional[float] = None  # robot yaw when the goal was sent
    frontier_map: FrontierMap = field(default_factory=FrontierMap)


Predicate = Callable[[ReplanContext], bool]
CauseFactory = Callable[[Mapping[str, str]], Predicate]


@dataclass(frozen=True)
class ReplanCause:
    """Named replanning predicate with its parameters."""
    name: str
    params: Mapping[str, str] = field(default_factory=dict)
    predicate: Predicate = field(default=lambda context: False, repr=False, compare=False)

    def evaluate(self, context: ReplanContext) -> bool:
        return bool(self.predicate(context))


_CAUSES: Dict[str, CauseFactory] = {}


def register_cause(name: str) -> Callable[[CauseFactory], CauseFactory]:
    """Decorator adding a predicate factory to the cause registry."""
    def decorator(factory: CauseFactory) -> CauseFactory:
        _CAUSES[name] = factory
        return factory
    return decorator


def available_causes() -> List[str]:
    return sorted(_CAUSES)


def create_cause(name: str, params: Optional[Mapping[str, str]] = None) -> ReplanCause:
    """
    Build a registered cause.

    Args:
        name: Registered cause name
        params: String parameters, None for defaults

    Raises:
        ConfigurationError: unknown name or unparsable parameter
    """
    try:
        factory = _CAUSES[name]
    except KeyError:
        raise ConfigurationError(
            f'String {name} does not name a valid replaning cause '
            f'(available: {", ".join(available_causes())})'
        ) from None
    params = dict(params or {})
    return ReplanCause(name, params, factory(params))


def _float_param(params: Mapping[str, str], key: str, default: float, cause: str) -> float:
    if key not in params:
        return default
    try:
        return float(params[key])
    except ValueError:
        raise ConfigurationError(
            f'replaning/{cause}/{key} must be a number, got {params[key]!r}'
        ) from None


# ==================== Built-in Causes ====================

@register_cause('not_moving')
def _not_moving(params: Mapping[str, str]) -> Predicate:
    return lambda ctx: ctx.goal is not None and not ctx.is_moving


@register_cause('distance')
def _distance(params: Mapping[str, str]) -> Predicate:
    threshold = _float_param(params, 'threshold', Config.REPLAN_DISTANCE_THRESHOLD, 'distance')

    def predicate(ctx: ReplanContext) -> bool:
        if ctx.goal is None or ctx.pose is None:
            return False
        return ctx.pose.distance_to(ctx.goal.x, ctx.goal.y) < threshold
    return predicate


@register_cause('rotation')
def _rotation(params: Mapping[str, str]) -> Predicate:
    threshold = _float_param(params, 'threshold', Config.REPLAN_ROTATION_THRESHOLD, 'rotation')

    def predicate(ctx: ReplanContext) -> bool:
        if ctx.pose is None or ctx.goal_start_yaw is None:
            return False
        return abs(utils.normalize_angle(ctx.pose.yaw - ctx.goal_start_yaw)) > threshold
    return predicate


@register_cause('time')
def _time(params: Mapping[str, str]) -> Predicate:
    timeout = _float_param(params, 'timeout', Config.REPLAN_TIMEOUT, 'time')
    return lambda ctx: ctx.goal_age is not None and ctx.goal_age > timeout


@register_cause('frontier_lost')
def _frontier_lost(params: Mapping[str, str]) -> Predicate:
    tolerance = _float_param(
        params, 'tolerance', Config.REPLAN_FRONTIER_TOLERANCE, 'frontier_lost'
    )

    def predicate(ctx: ReplanContext) -> bool:
        if ctx.goal is None:
            return False
        for frontier in ctx.frontier_map:
            for x, y in frontier.points:
                if utils.euclidean_distance(x, y, ctx.goal.x, ctx.goal.y) <= tolerance:
                    return False
        return True
    return predicate


class ReplanGate:
    """Aggregates replanning causes with a logical OR."""

    def __init__(self, logger: Optional[Callable] = None):
        """
        Initialize an empty gate.

        Args:
            logger: Optional logger function
        """
        self.causes: List[ReplanCause] = []
        self.logger = logger or (lambda msg: None)

    def add_cause(self, name: str, params: Optional[Mapping[str, str]] = None) -> ReplanCause:
        """
        Register a cause by name, with default parameters when params is None.

        Raises:
            ConfigurationError: unknown name or invalid parameter
        """
        cause = create_cause(name, params)
        self.add(cause)
        return cause

    def add(self, cause: ReplanCause) -> None:
        self.causes.append(cause)
        if cause.params:
            self.logger(f'Replaning cause {cause.name} added with {dict(cause.params)}')
        else:
            self.logger(f'Replaning cause {cause.name} added with default parameters')

    def replan(self, context: Optional[ReplanContext] = None) -> bool:
        """
        Check whether a new goal should be computed.

        Returns:
            True iff at least one registered cause holds; always False
            without causes
        """
        if context is None:
            context = ReplanContext()
        return any(cause.evaluate(context) for cause in self.causes)

    @property
    def names(self) -> List[str]:
        return [cause.name for cause in self.causes]

    def __len__(self) -> int:
        return len(self.causes)
