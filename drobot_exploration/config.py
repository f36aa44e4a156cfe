"""
Configuration for the exploration controller.

Named constants live in Config; runtime parameters are read from a nested
parameter tree (ROS parameters or a YAML file) into ExplorationParams.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
import math
import os

import yaml

from drobot_exploration.errors import ConfigurationError


class Config:
    """Exploration configuration constants."""

    # ==================== Main Loop ====================
    LOOP_RATE = 1.0                 # Hz - exploration tick rate
    EMPTY_MAPS_TO_FINISH = 3        # consecutive maps without frontiers before finishing

    # ==================== Topics / Frames ====================
    MAP_TOPIC = '/2Dgrid_map'
    COSTMAP_TOPIC = '/global_costmap/costmap'
    GLOBAL_FRAME = 'map'
    ROBOT_BASE_FRAME = 'base_link'
    NAV_ACTION = 'navigate_to_pose'
    TF_TIMEOUT = 1.0                # sec - pose lookup timeout
    NAV_SERVER_TIMEOUT = 0.5        # sec - wait for the navigation action server

    # ==================== Frontier Detection ====================
    MIN_FRONTIER_SIZE = 3           # minimum frontier cluster size (cells)
    LETHAL_COST = 99                # costmap value at which frontier cells are dropped

    # ==================== Markers ====================
    FRONTIER_CHANNEL = 'f_goal'
    FRONTIER_TOPIC = 'goal_frontier'
    GOAL_CHANNEL = 'goal'
    GOAL_TOPIC = 'goal_marker'
    GOAL_MARKER_SCALE = (0.5, 0.2, 0.1)
    FRONTIER_MARKER_SCALE = (0.05, 0.05, 0.05)

    # ==================== Replanning Defaults ====================
    REPLAN_DISTANCE_THRESHOLD = 0.5         # m - goal considered reached
    REPLAN_ROTATION_THRESHOLD = math.pi / 2  # rad - heading change since goal sent
    REPLAN_TIMEOUT = 30.0                   # sec - max age of a goal
    REPLAN_FRONTIER_TOLERANCE = 0.5         # m - goal still next to a frontier


def get_param(tree: Mapping, path: str, default: Any = None) -> Any:
    """
    Look up a slash separated path such as 'goal_selector/type'.

    Args:
        tree: Nested parameter mapping
        path: Slash separated key path
        default: Value returned when any key on the path is missing

    Returns:
        The value found, or default
    """
    node = tree
    for key in path.split('/'):
        if not isinstance(node, Mapping) or key not in node:
            return default
        node = node[key]
    return node


def params_to_tree(flat: Mapping[str, Any], separator: str = '.') -> Dict[str, Any]:
    """
    Nest flat parameter names ('replaning.distance.threshold') into dicts.

    Args:
        flat: Mapping of flat parameter name to value
        separator: Name separator (ROS 2 uses '.')

    Returns:
        Nested parameter tree
    """
    tree: Dict[str, Any] = {}
    for name, value in flat.items():
        keys = name.split(separator)
        node = tree
        for key in keys[:-1]:
            child = node.setdefault(key, {})
            if not isinstance(child, dict):
                raise ConfigurationError(
                    f'Parameter {name} conflicts with scalar parameter {key}'
                )
            node = child
        node[keys[-1]] = value
    return tree


def _string_map(value: Any, path: str) -> Dict[str, str]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f'Parameter {path} must be a mapping, got {value!r}')
    return {str(k): str(v) for k, v in value.items()}


@dataclass
class ExplorationParams:
    """Runtime parameters of the exploration node."""
    goal_selector_type: Optional[str] = None
    goal_selector_params: Dict[str, str] = field(default_factory=dict)
    replan_conditions: List[str] = field(default_factory=list)
    replan_params: Dict[str, Dict[str, str]] = field(default_factory=dict)
    loop_rate: float = Config.LOOP_RATE
    map_topic: str = Config.MAP_TOPIC
    costmap_topic: str = Config.COSTMAP_TOPIC
    global_frame: str = Config.GLOBAL_FRAME
    robot_base_frame: str = Config.ROBOT_BASE_FRAME
    min_frontier_size: int = Config.MIN_FRONTIER_SIZE
    lethal_cost: int = Config.LETHAL_COST
    empty_maps_to_finish: int = Config.EMPTY_MAPS_TO_FINISH

    @classmethod
    def from_tree(cls, tree: Mapping) -> 'ExplorationParams':
        """
        Read parameters from a nested tree.

        Missing entries keep their defaults. Only causes that have a
        'replaning/<cause>' entry end up in replan_params.
        """
        selector = get_param(tree, 'goal_selector', {}) or {}
        if not isinstance(selector, Mapping):
            raise ConfigurationError('Parameter goal_selector must be a mapping')
        selector_type = selector.get('type')
        selector_params = _string_map(
            {k: v for k, v in selector.items() if k != 'type'}, 'goal_selector'
        )

        conditions = get_param(tree, 'replaning/conditions', []) or []
        if isinstance(conditions, str):
            conditions = [conditions]
        conditions = [str(c) for c in conditions]

        replan_params = {}
        for cause in conditions:
            value = get_param(tree, f'replaning/{cause}')
            if value is not None:
                replan_params[cause] = _string_map(value, f'replaning/{cause}')

        try:
            params = cls(
                goal_selector_type=str(selector_type) if selector_type else None,
                goal_selector_params=selector_params,
                replan_conditions=conditions,
                replan_params=replan_params,
                loop_rate=float(get_param(tree, 'loop_rate', Config.LOOP_RATE)),
                map_topic=str(get_param(tree, 'map_topic', Config.MAP_TOPIC)),
                costmap_topic=str(get_param(tree, 'costmap_topic', Config.COSTMAP_TOPIC)),
                global_frame=str(get_param(tree, 'global_frame', Config.GLOBAL_FRAME)),
                robot_base_frame=str(
                    get_param(tree, 'robot_base_frame', Config.ROBOT_BASE_FRAME)
                ),
                min_frontier_size=int(
                    get_param(tree, 'min_frontier_size', Config.MIN_FRONTIER_SIZE)
                ),
                lethal_cost=int(get_param(tree, 'lethal_cost', Config.LETHAL_COST)),
                empty_maps_to_finish=int(
                    get_param(tree, 'empty_maps_to_finish', Config.EMPTY_MAPS_TO_FINISH)
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f'Invalid exploration parameter: {e}') from e

        if params.loop_rate <= 0.0:
            raise ConfigurationError(f'loop_rate must be positive, got {params.loop_rate}')
        return params


def load_params(params_file: str, node_name: Optional[str] = None) -> ExplorationParams:
    """
    Load parameters from a YAML file.

    Accepts a plain parameter tree or a ROS 2 params file
    ('<node>: ros__parameters: ...').

    Args:
        params_file: Path to the YAML file
        node_name: Node section to read from a ROS 2 params file

    Returns:
        Parsed ExplorationParams
    """
    if not os.path.exists(params_file):
        raise ConfigurationError(f'Parameter file {params_file} does not exist')

    with open(params_file, 'r') as f:
        tree = yaml.safe_load(f) or {}

    if not isinstance(tree, Mapping):
        raise ConfigurationError(f'Parameter file {params_file} is not a mapping')

    sections = {
        name: section['ros__parameters']
        for name, section in tree.items()
        if isinstance(section, Mapping) and 'ros__parameters' in section
    }
    if sections:
        if node_name is not None and node_name in sections:
            tree = sections[node_name]
        elif '/**' in sections:
            tree = sections['/**']
        else:
            tree = next(iter(sections.values()))

    return ExplorationParams.from_tree(tree)
