"""Exceptions raised by the exploration controller."""


class ExplorationError(Exception):
    """Base class for exploration failures."""


class ConfigurationError(ExplorationError):
    """Invalid or missing exploration parameter."""


class NoAcceptableGoal(ExplorationError):
    """No frontier of the current map yields a goal."""

    def __init__(self, num_frontiers: int):
        self.num_frontiers = num_frontiers
        super().__init__(
            f'No acceptable goal among {num_frontiers} frontier(s)'
        )
