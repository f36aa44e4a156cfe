"""Collaborator protocols consumed by the exploration controller."""

from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

from drobot_exploration.types import Goal, Point, Pose2D


@runtime_checkable
class RobotMotion(Protocol):
    """Pose source and navigation command sink."""

    @property
    def pose(self) -> Optional[Pose2D]:
        """Pose from the last successful refresh."""
        ...

    def refresh_pose(self) -> bool:
        """Update the robot pose. False if it is unavailable."""
        ...

    def is_moving(self) -> bool:
        """Whether a navigation command is in progress."""
        ...

    def go_to(self, goal: Goal) -> bool:
        """Send a navigation goal without waiting for it. False if it was not sent."""
        ...

    def cancel_goal(self) -> None:
        """Cancel the active navigation goal."""
        ...

    def print_status(self) -> None:
        """Log pose and navigation status."""
        ...


@runtime_checkable
class MarkerPublisher(Protocol):
    """Visualization sink with named channels."""

    def add(
        self,
        name: str,
        topic: str,
        shape: str = 'points',
        scale: Tuple[float, float, float] = (0.05, 0.05, 0.05),
    ) -> None:
        """Create a channel publishing on topic."""
        ...

    def publish_points(self, name: str, points: Sequence[Point]) -> None:
        """Publish a point set on a channel."""
        ...

    def publish_pose(self, name: str, pose: Pose2D) -> None:
        """Publish a pose on a channel."""
        ...
