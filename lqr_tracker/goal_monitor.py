"""Goal-completion state machine.

Two states:
- TRACKING: still following the path
- REACHED: position and heading were within tolerance of the final waypoint
  in the same cycle. Terminal until a new path is set (``reset``).
"""

import logging
import math
from enum import Enum

from lqr_tracker.geometry import Pose, wrap_angle

logger = logging.getLogger(__name__)


class GoalState(Enum):
    TRACKING = "tracking"
    REACHED = "reached"


class GoalMonitor:
    """Latches REACHED once the agent is at the goal pose within tolerance."""

    def __init__(self) -> None:
        self.state = GoalState.TRACKING

    @property
    def is_reached(self) -> bool:
        return self.state is GoalState.REACHED

    def reset(self) -> None:
        """Return to TRACKING (called when a new path is set)."""
        self.state = GoalState.TRACKING

    def update(self, current_pose: Pose, goal_pose: Pose, dist_tol: float, heading_tol: float) -> GoalState:
        """Advance the state machine for one control cycle.

        Args:
            current_pose: Agent pose in the global frame
            goal_pose: Final waypoint of the path
            dist_tol: Position tolerance (meters)
            heading_tol: Heading tolerance (radians)

        Returns:
            State after this cycle
        """
        if self.state is GoalState.REACHED:
            return self.state

        distance = math.hypot(current_pose.x - goal_pose.x, current_pose.y - goal_pose.y)
        heading_error = abs(wrap_angle(current_pose.heading - goal_pose.heading))

        if distance < dist_tol and heading_error < heading_tol:
            self.state = GoalState.REACHED
            logger.info(
                f"Goal reached: distance {distance:.3f} m, heading error {math.degrees(heading_error):.1f}°"
            )

        return self.state
