"""Planar pose type and angle helpers shared by the tracker modules."""

import math
from dataclasses import dataclass


def wrap_angle(angle: float) -> float:
    """Wrap an angle to the half-open interval (-pi, pi].

    Args:
        angle: Angle in radians (any range)

    Returns:
        Equivalent angle in (-pi, pi]
    """
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    # atan2 can return -pi exactly; fold it onto +pi
    if wrapped <= -math.pi:
        wrapped += 2.0 * math.pi
    return wrapped


@dataclass(frozen=True)
class Pose:
    """Agent or waypoint pose in the shared global frame.

    Attributes:
        x: Position x-coordinate (m)
        y: Position y-coordinate (m)
        heading: Heading angle (rad), counter-clockwise from +x
    """

    x: float
    y: float
    heading: float = 0.0

    def distance_to(self, other: "Pose") -> float:
        """Euclidean distance between the positions of two poses (m)."""
        return math.hypot(other.x - self.x, other.y - self.y)
