"""Reference waypoint paths for simulation and testing.

The controller is given its path by the host; these generators provide
standard test paths:
- Straight line
- Circular arc
- Lemniscate of Gerono (figure eight)

Every generator returns a list of Poses spaced roughly evenly by arc length,
with headings along the curve tangent.
"""

import math
from typing import List, Sequence

import numpy as np
import numpy.typing as npt

from lqr_tracker.config import SIM_PATH_SPACING
from lqr_tracker.geometry import Pose


def path_length(path: Sequence[Pose]) -> float:
    """Total length of the straight segments joining the waypoints (meters)."""
    return float(sum(a.distance_to(b) for a, b in zip(path[:-1], path[1:])))


def straight_line(
    length: float, spacing: float = SIM_PATH_SPACING, heading: float = 0.0, x0: float = 0.0, y0: float = 0.0
) -> List[Pose]:
    """Generate a straight path.

    Args:
        length: Path length in meters
        spacing: Distance between waypoints in meters
        heading: Direction of travel in radians
        x0: Start x-coordinate in meters
        y0: Start y-coordinate in meters

    Returns:
        Waypoints from (x0, y0) to the end point, inclusive
    """
    n = max(1, int(math.ceil(length / spacing)))
    s = np.linspace(0.0, length, n + 1)
    return [Pose(x0 + d * math.cos(heading), y0 + d * math.sin(heading), heading) for d in s]


def circular_arc(radius: float, angle: float, spacing: float = SIM_PATH_SPACING) -> List[Pose]:
    """Generate a circular arc starting at the origin heading along +x.

    Args:
        radius: Arc radius in meters
        angle: Swept angle in radians; positive turns left, negative right
        spacing: Distance between waypoints in meters

    Returns:
        Waypoints along the arc
    """
    arc_len = abs(angle) * radius
    n = max(1, int(math.ceil(arc_len / spacing)))
    direction = 1.0 if angle >= 0 else -1.0

    waypoints = []
    for phi in np.linspace(0.0, abs(angle), n + 1):
        x = radius * math.sin(phi)
        y = direction * radius * (1.0 - math.cos(phi))
        waypoints.append(Pose(x, y, direction * phi))
    return waypoints


def _lemniscate_points(k: npt.NDArray[np.float64]) -> tuple:
    """Position and tangent of the Lemniscate of Gerono at parameter k.

    The curve is:
        x = -2 * sin(k) * cos(k)
        y = 2 * (sin(k) + 1)
    shifted so that k = -pi/2 sits at the origin.
    """
    x = -2.0 * np.sin(k) * np.cos(k)
    y = 2.0 * (np.sin(k) + 1.0)
    dx_dk = -2.0 * np.cos(2.0 * k)
    dy_dk = 2.0 * np.cos(k)
    return x, y, np.arctan2(dy_dk, dx_dk)


def lemniscate(fraction: float = 0.95, spacing: float = SIM_PATH_SPACING) -> List[Pose]:
    """Generate a figure-eight path (Lemniscate of Gerono).

    The full curve starts and ends at the origin heading along +x. A closed
    loop would put the goal on top of the start, so by default the last 5%
    of the curve is left out.

    Args:
        fraction: Portion of the full loop to include, in (0, 1]
        spacing: Approximate distance between waypoints in meters

    Returns:
        Waypoints resampled at uniform arc length
    """
    if not 0.0 < fraction <= 1.0:
        raise ValueError(f"fraction must be in (0, 1], got {fraction}")

    # Dense sampling, then resample by arc length
    k_dense = np.linspace(-np.pi / 2.0, -np.pi / 2.0 + 2.0 * np.pi * fraction, 4000)
    x, y, _ = _lemniscate_points(k_dense)
    arc = np.concatenate([[0.0], np.cumsum(np.hypot(np.diff(x), np.diff(y)))])

    n = max(1, int(math.ceil(arc[-1] / spacing)))
    k = np.interp(np.linspace(0.0, arc[-1], n + 1), arc, k_dense)
    xs, ys, headings = _lemniscate_points(k)

    return [Pose(float(px), float(py), float(h)) for px, py, h in zip(xs, ys, headings)]
