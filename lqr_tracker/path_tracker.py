"""Path storage, pruning and lookahead point search.

This module keeps the path the controller is following and, once per
control cycle:
- Prunes waypoints the agent has already passed (monotonic cursor)
- Computes a speed-dependent lookahead distance
- Walks the remaining path to find the lookahead reference point
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from lqr_tracker import config as cfg
from lqr_tracker.errors import EmptyPathError, NoPathError
from lqr_tracker.geometry import Pose

logger = logging.getLogger(__name__)

# Segments shorter than this are treated as duplicate waypoints (meters)
MIN_SEGMENT_LENGTH = 1e-9


@dataclass(frozen=True)
class PrunedPath:
    """Suffix view of a path: the waypoints not yet passed.

    Attributes:
        path: The full path this view was taken from
        start_index: Index of the first remaining waypoint in ``path``
    """

    path: Tuple[Pose, ...]
    start_index: int

    @property
    def waypoints(self) -> Tuple[Pose, ...]:
        return self.path[self.start_index:]

    @property
    def final(self) -> Pose:
        return self.path[-1]

    def __len__(self) -> int:
        return len(self.path) - self.start_index


class PathTracker:
    """Owns the current path and locates the lookahead reference point.

    The pruning cursor only moves forward for a given path, so a briefly
    regressing agent never re-acquires waypoints it has already passed.
    Setting a new path resets the cursor.
    """

    def __init__(
        self,
        lookahead_time_gain: float = cfg.LOOKAHEAD_TIME_GAIN,
        min_lookahead_dist: float = cfg.MIN_LOOKAHEAD_DIST,
        max_lookahead_dist: float = cfg.MAX_LOOKAHEAD_DIST,
        max_trailing_radius: float = cfg.MAX_TRAILING_RADIUS,
    ):
        """Initialize the path tracker.

        Args:
            lookahead_time_gain: Lookahead distance per unit speed (seconds).
                Lookahead = lookahead_time_gain * v, clamped to [min, max].
            min_lookahead_dist: Minimum lookahead distance (meters).
            max_lookahead_dist: Maximum lookahead distance (meters).
            max_trailing_radius: Waypoints behind the agent farther than this
                radius are dropped during pruning (meters).
        """
        self.lookahead_time_gain = lookahead_time_gain
        self.min_lookahead_dist = min_lookahead_dist
        self.max_lookahead_dist = max_lookahead_dist
        self.max_trailing_radius = max_trailing_radius

        self._path: Optional[Tuple[Pose, ...]] = None
        self._path_xy: Optional[np.ndarray] = None  # (N, 2) positions for vectorized distances
        self._cursor: int = 0

    @property
    def has_path(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> Optional[Tuple[Pose, ...]]:
        return self._path

    @property
    def cursor(self) -> int:
        """Index of the first waypoint not yet passed."""
        return self._cursor

    @property
    def goal(self) -> Optional[Pose]:
        """Final waypoint of the current path, or None if no path is set."""
        return self._path[-1] if self._path else None

    def set_path(self, path: Sequence[Pose]) -> None:
        """Replace the stored path and reset the pruning cursor.

        Args:
            path: Ordered waypoints; insertion order is traversal order.

        Raises:
            EmptyPathError: If ``path`` has no waypoints. The previously set
                path (if any) stays in effect.
        """
        waypoints = tuple(path)
        if not waypoints:
            raise EmptyPathError("Cannot set a path with zero waypoints")

        self._path = waypoints
        self._path_xy = np.array([[p.x, p.y] for p in waypoints], dtype=float)
        self._cursor = 0
        logger.debug(f"Path set: {len(waypoints)} waypoints, goal ({waypoints[-1].x:.2f}, {waypoints[-1].y:.2f})")

    def prune(self, current_pose: Pose) -> PrunedPath:
        """Drop waypoints the agent has passed or left far behind.

        The cursor advances while the next waypoint is closer to the agent than
        the cursor waypoint (or coincides with it), and while the cursor waypoint
        lies behind the agent farther than ``max_trailing_radius``. The final
        waypoint is never dropped.

        Args:
            current_pose: Agent pose in the global frame

        Returns:
            Suffix view of the path starting at the updated cursor

        Raises:
            NoPathError: If no path has been set.
        """
        if self._path is None or self._path_xy is None:
            raise NoPathError()

        distances = np.hypot(
            self._path_xy[:, 0] - current_pose.x, self._path_xy[:, 1] - current_pose.y
        )
        cos_h = math.cos(current_pose.heading)
        sin_h = math.sin(current_pose.heading)

        last = len(self._path) - 1
        cursor = self._cursor
        while cursor < last:
            passed = distances[cursor + 1] < distances[cursor] or (
                distances[cursor + 1] == distances[cursor]
                and np.array_equal(self._path_xy[cursor + 1], self._path_xy[cursor])
            )

            # Longitudinal offset of the cursor waypoint in the agent frame
            dx = self._path_xy[cursor, 0] - current_pose.x
            dy = self._path_xy[cursor, 1] - current_pose.y
            behind = dx * cos_h + dy * sin_h < 0.0
            trailing = behind and distances[cursor] > self.max_trailing_radius

            if not (passed or trailing):
                break
            cursor += 1

        if cursor != self._cursor:
            logger.debug(f"Pruned waypoints {self._cursor}..{cursor - 1}")
        self._cursor = cursor

        return PrunedPath(self._path, cursor)

    def lookahead_distance(self, speed: float) -> float:
        """Compute the speed-dependent lookahead distance.

        Higher speeds → longer lookahead for smoother tracking
        Lower speeds → shorter lookahead for tighter control

        Args:
            speed: Current agent speed (m/s)

        Returns:
            Lookahead distance (meters), clamped to [min, max]. A reversing
            agent (negative speed) gets the minimum distance.
        """
        lookahead = self.lookahead_time_gain * speed
        return max(self.min_lookahead_dist, min(self.max_lookahead_dist, lookahead))

    def _projected_start(self, current_pose: Pose, waypoints: Sequence[Pose]) -> Tuple[float, float]:
        """Project the agent onto the first segment of the remaining path.

        The projection is clamped to the segment, so it never falls before the
        first remaining waypoint.
        """
        p0 = waypoints[0]
        if len(waypoints) < 2:
            return p0.x, p0.y

        p1 = waypoints[1]
        seg_x = p1.x - p0.x
        seg_y = p1.y - p0.y
        seg_len_sq = seg_x**2 + seg_y**2
        if seg_len_sq < MIN_SEGMENT_LENGTH**2:
            return p0.x, p0.y

        t = ((current_pose.x - p0.x) * seg_x + (current_pose.y - p0.y) * seg_y) / seg_len_sq
        t = max(0.0, min(1.0, t))
        return p0.x + t * seg_x, p0.y + t * seg_y

    def remaining_length(self, current_pose: Pose, pruned: PrunedPath) -> float:
        """Arc length of the pruned path from the agent's projected start (meters)."""
        waypoints = pruned.waypoints
        prev_x, prev_y = self._projected_start(current_pose, waypoints)
        total = 0.0
        for point in waypoints[1:]:
            total += math.hypot(point.x - prev_x, point.y - prev_y)
            prev_x, prev_y = point.x, point.y
        return total

    def lookahead_point(self, distance: float, current_pose: Pose, pruned: PrunedPath) -> Pose:
        """Find the point on the pruned path at an arc distance ahead of the agent.

        Walks the pruned path from the agent's projected position, accumulating
        straight-line segment lengths, and interpolates linearly on the segment
        where ``distance`` is reached. The returned heading is the direction of
        that segment.

        Args:
            distance: Target arc distance (meters)
            current_pose: Agent pose in the global frame
            pruned: Remaining path from ``prune``

        Returns:
            Lookahead reference pose. If the remaining path is shorter than
            ``distance``, the final waypoint itself.

        Raises:
            EmptyPathError: If the pruned path has no waypoints.
        """
        waypoints = pruned.waypoints
        if not waypoints:
            raise EmptyPathError("Pruned path has no waypoints")
        if len(waypoints) == 1:
            return waypoints[0]

        prev_x, prev_y = self._projected_start(current_pose, waypoints)
        travelled = 0.0

        for point in waypoints[1:]:
            seg_x = point.x - prev_x
            seg_y = point.y - prev_y
            seg_len = math.hypot(seg_x, seg_y)
            if seg_len < MIN_SEGMENT_LENGTH:
                # Duplicate waypoint (or projection landed on it)
                prev_x, prev_y = point.x, point.y
                continue

            if travelled + seg_len >= distance:
                ratio = max(0.0, distance - travelled) / seg_len
                return Pose(
                    x=prev_x + ratio * seg_x,
                    y=prev_y + ratio * seg_y,
                    heading=math.atan2(seg_y, seg_x),
                )

            travelled += seg_len
            prev_x, prev_y = point.x, point.y

        # Remaining path shorter than the lookahead: track the final waypoint
        return waypoints[-1]
