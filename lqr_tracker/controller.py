"""LQR path tracking controller.

Composes the tracker components into one control cycle:

    goal check → prune → lookahead distance → lookahead point
    → error state → linearize → Riccati solve → u = -K e

Threading: ``set_path`` and ``compute_velocity_command`` mutate the shared
``ControllerState`` and are not synchronized. The host must not call them
concurrently on the same instance; the controller is meant to be driven by a
single fixed-period control loop.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from lqr_tracker.config_model import ControllerConfig
from lqr_tracker.control_law import ControlVector, evaluate
from lqr_tracker.error_model import compute_error, linearize
from lqr_tracker.errors import EmptyPathError, NoPathError, SingularGainError
from lqr_tracker.geometry import Pose
from lqr_tracker.goal_monitor import GoalMonitor, GoalState
from lqr_tracker.path_tracker import PathTracker
from lqr_tracker.riccati import RiccatiSolution, solve_riccati

logger = logging.getLogger(__name__)


class PathFollowingController(ABC):
    """Capability interface of a path following controller.

    The host sets a path, then calls ``compute_velocity_command`` once per
    control period until ``is_goal_reached`` returns True.
    """

    @abstractmethod
    def set_path(self, path: Sequence[Pose]) -> None:
        """Replace the path being followed.

        Raises:
            EmptyPathError: If the path has no waypoints.
        """

    @abstractmethod
    def is_goal_reached(self) -> bool:
        """Return True once the final waypoint has been reached."""

    @abstractmethod
    def compute_velocity_command(self, current_pose: Pose, current_speed: float) -> ControlVector:
        """Compute the velocity command for one control cycle.

        Raises:
            ControlError: If no command can be computed this cycle.
        """


@dataclass(frozen=True)
class CycleReport:
    """Snapshot of one successful control cycle, passed to cycle listeners.

    Attributes:
        pose: Agent pose the cycle was computed for
        lookahead: Lookahead reference point (None once the goal is reached)
        lookahead_distance: Target arc distance used this cycle (m)
        error: Error state [ex, ey, e_theta]
        iterations: Riccati iterations performed
        converged: Whether the Riccati iteration converged
        command: Output command
        goal_state: Goal state after this cycle
    """

    pose: Pose
    lookahead: Optional[Pose]
    lookahead_distance: float
    error: np.ndarray
    iterations: int
    converged: bool
    command: ControlVector
    goal_state: GoalState


CycleListener = Callable[[CycleReport], None]


@dataclass
class ControllerDiagnostics:
    """Running counters for monitoring gain quality."""

    cycles: int = 0
    nonconverged_solves: int = 0
    singular_gains: int = 0
    last_iterations: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "cycles": self.cycles,
            "nonconverged_solves": self.nonconverged_solves,
            "singular_gains": self.singular_gains,
            "last_iterations": self.last_iterations,
        }


@dataclass
class ControllerState:
    """All mutable controller state, written only by the control loop thread.

    Attributes:
        tracker: Current path and pruning cursor
        goal_monitor: Goal-completion state machine
        last_solution: Riccati solution of the most recent successful cycle.
            Kept for the host's fallback policy; the controller never reuses it.
        diagnostics: Running counters
    """

    tracker: PathTracker
    goal_monitor: GoalMonitor = field(default_factory=GoalMonitor)
    last_solution: Optional[RiccatiSolution] = None
    diagnostics: ControllerDiagnostics = field(default_factory=ControllerDiagnostics)


class LQRController(PathFollowingController):
    """Path follower using a linear quadratic regulator on the tracking error.

    A fresh gain is solved every cycle for the current linearization, so no
    stale gain is ever applied.
    """

    def __init__(self, config: Optional[ControllerConfig] = None):
        """Initialize the controller.

        Args:
            config: Controller configuration. If None, uses default values
                from lqr_tracker.config.
        """
        self.config = config if config is not None else ControllerConfig()
        self._Q = self.config.Q
        self._R = self.config.R
        self.state = ControllerState(
            tracker=PathTracker(
                lookahead_time_gain=self.config.lookahead_time_gain,
                min_lookahead_dist=self.config.min_lookahead_dist,
                max_lookahead_dist=self.config.max_lookahead_dist,
                max_trailing_radius=self.config.max_trailing_radius,
            )
        )
        self._listeners: List[CycleListener] = []

    @classmethod
    def initialize(cls, options: Optional[Dict] = None) -> "LQRController":
        """Create a controller from a mapping of recognized options.

        Raises:
            ValueError: On unrecognized or out-of-range options.
        """
        return cls(ControllerConfig.from_dict(options or {}))

    @property
    def tracker(self) -> PathTracker:
        return self.state.tracker

    @property
    def last_solution(self) -> Optional[RiccatiSolution]:
        """Riccati solution of the last successful cycle (host fallback only)."""
        return self.state.last_solution

    def add_cycle_listener(self, listener: CycleListener) -> None:
        """Register a callback receiving a CycleReport after each successful cycle."""
        self._listeners.append(listener)

    def set_path(self, path: Sequence[Pose]) -> None:
        try:
            self.state.tracker.set_path(path)
        except EmptyPathError:
            logger.warning("Rejected empty path, keeping the previous one")
            raise
        self.state.goal_monitor.reset()
        logger.info(f"Following new path with {len(self.state.tracker.path)} waypoints")

    def is_goal_reached(self) -> bool:
        return self.state.goal_monitor.is_reached

    def reference_speed(self, lookahead_distance: float, current_speed: float) -> float:
        """Speed of the reference used for linearization (m/s).

        The speed implied by the lookahead window: the current speed clamped to
        [min, max] lookahead distance divided by the time gain. It stays positive
        while min_lookahead_dist > 0, which keeps the lateral error controllable
        from standstill.
        """
        if self.config.lookahead_time_gain > 0:
            return lookahead_distance / self.config.lookahead_time_gain
        return abs(current_speed)

    def compute_velocity_command(self, current_pose: Pose, current_speed: float) -> ControlVector:
        """Compute the velocity command for one control cycle.

        Args:
            current_pose: Agent pose in the global frame
            current_speed: Agent forward speed (m/s)

        Returns:
            ControlVector [v, omega]; zero once the goal has been reached

        Raises:
            NoPathError: If no path has been set.
            EmptyPathError: If pruning left no waypoints (internal invariant violation).
            SingularGainError: If the Riccati gain inverse is ill-conditioned.
        """
        tracker = self.state.tracker
        goal = tracker.goal
        if goal is None:
            raise NoPathError("compute_velocity_command called before set_path")

        goal_state = self.state.goal_monitor.update(
            current_pose, goal, self.config.goal_dist_tol, self.config.goal_heading_tol
        )
        if goal_state is GoalState.REACHED:
            command = ControlVector.zero()
            self._notify(
                CycleReport(
                    pose=current_pose,
                    lookahead=None,
                    lookahead_distance=0.0,
                    error=np.zeros(3),
                    iterations=0,
                    converged=True,
                    command=command,
                    goal_state=goal_state,
                )
            )
            return command

        pruned = tracker.prune(current_pose)
        if len(pruned) == 0:
            logger.error("Pruning removed every waypoint; path invariant violated")
            raise EmptyPathError("Pruning left no waypoints")

        lookahead_dist = tracker.lookahead_distance(current_speed)
        lookahead = tracker.lookahead_point(lookahead_dist, current_pose, pruned)
        error = compute_error(current_pose, lookahead)

        v_ref = self.reference_speed(lookahead_dist, current_speed)
        model = linearize(error, v_ref, lookahead_dist, self.config.cycle_time)

        diagnostics = self.state.diagnostics
        try:
            solution = solve_riccati(
                model.A,
                model.B,
                self._Q,
                self._R,
                max_iter=self.config.max_iter,
                eps=self.config.eps_iter,
                condition_limit=self.config.gain_condition_limit,
            )
        except SingularGainError:
            diagnostics.singular_gains += 1
            raise

        diagnostics.cycles += 1
        diagnostics.last_iterations = solution.iterations
        if not solution.converged:
            diagnostics.nonconverged_solves += 1
        self.state.last_solution = solution

        command = evaluate(solution.K, error)
        logger.debug(
            f"Lookahead ({lookahead.x:.3f}, {lookahead.y:.3f}) at {lookahead_dist:.2f} m, "
            f"error [{error[0]:.3f}, {error[1]:.3f}, {error[2]:.3f}], "
            f"cmd v={command.v:.3f} omega={command.omega:.3f}"
        )

        self._notify(
            CycleReport(
                pose=current_pose,
                lookahead=lookahead,
                lookahead_distance=lookahead_dist,
                error=error,
                iterations=solution.iterations,
                converged=solution.converged,
                command=command,
                goal_state=goal_state,
            )
        )
        return command

    def fallback_command(self, current_pose: Pose, current_speed: float) -> ControlVector:
        """Command for a cycle whose gain could not be computed.

        Applies the previous cycle's gain to the current error if one exists,
        otherwise returns a zero command. Hosts call this after catching
        SingularGainError if they choose that fallback policy.

        Args:
            current_pose: Agent pose in the global frame
            current_speed: Agent forward speed (m/s)

        Returns:
            Fallback ControlVector
        """
        tracker = self.state.tracker
        previous = self.state.last_solution
        if previous is None or not tracker.has_path or self.is_goal_reached():
            return ControlVector.zero()

        pruned = tracker.prune(current_pose)
        lookahead = tracker.lookahead_point(tracker.lookahead_distance(current_speed), current_pose, pruned)
        return evaluate(previous.K, compute_error(current_pose, lookahead))

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and monitoring.

        Returns:
            Dictionary containing:
                - cycles: Successful control cycles since construction
                - nonconverged_solves: Cycles whose Riccati iteration hit max_iter
                - singular_gains: Cycles that failed with SingularGainError
                - last_iterations: Riccati iterations in the last cycle
                - path_cursor: Index of the first unpassed waypoint
                - goal_reached: 1 if the goal has been reached, else 0
        """
        result: Dict[str, float] = dict(self.state.diagnostics.to_dict())
        result["path_cursor"] = self.state.tracker.cursor
        result["goal_reached"] = int(self.is_goal_reached())
        return result

    def _notify(self, report: CycleReport) -> None:
        for listener in self._listeners:
            listener(report)
