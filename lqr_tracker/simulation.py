"""Closed-loop simulation of the tracker on a kinematic agent.

The simulator plays the host role: it owns the fixed-period control loop,
feeds the controller the agent pose and speed every cycle, applies actuator
limits and the fallback policy for failed cycles, and integrates the
unicycle model forward.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from lqr_tracker.config import SIM_INITIAL_SPEED, SIM_MAX_TIME, TERM_BLUE, TERM_ORANGE, TERM_RESET
from lqr_tracker.control_law import ControlVector
from lqr_tracker.controller import CycleReport, LQRController
from lqr_tracker.data_collector import DataCollector
from lqr_tracker.errors import ControlError, SingularGainError
from lqr_tracker.geometry import Pose
from lqr_tracker.model import clamp_command, step_pose

logger = logging.getLogger(__name__)


def cross_track_error(pose: Pose, path_xy: np.ndarray) -> float:
    """Distance from the agent to the nearest point of a polyline (meters).

    Args:
        pose: Agent pose
        path_xy: (N, 2) array of waypoint positions

    Returns:
        Minimum distance to any segment (or to the single point if N == 1)
    """
    point = np.array([pose.x, pose.y])
    if len(path_xy) == 1:
        return float(np.linalg.norm(point - path_xy[0]))

    starts = path_xy[:-1]
    segments = path_xy[1:] - starts
    seg_len_sq = np.sum(segments**2, axis=1)
    # Guard duplicate waypoints against division by zero
    safe_len_sq = np.where(seg_len_sq > 0.0, seg_len_sq, 1.0)
    t = np.clip(np.sum((point - starts) * segments, axis=1) / safe_len_sq, 0.0, 1.0)
    t = np.where(seg_len_sq > 0.0, t, 0.0)
    closest = starts + segments * t[:, None]
    return float(np.min(np.linalg.norm(closest - point, axis=1)))


@dataclass
class SimulationResult:
    """Recorded signals and summary metrics of one simulated run."""

    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    heading: np.ndarray
    speed: np.ndarray
    v_cmd: np.ndarray
    omega_cmd: np.ndarray
    cross_track: np.ndarray
    lookahead: List[Optional[Pose]] = field(default_factory=list)
    goal_reached: bool = False
    failed_cycles: int = 0
    diagnostics: Dict[str, float] = field(default_factory=dict)

    @property
    def elapsed_time(self) -> float:
        return float(self.time[-1]) if len(self.time) else 0.0

    @property
    def cross_track_rms(self) -> float:
        if not len(self.cross_track):
            return 0.0
        return float(np.sqrt(np.mean(self.cross_track**2)))

    @property
    def max_cross_track(self) -> float:
        return float(np.max(self.cross_track)) if len(self.cross_track) else 0.0

    def summary(self) -> Dict[str, float]:
        """Summary metrics for logging and the run summary file."""
        result = {
            "goal_reached": int(self.goal_reached),
            "elapsed_time": self.elapsed_time,
            "steps": len(self.time),
            "cross_track_rms": self.cross_track_rms,
            "max_cross_track": self.max_cross_track,
            "failed_cycles": self.failed_cycles,
        }
        result.update(self.diagnostics)
        return result


class Simulator:
    """Fixed-period control loop driving an LQRController on a unicycle.

    Attributes:
        controller: Controller under test
        max_time: Simulation time limit (seconds)
        data_collector: Optional CSV logger for the run
    """

    def __init__(
        self,
        controller: Optional[LQRController] = None,
        max_time: float = SIM_MAX_TIME,
        data_collector: Optional[DataCollector] = None,
    ):
        self.controller = controller if controller is not None else LQRController()
        self.max_time = max_time
        self.data_collector = data_collector

        self._last_report: Optional[CycleReport] = None
        self.controller.add_cycle_listener(self._record_cycle)
        if data_collector is not None:
            self.controller.add_cycle_listener(data_collector.log_cycle)

    def _record_cycle(self, report: CycleReport) -> None:
        self._last_report = report

    def _command(self, pose: Pose, speed: float) -> ControlVector:
        """Run one controller cycle, applying the fallback policy on failure."""
        try:
            return self.controller.compute_velocity_command(pose, speed)
        except SingularGainError as e:
            logger.warning(f"{TERM_ORANGE}{e}; falling back to previous gain{TERM_RESET}")
            return self.controller.fallback_command(pose, speed)
        except ControlError as e:
            logger.error(f"Control cycle failed: {e}; commanding zero velocity")
            return ControlVector.zero()

    def run(
        self,
        path: Sequence[Pose],
        initial_pose: Optional[Pose] = None,
        initial_speed: float = SIM_INITIAL_SPEED,
    ) -> SimulationResult:
        """Simulate following a path until the goal is reached or time runs out.

        Args:
            path: Waypoints to follow
            initial_pose: Agent start pose (default: first waypoint)
            initial_speed: Agent speed at t=0 (m/s)

        Returns:
            SimulationResult with per-cycle signals and summary metrics

        Raises:
            EmptyPathError: If ``path`` has no waypoints.
        """
        self.controller.set_path(path)
        path_xy = np.array([[p.x, p.y] for p in path], dtype=float)
        if self.data_collector is not None:
            self.data_collector.log_path(path)

        pose = initial_pose if initial_pose is not None else path[0]
        speed = initial_speed
        dt = self.controller.config.cycle_time
        n_steps = int(math.ceil(self.max_time / dt))

        times: List[float] = []
        poses: List[Pose] = []
        speeds: List[float] = []
        commands: List[ControlVector] = []
        lookaheads: List[Optional[Pose]] = []
        failed_cycles = 0

        logger.info(f"{TERM_BLUE}Simulating {len(path)} waypoints at {1.0 / dt:.0f} Hz{TERM_RESET}")

        for step in range(n_steps + 1):
            t = step * dt
            if self.data_collector is not None:
                self.data_collector.log_trajectory(t, pose, speed)

            self._last_report = None
            command = self._command(pose, speed)
            if self._last_report is None:
                failed_cycles += 1

            times.append(t)
            poses.append(pose)
            speeds.append(speed)
            commands.append(command)
            lookaheads.append(self._last_report.lookahead if self._last_report else None)

            if self.controller.is_goal_reached():
                logger.info(f"{TERM_BLUE}✓ Goal reached at t={t:.1f}s{TERM_RESET}")
                break

            v, omega = clamp_command(command.v, command.omega)
            pose = step_pose(pose, v, omega, dt)
            speed = v
        else:
            logger.warning(f"{TERM_ORANGE}Goal not reached within {self.max_time:.1f}s{TERM_RESET}")

        result = SimulationResult(
            time=np.array(times),
            x=np.array([p.x for p in poses]),
            y=np.array([p.y for p in poses]),
            heading=np.array([p.heading for p in poses]),
            speed=np.array(speeds),
            v_cmd=np.array([c.v for c in commands]),
            omega_cmd=np.array([c.omega for c in commands]),
            cross_track=np.array([cross_track_error(p, path_xy) for p in poses]),
            lookahead=lookaheads,
            goal_reached=self.controller.is_goal_reached(),
            failed_cycles=failed_cycles,
            diagnostics=self.controller.get_diagnostics(),
        )

        if self.data_collector is not None:
            self.data_collector.log_summary(result.summary())

        return result
