"""Data collection and CSV logging for tracker runs.

This module provides CSV data logging for:
- Reference path (waypoints given to the controller)
- Agent trajectory (pose and speed per cycle)
- Controller cycles (lookahead point, error state, Riccati iterations, commands)
- Run summary (goal reached, elapsed time, tracking error metrics)
"""

import csv
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, TextIO

from .config import RESULTS_DIR, TERM_BLUE, TERM_RESET
from .controller import CycleReport
from .geometry import Pose
from .goal_monitor import GoalState

logger = logging.getLogger(__name__)

PATH_FILENAME = "path.csv"
TRAJECTORY_FILENAME = "trajectory.csv"
CONTROLLER_FILENAME = "controller.csv"
SUMMARY_FILENAME = "summary.txt"

CONTROLLER_COLUMNS = [
    "time",
    "lookahead_x",
    "lookahead_y",
    "lookahead_dist",
    "e_x",
    "e_y",
    "e_theta",
    "iterations",
    "converged",
    "v_cmd",
    "omega_cmd",
    "goal_reached",
]


class DataCollector:
    """Manages CSV file creation and logging for a tracker run.

    This class handles all data logging responsibilities:
    - Creates timestamped output directories
    - Initializes CSV files with headers
    - Writes path, trajectory and controller data
    - Ensures proper cleanup on shutdown

    Attributes:
        run_dir: Directory path for this run's output files.
        trajectory_csv_file: File handle for the agent trajectory CSV.
        controller_csv_file: File handle for the controller cycle CSV.
    """

    def __init__(self, output_dir: str = ".", run_dir: Optional[str] = None) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, creates timestamped
                directory. Can also be set via RUN_DIR environment variable.

        Raises:
            ValueError: If output_dir is not a valid directory.
        """
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        self.trajectory_csv_file: Optional[TextIO] = None
        self.trajectory_csv_writer: Any = None
        self.controller_csv_file: Optional[TextIO] = None
        self.controller_csv_writer: Any = None

        # Time of the cycle currently being logged (set by log_trajectory)
        self._current_time: float = 0.0

        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # Create timestamped directory: results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / RESULTS_DIR / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.path_output_path: Path = self.run_dir / PATH_FILENAME
        self.trajectory_output_path: Path = self.run_dir / TRAJECTORY_FILENAME
        self.controller_output_path: Path = self.run_dir / CONTROLLER_FILENAME
        self.summary_output_path: Path = self.run_dir / SUMMARY_FILENAME

    def setup(self) -> None:
        """Initialize CSV files with headers.

        Must be called before writing trajectory or controller data.
        """
        self.trajectory_csv_file = open(self.trajectory_output_path, "w", newline="")
        self.trajectory_csv_writer = csv.writer(self.trajectory_csv_file)
        self.trajectory_csv_writer.writerow(["time", "x", "y", "heading", "speed"])
        self.trajectory_csv_file.flush()

        self.controller_csv_file = open(self.controller_output_path, "w", newline="")
        self.controller_csv_writer = csv.writer(self.controller_csv_file)
        self.controller_csv_writer.writerow(CONTROLLER_COLUMNS)
        self.controller_csv_file.flush()

        logger.info(f"{TERM_BLUE}✓ Initialized data collection to {self.run_dir}{TERM_RESET}")

    def log_path(self, path: Sequence[Pose]) -> None:
        """Write the reference path to CSV.

        Args:
            path: Waypoints given to the controller.
        """
        with open(self.path_output_path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["index", "x", "y", "heading"])
            for i, pose in enumerate(path):
                writer.writerow([i, pose.x, pose.y, pose.heading])

    def log_trajectory(self, time: float, pose: Pose, speed: float) -> None:
        """Log the agent pose for one cycle.

        Args:
            time: Simulation time (seconds).
            pose: Agent pose.
            speed: Agent forward speed (m/s).
        """
        self._current_time = time
        self.trajectory_csv_writer.writerow([time, pose.x, pose.y, pose.heading, speed])
        if self.trajectory_csv_file:
            self.trajectory_csv_file.flush()

    def log_cycle(self, report: CycleReport) -> None:
        """Log one controller cycle. Usable directly as a controller cycle listener.

        Args:
            report: Cycle report from the controller.
        """
        lookahead = report.lookahead
        self.controller_csv_writer.writerow(
            [
                self._current_time,
                lookahead.x if lookahead is not None else "",
                lookahead.y if lookahead is not None else "",
                report.lookahead_distance,
                report.error[0],
                report.error[1],
                report.error[2],
                report.iterations,
                int(report.converged),
                report.command.v,
                report.command.omega,
                int(report.goal_state is GoalState.REACHED),
            ]
        )
        if self.controller_csv_file:
            self.controller_csv_file.flush()

    def log_summary(self, summary: Dict[str, Any]) -> None:
        """Write the run summary as ``key: value`` lines.

        Args:
            summary: Summary metrics of the run.
        """
        with open(self.summary_output_path, "w") as f:
            for key, value in summary.items():
                if isinstance(value, float):
                    f.write(f"{key}: {value:.6f}\n")
                else:
                    f.write(f"{key}: {value}\n")
        logger.info(f"{TERM_BLUE}✓ Saved run summary to {self.summary_output_path.name}{TERM_RESET}")

    def cleanup(self) -> None:
        """Close all CSV files and log final output location."""
        if self.trajectory_csv_file:
            self.trajectory_csv_file.close()
        if self.controller_csv_file:
            self.controller_csv_file.close()

        logger.info(f"{TERM_BLUE}✓ Saved run data to {self.run_dir}{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called."""
        self.cleanup()
