"""Post-run visualization of tracker runs.

Plots are built from the CSV files written by DataCollector, so any saved
run can be re-plotted later:

1. XY path vs agent trajectory, with lookahead points
2. Tracking error state (e_x, e_y, e_theta) over time
3. Velocity commands over time
4. Riccati iterations per cycle
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from .config import PLOT_BLUE, PLOT_ORANGE, PLOT_TAUPE, PLOT_YELLOW_ORANGE, TERM_BLUE, TERM_RESET
from .data_collector import CONTROLLER_FILENAME, PATH_FILENAME, TRAJECTORY_FILENAME
from .geometry import Pose
from .plot_styles import TIME_CMAP, add_branded_legend, create_figure, load_csv_to_dict, save_figure, style_axis

if TYPE_CHECKING:
    from .simulation import SimulationResult

logger = logging.getLogger(__name__)

RUN_PREFIX = "run_"


def find_run_dirs(results_dir: Path) -> List[Path]:
    """Run directories under ``results_dir``, oldest first.

    Raises:
        FileNotFoundError: If the results directory does not exist.
    """
    if not results_dir.exists():
        raise FileNotFoundError(f"Results directory not found: {results_dir}")
    return sorted(d for d in results_dir.iterdir() if d.is_dir() and d.name.startswith(RUN_PREFIX))


def find_latest_run(results_dir: Path) -> Path:
    """Find the most recent run directory.

    Args:
        results_dir: Path to the results directory.

    Returns:
        Path to the most recent run directory.

    Raises:
        FileNotFoundError: If no run directories are found.
    """
    run_dirs = find_run_dirs(results_dir)
    if not run_dirs:
        raise FileNotFoundError(f"No run directories found in {results_dir}")
    return run_dirs[-1]


def list_available_runs(results_dir: Path) -> List[str]:
    """Log and return the names of all available run directories."""
    try:
        run_dirs = find_run_dirs(results_dir)
    except FileNotFoundError as e:
        logger.error(str(e))
        return []

    if not run_dirs:
        logger.info(f"No run directories found in {results_dir}")
        return []

    logger.info("Available runs:")
    for i, run_dir in enumerate(run_dirs, 1):
        logger.info(f"  {i}. {run_dir.name}")
    return [d.name for d in run_dirs]


def load_run_data(run_dir: Path) -> Dict[str, Dict[str, np.ndarray]]:
    """Load all CSV data from a run directory.

    Args:
        run_dir: Path to the run directory containing CSV files

    Returns:
        Dictionary containing data dicts for 'path', 'trajectory', 'controller'.
        Missing files are skipped with a warning.
    """
    data = {}
    for key, filename in (
        ("path", PATH_FILENAME),
        ("trajectory", TRAJECTORY_FILENAME),
        ("controller", CONTROLLER_FILENAME),
    ):
        csv_path = run_dir / filename
        if csv_path.exists():
            data[key] = load_csv_to_dict(csv_path)
        else:
            logger.warning(f"{csv_path} not found; its plots will be missing")
    return data


def result_to_run_data(result: "SimulationResult", path: Sequence[Pose]) -> Dict[str, Dict[str, np.ndarray]]:
    """Arrange an in-memory simulation result like ``load_run_data`` output."""
    lookahead_x = np.array([p.x if p is not None else np.nan for p in result.lookahead])
    lookahead_y = np.array([p.y if p is not None else np.nan for p in result.lookahead])
    return {
        "path": {
            "x": np.array([p.x for p in path]),
            "y": np.array([p.y for p in path]),
        },
        "trajectory": {
            "time": result.time,
            "x": result.x,
            "y": result.y,
            "speed": result.speed,
        },
        # Only the columns the plots read; per-cycle errors live in the CSV
        "controller": {
            "time": result.time,
            "lookahead_x": lookahead_x,
            "lookahead_y": lookahead_y,
            "v_cmd": result.v_cmd,
            "omega_cmd": result.omega_cmd,
        },
    }


def plot_simulation(result: "SimulationResult", path: Sequence[Pose], show_plots: bool = True) -> plt.Figure:
    """Plot path tracking for a simulation that was not saved to disk."""
    fig = plot_xy_tracking(result_to_run_data(result, path))
    if show_plots:
        plt.show()
    else:
        plt.close(fig)
    return fig


def plot_xy_tracking(data: Dict[str, Dict[str, np.ndarray]], save_path: Optional[Path] = None) -> plt.Figure:
    """Plot the reference path, agent trajectory and lookahead points."""
    fig, ax = create_figure(figsize=(10, 8))

    if "path" in data:
        path = data["path"]
        ax.plot(path["x"], path["y"], "-", color=PLOT_TAUPE, linewidth=2, label="Path", alpha=0.7)
        ax.plot(path["x"][0], path["y"][0], "o", color=PLOT_YELLOW_ORANGE, markersize=10, label="Start")
        ax.plot(path["x"][-1], path["y"][-1], "*", color=PLOT_ORANGE, markersize=15, label="Goal")

    if "trajectory" in data:
        traj = data["trajectory"]
        scatter = ax.scatter(traj["x"], traj["y"], c=traj["time"], cmap=TIME_CMAP, s=10, label="Agent")
        fig.colorbar(scatter, ax=ax, label="Time (s)")

    if "controller" in data:
        ctrl = data["controller"]
        ax.scatter(
            ctrl["lookahead_x"], ctrl["lookahead_y"], marker="x", s=12, color=PLOT_BLUE, alpha=0.4, label="Lookahead"
        )

    style_axis(ax, title="Path Tracking", xlabel="X Position (m)", ylabel="Y Position (m)")
    add_branded_legend(ax)
    ax.axis("equal")

    if save_path:
        save_figure(fig, save_path)
    return fig


def plot_tracking_error(data: Dict[str, Dict[str, np.ndarray]], save_path: Optional[Path] = None) -> Optional[plt.Figure]:
    """Plot the local-frame error state over time."""
    if "controller" not in data:
        logger.warning("Missing controller data. Cannot plot tracking error.")
        return None

    ctrl = data["controller"]
    fig, (ax1, ax2) = create_figure(2, 1, figsize=(12, 8), sharex=True)

    ax1.plot(ctrl["time"], ctrl["e_x"], color=PLOT_ORANGE, label="e_x (along)", linewidth=1.5)
    ax1.plot(ctrl["time"], ctrl["e_y"], color=PLOT_BLUE, label="e_y (lateral)", linewidth=1.5)
    ax1.axhline(y=0, color="k", linestyle="--", alpha=0.3)
    style_axis(ax1, title="Position Error to Lookahead", ylabel="Error (m)")
    add_branded_legend(ax1)

    ax2.plot(ctrl["time"], np.degrees(ctrl["e_theta"]), color=PLOT_TAUPE, linewidth=1.5)
    ax2.axhline(y=0, color="k", linestyle="--", alpha=0.3)
    style_axis(ax2, title="Heading Error", xlabel="Time (s)", ylabel="e_theta (deg)")

    if save_path:
        save_figure(fig, save_path)
    return fig


def plot_commands(data: Dict[str, Dict[str, np.ndarray]], save_path: Optional[Path] = None) -> Optional[plt.Figure]:
    """Plot velocity commands and Riccati iterations per cycle."""
    if "controller" not in data:
        logger.warning("Missing controller data. Cannot plot commands.")
        return None

    ctrl = data["controller"]
    fig, (ax1, ax2, ax3) = create_figure(3, 1, figsize=(12, 10), sharex=True)

    ax1.plot(ctrl["time"], ctrl["v_cmd"], color=PLOT_ORANGE, linewidth=1.5, label="v_cmd")
    if "trajectory" in data:
        traj = data["trajectory"]
        ax1.plot(traj["time"], traj["speed"], color=PLOT_BLUE, linewidth=1.0, alpha=0.7, label="speed")
    style_axis(ax1, title="Linear Velocity", ylabel="v (m/s)")
    add_branded_legend(ax1)

    ax2.plot(ctrl["time"], ctrl["omega_cmd"], color=PLOT_BLUE, linewidth=1.5)
    style_axis(ax2, title="Angular Velocity Command", ylabel="omega (rad/s)")

    converged = ctrl["converged"] > 0.5
    ax3.plot(ctrl["time"][converged], ctrl["iterations"][converged], ".", color=PLOT_TAUPE, label="Converged")
    ax3.plot(ctrl["time"][~converged], ctrl["iterations"][~converged], "x", color=PLOT_ORANGE, label="Not converged")
    style_axis(ax3, title="Riccati Iterations", xlabel="Time (s)", ylabel="Iterations")
    add_branded_legend(ax3)

    if save_path:
        save_figure(fig, save_path)
    return fig


def plot_run_summary(run_dir: Path, save_plots: bool = False, show_plots: bool = True) -> List[Path]:
    """Generate summary plots for a complete run.

    Args:
        run_dir: Directory containing the run's CSV files.
        save_plots: If True, save plots to the run directory.
        show_plots: If True, display plots interactively.

    Returns:
        Paths of the saved figures (empty unless ``save_plots``).

    Raises:
        FileNotFoundError: If the run directory does not exist.
    """
    if not run_dir.is_dir():
        raise FileNotFoundError(f"Run directory not found: {run_dir}")

    logger.info(f"{TERM_BLUE}Plotting {run_dir.name}{TERM_RESET}")
    data = load_run_data(run_dir)

    plots = [
        (plot_xy_tracking, "01_xy_tracking.png"),
        (plot_tracking_error, "02_tracking_error.png"),
        (plot_commands, "03_commands.png"),
    ]
    saved = []
    figures = []
    for plot_fn, filename in plots:
        save_path = run_dir / filename if save_plots else None
        fig = plot_fn(data, save_path)
        if fig is None:
            continue
        figures.append(fig)
        if save_path is not None:
            saved.append(save_path)

    if show_plots:
        plt.show()
    else:
        for fig in figures:
            plt.close(fig)

    return saved
