"""Command-line interface for simulating and plotting tracker runs.

Examples:
  # Simulate the figure-eight path and show the tracking plot
  python -m lqr_tracker simulate --path lemniscate

  # Save run data to results/run_YYYYMMDD_HHMMSS/ without opening windows
  python -m lqr_tracker simulate --path arc --save --no-show

  # Plot the most recent saved run, or a specific one
  python -m lqr_tracker plot
  python -m lqr_tracker plot --run run_20250101_120000

  # List available runs
  python -m lqr_tracker plot --list
"""

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional

from .config import RESULTS_DIR, TERM_BLUE, TERM_ORANGE, TERM_RESET
from .controller import LQRController
from .data_collector import DataCollector
from .errors import ControlError
from .geometry import Pose
from .paths import circular_arc, lemniscate, path_length, straight_line

logger = logging.getLogger(__name__)

PATH_CHOICES = ("line", "arc", "lemniscate")


class CustomFormatter(logging.Formatter):
    """Custom logging formatter that removes timestamps from INFO messages.

    INFO messages are shown bare for clean console output; WARNING, ERROR and
    DEBUG messages keep the timestamp and level.
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps. If False, show INFO
                 without timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        # Keep matplotlib's font manager chatter out of debug output
        logging.getLogger("matplotlib").setLevel(logging.WARNING)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
        root = logging.getLogger()
        root.setLevel(logging.INFO)
        root.addHandler(handler)


def build_path(name: str) -> List[Pose]:
    """Reference path for the ``--path`` option."""
    if name == "line":
        return straight_line(5.0)
    if name == "arc":
        return circular_arc(2.0, math.pi / 2.0)
    if name == "lemniscate":
        return lemniscate()
    raise ValueError(f"Unknown path '{name}', expected one of {PATH_CHOICES}")


def run_simulate(args: argparse.Namespace) -> int:
    """Handle the ``simulate`` subcommand."""
    # Deferred so plotting is only imported when needed
    from .simulation import Simulator
    from .visualization import plot_run_summary, plot_simulation

    path = build_path(args.path)
    logger.info(f"{TERM_BLUE}Path '{args.path}': {len(path)} waypoints, {path_length(path):.2f} m{TERM_RESET}")

    controller = LQRController()
    logger.debug(f"Controller config: {controller.config.to_dict()}")
    collector = DataCollector(output_dir=args.output_dir) if args.save else None

    try:
        if collector is not None:
            with collector:
                result = Simulator(controller, data_collector=collector).run(path)
        else:
            result = Simulator(controller).run(path)
    except ControlError as e:
        logger.error(f"Simulation failed: {e}")
        return 1

    summary = result.summary()
    status = f"{TERM_BLUE}reached{TERM_RESET}" if result.goal_reached else f"{TERM_ORANGE}not reached{TERM_RESET}"
    logger.info(f"Goal {status} after {result.elapsed_time:.1f}s")
    logger.info(f"Cross-track RMS: {summary['cross_track_rms']:.3f} m (max {summary['max_cross_track']:.3f} m)")
    logger.info(
        f"Riccati: {summary['nonconverged_solves']} non-converged, "
        f"{summary['singular_gains']} singular over {summary['cycles']} cycles"
    )

    show = not args.no_show
    if collector is not None:
        plot_run_summary(collector.run_dir, save_plots=True, show_plots=show)
    elif show:
        plot_simulation(result, path)

    return 0 if result.goal_reached else 2


def run_plot(args: argparse.Namespace) -> int:
    """Handle the ``plot`` subcommand."""
    from .visualization import find_latest_run, list_available_runs, plot_run_summary

    results_dir = Path(args.results_dir)

    if args.list:
        list_available_runs(results_dir)
        return 0

    try:
        run_dir = results_dir / args.run if args.run else find_latest_run(results_dir)
        saved = plot_run_summary(run_dir, save_plots=args.save, show_plots=not args.no_show)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    for path in saved:
        logger.info(f"  {path.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lqr-tracker",
        description="LQR path tracking: closed-loop simulation and run visualization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="Simulate the controller following a reference path")
    simulate.add_argument("--path", choices=PATH_CHOICES, default="lemniscate", help="Reference path (default: lemniscate)")
    simulate.add_argument("--save", action="store_true", help="Save run data and plots to a run directory")
    simulate.add_argument("--no-show", action="store_true", help="Do not open plot windows")
    simulate.add_argument("--output-dir", default=".", help="Base directory for saved runs (default: .)")
    simulate.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps")
    simulate.set_defaults(handler=run_simulate)

    plot = subparsers.add_parser("plot", help="Plot a saved run")
    plot.add_argument("--run", default=None, help="Run directory name (default: most recent)")
    plot.add_argument("--results-dir", default=RESULTS_DIR, help=f"Results directory (default: {RESULTS_DIR})")
    plot.add_argument("--list", action="store_true", help="List available runs and exit")
    plot.add_argument("--save", action="store_true", help="Save plots into the run directory")
    plot.add_argument("--no-show", action="store_true", help="Do not open plot windows")
    plot.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps")
    plot.set_defaults(handler=run_plot)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.handler(args)
    except KeyboardInterrupt:
        logger.info("\nExiting...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
