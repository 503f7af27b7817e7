"""LQR Tracker - Path Following with a Linear Quadratic Regulator

A path following controller for unicycle / differential-drive agents. Each
control cycle linearizes the tracking error around a lookahead point on the
path and solves a discrete Riccati equation for a fresh feedback gain.

## Control Cycle

    goal check → prune → lookahead distance → lookahead point
    → error state → linearize → Riccati solve → u = -K e

### Path Tracking (path_tracker.py)
Keeps a monotonic cursor into the waypoint list and finds the reference point.
- Pruning: drops waypoints the agent has passed (never moves backward)
- Lookahead: speed-proportional distance, clamped to [min, max]
- Reference: interpolated along the path by arc length

### Error Model (error_model.py)
Expresses the reference in the agent frame and linearizes the error kinematics
(forward Euler over one control period).

### Riccati Solver (riccati.py)
Fixed-point iteration of the discrete algebraic Riccati equation, bounded by
max_iter. Non-convergence is reported, not fatal.

### Goal Monitor (goal_monitor.py)
Latches once the agent is within distance and heading tolerance of the goal.

## Modules

### Core Control Modules
- `config.py` - Centralized configuration parameters with documentation
- `config_model.py` - Validated controller configuration
- `controller.py` - LQRController composing one control cycle
- `geometry.py` - Pose and angle helpers
- `errors.py` - Controller error hierarchy

### Simulation & Data
- `model.py` - Unicycle kinematics and actuator limits
- `paths.py` - Reference paths (line, arc, Lemniscate of Gerono)
- `simulation.py` - Closed-loop simulation harness
- `data_collector.py` - CSV data logging for runs

### Visualization
- `plot_styles.py` - Shared plotting utilities and color scheme
- `visualization.py` - Post-run tracking plots
- `cli.py` - Command-line interface

## Quick Start

```python
from lqr_tracker import LQRController, Pose
from lqr_tracker.paths import straight_line

controller = LQRController()
controller.set_path(straight_line(5.0))
command = controller.compute_velocity_command(Pose(0.0, 0.1, 0.0), 0.0)
```

Or use the command-line interface:
```bash
python -m lqr_tracker simulate --path lemniscate
```
"""

__version__ = "0.1.0"

from .config_model import ControllerConfig
from .control_law import ControlVector
from .controller import CycleReport, LQRController, PathFollowingController
from .data_collector import DataCollector
from .errors import ControlError, EmptyPathError, NoPathError, SingularGainError
from .geometry import Pose

__all__ = [
    "ControllerConfig",
    "ControlVector",
    "CycleReport",
    "LQRController",
    "PathFollowingController",
    "DataCollector",
    "ControlError",
    "EmptyPathError",
    "NoPathError",
    "SingularGainError",
    "Pose",
]
