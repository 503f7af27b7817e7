"""Configuration parameters for the LQR path tracker.

This module centralizes all default parameters including:
- Lookahead and path pruning parameters
- LQR cost weights and Riccati solver settings
- Goal tolerances
- Actuator limits and simulation settings used by the host tools
- Plot and terminal colors

All parameters are documented with their purpose, valid ranges, and tuning rationale.
The controller reads them through ``ControllerConfig`` (see config_model.py), which
snapshots and validates these values once at construction time.
"""

# ============================================================================
# Lookahead Parameters
# ============================================================================

LOOKAHEAD_TIME_GAIN = 1.5
"""Lookahead time gain (seconds).

Lookahead distance = LOOKAHEAD_TIME_GAIN * v, clamped to
[MIN_LOOKAHEAD_DIST, MAX_LOOKAHEAD_DIST].

Tuning rationale:
- Larger values look further ahead at speed: smoother, but cuts corners
- Smaller values track tighter but oscillate more on curved paths
"""

MIN_LOOKAHEAD_DIST = 0.3
"""Minimum lookahead distance (meters).

Must be positive for the linearized model to stay controllable when the
agent is stationary (the reference speed is derived from this bound).
"""

MAX_LOOKAHEAD_DIST = 0.9
"""Maximum lookahead distance (meters). Caps the reference speed at high velocity."""


# ============================================================================
# Path Pruning Parameters
# ============================================================================

MAX_TRAILING_RADIUS = 2.0
"""Waypoints behind the agent and farther than this radius are dropped (meters).

Only affects waypoints that are behind the agent's heading. Roughly half the
size of a typical local window.
"""


# ============================================================================
# LQR Parameters
# ============================================================================

CYCLE_TIME = 0.1
"""Control cycle period (seconds). Used to discretize the error dynamics.

Must match the period of the host's control loop (10 Hz by default).
"""

Q_DIAG = [1.0, 1.0, 1.0]
"""Diagonal of the state cost matrix Q for [ex, ey, e_theta].

Positive semi-definite. Raise the lateral (ey) weight to hug the path more
tightly, raise the heading weight to reduce weaving.
"""

R_DIAG = [1.0, 1.0]
"""Diagonal of the control cost matrix R for [v, omega].

Positive definite. Larger values give gentler commands.
"""

MAX_ITER = 500
"""Maximum number of Riccati iterations per control cycle.

Bounds worst-case cycle latency. Hitting the limit is not an error: the last
iterate is used as a degraded-quality gain.
"""

EPS_ITER = 1e-3
"""Riccati convergence threshold on max |P_{k+1} - P_k| (dimensionless)."""

GAIN_CONDITION_LIMIT = 1e12
"""Condition number above which R + B'PB is treated as singular.

With R positive definite this should never trigger; it guards against
non-finite or degenerate weights supplied by the host.
"""


# ============================================================================
# Goal Parameters
# ============================================================================

GOAL_DIST_TOL = 0.2
"""Distance to the final waypoint below which the goal counts as reached (meters)."""

GOAL_HEADING_TOL = 0.5
"""Heading error to the final waypoint below which the goal counts as reached (rad).

Checked together with GOAL_DIST_TOL; both must hold in the same cycle.
"""


# ============================================================================
# Actuator Limits (host side)
# ============================================================================

V_MAX = 1.0
"""Maximum forward speed command accepted by the actuators (m/s)."""

OMEGA_MAX = 1.5
"""Maximum angular rate command accepted by the actuators (rad/s)."""


# ============================================================================
# Simulation Parameters
# ============================================================================

SIM_MAX_TIME = 60.0
"""Simulation time limit (seconds). The run stops here even if the goal is not reached."""

SIM_INITIAL_SPEED = 0.0
"""Speed of the simulated agent at t=0 (m/s)."""

SIM_PATH_SPACING = 0.1
"""Spacing between generated reference waypoints (meters)."""

RESULTS_DIR = "results"
"""Base directory for run output (CSV files, plots)."""


# ============================================================================
# Visualization Colors
# ============================================================================

PLOT_ORANGE = "#f74823"
"""Primary accent color (goal marker, longitudinal error, commands)."""

PLOT_BLUE = "#2374f7"
"""Secondary color (lookahead points, lateral error, measured speed)."""

PLOT_CREAM = "#fffdee"
"""Background/text color for dark mode."""

PLOT_TAUPE = "#686a5f"
"""Neutral color for the reference path, edges and annotations."""

PLOT_YELLOW_ORANGE = "#ffa726"
"""Highlight color (start marker)."""

PLOT_DARK_BLUE = "#0d1b2a"
"""Dark mode background."""

# Terminal colors
TERM_ORANGE = "\033[38;2;247;72;35m"
"""Terminal color for warnings and headline results."""

TERM_BLUE = "\033[38;2;35;116;247m"
"""Terminal color for status messages."""

TERM_RESET = "\033[0m"
"""Reset terminal color."""
