"""Validated controller configuration.

``ControllerConfig`` holds the recognized controller options. Defaults come
from ``lqr_tracker.config``; the host may override any of them at construction
time. The configuration is static for the controller's lifetime.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Tuple

import numpy as np

from lqr_tracker import config as cfg


@dataclass(frozen=True)
class ControllerConfig:
    """Static configuration of an LQR path tracking controller.

    Attributes:
        lookahead_time_gain: Lookahead distance per unit speed (s)
        min_lookahead_dist: Lower clamp of the lookahead distance (m)
        max_lookahead_dist: Upper clamp of the lookahead distance (m)
        cycle_time: Control period used to discretize the model (s)
        q_diag: Diagonal of the 3x3 state cost matrix Q
        r_diag: Diagonal of the 2x2 control cost matrix R
        max_iter: Riccati iteration limit per cycle
        eps_iter: Riccati convergence threshold
        goal_dist_tol: Goal position tolerance (m)
        goal_heading_tol: Goal heading tolerance (rad)
        max_trailing_radius: Drop waypoints behind the agent beyond this radius (m)
        gain_condition_limit: Condition number treated as singular in the gain inverse
    """

    lookahead_time_gain: float = cfg.LOOKAHEAD_TIME_GAIN
    min_lookahead_dist: float = cfg.MIN_LOOKAHEAD_DIST
    max_lookahead_dist: float = cfg.MAX_LOOKAHEAD_DIST
    cycle_time: float = cfg.CYCLE_TIME
    q_diag: Tuple[float, ...] = tuple(cfg.Q_DIAG)
    r_diag: Tuple[float, ...] = tuple(cfg.R_DIAG)
    max_iter: int = cfg.MAX_ITER
    eps_iter: float = cfg.EPS_ITER
    goal_dist_tol: float = cfg.GOAL_DIST_TOL
    goal_heading_tol: float = cfg.GOAL_HEADING_TOL
    max_trailing_radius: float = cfg.MAX_TRAILING_RADIUS
    gain_condition_limit: float = cfg.GAIN_CONDITION_LIMIT

    def __post_init__(self) -> None:
        # Accept any sequence for the diagonals but store tuples
        object.__setattr__(self, "q_diag", tuple(float(q) for q in self.q_diag))
        object.__setattr__(self, "r_diag", tuple(float(r) for r in self.r_diag))
        self.validate()

    def validate(self) -> None:
        """Check option ranges.

        Raises:
            ValueError: If any option is out of its valid range.
        """
        if self.lookahead_time_gain < 0:
            raise ValueError(f"lookahead_time_gain must be >= 0, got {self.lookahead_time_gain}")
        if self.min_lookahead_dist < 0:
            raise ValueError(f"min_lookahead_dist must be >= 0, got {self.min_lookahead_dist}")
        if self.max_lookahead_dist < self.min_lookahead_dist:
            raise ValueError(
                f"max_lookahead_dist ({self.max_lookahead_dist}) must be >= "
                f"min_lookahead_dist ({self.min_lookahead_dist})"
            )
        if self.cycle_time <= 0:
            raise ValueError(f"cycle_time must be positive, got {self.cycle_time}")
        if len(self.q_diag) != 3:
            raise ValueError(f"q_diag must have 3 entries, got {len(self.q_diag)}")
        if len(self.r_diag) != 2:
            raise ValueError(f"r_diag must have 2 entries, got {len(self.r_diag)}")
        if any(not np.isfinite(q) or q < 0 for q in self.q_diag):
            raise ValueError(f"Q must be positive semi-definite, got diagonal {self.q_diag}")
        if any(not np.isfinite(r) or r <= 0 for r in self.r_diag):
            raise ValueError(f"R must be positive definite, got diagonal {self.r_diag}")
        if self.max_iter < 0:
            raise ValueError(f"max_iter must be >= 0, got {self.max_iter}")
        if self.eps_iter <= 0:
            raise ValueError(f"eps_iter must be positive, got {self.eps_iter}")
        if self.goal_dist_tol <= 0:
            raise ValueError(f"goal_dist_tol must be positive, got {self.goal_dist_tol}")
        if self.goal_heading_tol <= 0:
            raise ValueError(f"goal_heading_tol must be positive, got {self.goal_heading_tol}")
        if self.max_trailing_radius <= 0:
            raise ValueError(f"max_trailing_radius must be positive, got {self.max_trailing_radius}")
        if self.gain_condition_limit <= 1:
            raise ValueError(f"gain_condition_limit must be > 1, got {self.gain_condition_limit}")

    @property
    def Q(self) -> np.ndarray:
        """State cost matrix (3x3)."""
        return np.diag(self.q_diag)

    @property
    def R(self) -> np.ndarray:
        """Control cost matrix (2x2)."""
        return np.diag(self.r_diag)

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "ControllerConfig":
        """Build a configuration from a mapping of recognized options.

        Options not present in the mapping keep their defaults.

        Args:
            options: Mapping of option name to value

        Returns:
            Validated ControllerConfig

        Raises:
            ValueError: If the mapping contains an unrecognized option or a value
                is out of range.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unrecognized controller options: {', '.join(unknown)}")
        return cls(**dict(options))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return asdict(self)
