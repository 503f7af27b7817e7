"""Tracking-error state and its linearized dynamics.

The error state is the reference point expressed in the agent's local frame:
    e = [ex, ey, e_theta]
where (ex, ey) is the reference position rotated by -heading and e_theta is
the wrapped heading difference. Driving e to zero drives the agent onto the
reference.

The local linear model follows from the unicycle kinematics seen from the
agent, with the reference moving at speed v_r along its heading:
    ex_dot     = v_r * cos(e_theta) - v + omega * ey
    ey_dot     = v_r * sin(e_theta)     - omega * ex
    e_theta_dot =                        - omega
Forward-Euler discretization over one control period gives A and B, with the
omega terms evaluated at the nominal reference (ex = lookahead distance, ey = 0).
"""

import math
from dataclasses import dataclass

import numpy as np

from lqr_tracker.geometry import Pose, wrap_angle


@dataclass(frozen=True)
class LinearizedModel:
    """Discrete linear error dynamics e[k+1] = A e[k] + B u[k].

    Attributes:
        A: State transition matrix (3x3)
        B: Control input matrix (3x2), columns for [v, omega]
    """

    A: np.ndarray
    B: np.ndarray


def compute_error(current_pose: Pose, reference: Pose) -> np.ndarray:
    """Compute the tracking error of a reference pose in the agent's frame.

    Args:
        current_pose: Agent pose in the global frame
        reference: Reference (lookahead) pose in the global frame

    Returns:
        Error vector [ex, ey, e_theta] with e_theta in (-pi, pi]
    """
    dx = reference.x - current_pose.x
    dy = reference.y - current_pose.y

    # Rotate by -heading into the agent frame
    cos_h = math.cos(current_pose.heading)
    sin_h = math.sin(current_pose.heading)
    ex = cos_h * dx + sin_h * dy
    ey = -sin_h * dx + cos_h * dy
    e_theta = wrap_angle(reference.heading - current_pose.heading)

    return np.array([ex, ey, e_theta])


def linearize(
    error: np.ndarray, reference_speed: float, reference_distance: float, cycle_time: float
) -> LinearizedModel:
    """Linearize the error dynamics about the nominal lookahead reference.

    A is evaluated at the current heading error. B is evaluated at the nominal
    reference position [reference_distance, 0] rather than the current error,
    so the steering authority over lateral error does not vanish when the
    reference comes alongside the agent near the end of the path.

    Args:
        error: Current error state [ex, ey, e_theta]
        reference_speed: Speed of the reference along the path (m/s)
        reference_distance: Lookahead distance of the reference (meters)
        cycle_time: Control period (seconds)

    Returns:
        LinearizedModel with the Euler-discretized A (3x3) and B (3x2)
    """
    e_theta = float(error[2])
    dt = cycle_time

    A = np.eye(3)
    # d(ex_dot)/d(e_theta), d(ey_dot)/d(e_theta)
    A[0, 2] = -reference_speed * math.sin(e_theta) * dt
    A[1, 2] = reference_speed * math.cos(e_theta) * dt

    B = np.zeros((3, 2))
    B[0, 0] = -dt  # driving forward closes the longitudinal gap
    B[1, 1] = -reference_distance * dt  # turning swings the lookahead point sideways
    B[2, 1] = -dt

    return LinearizedModel(A=A, B=B)
