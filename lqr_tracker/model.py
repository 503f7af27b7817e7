"""
Unicycle kinematic model used by the host tools.

This module provides the forward kinematics used to simulate the agent and
the actuator saturation of velocity commands. The controller itself
never clamps its output; these limits live on the host side.
"""

import math

from lqr_tracker.config import OMEGA_MAX, V_MAX
from lqr_tracker.geometry import Pose, wrap_angle


def step_pose(pose: Pose, v: float, omega: float, dt: float) -> Pose:
    """
    Integrate unicycle kinematics over one time step.

    Uses exact integration along a circular arc when turning and a straight
    line otherwise:
        x_dot = v * cos(theta)
        y_dot = v * sin(theta)
        theta_dot = omega

    Args:
        pose: Pose at the start of the step
        v: Linear velocity (m/s)
        omega: Angular velocity (rad/s)
        dt: Time step (seconds)

    Returns:
        Pose at the end of the step, heading wrapped to (-pi, pi]
    """
    theta = pose.heading
    if abs(omega) < 1e-9:
        x = pose.x + v * math.cos(theta) * dt
        y = pose.y + v * math.sin(theta) * dt
    else:
        radius = v / omega
        x = pose.x + radius * (math.sin(theta + omega * dt) - math.sin(theta))
        y = pose.y - radius * (math.cos(theta + omega * dt) - math.cos(theta))
    return Pose(x, y, wrap_angle(theta + omega * dt))


def clamp_command(v_cmd: float, omega_cmd: float) -> tuple[float, float]:
    """
    Saturate a velocity command to the actuator limits.

    Args:
        v_cmd: Desired linear velocity (m/s)
        omega_cmd: Desired angular velocity (rad/s)

    Returns:
        tuple[float, float]: (v, omega) clamped to [-V_MAX, V_MAX] and
                            [-OMEGA_MAX, OMEGA_MAX]
    """
    v = max(-V_MAX, min(V_MAX, v_cmd))
    omega = max(-OMEGA_MAX, min(OMEGA_MAX, omega_cmd))
    return v, omega
