"""State feedback control law u = -K e."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ControlVector:
    """Velocity command produced by the controller.

    Attributes:
        v: Linear velocity command (m/s)
        omega: Angular velocity command (rad/s), positive counter-clockwise
    """

    v: float
    omega: float

    @classmethod
    def zero(cls) -> "ControlVector":
        return cls(0.0, 0.0)

    @classmethod
    def from_array(cls, u: np.ndarray) -> "ControlVector":
        return cls(float(u[0]), float(u[1]))

    def as_array(self) -> np.ndarray:
        return np.array([self.v, self.omega])


def evaluate(K: np.ndarray, error: np.ndarray) -> ControlVector:
    """Apply the feedback gain to the error state.

    No saturation is applied; actuator limits belong to the host.

    Args:
        K: Feedback gain (2x3)
        error: Error state [ex, ey, e_theta]

    Returns:
        ControlVector with u = -K @ error
    """
    u = -np.asarray(K) @ np.asarray(error, dtype=float)
    return ControlVector.from_array(u)
