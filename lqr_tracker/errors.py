"""Error types raised by the path tracking controller.

None of these is fatal. The host catches ``ControlError`` around each control
cycle and decides what to command instead (usually zero velocity, or the
previous cycle's gain after a ``SingularGainError``).
"""


class ControlError(Exception):
    """Base class for all control cycle failures."""


class NoPathError(ControlError):
    """A velocity command was requested before any path was set."""

    def __init__(self, message: str = "No path has been set") -> None:
        super().__init__(message)


class EmptyPathError(ControlError):
    """A path with no waypoints was given, or pruning left nothing to track."""

    def __init__(self, message: str = "Path contains no waypoints") -> None:
        super().__init__(message)


class SingularGainError(ControlError):
    """The Riccati gain's inner matrix (R + B'PB) is singular or ill-conditioned.

    Attributes:
        condition_number: Condition number of the offending matrix (inf if singular)
        iteration: Riccati iteration at which the inverse failed
    """

    def __init__(self, condition_number: float, iteration: int) -> None:
        self.condition_number = condition_number
        self.iteration = iteration
        super().__init__(
            f"Gain matrix R + B'PB is not invertible at iteration {iteration} "
            f"(condition number {condition_number:.3g})"
        )
