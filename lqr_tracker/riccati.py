"""Discrete algebraic Riccati equation solver for the tracking LQR.

Solves for the steady-state cost matrix P by fixed-point iteration of the
Riccati recurrence, starting from P_0 = Q:

    P_{k+1} = Q + A'P_kA - A'P_kB (R + B'P_kB)^{-1} B'P_kA

and derives the optimal feedback gain

    K = (R + B'PB)^{-1} B'PA

The iteration count is bounded so that a control cycle has a deterministic
worst-case latency. Running out of iterations is not an error: the last
iterate is returned with ``converged=False`` and still used.
"""

import logging
from dataclasses import dataclass

import numpy as np

from lqr_tracker import config as cfg
from lqr_tracker.errors import SingularGainError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiccatiSolution:
    """Result of one Riccati solve.

    Only valid for the (A, B, Q, R) it was computed from.

    Attributes:
        P: Converged (or last) cost matrix (n x n)
        K: Feedback gain (m x n); the control law is u = -K e
        iterations: Number of recurrence steps performed
        converged: True if max |P_{k+1} - P_k| dropped below eps
    """

    P: np.ndarray
    K: np.ndarray
    iterations: int
    converged: bool


def _gain_matrix(B: np.ndarray, P: np.ndarray, R: np.ndarray, iteration: int, condition_limit: float) -> np.ndarray:
    """Form R + B'PB and check that it can be inverted safely.

    Raises:
        SingularGainError: If the matrix is non-finite or ill-conditioned.
    """
    S = R + B.T @ P @ B
    if not np.all(np.isfinite(S)):
        raise SingularGainError(float("inf"), iteration)

    condition_number = float(np.linalg.cond(S))
    if not np.isfinite(condition_number) or condition_number > condition_limit:
        raise SingularGainError(condition_number, iteration)
    return S


def solve_riccati(
    A: np.ndarray,
    B: np.ndarray,
    Q: np.ndarray,
    R: np.ndarray,
    max_iter: int = cfg.MAX_ITER,
    eps: float = cfg.EPS_ITER,
    condition_limit: float = cfg.GAIN_CONDITION_LIMIT,
) -> RiccatiSolution:
    """Iteratively solve the discrete algebraic Riccati equation.

    Args:
        A: State transition matrix (n x n)
        B: Control input matrix (n x m)
        Q: State cost matrix (n x n), positive semi-definite
        R: Control cost matrix (m x m), positive definite
        max_iter: Maximum number of recurrence steps
        eps: Convergence threshold on the max absolute element change of P
        condition_limit: Condition number above which R + B'PB counts as singular

    Returns:
        RiccatiSolution with P, K, iteration count and convergence flag

    Raises:
        ValueError: If matrix dimensions are inconsistent.
        SingularGainError: If R + B'PB is singular or ill-conditioned.
    """
    n = A.shape[0]
    m = B.shape[1]
    if A.shape != (n, n):
        raise ValueError(f"A must be square, got shape {A.shape}")
    if B.shape != (n, m):
        raise ValueError(f"B must have shape ({n}, m), got {B.shape}")
    if Q.shape != (n, n):
        raise ValueError(f"Q must have shape ({n}, {n}), got {Q.shape}")
    if R.shape != (m, m):
        raise ValueError(f"R must have shape ({m}, {m}), got {R.shape}")

    P = Q.astype(float).copy()
    converged = False
    iterations = 0

    while iterations < max_iter:
        S = _gain_matrix(B, P, R, iterations, condition_limit)
        BtPA = B.T @ P @ A
        P_next = Q + A.T @ P @ A - BtPA.T @ np.linalg.solve(S, BtPA)
        # Keep P symmetric against round-off drift
        P_next = 0.5 * (P_next + P_next.T)
        iterations += 1

        delta = float(np.max(np.abs(P_next - P)))
        P = P_next
        if delta < eps:
            converged = True
            break

    S = _gain_matrix(B, P, R, iterations, condition_limit)
    K = np.linalg.solve(S, B.T @ P @ A)

    if converged:
        logger.debug(f"Riccati converged in {iterations} iterations")
    else:
        logger.debug(f"Riccati did not converge within {max_iter} iterations, using last iterate")

    return RiccatiSolution(P=P, K=K, iterations=iterations, converged=converged)
