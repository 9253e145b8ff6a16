from __future__ import annotations

from typing import Callable

from conic_sim.core.constants import SOLVER_TOLERANCE, SOLVER_MAX_ITERATIONS


class NewtonConvergenceError(RuntimeError):
    """Newton-Raphson iteration failed to reach the residual tolerance."""


def newton_solve(
    f: Callable[[float], float],
    df: Callable[[float], float],
    x0: float,
    tol: float = SOLVER_TOLERANCE,
    max_iter: int = SOLVER_MAX_ITERATIONS,
) -> float:
    """
    Find x with |f(x)| < tol using Newton-Raphson: x <- x - f(x)/df(x).

    Args:
        f: function whose root is sought
        df: derivative of f
        x0: initial guess
        tol: residual tolerance on |f(x)|
        max_iter: iteration cap

    Returns:
        x: approximate root

    Raises:
        NewtonConvergenceError: if the cap is reached or df vanishes.
    """
    x = x0
    for _ in range(max_iter):
        fx = f(x)
        if abs(fx) < tol:
            return x
        dfx = df(x)
        if abs(dfx) < 1e-15:
            raise NewtonConvergenceError(f"Derivative vanished at x={x!r}.")
        x = x - fx / dfx

    if abs(f(x)) < tol:
        return x
    raise NewtonConvergenceError(
        f"Newton solver did not converge within {max_iter} iterations (x={x!r})."
    )
