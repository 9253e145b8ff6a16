import pytest

from conic_sim.physics.newton import newton_solve, NewtonConvergenceError


def f(x):
    return 6 * x**5 - 5 * x**4 - 4 * x**3 + 3 * x**2


def df(x):
    return 30 * x**4 - 20 * x**3 - 12 * x**2 + 6 * x


@pytest.mark.parametrize("x0, root", [
    (0.0, 0.0),
    (0.5, 0.628667),
    (1.0, 1.0),
])
def test_newton_finds_polynomial_roots(x0, root):
    x = newton_solve(f, df, x0)
    assert x == pytest.approx(root, abs=1e-5)
    assert abs(f(x)) < 1e-6


def test_newton_returns_guess_when_already_converged():
    assert newton_solve(lambda x: x - 2.0, lambda x: 1.0, 2.0) == 2.0


def test_newton_no_real_root_raises():
    with pytest.raises(NewtonConvergenceError, match="did not converge"):
        newton_solve(lambda x: x * x + 1.0, lambda x: 2.0 * x, 0.5)


def test_newton_vanishing_derivative_raises():
    with pytest.raises(NewtonConvergenceError, match="Derivative vanished"):
        newton_solve(lambda x: x * x - 4.0, lambda x: 2.0 * x, 0.0)


def test_convergence_error_is_runtime_error():
    assert issubclass(NewtonConvergenceError, RuntimeError)


def test_iteration_cap_is_respected():
    calls = []

    def slow(x):
        calls.append(x)
        return x * x + 1.0

    with pytest.raises(NewtonConvergenceError):
        newton_solve(slow, lambda x: 2.0 * x, 0.5, max_iter=5)
    # one evaluation per iteration plus the final residual check
    assert len(calls) == 6
