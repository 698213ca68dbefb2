"""Tests for nonlinear and IVP collaborators."""

import numpy as np
import pytest
import scipy.sparse

from bvpkit.algebra import SparseBackend
from bvpkit.exceptions import ConfigurationError
from bvpkit.solvers import (
    DiffMode,
    LeastSquares,
    NewtonRaphson,
    NonlinearProblem,
    ReturnCode,
    ScipyIVP,
)
from bvpkit.solvers.factory import create_ivp_solver, create_nonlinear_solver
from bvpkit.solvers.jacobian import finite_difference_jacobian, group_columns


def tridiagonal_residual(x):
    """Discrete -x'' + x^3 = 1 with zero boundary values."""
    r = 2 * x + x**3 - 1.0
    r[1:] -= x[:-1]
    r[:-1] -= x[1:]
    return r


def tridiagonal_pattern(n):
    return scipy.sparse.diags([1, 1, 1], [-1, 0, 1], shape=(n, n), dtype=bool)


def test_group_columns_tridiagonal():
    """Tridiagonal structure needs exactly three groups."""
    groups = group_columns(tridiagonal_pattern(9))

    assert groups.shape == (9,)
    assert groups.max() + 1 == 3
    # Neighbours never share a group
    assert np.all(groups[1:] != groups[:-1])


@pytest.mark.parametrize("diffmode", [DiffMode.FORWARD, DiffMode.CENTRAL])
def test_grouped_jacobian_matches_dense(diffmode):
    """Grouped differences reproduce the dense finite-difference Jacobian."""
    x = np.linspace(0.1, 0.9, 7)
    f0 = tridiagonal_residual(x)

    dense = finite_difference_jacobian(tridiagonal_residual, x, f0, diffmode)
    sparse = finite_difference_jacobian(
        tridiagonal_residual, x, f0, diffmode, tridiagonal_pattern(7)
    )

    assert scipy.sparse.issparse(sparse)
    assert np.allclose(sparse.toarray(), dense, atol=1e-6)

    exact = np.diag(2 + 3 * x**2) - np.eye(7, k=1) - np.eye(7, k=-1)
    assert np.allclose(dense, exact, atol=1e-5)


def test_newton_scalar_root():
    """Newton finds sqrt(2) from a positive start."""
    problem = NonlinearProblem(fn=lambda x: x**2 - 2.0, u0=np.array([1.0]))

    sol = NewtonRaphson().solve(problem, abstol=1e-10)

    assert sol.retcode == ReturnCode.SUCCESS
    assert np.isclose(sol.u[0], np.sqrt(2.0))
    assert sol.residual_norm <= 1e-10


def test_newton_sparse_system():
    problem = NonlinearProblem(
        fn=tridiagonal_residual,
        u0=np.zeros(20),
        jac_sparsity=tridiagonal_pattern(20),
    )

    sol = NewtonRaphson().solve(problem, abstol=1e-10)

    assert sol.retcode.successful
    assert np.max(np.abs(tridiagonal_residual(sol.u))) <= 1e-10


def test_newton_converged_start_takes_one_iteration():
    problem = NonlinearProblem(fn=lambda x: x - 3.0, u0=np.array([3.0]))

    sol = NewtonRaphson().solve(problem, abstol=1e-8)

    assert sol.retcode == ReturnCode.SUCCESS
    assert sol.iterations == 1


def test_newton_reports_failure_without_raising():
    """x^2 + 1 has no real root."""
    problem = NonlinearProblem(fn=lambda x: x**2 + 1.0, u0=np.array([0.5]))

    sol = NewtonRaphson(max_iter=10).solve(problem, abstol=1e-8)

    assert sol.retcode == ReturnCode.FAILURE
    assert not sol.retcode.successful


def test_newton_overdetermined_system():
    """Consistent rectangular system is solved by Gauss-Newton steps."""
    def fn(x):
        return np.array([x[0] - 1.0, x[1] + 2.0, x[0] + x[1] + 1.0])

    problem = NonlinearProblem(fn=fn, u0=np.zeros(2))
    sol = NewtonRaphson().solve(problem, abstol=1e-10)

    assert sol.retcode.successful
    assert np.allclose(sol.u, [1.0, -2.0])


@pytest.mark.parametrize("solver", [NewtonRaphson(), LeastSquares()])
def test_jacobian_callable_replaces_differencing(solver):
    calls = []

    def jac(x, r):
        calls.append(x.copy())
        return scipy.sparse.diags(2.0 + 3 * x**2, format="csc") + scipy.sparse.diags(
            [-np.ones(9), -np.ones(9)], [-1, 1], shape=(10, 10), format="csc"
        )

    problem = NonlinearProblem(
        fn=tridiagonal_residual,
        u0=np.zeros(10),
        jac_sparsity=tridiagonal_pattern(10),
        jac=jac,
    )

    sol = solver.solve(problem, abstol=1e-8)

    assert sol.retcode.successful
    assert calls
    assert np.max(np.abs(tridiagonal_residual(sol.u))) <= 1e-8


def test_sparse_lstsq_is_accurate_on_rectangular_system():
    """Least-squares steps on sparse rectangular Jacobians are solved to roundoff."""
    n = 30
    A = scipy.sparse.vstack([
        scipy.sparse.diags([-1.0, 4.0, -1.0], [-1, 0, 1], shape=(n, n)),
        scipy.sparse.csr_matrix(np.ones((1, n))),
    ])
    x_true = np.linspace(1.0, 2.0, n)

    x = SparseBackend().lstsq(A, A @ x_true)

    assert np.allclose(x, x_true, rtol=0.0, atol=1e-10)


def test_least_squares_solver():
    problem = NonlinearProblem(
        fn=tridiagonal_residual,
        u0=np.zeros(10),
        jac_sparsity=tridiagonal_pattern(10),
    )

    sol = LeastSquares().solve(problem, abstol=1e-8)

    assert sol.retcode == ReturnCode.SUCCESS
    assert np.max(np.abs(tridiagonal_residual(sol.u))) <= 1e-8


def test_least_squares_nonzero_minimum_is_failure():
    problem = NonlinearProblem(fn=lambda x: x**2 + 1.0, u0=np.array([0.5]))

    sol = LeastSquares().solve(problem, abstol=1e-8)

    assert sol.retcode == ReturnCode.FAILURE
    assert np.isclose(sol.residual_norm, 1.0, atol=1e-4)


def test_scipy_ivp_dense_output():
    """y' = -y integrates to exp(-t) with usable dense output."""
    sol = ScipyIVP().solve(lambda t, y: -y, np.array([1.0]), (0.0, 2.0))

    assert sol.success
    assert sol.y.shape == (1, sol.t.shape[0])
    assert np.isclose(sol.t[-1], 2.0)
    assert np.allclose(sol.interp(1.0), np.exp(-1.0), atol=1e-7)


def test_factory_defaults_and_names():
    assert isinstance(create_nonlinear_solver(None), NewtonRaphson)
    assert isinstance(create_nonlinear_solver("newton"), NewtonRaphson)
    assert isinstance(create_nonlinear_solver("least_squares"), LeastSquares)

    solver = NewtonRaphson(max_iter=3)
    assert create_nonlinear_solver(solver) is solver

    ivp = create_ivp_solver("Radau")
    assert isinstance(ivp, ScipyIVP)
    assert ivp.method == "Radau"
    assert isinstance(create_ivp_solver(None), ScipyIVP)


def test_factory_unknown_names():
    with pytest.raises(ConfigurationError):
        create_nonlinear_solver("broyden")
    with pytest.raises(ConfigurationError):
        create_ivp_solver(42)
