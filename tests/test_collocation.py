"""Tests for residual assembly and interpolation on the collocation mesh."""

import numpy as np
import pytest

from bvpkit import BVProblem, ConfigurationError, MIRK4, MIRK6, init
from bvpkit.algorithms import JacobianAlgorithm
from bvpkit.mirk.collocation import ResidualAssembler
from bvpkit.mirk.interpolation import MIRKInterpolation, interval
from bvpkit.solvers.jacobian import finite_difference_jacobian

from conftest import harmonic_f, linear_bc, linear_f


def exact_linear_states(mesh):
    return np.column_stack([1.0 + 2.0 * mesh, np.full_like(mesh, 2.0)])


def test_exact_solution_has_zero_residual(linear_problem):
    cache = init(linear_problem, MIRK4(), dt=0.2)
    assembler = ResidualAssembler(cache)

    r = assembler.residual(exact_linear_states(cache.mesh).reshape(-1))

    assert r.shape == (12,)
    assert np.allclose(r, 0.0, atol=1e-13)


def test_residual_row_order_standard(linear_problem):
    """Boundary rows come first, then one block per subinterval."""
    cache = init(linear_problem, MIRK4(), dt=0.5)
    Y = exact_linear_states(cache.mesh)
    Y[0, 0] += 0.5  # violates the left condition and the first block only

    r = ResidualAssembler(cache).residual(Y.reshape(-1))

    assert np.isclose(r[0], 0.5)
    assert not np.allclose(r[2:4], 0.0)
    assert np.allclose(r[4:6], 0.0, atol=1e-13)


def test_residual_row_order_two_point(harmonic_two_point):
    cache = init(harmonic_two_point, MIRK4(), dt=np.pi / 8)
    n = cache.num_subintervals
    Y = np.zeros((n + 1, 2))

    r = ResidualAssembler(cache).residual(Y.reshape(-1))

    assert r.shape == (2 * (n + 1),)
    assert np.isclose(r[0], 0.0)       # bca: ua[0]
    assert np.isclose(r[-1], -1.0)     # bcb: ub[0] - 1
    assert np.allclose(r[1:-1], 0.0)


def test_sparsity_covers_jacobian(harmonic_problem):
    """Every nonzero of the dense Jacobian lies in the declared pattern."""
    cache = init(harmonic_problem, MIRK4(), dt=np.pi / 10)
    assembler = ResidualAssembler(cache)
    y = np.random.default_rng(0).normal(size=cache.y0.size)

    nlprob = assembler.build_problem(y)
    dense = finite_difference_jacobian(assembler.residual, y, assembler.residual(y))

    pattern = nlprob.jac_sparsity.toarray()
    assert pattern.shape == dense.shape
    assert np.all(np.abs(dense[~pattern]) < 1e-8)


def test_dense_jacobian_algorithm_has_no_pattern(harmonic_problem):
    alg = MIRK4(jac_alg=JacobianAlgorithm(sparse=False))
    cache = init(harmonic_problem, alg, dt=np.pi / 10)

    nlprob = ResidualAssembler(cache).build_problem(cache.y0.reshape(-1))

    assert nlprob.jac_sparsity is None
    assert nlprob.u0 is not cache.y0
    assert nlprob.jac is None


def test_split_jacobian_matches_dense_difference():
    """Boundary and collocation blocks agree with differencing the whole residual."""
    def bc(sol, p, t):
        return np.array([sol[0][0], sol(0.45)[0] - 0.5])

    problem = BVProblem(harmonic_f, bc, np.zeros(2), (0.0, 1.0))
    cache = init(problem, MIRK4(), dt=0.1)
    assembler = ResidualAssembler(cache)
    y = np.random.default_rng(1).normal(size=cache.y0.size)
    r = assembler.residual(y)

    nlprob = assembler.build_problem(y)
    jac = nlprob.jac(y, r)
    dense = finite_difference_jacobian(assembler.residual, y, r)

    assert jac.shape == dense.shape
    assert np.allclose(jac.toarray(), dense, atol=1e-6)


def test_two_point_problem_uses_grouped_residual_jacobian(harmonic_two_point):
    cache = init(harmonic_two_point, MIRK4(), dt=np.pi / 10)

    nlprob = ResidualAssembler(cache).build_problem(cache.y0.reshape(-1))

    assert nlprob.jac is None
    assert nlprob.jac_sparsity is not None


@pytest.mark.parametrize("n", [20, 40])
def test_jacobian_cost_is_linear_in_mesh_size(n):
    """One Jacobian takes 2M collocation sweeps and one boundary call per unknown."""
    calls = {"f": 0, "bc": 0}

    def f(u, p, t):
        calls["f"] += 1
        return linear_f(u, p, t)

    def bc(sol, p, t):
        calls["bc"] += 1
        return linear_bc(sol, p, t)

    cache = init(BVProblem(f, bc, np.zeros(2), (0.0, 1.0)), MIRK4(), dt=1.0 / n)
    assembler = ResidualAssembler(cache)
    y = cache.y0.reshape(-1)
    r = assembler.residual(y)
    calls.update(f=0, bc=0)

    assembler.jacobian(y, r)

    assert calls["f"] == 2 * cache.M * cache.num_subintervals * cache.tableau.stage
    assert calls["bc"] == y.size


def test_wrong_bc_size_is_configuration_error():
    problem = BVProblem(
        linear_f, lambda sol, p, t: np.zeros(3), np.zeros(2), (0.0, 1.0)
    )
    cache = init(problem, MIRK4(), dt=0.5)

    with pytest.raises(ConfigurationError):
        ResidualAssembler(cache).residual(cache.y0.reshape(-1))


def test_bc_prototype_sets_residual_size():
    problem = BVProblem(
        linear_f,
        lambda sol, p, t: np.array([sol[0][0] - 1.0, sol[-1][0] - 3.0, sol[0][1] - 2.0]),
        np.zeros(2),
        (0.0, 1.0),
        bcresid_prototype=np.zeros(3),
    )
    cache = init(problem, MIRK4(), dt=0.5)

    r = ResidualAssembler(cache).residual(exact_linear_states(cache.mesh).reshape(-1))

    assert r.shape == (3 + 4,)
    assert np.allclose(r, 0.0, atol=1e-13)
    assert not cache.requirements().is_square


def test_interval_lookup():
    mesh = np.array([0.0, 1.0, 2.0])

    assert interval(mesh, 0.0) == 0
    assert interval(mesh, 0.5) == 0
    assert interval(mesh, 1.0) == 1
    assert interval(mesh, 2.0) == 1


def test_interpolant_reproduces_smooth_solution():
    """MIRK6 stages of sin/cos give an accurate continuous extension."""
    problem = BVProblem(harmonic_f, lambda sol, p, t: np.zeros(2), np.zeros(2), (0.0, 1.0))
    cache = init(problem, MIRK6(), dt=0.1)
    mesh = cache.mesh
    Y = np.column_stack([np.sin(mesh), np.cos(mesh)])
    cache.y0 = Y
    ResidualAssembler(cache).update_stages(Y)

    no_interp = cache.k_interp.data[:, :0]
    interp = MIRKInterpolation(mesh, Y, cache.k_discrete.data, no_interp, cache.tableau)

    for t in (0.05, 0.33, 0.71, 1.0):
        assert np.allclose(interp(t), [np.sin(t), np.cos(t)], atol=1e-5)


def test_trajectory_view_for_boundary_conditions(linear_problem):
    cache = init(linear_problem, MIRK4(), dt=0.25)
    Y = exact_linear_states(cache.mesh)
    assembler = ResidualAssembler(cache)
    assembler.update_stages(Y)

    sol = assembler.trajectory(Y)

    assert len(sol) == 5
    assert np.allclose(sol[-1], [3.0, 2.0])
    assert np.allclose(sol(0.6), [2.2, 2.0])
