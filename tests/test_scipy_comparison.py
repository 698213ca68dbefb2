"""Comparison tests against scipy.integrate.solve_bvp."""

import numpy as np
import pytest
from scipy.integrate import solve_bvp

from bvpkit import BVProblem, MIRK4, MIRK6, Shooting, TwoPointBVProblem, solve


class Bratu:
    """Bratu's problem y'' + lam * exp(y) = 0, y(0) = y(1) = 0."""

    def __init__(self, lam=1.0):
        self.lam = lam

    def f(self, u, p, t):
        return np.array([u[1], -self.lam * np.exp(u[0])])

    def bc(self, sol, p, t):
        return np.array([sol[0][0], sol[-1][0]])

    def scipy_reference(self):
        x = np.linspace(0.0, 1.0, 11)
        result = solve_bvp(
            lambda x, y: np.vstack([y[1], -self.lam * np.exp(y[0])]),
            lambda ya, yb: np.array([ya[0], yb[0]]),
            x,
            np.zeros((2, x.size)),
            tol=1e-8,
        )
        assert result.success
        return result.sol


@pytest.fixture
def bratu():
    return Bratu()


@pytest.mark.parametrize("alg", [MIRK4(), MIRK6()])
def test_mirk_matches_solve_bvp(bratu, alg):
    """Both solvers find the lower Bratu branch from a zero guess."""
    problem = BVProblem(bratu.f, bratu.bc, np.zeros(2), (0.0, 1.0))
    reference = bratu.scipy_reference()

    sol = solve(problem, alg, dt=0.1, abstol=1e-7)

    assert sol.successful
    for t in np.linspace(0.0, 1.0, 13):
        assert np.allclose(sol(t), reference(t), atol=1e-5)


def test_two_point_matches_solve_bvp(bratu):
    problem = TwoPointBVProblem(
        bratu.f,
        (lambda ua, p: ua[:1], lambda ub, p: ub[:1]),
        np.zeros(2),
        (0.0, 1.0),
    )
    reference = bratu.scipy_reference()

    sol = solve(problem, MIRK4(), dt=0.1, abstol=1e-7)

    assert sol.successful
    assert np.allclose(sol(0.5), reference(0.5), atol=1e-5)


def test_shooting_matches_solve_bvp(bratu):
    problem = BVProblem(bratu.f, bratu.bc, np.zeros(2), (0.0, 1.0))
    reference = bratu.scipy_reference()

    sol = solve(problem, Shooting(), abstol=1e-9)

    assert sol.successful
    for t in (0.25, 0.5, 0.75):
        assert np.allclose(sol(t), reference(t), atol=1e-6)


def test_shooting_and_mirk_agree(bratu):
    problem = BVProblem(bratu.f, bratu.bc, np.zeros(2), (0.0, 1.0))

    shot = solve(problem, Shooting(), abstol=1e-9)
    collocated = solve(problem, MIRK4(), dt=0.1, abstol=1e-7)

    assert np.allclose(shot[0], collocated[0], atol=1e-5)
