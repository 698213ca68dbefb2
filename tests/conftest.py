"""Shared boundary value problems."""

import numpy as np
import pytest

from bvpkit import BVProblem, TwoPointBVProblem


def linear_f(u, p, t):
    """u'' = 0 as a first-order system."""
    return np.array([u[1], 0.0])


def linear_bc(sol, p, t):
    """u(t0) = 1, u(t1) = 3."""
    return np.array([sol[0][0] - 1.0, sol[-1][0] - 3.0])


def harmonic_f(u, p, t):
    """u'' = -u."""
    return np.array([u[1], -u[0]])


def harmonic_bc(sol, p, t):
    """u(0) = 0, u(pi/2) = 1; exact solution sin(t)."""
    return np.array([sol[0][0], sol[-1][0] - 1.0])


@pytest.fixture
def linear_problem():
    return BVProblem(linear_f, linear_bc, np.array([1.0, 0.0]), (0.0, 1.0))


@pytest.fixture
def harmonic_problem():
    return BVProblem(harmonic_f, harmonic_bc, np.array([0.0, 0.5]), (0.0, np.pi / 2))


@pytest.fixture
def harmonic_two_point():
    return TwoPointBVProblem(
        harmonic_f,
        (lambda ua, p: np.array([ua[0]]), lambda ub, p: np.array([ub[0] - 1.0])),
        np.array([0.0, 0.5]),
        (0.0, np.pi / 2),
    )
