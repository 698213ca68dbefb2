"""Nonlinear and IVP solver collaborators."""

from bvpkit.solvers.base import (
    ReturnCode,
    NonlinearProblem,
    NonlinearSolution,
    NonlinearSolver,
    IVPSolution,
    IVPSolver,
)
from bvpkit.solvers.jacobian import DiffMode
from bvpkit.solvers.newton import NewtonRaphson
from bvpkit.solvers.least_squares import LeastSquares
from bvpkit.solvers.ivp import ScipyIVP
from bvpkit.solvers.factory import create_nonlinear_solver, create_ivp_solver

__all__ = [
    "ReturnCode",
    "NonlinearProblem",
    "NonlinearSolution",
    "NonlinearSolver",
    "IVPSolution",
    "IVPSolver",
    "DiffMode",
    "NewtonRaphson",
    "LeastSquares",
    "ScipyIVP",
    "create_nonlinear_solver",
    "create_ivp_solver",
]
