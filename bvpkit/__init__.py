"""
bvpkit: boundary value problems for ordinary differential equations.

This library provides:
- Adaptive MIRK collocation with defect control and mesh equidistribution
- Mesh-halving recovery when a mesh admits no acceptable solution
- Single shooting on top of an IVP solver
"""

__version__ = "0.1.0"

from bvpkit.algorithms import (
    JacobianAlgorithm,
    MIRK,
    MIRK2,
    MIRK3,
    MIRK4,
    MIRK5,
    MIRK6,
    Shooting,
)
from bvpkit.core.config import SolverConfig
from bvpkit.core.problem import BVProblem, TwoPointBVProblem, ProblemType
from bvpkit.exceptions import (
    BVPKitError,
    ConfigurationError,
    DataIntegrityError,
    InterpolationError,
)
from bvpkit.solution import BVPSolution, FailureReason, SolverStats
from bvpkit.solvers import DiffMode, LeastSquares, NewtonRaphson, ReturnCode, ScipyIVP
from bvpkit.interface import init, solve

__all__ = [
    "JacobianAlgorithm",
    "MIRK",
    "MIRK2",
    "MIRK3",
    "MIRK4",
    "MIRK5",
    "MIRK6",
    "Shooting",
    "SolverConfig",
    "BVProblem",
    "TwoPointBVProblem",
    "ProblemType",
    "BVPKitError",
    "ConfigurationError",
    "DataIntegrityError",
    "InterpolationError",
    "BVPSolution",
    "FailureReason",
    "SolverStats",
    "DiffMode",
    "LeastSquares",
    "NewtonRaphson",
    "ReturnCode",
    "ScipyIVP",
    "init",
    "solve",
]
