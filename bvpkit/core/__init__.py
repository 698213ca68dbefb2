"""Core abstractions for MIRK boundary value solves."""

from bvpkit.core.method import MIRKTableau
from bvpkit.core.problem import BVProblem, TwoPointBVProblem, ProblemType
from bvpkit.core.config import (
    SolverConfig,
    DEFAULT_DEFECT_THRESHOLD,
    DEFAULT_MAX_NUM_SUBINTERVALS,
)
from bvpkit.core.requirements import SystemRequirements, deduce_requirements

__all__ = [
    "MIRKTableau",
    "BVProblem",
    "TwoPointBVProblem",
    "ProblemType",
    "SolverConfig",
    "DEFAULT_DEFECT_THRESHOLD",
    "DEFAULT_MAX_NUM_SUBINTERVALS",
    "SystemRequirements",
    "deduce_requirements",
]
