"""Solution object returned by every solve."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional
from numpy.typing import NDArray

from bvpkit.solvers.base import ReturnCode
from bvpkit.stepping.trajectory import Trajectory


class FailureReason(Enum):
    """Why a solve ended in ReturnCode.FAILURE."""
    NONLINEAR_SOLVE = auto()     # collaborator did not converge
    DEFECT_REJECTION = auto()    # converged, defect above the threshold
    MESH_SELECTION = auto()      # equidistribution needs too many subintervals
    SUBINTERVAL_BOUND = auto()   # halving would exceed the bound
    IVP_SOLVE = auto()           # final shooting integration failed


@dataclass
class SolverStats:
    """Work counters of one solve."""

    nonlinear_solves: int = 0
    nonlinear_iterations: int = 0
    refinements: int = 0
    halvings: int = 0


class BVPSolution(Trajectory):
    """Trajectory tagged with a terminal status."""

    def __init__(
        self,
        t: NDArray,
        Y: NDArray,
        interp: Callable[[float], NDArray],
        shape: tuple[int, ...],
        retcode: ReturnCode,
        failure_reason: Optional[FailureReason] = None,
        stats: Optional[SolverStats] = None,
        problem: Any = None,
        alg: Any = None,
    ) -> None:
        super().__init__(t, Y, interp, shape)
        self.retcode = retcode
        self.failure_reason = failure_reason
        self.stats = stats if stats is not None else SolverStats()
        self.problem = problem
        self.alg = alg

    @property
    def successful(self) -> bool:
        return self.retcode.successful

    def __repr__(self) -> str:
        return (
            f"BVPSolution(retcode={self.retcode.name}, points={self.N}, "
            f"failure_reason={self.failure_reason})"
        )
