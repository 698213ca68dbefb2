"""Collaborator interfaces: nonlinear solvers and IVP solvers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional
from numpy.typing import NDArray

from bvpkit.solvers.jacobian import DiffMode


class ReturnCode(Enum):
    """Terminal status of a solve."""
    SUCCESS = auto()
    FAILURE = auto()

    @property
    def successful(self) -> bool:
        return self is ReturnCode.SUCCESS


@dataclass
class NonlinearProblem:
    """Find u with fn(u) = 0."""

    fn: Callable[[NDArray], NDArray]
    u0: NDArray
    jac_sparsity: Optional[Any] = None     # scipy.sparse pattern or None (dense)
    diffmode: DiffMode = DiffMode.FORWARD
    jac: Optional[Callable[[NDArray, NDArray], Any]] = None  # jac(u, fn(u))


@dataclass
class NonlinearSolution:
    """Result of a nonlinear solve."""

    u: NDArray
    retcode: ReturnCode
    iterations: int
    residual_norm: float


class NonlinearSolver(ABC):
    """Solves the assembled residual system."""

    @abstractmethod
    def solve(
        self, problem: NonlinearProblem, abstol: float
    ) -> NonlinearSolution:
        """
        Solve problem.fn(u) = 0 to max-norm abstol.

        Args:
            problem: Residual, initial guess and Jacobian strategy
            abstol: Convergence tolerance on the residual max-norm

        Returns:
            Final iterate with its status; never raises on non-convergence
        """
        ...


@dataclass
class IVPSolution:
    """Result of an IVP solve with dense output."""

    t: NDArray          # (N,) accepted step times
    y: NDArray          # (M, N) states at t
    interp: Callable[[Any], NDArray]  # dense output, y(t) of shape (M,) or (M, k)
    success: bool
    message: str = ""


class IVPSolver(ABC):
    """Integrates u' = f(t, u) from an initial state."""

    @abstractmethod
    def solve(
        self,
        f: Callable[[float, NDArray], NDArray],
        y0: NDArray,
        t_span: tuple[float, float],
    ) -> IVPSolution:
        """
        Integrate over t_span from y0.

        Args:
            f: Flat right-hand side f(t, y)
            y0: Flat initial state (M,)
            t_span: (t0, t1)

        Returns:
            Trajectory with interpolation at arbitrary times in t_span
        """
        ...
