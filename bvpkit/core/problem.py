"""Boundary value problem specification."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional, Union
import numpy as np
from numpy.typing import NDArray

from bvpkit.exceptions import ConfigurationError


class ProblemType(Enum):
    """How boundary conditions are supplied."""
    STANDARD = auto()   # bc(sol, p, t) sees the whole trajectory
    TWO_POINT = auto()  # (bca(ua, p), bcb(ub, p)) see one endpoint each


class GuessKind(Enum):
    """Form of the user-supplied u0."""
    STATE = auto()       # one state, replicated on a uniform mesh
    TRAJECTORY = auto()  # list of states, mesh inferred from its length
    FUNCTION = auto()    # u0(t) evaluated on a uniform mesh


@dataclass
class BVProblem:
    """
    Boundary value problem u' = f(u, p, t) on tspan with residual bc = 0.

    Out-of-place callbacks return new arrays:
        f(u, p, t) -> du
        bc(sol, p, t) -> resid                  (STANDARD)
        bca(ua, p) -> resid_a, bcb(ub, p) -> resid_b   (TWO_POINT)

    With ``inplace=True`` they write into their first argument instead:
        f(du, u, p, t), bc(resid, sol, p, t), bca(resid_a, ua, p), ...

    ``sol`` is a trajectory: ``sol[0]``/``sol[-1]`` are the endpoint states,
    ``sol(t)`` interpolates anywhere in tspan (multi-point conditions).
    """

    f: Callable
    bc: Union[Callable, tuple[Callable, Callable]]
    u0: Any
    tspan: tuple[float, float]
    p: Any = None
    bcresid_prototype: Optional[Any] = None
    problem_type: ProblemType = ProblemType.STANDARD
    inplace: bool = False

    def __post_init__(self) -> None:
        t0, t1 = self.tspan
        if not t1 > t0:
            raise ConfigurationError(
                "tspan must be increasing", context=f"tspan={self.tspan}"
            )
        self.tspan = (float(t0), float(t1))

        if self.problem_type == ProblemType.TWO_POINT:
            if not (
                isinstance(self.bc, tuple)
                and len(self.bc) == 2
                and all(callable(g) for g in self.bc)
            ):
                raise ConfigurationError(
                    "Two-point problems need bc=(bca, bcb)"
                )
            if self.bcresid_prototype is not None and not (
                isinstance(self.bcresid_prototype, tuple)
                and len(self.bcresid_prototype) == 2
            ):
                raise ConfigurationError(
                    "Two-point bcresid_prototype must be a pair of arrays"
                )
        elif not callable(self.bc):
            raise ConfigurationError("bc must be callable")

    @property
    def guess_kind(self) -> GuessKind:
        """Classify u0; only lists/tuples count as trajectories."""
        if callable(self.u0):
            return GuessKind.FUNCTION
        if isinstance(self.u0, (list, tuple)):
            return GuessKind.TRAJECTORY
        return GuessKind.STATE

    @property
    def state_template(self) -> NDArray:
        """One state in its native shape."""
        kind = self.guess_kind
        if kind == GuessKind.TRAJECTORY:
            return np.asarray(self.u0[0], dtype=float)
        if kind == GuessKind.FUNCTION:
            return np.asarray(self.u0(self.tspan[0]), dtype=float)
        return np.asarray(self.u0, dtype=float)

    @property
    def state_shape(self) -> tuple[int, ...]:
        return self.state_template.shape

    @property
    def state_dim(self) -> int:
        """Flattened state dimension M."""
        return int(self.state_template.size)


def TwoPointBVProblem(
    f: Callable,
    bc: tuple[Callable, Callable],
    u0: Any,
    tspan: tuple[float, float],
    p: Any = None,
    bcresid_prototype: Optional[tuple[Any, Any]] = None,
    inplace: bool = False,
) -> BVProblem:
    """Build a BVProblem whose boundary conditions split into (bca, bcb)."""
    return BVProblem(
        f=f,
        bc=bc,
        u0=u0,
        tspan=tspan,
        p=p,
        bcresid_prototype=bcresid_prototype,
        problem_type=ProblemType.TWO_POINT,
        inplace=inplace,
    )
