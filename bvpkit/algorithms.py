"""Algorithm descriptors selected by the caller."""

from dataclasses import dataclass, field
from typing import Optional

from bvpkit.core.method import MIRKTableau
from bvpkit.methods.mirk import construct_mirk
from bvpkit.solvers.base import IVPSolver, NonlinearSolver
from bvpkit.solvers.jacobian import DiffMode


@dataclass(frozen=True)
class JacobianAlgorithm:
    """
    Differentiation strategy handed to the nonlinear solver.

    Attributes:
        diffmode: Finite-difference scheme
        sparse: Supply the structural sparsity of the collocation system
            so the Jacobian is grouped and factored sparsely
    """

    diffmode: DiffMode = DiffMode.FORWARD
    sparse: bool = True


@dataclass(frozen=True)
class MIRK:
    """
    Monotonic implicit Runge-Kutta collocation with defect control.

    Reference: W. H. Enright and P. H. Muir, "Runge-Kutta Software with
    Defect Control for Boundary Value ODEs", SIAM J. Sci. Comput. 17 (1996).
    """

    order: int = 4
    nlsolve: Optional[NonlinearSolver | str] = None
    jac_alg: JacobianAlgorithm = field(default_factory=JacobianAlgorithm)

    def tableau(self) -> MIRKTableau:
        return construct_mirk(self.order)


def MIRK2(**kwargs) -> MIRK:
    """2nd order MIRK method."""
    return MIRK(order=2, **kwargs)


def MIRK3(**kwargs) -> MIRK:
    """3rd order MIRK method."""
    return MIRK(order=3, **kwargs)


def MIRK4(**kwargs) -> MIRK:
    """4th order MIRK method."""
    return MIRK(order=4, **kwargs)


def MIRK5(**kwargs) -> MIRK:
    """5th order MIRK method."""
    return MIRK(order=5, **kwargs)


def MIRK6(**kwargs) -> MIRK:
    """6th order MIRK method."""
    return MIRK(order=6, **kwargs)


@dataclass(frozen=True)
class Shooting:
    """
    Single shooting: root-find the initial state so that the IVP solution
    satisfies the boundary conditions.

    Attributes:
        ode_alg: IVP solver, scipy method name, or None for RK45
        nlsolve: Nonlinear solver, registered name, or None for Newton
        jac_alg: Differentiation strategy for the (dense) root find
    """

    ode_alg: Optional[IVPSolver | str] = None
    nlsolve: Optional[NonlinearSolver | str] = None
    jac_alg: JacobianAlgorithm = field(
        default_factory=lambda: JacobianAlgorithm(sparse=False)
    )
