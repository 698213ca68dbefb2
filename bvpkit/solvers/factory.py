"""Default collaborator selection."""

from typing import Optional

from bvpkit.solvers.base import IVPSolver, NonlinearSolver
from bvpkit.solvers.ivp import ScipyIVP
from bvpkit.solvers.least_squares import LeastSquares
from bvpkit.solvers.newton import NewtonRaphson
from bvpkit.exceptions import ConfigurationError


_NONLINEAR_SOLVERS = {
    "newton": NewtonRaphson,
    "least_squares": LeastSquares,
}


def create_nonlinear_solver(
    nlsolve: Optional[NonlinearSolver | str] = None,
) -> NonlinearSolver:
    """
    Resolve the nonlinear solver of an algorithm.

    Args:
        nlsolve: Solver instance, registered name, or None for Newton

    Returns:
        Nonlinear solver instance
    """
    if nlsolve is None:
        return NewtonRaphson()
    if isinstance(nlsolve, NonlinearSolver):
        return nlsolve
    try:
        return _NONLINEAR_SOLVERS[nlsolve]()
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"Unknown nonlinear solver {nlsolve!r}",
            context=f"choose from {sorted(_NONLINEAR_SOLVERS)}",
        ) from None


def create_ivp_solver(ode_alg: Optional[IVPSolver | str] = None) -> IVPSolver:
    """Resolve the IVP solver: instance, scipy method name, or None (RK45)."""
    if ode_alg is None:
        return ScipyIVP()
    if isinstance(ode_alg, IVPSolver):
        return ode_alg
    if isinstance(ode_alg, str):
        return ScipyIVP(method=ode_alg)
    raise ConfigurationError(f"Unknown IVP solver {ode_alg!r}")
