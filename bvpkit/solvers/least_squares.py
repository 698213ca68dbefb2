"""Nonlinear solver backed by scipy.optimize.least_squares."""

import numpy as np
import scipy.optimize

from bvpkit.solvers.base import (
    NonlinearProblem,
    NonlinearSolution,
    NonlinearSolver,
    ReturnCode,
)


class LeastSquares(NonlinearSolver):
    """
    Trust-region reflective least squares on the residual.

    Converged only when the final residual max-norm meets abstol; a local
    minimum of ||r|| with nonzero residual counts as failure.
    """

    def __init__(self, max_nfev: int | None = None, tol: float = 1e-12) -> None:
        self.max_nfev = max_nfev
        self.tol = tol

    def solve(
        self, problem: NonlinearProblem, abstol: float
    ) -> NonlinearSolution:
        """Minimize ||problem.fn||² starting from problem.u0."""
        kwargs = {"jac": problem.diffmode.value}
        if problem.jac is not None:
            kwargs["jac"] = lambda u: problem.jac(u, problem.fn(u))
        elif problem.jac_sparsity is not None:
            kwargs["jac_sparsity"] = problem.jac_sparsity
        if problem.jac_sparsity is not None:
            kwargs["tr_solver"] = "lsmr"

        result = scipy.optimize.least_squares(
            problem.fn,
            np.asarray(problem.u0, dtype=float),
            method="trf",
            xtol=self.tol,
            ftol=self.tol,
            gtol=self.tol,
            max_nfev=self.max_nfev,
            **kwargs,
        )
        r_norm = float(np.max(np.abs(result.fun))) if result.fun.size else 0.0
        converged = result.status >= 0 and np.isfinite(r_norm) and r_norm <= abstol
        return NonlinearSolution(
            u=result.x,
            retcode=ReturnCode.SUCCESS if converged else ReturnCode.FAILURE,
            iterations=int(result.nfev),
            residual_norm=r_norm,
        )
