"""Newton-Raphson nonlinear solver with backtracking line search."""

import logging
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from bvpkit.algebra import DenseBackend, SparseBackend, LinearAlgebraBackend
from bvpkit.solvers.base import (
    NonlinearProblem,
    NonlinearSolution,
    NonlinearSolver,
    ReturnCode,
)
from bvpkit.solvers.jacobian import finite_difference_jacobian, group_columns

logger = logging.getLogger(__name__)


class NewtonRaphson(NonlinearSolver):
    """
    Newton iteration on the residual with a finite-difference Jacobian.

    A Jacobian callable on the problem takes precedence. Otherwise the
    Jacobian is built with the problem's difference scheme, grouped over
    its sparsity pattern when one is supplied, and factored by the sparse or
    dense backend accordingly. Rectangular systems take Gauss-Newton steps.
    """

    def __init__(
        self,
        max_iter: int = 25,
        line_search: bool = True,
        armijo: float = 1e-4,
        min_damping: float = 1e-4,
    ) -> None:
        self.max_iter = max_iter
        self.line_search = line_search
        self.armijo = armijo
        self.min_damping = min_damping

    def solve(
        self, problem: NonlinearProblem, abstol: float
    ) -> NonlinearSolution:
        """Newton's method on problem.fn to max-norm abstol."""
        sparse = problem.jac_sparsity is not None
        backend: LinearAlgebraBackend = (
            SparseBackend() if sparse else DenseBackend()
        )
        groups = (
            group_columns(problem.jac_sparsity)
            if sparse and problem.jac is None else None
        )

        z = np.array(problem.u0, dtype=float, copy=True)
        r = problem.fn(z)
        r_norm = backend.norm(r)

        for iteration in range(1, self.max_iter + 1):
            if not np.isfinite(r_norm):
                logger.debug("Newton: non-finite residual at iteration %d", iteration)
                return NonlinearSolution(z, ReturnCode.FAILURE, iteration, r_norm)
            if r_norm <= abstol:
                return NonlinearSolution(z, ReturnCode.SUCCESS, iteration, r_norm)

            if problem.jac is not None:
                J = problem.jac(z, r)
            else:
                J = finite_difference_jacobian(
                    problem.fn, z, r, problem.diffmode, problem.jac_sparsity, groups
                )
            dz = self._newton_step(backend, J, r)
            if dz is None or not np.all(np.isfinite(dz)):
                logger.debug("Newton: singular Jacobian at iteration %d", iteration)
                return NonlinearSolution(z, ReturnCode.FAILURE, iteration, r_norm)

            z, r, r_norm = self._damped_update(problem, backend, z, dz, r, r_norm)

        converged = bool(np.isfinite(r_norm) and r_norm <= abstol)
        retcode = ReturnCode.SUCCESS if converged else ReturnCode.FAILURE
        return NonlinearSolution(z, retcode, self.max_iter, r_norm)

    def _newton_step(
        self, backend: LinearAlgebraBackend, J, r: NDArray
    ) -> Optional[NDArray]:
        """Solve J dz = -r (least squares if J is rectangular)."""
        m, n = J.shape
        try:
            if m != n:
                return backend.lstsq(J, -r)
            lu = backend.lu_factor(J)
            return backend.lu_solve(lu, -r)
        except (RuntimeError, ValueError, np.linalg.LinAlgError):
            return None

    def _damped_update(
        self,
        problem: NonlinearProblem,
        backend: LinearAlgebraBackend,
        z: NDArray,
        dz: NDArray,
        r: NDArray,
        r_norm: float,
    ) -> tuple[NDArray, NDArray, float]:
        """Armijo backtracking on ||r||²; full step when disabled."""
        alpha = 1.0
        cost = float(r @ r)
        while True:
            z_new = z + alpha * dz
            r_new = problem.fn(z_new)
            cost_new = float(r_new @ r_new)
            if (
                not self.line_search
                or (np.isfinite(cost_new)
                    and cost_new <= (1.0 - 2.0 * self.armijo * alpha) * cost)
                or alpha <= self.min_damping
            ):
                return z_new, r_new, backend.norm(r_new)
            alpha *= 0.5
