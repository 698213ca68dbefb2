"""Single shooting: the BVP as a root-finding problem over the initial state."""

import logging

from bvpkit.adapters import ProblemAdapter
from bvpkit.algorithms import Shooting
from bvpkit.core.config import SolverConfig
from bvpkit.core.problem import BVProblem, GuessKind
from bvpkit.solution import BVPSolution, FailureReason, SolverStats
from bvpkit.solvers.base import NonlinearProblem, ReturnCode
from bvpkit.solvers.factory import create_ivp_solver, create_nonlinear_solver
from bvpkit.stepping.forward import eval_bc_residual, forward_solve

logger = logging.getLogger(__name__)


def shoot(problem: BVProblem, alg: Shooting, config: SolverConfig) -> BVPSolution:
    """
    Solve the BVP by shooting from t0.

    The unknown is the flattened initial state; the loss is the boundary
    residual of the IVP solution started from it. After the root find the
    IVP is solved once more from the root. Non-convergence is reported as
    ReturnCode.FAILURE on the returned trajectory, never raised.

    Only the first state of a trajectory (or function) initial guess is used.
    The root find is dense, so jac_alg.sparse is not consulted.
    """
    adapter = ProblemAdapter(problem)
    if problem.guess_kind != GuessKind.STATE and config.verbose:
        logger.warning(
            "Initial guess provided, but only its first state is used for Shooting"
        )
    u0 = adapter.flatten(problem.state_template)

    ivp_solver = create_ivp_solver(alg.ode_alg)
    nlsolve = create_nonlinear_solver(alg.nlsolve)

    def loss(u0_):
        trajectory, _ = forward_solve(adapter, u0_, problem.tspan, ivp_solver)
        return eval_bc_residual(adapter, trajectory)

    nlprob = NonlinearProblem(fn=loss, u0=u0, diffmode=alg.jac_alg.diffmode)
    opt = nlsolve.solve(nlprob, config.abstol)
    logger.debug(
        "Shooting root find: %s after %d iterations (|r| = %.3e)",
        opt.retcode.name, opt.iterations, opt.residual_norm,
    )

    trajectory, ivp = forward_solve(adapter, opt.u, problem.tspan, ivp_solver)

    retcode, reason = ReturnCode.SUCCESS, None
    if not opt.retcode.successful:
        retcode, reason = ReturnCode.FAILURE, FailureReason.NONLINEAR_SOLVE
    elif not ivp.success:
        retcode, reason = ReturnCode.FAILURE, FailureReason.IVP_SOLVE
        logger.warning("Final IVP solve failed: %s", ivp.message)

    return BVPSolution(
        t=trajectory.t,
        Y=trajectory.Y,
        interp=ivp.interp,
        shape=adapter.shape,
        retcode=retcode,
        failure_reason=reason,
        stats=SolverStats(nonlinear_solves=1, nonlinear_iterations=opt.iterations),
        problem=problem,
        alg=alg,
    )
