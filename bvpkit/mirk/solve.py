"""Adaptive MIRK solve loop with mesh-halving recovery."""

import logging
from typing import Optional
import numpy as np

from bvpkit.mirk.adaptivity import (
    defect_estimate,
    half_mesh,
    interp_stages,
    mesh_selector,
)
from bvpkit.mirk.cache import MIRKCache
from bvpkit.mirk.collocation import ResidualAssembler
from bvpkit.mirk.interpolation import MIRKInterpolation, interp_eval
from bvpkit.solution import BVPSolution, FailureReason, SolverStats
from bvpkit.solvers.base import ReturnCode

logger = logging.getLogger(__name__)


def solve_mirk(cache: MIRKCache) -> BVPSolution:
    """
    Algorithm: solve on the current mesh, estimate the defect, refine.

    While the status is SUCCESS and the defect norm exceeds abstol:
        1. Solve the collocation system on the current mesh
        2. Reject converged solutions with defect above defect_threshold
        3. Accepted but inaccurate: select a new mesh, interpolate the
           solution onto it and resize the cache
        4. Failed: halve every subinterval and restart from a zero guess,
           unless that would exceed max_num_subintervals

    Without adaptivity exactly one nonlinear solve is performed.
    """
    config = cache.config
    abstol = config.abstol
    assembler = ResidualAssembler(cache)
    stats = SolverStats()

    info = ReturnCode.SUCCESS
    reason: Optional[FailureReason] = None
    defect_norm = 2 * abstol

    while info.successful and defect_norm > abstol:
        nlprob = assembler.build_problem(cache.y0.reshape(-1))
        nlsol = cache.nlsolve.solve(nlprob, abstol)
        cache.y0 = np.array(nlsol.u, dtype=float).reshape(cache.y0.shape)

        stats.nonlinear_solves += 1
        stats.nonlinear_iterations += nlsol.iterations
        info = nlsol.retcode
        logger.debug(
            "Nonlinear solve on %d subintervals: %s (%d iterations, |r| = %.3e)",
            cache.num_subintervals, info.name, nlsol.iterations, nlsol.residual_norm,
        )

        if not config.adaptive:
            if not info.successful:
                reason = FailureReason.NONLINEAR_SOLVE
            break

        if info.successful:
            defect_norm = defect_estimate(cache, assembler)
            logger.debug("Defect norm %.3e (abstol %.3e)", defect_norm, abstol)
            if defect_norm > config.defect_threshold:
                info = ReturnCode.FAILURE
                reason = FailureReason.DEFECT_REJECTION
        else:
            reason = FailureReason.NONLINEAR_SOLVE

        if info.successful:
            if defect_norm > abstol:
                mesh, mesh_dt, nsub_star, info = mesh_selector(cache)
                if info.successful:
                    cache.y0 = np.array([
                        interp_eval(
                            t, mesh, mesh_dt, cache.y0,
                            cache.k_discrete.data, cache.k_interp.data,
                            cache.tableau,
                        )
                        for t in cache.mesh
                    ])
                    cache.expand()
                    stats.refinements += 1
                    logger.info(
                        "Refined mesh: %d -> %d subintervals",
                        len(mesh) - 1, cache.num_subintervals,
                    )
                else:
                    reason = FailureReason.MESH_SELECTION
                    logger.warning(
                        "Mesh selection needs %d subintervals, bound is %d",
                        nsub_star, config.max_num_subintervals,
                    )
        else:
            # No acceptable solution on this mesh
            if 2 * cache.num_subintervals > config.max_num_subintervals:
                logger.warning(
                    "Halving %d subintervals would exceed the bound of %d (%s)",
                    cache.num_subintervals, config.max_num_subintervals,
                    reason.name if reason else "unknown",
                )
                info = ReturnCode.FAILURE
                reason = FailureReason.SUBINTERVAL_BOUND
            else:
                half_mesh(cache)
                cache.expand()
                cache.y0[:] = 0.0
                stats.halvings += 1
                logger.info(
                    "Restarting on halved mesh with %d subintervals (%s)",
                    cache.num_subintervals, reason.name if reason else "unknown",
                )
                info = ReturnCode.SUCCESS  # Force a restart
                reason = None
                defect_norm = 2 * abstol

    return build_solution(cache, assembler, info, reason, stats)


def build_solution(
    cache: MIRKCache,
    assembler: ResidualAssembler,
    info: ReturnCode,
    reason: Optional[FailureReason],
    stats: SolverStats,
) -> BVPSolution:
    """Package the final mesh and states with their interpolant."""
    assembler.update_stages(cache.y0)
    if cache.config.adaptive:
        interp_stages(cache)
    cache.check_integrity()

    interp = MIRKInterpolation(
        cache.mesh, cache.y0, cache.k_discrete.data, cache.k_interp.data,
        cache.tableau,
    )
    return BVPSolution(
        t=cache.mesh.copy(),
        Y=cache.y0.copy(),
        interp=interp,
        shape=cache.adapter.shape,
        retcode=info,
        failure_reason=reason,
        stats=stats,
        problem=cache.problem,
        alg=cache.alg,
    )
