"""Defect control and mesh selection for MIRK solves."""

import logging
import numpy as np
from numpy.typing import NDArray

from bvpkit.exceptions import DataIntegrityError
from bvpkit.mirk.cache import MIRKCache
from bvpkit.mirk.collocation import ResidualAssembler
from bvpkit.mirk.interpolation import stages_of
from bvpkit.solvers.base import ReturnCode

logger = logging.getLogger(__name__)

SAFETY_FACTOR = 1.3
# rho = 1 redistributes on every refinement unless the defect is uniform
RHO = 1.0


def interp_stages(cache: MIRKCache) -> None:
    """Evaluate the interpolation-only stages of every subinterval."""
    tab = cache.tableau
    Y, mesh, mesh_dt = cache.y0, cache.mesh, cache.mesh_dt
    f_into = cache.adapter.f_into

    for i in range(cache.num_subintervals):
        h = mesh_dt[i]
        K, K_star = cache.k_discrete[i], cache.k_interp[i]
        for r in range(tab.s_star - tab.stage):
            known = stages_of(K, K_star[:r])
            new = cache.new_stages[i]
            new[:] = (1.0 - tab.v_star[r]) * Y[i] + tab.v_star[r] * Y[i + 1]
            new += h * (tab.x_star[r, :tab.stage + r] @ known)
            f_into(K_star[r], new, mesh[i] + tab.c_star[r] * h)


def defect_estimate(cache: MIRKCache, assembler: ResidualAssembler) -> float:
    """
    Maximum scaled defect of the continuous extension.

    On each subinterval the interpolant u is sampled at tau_star and
    1 - tau_star; the defect there is (u' - f(u)) / (|f(u)| + 1). The
    larger of the two samples is stored in cache.defect.

    Returns:
        Max-norm of the defect over all subintervals
    """
    tab = cache.tableau
    Y, mesh, mesh_dt = cache.y0, cache.mesh, cache.mesh_dt
    f = cache.adapter.f

    assembler.update_stages(Y)
    interp_stages(cache)

    samples = [tab.interp_weights(tau) for tau in (tab.tau_star, 1.0 - tab.tau_star)]
    taus = (tab.tau_star, 1.0 - tab.tau_star)
    defect_norm = 0.0

    for i in range(cache.num_subintervals):
        h = mesh_dt[i]
        K = stages_of(cache.k_discrete[i], cache.k_interp[i])
        best, best_norm = None, -1.0
        for tau, (w, w_prime) in zip(taus, samples):
            z = Y[i] + h * (w @ K)
            z_prime = w_prime @ K
            fz = f(z, mesh[i] + tau * h)
            d = (z_prime - fz) / (np.abs(fz) + 1.0)
            d_norm = float(np.max(np.abs(d)))
            if not np.isfinite(d_norm):
                d_norm = np.inf
            if d_norm > best_norm:
                best, best_norm = d, d_norm
        cache.defect[i][:] = best
        defect_norm = max(defect_norm, best_norm)

    return defect_norm


def half_mesh(cache: MIRKCache) -> None:
    """Insert the midpoint of every subinterval (doubles the count)."""
    mesh = cache.mesh
    new_mesh = np.empty(2 * len(mesh) - 1)
    new_mesh[0::2] = mesh
    new_mesh[1::2] = 0.5 * (mesh[:-1] + mesh[1:])
    cache.mesh = new_mesh
    cache.mesh_dt = np.diff(new_mesh)


def redistribute(
    cache: MIRKCache,
    nsub_star: int,
    s_hat: NDArray,
    mesh: NDArray,
    mesh_dt: NDArray,
) -> None:
    """
    Place nsub_star subintervals so each carries an equal share of the
    piecewise-constant error density s_hat over the old mesh.
    """
    zeta = float(np.sum(s_hat * mesh_dt)) / nsub_star
    new_mesh = [mesh[0]]
    t = mesh[0]
    integral = 0.0
    k = 0

    while k < len(mesh) - 1 and len(new_mesh) < nsub_star:
        next_piece = s_hat[k] * (mesh[k + 1] - t)
        if integral + next_piece > zeta:
            t = (zeta - integral) / s_hat[k] + t
            new_mesh.append(t)
            integral = 0.0
        else:
            integral += next_piece
            t = mesh[k + 1]
            k += 1

    # Round-off can land the last interior point on the right end
    while new_mesh[-1] >= mesh[-1]:
        new_mesh.pop()
    new_mesh.append(mesh[-1])

    cache.mesh = np.asarray(new_mesh)
    cache.mesh_dt = np.diff(cache.mesh)
    if not np.all(cache.mesh_dt > 0):
        raise DataIntegrityError("Redistributed mesh is not strictly increasing")


def mesh_selector(cache: MIRKCache) -> tuple[NDArray, NDArray, int, ReturnCode]:
    """
    Replace cache.mesh by one that equidistributes the defect.

    Each subinterval gets weight s_i = (|defect_i| / abstol)^(1/(p+1)). If
    the weights are already uniform the mesh is halved, otherwise a new
    count is predicted from their sum and the mesh is redistributed. The
    count is never allowed past config.max_num_subintervals.

    Returns:
        old mesh, old mesh_dt, new subinterval count, status
    """
    config = cache.config
    mesh, mesh_dt = cache.mesh.copy(), cache.mesh_dt.copy()
    N = len(mesh)
    n = N - 1

    s_hat = np.array([np.max(np.abs(d)) for d in cache.defect.data])
    s_hat = (s_hat / config.abstol) ** (1.0 / (cache.order + 1))
    r1 = float(np.max(s_hat))
    r2 = float(np.sum(s_hat))
    r3 = r2 / n

    n_predict = int(round(SAFETY_FACTOR * r2 + 1))
    n_ = 0.1 * n
    if abs(n_predict - n) < n_:
        n_predict = int(round(n + n_))

    if r1 <= RHO * r3:
        nsub_star = 2 * n
        if nsub_star > config.max_num_subintervals:
            return mesh, mesh_dt, nsub_star, ReturnCode.FAILURE
        half_mesh(cache)
    else:
        nsub_star = int(np.clip(n_predict, max(N // 2, 1), 4 * n))
        if nsub_star > config.max_num_subintervals:
            return mesh, mesh_dt, nsub_star, ReturnCode.FAILURE
        redistribute(cache, nsub_star, s_hat, mesh, mesh_dt)

    logger.debug("Mesh selector: %d -> %d subintervals", n, cache.num_subintervals)
    return mesh, mesh_dt, nsub_star, ReturnCode.SUCCESS
