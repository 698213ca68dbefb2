"""Continuous extension of a discrete MIRK solution."""

import numpy as np
from numpy.typing import NDArray

from bvpkit.core.method import MIRKTableau


def interval(mesh: NDArray, t: float) -> int:
    """Index i of the subinterval [mesh[i], mesh[i+1]] containing t."""
    i = int(np.searchsorted(mesh, t, side="right")) - 1
    return min(max(i, 0), len(mesh) - 2)


def stages_of(k_discrete: NDArray, k_interp: NDArray) -> NDArray:
    """Stage derivatives of one subinterval, discrete first."""
    if k_interp.size:
        return np.concatenate([k_discrete, k_interp])
    return k_discrete


def interp_eval(
    t: float,
    mesh: NDArray,
    mesh_dt: NDArray,
    Y: NDArray,
    k_discrete: NDArray,
    k_interp: NDArray,
    tableau: MIRKTableau,
) -> NDArray:
    """
    State at time t from the local interpolant of its subinterval.

    Args:
        t: Query time in [mesh[0], mesh[-1]]
        mesh, mesh_dt: Mesh the data lives on
        Y: (n+1, M) states at mesh points
        k_discrete: (n, stage, M) discrete stage derivatives
        k_interp: (n, s_star - stage, M) interpolation stages, or empty
        tableau: MIRK tableau

    Returns:
        Flat state (M,)
    """
    i = interval(mesh, t)
    h = mesh_dt[i]
    include_interp = k_interp.size > 0
    w, _ = tableau.interp_weights((t - mesh[i]) / h, include_interp)
    K = stages_of(k_discrete[i], k_interp[i])
    return Y[i] + h * (w @ K)


class MIRKInterpolation:
    """Snapshot of a MIRK solution usable after its cache is gone."""

    def __init__(
        self,
        mesh: NDArray,
        Y: NDArray,
        k_discrete: NDArray,
        k_interp: NDArray,
        tableau: MIRKTableau,
    ) -> None:
        self.mesh = np.array(mesh, copy=True)
        self.mesh_dt = np.diff(self.mesh)
        self.Y = np.array(Y, copy=True)
        self.k_discrete = np.array(k_discrete, copy=True)
        self.k_interp = np.array(k_interp, copy=True)
        self.tableau = tableau

    def __call__(self, t: float) -> NDArray:
        return interp_eval(
            t, self.mesh, self.mesh_dt, self.Y,
            self.k_discrete, self.k_interp, self.tableau,
        )
