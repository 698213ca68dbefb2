"""Assembly of the MIRK collocation residual and its Jacobian."""

import numpy as np
import scipy.sparse
from numpy.typing import NDArray

from bvpkit.exceptions import ConfigurationError
from bvpkit.mirk.cache import MIRKCache
from bvpkit.mirk.interpolation import interval
from bvpkit.solvers.base import NonlinearProblem
from bvpkit.solvers.jacobian import finite_difference_jacobian, group_columns
from bvpkit.stepping.trajectory import Trajectory


class ResidualAssembler:
    """
    Residual of the discrete BVP on the cache's current mesh.

    For unknowns y = [y_0, ..., y_n] (flattened) the residual stacks the
    boundary conditions and one collocation residual per subinterval,

        Φ_i = y_{i+1} - y_i - h_i Σ_r b_r K_r^i,

    in the row order of SystemRequirements. Evaluating it refreshes the
    cache's discrete stage derivatives as a side effect.
    """

    def __init__(self, cache: MIRKCache) -> None:
        self.cache = cache
        self._colloc_key = None
        self._colloc_pattern = None
        self._colloc_groups = None

    def _subinterval_stages(self, Y: NDArray, i: int, K: NDArray) -> NDArray:
        """Discrete stage derivatives of subinterval i, written into K (stage, M)."""
        cache = self.cache
        tab = cache.tableau
        h = cache.mesh_dt[i]
        y_i, y_next = Y[i], Y[i + 1]
        for r in range(tab.stage):
            Y_r = (1.0 - tab.v[r]) * y_i + tab.v[r] * y_next
            if r:
                Y_r += h * (tab.x[r, :r] @ K[:r])
            cache.adapter.f_into(K[r], Y_r, cache.mesh[i] + tab.c[r] * h)
        return K

    def update_stages(self, Y: NDArray) -> NDArray:
        """
        Recompute all discrete stages for states Y.

        Args:
            Y: (n+1, M) states at the mesh points

        Returns:
            Φ: (n, M) collocation residuals
        """
        cache = self.cache
        b = cache.tableau.b

        if cache.residual is not None:
            Phi = cache.residual.data
        else:
            Phi = np.empty((cache.num_subintervals, cache.M))

        for i in range(cache.num_subintervals):
            K = self._subinterval_stages(Y, i, cache.k_discrete[i])
            Phi[i] = Y[i + 1] - Y[i] - cache.mesh_dt[i] * (b @ K)

        return Phi

    def trajectory(self, Y: NDArray) -> Trajectory:
        """
        Current estimate as a trajectory over the mesh (discrete stages).

        Interior queries build the stages of their own subinterval, so the
        trajectory is consistent with Y whatever the cache holds.
        """
        cache = self.cache
        tab = cache.tableau

        def interp(t: float) -> NDArray:
            i = interval(cache.mesh, t)
            h = cache.mesh_dt[i]
            K = self._subinterval_stages(Y, i, np.empty((tab.stage, cache.M)))
            w, _ = tab.interp_weights((t - cache.mesh[i]) / h, include_interp=False)
            return Y[i] + h * (w @ K)

        return Trajectory(cache.mesh, Y, interp, cache.adapter.shape)

    def _states(self, y: NDArray) -> NDArray:
        return y.reshape(self.cache.num_subintervals + 1, self.cache.M)

    def _boundary_pieces(self, Y: NDArray) -> list[NDArray]:
        adapter = self.cache.adapter
        if adapter.two_point:
            resid_a, resid_b = adapter.bc_two_point(Y[0], Y[-1])
            pieces = [resid_a, resid_b]
        else:
            pieces = [adapter.bc_residual(self.trajectory(Y), self.cache.mesh)]

        for piece, size in zip(pieces, adapter.bc_sizes):
            if piece.size != size:
                raise ConfigurationError(
                    "Boundary condition returned a residual of the wrong size",
                    context=f"expected {size}, got {piece.size}",
                )
        return pieces

    def bc_residual(self, y: NDArray) -> NDArray:
        """Boundary rows of the residual alone; no collocation sweep."""
        return np.concatenate(self._boundary_pieces(self._states(y)))

    def collocation_residual(self, y: NDArray) -> NDArray:
        """Collocation rows Φ_1 .. Φ_n alone, flattened."""
        return np.array(self.update_stages(self._states(y)), copy=True).reshape(-1)

    def residual(self, y: NDArray) -> NDArray:
        """Full residual for flattened unknowns y."""
        cache = self.cache
        Y = self._states(y)
        Phi = self.update_stages(Y)
        pieces = self._boundary_pieces(Y)

        if cache.bc_residual is not None:
            for buffer, piece in zip(cache.bc_residual, pieces):
                buffer[:] = piece

        if cache.adapter.two_point:
            return np.concatenate([pieces[0], Phi.reshape(-1), pieces[1]])
        return np.concatenate([pieces[0], Phi.reshape(-1)])

    def _collocation_structure(self):
        n = self.cache.num_subintervals
        if self._colloc_key != n:
            self._colloc_pattern = self.cache.requirements().collocation_sparsity()
            self._colloc_groups = group_columns(self._colloc_pattern)
            self._colloc_key = n
        return self._colloc_pattern, self._colloc_groups

    def jacobian(self, y: NDArray, r: NDArray):
        """
        Sparse residual Jacobian of a standard problem at y, given r = residual(y).

        The boundary block is differenced column by column through
        bc_residual, which costs one boundary evaluation per unknown. The
        collocation block is differenced with column grouping over its
        banded pattern, so each group costs one collocation sweep.
        """
        diffmode = self.cache.alg.jac_alg.diffmode
        n_bc = self.cache.adapter.bc_sizes[0]
        pattern, groups = self._collocation_structure()

        bc_block = finite_difference_jacobian(
            self.bc_residual, y, r[:n_bc], diffmode
        )
        colloc_block = finite_difference_jacobian(
            self.collocation_residual, y, r[n_bc:], diffmode, pattern, groups
        )
        return scipy.sparse.vstack(
            [scipy.sparse.csc_matrix(bc_block), colloc_block], format="csc"
        )

    def build_problem(self, y: NDArray) -> NonlinearProblem:
        """Nonlinear problem on the current mesh starting from y."""
        cache = self.cache
        jac_alg = cache.alg.jac_alg
        sparsity = cache.requirements().jacobian_sparsity() if jac_alg.sparse else None
        split = jac_alg.sparse and not cache.adapter.two_point
        return NonlinearProblem(
            fn=self.residual,
            u0=np.array(y, dtype=float, copy=True),
            jac_sparsity=sparsity,
            diffmode=jac_alg.diffmode,
            jac=self.jacobian if split else None,
        )
