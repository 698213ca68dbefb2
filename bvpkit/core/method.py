"""Mono-implicit Runge-Kutta (MIRK) tableau specification."""

from dataclasses import dataclass
from functools import cached_property
from typing import Optional
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class MIRKTableau:
    """
    MIRK tableau with its continuous-extension (interpolation) stages.

    Stage r on subinterval [t_i, t_i + h] is

        Y_r = (1 - v_r) y_i + v_r y_{i+1} + h Σ_{j<r} x_{rj} K_j
        K_r = f(Y_r, t_i + c_r h)

    and the collocation residual is y_{i+1} - y_i - h Σ_r b_r K_r. The
    extra stages (c_star, v_star, x_star) follow the same recipe and are only
    used to build the interpolant for defect control. The interpolant spans
    the stages listed in interp_support, or all of them when it is None.
    """

    order: int
    c: NDArray        # (s,)  discrete abscissae
    v: NDArray        # (s,)  endpoint blending
    b: NDArray        # (s,)  quadrature weights
    x: NDArray        # (s, s) strictly lower triangular coupling
    c_star: NDArray   # (s_star - s,) interpolation abscissae
    v_star: NDArray   # (s_star - s,)
    x_star: NDArray   # (s_star - s, s_star) coupling to earlier stages
    tau_star: float   # defect sample point, also sampled at 1 - tau_star
    interp_support: Optional[tuple[int, ...]] = None

    @cached_property
    def stage(self) -> int:
        """Number of discrete stages."""
        return self.c.shape[0]

    @cached_property
    def s_star(self) -> int:
        """Total number of stages including interpolation stages."""
        return self.stage + self.c_star.shape[0]

    @cached_property
    def nodes(self) -> NDArray:
        """Abscissae of all stages, discrete first."""
        return np.concatenate([self.c, self.c_star])

    @cached_property
    def support(self) -> NDArray:
        """Indices of the stages spanning the continuous extension."""
        if self.interp_support is None:
            return np.arange(self.s_star)
        return np.asarray(self.interp_support, dtype=int)

    @cached_property
    def _discrete_basis(self) -> NDArray:
        return _lagrange_coefficients(self.c)

    @cached_property
    def _full_basis(self) -> NDArray:
        return _lagrange_coefficients(self.nodes[self.support])

    def interp_weights(
        self, tau: float, include_interp: bool = True
    ) -> tuple[NDArray, NDArray]:
        """
        Weights of the continuous extension at local coordinate tau.

        u(t_i + tau h)  = y_i + h Σ_r w_r K_r
        u'(t_i + tau h) =       Σ_r w'_r K_r

        Args:
            tau: Local coordinate in [0, 1]
            include_interp: Use the interpolation stages as well as the
                discrete ones

        Returns:
            w, w_prime: Arrays of length s_star (or stage); stages outside
                the support get zero weight
        """
        if not include_interp:
            return _basis_weights(self._discrete_basis, tau)
        w = np.zeros(self.s_star)
        w_prime = np.zeros(self.s_star)
        w[self.support], w_prime[self.support] = _basis_weights(self._full_basis, tau)
        return w, w_prime


def extension_stage(c_star: float, nodes) -> tuple[float, NDArray]:
    """
    Coefficients of a stage at c_star built from earlier stages at nodes.

    Solves for v and x so that

        Y* = (1 - v) y_i + v y_{i+1} + h Σ_j x_j K_j

    is exact whenever u is a polynomial of degree len(nodes) + 1. The
    system is singular exactly when ∫_0^1 Π_j (t - nodes_j) dt = 0, e.g.
    for a single node at 1/2.

    Returns:
        v, x
    """
    nodes = np.asarray(nodes, dtype=float)
    k = np.arange(1, nodes.shape[0] + 2)[:, None]
    A = np.hstack([np.ones((k.shape[0], 1)), k * nodes[None, :] ** (k - 1)])
    coeffs = np.linalg.solve(A, float(c_star) ** k[:, 0])
    return float(coeffs[0]), coeffs[1:]


def _basis_weights(coeffs: NDArray, tau: float) -> tuple[NDArray, NDArray]:
    k = np.arange(coeffs.shape[0])
    powers = tau ** k
    return (tau * powers / (k + 1)) @ coeffs, powers @ coeffs


def _lagrange_coefficients(nodes: NDArray) -> NDArray:
    """
    Monomial coefficients of the Lagrange basis on distinct nodes.

    Column r holds the coefficients (increasing powers) of L_r.
    """
    vander = np.vander(nodes, increasing=True)
    return np.linalg.solve(vander, np.eye(len(nodes)))
