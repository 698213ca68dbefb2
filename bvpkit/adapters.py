"""Flat-vector view of a problem whose states have an arbitrary shape."""

from typing import Any
import numpy as np
from numpy.typing import NDArray

from bvpkit.core.problem import BVProblem, ProblemType
from bvpkit.exceptions import ConfigurationError


class ProblemAdapter:
    """
    Presents f and bc to the numerical core as functions of flat vectors.

    States are reshaped to the problem's native shape only at the call into
    user code; everything inside bvpkit works on (M,) vectors. In-place and
    out-of-place user callbacks are both exposed as "write into out".
    """

    def __init__(self, problem: BVProblem) -> None:
        self.problem = problem
        self.shape = problem.state_shape
        self.size = problem.state_dim
        self.p = problem.p
        self.inplace = problem.inplace
        self.two_point = problem.problem_type == ProblemType.TWO_POINT
        self.bc_shapes = self._deduce_bc_shapes()

    @property
    def bc_sizes(self) -> tuple[int, ...]:
        return tuple(int(np.prod(s)) for s in self.bc_shapes)

    def flatten(self, x: Any) -> NDArray:
        """Native state -> flat copy."""
        x = np.asarray(x, dtype=float)
        if x.size != self.size:
            raise ConfigurationError(
                "State has the wrong number of entries",
                context=f"expected {self.size}, got shape {x.shape}",
            )
        return x.reshape(-1).copy()

    def unflatten(self, v: NDArray) -> NDArray:
        """Flat vector -> native-shaped view."""
        return np.reshape(v, self.shape)

    def f_into(self, out: NDArray, u: NDArray, t: float) -> NDArray:
        """Evaluate f(u, p, t) into the flat buffer out."""
        if self.inplace:
            # out is contiguous, so the reshape is a view the callback fills
            self.problem.f(np.reshape(out, self.shape), self.unflatten(u), self.p, t)
        else:
            out[:] = np.ravel(self.problem.f(self.unflatten(u), self.p, t))
        return out

    def f(self, u: NDArray, t: float) -> NDArray:
        """Evaluate f(u, p, t) into a new flat vector."""
        return self.f_into(np.empty(self.size), u, t)

    def bc_residual(self, sol: Any, t: NDArray) -> NDArray:
        """Flat residual of a standard boundary condition bc(sol, p, t)."""
        bc = self.problem.bc
        if self.inplace:
            resid = np.zeros(self.bc_shapes[0])
            bc(resid, sol, self.p, t)
            return resid.reshape(-1)
        return np.ravel(np.asarray(bc(sol, self.p, t), dtype=float))

    def bc_two_point(self, ua: NDArray, ub: NDArray) -> tuple[NDArray, NDArray]:
        """Flat residuals (bca(ua), bcb(ub)) evaluated as two calls."""
        bca, bcb = self.problem.bc
        ua_, ub_ = self.unflatten(ua), self.unflatten(ub)
        if self.inplace:
            resid_a = np.zeros(self.bc_shapes[0])
            resid_b = np.zeros(self.bc_shapes[1])
            bca(resid_a, ua_, self.p)
            bcb(resid_b, ub_, self.p)
            return resid_a.reshape(-1), resid_b.reshape(-1)
        resid_a = np.ravel(np.asarray(bca(ua_, self.p), dtype=float))
        resid_b = np.ravel(np.asarray(bcb(ub_, self.p), dtype=float))
        return resid_a, resid_b

    def _deduce_bc_shapes(self) -> tuple[tuple[int, ...], ...]:
        proto = self.problem.bcresid_prototype
        if not self.two_point:
            if proto is None:
                return (self.shape,)
            return (np.shape(proto),)

        if proto is not None:
            return (np.shape(proto[0]), np.shape(proto[1]))
        if self.inplace:
            raise ConfigurationError(
                "In-place two-point problems need bcresid_prototype"
            )
        # Probe the out-of-place callbacks once at the template state
        template = self.problem.state_template
        bca, bcb = self.problem.bc
        return (
            np.shape(np.asarray(bca(template, self.p))),
            np.shape(np.asarray(bcb(template, self.p))),
        )
