"""Trajectory storage with continuous interpolation."""

from typing import Any, Callable
import numpy as np
from numpy.typing import NDArray

from bvpkit.exceptions import InterpolationError


class Trajectory:
    """
    States on a time grid plus an interpolant between them.

    Indexing and calls return states in the problem's native shape, which is
    what boundary-condition callbacks receive as ``sol``.
    """

    def __init__(
        self,
        t: NDArray,                        # (N,)
        Y: NDArray,                        # (N, M) flat states at t
        interp: Callable[[float], NDArray],  # flat state at any time in [t0, tN]
        shape: tuple[int, ...],
    ) -> None:
        self.t = np.asarray(t, dtype=float)
        self.Y = np.asarray(Y, dtype=float)
        self._interp = interp
        self.shape = shape

    @property
    def N(self) -> int:
        """Number of stored points."""
        return self.t.shape[0]

    @property
    def u(self) -> list[NDArray]:
        """States at t in native shape."""
        return [y.reshape(self.shape) for y in self.Y]

    def __len__(self) -> int:
        return self.N

    def __getitem__(self, i: int) -> NDArray:
        return self.Y[i].reshape(self.shape)

    def __call__(self, t: Any) -> Any:
        """
        Interpolated state(s).

        Args:
            t: Scalar time or 1-D array of times within [t[0], t[-1]]

        Returns:
            Native-shaped state, or a list of them for array input
        """
        if np.ndim(t) == 0:
            return self._evaluate(float(t)).reshape(self.shape)
        return [self._evaluate(float(ti)).reshape(self.shape) for ti in t]

    def _evaluate(self, t: float) -> NDArray:
        t0, t1 = self.t[0], self.t[-1]
        slack = 1e-12 * max(1.0, abs(t0), abs(t1))
        if t < t0 - slack or t > t1 + slack:
            raise InterpolationError(
                f"Time {t} outside of solution domain",
                context=f"[{t0}, {t1}]",
            )
        return np.asarray(self._interp(min(max(t, t0), t1)), dtype=float)
