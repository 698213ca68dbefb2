"""IVP solver backed by scipy.integrate.solve_ivp."""

from typing import Callable
import numpy as np
from numpy.typing import NDArray
from scipy.integrate import solve_ivp

from bvpkit.solvers.base import IVPSolution, IVPSolver


class ScipyIVP(IVPSolver):
    """Adaptive IVP integration with dense output."""

    def __init__(
        self, method: str = "RK45", rtol: float = 1e-8, atol: float = 1e-10
    ) -> None:
        self.method = method
        self.rtol = rtol
        self.atol = atol

    def solve(
        self,
        f: Callable[[float, NDArray], NDArray],
        y0: NDArray,
        t_span: tuple[float, float],
    ) -> IVPSolution:
        """Integrate f from y0 over t_span."""
        result = solve_ivp(
            f,
            t_span,
            np.asarray(y0, dtype=float),
            method=self.method,
            rtol=self.rtol,
            atol=self.atol,
            dense_output=True,
        )
        if result.sol is not None:
            interp = result.sol
        else:
            t_last, y_last = result.t[-1], result.y[:, -1]

            def interp(t):
                # Integration stopped before producing a step
                t = np.asarray(t)
                if t.ndim == 0:
                    return y_last.copy()
                return np.repeat(y_last[:, None], t.shape[0], axis=1)

        return IVPSolution(
            t=result.t,
            y=result.y,
            interp=interp,
            success=bool(result.success),
            message=str(result.message),
        )
