"""Forward IVP marching of a boundary value problem."""

import numpy as np
from numpy.typing import NDArray

from bvpkit.adapters import ProblemAdapter
from bvpkit.solvers.base import IVPSolution, IVPSolver
from bvpkit.stepping.trajectory import Trajectory


def forward_solve(
    adapter: ProblemAdapter,
    u0: NDArray,
    t_span: tuple[float, float],
    ivp_solver: IVPSolver,
) -> tuple[Trajectory, IVPSolution]:
    """
    Integrate the problem's ODE forward from the flat initial state u0.

    Args:
        adapter: Flat view of the problem
        u0: Flat initial state (M,)
        t_span: Time interval (t0, t1)
        ivp_solver: IVP collaborator

    Returns:
        Trajectory over the accepted steps, and the raw IVP result
    """
    def rhs(t: float, y: NDArray) -> NDArray:
        return adapter.f(y, t)

    ivp = ivp_solver.solve(rhs, np.asarray(u0, dtype=float), t_span)
    trajectory = Trajectory(ivp.t, ivp.y.T, ivp.interp, adapter.shape)
    return trajectory, ivp


def eval_bc_residual(adapter: ProblemAdapter, trajectory: Trajectory) -> NDArray:
    """Flat boundary residual of a trajectory, split for two-point problems."""
    if adapter.two_point:
        resid_a, resid_b = adapter.bc_two_point(trajectory.Y[0], trajectory.Y[-1])
        return np.concatenate([resid_a, resid_b])
    return adapter.bc_residual(trajectory, trajectory.t)
