"""IVP-driven paths: trajectories, forward marching and shooting."""

from bvpkit.stepping.trajectory import Trajectory
from bvpkit.stepping.forward import forward_solve, eval_bc_residual

__all__ = [
    "Trajectory",
    "forward_solve",
    "eval_bc_residual",
]
