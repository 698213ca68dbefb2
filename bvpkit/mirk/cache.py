"""Per-solve buffers of the MIRK collocation solver."""

import logging
import math
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from bvpkit.adapters import ProblemAdapter
from bvpkit.algorithms import MIRK
from bvpkit.core.config import SolverConfig
from bvpkit.core.method import MIRKTableau
from bvpkit.core.problem import BVProblem, GuessKind
from bvpkit.core.requirements import SystemRequirements, deduce_requirements
from bvpkit.exceptions import ConfigurationError, DataIntegrityError
from bvpkit.solvers.base import NonlinearSolver
from bvpkit.solvers.factory import create_nonlinear_solver

logger = logging.getLogger(__name__)


class RecordArena:
    """
    Fixed-shape records, one per mesh subinterval, in one contiguous array.

    Only resize() changes the record count; the leading records survive and
    new records start at zero.
    """

    def __init__(self, record_shape: tuple[int, ...], count: int) -> None:
        self.record_shape = tuple(record_shape)
        self.data = np.zeros((count, *self.record_shape))

    def __len__(self) -> int:
        return self.data.shape[0]

    def __getitem__(self, i: int) -> NDArray:
        return self.data[i]

    def resize(self, count: int) -> None:
        if count == len(self):
            return
        data = np.zeros((count, *self.record_shape))
        keep = min(count, len(self))
        data[:keep] = self.data[:keep]
        self.data = data


class MIRKCache:
    """
    Everything one MIRK solve owns: mesh, solution estimate, stage
    derivatives and scratch buffers.

    All buffers are sized from the mesh and resized together by expand();
    the tableau and configuration are fixed for the lifetime of the cache.
    """

    def __init__(
        self,
        problem: BVProblem,
        alg: MIRK,
        config: SolverConfig,
        adapter: ProblemAdapter,
        mesh: NDArray,
        y0: NDArray,
    ) -> None:
        self.problem = problem
        self.alg = alg
        self.config = config
        self.adapter = adapter
        self.tableau: MIRKTableau = alg.tableau()
        self.nlsolve: NonlinearSolver = create_nonlinear_solver(alg.nlsolve)

        self.mesh = mesh
        self.mesh_dt = np.diff(mesh)
        self.y0 = y0  # (n+1, M) solution estimate at mesh points

        M, n = adapter.size, len(mesh) - 1
        stage, s_star = self.tableau.stage, self.tableau.s_star
        adaptive = config.adaptive

        self.k_discrete = RecordArena((stage, M), n)
        self.k_interp = RecordArena((s_star - stage, M) if adaptive else (0, 0), n)
        self.defect = RecordArena((M,) if adaptive else (0,), n)
        self.new_stages = RecordArena((M,) if adaptive else (0,), n)

        # In-place problems write residual pieces into persistent buffers
        if problem.inplace:
            self.bc_residual: Optional[list[NDArray]] = [
                np.zeros(k) for k in adapter.bc_sizes
            ]
            self.residual: Optional[RecordArena] = RecordArena((M,), n)
        else:
            self.bc_residual = None
            self.residual = None

    @property
    def order(self) -> int:
        return self.tableau.order

    @property
    def stage(self) -> int:
        return self.tableau.stage

    @property
    def M(self) -> int:
        """Flattened state dimension."""
        return self.adapter.size

    @property
    def num_subintervals(self) -> int:
        return len(self.mesh) - 1

    def requirements(self) -> SystemRequirements:
        return deduce_requirements(
            self.problem.problem_type,
            self.M,
            self.num_subintervals,
            self.adapter.bc_sizes,
        )

    def expand(self) -> None:
        """Resize every buffer to the current mesh."""
        n = self.num_subintervals
        self.mesh_dt = np.diff(self.mesh)

        if self.y0.shape[0] != n + 1:
            y0 = np.zeros((n + 1, self.M))
            keep = min(n + 1, self.y0.shape[0])
            y0[:keep] = self.y0[:keep]
            self.y0 = y0

        for arena in (self.k_discrete, self.k_interp, self.defect, self.new_stages):
            arena.resize(n)
        if self.residual is not None:
            self.residual.resize(n)

        self.check_integrity()

    def check_integrity(self) -> None:
        """Mesh monotone and every buffer sized to it."""
        n = self.num_subintervals
        if not np.all(self.mesh_dt > 0):
            raise DataIntegrityError("Mesh is not strictly increasing")
        sizes = {
            "y0": self.y0.shape[0] - 1,
            "k_discrete": len(self.k_discrete),
            "k_interp": len(self.k_interp),
            "defect": len(self.defect),
            "new_stages": len(self.new_stages),
        }
        if self.residual is not None:
            sizes["residual"] = len(self.residual)
        bad = {name: size for name, size in sizes.items() if size != n}
        if bad:
            raise DataIntegrityError(
                "Buffers out of step with mesh",
                context=f"subintervals={n}, buffers={bad}",
            )


def init_mirk_cache(
    problem: BVProblem, alg: MIRK, config: SolverConfig
) -> MIRKCache:
    """
    Build the uniform initial mesh and solution estimate.

    The mesh comes from the initial-guess trajectory length when one is
    given (assumed uniform), otherwise from config.dt.
    """
    adapter = ProblemAdapter(problem)
    t0, t1 = problem.tspan
    kind = problem.guess_kind

    if kind == GuessKind.TRAJECTORY:
        n = len(problem.u0) - 1
        if n < 1:
            raise ConfigurationError(
                "Initial-guess trajectory needs at least two states"
            )
    else:
        if not config.dt > 0:
            raise ConfigurationError(
                "dt must be positive", context=f"dt={config.dt}"
            )
        n = int(math.ceil((t1 - t0) / config.dt))

    mesh = np.linspace(t0, t1, n + 1)

    if kind == GuessKind.TRAJECTORY:
        y0 = np.array([adapter.flatten(u) for u in problem.u0])
    elif kind == GuessKind.FUNCTION:
        y0 = np.array([adapter.flatten(problem.u0(t)) for t in mesh])
    else:
        y0 = np.tile(adapter.flatten(problem.u0), (n + 1, 1))

    logger.debug(
        "MIRK%d cache: %d subintervals, state dim %d",
        alg.order, n, adapter.size,
    )
    return MIRKCache(problem, alg, config, adapter, mesh, y0)
