"""Solve interface: init a MIRK cache or solve with any algorithm."""

from typing import Any, Union

from bvpkit.algorithms import MIRK, Shooting
from bvpkit.core.config import SolverConfig
from bvpkit.core.problem import BVProblem
from bvpkit.exceptions import ConfigurationError
from bvpkit.mirk.cache import MIRKCache, init_mirk_cache
from bvpkit.mirk.solve import solve_mirk
from bvpkit.solution import BVPSolution
from bvpkit.stepping.shooting import shoot


def _config(options: dict[str, Any]) -> SolverConfig:
    try:
        return SolverConfig(**options)
    except TypeError as err:
        raise ConfigurationError(
            "Unknown solver option", context=str(err)
        ) from None


def init(problem: BVProblem, alg: MIRK, **options: Any) -> MIRKCache:
    """
    Set up a MIRK solve without running it.

    Args:
        problem: Boundary value problem
        alg: MIRK algorithm
        **options: SolverConfig fields (abstol, adaptive, dt, ...)

    Returns:
        Cache to pass to solve_mirk
    """
    if not isinstance(alg, MIRK):
        raise ConfigurationError(f"init needs a MIRK algorithm, got {alg!r}")
    return init_mirk_cache(problem, alg, _config(options))


def solve(
    problem: BVProblem,
    alg: Union[MIRK, Shooting, None] = None,
    **options: Any,
) -> BVPSolution:
    """
    Solve a boundary value problem.

    Args:
        problem: Boundary value problem
        alg: MIRK variant (default MIRK4) or Shooting
        **options: SolverConfig fields (abstol, adaptive, dt, ...)

    Returns:
        Solution with retcode SUCCESS or FAILURE
    """
    if alg is None:
        alg = MIRK(order=4)
    if isinstance(alg, Shooting):
        return shoot(problem, alg, _config(options))
    return solve_mirk(init(problem, alg, **options))
