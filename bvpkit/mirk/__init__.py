"""Adaptive MIRK collocation."""

from bvpkit.mirk.cache import MIRKCache, RecordArena, init_mirk_cache
from bvpkit.mirk.collocation import ResidualAssembler
from bvpkit.mirk.adaptivity import (
    defect_estimate,
    half_mesh,
    mesh_selector,
    redistribute,
)
from bvpkit.mirk.interpolation import MIRKInterpolation, interp_eval
from bvpkit.mirk.solve import solve_mirk

__all__ = [
    "MIRKCache",
    "RecordArena",
    "init_mirk_cache",
    "ResidualAssembler",
    "defect_estimate",
    "half_mesh",
    "mesh_selector",
    "redistribute",
    "MIRKInterpolation",
    "interp_eval",
    "solve_mirk",
]
