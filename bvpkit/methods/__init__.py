"""Library of MIRK tableaux."""

from bvpkit.methods.mirk import (
    MIRKVariant,
    construct_mirk,
    mirk2,
    mirk3,
    mirk4,
    mirk5,
    mirk6,
)

__all__ = [
    "MIRKVariant",
    "construct_mirk",
    "mirk2",
    "mirk3",
    "mirk4",
    "mirk5",
    "mirk6",
]
