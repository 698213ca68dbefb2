"""Linear algebra backend abstractions."""

from bvpkit.algebra.protocols import LinearAlgebraBackend
from bvpkit.algebra.dense import DenseBackend
from bvpkit.algebra.sparse import SparseBackend

__all__ = [
    "LinearAlgebraBackend",
    "DenseBackend",
    "SparseBackend",
]
