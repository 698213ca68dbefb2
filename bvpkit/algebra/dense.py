"""Dense linear algebra backend using NumPy/SciPy."""

from typing import Tuple
import numpy as np
import scipy.linalg
from numpy.typing import NDArray


class DenseBackend:
    """NumPy/SciPy implementation of linear algebra operations."""

    def lu_factor(self, A: NDArray) -> Tuple[NDArray, NDArray]:
        """
        Compute LU factorization using scipy.

        Returns:
            (lu, piv) tuple from scipy.linalg.lu_factor
        """
        return scipy.linalg.lu_factor(np.asarray(A))

    def lu_solve(
        self,
        factorization: Tuple[NDArray, NDArray],
        b: NDArray,
    ) -> NDArray:
        """Solve using precomputed LU factorization."""
        return scipy.linalg.lu_solve(factorization, b)

    def lstsq(self, A: NDArray, b: NDArray) -> NDArray:
        """Minimum-norm least-squares solution."""
        return np.linalg.lstsq(np.asarray(A), b, rcond=None)[0]

    def norm(self, x: NDArray) -> float:
        """Compute max-norm."""
        return float(np.max(np.abs(x))) if x.size else 0.0
