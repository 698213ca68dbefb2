"""Sparse linear algebra backend for banded collocation Jacobians."""

import numpy as np
import scipy.sparse
import scipy.sparse.linalg
from numpy.typing import NDArray


class SparseBackend:
    """SuperLU-based implementation of linear algebra operations."""

    def __init__(self, lstsq_tol: float = 1e-12) -> None:
        self.lstsq_tol = lstsq_tol

    def lu_factor(self, A) -> scipy.sparse.linalg.SuperLU:
        """Factor a sparse matrix with SuperLU (CSC storage)."""
        return scipy.sparse.linalg.splu(scipy.sparse.csc_matrix(A))

    def lu_solve(
        self,
        factorization: scipy.sparse.linalg.SuperLU,
        b: NDArray,
    ) -> NDArray:
        """Solve using precomputed SuperLU factorization."""
        return factorization.solve(b)

    def lstsq(self, A, b: NDArray) -> NDArray:
        """Least-squares solution via LSMR, iterated to lstsq_tol."""
        A = scipy.sparse.csr_matrix(A)
        return scipy.sparse.linalg.lsmr(
            A, b,
            atol=self.lstsq_tol,
            btol=self.lstsq_tol,
            maxiter=10 * max(A.shape),
        )[0]

    def norm(self, x: NDArray) -> float:
        """Compute max-norm."""
        return float(np.max(np.abs(x))) if x.size else 0.0
