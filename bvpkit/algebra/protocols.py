"""Linear algebra backend protocol."""

from typing import Protocol, Any
from numpy.typing import NDArray


class LinearAlgebraBackend(Protocol):
    """
    Protocol for the linear solves inside a Newton step.
    Allows swapping between dense and sparse Jacobian storage.
    """

    def lu_factor(self, A: Any) -> Any:
        """
        Compute LU factorization of A.

        Args:
            A: Square matrix (ndarray or scipy.sparse)

        Returns:
            Factorization object (implementation-specific)
        """
        ...

    def lu_solve(self, factorization: Any, b: NDArray) -> NDArray:
        """
        Solve using precomputed LU factorization.

        Args:
            factorization: Precomputed factorization
            b: Right-hand side

        Returns:
            Solution x
        """
        ...

    def lstsq(self, A: Any, b: NDArray) -> NDArray:
        """
        Least-squares solution of a rectangular system.

        Args:
            A: (m, n) matrix
            b: Right-hand side (m,)

        Returns:
            Minimizer x of ||Ax - b||
        """
        ...

    def norm(self, x: NDArray) -> float:
        """
        Max-norm used for convergence checks.

        Args:
            x: Vector

        Returns:
            max |x_i|
        """
        ...
