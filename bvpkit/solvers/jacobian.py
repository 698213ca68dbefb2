"""Finite-difference Jacobians with column grouping over a sparsity pattern."""

from enum import Enum
from typing import Callable, Optional
import numpy as np
import scipy.sparse
from numpy.typing import NDArray


class DiffMode(Enum):
    """Finite-difference scheme, valued by its scipy name."""
    FORWARD = "2-point"
    CENTRAL = "3-point"

    @property
    def relative_step(self) -> float:
        eps = np.finfo(float).eps
        if self is DiffMode.FORWARD:
            return float(np.sqrt(eps))
        return float(eps ** (1.0 / 3.0))


def group_columns(sparsity) -> NDArray:
    """
    Greedy partition of columns into structurally orthogonal groups.

    Columns in one group share no nonzero row, so a single perturbed
    residual evaluation recovers all of them.

    Returns:
        Group index per column
    """
    pattern = scipy.sparse.csc_matrix(sparsity)
    m, n = pattern.shape
    groups = np.empty(n, dtype=int)
    used_rows: list[NDArray] = []

    for j in range(n):
        rows = pattern.indices[pattern.indptr[j]:pattern.indptr[j + 1]]
        for g, mask in enumerate(used_rows):
            if not mask[rows].any():
                mask[rows] = True
                groups[j] = g
                break
        else:
            mask = np.zeros(m, dtype=bool)
            mask[rows] = True
            used_rows.append(mask)
            groups[j] = len(used_rows) - 1

    return groups


def finite_difference_jacobian(
    fn: Callable[[NDArray], NDArray],
    x: NDArray,
    f0: NDArray,
    diffmode: DiffMode = DiffMode.FORWARD,
    sparsity=None,
    groups: Optional[NDArray] = None,
):
    """
    Approximate J = ∂fn/∂x at x.

    Args:
        fn: Residual function
        x: Evaluation point (n,)
        f0: fn(x), reused by forward differences
        diffmode: Difference scheme
        sparsity: Optional (m, n) structural pattern; enables grouping
        groups: Precomputed group_columns(sparsity)

    Returns:
        Dense (m, n) array, or scipy.sparse.csc_matrix when sparsity is given
    """
    h = diffmode.relative_step * np.maximum(1.0, np.abs(x))

    if sparsity is None:
        jac = np.empty((f0.shape[0], x.shape[0]))
        for j in range(x.shape[0]):
            step = np.zeros_like(x)
            step[j] = h[j]
            jac[:, j] = _difference(fn, x, f0, step, diffmode) / h[j]
        return jac

    pattern = scipy.sparse.csc_matrix(sparsity)
    if groups is None:
        groups = group_columns(pattern)

    row_idx: list[NDArray] = []
    col_idx: list[NDArray] = []
    values: list[NDArray] = []

    for g in range(groups.max() + 1 if groups.size else 0):
        cols = np.flatnonzero(groups == g)
        step = np.zeros_like(x)
        step[cols] = h[cols]
        df = _difference(fn, x, f0, step, diffmode)
        for j in cols:
            rows = pattern.indices[pattern.indptr[j]:pattern.indptr[j + 1]]
            row_idx.append(rows)
            col_idx.append(np.full(rows.shape, j))
            values.append(df[rows] / h[j])

    if values:
        data = (np.concatenate(values), (np.concatenate(row_idx), np.concatenate(col_idx)))
    else:
        data = (np.empty(0), (np.empty(0, dtype=int), np.empty(0, dtype=int)))
    return scipy.sparse.csc_matrix(data, shape=pattern.shape)


def _difference(
    fn: Callable[[NDArray], NDArray],
    x: NDArray,
    f0: NDArray,
    step: NDArray,
    diffmode: DiffMode,
) -> NDArray:
    """Undivided difference of fn along step."""
    if diffmode is DiffMode.FORWARD:
        return fn(x + step) - f0
    return 0.5 * (fn(x + step) - fn(x - step))
