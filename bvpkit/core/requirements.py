"""Nonlinear system layout deduction."""

from dataclasses import dataclass
import numpy as np
import scipy.sparse

from bvpkit.core.problem import ProblemType


@dataclass(frozen=True)
class SystemRequirements:
    """Shape and coupling of the collocation system on one mesh."""

    state_dim: int              # M
    num_subintervals: int       # n
    bc_sizes: tuple[int, ...]   # (n_bc,) or (n_a, n_b)
    problem_type: ProblemType

    @property
    def num_unknowns(self) -> int:
        return self.state_dim * (self.num_subintervals + 1)

    @property
    def num_residuals(self) -> int:
        return sum(self.bc_sizes) + self.state_dim * self.num_subintervals

    @property
    def is_square(self) -> bool:
        return self.num_unknowns == self.num_residuals

    def collocation_rows(self, i: int) -> slice:
        """Residual rows of subinterval i."""
        start = self.bc_sizes[0] + i * self.state_dim
        return slice(start, start + self.state_dim)

    def jacobian_sparsity(self) -> scipy.sparse.csr_matrix:
        """
        Structural nonzeros of the residual Jacobian.

        Rows are ordered [bc | Φ_1 .. Φ_n] for standard problems and
        [bc_a | Φ_1 .. Φ_n | bc_b] for two-point problems; subinterval i
        couples only the states at its two endpoints. Standard boundary
        conditions may sample the whole trajectory and so are dense.
        """
        M, n = self.state_dim, self.num_subintervals
        pattern = scipy.sparse.lil_matrix(
            (self.num_residuals, self.num_unknowns), dtype=bool
        )

        if self.problem_type == ProblemType.TWO_POINT:
            n_a, n_b = self.bc_sizes
            pattern[:n_a, :M] = True
            pattern[self.num_residuals - n_b:, n * M:] = True
        else:
            pattern[:self.bc_sizes[0], :] = True

        block = np.ones((M, 2 * M), dtype=bool)
        for i in range(n):
            pattern[self.collocation_rows(i), i * M:(i + 2) * M] = block

        return pattern.tocsr()

    def collocation_sparsity(self) -> scipy.sparse.csr_matrix:
        """Structural nonzeros of the Φ rows alone: one M x 2M block per subinterval."""
        M, n = self.state_dim, self.num_subintervals
        pattern = scipy.sparse.lil_matrix((n * M, self.num_unknowns), dtype=bool)
        block = np.ones((M, 2 * M), dtype=bool)
        for i in range(n):
            pattern[i * M:(i + 1) * M, i * M:(i + 2) * M] = block
        return pattern.tocsr()


def deduce_requirements(
    problem_type: ProblemType,
    state_dim: int,
    num_subintervals: int,
    bc_sizes: tuple[int, ...],
) -> SystemRequirements:
    """Layout of the collocation system for the given mesh size."""
    return SystemRequirements(
        state_dim=state_dim,
        num_subintervals=num_subintervals,
        bc_sizes=tuple(int(k) for k in bc_sizes),
        problem_type=problem_type,
    )
