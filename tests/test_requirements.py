"""Tests for collocation system layout deduction."""

import numpy as np
import pytest

from bvpkit.core.problem import ProblemType
from bvpkit.core.requirements import deduce_requirements, SystemRequirements


def test_standard_layout():
    req = deduce_requirements(ProblemType.STANDARD, state_dim=2, num_subintervals=4, bc_sizes=(2,))

    assert isinstance(req, SystemRequirements)
    assert req.num_unknowns == 10
    assert req.num_residuals == 10
    assert req.is_square
    assert req.collocation_rows(0) == slice(2, 4)
    assert req.collocation_rows(3) == slice(8, 10)


def test_standard_sparsity_dense_bc_rows():
    req = deduce_requirements(ProblemType.STANDARD, 2, 3, (2,))
    pattern = req.jacobian_sparsity().toarray()

    assert pattern.shape == (8, 8)
    assert pattern[:2].all()
    # Subinterval 1 couples states 1 and 2 only
    rows = pattern[req.collocation_rows(1)]
    assert rows[:, 2:6].all()
    assert not rows[:, :2].any()
    assert not rows[:, 6:].any()


@pytest.mark.parametrize("problem_type, bc_sizes", [
    (ProblemType.STANDARD, (2,)),
    (ProblemType.TWO_POINT, (1, 1)),
])
def test_collocation_sparsity_is_the_band_without_bc_rows(problem_type, bc_sizes):
    req = deduce_requirements(problem_type, 2, 3, bc_sizes)

    band = req.collocation_sparsity().toarray()
    full = req.jacobian_sparsity().toarray()

    assert band.shape == (6, 8)
    assert band.sum() == 3 * 2 * 4
    assert np.array_equal(band, full[bc_sizes[0]:bc_sizes[0] + 6])


def test_two_point_sparsity_is_banded():
    req = deduce_requirements(ProblemType.TWO_POINT, 2, 3, (1, 1))
    pattern = req.jacobian_sparsity().toarray()

    assert pattern.shape == (8, 8)
    # Left condition sees y_0 only, right condition y_n only
    assert pattern[0, :2].all() and not pattern[0, 2:].any()
    assert pattern[-1, 6:].all() and not pattern[-1, :6].any()
    assert req.collocation_rows(0) == slice(1, 3)


def test_non_square_system():
    req = deduce_requirements(ProblemType.STANDARD, 2, 3, (3,))
    assert req.num_residuals == 9
    assert req.num_unknowns == 8
    assert not req.is_square
