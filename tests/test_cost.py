import math

import numpy as np
import pytest

from sudoku_anneal.solver.utils import acceptance_probability, blocks, cost
from tests.conftest import SOLVED_9X9, pattern_solution


def test_solved_grid_has_zero_cost():
    assert cost(np.array(SOLVED_9X9), 3, 3) == 0


@pytest.mark.parametrize("block_width, block_height", [(2, 2), (3, 2), (2, 3), (4, 2), (3, 3)])
def test_pattern_solutions_have_zero_cost(block_width, block_height):
    assert cost(pattern_solution(block_width, block_height), block_width, block_height) == 0


def test_known_costs():
    # Every unit holds four 1s: |4 - 1| + 3 * |0 - 1| = 6, over 12 units
    assert cost(np.ones((4, 4), dtype=int), 2, 2) == 72
    # Blanks are not counted: each unit misses all four digits
    assert cost(np.zeros((4, 4), dtype=int), 2, 2) == 48


def test_swap_within_row_only_breaks_columns():
    grid = pattern_solution(2, 2)
    grid[0, 0], grid[0, 1] = grid[0, 1], grid[0, 0]
    # Two columns each gain a duplicate and lose a digit; row and block are unchanged
    assert cost(grid, 2, 2) == 4


def test_cost_is_a_float():
    assert isinstance(cost(np.ones((4, 4), dtype=int), 2, 2), float)


@pytest.mark.parametrize("block_width, block_height", [(2, 2), (3, 2), (2, 4)])
def test_cost_is_invariant_under_transposition(block_width, block_height):
    rng = np.random.default_rng(0)
    n = block_width * block_height
    for _ in range(20):
        grid = rng.integers(0, n + 1, size=(n, n))
        c = cost(grid, block_width, block_height)
        assert c >= 0
        assert cost(grid.T, block_height, block_width) == c


def test_blocks_layout():
    grid = np.arange(36).reshape(6, 6)
    # Blocks are 2 rows x 3 columns
    result = blocks(grid, 3, 2)
    assert result[0].tolist() == [0, 1, 2, 6, 7, 8]
    assert result[1].tolist() == [3, 4, 5, 9, 10, 11]
    assert result[2].tolist() == [12, 13, 14, 18, 19, 20]


def test_acceptance_probability():
    assert acceptance_probability(5, 5, 1.0) == 1.0
    assert acceptance_probability(5, 7, 2.0) == pytest.approx(math.exp(-1))
    assert acceptance_probability(5, 7, 1e-9) == 0.0
    assert acceptance_probability(7, 5, 1e-9) == math.inf
