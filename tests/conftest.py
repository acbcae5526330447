import numpy as np
import pytest

from sudoku_anneal.board import Board
from sudoku_anneal.solver.config import SolverConfig

SOLVED_9X9 = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]

PUZZLE_9X9 = "530070000600195000098000060800060003400803001700020006060000280000419005000080079"


def pattern_solution(block_width: int, block_height: int) -> np.ndarray:
    """A valid solution for any block shape (blocks are block_height rows x block_width cols)."""
    n = block_width * block_height
    r = np.arange(n)[:, None]
    c = np.arange(n)[None, :]
    return ((r % block_height) * block_width + r // block_height + c) % n + 1


@pytest.fixture
def solved_4x4() -> np.ndarray:
    return pattern_solution(2, 2)


@pytest.fixture
def puzzle_4x4(solved_4x4: np.ndarray) -> Board:
    """The 4x4 solution with half of its cells blanked."""
    clues = solved_4x4.copy()
    clues[[0, 0, 1, 1, 2, 2, 3, 3], [1, 3, 0, 2, 1, 3, 0, 2]] = 0
    return Board(clues, 2, 2, read_only=True)


@pytest.fixture
def puzzle_9x9() -> Board:
    rows = [[int(ch) for ch in PUZZLE_9X9[r * 9 : (r + 1) * 9]] for r in range(9)]
    return Board(rows, 3, 3, read_only=True)


@pytest.fixture
def thread_config() -> SolverConfig:
    """Small, seeded configuration running replicas in threads."""
    return SolverConfig(
        base_temperature=1.0,
        cooling_rate=0.8,
        internal_iterations=200,
        swap_count=1,
        replica_count=4,
        seed=1234,
        use_processes=False,
    )
