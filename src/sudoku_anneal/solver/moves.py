"""Candidate construction: the random feasible start and the swap neighborhood."""

import numpy as np

from sudoku_anneal.exceptions import InfeasiblePuzzleError, NoFreeCellsError


def digit_deficits(clues: np.ndarray) -> np.ndarray:
    """Return how many more times each digit must be placed.

    Args:
        clues (np.ndarray): The `n x n` clue grid (0 = blank).

    Returns:
        An array of length `n + 1` where entry `d` is `n - (clue occurrences of d)` for d >= 1.
        Entry 0 is unused and always 0.

    Raises:
        InfeasiblePuzzleError: If any digit already occurs more than n times among the clues.
    """
    n = clues.shape[0]
    counts = np.bincount(clues.ravel().astype(np.int64), minlength=n + 1)
    deficits = n - counts
    deficits[0] = 0
    over = np.flatnonzero(deficits < 0)
    if over.size:
        digit = int(over[0])
        raise InfeasiblePuzzleError(
            f"Digit {digit} occurs {int(counts[digit])} times among the clues (at most {n} allowed)."
        )
    return deficits


def random_initialization(clues: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Fill every blank so that each digit 1..n appears exactly n times in the whole grid.

    Digits are placed in ascending order.  Each digit in turn claims uniformly random blanks
    (without replacement) until its remaining count is exhausted.  Clues are copied unchanged.

    Args:
        clues (np.ndarray): The `n x n` clue grid (0 = blank).
        rng (np.random.Generator): Random stream used for the placement.

    Returns:
        A new `n x n` candidate grid.

    Raises:
        InfeasiblePuzzleError: If the clue counts cannot be completed to n of each digit.
    """
    deficits = digit_deficits(clues)
    empty_spots = [tuple(int(i) for i in spot) for spot in np.argwhere(clues == 0)]
    if int(deficits.sum()) != len(empty_spots):
        raise InfeasiblePuzzleError(
            f"{int(deficits.sum())} digits remain to be placed but there are "
            f"{len(empty_spots)} blank cells."
        )

    grid = clues.copy()
    for digit in range(1, len(deficits)):
        for _ in range(int(deficits[digit])):
            spot_idx = int(rng.integers(len(empty_spots)))
            grid[empty_spots[spot_idx]] = digit
            # Remove the spot by moving the last one into its place
            empty_spots[spot_idx] = empty_spots[-1]
            empty_spots.pop()
    return grid


def get_neighbor(
    grid: np.ndarray,
    swap_count: int,
    clues: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    """Return a copy of `grid` with `swap_count` random swaps between non-clue cells applied.

    Both ends of each swap are drawn independently and uniformly over the whole grid, redrawing
    until a blank (in `clues`) cell is hit.  A cell may be swapped with itself, and the same pair
    may be picked more than once.

    Raises:
        NoFreeCellsError: If `clues` has no blank cells, since no draw could ever succeed.
    """
    n = clues.shape[0]
    if not (clues == 0).any():
        raise NoFreeCellsError("Cannot generate a neighbor: every cell is a clue.")

    def random_free_cell() -> tuple[int, int]:
        while True:
            r, c = (int(x) for x in rng.integers(n, size=2))
            if clues[r, c] == 0:
                return r, c

    neighbor = grid.copy()
    for _ in range(swap_count):
        a = random_free_cell()
        b = random_free_cell()
        neighbor[a], neighbor[b] = neighbor[b], neighbor[a]
    return neighbor
