"""Utility functions for the annealing solver: cost model and acceptance rule."""

import math

import numpy as np

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S.%f %Z%z"


def _unit_cost(units: np.ndarray, n: int) -> int:
    """Sum of |count - 1| over digits 1..n for each row of `units`.

    Args:
        units (np.ndarray): A `(k, n)` array; each row is one row, column or block of the grid.
        n (int): Largest digit.

    Returns:
        The total deviation over all units.  Zeros (blanks) are not counted as a digit.
    """
    k = units.shape[0]
    # Offset each unit into its own run of n + 1 bins so one bincount covers all units
    offsets = (np.arange(k, dtype=np.int64) * (n + 1))[:, None]
    counts = np.bincount((units + offsets).ravel(), minlength=k * (n + 1))
    counts = counts.reshape(k, n + 1)[:, 1:]
    return int(np.abs(counts - 1).sum())


def blocks(grid: np.ndarray, block_width: int, block_height: int) -> np.ndarray:
    """Rearrange an `n x n` grid so that each row of the result is one block.

    Blocks are `block_height` rows by `block_width` columns and are listed in row-major order.
    Dimensions "WxH" (as given to `-d`) mean blocks W columns wide and H rows tall.
    """
    n = block_width * block_height
    return (
        grid.reshape(n // block_height, block_height, n // block_width, block_width)
        .transpose(0, 2, 1, 3)
        .reshape(n, n)
    )


def cost(grid: np.ndarray, block_width: int, block_height: int) -> float:
    """Return the constraint violation of a grid.

    The cost is the sum, over every row, column and block, of |occurrences - 1| for each digit
    1..n.  A cost of zero means every digit appears exactly once in every unit, i.e. the grid is
    solved.

    Args:
        grid (np.ndarray): An `n x n` integer array with values in [0, n].
        block_width (int): Number of columns in one block.
        block_height (int): Number of rows in one block.
    """
    n = block_width * block_height
    grid = np.asarray(grid, dtype=np.int64)
    total = (
        _unit_cost(grid, n)
        + _unit_cost(grid.T, n)
        + _unit_cost(blocks(grid, block_width, block_height), n)
    )
    return float(total)


def acceptance_probability(current_cost: float, candidate_cost: float, temperature: float) -> float:
    """Metropolis probability of moving from `current_cost` to `candidate_cost`."""
    try:
        return math.exp((current_cost - candidate_cost) / temperature)
    except OverflowError:
        # Only reachable for improving moves, which are accepted anyway
        return math.inf


def time_str(seconds: float) -> str:
    """Convert a time duration in seconds to a human-readable string.

    Args:
        seconds: Time duration in seconds.

    Returns:
        A string formatted as "HH:MM:SS.ss".
    """
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{int(hours):02}:{int(minutes):02}:{secs:05.2f}"


def initial_rng(master_seed: int) -> np.random.Generator:
    """Random stream used once, to build the starting grid."""
    return np.random.default_rng(np.random.SeedSequence(master_seed))


def replica_rng(master_seed: int, step: int, rung: int) -> np.random.Generator:
    """Random stream owned by a single replica task.

    Streams are derived from the master seed with `(step, rung)` as the spawn key, so no two
    tasks of a run share a stream and a fixed master seed replays the whole run.
    """
    return np.random.default_rng(np.random.SeedSequence(master_seed, spawn_key=(step, rung)))
