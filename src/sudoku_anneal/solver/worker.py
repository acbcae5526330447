"""Main module for worker tasks in the parallel solver: fixed-temperature local search."""

from dataclasses import dataclass
from multiprocessing.sharedctypes import Synchronized
from typing import TypedDict

import numpy as np

from sudoku_anneal.solver.moves import get_neighbor
from sudoku_anneal.solver.utils import acceptance_probability, cost, replica_rng


@dataclass(kw_only=True)
class WorkerState:
    """Global state maintained by each worker."""

    worker_idx: int
    """Index of the worker."""

    clues: np.ndarray
    """Read-only clue grid shared by every task of the run."""

    block_width: int
    """Number of columns in one block."""

    block_height: int
    """Number of rows in one block."""


worker_state: WorkerState | None = None
"""Global state for each worker."""


class ReplicaTaskPayload(TypedDict):
    """Payload submitted to workers, one per replica per outer step."""

    grid: np.ndarray
    """Current candidate grid of the replica.  Handed over to the task."""
    cost: float
    """Cost of `grid`."""
    temperature: float
    """Effective temperature of the replica's rung."""
    iterations: int
    """Iteration budget."""
    swap_count: int
    """Number of swaps per neighbor proposal."""
    seed: tuple[int, int, int]
    """(master seed, outer step, rung): entropy for the task's own random stream."""


@dataclass
class ReplicaResult:
    """Wrapper for worker task results."""

    grid: np.ndarray
    cost: float
    iterations: int
    """Number of iterations actually run (fewer than the budget on an early exit)."""


def init_worker_globals(
    worker_ctr: Synchronized,
    clues: np.ndarray,
    block_width: int,
    block_height: int,
    verbose: bool = True,
) -> None:
    """Initialize global variables for workers.

    Args:
        worker_ctr (Synchronized): Shared counter for workers.
        clues (np.ndarray): The clue grid.  Stored read-only.
        block_width (int): Number of columns in one block.
        block_height (int): Number of rows in one block.
        verbose (bool): Print a notice once the worker is ready.
    """
    global worker_state  # noqa: PLW0603
    with worker_ctr.get_lock():
        # Get and set the shared worker counter atomically, using the obtained value
        # as the worker index
        worker_idx = worker_ctr.value
        worker_ctr.value += 1

    clues = np.array(clues)
    clues.setflags(write=False)
    worker_state = WorkerState(
        worker_idx=worker_idx,
        clues=clues,
        block_width=block_width,
        block_height=block_height,
    )
    if verbose:
        print(f"Worker {worker_idx} initialized.", flush=True)


def anneal_replica(
    grid: np.ndarray,
    grid_cost: float,
    clues: np.ndarray,
    block_width: int,
    block_height: int,
    *,
    temperature: float,
    iterations: int,
    swap_count: int,
    rng: np.random.Generator,
) -> ReplicaResult:
    """Run a Metropolis walk at a fixed temperature.

    Each iteration proposes a neighbor of the current grid.  A zero-cost neighbor ends the walk
    at once.  Otherwise a cheaper neighbor is always accepted and a costlier one is accepted with
    probability `exp((current - candidate) / temperature)`.

    Args:
        grid (np.ndarray): Starting candidate grid.
        grid_cost (float): Cost of `grid`.
        clues (np.ndarray): The clue grid; clue cells are never moved.
        block_width (int): Number of columns in one block.
        block_height (int): Number of rows in one block.
        temperature (float): Temperature of the walk.
        iterations (int): Iteration budget.
        swap_count (int): Number of swaps per neighbor proposal.
        rng (np.random.Generator): Random stream owned by this walk.

    Returns:
        The last accepted grid and its cost (not the best one seen), with the iteration count.
    """
    current, current_cost = grid, grid_cost
    for i in range(1, iterations + 1):
        candidate = get_neighbor(current, swap_count, clues, rng)
        candidate_cost = cost(candidate, block_width, block_height)

        if candidate_cost == 0:
            return ReplicaResult(grid=candidate, cost=0.0, iterations=i)

        if candidate_cost < current_cost:
            current, current_cost = candidate, candidate_cost
        elif acceptance_probability(current_cost, candidate_cost, temperature) > rng.random():
            current, current_cost = candidate, candidate_cost

    return ReplicaResult(grid=current, cost=current_cost, iterations=iterations)


def worker_task(payload: ReplicaTaskPayload) -> ReplicaResult:
    """Worker task annealing one replica for one outer step.

    Args:
        payload (ReplicaTaskPayload): The replica and the parameters for its walk.

    Returns:
        A ReplicaResult wrapper.
    """
    # Ensure worker_state is initialized
    if not worker_state:
        raise RuntimeError("Worker state not initialized. Call init_worker_globals first.")

    return anneal_replica(
        payload["grid"],
        payload["cost"],
        worker_state.clues,
        worker_state.block_width,
        worker_state.block_height,
        temperature=payload["temperature"],
        iterations=payload["iterations"],
        swap_count=payload["swap_count"],
        rng=replica_rng(*payload["seed"]),
    )
