from concurrent.futures import ThreadPoolExecutor
from multiprocessing import Value

import numpy as np
import pytest

from sudoku_anneal.solver.moves import random_initialization
from sudoku_anneal.solver.parallel import Replica, greedy_exchange, run_replicas
from sudoku_anneal.solver.utils import cost
from sudoku_anneal.solver.worker import init_worker_globals


def make_replicas(costs):
    return [Replica(grid=np.full((4, 4), i), cost=c) for i, c in enumerate(costs)]


def test_greedy_exchange_is_a_single_descending_pass():
    replicas = make_replicas([5.0, 3.0, 1.0])
    n_exchanges = greedy_exchange(replicas)
    # The cheapest replica bubbles all the way down, but the pass does not sort the rest
    assert [r.cost for r in replicas] == [1.0, 5.0, 3.0]
    assert n_exchanges == 2


def test_greedy_exchange_keeps_ties_in_place():
    replicas = make_replicas([2.0, 2.0, 4.0])
    assert greedy_exchange(replicas) == 0
    assert [int(r.grid[0, 0]) for r in replicas] == [0, 1, 2]


def test_greedy_exchange_moves_grid_with_cost():
    replicas = make_replicas([8.0, 6.0])
    greedy_exchange(replicas)
    assert replicas[0].cost == 6.0 and int(replicas[0].grid[0, 0]) == 1
    assert replicas[1].cost == 8.0 and int(replicas[1].grid[0, 0]) == 0


@pytest.mark.parametrize("seed", range(10))
def test_greedy_exchange_preserves_replicas(seed):
    rng = np.random.default_rng(seed)
    replicas = make_replicas(rng.integers(0, 5, size=6).astype(float).tolist())
    before = {id(r) for r in replicas}
    pairs = sorted((int(r.grid[0, 0]), r.cost) for r in replicas)

    greedy_exchange(replicas)

    assert len(replicas) == 6
    assert {id(r) for r in replicas} == before
    assert sorted((int(r.grid[0, 0]), r.cost) for r in replicas) == pairs


def test_single_replica_is_left_alone():
    replicas = make_replicas([3.0])
    assert greedy_exchange(replicas) == 0


def test_run_replicas_returns_results_by_rung(puzzle_9x9, thread_config):
    clues = puzzle_9x9.data
    grid = random_initialization(clues, np.random.default_rng(0))
    grid_cost = cost(grid, 3, 3)
    replicas = [Replica(grid=grid.copy(), cost=grid_cost) for _ in range(3)]

    with ThreadPoolExecutor(
        max_workers=3, initializer=init_worker_globals, initargs=(Value("i", 0), clues, 3, 3)
    ) as executor:
        results = run_replicas(
            executor,
            replicas,
            temperature=0.5,
            step=0,
            master_seed=7,
            solver_config=thread_config,
        )
        again = run_replicas(
            executor,
            replicas,
            temperature=0.5,
            step=0,
            master_seed=7,
            solver_config=thread_config,
        )

    assert len(results) == 3
    for rung, (a, b) in enumerate(zip(results, again)):
        # Each rung draws from its own stream, identical across repeats
        assert np.array_equal(a.grid, b.grid), rung
        assert a.cost == cost(a.grid, 3, 3)
    # Different rungs walk differently
    assert not np.array_equal(results[0].grid, results[1].grid)
    # Inputs are not modified by the tasks
    assert all(np.array_equal(r.grid, grid) for r in replicas)
