"""Implementation of the replica exchange coordinator: task fan-out, exchange, and cooling."""

from concurrent.futures import Executor, wait
from dataclasses import dataclass
from pprint import pprint
from typing import TextIO

import numpy as np

from sudoku_anneal.board import Board
from sudoku_anneal.solver.config import FINAL_TEMPERATURE, SolverConfig
from sudoku_anneal.solver.moves import random_initialization
from sudoku_anneal.solver.task_args import TaskArgs
from sudoku_anneal.solver.utils import cost
from sudoku_anneal.solver.worker import ReplicaResult, ReplicaTaskPayload, worker_task


@dataclass
class Replica:
    """A candidate grid held at one rung of the temperature ladder."""

    grid: np.ndarray
    cost: float


@dataclass
class AnnealResult:
    """Outcome of an annealing run."""

    solved: bool
    board: Board
    """Final grid of the coldest replica."""
    cost: float
    outer_steps: int
    """Number of completed fan-out/exchange/cool cycles."""
    iterations: int
    """Total number of local search iterations over all replicas and steps."""
    seed: int
    """Master seed the run was started from.  Pass it back in the config to replay the run."""
    elapsed: float = 0.0
    """Wall time in seconds."""


def greedy_exchange(replicas: list[Replica]) -> int:
    """Promote cheaper replicas toward the cold end of the ladder, in place.

    Rungs are scanned once from hottest to coldest; whenever rung i is cheaper than rung i - 1
    the two replicas trade places.  This is a single pass, not a sort, and there is no Metropolis
    test: a hotter replica that found a better grid is always moved down.

    Args:
        replicas (list[Replica]): Replicas indexed by rung (0 = coldest).

    Returns:
        The number of exchanges made.
    """
    n_exchanges = 0
    for i in range(len(replicas) - 1, 0, -1):
        if replicas[i].cost < replicas[i - 1].cost:
            replicas[i], replicas[i - 1] = replicas[i - 1], replicas[i]
            n_exchanges += 1
    return n_exchanges


def run_replicas(
    executor: Executor,
    replicas: list[Replica],
    *,
    temperature: float,
    step: int,
    master_seed: int,
    solver_config: SolverConfig,
) -> list[ReplicaResult]:
    """Anneal every replica for one outer step and wait for all of them.

    Rung i runs at `temperature * 2**i`.  Results are returned ordered by rung, only once every
    task has finished.

    Args:
        executor (Executor): Executor whose workers were set up with `init_worker_globals`.
        replicas (list[Replica]): Replicas indexed by rung.
        temperature (float): Nominal temperature of the step.
        step (int): Index of the outer step, used to seed the task streams.
        master_seed (int): Master seed of the run.
        solver_config (SolverConfig): Iteration budget and swap count.
    """
    tasks: list[ReplicaTaskPayload] = [
        {
            "grid": replica.grid,
            "cost": replica.cost,
            "temperature": temperature * 2**rung,
            "iterations": solver_config.internal_iterations,
            "swap_count": solver_config.swap_count,
            "seed": (master_seed, step, rung),
        }
        for rung, replica in enumerate(replicas)
    ]
    futures = [executor.submit(worker_task, task) for task in tasks]
    wait(futures)
    # Re-raises the first worker error, if any
    return [future.result() for future in futures]


def solve_with_replica_exchange(
    executor: Executor,
    task_args: TaskArgs,
    logf: TextIO,
) -> AnnealResult:
    """Solve the puzzle by annealing a ladder of replicas.

    Every replica starts from the same random feasible grid.  Each outer step anneals all
    replicas concurrently, exchanges them greedily by cost, checks the coldest one for a
    solution, and cools the ladder.  The loop ends when the coldest replica reaches zero cost or
    the temperature falls to `FINAL_TEMPERATURE`.

    Args:
        executor (Executor): Executor for running the replica tasks.
        task_args (TaskArgs): Clue grid, configuration and master seed of the run.
        logf: File object to log the solving process.

    Returns:
        An AnnealResult for the coldest replica.
    """
    solver_config = task_args.solver_config
    print("Solver config:", file=logf, flush=True)
    pprint(solver_config.model_dump(), stream=logf, width=120)
    print("Solver initialized with:", file=logf, flush=True)
    pprint(task_args.summary(), stream=logf, width=120)
    print("", file=logf, flush=True)
    print("#" * 80, file=logf, flush=True)
    print("", file=logf, flush=True)

    clues = task_args.clues
    block_width, block_height = clues.block_width, clues.block_height

    initial_grid = random_initialization(clues.data, task_args.init_rng())
    initial_cost = cost(initial_grid, block_width, block_height)
    print(f"Initial cost: {initial_cost:g}", file=logf, flush=True)

    def result(replica: Replica, solved: bool, outer_steps: int, iterations: int) -> AnnealResult:
        return AnnealResult(
            solved=solved,
            board=Board(replica.grid, block_width, block_height),
            cost=replica.cost,
            outer_steps=outer_steps,
            iterations=iterations,
            seed=task_args.master_seed,
        )

    # Nothing to search: the initial grid is already final
    if initial_cost == 0 or not task_args.n_free_cells:
        print(
            "Initial grid is solved." if initial_cost == 0 else "No blank cells to fill.",
            file=logf,
            flush=True,
        )
        return result(Replica(initial_grid, initial_cost), initial_cost == 0, 0, 0)

    replicas = [
        Replica(grid=initial_grid.copy(), cost=initial_cost)
        for _ in range(solver_config.replica_count)
    ]
    temperature = solver_config.base_temperature
    step = 0
    total_iterations = 0

    while temperature > FINAL_TEMPERATURE:
        results = run_replicas(
            executor,
            replicas,
            temperature=temperature,
            step=step,
            master_seed=task_args.master_seed,
            solver_config=solver_config,
        )
        replicas = [Replica(grid=r.grid, cost=r.cost) for r in results]
        total_iterations += sum(r.iterations for r in results)
        step += 1

        n_exchanges = greedy_exchange(replicas)

        if step % solver_config.report_interval == 0:
            print(
                f"Step {step}: T={temperature:.6g}, exchanges={n_exchanges}, "
                f"costs={[f'{r.cost:g}' for r in replicas]}",
                file=logf,
                flush=True,
            )

        if replicas[0].cost == 0:
            print(f"Solution found at step {step}.", file=logf, flush=True)
            return result(replicas[0], True, step, total_iterations)

        temperature *= solver_config.cooling_rate

    print(
        f"Temperature floor reached after {step} steps; best cost {replicas[0].cost:g}.",
        file=logf,
        flush=True,
    )
    return result(replicas[0], False, step, total_iterations)
