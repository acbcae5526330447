"""Main solver module for annealing puzzles."""

import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from contextlib import nullcontext
from datetime import datetime
from multiprocessing import Value
from multiprocessing.sharedctypes import Synchronized
from pathlib import Path
from time import time
from typing import TextIO

from sudoku_anneal.board import Board
from sudoku_anneal.exceptions import SolverConfigError
from sudoku_anneal.puzzle_config import PuzzleConfig
from sudoku_anneal.solver.config import SolverConfig
from sudoku_anneal.solver.config import config as default_config
from sudoku_anneal.solver.parallel import AnnealResult, solve_with_replica_exchange
from sudoku_anneal.solver.task_args import TaskArgs
from sudoku_anneal.solver.utils import TIMESTAMP_FMT, cost, time_str
from sudoku_anneal.solver.worker import init_worker_globals


def get_executor(
    *,
    clues: Board,
    n_workers: int | None = None,
    replica_count: int = 1,
    use_processes: bool = True,
    verbose: bool = True,
) -> Executor:
    """Get an executor whose workers hold the clue grid.

    Args:
        clues (Board): The clue grid, installed once in every worker.
        n_workers (int | None): Number of workers to create.  If None, defaults to the
            number of replicas, capped at the number of CPU cores minus one.
        replica_count (int): Number of replicas that will run per outer step.
        use_processes (bool): Use worker processes (True) or threads (False).
        verbose (bool): Have each worker print a notice once it is ready.

    Returns:
        A ProcessPoolExecutor or ThreadPoolExecutor instance.

    Raises:
        SolverConfigError: If more worker processes are requested than there are CPUs.
    """
    worker_ctr: Synchronized = Value("i", 0)

    cpus = os.cpu_count() or 1  # Fallback to 1 if os.cpu_count() is None
    if n_workers is None:
        n_workers = min(replica_count, max(1, cpus - 1))  # Leave one core free
    if use_processes and n_workers > cpus:
        raise SolverConfigError(
            f"Requested number of workers ({n_workers}) exceeds CPU count ({cpus})",
        )
    initargs = (worker_ctr, clues.data, clues.block_width, clues.block_height, verbose)
    if use_processes:
        return ProcessPoolExecutor(
            max_workers=n_workers, initializer=init_worker_globals, initargs=initargs
        )
    return ThreadPoolExecutor(
        max_workers=n_workers, initializer=init_worker_globals, initargs=initargs
    )


def anneal(
    clues: Board,
    solver_config: SolverConfig | None = None,
    *,
    executor: Executor | None = None,
    logf: TextIO | None = None,
    verbose: bool = True,
) -> AnnealResult:
    """Attempt to solve a puzzle by replica exchange annealing.

    Args:
        clues (Board): The clue grid (0 = blank).
        solver_config (SolverConfig | None): Annealing parameters.  If None, uses the
            configuration read from the environment.
        executor (Executor | None): Executor to run replicas on.  It must have been created by
            `get_executor` for the same clues.  If None, one is created and shut down here.
        logf: File object to log the solving process.  If None, nothing is logged.
        verbose (bool): Whether workers created here announce themselves on stdout.

    Returns:
        An AnnealResult.

    Raises:
        PuzzleError: If the clues are infeasible.
        SolverConfigError: If the worker count cannot be honoured.
    """
    solver_config = solver_config or default_config
    task_args = TaskArgs(clues=clues, solver_config=solver_config)

    own_executor = executor is None
    if executor is None:
        executor = get_executor(
            clues=task_args.clues,
            n_workers=solver_config.max_workers,
            replica_count=solver_config.replica_count,
            use_processes=solver_config.use_processes,
            verbose=verbose,
        )

    log_ctx = nullcontext(logf) if logf is not None else open(os.devnull, "w", encoding="utf-8")
    try:
        with log_ctx as out:
            result = solve_with_replica_exchange(executor, task_args, out)
    except BaseException:
        if own_executor:
            executor.shutdown(wait=False, cancel_futures=True)
        raise
    if own_executor:
        executor.shutdown()

    result.elapsed = time() - task_args.start_time
    return result


def log_path(puzzle_config: PuzzleConfig, solver_config: SolverConfig) -> Path:
    """Return the log file path for a puzzle: `<log_dir>/<file stem>/line-<line>.log`."""
    return (
        Path(solver_config.log_dir)
        / Path(puzzle_config.source).stem
        / f"line-{puzzle_config.line}.log"
    )


def run(
    puzzle_config: PuzzleConfig,
    solver_config: SolverConfig | None = None,
    *,
    training_mode: bool = False,
) -> AnnealResult:
    """Run the solver on the given puzzle, reporting to stdout and to a log file.

    Args:
        puzzle_config (PuzzleConfig): The puzzle to solve.
        solver_config (SolverConfig | None): Annealing parameters.
        training_mode (bool): Print only a CSV summary line, for tuning the parameters.
    """
    solver_config = solver_config or default_config
    clues = puzzle_config.to_board()

    if not training_mode:
        print()
        print("Original Puzzle:")
        clues.print()
        print()
        print(f"Puzzle cost: {cost(clues.data, clues.block_width, clues.block_height):g}")

    logfile = log_path(puzzle_config, solver_config)
    logfile.parent.mkdir(parents=True, exist_ok=True)
    if not training_mode:
        print(f"Log file: {logfile}")

    with open(logfile, "w", encoding="utf-8") as logf:
        print(f"Puzzle: {puzzle_config}", file=logf, flush=True)
        print(
            f"Start time: {datetime.now().astimezone().strftime(TIMESTAMP_FMT)}",
            file=logf,
            flush=True,
        )
        result = anneal(clues, solver_config, logf=logf, verbose=not training_mode)
        print(f"Finished in {time_str(result.elapsed)}", file=logf, flush=True)

    if training_mode:
        # line, base_temperature, cooling_rate, internal_iterations, swap_count, replicas,
        # solved, seconds
        print(
            f"{puzzle_config.line},{solver_config.base_temperature},{solver_config.cooling_rate},"
            f"{solver_config.internal_iterations},{solver_config.swap_count},"
            f"{solver_config.replica_count},{str(result.solved).lower()},{result.elapsed}"
        )
        return result

    print()
    if result.solved:
        print("Solved Puzzle:")
        result.board.print()
    else:
        print("No viable solution to the puzzle was found.")
        print()
        print("Final puzzle candidate:")
        result.board.print()
        print()
        print(f"Cost at end: {result.cost:g}")
    print()
    print(f"Seed: {result.seed}")
    print(f"Execution completed in {time_str(result.elapsed)}")
    return result
