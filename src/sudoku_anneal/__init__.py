"""Sudoku Annealing Solver.

Solves generalized Sudoku grids (square grids of side n = block width x block height, split into
rectangular blocks) by replica exchange simulated annealing.  A ladder of replicas at
geometrically spaced temperatures is annealed in parallel; after every step, cheaper replicas are
moved toward the cold end of the ladder and the whole ladder is cooled.
"""

import argparse
from sys import exit

from pydantic import ValidationError

from .exceptions import PuzzleError, SolverConfigError
from .puzzle_config import load_puzzle
from .solver import solver
from .solver.config import SolverConfig

__version__ = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sudoku_anneal",
        description="Solve a sudoku-like puzzle by replica exchange simulated annealing",
    )
    parser.add_argument("-f", "--file", default="puzzles.txt", help="Puzzle file, one per line")
    parser.add_argument("-l", "--line", type=int, default=1, help="Line of the puzzle to solve")
    parser.add_argument(
        "-m", "--mode", default="one-line", help="Input format of the puzzle file (only one-line)"
    )
    parser.add_argument(
        "-d", "--dims", default="3x3", help="Dimensions of one block, e.g. 3x3 for standard sudoku"
    )
    parser.add_argument(
        "-t",
        "--temperature",
        dest="base_temperature",
        type=float,
        help="Base temperature of the coldest replica (replica i runs at 2**i times this)",
    )
    parser.add_argument(
        "-c", "--cooling-rate", type=float, help="Cooling factor per step, between 0 and 1"
    )
    parser.add_argument(
        "-i",
        "--iterations",
        dest="internal_iterations",
        type=int,
        help="Iterations per replica at each step",
    )
    parser.add_argument("-s", "--swaps", dest="swap_count", type=int, help="Swaps per proposal")
    parser.add_argument(
        "-a", "--replicas", dest="replica_count", type=int, help="Number of replicas"
    )
    parser.add_argument("--seed", type=int, help="Master random seed, for reproducible runs")
    parser.add_argument("--workers", dest="max_workers", type=int, help="Number of workers")
    parser.add_argument(
        "--threads",
        dest="use_processes",
        action="store_const",
        const=False,
        help="Run replicas in threads instead of worker processes",
    )
    parser.add_argument(
        "--training-mode",
        action="store_true",
        help="Only print a CSV line: line,temperature,cooling,iterations,swaps,replicas,solved,secs",
    )
    return parser


CONFIG_OPTIONS = (
    "base_temperature",
    "cooling_rate",
    "internal_iterations",
    "swap_count",
    "replica_count",
    "seed",
    "max_workers",
    "use_processes",
)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the annealing solver."""
    args = build_parser().parse_args(argv)
    overrides = {
        key: getattr(args, key) for key in CONFIG_OPTIONS if getattr(args, key) is not None
    }
    try:
        solver_config = SolverConfig(**overrides)
        puzzle = load_puzzle(args.file, args.line, args.dims, mode=args.mode)
        solver.run(puzzle, solver_config, training_mode=args.training_mode)
    except ValidationError as e:
        print(f"Invalid solver configuration:\n{e}")
        exit(1)
    except (PuzzleError, SolverConfigError, FileNotFoundError) as e:
        print(e)
        exit(1)
    except KeyboardInterrupt:
        print("Solver interrupted by user.")
        exit(1)
