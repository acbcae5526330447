"""Run state shared by the coordinator and its worker tasks."""

from datetime import datetime
from time import time

import numpy as np

from sudoku_anneal.board import Board
from sudoku_anneal.solver.config import SolverConfig
from sudoku_anneal.solver.moves import digit_deficits
from sudoku_anneal.solver.utils import TIMESTAMP_FMT, cost, initial_rng


class TaskArgs:
    """Wrapper for the arguments of one annealing run.

    The clue board is stored read-only; workers receive its array once, through the executor
    initializer.
    """

    def __init__(self, *, clues: Board, solver_config: SolverConfig) -> None:
        """Initialize the run with the given clues and configuration.

        Args:
            clues (Board): The clue grid (0 = blank).
            solver_config (SolverConfig): Annealing parameters.

        Raises:
            InfeasiblePuzzleError: If some digit occurs more than n times among the clues.
        """
        self.clues = clues if clues.is_read_only else clues.copy(read_only=True)
        """Read-only clue board."""

        # Fail before any worker is started
        digit_deficits(self.clues.data)

        self.solver_config = solver_config
        """Annealing parameters."""

        self.master_seed: int = (
            solver_config.seed
            if solver_config.seed is not None
            else int(np.random.SeedSequence().entropy)
        )
        """Seed from which every random stream of the run is derived."""

        self.n_free_cells = int((self.clues.data == 0).sum())
        """Number of blank cells in the clue grid."""

        self.start_time = time()
        """Timestamp when the solver started, in seconds since the epoch."""

    def init_rng(self) -> np.random.Generator:
        """Random stream for building the starting grid."""
        return initial_rng(self.master_seed)

    def summary(self) -> dict[str, object]:
        """Return a dictionary-based summary of the task arguments."""
        return {
            "dims": f"{self.clues.block_width}x{self.clues.block_height}",
            "n": self.clues.n,
            "free_cells": self.n_free_cells,
            "clue_cost": cost(self.clues.data, self.clues.block_width, self.clues.block_height),
            "master_seed": self.master_seed,
            "start_time": datetime.fromtimestamp(self.start_time)
            .astimezone()
            .strftime(TIMESTAMP_FMT),
        }
