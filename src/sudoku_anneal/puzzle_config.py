"""Loader for puzzle files."""

import re
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from sudoku_anneal.board import Board
from sudoku_anneal.exceptions import GridShapeError, PuzzleFormatError

SEPARATORS = re.compile(r"[\s,]+")
INPUT_MODES = ("one-line",)


@dataclass
class PuzzleConfig:
    """A puzzle configuration."""

    source: str
    """Path of the file the puzzle was read from."""

    line: int
    """1-based line number of the puzzle in `source`."""

    dims: tuple[int, int]
    """The width and height of one block.  The grid side is their product."""

    cells: list[int]
    """The clue grid in row-major order; 0 for a blank."""

    def __post_init__(self) -> None:
        """Validate the grid shape and values."""
        width, height = self.dims
        if width <= 0 or height <= 0:
            raise GridShapeError(f"Block dimensions must be positive, got {width}x{height}.")
        n = width * height
        if len(self.cells) != n * n:
            raise GridShapeError(
                f"Puzzle has {len(self.cells)} cells, expected {n * n} for {width}x{height} blocks."
            )
        # Range check happens when the board is built
        self.to_board()

    @property
    def n(self) -> int:
        return self.dims[0] * self.dims[1]

    def __str__(self) -> str:
        """Return a string representation of the PuzzleConfig."""
        return f"{self.source}:{self.line} ({self.dims[0]}x{self.dims[1]} blocks)"

    def to_board(self) -> Board:
        """Build the read-only clue board."""
        n = self.n
        rows = [self.cells[r * n : (r + 1) * n] for r in range(n)]
        return Board(rows, self.dims[0], self.dims[1], read_only=True)

    def to_dict(self) -> dict:
        """Return a dictionary representation of the PuzzleConfig for serialization."""
        return {
            "source": self.source,
            "line": self.line,
            "dims": self.dims,
            "cells": list(self.cells),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PuzzleConfig":
        """Create a PuzzleConfig instance from a dictionary representation."""
        return cls(
            source=data["source"],
            line=data["line"],
            dims=tuple(data["dims"]),
            cells=list(data["cells"]),
        )


def parse_dims(dims: str) -> tuple[int, int]:
    """Parse a block dimensions string such as "3x3" into (width, height)."""
    try:
        width, height = (int(part) for part in dims.lower().split("x"))
    except ValueError:
        # Covers both incorrect number of values and non-integer values
        raise PuzzleFormatError(f"Invalid dimensions: '{dims}' (expected e.g. '3x3')") from None
    if width <= 0 or height <= 0:
        raise PuzzleFormatError(f"Invalid dimensions: '{dims}' (both parts must be positive)")
    return width, height


def parse_cells(text: str, n: int) -> list[int]:
    """Parse the first n * n cells of a one-line puzzle.

    A line without separators holds one character per cell, and any non-digit character is a
    blank.  A line containing commas or whitespace is split into tokens instead, so that digits
    above 9 can be written; tokens that are not integers are blanks.

    Raises:
        PuzzleFormatError: If the line holds fewer than n * n cells.
    """
    text = text.strip()
    tokens = SEPARATORS.split(text) if SEPARATORS.search(text) else list(text)
    if len(tokens) < n * n:
        raise PuzzleFormatError(f"Puzzle line has {len(tokens)} cells, expected {n * n}.")
    return [int(tok) if tok.isdecimal() else 0 for tok in tokens[: n * n]]


def load_puzzle(
    puzzle_path: PathLike | str, line: int = 1, dims: str = "3x3", mode: str = "one-line"
) -> PuzzleConfig:
    """Load a puzzle from the given line of a file.

    Args:
        puzzle_path (PathLike | str): Path to the puzzle file, one puzzle per line.
        line (int): 1-based line number of the puzzle.
        dims (str): Block dimensions as "<width>x<height>".
        mode (str): Input format of the file.  Only "one-line" is supported.

    Raises:
        FileNotFoundError: If the file does not exist.
        PuzzleFormatError: If the line is missing or malformed, or the mode is unknown.
        PuzzleError: If the puzzle values are out of range.
    """
    if mode not in INPUT_MODES:
        raise PuzzleFormatError(f"Unsupported input mode: '{mode}' (only 'one-line')")
    path = Path(puzzle_path)
    if not path.is_file():
        raise FileNotFoundError(f"Puzzle file not found: {path}")
    if line < 1:
        raise PuzzleFormatError(f"Line numbers start at 1, got {line}.")

    width, height = parse_dims(dims)
    with path.open("r", encoding="utf-8") as f:
        for line_no, text in enumerate(f, start=1):
            if line_no == line:
                return PuzzleConfig(
                    source=str(path),
                    line=line,
                    dims=(width, height),
                    cells=parse_cells(text, width * height),
                )
    raise PuzzleFormatError(f"{path} has no line {line}.")
