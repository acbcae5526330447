"""Classes and functions for representing the puzzle grid."""

from collections.abc import Iterable

import numpy as np

from sudoku_anneal.exceptions import DigitRangeError, GridShapeError

DTYPE = np.int16
"""Integer type used for every grid array."""


def as_grid_array(
    data: Iterable[Iterable[int]] | np.ndarray,
    block_width: int,
    block_height: int,
) -> np.ndarray:
    """Convert nested rows to a validated `n x n` array, where `n = block_width * block_height`.

    Args:
        data: Grid rows, or an existing 2D array.
        block_width (int): Number of columns in one block.
        block_height (int): Number of rows in one block.

    Returns:
        A new array of dtype `DTYPE`.

    Raises:
        GridShapeError: If the block dimensions are not positive or the grid is not n x n.
        DigitRangeError: If any value lies outside [0, n].
    """
    if block_width <= 0 or block_height <= 0:
        raise GridShapeError(
            f"Block dimensions must be positive, got {block_width}x{block_height}."
        )
    n = block_width * block_height

    try:
        arr = np.array(data if isinstance(data, np.ndarray) else [list(row) for row in data])
    except ValueError:
        # Ragged rows
        raise GridShapeError(f"Grid rows must all have {n} cells.") from None
    if arr.shape != (n, n):
        raise GridShapeError(f"Grid shape {arr.shape} does not match block dims ({n}, {n}).")
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise DigitRangeError(f"Grid values must be integers, got dtype {arr.dtype}.")

    out_of_range = (arr < 0) | (arr > n)
    if out_of_range.any():
        r, c = map(int, np.argwhere(out_of_range)[0])
        raise DigitRangeError(f"Value {int(arr[r, c])} at ({r}, {c}) is outside [0, {n}].")
    return arr.astype(DTYPE)


class Board:
    """Store an `n x n` grid of digits together with its block layout.

    Cells hold 0 for a blank and 1..n otherwise.  A read-only board (used for the clue grid)
    has its array write flag cleared, so any attempt to mutate it raises ValueError.
    """

    def __init__(
        self,
        data: Iterable[Iterable[int]] | np.ndarray,
        block_width: int,
        block_height: int,
        *,
        read_only: bool = False,
    ) -> None:
        self.data = as_grid_array(data, block_width, block_height)
        self.block_width = block_width
        self.block_height = block_height
        if read_only:
            self.data.setflags(write=False)

    @property
    def n(self) -> int:
        """Side length of the grid (and the largest digit)."""
        return self.block_width * self.block_height

    @property
    def is_read_only(self) -> bool:
        return not self.data.flags.writeable

    def copy(self, *, read_only: bool = False) -> "Board":
        """Generate a copy of the board."""
        return Board(self.data.copy(), self.block_width, self.block_height, read_only=read_only)

    def __getitem__(self, idx: tuple[int, int]) -> int:
        """Get cell content by (row, col) index."""
        row, col = idx
        return int(self.data[row, col])

    def __setitem__(self, idx: tuple[int, int], value: int) -> None:
        """Set cell content by (row, col) index."""
        if not 0 <= value <= self.n:
            raise DigitRangeError(f"Value {value} is outside [0, {self.n}].")
        row, col = idx
        self.data[row, col] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.block_width == other.block_width
            and self.block_height == other.block_height
            and np.array_equal(self.data, other.data)
        )

    def free_cells(self) -> list[tuple[int, int]]:
        """Return the (row, col) coordinates of all blank cells, in row-major order."""
        return [(int(r), int(c)) for r, c in np.argwhere(self.data == 0)]

    def to_list(self) -> list[list[int]]:
        return self.data.tolist()

    def format(self) -> str:
        """Render the grid with separators between blocks; blanks are shown as spaces."""
        width = len(str(self.n))
        lines: list[str] = []
        for r in range(self.n):
            if r > 0 and r % self.block_height == 0:
                lines.append("-" * len(lines[-1]))
            line = ""
            for c in range(self.n):
                if c > 0 and c % self.block_width == 0:
                    line += "| "
                value = int(self.data[r, c])
                line += (str(value) if value > 0 else "").rjust(width) + " "
            lines.append(line.rstrip())
        return "\n".join(lines)

    def __str__(self) -> str:
        """Returns a string representation of the board."""
        return self.format()

    def print(self) -> None:
        """Print the board to the console."""
        print(self.format())
