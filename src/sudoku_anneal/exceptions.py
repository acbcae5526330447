"""Exceptions raised when a puzzle or its grid cannot be annealed."""


class PuzzleError(ValueError):
    """Base class for invalid puzzle input."""


class GridShapeError(PuzzleError):
    """Raised when block dimensions or the grid shape are malformed."""


class DigitRangeError(PuzzleError):
    """Raised when a grid holds a value outside [0, n]."""


class InfeasiblePuzzleError(PuzzleError):
    """Raised when the clues already use some digit more than n times."""


class NoFreeCellsError(PuzzleError):
    """Raised when a move is requested on a board without blank cells."""


class PuzzleFormatError(PuzzleError):
    """Raised when a puzzle file or dimensions string cannot be parsed."""


class SolverConfigError(ValueError):
    """Raised when the solver configuration cannot be honoured on this machine."""
