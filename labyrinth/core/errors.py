from typing import Optional, Tuple


class MazeError(Exception):
    """Base class for everything the maze core raises on purpose."""


class MazeConfigError(MazeError, ValueError):
    """
    Bad input from the host: dimensions, start, entrance or exit.
    Raised before the grid is touched, so the caller can retry with corrected values.
    """


class InvariantViolation(MazeError, RuntimeError):
    """
    An algorithm found zero or several candidates where exactly one was guaranteed.
    The run is aborted; the grid is left as-is and must be reset.
    """

    def __init__(self, message: str, cell: Optional[Tuple[int, int]] = None):
        if cell is not None:
            message = f"{message} (cell {cell})"
        super().__init__(message)
        self.cell = cell
