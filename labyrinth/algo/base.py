import random
from abc import ABC, abstractmethod
from typing import Iterator, NamedTuple, Optional, Tuple
from labyrinth.core.grid import Grid, Coord


class Step(NamedTuple):
    """One unit of work: what happened and which cells it touched."""
    action: str
    cells: Tuple[Coord, ...]


class Generator(ABC):
    def __init__(self, grid: Grid, start: Coord = (0, 0), seed: int = None,
                 rng: Optional[random.Random] = None):
        self.grid = grid
        self.start = start
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.step_count = 0

    @abstractmethod
    def run(self) -> Iterator[Step]:
        """
        Yields one Step per unit of work (cell visited, wall broken, walk step).
        The actual grid modifications happen in-place on self.grid.
        """
        pass

    def run_all(self) -> Grid:
        """Helper to run the generator to completion."""
        for _ in self.run():
            pass
        return self.grid

    def step(self, action: str, *cells: Coord) -> Step:
        self.step_count += 1
        return Step(action, cells)
