from typing import Iterator
from labyrinth.algo.base import Generator, Step


class Eller(Generator):
    """
    Row-at-a-time union of sets.

    Every cell starts in its own set. Cells are visited row by row; each one links
    to a random neighbor (any direction) from a different set, and that neighbor's
    whole set is relabelled with the current cell's id.
    """
    def run(self) -> Iterator[Step]:
        rng = self.rng
        grid = self.grid

        for y in range(grid.height):
            for x in range(grid.width):
                grid.set_visited(x, y)

                neighbors = grid.neighbors_not_in_set(x, y)
                if neighbors:
                    nx, ny, dir_bit = rng.choice(neighbors)
                    grid.carve_path(x, y, dir_bit)
                    grid.overtake_set(grid.set_id(x, y), grid.set_id(nx, ny))
                    yield self.step("carve", (x, y), (nx, ny))
                else:
                    yield self.step("visit", (x, y))
