from typing import Iterator
from labyrinth.algo.base import Generator, Step


class AldousBroder(Generator):
    """
    Unbiased random walk. Carves only when the walk lands on a cell for the first
    time, so the result is a uniform spanning tree. Slow to finish on big grids.
    """
    def run(self) -> Iterator[Step]:
        rng = self.rng
        grid = self.grid

        cx, cy = self.start
        grid.set_visited(cx, cy)
        yield self.step("visit", (cx, cy))

        remaining = grid.width * grid.height - 1

        while remaining:
            nx, ny, dir_bit = rng.choice(list(grid.get_neighbors(cx, cy)))

            if not grid.is_visited(nx, ny):
                grid.carve_path(cx, cy, dir_bit)
                grid.set_visited(nx, ny)
                remaining -= 1
                action = "carve"
            else:
                action = "walk"

            cx, cy = nx, ny
            yield self.step(action, (cx, cy))
