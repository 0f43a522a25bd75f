from typing import Iterator, List
from labyrinth.core.grid import Coord
from labyrinth.algo.base import Generator, Step


class Sidewinder(Generator):
    """
    Row by row from the north edge. A run of cells grows eastward until a coin flip
    (or the east edge) closes it, then one random member of the run carves north.
    The north row has nowhere to go but east, so it becomes one long corridor.
    """
    def run(self) -> Iterator[Step]:
        rng = self.rng
        grid = self.grid
        width, height = grid.width, grid.height

        for y in range(height):
            run: List[Coord] = []
            for x in range(width):
                grid.set_visited(x, y)
                run.append((x, y))

                if y == 0 or rng.random() > 0.5:
                    if x + 1 < width:
                        grid.carve_path(x, y, grid.EAST)
                        yield self.step("carve", (x, y), (x + 1, y))
                    elif y > 0:
                        rx, ry = rng.choice(run)
                        grid.carve_path(rx, ry, grid.NORTH)
                        yield self.step("carve", (rx, ry), (rx, ry - 1))
                    else:
                        yield self.step("visit", (x, y))
                else:
                    rx, ry = rng.choice(run)
                    grid.carve_path(rx, ry, grid.NORTH)
                    run.clear()
                    yield self.step("carve", (rx, ry), (rx, ry - 1))
