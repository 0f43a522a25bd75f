from typing import Iterator
from labyrinth.algo.base import Generator, Step


class BinaryTree(Generator):
    """
    Each cell links north or east. Ignores the start cell; every passage leads
    toward the north-east corner, which is the only cell that links nowhere.
    """
    def run(self) -> Iterator[Step]:
        rng = self.rng
        grid = self.grid

        for y in range(grid.height):
            for x in range(grid.width):
                grid.set_visited(x, y)

                candidates = []
                if grid.top_neighbor(x, y) is not None:
                    candidates.append(grid.NORTH)
                if grid.right_neighbor(x, y) is not None:
                    candidates.append(grid.EAST)

                if candidates:
                    dir_bit = rng.choice(candidates)
                    grid.carve_path(x, y, dir_bit)
                    yield self.step("carve", (x, y), (x + grid.DX[dir_bit], y + grid.DY[dir_bit]))
                else:
                    yield self.step("visit", (x, y))
