from typing import Iterator, List
from labyrinth.core.grid import Coord
from labyrinth.algo.base import Generator, Step


class Kruskal(Generator):
    """
    Randomized Kruskal over cells rather than edges.

    A bag starts with every cell. A random cell is drawn; if it has a neighbor in
    another set the two are linked and the neighbor's set is overtaken, otherwise
    the cell is dropped from the bag for good. Ends when the bag is empty.
    """
    def run(self) -> Iterator[Step]:
        rng = self.rng
        grid = self.grid

        bag: List[Coord] = [(x, y) for y in range(grid.height) for x in range(grid.width)]

        while bag:
            idx = rng.randrange(len(bag))
            cx, cy = bag[idx]
            grid.set_visited(cx, cy)

            neighbors = grid.neighbors_not_in_set(cx, cy)
            if neighbors:
                nx, ny, dir_bit = rng.choice(neighbors)
                grid.set_visited(nx, ny)
                grid.carve_path(cx, cy, dir_bit)
                grid.overtake_set(grid.set_id(cx, cy), grid.set_id(nx, ny))
                yield self.step("carve", (cx, cy), (nx, ny))
            else:
                # Swap remove, order of the bag does not matter
                bag[idx] = bag[-1]
                bag.pop()
                yield self.step("drop", (cx, cy))
