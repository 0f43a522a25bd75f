from typing import Iterator, List
from labyrinth.core.grid import Coord
from labyrinth.algo.base import Generator, Step


class RecursiveBacktracker(Generator):
    def run(self) -> Iterator[Step]:
        rng = self.rng

        start_x, start_y = self.start
        self.grid.set_visited(start_x, start_y)
        yield self.step("visit", self.start)

        # Explicit stack instead of recursion, depth can reach width * height
        stack: List[Coord] = [self.start]

        while stack:
            cx, cy = stack[-1]

            neighbors = self.grid.unvisited_neighbors(cx, cy)

            if neighbors:
                nx, ny, dir_bit = rng.choice(neighbors)

                self.grid.carve_path(cx, cy, dir_bit)
                self.grid.set_visited(nx, ny)

                stack.append((nx, ny))
                yield self.step("carve", (cx, cy), (nx, ny))
            else:
                # Backtrack
                stack.pop()
                yield self.step("backtrack", (cx, cy))
