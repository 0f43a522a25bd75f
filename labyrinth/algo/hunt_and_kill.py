from typing import Iterator, Optional
from labyrinth.core.errors import InvariantViolation
from labyrinth.core.grid import Coord
from labyrinth.algo.base import Generator, Step


class HuntAndKill(Generator):
    def run(self) -> Iterator[Step]:
        rng = self.rng
        grid = self.grid

        cx, cy = self.start
        grid.set_visited(cx, cy)
        yield self.step("visit", (cx, cy))

        remaining = grid.width * grid.height - 1
        # Rows above this one are fully visited, the hunt can skip them
        self._scan_row = 0

        while remaining:
            neighbors = grid.unvisited_neighbors(cx, cy)
            if neighbors:
                # Kill: keep walking
                nx, ny, dir_bit = rng.choice(neighbors)
                grid.carve_path(cx, cy, dir_bit)
                grid.set_visited(nx, ny)
                yield self.step("carve", (cx, cy), (nx, ny))
                cx, cy = nx, ny
            else:
                hunted = self._hunt()
                if hunted is None:
                    raise InvariantViolation("Hunt found no unvisited cell next to the maze", (cx, cy))
                hx, hy = hunted
                nx, ny, dir_bit = rng.choice(grid.visited_neighbors(hx, hy))
                grid.carve_path(hx, hy, dir_bit)
                grid.set_visited(hx, hy)
                yield self.step("hunt", (hx, hy), (nx, ny))
                cx, cy = hx, hy
            remaining -= 1

    def _hunt(self) -> Optional[Coord]:
        """First unvisited cell in row-major order with at least one visited neighbor."""
        grid = self.grid
        for y in range(self._scan_row, grid.height):
            row_complete = True
            for x in range(grid.width):
                if grid.is_visited(x, y):
                    continue
                row_complete = False
                if grid.visited_neighbors(x, y):
                    return (x, y)
            if row_complete and y == self._scan_row:
                self._scan_row += 1
        return None
