from typing import Dict, Iterator, List
from labyrinth.core.grid import Coord
from labyrinth.algo.base import Generator, Step


class Wilson(Generator):
    """
    Loop-erased random walks. The start cell is the root of the tree; each walk
    begins at a random unvisited cell and wanders until it touches the tree.
    Every cell on the walk remembers the direction it was last left by, so a
    loop is erased as soon as the walk crosses itself. The remembered directions
    are then followed from the walk's origin to carve the branch.
    """
    def run(self) -> Iterator[Step]:
        grid = self.grid

        rx, ry = self.start
        grid.set_visited(rx, ry)
        yield self.step("visit", (rx, ry))

        unvisited: List[Coord] = [(x, y) for y in range(grid.height) for x in range(grid.width)
                                  if (x, y) != self.start]

        while unvisited:
            origin = self._pop_unvisited(unvisited)
            if origin is None:
                break
            yield from self._walk(origin)

    def _pop_unvisited(self, unvisited: List[Coord]):
        # Lazily discards cells visited by earlier branches
        while unvisited:
            idx = self.rng.randrange(len(unvisited))
            cell = unvisited[idx]
            unvisited[idx] = unvisited[-1]
            unvisited.pop()
            if not self.grid.is_visited(*cell):
                return cell
        return None

    def _walk(self, origin: Coord) -> Iterator[Step]:
        grid = self.grid
        rng = self.rng
        records: Dict[Coord, int] = {}

        cx, cy = origin
        while True:
            nx, ny, dir_bit = rng.choice(list(grid.get_neighbors(cx, cy)))
            # Overwriting erases any loop through (cx, cy)
            records[(cx, cy)] = dir_bit
            yield self.step("walk", (cx, cy), (nx, ny))
            if grid.is_visited(nx, ny):
                break
            cx, cy = nx, ny

        # Commit the loop-erased path, iteratively
        cx, cy = origin
        while not grid.is_visited(cx, cy):
            dir_bit = records[(cx, cy)]
            grid.set_visited(cx, cy)
            grid.carve_path(cx, cy, dir_bit)
            nx, ny = cx + grid.DX[dir_bit], cy + grid.DY[dir_bit]
            yield self.step("carve", (cx, cy), (nx, ny))
            cx, cy = nx, ny
