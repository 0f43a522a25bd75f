from typing import Iterator, List, Set
from labyrinth.core.errors import InvariantViolation
from labyrinth.core.grid import Coord
from labyrinth.algo.base import Generator, Step


class PrimsAlgorithm(Generator):
    """
    Frontier flavour: the frontier holds unvisited cells touching the visited region.
    A random frontier cell joins the maze through a random visited neighbor.
    """
    def run(self) -> Iterator[Step]:
        rng = self.rng

        start_x, start_y = self.start
        self.grid.set_visited(start_x, start_y)
        yield self.step("visit", self.start)

        # Set for O(1) membership, list for random choice
        frontier_set: Set[Coord] = set()
        frontier_list: List[Coord] = []

        for nx, ny, _ in self.grid.get_neighbors(start_x, start_y):
            frontier_set.add((nx, ny))
            frontier_list.append((nx, ny))

        while frontier_list:
            # Swap remove for O(1)
            idx = rng.randrange(len(frontier_list))
            cx, cy = frontier_list[idx]
            frontier_list[idx] = frontier_list[-1]
            frontier_list.pop()
            frontier_set.discard((cx, cy))

            possible_neighbors = self.grid.visited_neighbors(cx, cy)
            if not possible_neighbors:
                raise InvariantViolation("Frontier cell has no visited neighbor", (cx, cy))

            nx, ny, dir_bit = rng.choice(possible_neighbors)
            self.grid.carve_path(cx, cy, dir_bit)
            self.grid.set_visited(cx, cy)

            for nx2, ny2, _ in self.grid.unvisited_neighbors(cx, cy):
                if (nx2, ny2) not in frontier_set:
                    frontier_set.add((nx2, ny2))
                    frontier_list.append((nx2, ny2))

            yield self.step("carve", (cx, cy), (nx, ny))


class PrimsGrowingTree(Generator):
    """
    Growing tree flavour: the bag holds visited cells that may still branch.
    """
    def run(self) -> Iterator[Step]:
        rng = self.rng
        grid = self.grid

        start_x, start_y = self.start
        grid.set_visited(start_x, start_y)
        yield self.step("visit", self.start)

        bag: List[Coord] = [self.start]
        remaining = grid.width * grid.height - 1

        while remaining:
            if not bag:
                raise InvariantViolation("Bag emptied before every cell was visited")

            idx = rng.randrange(len(bag))
            cx, cy = bag[idx]
            neighbors = grid.unvisited_neighbors(cx, cy)

            if neighbors:
                nx, ny, dir_bit = rng.choice(neighbors)
                grid.carve_path(cx, cy, dir_bit)
                grid.set_visited(nx, ny)
                bag.append((nx, ny))
                remaining -= 1
                yield self.step("carve", (cx, cy), (nx, ny))
            else:
                bag[idx] = bag[-1]
                bag.pop()
                yield self.step("drop", (cx, cy))
