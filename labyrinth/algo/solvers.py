import random
from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional
from labyrinth.core.errors import InvariantViolation
from labyrinth.core.grid import Grid, Coord
from labyrinth.algo.base import Step


class Solver(ABC):
    """
    Marks one path from entrance to exit on an already generated grid.
    The entrance and exit are expected to have their outer wall open already.
    """
    def __init__(self, grid: Grid, seed: int = None, rng: Optional[random.Random] = None):
        self.grid = grid
        self.path: List[Coord] = []
        self.visited_count = 0
        self.rng = rng if rng is not None else random.Random(seed)
        self.step_count = 0

    @abstractmethod
    def run(self, start: Coord, end: Coord) -> Iterator[Step]:
        pass

    def run_all(self, start: Coord, end: Coord) -> List[Coord]:
        for _ in self.run(start, end):
            pass
        return self.path

    def step(self, action: str, *cells: Coord) -> Step:
        self.step_count += 1
        return Step(action, cells)


class DeadEndFiller(Solver):
    """
    Fills every dead end up to the nearest junction, then walks the only corridor
    left open from the entrance to the exit. Needs a perfect maze: on anything
    else the walk meets a fork and raises.
    """
    def run(self, start: Coord, end: Coord) -> Iterator[Step]:
        grid = self.grid
        width, height = grid.width, grid.height

        # Outer walls count, so an opened entrance or exit is never a dead end
        dead_ends = [(x, y) for y in range(height) for x in range(width)
                     if grid.broken_count(x, y) == 1]

        for x, y in dead_ends:
            if grid.is_checked(x, y):
                continue
            yield from self._fill_until_junction(x, y)

        cx, cy = start
        grid.mark_solution(cx, cy)
        self.path.append(start)
        yield self.step("solution", start)

        while (cx, cy) != end:
            candidates = grid.get_passable_neighbors(cx, cy)
            if len(candidates) != 1:
                raise InvariantViolation(
                    f"Expected one way forward after filling, found {len(candidates)}", (cx, cy))

            nx, ny, dir_bit = candidates[0]
            grid.mark_wall_solution(cx, cy, dir_bit)
            grid.mark_solution(nx, ny)
            self.path.append((nx, ny))
            yield self.step("solution", (cx, cy), (nx, ny))
            cx, cy = nx, ny

    def _fill_until_junction(self, x: int, y: int) -> Iterator[Step]:
        grid = self.grid
        grid.mark_checked(x, y)
        self.visited_count += 1
        yield self.step("check", (x, y))

        cx, cy = x, y
        while True:
            candidates = grid.get_passable_neighbors(cx, cy)
            if len(candidates) != 1:
                raise InvariantViolation(
                    f"Dead end fill expected one way forward, found {len(candidates)}", (cx, cy))

            nx, ny, dir_bit = candidates[0]
            # Decide before the wall is checked, it lowers the count by one
            is_junction = grid.unchecked_broken_count(nx, ny) >= 3
            grid.mark_wall_checked(cx, cy, dir_bit)

            if is_junction:
                yield self.step("junction", (nx, ny))
                return

            grid.mark_checked(nx, ny)
            self.visited_count += 1
            yield self.step("check", (cx, cy), (nx, ny))
            cx, cy = nx, ny


class RecursiveBacktrackingSolver(Solver):
    def run(self, start: Coord, end: Coord) -> Iterator[Step]:
        grid = self.grid
        rng = self.rng

        grid.mark_solution(*start)
        stack: List[Coord] = [start]
        self.visited_count = 1
        yield self.step("solution", start)

        while stack[-1] != end:
            cx, cy = stack[-1]
            candidates = grid.get_passable_neighbors(cx, cy)

            if candidates:
                nx, ny, dir_bit = rng.choice(candidates)
                grid.mark_solution(nx, ny)
                grid.mark_wall_solution(cx, cy, dir_bit)
                stack.append((nx, ny))
                self.visited_count += 1
                yield self.step("solution", (cx, cy), (nx, ny))
            else:
                # Dead end: no longer part of the solution
                grid.mark_checked(cx, cy)
                grid.mark_broken_walls_checked(cx, cy)
                stack.pop()
                if not stack:
                    raise InvariantViolation("Exit is not reachable from the entrance", start)
                yield self.step("backtrack", (cx, cy))

        self.path = list(stack)


class WallFollower(Solver):
    """
    Left-hand rule: turn left and move if possible, else move forward, else turn right.

    Only guaranteed on perfect mazes. Walking back onto a cell already on the path
    retracts everything after it, so the marks left behind are a simple path.
    """
    def run(self, start: Coord, end: Coord) -> Iterator[Step]:
        grid = self.grid
        dirs = Grid.DIRECTIONS

        facing = dirs.index(self._initial_facing(start))

        cx, cy = start
        grid.mark_solution(cx, cy)
        self.path = [start]
        position: Dict[Coord, int] = {start: 0}
        self.visited_count = 1
        yield self.step("solution", start)

        steps = 0
        max_steps = grid.width * grid.height * 16

        while (cx, cy) != end:
            steps += 1
            if steps > max_steps:
                raise InvariantViolation("Wall follower is going in circles", (cx, cy))

            left = (facing - 1) % 4
            if self._can_move(cx, cy, dirs[left]):
                facing = left
            elif not self._can_move(cx, cy, dirs[facing]):
                facing = (facing + 1) % 4
                yield self.step("turn", (cx, cy))
                continue

            dir_bit = dirs[facing]
            nx, ny = cx + grid.DX[dir_bit], cy + grid.DY[dir_bit]

            if (nx, ny) in position:
                # Back on the path, drop the detour
                keep = position[(nx, ny)] + 1
                for px, py in self.path[keep:]:
                    del position[(px, py)]
                    grid.mark_checked(px, py)
                grid.mark_wall_checked(cx, cy, dir_bit)
                for (ax, ay), (bx, by) in zip(self.path[keep - 1:], self.path[keep:]):
                    grid.mark_wall_checked(ax, ay, grid.direction_to(ax, ay, bx, by))
                del self.path[keep:]
                yield self.step("backtrack", (cx, cy), (nx, ny))
            else:
                grid.mark_solution(nx, ny)
                grid.mark_wall_solution(cx, cy, dir_bit)
                position[(nx, ny)] = len(self.path)
                self.path.append((nx, ny))
                self.visited_count += 1
                yield self.step("solution", (cx, cy), (nx, ny))

            cx, cy = nx, ny

    def _can_move(self, x: int, y: int, dir_bit: int) -> bool:
        grid = self.grid
        if grid.has_wall(x, y, dir_bit):
            return False
        return grid.in_bounds(x + grid.DX[dir_bit], y + grid.DY[dir_bit])

    def _initial_facing(self, start: Coord) -> int:
        """Away from the opened outer wall; first open direction if there is none."""
        grid = self.grid
        x, y = start
        for dir_bit in grid.boundary_directions(x, y):
            if not grid.has_wall(x, y, dir_bit):
                return grid.OPPOSITE[dir_bit]
        for dir_bit in grid.DIRECTIONS:
            if self._can_move(x, y, dir_bit):
                return dir_bit
        return grid.DIRECTIONS[0]
