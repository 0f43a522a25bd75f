import unittest
import sys
import os
from collections import deque

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from labyrinth.core.errors import InvariantViolation
from labyrinth.core.grid import Grid
from labyrinth.algo.dfs import RecursiveBacktracker
from labyrinth.algo.registry import GeneratorKind, SolverKind
from labyrinth.algo.solvers import DeadEndFiller, RecursiveBacktrackingSolver, WallFollower


def open_ends(grid, entrance, exit_):
    for x, y in (entrance, exit_):
        grid.open_boundary(x, y, grid.boundary_directions(x, y)[0])


def bfs_path(grid, start, end):
    parents = {start: None}
    queue = deque([start])
    while queue:
        cell = queue.popleft()
        if cell == end:
            break
        for nxt in grid.get_open_neighbors(*cell):
            if nxt not in parents:
                parents[nxt] = cell
                queue.append(nxt)
    path = []
    cell = end
    while cell is not None:
        path.append(cell)
        cell = parents[cell]
    return path[::-1]


class TestSolvers(unittest.TestCase):
    def create_simple_maze(self):
        # 5x5 maze, simple path
        grid = Grid(5, 5)
        # 0,0 -> 0,1 -> 0,2 -> 1,2 -> 2,2 -> 3,2 -> 4,2 -> 4,3 -> 4,4
        grid.carve_path(0, 0, Grid.SOUTH) # to 0,1
        grid.carve_path(0, 1, Grid.SOUTH) # to 0,2
        grid.carve_path(0, 2, Grid.EAST)  # to 1,2
        grid.carve_path(1, 2, Grid.EAST)  # to 2,2
        grid.carve_path(2, 2, Grid.EAST)  # to 3,2
        grid.carve_path(3, 2, Grid.EAST)  # to 4,2
        grid.carve_path(4, 2, Grid.SOUTH) # to 4,3
        grid.carve_path(4, 3, Grid.SOUTH) # to 4,4
        # A side branch off the corridor
        grid.carve_path(2, 2, Grid.NORTH) # to 2,1
        grid.carve_path(2, 1, Grid.NORTH) # to 2,0
        open_ends(grid, (0, 0), (4, 4))
        return grid

    def assert_valid_solution(self, grid, solver, start, end):
        path = solver.path
        self.assertEqual(path[0], start)
        self.assertEqual(path[-1], end)
        self.assertEqual(len(path), len(set(path)), "Path must not repeat cells")

        for (ax, ay), (bx, by) in zip(path, path[1:]):
            self.assertEqual(abs(ax - bx) + abs(ay - by), 1)
            dir_bit = grid.direction_to(ax, ay, bx, by)
            self.assertFalse(grid.has_wall(ax, ay, dir_bit), f"Wall between {(ax, ay)} and {(bx, by)}")
            self.assertTrue(grid.is_wall_solution(ax, ay, dir_bit))

        marked = {(x, y) for y in range(grid.height) for x in range(grid.width)
                  if grid.is_solution(x, y)}
        self.assertEqual(marked, set(path))

    def test_simple_maze(self):
        for solver_cls in (DeadEndFiller, RecursiveBacktrackingSolver, WallFollower):
            with self.subTest(solver=solver_cls.__name__):
                grid = self.create_simple_maze()
                solver = solver_cls(grid, seed=1)
                solver.run_all((0, 0), (4, 4))

                self.assertEqual(len(solver.path), 9)
                self.assert_valid_solution(grid, solver, (0, 0), (4, 4))
                self.assertNotIn((2, 1), solver.path)

    def test_every_solver_on_every_generator(self):
        size = 12
        entrance, exit_ = (0, 0), (size - 1, size - 1)
        for gen_kind in GeneratorKind:
            for solver_kind in SolverKind:
                with self.subTest(generator=gen_kind.name, solver=solver_kind.name):
                    grid = Grid(size, size)
                    gen_kind.generator_class(grid, seed=21).run_all()
                    open_ends(grid, entrance, exit_)

                    solver = solver_kind.solver_class(grid, seed=5)
                    steps = list(solver.run(entrance, exit_))

                    self.assert_valid_solution(grid, solver, entrance, exit_)
                    # A perfect maze has exactly one simple path
                    self.assertEqual(solver.path, bfs_path(grid, entrance, exit_))
                    self.assertEqual(len(steps), solver.step_count)

    def test_edge_entrances(self):
        grid = Grid(9, 6)
        RecursiveBacktracker(grid, seed=3).run_all()
        entrance, exit_ = (4, 0), (0, 3)
        open_ends(grid, entrance, exit_)
        for solver_cls in (DeadEndFiller, RecursiveBacktrackingSolver, WallFollower):
            with self.subTest(solver=solver_cls.__name__):
                grid.reset_solution()
                open_ends(grid, entrance, exit_)
                solver = solver_cls(grid, seed=2)
                solver.run_all(entrance, exit_)
                self.assert_valid_solution(grid, solver, entrance, exit_)

    def test_dead_end_filling_five_by_five(self):
        grid = Grid(5, 5)
        RecursiveBacktracker(grid, seed=42).run_all()
        open_ends(grid, (0, 0), (4, 4))

        solver = DeadEndFiller(grid)
        solver.run_all((0, 0), (4, 4))

        expected = bfs_path(grid, (0, 0), (4, 4))
        self.assertEqual(len(solver.path), len(expected))
        self.assertEqual(solver.path, expected)

        on_path = set(solver.path)
        for y in range(5):
            for x in range(5):
                if (x, y) in on_path:
                    self.assertFalse(grid.is_checked(x, y))
                else:
                    self.assertTrue(grid.is_checked(x, y), f"{(x, y)} should be filled")
        self.assertEqual(solver.visited_count, 25 - len(on_path))

    def test_backtracker_determinism(self):
        runs = []
        for _ in range(2):
            grid = Grid(10, 10)
            RecursiveBacktracker(grid, seed=8).run_all()
            open_ends(grid, (0, 0), (9, 9))
            solver = RecursiveBacktrackingSolver(grid, seed=99)
            runs.append([tuple(s) for s in solver.run((0, 0), (9, 9))])
        self.assertEqual(runs[0], runs[1])

    def test_wall_follower_retracts_detours(self):
        grid = Grid(15, 15)
        RecursiveBacktracker(grid, seed=17).run_all()
        open_ends(grid, (0, 0), (14, 14))

        solver = WallFollower(grid)
        steps = list(solver.run((0, 0), (14, 14)))

        self.assert_valid_solution(grid, solver, (0, 0), (14, 14))
        backtracks = [s for s in steps if s.action == "backtrack"]
        if backtracks:
            self.assertTrue(any(grid.is_checked(x, y)
                                for y in range(15) for x in range(15)))

    def test_no_path(self):
        for solver_cls in (DeadEndFiller, RecursiveBacktrackingSolver, WallFollower):
            with self.subTest(solver=solver_cls.__name__):
                grid = Grid(5, 5) # All walls
                open_ends(grid, (0, 0), (4, 4))
                with self.assertRaises(InvariantViolation):
                    solver_cls(grid).run_all((0, 0), (4, 4))

    def test_cut_maze(self):
        # Two halves with no passage between them
        grid = Grid(4, 4)
        for y in range(4):
            grid.carve_path(0, y, Grid.EAST)
            grid.carve_path(2, y, Grid.EAST)
        for y in range(3):
            grid.carve_path(0, y, Grid.SOUTH)
            grid.carve_path(3, y, Grid.SOUTH)
        open_ends(grid, (0, 0), (3, 3))
        with self.assertRaises(InvariantViolation) as ctx:
            RecursiveBacktrackingSolver(grid, seed=1).run_all((0, 0), (3, 3))
        self.assertEqual(ctx.exception.cell, (0, 0))


if __name__ == '__main__':
    unittest.main()
