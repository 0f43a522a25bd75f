import unittest
import sys
import os
import shutil
import struct

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from labyrinth.core.grid import Grid
from labyrinth.algo.kruskal import Kruskal
from labyrinth.algo.solvers import DeadEndFiller
from labyrinth.io.serializer import MazeSerializer


class TestIO(unittest.TestCase):
    def setUp(self):
        os.makedirs("test_out", exist_ok=True)

    def tearDown(self):
        shutil.rmtree("test_out", ignore_errors=True)

    def test_round_trip_raw(self):
        grid = Grid(10, 10)
        grid.carve_path(0, 0, Grid.SOUTH)
        grid.set_visited(5, 5, True)

        path = "test_out/raw.maze"
        MazeSerializer.save(grid, path)

        grid2, meta = MazeSerializer.load(path)
        self.assertEqual(grid.cells.tobytes(), grid2.cells.tobytes())
        self.assertEqual(grid.width, grid2.width)
        self.assertEqual(meta, {})

    def test_round_trip_compressed(self):
        grid = Grid(100, 100) # larger for compression
        Kruskal(grid, seed=6).run_all()
        path = "test_out/comp.maze"
        MazeSerializer.save(grid, path, compress=True)

        grid2, meta = MazeSerializer.load(path)
        self.assertEqual(grid.cells.tobytes(), grid2.cells.tobytes())
        self.assertEqual(list(grid.set_ids), list(grid2.set_ids))
        self.assertLess(os.path.getsize(path), 100 * 100 * 6)

    def test_solver_marks_survive(self):
        grid = Grid(8, 8)
        Kruskal(grid, seed=1).run_all()
        grid.open_boundary(0, 0, Grid.NORTH)
        grid.open_boundary(7, 7, Grid.SOUTH)
        solver = DeadEndFiller(grid)
        solver.run_all((0, 0), (7, 7))

        path = "test_out/solved.maze"
        MazeSerializer.save(grid, path, meta={"solver": "deadend"})
        grid2, meta = MazeSerializer.load(path)

        self.assertEqual(meta["solver"], "deadend")
        for x, y in solver.path:
            self.assertTrue(grid2.is_solution(x, y))
        self.assertFalse(grid2.has_wall(0, 0, Grid.NORTH))

    def test_seed_only(self):
        grid = Grid(10, 10)
        path = "test_out/seed.maze"
        meta = {"seed": 12345, "algo": "dfs"}
        MazeSerializer.save(grid, path, meta=meta, seed_only=True)

        grid2, meta2 = MazeSerializer.load(path)
        # Grid2 should be empty (all walls)
        self.assertEqual(grid2.cells[0], Grid.ALL_WALLS)
        self.assertEqual(meta2["seed"], 12345)

        # Verify file size is tiny
        size = os.path.getsize(path)
        self.assertLess(size, 200) # Header + Meta only

    def test_bad_magic(self):
        path = "test_out/bad.maze"
        with open(path, "wb") as f:
            f.write(b"NOPE" + bytes(20))
        with self.assertRaises(ValueError):
            MazeSerializer.load(path)

    def test_bad_version(self):
        path = "test_out/version.maze"
        MazeSerializer.save(Grid(3, 3), path)
        with open(path, "r+b") as f:
            f.seek(4)
            f.write(struct.pack("<B", 99))
        with self.assertRaises(ValueError):
            MazeSerializer.load(path)

    def test_truncated(self):
        path = "test_out/short.maze"
        MazeSerializer.save(Grid(6, 6), path)
        with open(path, "rb") as f:
            data = f.read()
        with open(path, "wb") as f:
            f.write(data[:-10])
        with self.assertRaises(ValueError):
            MazeSerializer.load(path)


if __name__ == '__main__':
    unittest.main()
