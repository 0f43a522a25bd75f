import unittest
import sys
import os
import shutil

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from labyrinth.core.grid import Grid
from labyrinth.core.events import (EventWriter, EventReader, replay,
                                   EVT_CARVE, EVT_VISIT, EVT_OPEN)
from labyrinth.algo.prim import PrimsAlgorithm
from labyrinth.algo.solvers import RecursiveBacktrackingSolver


class TestEvents(unittest.TestCase):
    def setUp(self):
        os.makedirs("test_out", exist_ok=True)

    def tearDown(self):
        shutil.rmtree("test_out", ignore_errors=True)

    def test_generation_replay(self):
        path = "test_out/gen.log"
        with EventWriter(path) as writer:
            grid = Grid(12, 7, event_writer=writer)
            PrimsAlgorithm(grid, seed=31).run_all()
            written = writer.count

        with EventReader(path) as reader:
            self.assertEqual(reader.read_header(), (12, 7))
            copy = Grid(12, 7)
            applied = replay(copy, reader)

        self.assertEqual(applied, written)
        self.assertEqual(copy.cells.tobytes(), grid.cells.tobytes())

    def test_event_kinds(self):
        path = "test_out/kinds.log"
        with EventWriter(path) as writer:
            grid = Grid(3, 3, event_writer=writer)
            grid.set_visited(1, 1)
            grid.carve_path(1, 1, Grid.EAST)
            grid.open_boundary(2, 1, Grid.EAST)

        with EventReader(path) as reader:
            reader.read_header()
            events = list(reader.stream_events())

        self.assertEqual(events, [
            (EVT_VISIT, (1, 1)),
            (EVT_CARVE, (1, 1, Grid.EAST)),
            (EVT_OPEN, (2, 1, Grid.EAST)),
        ])

    def test_solve_replay(self):
        grid = Grid(8, 8)
        PrimsAlgorithm(grid, seed=2).run_all()

        path = "test_out/solve.log"
        with EventWriter(path) as writer:
            writer.write_header(grid.width, grid.height)
            grid.event_writer = writer
            grid.open_boundary(0, 0, Grid.WEST)
            grid.open_boundary(7, 7, Grid.EAST)
            solver = RecursiveBacktrackingSolver(grid, seed=3)
            solver.run_all((0, 0), (7, 7))
            grid.event_writer = None

        copy = Grid(8, 8)
        copy.cells = grid.cells[:]
        copy.reset_solution()
        with EventReader(path) as reader:
            reader.read_header()
            replay(copy, reader)

        for y in range(8):
            for x in range(8):
                self.assertEqual(copy.is_solution(x, y), grid.is_solution(x, y))
                self.assertEqual(copy.is_checked(x, y), grid.is_checked(x, y))
        self.assertFalse(copy.has_wall(0, 0, Grid.WEST))

    def test_bad_header(self):
        path = "test_out/bad.log"
        with open(path, "wb") as f:
            f.write(b"NOTALOG" + bytes(8))
        with EventReader(path) as reader:
            with self.assertRaises(ValueError):
                reader.read_header()

    def test_unknown_event(self):
        path = "test_out/unknown.log"
        with EventWriter(path) as writer:
            writer.write_header(2, 2)
            writer.file.write(bytes([0x7F]))
        with EventReader(path) as reader:
            reader.read_header()
            with self.assertRaises(ValueError):
                list(reader.stream_events())


if __name__ == '__main__':
    unittest.main()
