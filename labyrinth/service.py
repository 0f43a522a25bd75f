"""
Host-facing entry point.

A host asks for a maze with a GenerationRequest and for a solution with a
SolveRequest. Both run to completion by default; with stepped=True the host
gets a MazeRun back and decides when each unit of work happens.
"""
import logging
import random
import weakref
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from labyrinth.algo.base import Step
from labyrinth.algo.registry import GeneratorKind, SolverKind
from labyrinth.core.complexity import MazePostProcessor
from labyrinth.core.errors import MazeConfigError
from labyrinth.core.grid import Grid, Coord

logger = logging.getLogger(__name__)

StepCallback = Callable[[Step], None]


@dataclass(frozen=True)
class GenerationRequest:
    width: int = 20
    height: int = 20
    start: Coord = (0, 0)
    algorithm: GeneratorKind = GeneratorKind.RECURSIVE_BACKTRACKING
    stepped: bool = False
    seed: Optional[int] = None


@dataclass(frozen=True)
class SolveRequest:
    entrance: Coord = (0, 0)
    exit: Coord = (1, 0)
    algorithm: SolverKind = SolverKind.DEAD_END_FILLING
    stepped: bool = False


class MazeRun:
    """
    A suspended generation or solve. Each next() performs one unit of work and
    returns its Step. Dropping or cancelling the run leaves the grid dirty.
    """
    def __init__(self, service: "MazeService", kind: str, steps: Iterator[Step],
                 result: Callable[[], object], on_step: Optional[StepCallback] = None):
        self.service = service
        self.kind = kind
        self.result = None
        self.finished = False
        self._steps = steps
        self._result = result
        self._on_step = on_step
        self._closed = False

    def __iter__(self):
        return self

    def __next__(self) -> Step:
        if self._closed:
            raise StopIteration
        try:
            step = next(self._steps)
        except StopIteration:
            self._finish()
            raise
        except Exception:
            self._abort()
            raise
        if self._on_step:
            self._on_step(step)
        return step

    def advance(self) -> Optional[Step]:
        """One step, or None once the run is over."""
        return next(self, None)

    def run_all(self):
        for _ in self:
            pass
        return self.result

    def cancel(self):
        if not self._closed:
            self._steps.close()
            self._abort()
            logger.info("%s run cancelled, grid needs a reset", self.kind)

    def _finish(self):
        self._closed = True
        self.finished = True
        self.result = self._result()
        self.service._release(self, completed=True)

    def _abort(self):
        self._closed = True
        self.service._release(self, completed=False)


class MazeService:
    """
    Owns one grid and runs one algorithm on it at a time.
    'on_complete' callbacks get (kind, result) once per finished run, kind being
    "generate" or "solve".
    """
    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None,
                 event_writer=None):
        self.rng = rng if rng is not None else random.Random(seed)
        self.event_writer = event_writer
        self.grid: Optional[Grid] = None
        self.generated = False
        self.dirty = False
        self.entrance: Optional[Coord] = None
        self.exit: Optional[Coord] = None
        self.on_complete: List[Callable[[str, object], None]] = []
        # Weak, so a run the host stops resuming and drops frees the service
        self._active_ref: Optional[weakref.ref] = None

    @property
    def _active(self) -> Optional[MazeRun]:
        return self._active_ref() if self._active_ref is not None else None

    @property
    def busy(self) -> bool:
        return self._active is not None

    def adopt(self, grid: Grid):
        """Takes over a grid generated elsewhere, e.g. loaded from a maze file."""
        if self.busy:
            logger.warning("Cannot adopt a grid while a %s run is in progress", self._active.kind)
            return
        grid.event_writer = self.event_writer
        self.grid = grid
        self.generated = grid.all_visited()
        self.dirty = False
        self.entrance = self.exit = None
        if not self.generated:
            logger.warning("Adopted %dx%d grid is not fully generated", grid.width, grid.height)

    # --- Generation ---

    def generate(self, request: GenerationRequest, on_step: Optional[StepCallback] = None):
        """Returns the generated Grid, a MazeRun when stepped, or None if a run is active."""
        if self.busy:
            logger.warning("Generation request ignored, a %s run is in progress", self._active.kind)
            return None
        self._validate_generation(request)

        if self.grid is None or (self.grid.width, self.grid.height) != (request.width, request.height):
            logger.debug("Building %dx%d grid", request.width, request.height)
            self.grid = Grid(request.width, request.height, event_writer=self.event_writer)
        else:
            self.grid.reset()
        self.generated = False
        self.dirty = True
        self.entrance = self.exit = None

        rng = random.Random(request.seed) if request.seed is not None else self.rng
        generator = request.algorithm.generator_class(self.grid, start=request.start, rng=rng)
        logger.info("Generating %dx%d maze with %s from %s", request.width, request.height,
                    request.algorithm.name, request.start)

        def result():
            self.generated = True
            self.dirty = False
            logger.info("Generation finished after %d steps", generator.step_count)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Stats %s, perfect: %s", MazePostProcessor.calculate_stats(self.grid),
                             MazePostProcessor.is_perfect(self.grid))
            return self.grid

        return self._start("generate", generator.run(), result, request.stepped, on_step)

    def _validate_generation(self, request: GenerationRequest):
        if request.width < 2 or request.height < 2:
            self._reject(f"Maze needs at least 2 width and 2 height, got {request.width}x{request.height}")
        sx, sy = request.start
        if not (0 <= sx < request.width and 0 <= sy < request.height):
            self._reject(f"Start {request.start} is outside the {request.width}x{request.height} grid")
        if not isinstance(request.algorithm, GeneratorKind):
            self._reject(f"Unknown generator {request.algorithm!r}")

    # --- Solving ---

    def solve(self, request: SolveRequest, on_step: Optional[StepCallback] = None):
        """Returns the solution path, a MazeRun when stepped, or None if a run is active."""
        if self.busy:
            logger.warning("Solve request ignored, a %s run is in progress", self._active.kind)
            return None
        self._validate_solve(request)

        grid = self.grid
        grid.reset_solution()
        self.dirty = True
        for x, y in (request.entrance, request.exit):
            grid.open_boundary(x, y, self.rng.choice(grid.boundary_directions(x, y)))
        self.entrance, self.exit = request.entrance, request.exit

        solver = request.algorithm.solver_class(grid, rng=self.rng)
        logger.info("Solving with %s from %s to %s", request.algorithm.name,
                    request.entrance, request.exit)

        def result():
            self.dirty = False
            logger.info("Solution found, %d cells, %d steps", len(solver.path), solver.step_count)
            return solver.path

        return self._start("solve", solver.run(request.entrance, request.exit), result,
                           request.stepped, on_step)

    def _validate_solve(self, request: SolveRequest):
        grid = self.grid
        if grid is None or not self.generated:
            self._reject("Nothing to solve, generate a maze first")
        if self.dirty:
            self._reject("Grid was left half-done by a cancelled or failed run, generate it again")
        for name, point in (("Entrance", request.entrance), ("Exit", request.exit)):
            if not grid.in_bounds(*point):
                self._reject(f"{name} {point} is outside the {grid.width}x{grid.height} grid")
            if not grid.on_boundary(*point):
                self._reject(f"{name} {point} must lie on the edge of the maze")
        if tuple(request.entrance) == tuple(request.exit):
            self._reject(f"Entrance and exit are both {request.entrance}")
        if not isinstance(request.algorithm, SolverKind):
            self._reject(f"Unknown solver {request.algorithm!r}")

    # --- Run bookkeeping ---

    def _start(self, kind: str, steps: Iterator[Step], result, stepped: bool,
               on_step: Optional[StepCallback]):
        run = MazeRun(self, kind, steps, result, on_step)

        def dropped(ref):
            if self._active_ref is ref:
                self._active_ref = None
                logger.info("%s run dropped before finishing, grid needs a reset", kind)

        self._active_ref = weakref.ref(run, dropped)
        if stepped:
            return run
        return run.run_all()

    def _release(self, run: MazeRun, completed: bool):
        if self._active is not run:
            return
        self._active_ref = None
        if completed:
            for callback in list(self.on_complete):
                callback(run.kind, run.result)

    @staticmethod
    def _reject(message: str):
        logger.warning(message)
        raise MazeConfigError(message)
