from enum import Enum
from typing import Type

from labyrinth.algo.aldous_broder import AldousBroder
from labyrinth.algo.base import Generator
from labyrinth.algo.binary_tree import BinaryTree
from labyrinth.algo.dfs import RecursiveBacktracker
from labyrinth.algo.eller import Eller
from labyrinth.algo.hunt_and_kill import HuntAndKill
from labyrinth.algo.kruskal import Kruskal
from labyrinth.algo.prim import PrimsAlgorithm, PrimsGrowingTree
from labyrinth.algo.sidewinder import Sidewinder
from labyrinth.algo.solvers import DeadEndFiller, RecursiveBacktrackingSolver, Solver, WallFollower
from labyrinth.algo.wilson import Wilson


class _CyclicKind(Enum):
    @classmethod
    def from_name(cls, name: str):
        key = name.strip().lower().replace("-", "_").replace(" ", "_")
        for kind in cls:
            if kind.value == key or kind.name.lower() == key:
                return kind
        raise ValueError(f"Unknown {cls.__name__}: {name!r}")

    def next(self):
        members = list(type(self))
        return members[(members.index(self) + 1) % len(members)]

    def previous(self):
        members = list(type(self))
        return members[(members.index(self) - 1) % len(members)]


class GeneratorKind(_CyclicKind):
    RECURSIVE_BACKTRACKING = "dfs"
    ALDOUS_BRODER = "aldous_broder"
    BINARY_TREE = "binary_tree"
    KRUSKAL = "kruskal"
    PRIM = "prim"
    ELLER = "eller"
    WILSON = "wilson"
    HUNT_AND_KILL = "hunt_and_kill"
    PRIMS_GROWING_TREE = "growing_tree"
    SIDEWINDER = "sidewinder"

    @property
    def generator_class(self) -> Type[Generator]:
        return GENERATORS[self]


class SolverKind(_CyclicKind):
    DEAD_END_FILLING = "deadend"
    RECURSIVE_BACKTRACKING = "backtrack"
    WALL_FOLLOWER = "wall_follower"

    @property
    def solver_class(self) -> Type[Solver]:
        return SOLVERS[self]


GENERATORS = {
    GeneratorKind.RECURSIVE_BACKTRACKING: RecursiveBacktracker,
    GeneratorKind.ALDOUS_BRODER: AldousBroder,
    GeneratorKind.BINARY_TREE: BinaryTree,
    GeneratorKind.KRUSKAL: Kruskal,
    GeneratorKind.PRIM: PrimsAlgorithm,
    GeneratorKind.ELLER: Eller,
    GeneratorKind.WILSON: Wilson,
    GeneratorKind.HUNT_AND_KILL: HuntAndKill,
    GeneratorKind.PRIMS_GROWING_TREE: PrimsGrowingTree,
    GeneratorKind.SIDEWINDER: Sidewinder,
}

SOLVERS = {
    SolverKind.DEAD_END_FILLING: DeadEndFiller,
    SolverKind.RECURSIVE_BACKTRACKING: RecursiveBacktrackingSolver,
    SolverKind.WALL_FOLLOWER: WallFollower,
}
