import argparse
import sys
import os
import logging
import time

# Ensure project root is in path so we can import 'labyrinth' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from labyrinth.algo.registry import GeneratorKind, SolverKind
from labyrinth.core.errors import MazeError, MazeConfigError

logger = logging.getLogger("labyrinth")


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Labyrinth: perfect maze generator and solver")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen_algos = [k.value for k in GeneratorKind]
    solve_algos = [k.value for k in SolverKind]

    # Generate Command
    gen_parser = subparsers.add_parser("generate", help="Generate a new maze")
    gen_parser.add_argument("--width", type=int, default=20, help="Maze Width")
    gen_parser.add_argument("--height", type=int, default=20, help="Maze Height")
    gen_parser.add_argument("--start", type=int, nargs=2, default=(0, 0), metavar=("X", "Y"),
                            help="Start cell for generators that use one")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    gen_parser.add_argument("--algo", type=str, default="dfs", choices=gen_algos, help="Generation Algorithm")
    gen_parser.add_argument("--stepped", action="store_true", help="Run step by step, logging each step at DEBUG")
    gen_parser.add_argument("--out", type=str, help="Output file path (optional)")
    gen_parser.add_argument("--compress", action="store_true", help="Compress the output file")
    gen_parser.add_argument("--seed-only", action="store_true",
                            help="Store only size, algorithm and seed; the maze is rebuilt on load")
    gen_parser.add_argument("--record-events", type=str, help="Save generation events to binary file")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", help="Solve an existing maze")
    solve_parser.add_argument("input_file", help="Path to maze file")
    solve_parser.add_argument("--algo", type=str, default="deadend", choices=solve_algos, help="Solver algorithm")
    solve_parser.add_argument("--entrance", type=int, nargs=2, default=None, metavar=("X", "Y"),
                              help="Entrance cell (default top-left corner)")
    solve_parser.add_argument("--exit", type=int, nargs=2, default=None, metavar=("X", "Y"),
                              help="Exit cell (default bottom-right corner)")
    solve_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    solve_parser.add_argument("--stepped", action="store_true", help="Run step by step, logging each step at DEBUG")
    solve_parser.add_argument("--out", type=str, help="Save the solved maze to this file")
    solve_parser.add_argument("--record-events", type=str, help="Save solver events to binary file")

    # Stats Command
    stats_parser = subparsers.add_parser("stats", help="Print structure statistics of a maze file")
    stats_parser.add_argument("input_file", help="Path to maze file")

    # Benchmark Command
    bench_parser = subparsers.add_parser("benchmark", help="Time every generator and solver")
    bench_parser.add_argument("--size", type=int, default=60, help="Benchmark size")
    bench_parser.add_argument("--seed", type=int, default=123, help="Random Seed")

    return parser


def log_step(step):
    logger.debug("%s %s", step.action, step.cells)


def load_maze(path: str):
    """Loads a maze file, rebuilding seed-only files from their stored recipe."""
    from labyrinth.io.serializer import MazeSerializer
    from labyrinth.service import MazeService, GenerationRequest

    logger.info(f"Loading {path}...")
    grid, meta = MazeSerializer.load(path)
    if meta.get("seed_only"):
        if meta.get("seed") is None or "algo" not in meta:
            raise MazeConfigError(f"{path} holds no maze data and no seed to rebuild it from")
        request = GenerationRequest(
            width=grid.width, height=grid.height, start=tuple(meta.get("start", (0, 0))),
            algorithm=GeneratorKind.from_name(meta["algo"]), seed=meta["seed"])
        logger.info(f"Rebuilding {meta['algo']} maze from seed {meta['seed']}")
        grid = MazeService().generate(request)
    logger.info(f"Loaded {grid.width}x{grid.height} maze. Meta: {meta}")
    return grid, meta


def cmd_generate(args):
    from labyrinth.core.complexity import MazePostProcessor
    from labyrinth.core.events import EventWriter
    from labyrinth.io.serializer import MazeSerializer
    from labyrinth.service import MazeService, GenerationRequest

    if args.seed_only and args.seed is None:
        raise MazeConfigError("--seed-only needs --seed, the maze is rebuilt from it")

    evt_writer = None
    if args.record_events:
        evt_writer = EventWriter(args.record_events)
        logger.info(f"Recording events to {args.record_events}...")

    try:
        service = MazeService(seed=args.seed, event_writer=evt_writer)
        request = GenerationRequest(
            width=args.width, height=args.height, start=tuple(args.start),
            algorithm=GeneratorKind.from_name(args.algo), stepped=args.stepped, seed=args.seed)

        t0 = time.time()
        result = service.generate(request, on_step=log_step if args.stepped else None)
        grid = result.run_all() if args.stepped else result
        logger.info(f"Generation complete in {time.time() - t0:.4f}s")

        stats = MazePostProcessor.calculate_stats(grid)
        logger.info(f"Stats: {stats}")
        if not MazePostProcessor.is_perfect(grid):
            logger.warning("Maze is not a spanning tree")

        if args.out:
            logger.info(f"Saving maze to {args.out}...")
            meta = {"algo": args.algo, "seed": args.seed, "start": list(args.start)}
            if args.seed_only:
                meta["seed_only"] = True
            MazeSerializer.save(grid, args.out, meta=meta, seed_only=args.seed_only,
                                compress=args.compress)
            logger.info("Save complete.")
    finally:
        if evt_writer:
            evt_writer.close()


def cmd_solve(args):
    from labyrinth.core.events import EventWriter
    from labyrinth.io.serializer import MazeSerializer
    from labyrinth.service import MazeService, SolveRequest

    grid, meta = load_maze(args.input_file)

    entrance = tuple(args.entrance) if args.entrance else (0, 0)
    exit_ = tuple(args.exit) if args.exit else (grid.width - 1, grid.height - 1)

    evt_writer = None
    if args.record_events:
        evt_writer = EventWriter(args.record_events)
        # Grid is already loaded, header is written by hand
        evt_writer.write_header(grid.width, grid.height)
        logger.info(f"Recording events to {args.record_events}...")

    try:
        service = MazeService(seed=args.seed, event_writer=evt_writer)
        service.adopt(grid)
        request = SolveRequest(entrance=entrance, exit=exit_,
                               algorithm=SolverKind.from_name(args.algo), stepped=args.stepped)

        t0 = time.time()
        result = service.solve(request, on_step=log_step if args.stepped else None)
        path = result.run_all() if args.stepped else result
        logger.info(f"Solved in {time.time() - t0:.4f}s. Path Length: {len(path)}")

        if args.out:
            # The solved file carries full cell data
            meta = {k: v for k, v in meta.items() if k != "seed_only"}
            meta.update(solver=args.algo, entrance=list(entrance), exit=list(exit_))
            MazeSerializer.save(grid, args.out, meta=meta)
            logger.info(f"Saved solved maze to {args.out}")
    finally:
        if evt_writer:
            evt_writer.close()


def cmd_stats(args):
    from labyrinth.core.complexity import MazePostProcessor

    grid, meta = load_maze(args.input_file)
    stats = MazePostProcessor.calculate_stats(grid)
    print(f"{grid.width}x{grid.height} maze, meta: {meta}")
    for key, value in stats.items():
        print(f"{key:<18} {value}")
    print(f"{'perfect':<18} {MazePostProcessor.is_perfect(grid)}")


def cmd_benchmark(args):
    from labyrinth.core.complexity import MazePostProcessor
    from labyrinth.service import MazeService, GenerationRequest, SolveRequest

    size = args.size
    logger.info(f"Running Benchmark Suite (Size: {size}x{size})...")

    print(f"\n{'GENERATOR':<24} | {'TIME (s)':<10} | {'DEAD ENDS':<10} | {'PERFECT':<8}")
    print("-" * 62)
    for kind in GeneratorKind:
        service = MazeService(seed=args.seed)
        t_start = time.time()
        grid = service.generate(GenerationRequest(size, size, algorithm=kind, seed=args.seed))
        duration = time.time() - t_start
        stats = MazePostProcessor.calculate_stats(grid)
        print(f"{kind.name:<24} | {duration:<10.4f} | {stats['dead_ends']:<10} | "
              f"{str(MazePostProcessor.is_perfect(grid)):<8}")

    print(f"\n{'SOLVER':<24} | {'TIME (s)':<10} | {'PATH LEN':<10} | {'STEPS':<10}")
    print("-" * 62)
    service = MazeService(seed=args.seed)
    service.generate(GenerationRequest(size, size, seed=args.seed))
    for kind in SolverKind:
        steps = []
        t_start = time.time()
        path = service.solve(SolveRequest((0, 0), (size - 1, size - 1), kind), on_step=steps.append)
        duration = time.time() - t_start
        print(f"{kind.name:<24} | {duration:<10.4f} | {len(path):<10} | {len(steps):<10}")


COMMANDS = {
    "generate": cmd_generate,
    "solve": cmd_solve,
    "stats": cmd_stats,
    "benchmark": cmd_benchmark,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")
    try:
        COMMANDS[args.command](args)
    except MazeError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
