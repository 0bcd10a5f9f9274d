import argparse
import sys
import os
import logging
import time

# Ensure project root is in path so we can import 'maze_stepper' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_stepper.core.errors import MazeError
from maze_stepper.core.complexity import MazeAnalyzer
from maze_stepper.algo.registry import GENERATORS, SOLVERS, make_solver
from maze_stepper.runner.session import MazeSession
from maze_stepper.runner.stepper import DEFAULT_INTERVAL_MS, RunState

logger = logging.getLogger("maze_stepper")


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def parse_position(text: str):
    try:
        x, y = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected 'x,y', got '{text}'")
    return (x, y)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maze Stepper: animated maze generation and solving")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_common(sub):
        sub.add_argument("--width", type=int, default=20, help="Maze Width (5-100)")
        sub.add_argument("--height", type=int, default=20, help="Maze Height (5-100)")
        sub.add_argument("--seed", type=int, default=None, help="Random Seed")
        sub.add_argument("--visual", action="store_true", help="Show visualization")
        sub.add_argument("--interval", type=float, default=None,
                         help=f"Milliseconds per step (default {DEFAULT_INTERVAL_MS} visual, 0 headless)")

    # Generate Command
    gen_parser = subparsers.add_parser("generate", help="Generate a new maze")
    add_common(gen_parser)
    gen_parser.add_argument("--algo", type=str, default="backtracking", choices=list(GENERATORS),
                            help="Generation Algorithm")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", help="Generate a maze, then solve it")
    add_common(solve_parser)
    solve_parser.add_argument("--gen-algo", type=str, default="backtracking", choices=list(GENERATORS),
                              help="Generation Algorithm")
    solve_parser.add_argument("--algo", type=str, default="bfs", choices=list(SOLVERS), help="Solver algorithm")
    solve_parser.add_argument("--start", type=parse_position, default=None, help="Start cell 'x,y'")
    solve_parser.add_argument("--end", type=parse_position, default=None, help="End cell 'x,y'")

    # Benchmark Command
    bench_parser = subparsers.add_parser("benchmark", help="Race every solver on every generator")
    bench_parser.add_argument("--size", type=int, default=50, help="Benchmark size (5-100)")
    bench_parser.add_argument("--seed", type=int, default=123, help="Random Seed")

    return parser


def run_visual(session: MazeSession):
    from maze_stepper.viz.renderer import Renderer
    logger.info("Visual mode enabled - Opening window...")
    renderer = Renderer(session)
    renderer.init_window()
    renderer.run_loop()


def run_generate(args) -> int:
    interval = args.interval if args.interval is not None else (DEFAULT_INTERVAL_MS if args.visual else 0)
    session = MazeSession(args.width, args.height, generation_algorithm=args.algo,
                          seed=args.seed, animation_speed=interval)
    session.generate()

    if args.visual:
        run_visual(session)
        return 0

    logger.info("Headless generation...")
    session.run_blocking()
    stats = MazeAnalyzer.calculate_stats(session.grid)
    metrics = session.generation_metrics
    print(f"Done. {metrics.step_count} walls carved in {metrics.elapsed_time_ms:.1f} ms")
    print(f"Stats: {stats}")
    return 0


def run_solve(args) -> int:
    interval = args.interval if args.interval is not None else (DEFAULT_INTERVAL_MS if args.visual else 0)
    session = MazeSession(args.width, args.height, generation_algorithm=args.gen_algo,
                          solving_algorithm=args.algo, seed=args.seed, animation_speed=interval)
    session.set_start_position(args.start)
    session.set_end_position(args.end)
    session.generate()

    if args.visual:
        run_visual(session)
        return 0

    session.run_blocking()
    session.solve()
    state = session.run_blocking()

    if state is RunState.FAILED:
        print(f"Failed: {session.stepper.failure_reason}")
        return 1

    metrics = session.solving_metrics
    print(f"Done. Path Length: {metrics.path_length} | Explored: {metrics.cells_explored} "
          f"| Steps: {metrics.step_count} | {metrics.elapsed_time_ms:.1f} ms")
    return 0


def run_benchmark(args) -> int:
    logger.info(f"Running Solver Benchmark Suite (Size: {args.size}x{args.size})...")
    MazeSession.check_size(args.size, args.size)

    print(f"\n{'GENERATOR':<14} | {'SOLVER':<10} | {'TIME (s)':<10} | {'PATH LEN':<10} | {'EXPLORED':<10}")
    print("-" * 66)

    for gen_name in GENERATORS:
        session = MazeSession(args.size, args.size, generation_algorithm=gen_name,
                              seed=args.seed, animation_speed=0)
        session.generate()
        session.run_blocking()
        grid = session.grid

        start_pos = (0, 0)
        end_pos = (grid.width - 1, grid.height - 1)

        for solver_name in SOLVERS:
            solver = make_solver(solver_name, grid, start_pos, end_pos)

            t_start = time.perf_counter()
            solver.run_all()
            duration = time.perf_counter() - t_start

            print(f"{gen_name:<14} | {solver_name:<10} | {duration:<10.4f} | "
                  f"{len(solver.path):<10} | {solver.explored_count:<10}")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")

    commands = {
        "generate": run_generate,
        "solve": run_solve,
        "benchmark": run_benchmark,
    }
    try:
        return commands[args.command](args)
    except MazeError as exc:
        logger.error(str(exc))
        return 2


if __name__ == "__main__":
    sys.exit(main())
