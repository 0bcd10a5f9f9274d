from typing import Dict, List, Type

from maze_stepper.core.errors import NoPathFound, UnknownAlgorithm
from maze_stepper.core.grid import Grid, Position
from maze_stepper.algo.base import Generator, Solver, StepStatus
from maze_stepper.algo.dfs import RecursiveBacktracker
from maze_stepper.algo.kruskal import KruskalsAlgorithm
from maze_stepper.algo.prim import PrimsAlgorithm
from maze_stepper.algo.solvers import AStar, BFS, Dijkstra

GENERATORS: Dict[str, Type[Generator]] = {
    "backtracking": RecursiveBacktracker,
    "prims": PrimsAlgorithm,
    "kruskals": KruskalsAlgorithm,
}

SOLVERS: Dict[str, Type[Solver]] = {
    "bfs": BFS,
    "astar": AStar,
    "dijkstra": Dijkstra,
}

# Tags used by the web front-end
ALIASES = {
    "recursive-backtracking": "backtracking",
    "dfs": "backtracking",
    "prim": "prims",
    "kruskal": "kruskals",
    "a-star": "astar",
}


def _lookup(table, name: str, kind: str):
    key = ALIASES.get(name, name)
    try:
        return table[key]
    except KeyError:
        raise UnknownAlgorithm(f"Unknown {kind} algorithm '{name}'. Choose from: {', '.join(table)}") from None


def make_generator(name: str, grid: Grid, seed: int = None, start: Position = (0, 0)) -> Generator:
    return _lookup(GENERATORS, name, "generation")(grid, seed=seed, start=start)


def make_solver(name: str, grid: Grid, start: Position, end: Position) -> Solver:
    return _lookup(SOLVERS, name, "solving")(grid, start, end)


def generate(grid: Grid, algorithm: str = "backtracking", seed: int = None) -> Grid:
    """Carves `grid` to completion without animation."""
    make_generator(algorithm, grid, seed=seed).run_all()
    return grid


def solve(grid: Grid, algorithm: str, start: Position, end: Position) -> List[Position]:
    """Blocking solve. Raises NoPathFound when end is unreachable."""
    result = make_solver(algorithm, grid, start, end).run_all()
    if result.status is StepStatus.FAILED:
        raise NoPathFound(start, end)
    return list(result.path)
