import logging
import time
from typing import Callable, Optional

from maze_stepper.core.errors import ConcurrentRunRejected, InvalidDimension, InvalidPosition
from maze_stepper.core.grid import Grid, Position, create_grid
from maze_stepper.algo.base import Generator, RunKind, Solver, StepResult
from maze_stepper.algo.registry import make_generator, make_solver
from maze_stepper.runner.stepper import (
    DEFAULT_INTERVAL_MS, RunMetrics, RunState, StepListener, Stepper, check_interval
)

logger = logging.getLogger(__name__)


class MazeSession(StepListener):
    """
    Owns the Grid and hands it to one engine at a time through a Stepper.

    Settings (size, algorithms, seed, speed, start/end) survive reset(); the grid
    is replaced wholesale on every generate(), reset() and set_size().
    """
    MIN_SIZE = 5
    MAX_SIZE = 100

    def __init__(self, width: int = 20, height: int = 20,
                 generation_algorithm: str = "backtracking", solving_algorithm: str = "bfs",
                 seed: int = None, animation_speed: float = DEFAULT_INTERVAL_MS,
                 listener: StepListener = None, clock: Callable[[], float] = time.monotonic):
        self.check_size(width, height)
        check_interval(animation_speed)
        self.width = width
        self.height = height
        self.generation_algorithm = generation_algorithm
        self.solving_algorithm = solving_algorithm
        self.seed = seed
        self.animation_speed = animation_speed
        self.listener = listener or StepListener()

        self.grid: Grid = create_grid(width, height)
        self.start_position: Optional[Position] = None
        self.end_position: Optional[Position] = None
        self.path = []
        self.generation_metrics: Optional[RunMetrics] = None
        self.solving_metrics: Optional[RunMetrics] = None

        self.stepper = Stepper(listener=self, clock=clock)

    @classmethod
    def check_size(cls, width: int, height: int):
        if not (cls.MIN_SIZE <= width <= cls.MAX_SIZE and cls.MIN_SIZE <= height <= cls.MAX_SIZE):
            raise InvalidDimension(width, height)

    @property
    def state(self) -> RunState:
        return self.stepper.state

    @property
    def is_generating(self) -> bool:
        return self.stepper.is_active and self.stepper.source.kind is RunKind.GENERATION

    @property
    def is_solving(self) -> bool:
        return self.stepper.is_active and self.stepper.source.kind is RunKind.SOLVING

    def _reject_if_active(self, action: str):
        if self.stepper.is_active:
            raise ConcurrentRunRejected(f"Cannot {action} while a run is {self.stepper.state.value}")

    # Settings

    def set_size(self, width: int, height: int):
        self._reject_if_active("resize")
        self.check_size(width, height)
        self.width, self.height = width, height
        self.grid = create_grid(width, height)
        self.path = []
        self.start_position = None
        self.end_position = None
        self.generation_metrics = None
        self.solving_metrics = None

    def set_animation_speed(self, ms_per_step: float):
        """Takes effect at the next generate(), solve() or resume()."""
        check_interval(ms_per_step)
        self.animation_speed = ms_per_step

    def set_start_position(self, pos: Optional[Position]):
        if pos is not None and not self.grid.in_bounds(pos):
            raise InvalidPosition(f"Start {pos} outside {self.grid.width}x{self.grid.height} grid")
        self.start_position = pos

    def set_end_position(self, pos: Optional[Position]):
        if pos is not None and not self.grid.in_bounds(pos):
            raise InvalidPosition(f"End {pos} outside {self.grid.width}x{self.grid.height} grid")
        self.end_position = pos

    # Runs

    def generate(self, algorithm: str = None, seed: int = None) -> Generator:
        self._reject_if_active("generate")
        algorithm = algorithm or self.generation_algorithm
        seed = self.seed if seed is None else seed
        check_interval(self.animation_speed)

        grid = create_grid(self.width, self.height)
        generator = make_generator(algorithm, grid, seed=seed)

        self.grid = grid
        self.path = []
        self.solving_metrics = None
        if not (self.start_position and grid.in_bounds(self.start_position)):
            self.start_position = None
        if not (self.end_position and grid.in_bounds(self.end_position)):
            self.end_position = None

        logger.info(f"Generating {self.width}x{self.height} maze with {algorithm} (seed={seed})")
        self.stepper.start(generator, self.animation_speed)
        return generator

    def solve(self, start: Position = None, end: Position = None, algorithm: str = None) -> Solver:
        self._reject_if_active("solve")
        algorithm = algorithm or self.solving_algorithm
        start = start or self.start_position or (0, 0)
        end = end or self.end_position or (self.grid.width - 1, self.grid.height - 1)

        check_interval(self.animation_speed)
        solver = make_solver(algorithm, self.grid, start, end)
        self.start_position, self.end_position = solver.start, solver.end
        self.path = []
        logger.info(f"Solving with {algorithm} from {start} to {end}")
        self.stepper.start(solver, self.animation_speed)
        return solver

    def pause(self):
        self.stepper.pause()

    def resume(self):
        self.stepper.resume(self.animation_speed)

    def toggle_pause(self):
        if self.stepper.state is RunState.RUNNING:
            self.pause()
        elif self.stepper.state is RunState.PAUSED:
            self.resume()

    def reset(self):
        self.stepper.reset()
        self.grid = create_grid(self.width, self.height)
        self.path = []
        self.start_position = None
        self.end_position = None
        self.generation_metrics = None
        self.solving_metrics = None

    def poll(self, now: float = None) -> Optional[StepResult]:
        return self.stepper.poll(now)

    def run_blocking(self, sleep: Callable[[float], None] = time.sleep) -> RunState:
        return self.stepper.run_blocking(sleep)

    # StepListener

    def on_state_change(self, old, new):
        self.listener.on_state_change(old, new)

    def on_step(self, result: StepResult):
        if self.stepper.source.kind is RunKind.SOLVING:
            self.path = list(result.path)
        self.listener.on_step(result)

    def on_complete(self, result: StepResult, metrics: RunMetrics):
        if metrics.kind is RunKind.GENERATION:
            self.generation_metrics = metrics
        else:
            self.solving_metrics = metrics
        self.listener.on_complete(result, metrics)

    def on_failed(self, reason: str):
        self.listener.on_failed(reason)
