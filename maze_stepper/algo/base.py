import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from maze_stepper.core.errors import InvalidPosition, NoPathFound
from maze_stepper.core.grid import Grid, Position


class RunKind(Enum):
    GENERATION = "generation"
    SOLVING = "solving"


class StepStatus(Enum):
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, eq=False)
class StepResult:
    status: StepStatus
    message: str = ""
    # Generation: grid snapshot. Solving: current candidate path.
    grid: Optional[np.ndarray] = None
    path: Tuple[Position, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.status is not StepStatus.RUNNING


class Steppable(ABC):
    """
    A lazy, finite, non-restartable sequence of steps held as an explicit state object.
    Callers pull one step at a time with step(); once a terminal result has been
    produced, further calls return that same result.
    """
    kind: RunKind

    def __init__(self, grid: Grid):
        self.grid = grid
        self.step_count = 0
        self._result: Optional[StepResult] = None

    @property
    def finished(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Optional[StepResult]:
        return self._result

    @abstractmethod
    def step(self) -> StepResult:
        pass

    def run(self) -> Iterator[StepResult]:
        while True:
            result = self.step()
            yield result
            if result.is_terminal:
                return

    def run_all(self) -> StepResult:
        """Helper to run the sequence to completion."""
        for result in self.run():
            pass
        return result


class Generator(Steppable):
    kind = RunKind.GENERATION

    def __init__(self, grid: Grid, seed: int = None, start: Position = (0, 0)):
        super().__init__(grid)
        if not grid.in_bounds(start):
            raise InvalidPosition(f"Generation start {start} outside {grid.width}x{grid.height} grid")
        self.seed = seed
        self.start = start
        self.rng = random.Random(seed)

    @abstractmethod
    def advance(self) -> Optional[str]:
        """
        Carves exactly one wall, in place on self.grid.
        Returns a status string, or None when there is nothing left to carve.
        """
        pass

    def step(self) -> StepResult:
        if self._result is not None:
            return self._result
        message = self.advance()
        if message is None:
            self._result = StepResult(StepStatus.DONE, "Done", grid=self.grid.snapshot())
            return self._result
        self.step_count += 1
        return StepResult(StepStatus.RUNNING, message, grid=self.grid.snapshot())

    def run_all(self) -> StepResult:
        # Skip per-step snapshots when nobody is watching.
        if self._result is None:
            while self.advance() is not None:
                self.step_count += 1
            self._result = StepResult(StepStatus.DONE, "Done", grid=self.grid.snapshot())
        return self._result


class Solver(Steppable):
    kind = RunKind.SOLVING

    def __init__(self, grid: Grid, start: Position, end: Position):
        super().__init__(grid)
        for name, pos in (("start", start), ("end", end)):
            if not grid.in_bounds(pos):
                raise InvalidPosition(f"Solver {name} {pos} outside {grid.width}x{grid.height} grid")
        self.start = tuple(start)
        self.end = tuple(end)
        self.path: List[Position] = []
        self.explored_count = 0
        grid.clear_path()

    @abstractmethod
    def advance(self) -> StepResult:
        """Explores one cell and reports the current candidate path."""
        pass

    def step(self) -> StepResult:
        if self._result is not None:
            return self._result
        result = self.advance()
        self.step_count += 1
        if result.status is StepStatus.DONE:
            self.path = list(result.path)
            self.grid.mark_path(self.path)
            self._result = result
        elif result.status is StepStatus.FAILED:
            self._result = result
        return result

    def open_neighbors(self, pos: Position) -> Iterator[Position]:
        cell = self.grid[pos[1]][pos[0]]
        for neighbor in self.grid.open_neighbors_of(cell):
            yield neighbor.position

    def reconstruct_path(self, parents: Dict[Position, Position], current: Position) -> List[Position]:
        path = [current]
        while current in parents:
            current = parents[current]
            path.append(current)
        path.reverse()
        return path

    def found(self, path: List[Position]) -> StepResult:
        return StepResult(StepStatus.DONE, f"Solved. Path length: {len(path)}", path=tuple(path))

    def no_path(self) -> StepResult:
        return StepResult(StepStatus.FAILED, str(NoPathFound(self.start, self.end)))

    def exploring(self, path: List[Position]) -> StepResult:
        return StepResult(StepStatus.RUNNING, f"Visited: {self.explored_count}", path=tuple(path))
