import heapq
import math
from collections import deque
from itertools import count
from typing import Deque, Dict, List, Set, Tuple

from maze_stepper.core.grid import Grid, Position
from maze_stepper.algo.base import Solver, StepResult


class BFS(Solver):
    """Breadth-first search. Frontier entries carry the full path walked so far."""

    def __init__(self, grid: Grid, start: Position, end: Position):
        super().__init__(grid, start, end)
        self.queue: Deque[Tuple[Position, List[Position]]] = deque([(self.start, [self.start])])
        self.visited: Set[Position] = {self.start}

    def advance(self) -> StepResult:
        if not self.queue:
            return self.no_path()

        current, path = self.queue.popleft()
        if current == self.end:
            return self.found(path)

        self.explored_count += 1
        for neighbor in self.open_neighbors(current):
            if neighbor not in self.visited:
                self.visited.add(neighbor)
                self.queue.append((neighbor, path + [neighbor]))

        return self.exploring(path)


class AStar(Solver):
    def __init__(self, grid: Grid, start: Position, end: Position):
        super().__init__(grid, start, end)
        self.g_score: Dict[Position, float] = self.initial_scores()
        self.g_score[self.start] = 0
        self.parents: Dict[Position, Position] = {}
        self.closed: Set[Position] = set()

        # Priority Queue: (f_score, insertion order, position); order breaks ties first-found
        self.counter = count()
        self.open_set: List[Tuple[float, int, Position]] = []
        heapq.heappush(self.open_set, (self.heuristic(self.start, self.end), next(self.counter), self.start))

    def initial_scores(self) -> Dict[Position, float]:
        return {}

    def heuristic(self, a: Position, b: Position) -> float:
        return abs(a[0] - b[0]) + abs(a[1] - b[1])

    def advance(self) -> StepResult:
        while self.open_set:
            _, _, current = heapq.heappop(self.open_set)
            if current in self.closed:
                continue  # stale entry

            if current == self.end:
                return self.found(self.reconstruct_path(self.parents, current))

            self.closed.add(current)
            self.explored_count += 1

            new_g = self.g_score[current] + 1
            for neighbor in self.open_neighbors(current):
                if new_g < self.g_score.get(neighbor, math.inf):
                    self.g_score[neighbor] = new_g
                    self.parents[neighbor] = current
                    priority = new_g + self.heuristic(neighbor, self.end)
                    heapq.heappush(self.open_set, (priority, next(self.counter), neighbor))

            return self.exploring(self.reconstruct_path(self.parents, current))

        return self.no_path()


class Dijkstra(AStar):
    """ Dijkstra is A* with h(n) = 0 and a full distance table. """

    def initial_scores(self) -> Dict[Position, float]:
        return {cell.position: math.inf for cell in self.grid}

    def heuristic(self, a, b):
        return 0
