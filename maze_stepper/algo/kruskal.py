from typing import List, Optional, Tuple

from maze_stepper.core.disjoint_set import DisjointSet
from maze_stepper.core.grid import Cell
from maze_stepper.algo.base import Generator


class KruskalsAlgorithm(Generator):
    """
    Randomized Kruskal's: shuffle every edge of the grid, carve those that join
    two different components. Components live in a DisjointSet keyed by cell index.
    """

    def __init__(self, grid, seed: int = None, start=(0, 0)):
        super().__init__(grid, seed=seed, start=start)
        width, height = self.grid.width, self.grid.height
        self.sets = DisjointSet(width * height)

        # Passages already carved count as joined
        for a, b in self.grid.passages():
            self.sets.union(self.index(a), self.index(b))

        # Right and bottom edge of every cell covers each pair once
        self.edges: List[Tuple[Cell, Cell]] = []
        for cell in self.grid:
            if cell.x < width - 1:
                self.edges.append((cell, self.grid[cell.y][cell.x + 1]))
            if cell.y < height - 1:
                self.edges.append((cell, self.grid[cell.y + 1][cell.x]))
        self.rng.shuffle(self.edges)
        self.cursor = 0

    def index(self, cell: Cell) -> int:
        return cell.y * self.grid.width + cell.x

    def advance(self) -> Optional[str]:
        edges = self.edges
        while self.cursor < len(edges) and self.sets.set_count > 1:
            a, b = edges[self.cursor]
            self.cursor += 1

            if not self.sets.union(self.index(a), self.index(b)):
                continue

            self.grid.remove_wall_between(a, b)
            a.visited = True
            b.visited = True
            return f"Components: {self.sets.set_count}"

        # One component left: cells joined by pre-carved passages are part of it too
        for cell in self.grid:
            cell.visited = True
        return None
