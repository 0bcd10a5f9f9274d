from typing import List, Optional

from maze_stepper.core.grid import Cell
from maze_stepper.algo.base import Generator


class RecursiveBacktracker(Generator):
    """Depth-first backtracking: long winding corridors, few branches."""

    def __init__(self, grid, seed: int = None, start=(0, 0)):
        super().__init__(grid, seed=seed, start=start)
        start_cell = self.grid.cell(*self.start)
        start_cell.visited = True
        self.stack: List[Cell] = [start_cell]

    def advance(self) -> Optional[str]:
        stack = self.stack
        while stack:
            current = stack[-1]

            # Find unvisited neighbors
            neighbors = [n for n in self.grid.neighbors_of(current) if not n.visited]

            if not neighbors:
                # Backtrack
                stack.pop()
                continue

            # Choose random neighbor
            chosen = self.rng.choice(neighbors)

            # Carve
            self.grid.remove_wall_between(current, chosen)
            chosen.visited = True
            stack.append(chosen)
            return f"Carving... Stack: {len(stack)}"

        return None
