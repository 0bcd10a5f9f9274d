from typing import List, Optional, Tuple

from maze_stepper.core.grid import Cell
from maze_stepper.algo.base import Generator


class PrimsAlgorithm(Generator):
    """
    Randomized Prim's over wall candidates.

    The frontier holds (visited cell, unvisited neighbour) pairs. Each step draws
    one pair uniformly at random; pairs whose far cell got visited in the meantime
    are discarded without carving.
    """

    def __init__(self, grid, seed: int = None, start=(0, 0)):
        super().__init__(grid, seed=seed, start=start)
        start_cell = self.grid.cell(*self.start)
        start_cell.visited = True
        self.frontier: List[Tuple[Cell, Cell]] = []
        self.add_walls(start_cell)

    def add_walls(self, cell: Cell):
        for neighbor in self.grid.neighbors_of(cell):
            if not neighbor.visited:
                self.frontier.append((cell, neighbor))

    def advance(self) -> Optional[str]:
        frontier = self.frontier
        while frontier:
            # Pick random wall, swap remove for O(1)
            idx = self.rng.randrange(len(frontier))
            near, far = frontier[idx]
            frontier[idx] = frontier[-1]
            frontier.pop()

            if far.visited:
                continue

            self.grid.remove_wall_between(near, far)
            far.visited = True
            self.add_walls(far)
            return f"Frontier: {len(frontier)}"

        return None
