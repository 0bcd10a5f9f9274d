from collections import deque
from typing import Sequence

import numpy as np

from maze_stepper.core.grid import ALL_WALLS, Grid, Position, VISITED

# Number of set wall bits for every 4-bit wall mask
WALL_COUNT = np.array([bin(i).count("1") for i in range(16)], dtype=np.uint8)


class MazeAnalyzer:
    @staticmethod
    def calculate_stats(grid: Grid):
        walls = WALL_COUNT[grid.snapshot() & ALL_WALLS]

        dead_ends = int(np.count_nonzero(walls == 3))
        corridors = int(np.count_nonzero(walls == 2))
        intersections = int(np.count_nonzero(walls <= 1))  # 0, 1 walls

        total = grid.width * grid.height
        return {
            "dead_ends": dead_ends,
            "corridors": corridors,
            "intersections": intersections,
            "dead_end_percent": (dead_ends / total) * 100 if total > 0 else 0
        }

    @staticmethod
    def count_passages(grid: Grid) -> int:
        return sum(1 for _ in grid.passages())

    @staticmethod
    def all_visited(grid: Grid) -> bool:
        return bool(np.all(grid.snapshot() & VISITED))

    @staticmethod
    def is_connected(grid: Grid) -> bool:
        start = grid[0][0]
        seen = {start.position}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            for neighbor in grid.open_neighbors_of(cell):
                if neighbor.position not in seen:
                    seen.add(neighbor.position)
                    queue.append(neighbor)
        return len(seen) == len(grid)

    @staticmethod
    def is_perfect(grid: Grid) -> bool:
        """Connected with exactly cells-1 passages: a spanning tree."""
        return (MazeAnalyzer.count_passages(grid) == len(grid) - 1
                and MazeAnalyzer.is_connected(grid))

    @staticmethod
    def is_valid_path(grid: Grid, path: Sequence[Position], start: Position, end: Position) -> bool:
        if not path or tuple(path[0]) != tuple(start) or tuple(path[-1]) != tuple(end):
            return False
        for (x1, y1), (x2, y2) in zip(path, path[1:]):
            if not (grid.in_bounds((x1, y1)) and grid.in_bounds((x2, y2))):
                return False
            if not grid.is_passable(grid[y1][x1], grid[y2][x2]):
                return False
        return True
