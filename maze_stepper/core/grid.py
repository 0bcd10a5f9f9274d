import random
from typing import Iterator, List, Optional, Tuple

import numpy as np

from maze_stepper.core.errors import InvalidAdjacency, InvalidDimension

Position = Tuple[int, int]

# Bitmask Constants
TOP    = 0b00000001
RIGHT  = 0b00000010
BOTTOM = 0b00000100
LEFT   = 0b00001000

# Snapshot flags
VISITED = 0b00010000
PATH    = 0b00100000

# All walls present by default (T|R|B|L) = 15
ALL_WALLS = TOP | RIGHT | BOTTOM | LEFT

# Neighbour order matters: generators pick by index from this order.
DIRECTIONS = (TOP, RIGHT, BOTTOM, LEFT)
DX = {TOP: 0, RIGHT: 1, BOTTOM: 0, LEFT: -1}
DY = {TOP: -1, RIGHT: 0, BOTTOM: 1, LEFT: 0}
OPPOSITE = {TOP: BOTTOM, BOTTOM: TOP, RIGHT: LEFT, LEFT: RIGHT}


class Cell:
    __slots__ = ('x', 'y', 'walls', 'visited', 'is_path')

    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y
        self.walls = ALL_WALLS
        self.visited = False
        self.is_path = False

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    @property
    def top(self) -> bool:
        return bool(self.walls & TOP)

    @property
    def right(self) -> bool:
        return bool(self.walls & RIGHT)

    @property
    def bottom(self) -> bool:
        return bool(self.walls & BOTTOM)

    @property
    def left(self) -> bool:
        return bool(self.walls & LEFT)

    def has_wall(self, dir_bit: int) -> bool:
        return (self.walls & dir_bit) != 0

    def flags(self) -> int:
        value = self.walls
        if self.visited:
            value |= VISITED
        if self.is_path:
            value |= PATH
        return value

    def __repr__(self):
        return f"Cell({self.x}, {self.y}, walls={self.walls:04b})"


class Grid:
    """
    Rectangular maze grid, `height` rows of `width` cells, addressed as grid[y][x].
    Every cell starts with all four walls and visited=False.
    """

    __slots__ = ('width', 'height', 'rows')

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise InvalidDimension(width, height)
        self.width = width
        self.height = height
        self.rows: List[List[Cell]] = [[Cell(x, y) for x in range(width)] for y in range(height)]

    def __getitem__(self, y: int) -> List[Cell]:
        return self.rows[y]

    def __iter__(self) -> Iterator[Cell]:
        for row in self.rows:
            yield from row

    def __len__(self) -> int:
        return self.width * self.height

    def get_index(self, x: int, y: int) -> int:
        if 0 <= x < self.width and 0 <= y < self.height:
            return y * self.width + x
        raise IndexError(f"Coordinate ({x}, {y}) out of bounds")

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Coordinate ({x}, {y}) out of bounds")
        return self.rows[y][x]

    def cell_at(self, pos: Position) -> Optional[Cell]:
        if not self.in_bounds(pos):
            return None
        return self.rows[pos[1]][pos[0]]

    def random_position(self, rng: Optional[random.Random] = None) -> Position:
        rng = rng or random.Random()
        return (rng.randrange(self.width), rng.randrange(self.height))

    def neighbors_of(self, cell: Cell) -> List[Cell]:
        """
        Grid-adjacent cells in top, right, bottom, left order.
        Does NOT check walls (that's for pathfinding).
        """
        return [n for n, _ in self.neighbors_with_direction(cell)]

    def neighbors_with_direction(self, cell: Cell) -> Iterator[Tuple[Cell, int]]:
        x, y = cell.x, cell.y
        # Top
        if y > 0:
            yield self.rows[y - 1][x], TOP
        # Right
        if x < self.width - 1:
            yield self.rows[y][x + 1], RIGHT
        # Bottom
        if y < self.height - 1:
            yield self.rows[y + 1][x], BOTTOM
        # Left
        if x > 0:
            yield self.rows[y][x - 1], LEFT

    def open_neighbors_of(self, cell: Cell) -> Iterator[Cell]:
        """Yields neighbours reachable from `cell` without crossing a wall."""
        for neighbor, dir_bit in self.neighbors_with_direction(cell):
            if not (cell.walls & dir_bit) and not (neighbor.walls & OPPOSITE[dir_bit]):
                yield neighbor

    def direction_between(self, a: Cell, b: Cell) -> Optional[int]:
        dx, dy = b.x - a.x, b.y - a.y
        for dir_bit in DIRECTIONS:
            if DX[dir_bit] == dx and DY[dir_bit] == dy:
                return dir_bit
        return None

    def remove_wall_between(self, a: Cell, b: Cell):
        """
        Removes the wall on `a` facing `b` and the opposite wall on `b`.
        Carving an already open pair is a no-op.
        """
        dir_bit = self.direction_between(a, b)
        if dir_bit is None:
            raise InvalidAdjacency(f"Cannot remove wall between non-adjacent cells {a.position} and {b.position}")
        a.walls &= ~dir_bit
        b.walls &= ~OPPOSITE[dir_bit]

    def is_passable(self, a: Cell, b: Cell) -> bool:
        dir_bit = self.direction_between(a, b)
        if dir_bit is None:
            return False
        return not (a.walls & dir_bit) and not (b.walls & OPPOSITE[dir_bit])

    def passages(self) -> Iterator[Tuple[Cell, Cell]]:
        """Every carved adjacency, once (looking right and down only)."""
        for cell in self:
            if cell.x < self.width - 1:
                right = self.rows[cell.y][cell.x + 1]
                if self.is_passable(cell, right):
                    yield cell, right
            if cell.y < self.height - 1:
                below = self.rows[cell.y + 1][cell.x]
                if self.is_passable(cell, below):
                    yield cell, below

    def mark_path(self, path):
        # Validate every position before marking any
        cells = [self.cell(x, y) for x, y in path]
        for cell in cells:
            cell.is_path = True

    def clear_path(self):
        for cell in self:
            cell.is_path = False

    def snapshot(self) -> np.ndarray:
        """Read-only (height, width) uint8 array of wall/visited/path bits."""
        snap = np.fromiter((cell.flags() for cell in self), dtype=np.uint8, count=len(self))
        snap = snap.reshape(self.height, self.width)
        snap.flags.writeable = False
        return snap


def create_grid(width: int, height: int) -> Grid:
    return Grid(width, height)
