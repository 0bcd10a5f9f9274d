import unittest
import sys
import os

# Add project root to path so we can import maze_stepper
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_stepper.core.errors import InvalidAdjacency, InvalidDimension
from maze_stepper.core.grid import (
    ALL_WALLS, BOTTOM, LEFT, PATH, RIGHT, TOP, VISITED, Grid, create_grid
)


class TestGrid(unittest.TestCase):
    def test_initialization(self):
        w, h = 10, 7
        grid = create_grid(w, h)
        self.assertEqual(len(grid), w * h)
        self.assertEqual(len(grid.rows), h)
        self.assertEqual(len(grid[0]), w)
        for cell in grid:
            self.assertEqual(cell.walls, ALL_WALLS)
            self.assertFalse(cell.visited)
            self.assertFalse(cell.is_path)

    def test_positions_match_index(self):
        grid = create_grid(4, 3)
        for y in range(3):
            for x in range(4):
                self.assertEqual(grid[y][x].position, (x, y))

    def test_invalid_dimensions(self):
        with self.assertRaises(InvalidDimension):
            create_grid(0, 5)
        with self.assertRaises(InvalidDimension):
            create_grid(5, -1)
        # Also a ValueError for callers that only know the builtin
        with self.assertRaises(ValueError):
            Grid(0, 0)

    def test_single_cell_grid(self):
        grid = create_grid(1, 1)
        self.assertEqual(grid.neighbors_of(grid[0][0]), [])

    def test_coordinates(self):
        grid = Grid(5, 5)
        self.assertEqual(grid.get_index(2, 2), 12) # 2 * 5 + 2

        with self.assertRaises(IndexError):
            grid.get_index(-1, 0)
        with self.assertRaises(IndexError):
            grid.get_index(0, 5)
        self.assertIsNone(grid.cell_at((5, 0)))
        self.assertIs(grid.cell_at((1, 2)), grid[2][1])

    def test_neighbor_order(self):
        grid = Grid(3, 3)
        center = grid[1][1]
        positions = [n.position for n in grid.neighbors_of(center)]
        # top, right, bottom, left
        self.assertEqual(positions, [(1, 0), (2, 1), (1, 2), (0, 1)])

        # Corner cell (0,0) only has right and bottom
        corner = [n.position for n in grid.neighbors_of(grid[0][0])]
        self.assertEqual(corner, [(1, 0), (0, 1)])

    def test_remove_wall_between(self):
        grid = Grid(2, 2)
        a, b = grid[0][0], grid[0][1]
        grid.remove_wall_between(a, b)

        self.assertFalse(a.right)
        self.assertFalse(b.left)
        # Others remain
        self.assertTrue(a.top)
        self.assertTrue(a.bottom)
        self.assertTrue(b.right)

        c = grid[1][0]
        grid.remove_wall_between(c, a)
        self.assertFalse(c.top)
        self.assertFalse(a.bottom)

    def test_remove_wall_is_idempotent(self):
        grid = Grid(2, 1)
        a, b = grid[0][0], grid[0][1]
        grid.remove_wall_between(a, b)
        grid.remove_wall_between(b, a)
        self.assertEqual(a.walls, ALL_WALLS & ~RIGHT)
        self.assertEqual(b.walls, ALL_WALLS & ~LEFT)

    def test_remove_wall_non_adjacent(self):
        grid = Grid(3, 3)
        with self.assertRaises(InvalidAdjacency):
            grid.remove_wall_between(grid[0][0], grid[1][1])
        with self.assertRaises(InvalidAdjacency):
            grid.remove_wall_between(grid[0][0], grid[0][2])
        with self.assertRaises(InvalidAdjacency):
            grid.remove_wall_between(grid[0][0], grid[0][0])

    def test_is_passable_symmetric(self):
        grid = Grid(3, 3)
        grid.remove_wall_between(grid[1][1], grid[1][2])
        for cell in grid:
            for neighbor in grid.neighbors_of(cell):
                self.assertEqual(grid.is_passable(cell, neighbor), grid.is_passable(neighbor, cell))
        self.assertTrue(grid.is_passable(grid[1][2], grid[1][1]))
        self.assertFalse(grid.is_passable(grid[0][0], grid[1][1]))

    def test_is_passable_requires_both_sides(self):
        grid = Grid(2, 1)
        a, b = grid[0][0], grid[0][1]
        a.walls &= ~RIGHT # one-sided opening
        self.assertFalse(grid.is_passable(a, b))
        self.assertFalse(grid.is_passable(b, a))
        self.assertEqual(list(grid.open_neighbors_of(a)), [])

    def test_passages(self):
        grid = Grid(3, 2)
        grid.remove_wall_between(grid[0][0], grid[0][1])
        grid.remove_wall_between(grid[0][1], grid[1][1])
        pairs = [(a.position, b.position) for a, b in grid.passages()]
        self.assertEqual(pairs, [((0, 0), (1, 0)), ((1, 0), (1, 1))])

    def test_snapshot(self):
        grid = Grid(3, 2)
        grid.remove_wall_between(grid[0][0], grid[1][0])
        grid[0][0].visited = True
        grid.mark_path([(2, 1)])

        snap = grid.snapshot()
        self.assertEqual(snap.shape, (2, 3))
        self.assertEqual(snap[0, 0], (ALL_WALLS & ~BOTTOM) | VISITED)
        self.assertEqual(snap[1, 0], ALL_WALLS & ~TOP)
        self.assertEqual(snap[1, 2], ALL_WALLS | PATH)
        self.assertFalse(snap.flags.writeable)

        # Later mutation does not leak into an earlier snapshot
        grid.clear_path()
        self.assertEqual(snap[1, 2], ALL_WALLS | PATH)
        self.assertFalse(grid[1][2].is_path)

    def test_random_position(self):
        import random
        grid = Grid(6, 4)
        rng = random.Random(3)
        for _ in range(50):
            self.assertTrue(grid.in_bounds(grid.random_position(rng)))
        self.assertTrue(grid.in_bounds(grid.random_position()))

    def test_random_position_rng_is_optional(self):
        import random
        from typing import Optional, get_type_hints
        hints = get_type_hints(Grid.random_position)
        self.assertEqual(hints["rng"], Optional[random.Random])

    def test_mark_path_rejects_out_of_bounds(self):
        grid = Grid(3, 3)
        # Negative coordinates must not wrap to the far edge
        for path in ([(-1, 0)], [(0, 0), (0, -1)], [(3, 1)]):
            with self.assertRaises(IndexError):
                grid.mark_path(path)
        self.assertFalse(any(cell.is_path for cell in grid))


if __name__ == '__main__':
    unittest.main()
