import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_stepper.core.complexity import MazeAnalyzer
from maze_stepper.core.errors import (
    ConcurrentRunRejected, InvalidDimension, InvalidInterval, InvalidPosition, UnknownAlgorithm
)
from maze_stepper.algo.base import RunKind
from maze_stepper.runner.session import MazeSession
from maze_stepper.runner.stepper import RunState, StepListener


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


class TestSession(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.session = MazeSession(8, 6, seed=5, animation_speed=0, clock=self.clock)

    def run_to_end(self):
        return self.session.run_blocking(sleep=self.clock.sleep)

    def test_size_bounds(self):
        with self.assertRaises(InvalidDimension):
            MazeSession(4, 10)
        with self.assertRaises(InvalidDimension):
            MazeSession(10, 101)
        with self.assertRaises(InvalidDimension):
            self.session.set_size(3, 3)

    def test_generate_then_solve(self):
        for gen_name in ("backtracking", "prims", "kruskals"):
            for solver_name in ("bfs", "astar", "dijkstra"):
                with self.subTest(generator=gen_name, solver=solver_name):
                    self.session.generate(algorithm=gen_name)
                    self.assertTrue(self.session.is_generating)
                    self.assertIs(self.run_to_end(), RunState.COMPLETED)
                    self.assertTrue(MazeAnalyzer.is_perfect(self.session.grid))
                    self.assertEqual(self.session.generation_metrics.step_count, 8 * 6 - 1)

                    self.session.solve(algorithm=solver_name)
                    self.assertTrue(self.session.is_solving)
                    self.assertIs(self.run_to_end(), RunState.COMPLETED)

                    path = self.session.path
                    self.assertTrue(MazeAnalyzer.is_valid_path(self.session.grid, path, (0, 0), (7, 5)))
                    metrics = self.session.solving_metrics
                    self.assertIs(metrics.kind, RunKind.SOLVING)
                    self.assertEqual(metrics.path_length, len(path))

    def test_generate_replaces_grid(self):
        first = self.session.grid
        self.session.generate()
        self.assertIsNot(self.session.grid, first)
        self.run_to_end()

        second = self.session.grid
        self.session.generate()
        self.assertIsNot(self.session.grid, second)
        # The previous maze is left alone
        self.assertTrue(MazeAnalyzer.is_perfect(second))

    def test_concurrent_run_rejected(self):
        self.session.generate()
        self.session.poll()
        grid = self.session.grid

        with self.assertRaises(ConcurrentRunRejected):
            self.session.generate()
        with self.assertRaises(ConcurrentRunRejected):
            self.session.solve()
        with self.assertRaises(ConcurrentRunRejected):
            self.session.set_size(10, 10)

        self.assertIs(self.session.grid, grid)
        self.assertIs(self.session.state, RunState.RUNNING)
        self.assertEqual(self.session.stepper.metrics.step_count, 1)

    def test_toggle_pause(self):
        self.session.generate()
        self.session.poll()
        self.session.toggle_pause()
        self.assertIs(self.session.state, RunState.PAUSED)
        self.assertIsNone(self.session.poll())

        self.session.set_animation_speed(25)
        self.session.toggle_pause()
        self.assertIs(self.session.state, RunState.RUNNING)
        self.assertEqual(self.session.stepper.interval_ms, 25)

    def test_custom_positions(self):
        self.session.generate()
        self.run_to_end()
        self.session.set_start_position((3, 2))
        self.session.set_end_position((0, 5))
        self.session.solve()
        self.run_to_end()
        self.assertEqual(self.session.path[0], (3, 2))
        self.assertEqual(self.session.path[-1], (0, 5))

        with self.assertRaises(InvalidPosition):
            self.session.set_end_position((8, 0))

    def test_solve_uncarved_fails(self):
        self.session.solve()
        self.assertIs(self.run_to_end(), RunState.FAILED)
        self.assertIn("No path found", self.session.stepper.failure_reason)
        self.assertIsNone(self.session.solving_metrics)

    def test_reset_keeps_settings(self):
        self.session.set_size(10, 12)
        self.session.set_animation_speed(75)
        self.session.generate(algorithm="prims")
        self.session.poll()
        self.session.reset()

        self.assertIs(self.session.state, RunState.IDLE)
        self.assertEqual((self.session.grid.width, self.session.grid.height), (10, 12))
        self.assertFalse(any(cell.visited for cell in self.session.grid))
        self.assertEqual(self.session.animation_speed, 75)
        self.assertIsNone(self.session.generation_metrics)

    def test_unknown_algorithm(self):
        with self.assertRaises(UnknownAlgorithm):
            self.session.generate(algorithm="eller")
        self.assertIs(self.session.state, RunState.IDLE)

    def test_negative_speed_rejected(self):
        with self.assertRaises(InvalidInterval):
            MazeSession(8, 6, animation_speed=-1)
        with self.assertRaises(InvalidInterval):
            self.session.set_animation_speed(-5)
        self.assertEqual(self.session.animation_speed, 0)

    def test_rejected_start_leaves_state_untouched(self):
        self.session.generate()
        self.run_to_end()
        self.session.solve()
        self.run_to_end()
        grid, path = self.session.grid, list(self.session.path)
        generation_metrics = self.session.generation_metrics
        solving_metrics = self.session.solving_metrics

        # Bypasses the setter, as a host writing the attribute would
        self.session.animation_speed = -5
        with self.assertRaises(InvalidInterval):
            self.session.generate()
        with self.assertRaises(InvalidInterval):
            self.session.solve(start=(1, 1))

        self.assertIs(self.session.grid, grid)
        self.assertEqual(self.session.path, path)
        self.assertEqual(self.session.start_position, (0, 0))
        self.assertIs(self.session.generation_metrics, generation_metrics)
        self.assertIs(self.session.solving_metrics, solving_metrics)
        self.assertIs(self.session.state, RunState.COMPLETED)
        self.assertTrue(all(grid.cell(x, y).is_path for x, y in path))

    def test_set_size_replaces_grid(self):
        self.session.generate()
        self.run_to_end()
        self.session.set_start_position((7, 5))
        self.session.set_size(10, 10)

        grid = self.session.grid
        self.assertEqual((grid.width, grid.height), (10, 10))
        self.assertFalse(any(cell.visited for cell in grid))
        self.assertIsNone(self.session.start_position)
        self.assertIsNone(self.session.generation_metrics)

        # Positions are checked against the new size
        self.session.set_start_position((8, 8))
        self.session.set_end_position((9, 0))
        self.session.generate()
        self.run_to_end()
        self.session.solve()
        self.assertIs(self.run_to_end(), RunState.COMPLETED)
        self.assertEqual(self.session.path[0], (8, 8))
        self.assertEqual(self.session.path[-1], (9, 0))

        self.session.set_size(5, 5)
        with self.assertRaises(InvalidPosition):
            self.session.set_start_position((8, 8))

    def test_listener_forwarding(self):
        events = []

        class Listener(StepListener):
            def on_complete(self, result, metrics):
                events.append(metrics.kind)

        session = MazeSession(5, 5, seed=1, animation_speed=0, listener=Listener(), clock=self.clock)
        session.generate()
        session.run_blocking(sleep=self.clock.sleep)
        session.solve()
        session.run_blocking(sleep=self.clock.sleep)
        self.assertEqual(events, [RunKind.GENERATION, RunKind.SOLVING])


if __name__ == '__main__':
    unittest.main()
