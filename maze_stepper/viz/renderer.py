import logging
import math

import pygame

from maze_stepper.core.errors import MazeError
from maze_stepper.runner.session import MazeSession
from maze_stepper.runner.stepper import RunState, StepListener

logger = logging.getLogger(__name__)


class Renderer(StepListener):
    """
    pygame front-end for a MazeSession: polls the session once per frame and draws
    whatever grid state and path it currently holds.

    Keys: G generate, S solve, SPACE pause/resume, R reset, ESC quit.
    Mouse: left click sets the start cell, right click the end cell.
    """
    COLOR_BG = (10, 10, 10)
    COLOR_WALL = (200, 200, 200)
    COLOR_VISITED = (60, 100, 160)# Blue tint
    COLOR_SOLUTION = (255, 215, 0)# Gold
    COLOR_START = (40, 180, 80)
    COLOR_END = (220, 30, 30)
    COLOR_TEXT = (255, 255, 255)
    COLOR_ERROR = (255, 90, 90)

    def __init__(self, session: MazeSession, width=1280, height=720):
        self.session = session
        session.listener = self
        self.screen_width = width
        self.screen_height = height

        # Camera
        self.cell_size = 20.0  # Pixels per cell
        self.offset_x = 0.0
        self.offset_y = 0.0

        self.font = None
        self.running = True
        self.clock = None
        self.surface = None
        self.status = "Idle"
        self.message = ""
        self.error = ""

    def fit_to_screen(self):
        """Auto-adjust zoom and pan to fit the entire grid on screen with padding."""
        padding = 40
        grid = self.session.grid
        available_w = self.screen_width - (padding * 2)
        available_h = self.screen_height - (padding * 2)

        # Taking minimum zoom to fit both dimensions
        self.cell_size = min(available_w / grid.width, available_h / grid.height)

        # Center
        self.offset_x = (self.screen_width - grid.width * self.cell_size) / 2
        self.offset_y = (self.screen_height - grid.height * self.cell_size) / 2

    def init_window(self):
        pygame.init()
        grid = self.session.grid
        pygame.display.set_caption(f"Maze Stepper - {grid.width}x{grid.height}")
        self.surface = pygame.display.set_mode((self.screen_width, self.screen_height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("Consolas", 16)
        self.fit_to_screen()

    def screen_to_world(self, sx, sy):
        wx = (sx - self.offset_x) / self.cell_size
        wy = (sy - self.offset_y) / self.cell_size
        return math.floor(wx), math.floor(wy)

    # StepListener

    def on_state_change(self, old, new):
        self.status = new.value.capitalize()

    def on_step(self, result):
        self.message = result.message

    def on_complete(self, result, metrics):
        if metrics.cells_explored is None:
            self.message = f"Carved in {metrics.step_count} steps, {metrics.elapsed_time_ms:.0f} ms"
        else:
            self.message = (f"Path {metrics.path_length} cells, explored {metrics.cells_explored}, "
                            f"{metrics.elapsed_time_ms:.0f} ms")

    def on_failed(self, reason):
        self.error = reason

    # Input

    def run_action(self, action, *args):
        """Collaborator-side errors are shown on the HUD instead of closing the window."""
        self.error = ""
        try:
            action(*args)
        except MazeError as exc:
            logger.warning(str(exc))
            self.error = str(exc)

    def handle_key(self, key):
        session = self.session
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_g:
            self.run_action(session.generate)
            self.fit_to_screen()
        elif key == pygame.K_s:
            self.run_action(session.solve)
        elif key == pygame.K_SPACE:
            self.run_action(session.toggle_pause)
        elif key == pygame.K_r:
            self.run_action(session.reset)
            self.message = ""

    def handle_input(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.screen_width, self.screen_height = event.w, event.h
                self.fit_to_screen()

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3):
                pos = self.screen_to_world(*event.pos)
                if self.session.grid.in_bounds(pos):
                    if event.button == 1:
                        self.run_action(self.session.set_start_position, pos)
                    else:
                        self.run_action(self.session.set_end_position, pos)

    # Drawing

    def draw_grid(self):
        self.surface.fill(self.COLOR_BG)
        grid = self.session.grid
        size = int(self.cell_size) + 1
        draw_walls = self.cell_size > 4.0

        path_cells = set(self.session.path)
        markers = {self.session.start_position: self.COLOR_START,
                   self.session.end_position: self.COLOR_END}

        # 1. Backgrounds
        for cell in grid:
            px = int(cell.x * self.cell_size + self.offset_x)
            py = int(cell.y * self.cell_size + self.offset_y)

            color = None
            if cell.position in markers:
                color = markers[cell.position]
            elif cell.position in path_cells or cell.is_path:
                color = self.COLOR_SOLUTION
            elif cell.visited:
                color = self.COLOR_VISITED
            if color:
                pygame.draw.rect(self.surface, color, (px, py, size, size))

        # 2. Walls
        if draw_walls:
            wall_color = self.COLOR_WALL
            for cell in grid:
                px = int(cell.x * self.cell_size + self.offset_x)
                py = int(cell.y * self.cell_size + self.offset_y)
                if cell.bottom:
                    pygame.draw.line(self.surface, wall_color, (px, py + size), (px + size, py + size), 1)
                if cell.right:
                    pygame.draw.line(self.surface, wall_color, (px + size, py), (px + size, py + size), 1)
                if cell.y == 0 and cell.top:
                    pygame.draw.line(self.surface, wall_color, (px, py), (px + size, py), 1)
                if cell.x == 0 and cell.left:
                    pygame.draw.line(self.surface, wall_color, (px, py), (px, py + size), 1)

    def draw_hud(self):
        grid = self.session.grid
        metrics = self.session.stepper.metrics
        steps = metrics.step_count if metrics else 0
        info = [
            (f"FPS: {int(self.clock.get_fps())}", self.COLOR_TEXT),
            (f"Size: {grid.width}x{grid.height}", self.COLOR_TEXT),
            (f"Algorithms: {self.session.generation_algorithm} / {self.session.solving_algorithm}", self.COLOR_TEXT),
            (f"Status: {self.status}  Steps: {steps}", self.COLOR_TEXT),
            (self.message, self.COLOR_TEXT),
            (self.error, self.COLOR_ERROR),
        ]

        for i, (text, color) in enumerate(info):
            if text:
                lbl = self.font.render(text, True, color)
                self.surface.blit(lbl, (10, 10 + i * 20))

    def run_loop(self):
        while self.running:
            self.handle_input()

            # At most one step per frame; the stepper decides whether it is due
            self.session.poll()

            self.draw_grid()
            self.draw_hud()
            pygame.display.flip()
            self.clock.tick(60)

        if self.session.state in (RunState.RUNNING, RunState.PAUSED):
            self.session.reset()
        pygame.quit()
