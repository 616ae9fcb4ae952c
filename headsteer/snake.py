"""Grid Snake steered by leaning the head, one heading commit per tick."""

from __future__ import annotations

import random
from typing import List, Optional, Tuple

import pygame

from headsteer.control_types import Direction
from headsteer.game import HeadControlledGame
from headsteer.pipeline import HeadControlPipeline

GRID_SIZE = 20
CANVAS_WIDTH = 640
CANVAS_HEIGHT = 480
START_CELL = (15, 15)
TICK_SECONDS = 0.15
FOOD_SIZE = 3
MAX_SCORE = 5

HEAD_COLOR = (74, 222, 128)
BODY_COLOR = (34, 197, 94)
FOOD_COLOR = (239, 68, 68)

_STEPS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

Cell = Tuple[int, int]


class SnakeState:
    """Snake body, food and score on a wrapping grid."""

    def __init__(self, columns: int, rows: int, rng: Optional[random.Random] = None) -> None:
        self.columns = columns
        self.rows = rows
        self.rng = rng or random.Random()
        self.reset()

    def reset(self) -> None:
        self.snake: List[Cell] = [START_CELL]
        self.score = 0
        self.place_food()

    def food_cells(self) -> List[Cell]:
        fx, fy = self.food
        return [(fx + i, fy + j) for i in range(FOOD_SIZE) for j in range(FOOD_SIZE)]

    def place_food(self) -> None:
        # Keep the 3x3 block fully on the grid and off the snake.
        while True:
            self.food = (
                self.rng.randrange(self.columns - FOOD_SIZE + 1),
                self.rng.randrange(self.rows - FOOD_SIZE + 1),
            )
            if not set(self.food_cells()) & set(self.snake):
                return

    def step(self, direction: Direction) -> Optional[str]:
        """Move one cell; return an outcome when the round is over."""

        dx, dy = _STEPS[direction]
        hx, hy = self.snake[0]
        head = ((hx + dx) % self.columns, (hy + dy) % self.rows)

        if head in self.snake[1:]:
            return "Game Over"

        self.snake.insert(0, head)
        if head in self.food_cells():
            self.score += 1
            if self.score >= MAX_SCORE:
                return "You Win!"
            self.place_food()
        else:
            self.snake.pop()
        return None


class SnakeGame(HeadControlledGame):
    title = "Head Snake"
    width = CANVAS_WIDTH
    height = CANVAS_HEIGHT

    def __init__(self, pipeline: HeadControlPipeline, tick_seconds: float = TICK_SECONDS) -> None:
        super().__init__(pipeline)
        self.tick_seconds = tick_seconds
        self.state = SnakeState(self.width // GRID_SIZE, self.height // GRID_SIZE)
        self.elapsed = 0.0
        self._tick_accumulator = 0.0

    def new_round(self) -> None:
        self.state.reset()
        self.elapsed = 0.0
        self._tick_accumulator = 0.0

    def update(self, dt: float) -> Optional[str]:
        # Headings are decided every frame but only applied on a tick.
        self.pipeline.resolve()
        self.elapsed += dt
        self._tick_accumulator += dt
        while self._tick_accumulator >= self.tick_seconds:
            self._tick_accumulator -= self.tick_seconds
            command = self.pipeline.commit_heading()
            outcome = self.state.step(command.value if command else Direction.RIGHT)
            if outcome:
                return outcome
        return None

    def hud_items(self) -> Tuple[str, ...]:
        return (f"Score: {self.state.score}", f"Time: {self.elapsed:.1f}s")

    def final_score(self) -> int:
        return self.state.score

    def draw_playfield(self, canvas: pygame.Surface) -> None:
        for cx, cy in self.state.food_cells():
            pygame.draw.rect(canvas, FOOD_COLOR, (cx * GRID_SIZE, cy * GRID_SIZE, GRID_SIZE - 1, GRID_SIZE - 1))
        for idx, (cx, cy) in enumerate(self.state.snake):
            color = HEAD_COLOR if idx == 0 else BODY_COLOR
            pygame.draw.rect(canvas, color, (cx * GRID_SIZE, cy * GRID_SIZE, GRID_SIZE - 1, GRID_SIZE - 1))
