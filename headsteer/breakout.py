"""Breakout driven by chin position, with aim-assist while the ball falls.

``BreakoutState`` is plain game state (no window needed) so the physics can be
tested on its own; ``BreakoutGame`` renders it and feeds the pipeline's
``TargetPosition`` into the paddle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pygame

from headsteer.control_types import BallState, TargetPosition
from headsteer.game import HeadControlledGame
from headsteer.pipeline import HeadControlPipeline

CANVAS_WIDTH = 640
CANVAS_HEIGHT = 480
PADDLE_WIDTH = 120
PADDLE_HEIGHT = 15
BALL_RADIUS = 10
BALL_SPEED = 4  # Pixels per frame on each axis.
LIVES = 3
BRICK_ROWS = 5
BRICK_COLUMNS = 7
BRICK_WIDTH = 75
BRICK_HEIGHT = 20
BRICK_PADDING = 10
BRICK_OFFSET_TOP = 30
BRICK_OFFSET_LEFT = 30

BRICK_COLOR = (249, 115, 22)
PADDLE_COLOR = (96, 165, 250)
BALL_COLOR = (74, 222, 128)


@dataclass
class Brick:
    rect: pygame.Rect
    alive: bool = True


class BreakoutState:
    """Ball, paddle, bricks, score and lives for one round."""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT) -> None:
        self.width = width
        self.height = height
        self.reset()

    def reset(self) -> None:
        self.score = 0
        self.lives = LIVES
        self.lost_life = False
        self.bricks: List[Brick] = self._create_bricks()
        self._reset_ball_and_paddle()

    def _reset_ball_and_paddle(self) -> None:
        self.ball_x = self.width / 2
        self.ball_y = self.height - 30
        self.ball_dx = BALL_SPEED
        self.ball_dy = -BALL_SPEED
        self.paddle_x = (self.width - PADDLE_WIDTH) / 2

    @staticmethod
    def _create_bricks() -> List[Brick]:
        bricks: List[Brick] = []
        for col in range(BRICK_COLUMNS):
            for row in range(BRICK_ROWS):
                x = col * (BRICK_WIDTH + BRICK_PADDING) + BRICK_OFFSET_LEFT
                y = row * (BRICK_HEIGHT + BRICK_PADDING) + BRICK_OFFSET_TOP
                bricks.append(Brick(pygame.Rect(x, y, BRICK_WIDTH, BRICK_HEIGHT)))
        return bricks

    @property
    def ball(self) -> BallState:
        return BallState(x=self.ball_x, dx=self.ball_dx, dy=self.ball_dy)

    @property
    def total_bricks(self) -> int:
        return len(self.bricks)

    def _hit_bricks(self) -> None:
        for brick in self.bricks:
            rect = brick.rect
            # Strict on every side: a ball exactly on an edge does not hit.
            inside = rect.left < self.ball_x < rect.right and rect.top < self.ball_y < rect.bottom
            if brick.alive and inside:
                self.ball_dy = -self.ball_dy
                brick.alive = False
                self.score += 1

    def step(self) -> Optional[str]:
        """Advance one frame; return ``"You Win!"`` or ``"Game Over"`` when the round ends.

        Returns ``None`` while play continues. A missed ball costs a life and
        recenters ball and paddle; the caller is expected to recenter its
        paddle controller as well (see ``lost_life``).
        """

        self.lost_life = False
        self._hit_bricks()
        if self.score == self.total_bricks:
            return "You Win!"

        next_x = self.ball_x + self.ball_dx
        next_y = self.ball_y + self.ball_dy
        if next_x > self.width - BALL_RADIUS or next_x < BALL_RADIUS:
            self.ball_dx = -self.ball_dx
        if next_y < BALL_RADIUS:
            self.ball_dy = -self.ball_dy
        elif next_y > self.height - BALL_RADIUS:
            if self.paddle_x < self.ball_x < self.paddle_x + PADDLE_WIDTH:
                self.ball_dy = -self.ball_dy
            else:
                self.lives -= 1
                self.lost_life = True
                if self.lives <= 0:
                    return "Game Over"
                self._reset_ball_and_paddle()

        self.ball_x += self.ball_dx
        self.ball_y += self.ball_dy
        return None


class BreakoutGame(HeadControlledGame):
    title = "Head Breakout"
    width = CANVAS_WIDTH
    height = CANVAS_HEIGHT

    def __init__(self, pipeline: HeadControlPipeline) -> None:
        super().__init__(pipeline)
        self.state = BreakoutState(self.width, self.height)

    def new_round(self) -> None:
        self.state.reset()

    def update(self, dt: float) -> Optional[str]:
        output = self.pipeline.resolve(ball=self.state.ball)
        if isinstance(output, TargetPosition):
            self.state.paddle_x = output.x

        outcome = self.state.step()
        if self.state.lost_life and outcome is None:
            # Restart the easing from the middle, matching the recentered paddle.
            self.pipeline.resolver.reset()
        return outcome

    def hud_items(self) -> Tuple[str, ...]:
        return (f"Score: {self.state.score}", f"Lives: {self.state.lives}")

    def final_score(self) -> int:
        return self.state.score

    def draw_playfield(self, canvas: pygame.Surface) -> None:
        state = self.state
        for brick in state.bricks:
            if brick.alive:
                pygame.draw.rect(canvas, BRICK_COLOR, brick.rect)
        paddle = pygame.Rect(int(state.paddle_x), self.height - PADDLE_HEIGHT, PADDLE_WIDTH, PADDLE_HEIGHT)
        pygame.draw.rect(canvas, PADDLE_COLOR, paddle)
        pygame.draw.circle(canvas, BALL_COLOR, (int(state.ball_x), int(state.ball_y)), BALL_RADIUS)
