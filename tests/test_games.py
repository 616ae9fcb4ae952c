import random

import pygame
import pytest

from headsteer.breakout import BALL_SPEED, LIVES, BreakoutGame, BreakoutState
from headsteer.control_types import BallState, Direction, PoseSample
from headsteer.game import HeadControlledGame
from headsteer.pipeline import HeadControlPipeline
from headsteer.resolvers import PaddleResolver, SnakeResolver
from headsteer.snake import MAX_SCORE, START_CELL, SnakeGame, SnakeState


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def headless(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    yield
    pygame.quit()


def test_breakout_starts_with_full_wall() -> None:
    state = BreakoutState()
    assert state.total_bricks == 35
    assert state.lives == LIVES
    assert state.ball == BallState(x=320, dx=BALL_SPEED, dy=-BALL_SPEED)


def test_breakout_brick_hit_scores_and_bounces() -> None:
    state = BreakoutState()
    state.ball_x, state.ball_y = 40, 40
    state.ball_dy = -BALL_SPEED
    assert state.step() is None
    assert state.score == 1
    assert state.ball_dy == BALL_SPEED
    assert not state.bricks[0].alive


def test_breakout_paddle_returns_ball() -> None:
    state = BreakoutState()
    state.ball_x, state.ball_y, state.ball_dy = 100, 468, BALL_SPEED
    state.paddle_x = 50
    assert state.step() is None
    assert state.ball_dy == -BALL_SPEED
    assert state.lives == LIVES


def test_breakout_missed_ball_costs_a_life_and_recenters() -> None:
    state = BreakoutState()
    state.ball_x, state.ball_y, state.ball_dy = 100, 468, BALL_SPEED
    state.paddle_x = 400
    assert state.step() is None
    assert state.lives == LIVES - 1
    assert state.lost_life
    assert state.paddle_x == 260
    assert state.ball_dy == -BALL_SPEED


def test_breakout_round_outcomes() -> None:
    state = BreakoutState()
    state.lives = 1
    state.ball_x, state.ball_y, state.ball_dy = 100, 468, BALL_SPEED
    state.paddle_x = 400
    assert state.step() == "Game Over"

    state.reset()
    state.score = state.total_bricks
    assert state.step() == "You Win!"


def test_breakout_ball_on_brick_edge_does_not_hit() -> None:
    # First brick spans x 30..105, y 30..50.
    for x, y in ((30, 40), (105, 40), (60, 30), (60, 50)):
        state = BreakoutState()
        state.ball_x, state.ball_y = x, y
        state.ball_dy = -BALL_SPEED
        assert state.step() is None
        assert state.score == 0
        assert state.bricks[0].alive


def test_breakout_game_recenters_paddle_control_after_lost_life(headless) -> None:
    resolver = PaddleResolver(canvas_width=640, paddle_width=120)
    pipeline = HeadControlPipeline(resolver, window_ms=200, clock=FakeClock(0.0))
    game = BreakoutGame(pipeline)
    game.start()
    pipeline.add_sample(PoseSample(timestamp=0.0, x=0.9, y=0.5))
    state = game.state
    state.ball_x, state.ball_y = 600, 468
    state.ball_dx, state.ball_dy = BALL_SPEED, BALL_SPEED

    assert game.update(1 / 60) is None
    assert state.lives == LIVES - 1
    assert state.paddle_x == 260
    assert resolver.position == 260.0


def test_game_without_hooks_cannot_be_built() -> None:
    class HalfGame(HeadControlledGame):
        def new_round(self) -> None:
            pass

    with pytest.raises(TypeError):
        HalfGame(HeadControlPipeline(SnakeResolver(), window_ms=500, clock=FakeClock()))


def _snake(rng_seed: int = 0) -> SnakeState:
    state = SnakeState(columns=32, rows=24, rng=random.Random(rng_seed))
    state.food = (0, 0)
    return state


def test_snake_moves_and_wraps() -> None:
    state = _snake()
    assert state.step(Direction.RIGHT) is None
    assert state.snake == [(START_CELL[0] + 1, START_CELL[1])]

    state.snake = [(31, 5)]
    state.step(Direction.RIGHT)
    assert state.snake == [(0, 5)]
    state.snake = [(4, 0)]
    state.step(Direction.UP)
    assert state.snake == [(4, 23)]


def test_snake_grows_on_food() -> None:
    state = _snake()
    state.snake = [(16, 15)]
    state.food = (17, 14)
    assert state.step(Direction.RIGHT) is None
    assert state.score == 1
    assert len(state.snake) == 2
    assert not set(state.food_cells()) & set(state.snake)


def test_snake_self_collision_ends_round() -> None:
    state = _snake()
    state.snake = [(5, 5), (6, 5), (6, 6), (5, 6), (4, 6)]
    assert state.step(Direction.DOWN) == "Game Over"


def test_snake_wins_at_max_score() -> None:
    state = _snake()
    state.snake = [(16, 15)]
    state.food = (17, 14)
    state.score = MAX_SCORE - 1
    assert state.step(Direction.RIGHT) == "You Win!"


def test_food_never_lands_on_snake() -> None:
    state = SnakeState(columns=32, rows=24, rng=random.Random(3))
    state.snake = [(x, y) for x in range(10) for y in range(24)]
    for _ in range(50):
        state.place_food()
        cells = state.food_cells()
        assert not set(cells) & set(state.snake)
        assert all(0 <= cx < 32 and 0 <= cy < 24 for cx, cy in cells)


def test_snake_game_applies_heading_only_on_tick(headless) -> None:
    clock = FakeClock(0.1)
    pipeline = HeadControlPipeline(SnakeResolver(), window_ms=500, clock=clock)
    game = SnakeGame(pipeline)
    game.start()
    game.state.food = (0, 0)
    pipeline.add_sample(PoseSample(timestamp=0.0, x=0.5, y=0.5))
    pipeline.add_sample(PoseSample(timestamp=0.05, x=0.5, y=0.4))
    pipeline.add_sample(PoseSample(timestamp=0.1, x=0.5, y=0.4))

    assert game.update(0.1) is None
    assert game.state.snake == [START_CELL]
    assert pipeline.resolver.pending is Direction.UP
    assert pipeline.resolver.committed is Direction.RIGHT

    assert game.update(0.06) is None
    assert pipeline.resolver.committed is Direction.UP
    assert game.state.snake == [(START_CELL[0], START_CELL[1] - 1)]
