"""Entry point wiring together a game, the head-control pipeline and a pose source."""

from __future__ import annotations

import argparse
import logging
import time
from contextlib import ExitStack
from typing import Callable, List, Optional

import pygame

from headsteer.config import BREAKOUT_CONFIG, SNAKE_CONFIG, ControlConfig
from headsteer.control_types import PoseSample, PoseSource
from headsteer.game import HeadControlledGame
from headsteer.pipeline import HeadControlPipeline
from headsteer.resolvers import PaddleResolver, SnakeResolver

logger = logging.getLogger(__name__)


class KeyboardPoseSource(PoseSource):
    """Keyboard-only control for debugging without a camera.

    Arrow keys push a virtual chin around the normalized frame and every poll
    feeds it to the pipeline as a regular ``PoseSample``, so calibration,
    smoothing and the resolvers all run exactly as they do with a camera.
    ``recenter`` lets the chin drift back to the middle when no key is held.
    """

    def __init__(
        self,
        pipeline: HeadControlPipeline,
        speed: float = 0.6,
        recenter: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.pipeline = pipeline
        self.speed = speed
        self.recenter = recenter
        self.clock = clock
        self.x = 0.5
        self.y = 0.5
        self._last_poll: Optional[float] = None

    def poll(self) -> None:
        now = self.clock()
        dt = 0.0 if self._last_poll is None else now - self._last_poll
        self._last_poll = now

        keys = pygame.key.get_pressed()
        # Mirrored space: screen-left is a larger x.
        dx = float(keys[pygame.K_LEFT]) - float(keys[pygame.K_RIGHT])
        dy = float(keys[pygame.K_DOWN]) - float(keys[pygame.K_UP])
        if dx == 0.0 and dy == 0.0 and self.recenter:
            self.x += (0.5 - self.x) * min(1.0, 8.0 * dt)
            self.y += (0.5 - self.y) * min(1.0, 8.0 * dt)
        else:
            self.x = max(0.0, min(1.0, self.x + dx * self.speed * dt))
            self.y = max(0.0, min(1.0, self.y + dy * self.speed * dt))

        self.pipeline.add_sample(PoseSample(timestamp=now, x=self.x, y=self.y))

    def close(self) -> None:
        # Nothing to clean up for keyboard-only mode.
        return


def build_config(args: argparse.Namespace) -> ControlConfig:
    base = BREAKOUT_CONFIG if args.game == "breakout" else SNAKE_CONFIG
    return base.with_overrides(
        window_ms=args.window_ms,
        horizontal_threshold=args.horizontal_threshold,
        vertical_threshold=args.vertical_threshold,
        easing=args.easing,
        aim_assist=False if args.no_aim_assist else None,
    )


def build_game(game_name: str, config: ControlConfig) -> HeadControlledGame:
    """Create the pipeline for ``game_name`` and the game that consumes it."""

    if game_name == "breakout":
        from headsteer.breakout import CANVAS_WIDTH, PADDLE_WIDTH, BreakoutGame

        resolver = PaddleResolver(
            canvas_width=CANVAS_WIDTH,
            paddle_width=PADDLE_WIDTH,
            threshold=config.horizontal_threshold,
            easing=config.easing,
            aim_assist=config.aim_assist,
        )
        return BreakoutGame(HeadControlPipeline(resolver, window_ms=config.window_ms))

    from headsteer.snake import SnakeGame

    resolver = SnakeResolver(config.horizontal_threshold, config.vertical_threshold)
    return SnakeGame(HeadControlPipeline(resolver, window_ms=config.window_ms))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Breakout or Snake by moving your head.")
    parser.add_argument("--game", choices=["breakout", "snake"], default="breakout", help="Which game to play.")
    parser.add_argument("--no-camera", action="store_true", help="Steer a virtual chin with the arrow keys.")
    parser.add_argument("--camera-index", type=int, default=0, help="OpenCV camera index.")
    parser.add_argument(
        "--window-ms",
        type=float,
        default=None,
        help="Smoothing window in milliseconds (default: 200 for breakout, 500 for snake).",
    )
    parser.add_argument(
        "--horizontal-threshold",
        type=float,
        default=None,
        help="Horizontal dead zone in normalized units (default: 0.02 breakout, 0.03 snake).",
    )
    parser.add_argument(
        "--vertical-threshold",
        type=float,
        default=None,
        help="Vertical dead zone in normalized units (snake only, default 0.01).",
    )
    parser.add_argument("--easing", type=float, default=None, help="Paddle easing factor per update (0-1].")
    parser.add_argument("--no-aim-assist", action="store_true", help="Disable the breakout aim-assist snap.")
    parser.add_argument(
        "--show-debug-overlay",
        action="store_true",
        help="Show the camera feed with chin, neutral point and smoothed point.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # MediaPipe logs through absl and is chatty at INFO.
    logging.getLogger("absl").setLevel(logging.ERROR)

    config = build_config(args)
    logger.info("Starting %s with %s", args.game, config)
    game = build_game(args.game, config)

    # ExitStack keeps teardown localized and explicit without function attributes.
    with ExitStack() as stack:
        source: PoseSource
        if args.no_camera:
            source = KeyboardPoseSource(game.pipeline, recenter=args.game == "snake")
        else:
            from headsteer.vision import VisionPoseSource

            source = VisionPoseSource(
                game.pipeline,
                camera_index=args.camera_index,
                show_debug_overlay=args.show_debug_overlay,
                horizontal_threshold=config.horizontal_threshold,
                vertical_threshold=config.vertical_threshold,
            )
        # Register cleanup immediately so camera handles are released even if the loop raises.
        stack.callback(source.close)
        game.run(source)


if __name__ == "__main__":
    main()
