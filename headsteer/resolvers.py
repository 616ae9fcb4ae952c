"""Control policies that turn a smoothed chin position into game input.

``PaddleResolver`` drives a continuous paddle and can snap it under the ball
when the player leans the right way ("aim-assist"). ``SnakeResolver`` turns
lean into a discrete heading with per-axis dead zones and never allows a 180
degree reversal.
"""

from __future__ import annotations

import logging
from typing import Optional

from headsteer.control_types import (
    BallState,
    ControlOutput,
    Direction,
    DirectionCommand,
    NeutralPosition,
    SmoothedPosition,
    TargetPosition,
)
from headsteer.smoothing import ExponentialEaser

logger = logging.getLogger(__name__)


def classify_horizontal(h_diff: float, threshold: float) -> Optional[Direction]:
    """Map a neutral-relative horizontal offset to an on-screen direction.

    The detector space is mirrored: a positive offset means the head moved
    to the player's right, which is screen-left.
    """

    if h_diff > threshold:
        return Direction.LEFT
    if h_diff < -threshold:
        return Direction.RIGHT
    return None


class PaddleResolver:
    """Continuous paddle targeting with optional aim-assist.

    The resolver owns the eased paddle position; each call moves it a fixed
    fraction toward the current target and clamps it to the canvas.
    """

    def __init__(
        self,
        canvas_width: float,
        paddle_width: float,
        threshold: float = 0.02,
        easing: float = 0.2,
        aim_assist: bool = True,
    ) -> None:
        self.canvas_width = float(canvas_width)
        self.paddle_width = float(paddle_width)
        self.threshold = threshold
        self.aim_assist = aim_assist
        self._easer = ExponentialEaser(k=easing, value=self.home_position)

    @property
    def home_position(self) -> float:
        return (self.canvas_width - self.paddle_width) / 2

    @property
    def position(self) -> float:
        return self._easer.value

    @position.setter
    def position(self, value: float) -> None:
        self._easer.value = float(value)

    def reset(self) -> None:
        self._easer.value = self.home_position

    def direct_target(self, avg_x: float) -> float:
        # ``1 - x`` undoes the mirroring so leaning right moves the paddle right on screen.
        return (1 - avg_x) * self.canvas_width - self.paddle_width / 2

    def target_x(
        self,
        avg_x: float,
        neutral: Optional[NeutralPosition],
        session_active: bool,
        ball: Optional[BallState],
    ) -> float:
        """Pick the raw (un-eased) paddle target for this update."""

        assist_possible = (
            self.aim_assist and session_active and neutral is not None and ball is not None and ball.dy > 0
        )
        if not assist_possible:
            return self.direct_target(avg_x)

        user_direction = classify_horizontal(avg_x - neutral.x, self.threshold)
        required = Direction.RIGHT if ball.dx > 0 else Direction.LEFT
        if user_direction == required:
            return ball.x - self.paddle_width / 2
        # Leaning the wrong way, or not at all, gets no help.
        return self.direct_target(avg_x)

    def resolve(
        self,
        average: SmoothedPosition,
        neutral: Optional[NeutralPosition],
        session_active: bool,
        ball: Optional[BallState] = None,
    ) -> Optional[ControlOutput]:
        target = self.target_x(average.x, neutral, session_active, ball)
        eased = self._easer.update(target)
        clamped = max(0.0, min(self.canvas_width - self.paddle_width, eased))
        self._easer.value = clamped
        return TargetPosition(x=clamped)


class SnakeResolver:
    """Discrete heading with dead zones, reversal suppression and tick commits.

    Decisions land in ``pending``; the game applies them with ``commit()`` at
    the start of its own tick so a heading never changes mid-move.
    """

    def __init__(self, horizontal_threshold: float = 0.03, vertical_threshold: float = 0.01) -> None:
        self.horizontal_threshold = horizontal_threshold
        self.vertical_threshold = vertical_threshold
        self.committed = Direction.RIGHT
        self.pending = Direction.RIGHT

    def reset(self) -> None:
        self.committed = Direction.RIGHT
        self.pending = Direction.RIGHT

    def candidate(self, h_diff: float, v_diff: float) -> Optional[Direction]:
        """First non-reversing axis crossing in priority order, or ``None``."""

        crossings = (
            (h_diff > self.horizontal_threshold, Direction.LEFT),
            (h_diff < -self.horizontal_threshold, Direction.RIGHT),
            (v_diff < -self.vertical_threshold, Direction.UP),
            (v_diff > self.vertical_threshold, Direction.DOWN),
        )
        for crossed, direction in crossings:
            if crossed and direction != self.committed.opposite:
                return direction
        return None

    def resolve(
        self,
        average: SmoothedPosition,
        neutral: Optional[NeutralPosition],
        session_active: bool,
        ball: Optional[BallState] = None,
    ) -> Optional[ControlOutput]:
        if neutral is None:
            return None

        direction = self.candidate(average.x - neutral.x, average.y - neutral.y)
        if direction is None:
            return None
        if direction != self.pending:
            logger.debug("Pending heading %s (avg=(%.3f, %.3f))", direction.value, average.x, average.y)
        self.pending = direction
        return DirectionCommand(value=direction)

    def commit(self) -> DirectionCommand:
        self.committed = self.pending
        return DirectionCommand(value=self.committed)
