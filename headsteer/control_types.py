"""Typed data model shared between the pose pipeline, its sources and the games.

This module centralizes the control data model so that the pygame consumers
and the MediaPipe/OpenCV vision stack can evolve independently while
remaining type-safe. Coordinates follow the detector's normalized, mirrored
space: ``x`` grows when the player moves their head to their own right, which
shows up as screen-left.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class PoseSample:
    """One observation of the tracked chin landmark.

    Attributes:
        timestamp: Monotonic time in seconds when the sample was taken.
        x: Normalized horizontal position ``[0, 1]``.
        y: Normalized vertical position ``[0, 1]`` (grows downward).
    """

    timestamp: float
    x: float
    y: float


@dataclass(frozen=True)
class NeutralPosition:
    """Calibrated reference point representing "no input"."""

    x: float
    y: float


@dataclass(frozen=True)
class SmoothedPosition:
    """Windowed mean of the retained samples."""

    x: float
    y: float
    count: int


@dataclass(frozen=True)
class BallState:
    """Snapshot of the moving object the paddle must catch."""

    x: float
    dx: float
    dy: float


class Direction(str, enum.Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


@dataclass(frozen=True)
class TargetPosition:
    """Absolute paddle x (pixels) the consumer should place its paddle at."""

    x: float


@dataclass(frozen=True)
class DirectionCommand:
    """Discrete heading for grid movement."""

    value: Direction


ControlOutput = Union[TargetPosition, DirectionCommand]


class SessionState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"


class ControlResolver(Protocol):
    """Policy turning a smoothed, neutral-relative pose into a control output.

    Returning ``None`` means "no update this tick"; callers keep the previous
    output unchanged.
    """

    def reset(self) -> None:  # pragma: no cover - protocol definition
        ...

    def resolve(
        self,
        average: SmoothedPosition,
        neutral: Optional[NeutralPosition],
        session_active: bool,
        ball: Optional[BallState] = None,
    ) -> Optional[ControlOutput]:  # pragma: no cover - protocol definition
        ...


@runtime_checkable
class HeadingCommitter(Protocol):
    """Resolvers whose decisions wait for the game tick to be applied."""

    def commit(self) -> DirectionCommand:  # pragma: no cover - protocol definition
        ...


class PoseSource(Protocol):
    """Interface implemented by pose providers (camera, keyboard, etc.)."""

    def poll(self) -> None:  # pragma: no cover - protocol definition
        ...

    def close(self) -> None:  # pragma: no cover - protocol definition
        ...
