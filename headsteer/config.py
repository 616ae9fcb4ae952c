"""Tunable control parameters and per-game defaults."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class ControlConfig:
    # Shorter windows react faster; longer ones hold steadier.
    window_ms: float = 200.0
    # Dead zones in normalized units; head tilt noise is larger sideways than vertically.
    horizontal_threshold: float = 0.02
    vertical_threshold: float = 0.01
    # Fraction of the remaining distance the paddle covers per update.
    easing: float = 0.2
    aim_assist: bool = True

    def __post_init__(self) -> None:
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")
        if self.horizontal_threshold < 0 or self.vertical_threshold < 0:
            raise ValueError("dead-zone thresholds must be non-negative")
        if not 0.0 < self.easing <= 1.0:
            raise ValueError(f"easing must be in (0, 1], got {self.easing}")

    def with_overrides(self, **overrides: Any) -> "ControlConfig":
        """Return a copy with every non-``None`` override applied."""

        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


BREAKOUT_CONFIG = ControlConfig(window_ms=200.0, horizontal_threshold=0.02, easing=0.2, aim_assist=True)
SNAKE_CONFIG = ControlConfig(window_ms=500.0, horizontal_threshold=0.03, vertical_threshold=0.01, aim_assist=False)
