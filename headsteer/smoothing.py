"""Time-windowed moving average over chin samples plus a small easing helper.

The moving average trades up to one window of latency for much less per-frame
jitter. Deliberate head movement is far slower than detection noise, so a
short box filter is enough.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Optional

import numpy as np

from headsteer.control_types import PoseSample, SmoothedPosition


class TemporalSmoother:
    """Rolling window of recent ``PoseSample`` values.

    Samples arrive in timestamp order, so eviction only ever pops from the
    head of the ``deque``.
    """

    def __init__(self, window_ms: float) -> None:
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        self.window_ms = float(window_ms)
        self._samples: Deque[PoseSample] = deque()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PoseSample]:
        return iter(self._samples)

    def append(self, sample: PoseSample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    def prune(self, now: float, window_ms: Optional[float] = None) -> None:
        """Drop samples older than ``now - window`` from the head."""

        window = self.window_ms if window_ms is None else float(window_ms)
        cutoff = now - window / 1000.0
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()

    def current_average(self, now: float, window_ms: Optional[float] = None) -> Optional[SmoothedPosition]:
        """Prune, then return the mean position of what is left.

        Returns ``None`` when nothing remains in the window; callers skip the
        update and keep their previous output.
        """

        self.prune(now, window_ms)
        if not self._samples:
            return None

        xs = np.fromiter((s.x for s in self._samples), dtype=float, count=len(self._samples))
        ys = np.fromiter((s.y for s in self._samples), dtype=float, count=len(self._samples))
        return SmoothedPosition(x=float(xs.mean()), y=float(ys.mean()), count=len(self._samples))


def ease_toward(position: float, target: float, k: float) -> float:
    """Move ``position`` a fraction ``k`` of the way to ``target``."""

    return position + (target - position) * k


@dataclass
class ExponentialEaser:
    """Keeps an eased value between calls so it converges on moving targets."""

    k: float
    value: float

    def update(self, target: float) -> float:
        self.value = ease_toward(self.value, target, self.k)
        return self.value
