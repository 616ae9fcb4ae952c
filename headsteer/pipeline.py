"""Session-scoped head-control pipeline shared by every game.

One ``HeadControlPipeline`` owns the whole per-session state (state machine,
neutral point, pose history and the resolver's own state) and wires the
stages together: ingest -> calibrate -> smooth -> resolve. The camera thread
writes through ``process_frame`` while the game loop reads through
``resolve``; a single lock serializes both.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterable, Iterator, Optional, Tuple

from headsteer.calibration import NeutralCalibrator
from headsteer.control_types import (
    BallState,
    ControlOutput,
    ControlResolver,
    DirectionCommand,
    HeadingCommitter,
    NeutralPosition,
    PoseSample,
    SessionState,
    SmoothedPosition,
)
from headsteer.ingest import CHIN_LANDMARK, DetectionResult, PoseSampleIngestor
from headsteer.smoothing import TemporalSmoother

logger = logging.getLogger(__name__)

Frame = Tuple[DetectionResult, float, float]


class HeadControlPipeline:
    """Reusable pose pipeline parameterized by a ``ControlResolver`` policy."""

    def __init__(
        self,
        resolver: ControlResolver,
        window_ms: float,
        landmark_index: int = CHIN_LANDMARK,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.resolver = resolver
        self.clock = clock
        self.ingestor = PoseSampleIngestor(landmark_index)
        self.calibrator = NeutralCalibrator()
        self.smoother = TemporalSmoother(window_ms)
        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        # Bumped on every start so late detector results from an older session can be dropped.
        self._generation = 0
        self._last_average: Optional[SmoothedPosition] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def calibrating(self) -> bool:
        """True between session start and the first sample (neutral not yet latched)."""

        return self.active and not self.calibrator.is_set

    @property
    def neutral(self) -> Optional[NeutralPosition]:
        return self.calibrator.neutral

    @property
    def last_average(self) -> Optional[SmoothedPosition]:
        return self._last_average

    def start_session(self) -> None:
        """Enter ``ACTIVE`` from any state, wiping the previous session's data."""

        with self._lock:
            self.smoother.clear()
            self.calibrator.reset()
            self.resolver.reset()
            self._last_average = None
            self._generation += 1
            self._state = SessionState.ACTIVE
        logger.info("Session %d started", self._generation)

    def end_session(self) -> None:
        with self._lock:
            if self._state is not SessionState.ACTIVE:
                return
            self._state = SessionState.ENDED
        logger.info("Session %d ended", self._generation)

    def process_frame(
        self,
        detection: DetectionResult,
        frame_time: float,
        now: Optional[float] = None,
        generation: Optional[int] = None,
    ) -> Optional[PoseSample]:
        """Ingest one detector result and feed the resulting sample downstream.

        ``generation`` is the value of :attr:`generation` read before the
        (possibly slow) detector call; results from a session that has since
        been restarted or stopped are discarded without side effects.
        """

        now = self.clock() if now is None else now
        with self._lock:
            if not self._accepts(generation):
                return None
            sample = self.ingestor.ingest(detection, frame_time, now)
            if sample is None:
                return None
            self._add_locked(sample)
        return sample

    def add_sample(self, sample: PoseSample, generation: Optional[int] = None) -> bool:
        """Feed an already-extracted sample (keyboard source, replays)."""

        with self._lock:
            if not self._accepts(generation):
                return False
            self._add_locked(sample)
        return True

    def _accepts(self, generation: Optional[int]) -> bool:
        if self._state is not SessionState.ACTIVE:
            return False
        return generation is None or generation == self._generation

    def _add_locked(self, sample: PoseSample) -> None:
        self.calibrator.maybe_calibrate(True, sample)
        self.smoother.append(sample)
        self.smoother.prune(sample.timestamp)

    def resolve(self, now: Optional[float] = None, ball: Optional[BallState] = None) -> Optional[ControlOutput]:
        """Return the control output for this tick, or ``None`` for "no update".

        ``None`` covers an inactive session and an empty window; the
        resolver may add its own reasons (e.g. no neutral point yet).
        """

        now = self.clock() if now is None else now
        with self._lock:
            if self._state is not SessionState.ACTIVE:
                return None
            average = self.smoother.current_average(now)
            if average is None:
                return None
            self._last_average = average
            return self.resolver.resolve(average, self.calibrator.neutral, True, ball)

    def commit_heading(self) -> Optional[DirectionCommand]:
        """Apply the pending heading at the start of a discrete game tick."""

        if not isinstance(self.resolver, HeadingCommitter):
            return None
        with self._lock:
            return self.resolver.commit()

    def samples(self, frames: Iterable[Frame]) -> Iterator[PoseSample]:
        """Lazily ingest ``(detection, frame_time, now)`` frames for the current session.

        The iterator stops as soon as the session it was created for ends or
        is restarted; start a new one per session.
        """

        return self._iter_samples(frames, self._generation)

    def _iter_samples(self, frames: Iterable[Frame], generation: int) -> Iterator[PoseSample]:
        for detection, frame_time, now in frames:
            if not self.active or self._generation != generation:
                return
            sample = self.process_frame(detection, frame_time, now, generation=generation)
            if sample is not None:
                yield sample
