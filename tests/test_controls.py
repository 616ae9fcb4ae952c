import math
import random
from types import SimpleNamespace

import pytest

from headsteer.calibration import NeutralCalibrator
from headsteer.config import BREAKOUT_CONFIG, SNAKE_CONFIG, ControlConfig
from headsteer.control_types import Direction, NeutralPosition, PoseSample
from headsteer.ingest import CHIN_LANDMARK, DetectionResult, PoseSampleIngestor
from headsteer.smoothing import ExponentialEaser, TemporalSmoother, ease_toward


def _face(x: float, y: float) -> DetectionResult:
    landmarks = [(0.0, 0.0)] * CHIN_LANDMARK + [(x, y)]
    return DetectionResult(faces_found=True, landmarks=landmarks)


def test_smoother_never_keeps_samples_older_than_window() -> None:
    rng = random.Random(7)
    smoother = TemporalSmoother(window_ms=200)
    now = 0.0
    for _ in range(500):
        now += rng.uniform(0.0, 0.08)
        smoother.append(PoseSample(timestamp=now, x=rng.random(), y=rng.random()))
        smoother.prune(now)
        assert all(sample.timestamp >= now - 0.2 for sample in smoother)


def test_smoother_evicts_from_head_only() -> None:
    smoother = TemporalSmoother(window_ms=200)
    for t in (1.0, 1.1, 1.5):
        smoother.append(PoseSample(timestamp=t, x=t / 10, y=0.5))
    average = smoother.current_average(now=1.5)
    assert average is not None
    assert average.count == 1
    assert [s.timestamp for s in smoother] == [1.5]


def test_smoother_constant_stream_returns_that_value() -> None:
    smoother = TemporalSmoother(window_ms=500)
    for i in range(30):
        smoother.append(PoseSample(timestamp=i * 0.033, x=0.5, y=0.25))
    average = smoother.current_average(now=29 * 0.033)
    assert average is not None
    assert average.x == 0.5
    assert average.y == 0.25


def test_smoother_signals_empty_window() -> None:
    smoother = TemporalSmoother(window_ms=200)
    smoother.append(PoseSample(timestamp=0.0, x=0.4, y=0.4))
    assert smoother.current_average(now=1.0) is None
    assert len(smoother) == 0


def test_smoother_window_override() -> None:
    smoother = TemporalSmoother(window_ms=200)
    smoother.append(PoseSample(timestamp=0.0, x=0.2, y=0.5))
    smoother.append(PoseSample(timestamp=0.4, x=0.4, y=0.5))
    # A wider window passed per call keeps both samples.
    average = smoother.current_average(now=0.4, window_ms=1000)
    assert average is not None and math.isclose(average.x, 0.3, rel_tol=1e-9)


def test_smoother_rejects_non_positive_window() -> None:
    with pytest.raises(ValueError):
        TemporalSmoother(window_ms=0)


def test_easing_converges_geometrically() -> None:
    assert ease_toward(100.0, 200.0, 0.2) == 120.0
    easer = ExponentialEaser(k=0.2, value=100.0)
    assert easer.update(200.0) == 120.0
    assert easer.update(200.0) == 136.0


def test_calibrator_latches_only_while_active() -> None:
    calibrator = NeutralCalibrator()
    sample = PoseSample(timestamp=0.0, x=0.45, y=0.55)
    assert calibrator.maybe_calibrate(False, sample) is None
    assert calibrator.neutral is None

    assert calibrator.maybe_calibrate(True, sample) == NeutralPosition(0.45, 0.55)
    # Later samples never move the neutral point.
    assert calibrator.maybe_calibrate(True, PoseSample(timestamp=1.0, x=0.9, y=0.1)) is None
    assert calibrator.neutral == NeutralPosition(0.45, 0.55)

    calibrator.reset()
    assert not calibrator.is_set


def test_ingestor_emits_chin_sample() -> None:
    ingestor = PoseSampleIngestor()
    sample = ingestor.ingest(_face(0.42, 0.71), frame_time=1.0, now=12.5)
    assert sample == PoseSample(timestamp=12.5, x=0.42, y=0.71)


def test_ingestor_skips_missing_face_and_landmark() -> None:
    ingestor = PoseSampleIngestor()
    assert ingestor.ingest(DetectionResult(faces_found=False), frame_time=1.0, now=1.0) is None
    short = DetectionResult(faces_found=True, landmarks=[(0.5, 0.5)] * 10)
    assert ingestor.ingest(short, frame_time=2.0, now=2.0) is None


def test_ingestor_skips_repeated_frame() -> None:
    ingestor = PoseSampleIngestor()
    assert ingestor.ingest(_face(0.5, 0.5), frame_time=3.0, now=3.0) is not None
    assert ingestor.ingest(_face(0.6, 0.5), frame_time=3.0, now=3.01) is None
    assert ingestor.ingest(_face(0.6, 0.5), frame_time=3.1, now=3.02) is not None


def test_detection_result_from_face_mesh() -> None:
    points = [SimpleNamespace(x=i / 1000, y=1 - i / 1000) for i in range(200)]
    results = SimpleNamespace(multi_face_landmarks=[SimpleNamespace(landmark=points)])
    detection = DetectionResult.from_face_mesh(results)
    assert detection.faces_found is True
    assert detection.landmarks[CHIN_LANDMARK] == (0.152, 1 - 0.152)

    empty = DetectionResult.from_face_mesh(SimpleNamespace(multi_face_landmarks=None))
    assert empty.faces_found is False


def test_direction_opposites() -> None:
    assert Direction.UP.opposite is Direction.DOWN
    assert Direction.LEFT.opposite is Direction.RIGHT


def test_config_defaults_and_validation() -> None:
    assert BREAKOUT_CONFIG.window_ms == 200.0
    assert SNAKE_CONFIG.window_ms == 500.0
    assert SNAKE_CONFIG.horizontal_threshold == 0.03

    tuned = SNAKE_CONFIG.with_overrides(window_ms=300.0, easing=None)
    assert tuned.window_ms == 300.0 and tuned.easing == SNAKE_CONFIG.easing

    with pytest.raises(ValueError):
        ControlConfig(easing=0.0)
    with pytest.raises(ValueError):
        ControlConfig(window_ms=-1.0)
