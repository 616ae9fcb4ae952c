"""Turn per-frame face detector output into chin ``PoseSample`` values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple

from headsteer.control_types import PoseSample

# Face Mesh landmark at the bottom of the chin.
CHIN_LANDMARK = 152


@dataclass(frozen=True)
class DetectionResult:
    """Detector output for one frame, reduced to what the pipeline reads.

    Attributes:
        faces_found: Whether at least one face was detected.
        landmarks: Normalized ``(x, y)`` points of the first face.
    """

    faces_found: bool
    landmarks: Sequence[Tuple[float, float]] = field(default_factory=tuple)

    @classmethod
    def from_face_mesh(cls, results: Any) -> "DetectionResult":
        """Adapt a MediaPipe Face Mesh ``process()`` result."""

        faces = getattr(results, "multi_face_landmarks", None)
        if not faces:
            return cls(faces_found=False)
        points = tuple((float(p.x), float(p.y)) for p in faces[0].landmark)
        return cls(faces_found=True, landmarks=points)


class PoseSampleIngestor:
    """Extracts the chin point once per distinct video frame."""

    def __init__(self, landmark_index: int = CHIN_LANDMARK) -> None:
        self.landmark_index = landmark_index
        self._last_frame_time: Optional[float] = None

    def ingest(self, result: DetectionResult, frame_time: float, now: float) -> Optional[PoseSample]:
        """Return a sample for this frame, or ``None`` if there is nothing to add.

        ``frame_time`` identifies the video frame; a frame presented twice is
        skipped so it does not produce a duplicate sample. Frames without a
        face (or without the landmark) also yield ``None`` and leave the
        downstream state untouched.
        """

        if frame_time == self._last_frame_time:
            return None
        self._last_frame_time = frame_time

        if not result.faces_found or len(result.landmarks) <= self.landmark_index:
            return None

        x, y = result.landmarks[self.landmark_index]
        return PoseSample(timestamp=now, x=float(x), y=float(y))
