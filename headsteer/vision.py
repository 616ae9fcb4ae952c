"""Camera + MediaPipe Face Mesh tracking kept separate from gameplay logic."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np

from headsteer.control_types import PoseSource
from headsteer.ingest import DetectionResult
from headsteer.pipeline import HeadControlPipeline
from headsteer.ui_hud import (
    CHIN_COLOR,
    NEUTRAL_COLOR,
    SMOOTHED_COLOR,
    draw_dead_zone,
    draw_lines,
    draw_panel,
    draw_point,
)

logger = logging.getLogger(__name__)

# Some Windows Python environments ship with a lightweight "mediapipe" package
# that does not expose ``solutions`` at the top level, so we attempt a second
# import path and keep a helpful error ready for callers.
try:
    from mediapipe import solutions as mp_solutions
except ImportError:
    mp_solutions = getattr(mp, "solutions", None)
if mp_solutions is None:
    MP_IMPORT_ERROR = ImportError(
        "mediapipe.solutions could not be imported. Try reinstalling mediapipe "
        "or upgrading to 0.10.14+. (pip install --upgrade mediapipe)"
    )
else:
    MP_IMPORT_ERROR = None


class CameraUnavailableError(RuntimeError):
    """Raised when the webcam cannot be opened."""


class VisionPoseSource(PoseSource):
    """Runs capture and face detection on a background thread.

    Every processed frame goes through ``pipeline.process_frame``; the game
    loop only ever talks to the pipeline, so ``poll`` has nothing to do.
    """

    def __init__(
        self,
        pipeline: HeadControlPipeline,
        camera_index: int = 0,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        show_debug_overlay: bool = False,
        horizontal_threshold: float = 0.02,
        vertical_threshold: float = 0.01,
        camera_width: int = 640,
        camera_height: int = 480,
    ) -> None:
        if MP_IMPORT_ERROR:
            # Raise a clear, actionable error instead of the cryptic attribute error.
            raise MP_IMPORT_ERROR

        self.pipeline = pipeline
        self.cap = cv2.VideoCapture(camera_index)
        if not self.cap.isOpened():
            raise CameraUnavailableError(f"Could not open camera {camera_index}.")
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, camera_width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, camera_height)

        self.face_mesh = mp_solutions.face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=1,
            refine_landmarks=False,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self.show_debug_overlay = show_debug_overlay
        self.horizontal_threshold = horizontal_threshold
        self.vertical_threshold = vertical_threshold
        self.window_name = "Head Control Debug"
        self.last_time = time.monotonic()
        self.last_fps = 0.0
        self._last_chin: Optional[tuple[float, float]] = None
        self._stop_event = threading.Event()
        # Spin up the background thread so the game loop stays responsive even on heavy inference frames.
        self._vision_thread = threading.Thread(target=self._vision_loop, daemon=True)
        self._vision_thread.start()

    def poll(self) -> None:
        return

    def _frame_time(self) -> float:
        # Webcams often report 0 for the position; fall back to arrival time.
        position_ms = self.cap.get(cv2.CAP_PROP_POS_MSEC)
        return position_ms if position_ms > 0 else time.monotonic()

    def _vision_loop(self) -> None:
        """Capture frames + run inference in the background to avoid game stalls."""

        while not self._stop_event.is_set():
            success, frame = self.cap.read()
            if not success:
                time.sleep(0.01)
                continue

            frame_time = self._frame_time()
            # Read before inference; a restart during the call invalidates the result.
            generation = self.pipeline.generation
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            rgb_frame.flags.writeable = False
            detection = DetectionResult.from_face_mesh(self.face_mesh.process(rgb_frame))

            self.pipeline.process_frame(detection, frame_time, generation=generation)
            if detection.faces_found and len(detection.landmarks) > self.pipeline.ingestor.landmark_index:
                self._last_chin = detection.landmarks[self.pipeline.ingestor.landmark_index]
            else:
                self._last_chin = None
            if not detection.faces_found:
                logger.debug("No face in frame %.3f", frame_time)

            if self.show_debug_overlay:
                self._show_debug(cv2.flip(frame, 1), detection.faces_found)

        if self.show_debug_overlay:
            cv2.destroyAllWindows()

    def _show_debug(self, frame: np.ndarray, detected: bool) -> None:
        """Draw the chin, neutral point and smoothed point on a mirrored preview."""

        neutral = self.pipeline.neutral
        average = self.pipeline.last_average
        neutral_point = (neutral.x, neutral.y) if neutral is not None else None
        draw_dead_zone(frame, neutral_point, self.horizontal_threshold, self.vertical_threshold)
        draw_point(frame, self._last_chin, CHIN_COLOR, "chin")
        draw_point(frame, neutral_point, NEUTRAL_COLOR, "neutral")
        draw_point(frame, (average.x, average.y) if average is not None else None, SMOOTHED_COLOR, "avg")

        now = time.monotonic()
        dt = now - self.last_time
        if dt > 0:
            self.last_fps = 0.9 * self.last_fps + 0.1 * (1.0 / dt)
        self.last_time = now

        lines = [
            f"Session: {self.pipeline.state.value}" + (" (calibrating)" if self.pipeline.calibrating else ""),
            f"Detection: {'face found' if detected else 'no face'}",
            f"Neutral: ({neutral.x:.3f}, {neutral.y:.3f})" if neutral is not None else "Neutral: not set",
            f"Average: ({average.x:.3f}, {average.y:.3f}) n={average.count}" if average is not None else "Average: n/a",
            f"Vision FPS: {self.last_fps:.1f}",
        ]
        draw_panel(frame, 8, 8, 330, 24 + len(lines) * 22)
        draw_lines(frame, lines, 20, 30)
        cv2.imshow(self.window_name, frame)
        if cv2.waitKey(1) & 0xFF == ord("q"):
            self._stop_event.set()

    def close(self) -> None:
        self._stop_event.set()
        if self._vision_thread.is_alive():
            self._vision_thread.join(timeout=1.5)
        if self.cap.isOpened():
            self.cap.release()
        self.face_mesh.close()
        cv2.destroyAllWindows()
