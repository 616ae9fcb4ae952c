"""Neutral-point calibration for a single play session.

The neutral point is captured from the first sample that arrives after the
player starts a session, never at load time: the head may be anywhere while
the menu is up. It stays fixed for the rest of the session so the player
cannot recenter mid-game. Nothing here is written to disk.
"""

from __future__ import annotations

import logging
from typing import Optional

from headsteer.control_types import NeutralPosition, PoseSample

logger = logging.getLogger(__name__)


class NeutralCalibrator:
    """One-shot latch for the session's neutral chin position."""

    def __init__(self) -> None:
        self._neutral: Optional[NeutralPosition] = None

    @property
    def neutral(self) -> Optional[NeutralPosition]:
        return self._neutral

    @property
    def is_set(self) -> bool:
        return self._neutral is not None

    def maybe_calibrate(self, session_active: bool, sample: PoseSample) -> Optional[NeutralPosition]:
        """Latch ``sample`` as neutral if the session is running and nothing is set yet.

        Returns the newly latched position, or ``None`` when the call was a
        no-op (inactive session or already calibrated).
        """

        if not session_active or self._neutral is not None:
            return None
        self._neutral = NeutralPosition(x=sample.x, y=sample.y)
        logger.info("Neutral position set to (%.3f, %.3f)", sample.x, sample.y)
        return self._neutral

    def reset(self) -> None:
        self._neutral = None
