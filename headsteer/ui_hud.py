"""OpenCV drawing helpers for the camera debug window.

Everything here draws onto a BGR frame (NumPy array) in place and avoids
pygame, so it can run on the vision thread.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import cv2

DEFAULT_COLOR = (255, 255, 255)
CHIN_COLOR = (255, 255, 0)
NEUTRAL_COLOR = (0, 200, 255)
SMOOTHED_COLOR = (0, 220, 120)


def draw_panel(surface, x: int, y: int, w: int, h: int, alpha: int = 140) -> None:
    """Blend a dark rectangle behind the HUD text so it stays readable."""

    alpha = max(0, min(255, alpha))
    overlay = surface.copy()
    cv2.rectangle(overlay, (x, y), (x + w, y + h), (0, 0, 0), -1)
    cv2.addWeighted(overlay, alpha / 255.0, surface, 1 - alpha / 255.0, 0, surface)


def draw_lines(
    surface,
    lines: Iterable[str],
    x: int,
    y: int,
    line_height: int = 22,
    *,
    font_scale: float = 0.55,
    color: Tuple[int, int, int] = DEFAULT_COLOR,
) -> None:
    for idx, text in enumerate(lines):
        cv2.putText(surface, text, (x, y + idx * line_height), cv2.FONT_HERSHEY_SIMPLEX, font_scale, color, 1)


def draw_point(
    surface,
    point: Optional[Tuple[float, float]],
    color: Tuple[int, int, int],
    label: str,
    *,
    mirror: bool = True,
    radius: int = 6,
) -> None:
    """Mark a normalized ``(x, y)`` point; ``mirror`` matches a flipped preview."""

    if point is None:
        return
    height, width = surface.shape[:2]
    nx, ny = point
    if mirror:
        nx = 1.0 - nx
    px, py = int(nx * width), int(ny * height)
    cv2.circle(surface, (px, py), radius, color, 2)
    cv2.putText(surface, label, (px + radius + 4, py + 4), cv2.FONT_HERSHEY_SIMPLEX, 0.45, color, 1)


def draw_dead_zone(surface, neutral: Optional[Tuple[float, float]], h: float, v: float, *, mirror: bool = True) -> None:
    """Outline the dead-zone box around the neutral point."""

    if neutral is None:
        return
    height, width = surface.shape[:2]
    nx, ny = neutral
    if mirror:
        nx = 1.0 - nx
    top_left = (int((nx - h) * width), int((ny - v) * height))
    bottom_right = (int((nx + h) * width), int((ny + v) * height))
    cv2.rectangle(surface, top_left, bottom_right, NEUTRAL_COLOR, 1)
