"""Shared pygame shell for the head-controlled games.

Subclasses hold the actual game state and rendering. This base owns the
window, the 60 FPS loop, start/restart keys and the session hand-off to the
``HeadControlPipeline``: pressing Space starts (or restarts) a session, and a
game-reported outcome ends it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import pygame

from headsteer.control_types import PoseSource
from headsteer.pipeline import HeadControlPipeline

logger = logging.getLogger(__name__)

FPS = 60
BACKGROUND = (17, 24, 39)
TEXT_COLOR = (240, 240, 255)


class HeadControlledGame(ABC):
    """Template game loop; subclasses fill in ``new_round``, ``update`` and drawing."""

    title = "Head-Controlled Game"
    width = 640
    height = 480

    def __init__(self, pipeline: HeadControlPipeline) -> None:
        pygame.init()
        pygame.display.set_caption(self.title)
        self.screen = pygame.display.set_mode((self.width, self.height))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("couriernew", 20, bold=True)
        self.big_font = pygame.font.SysFont("couriernew", 40, bold=True)
        self.pipeline = pipeline
        self.outcome: Optional[str] = None

    # Subclass hooks -----------------------------------------------------

    @abstractmethod
    def new_round(self) -> None:
        ...

    @abstractmethod
    def update(self, dt: float) -> Optional[str]:
        """Advance one frame of an active session; return an outcome to end it."""

        ...

    @abstractmethod
    def draw_playfield(self, canvas: pygame.Surface) -> None:
        ...

    def hud_items(self) -> Tuple[str, ...]:
        return ()

    def final_score(self) -> int:
        return 0

    # Session control ----------------------------------------------------

    def start(self) -> None:
        """Start or restart; both wipe the previous session, neutral point included."""

        self.outcome = None
        self.new_round()
        self.pipeline.start_session()

    def finish(self, outcome: str) -> None:
        self.outcome = outcome
        self.pipeline.end_session()
        logger.info("%s: %s (score %d)", self.title, outcome, self.final_score())

    # Loop ---------------------------------------------------------------

    def run(self, source: Optional[PoseSource] = None) -> None:
        running = True
        while running:
            dt = self.clock.tick(FPS) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                if event.type == pygame.KEYDOWN and event.key in (pygame.K_SPACE, pygame.K_RETURN):
                    self.start()

            if source:
                try:
                    source.poll()
                except Exception:
                    # Keep the game alive even if the input source misbehaves.
                    logger.exception("Pose source failed; skipping input this frame")

            if self.pipeline.active:
                outcome = self.update(dt)
                if outcome:
                    self.finish(outcome)

            self._draw()
            pygame.display.flip()

        pygame.quit()

    def _draw(self) -> None:
        self.screen.fill(BACKGROUND)
        self.draw_playfield(self.screen)

        for idx, text in enumerate(self.hud_items()):
            self._blit_text(self.font, text, (12 + idx * 200, 8))

        if self.pipeline.calibrating:
            self._blit_centered(self.font, "Calibrating: hold your head still", self.height - 40)
        if not self.pipeline.active:
            self._draw_overlay()

    def _draw_overlay(self) -> None:
        shade = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 180))
        self.screen.blit(shade, (0, 0))
        if self.outcome is None:
            self._blit_centered(self.big_font, self.title, self.height // 2 - 30)
            self._blit_centered(self.font, "Look straight ahead and press Space", self.height // 2 + 20)
        else:
            self._blit_centered(self.big_font, self.outcome, self.height // 2 - 30)
            self._blit_centered(self.font, f"Final Score: {self.final_score()}", self.height // 2 + 20)
            self._blit_centered(self.font, "Space to play again", self.height // 2 + 50)

    def _blit_text(self, font: pygame.font.Font, text: str, pos: Tuple[int, int]) -> None:
        shadow = font.render(text, True, (0, 0, 0))
        main = font.render(text, True, TEXT_COLOR)
        self.screen.blit(shadow, (pos[0] + 2, pos[1] + 2))
        self.screen.blit(main, pos)

    def _blit_centered(self, font: pygame.font.Font, text: str, y: int) -> None:
        surface = font.render(text, True, TEXT_COLOR)
        self.screen.blit(surface, surface.get_rect(center=(self.width // 2, y)))
