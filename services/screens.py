"""
Screen controllers observe status transitions to show or hide overlays.

The loading progress animation lives here too; it runs on its own timing
and only hands control to the game once it completes.
"""

import logging
from typing import Optional

from domain.constants import ACTIVE, GAME_OVER, LOADING
from domain.game_state import GameState

logger = logging.getLogger(__name__)

LOADING_MESSAGES = [
    "Creating math problems...",
    "Preparing the snake...",
    "Setting up the board...",
    "Almost ready!",
]


class ScreenController:
    """
    Base class for status observers. The default ignores every transition.
    """

    def on_status_change(self, previous: str, current: str, state: GameState) -> None:
        pass


class LoggingScreenController(ScreenController):
    """
    Logs transitions, standing in for overlays in headless runs.
    """

    def __init__(self):
        self.transitions = []

    def on_status_change(self, previous: str, current: str, state: GameState) -> None:
        self.transitions.append((previous, current))
        if current == LOADING:
            logger.info("Loading game...")
        elif current == ACTIVE:
            logger.info(f"Game started: {state.question_text}")
        elif current == GAME_OVER:
            logger.info(f"Game over ({state.death_reason}). Final score: {state.score}")


class LoadingSequence:
    """
    Drives the loading bar: ``step`` percent every ``interval_ms``, then a
    short pause before the game screen is shown.
    """

    def __init__(self, step: int = 2, interval_ms: int = 30, finish_delay_ms: int = 300):
        self.step = step
        self.interval_ms = interval_ms
        self.finish_delay_ms = finish_delay_ms
        self.progress = 0
        self._elapsed_ms = 0.0
        self._finished_for_ms: Optional[float] = None

    @property
    def message(self) -> str:
        return message_for_progress(self.progress)

    @property
    def done(self) -> bool:
        return self._finished_for_ms is not None and self._finished_for_ms >= self.finish_delay_ms

    def advance(self, elapsed_ms: float) -> bool:
        """Feed elapsed time. Returns True once the sequence is complete."""
        if self._finished_for_ms is not None:
            self._finished_for_ms += elapsed_ms
            return self.done

        self._elapsed_ms += elapsed_ms
        while self._elapsed_ms >= self.interval_ms and self.progress < 100:
            self._elapsed_ms -= self.interval_ms
            self.progress = min(100, self.progress + self.step)

        if self.progress >= 100:
            self._finished_for_ms = self._elapsed_ms
        return self.done


def message_for_progress(progress: int) -> str:
    if progress < 25:
        return LOADING_MESSAGES[0]
    if progress < 50:
        return LOADING_MESSAGES[1]
    if progress < 75:
        return LOADING_MESSAGES[2]
    return LOADING_MESSAGES[3]
