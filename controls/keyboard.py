"""
Device input sources: keyboard keys and touch/mouse swipes.
"""

from typing import Optional

from domain.constants import DOWN, LEFT, RIGHT, UP
from .base import InputSource

KEY_DIRECTIONS = {
    "arrowup": UP,
    "up": UP,
    "w": UP,
    "arrowdown": DOWN,
    "down": DOWN,
    "s": DOWN,
    "arrowleft": LEFT,
    "left": LEFT,
    "a": LEFT,
    "arrowright": RIGHT,
    "right": RIGHT,
    "d": RIGHT,
}

MIN_SWIPE_DISTANCE = 40
SWIPE_DEBOUNCE_MS = 30


class KeyboardInput(InputSource):
    """
    Maps key names (arrow keys and WASD, case-insensitive) to directions.
    """

    def on_key(self, key: str) -> bool:
        """Returns True if the key changed the pending direction."""
        direction = KEY_DIRECTIONS.get(key.lower())
        if direction is None:
            return False
        return self.submit(direction)


def swipe_direction(dx: float, dy: float, min_distance: float = MIN_SWIPE_DISTANCE) -> Optional[str]:
    """Direction of a swipe along its dominant axis, None if it was too short."""
    if max(abs(dx), abs(dy)) < min_distance:
        return None
    if abs(dx) > abs(dy):
        return RIGHT if dx > 0 else LEFT
    return DOWN if dy > 0 else UP


class SwipeInput(InputSource):
    """
    Turns press/release pointer positions into directions.

    Releases within ``debounce_ms`` of the previous one, swipes shorter than
    ``min_distance`` pixels, and swipes while no game is active are ignored.
    """

    def __init__(self, game, min_distance: float = MIN_SWIPE_DISTANCE, debounce_ms: float = SWIPE_DEBOUNCE_MS):
        super().__init__(game)
        self.min_distance = min_distance
        self.debounce_ms = debounce_ms
        self.start_pos = None
        self.last_release_ms: Optional[float] = None

    def on_press(self, x: float, y: float) -> None:
        self.start_pos = (x, y)

    def on_release(self, x: float, y: float, now_ms: float) -> bool:
        start, self.start_pos = self.start_pos, None
        if start is None or not self.game.is_active:
            return False
        if self.last_release_ms is not None and now_ms - self.last_release_ms < self.debounce_ms:
            return False
        self.last_release_ms = now_ms

        direction = swipe_direction(x - start[0], y - start[1], self.min_distance)
        if direction is None:
            return False
        return self.submit(direction)
