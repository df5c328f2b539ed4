"""
Snake entity for the game engine.
"""

from collections import deque
from typing import List, Tuple, Optional

from .constants import DIRECTION_VECTORS, INITIAL_SNAKE_LENGTH


class Snake:
    """
    Represents the player's snake on the board.

    Attributes:
        positions: deque of (x, y) from head at index 0 to tail at the end
        death_reason: why the game ended (wall, self, lives), None while playing
    """

    def __init__(self, positions: List[Tuple[int, int]]):
        if not positions:
            raise ValueError("A snake needs at least one segment.")
        self.positions = deque(positions)
        self.death_reason: Optional[str] = None

    @property
    def head(self) -> Tuple[int, int]:
        """Return the head position (first element)."""
        return self.positions[0]

    def __len__(self) -> int:
        return len(self.positions)

    def occupies(self, cell: Tuple[int, int]) -> bool:
        return cell in self.positions

    def next_head(self, direction: str) -> Tuple[int, int]:
        """Return the cell the head would move into for a direction."""
        dx, dy = DIRECTION_VECTORS[direction]
        hx, hy = self.head
        return (hx + dx, hy + dy)

    def advance(self, new_head: Tuple[int, int], grow: bool = False) -> None:
        """Move the head forward, keeping the tail when growing."""
        self.positions.appendleft(new_head)
        if not grow:
            self.positions.pop()

    def clamp(self, width: int, height: int) -> None:
        """Pull every segment back inside a (possibly smaller) grid."""
        self.positions = deque(
            (min(max(x, 0), width - 1), min(max(y, 0), height - 1))
            for x, y in self.positions
        )


def create_initial_snake(width: int, height: int, length: int = INITIAL_SNAKE_LENGTH) -> Snake:
    """Create a horizontal snake centred on the board, facing right."""
    if length < 1 or length > width or height < 1:
        raise ValueError(
            f"A snake of length {length} does not fit a {width}x{height} grid."
        )

    # Segments extend left from the head
    tail_x = (width - length) // 2
    head_x = tail_x + length - 1
    head_y = height // 2

    return Snake([(head_x - i, head_y) for i in range(length)])
