"""
Base interfaces for everything that steers the snake.
"""

import random
from typing import List, Optional, Set, Tuple

from domain.constants import DIRECTION_VECTORS, OPPOSITE_MOVES
from domain.game_state import GameState


class InputSource:
    """
    Feeds directions from a device into a running game.

    Subclasses translate raw events (key names, swipe deltas) into a
    direction and hand it to ``submit``. The game applies the reversal
    guard and buffers the direction until the next tick.
    """

    def __init__(self, game):
        self.game = game

    def submit(self, direction: str) -> bool:
        return self.game.change_direction(direction)


class Player:
    """
    Base class/interface for autopilot logic.

    Each player returns a direction given the current game state.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def get_move(self, game_state: GameState) -> str:
        """
        Return a move direction given the current game state.

        Args:
            game_state: Current state of the game

        Returns:
            One of: "up", "down", "left", "right"
        """
        raise NotImplementedError

    @staticmethod
    def wrong_apple_cells(game_state: GameState) -> Set[Tuple[int, int]]:
        return {(x, y) for x, y, value in game_state.apples if value != game_state.answer}

    @staticmethod
    def safe_moves(game_state: GameState, avoid: Set[Tuple[int, int]] = frozenset()) -> List[str]:
        """
        Moves that stay on the board, do not hit the body, do not reverse,
        and do not enter any cell in ``avoid``.
        """
        head_x, head_y = game_state.snake_positions[0]
        body = set(game_state.snake_positions)
        reverse = OPPOSITE_MOVES.get(game_state.direction)

        moves = []
        for move, (dx, dy) in DIRECTION_VECTORS.items():
            if move == reverse:
                continue
            new_x, new_y = head_x + dx, head_y + dy
            if (new_x < 0 or new_x >= game_state.width or
                    new_y < 0 or new_y >= game_state.height):
                continue
            if (new_x, new_y) in body or (new_x, new_y) in avoid:
                continue
            moves.append(move)
        return moves
