"""
Random player implementation - picks random safe moves.
"""

from domain.constants import OPPOSITE_MOVES, VALID_MOVES
from domain.game_state import GameState
from .base import Player


class RandomPlayer(Player):
    """
    A random AI that picks a direction avoiding walls, its own body and
    apples it knows are wrong.
    """

    def get_move(self, game_state: GameState) -> str:
        valid_moves = self.safe_moves(game_state, avoid=self.wrong_apple_cells(game_state))

        # A wrong apple costs a life, a wall costs the game
        if not valid_moves:
            valid_moves = self.safe_moves(game_state)

        # If no valid moves, keep any non-reversing move (we'll die anyway)
        if not valid_moves:
            reverse = OPPOSITE_MOVES.get(game_state.direction)
            valid_moves = sorted(m for m in VALID_MOVES if m != reverse)

        return self.rng.choice(valid_moves)
