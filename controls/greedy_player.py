"""
Greedy player implementation - heads for the nearest correct apple.
"""

from collections import deque
from typing import Set, Tuple

from domain.constants import DIRECTION_VECTORS
from domain.game_state import GameState
from .base import Player
from .random_player import RandomPlayer


def reachable_cells(
    start: Tuple[int, int],
    blocked: Set[Tuple[int, int]],
    width: int,
    height: int,
    limit: int
) -> int:
    """Count cells reachable from ``start`` without crossing ``blocked``, up to ``limit``."""
    seen = {start}
    queue = deque([start])
    while queue and len(seen) < limit:
        x, y = queue.popleft()
        for dx, dy in DIRECTION_VECTORS.values():
            cell = (x + dx, y + dy)
            if cell in seen or cell in blocked:
                continue
            if not (0 <= cell[0] < width and 0 <= cell[1] < height):
                continue
            seen.add(cell)
            queue.append(cell)
    return len(seen)


class GreedyPlayer(Player):
    """
    Picks the safe move that gets closest (Manhattan distance) to the
    nearest correct apple, skipping moves that would box the snake into a
    region smaller than its own body.
    """

    def __init__(self, rng=None):
        super().__init__(rng)
        self.fallback = RandomPlayer(self.rng)

    def get_move(self, game_state: GameState) -> str:
        wrong = self.wrong_apple_cells(game_state)
        moves = self.safe_moves(game_state, avoid=wrong)
        targets = [(x, y) for x, y, value in game_state.apples if value == game_state.answer]
        if not moves or not targets:
            return self.fallback.get_move(game_state)

        head_x, head_y = game_state.snake_positions[0]
        blocked = set(game_state.snake_positions) | wrong
        needed = len(game_state.snake_positions) + 1

        scored = []
        for move in moves:
            dx, dy = DIRECTION_VECTORS[move]
            cell = (head_x + dx, head_y + dy)
            room = reachable_cells(cell, blocked, game_state.width, game_state.height, needed)
            distance = min(abs(cell[0] - tx) + abs(cell[1] - ty) for tx, ty in targets)
            # Enough room first, then distance
            scored.append((room < needed, distance, self.rng.random(), move))

        scored.sort()
        return scored[0][3]
