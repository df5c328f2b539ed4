"""
Input sources and autopilot players for Math Snake.

Device input (keyboard, swipe) feeds a running game directly; autopilots
return a direction for a GameState and are polled once per tick.
"""

from .base import InputSource, Player
from .keyboard import KeyboardInput, SwipeInput
from .random_player import RandomPlayer
from .greedy_player import GreedyPlayer
from .variant_registry import get_player_class, list_variants, AVAILABLE_VARIANTS

__all__ = [
    'InputSource',
    'Player',
    'KeyboardInput',
    'SwipeInput',
    'RandomPlayer',
    'GreedyPlayer',
    'get_player_class',
    'list_variants',
    'AVAILABLE_VARIANTS',
]
