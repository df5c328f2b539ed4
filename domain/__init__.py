"""
Domain entities for the Math Snake game engine.

This module contains the core game entities that are independent of
presentation concerns (windows, audio, input devices).
"""

from .constants import UP, DOWN, LEFT, RIGHT, VALID_MOVES, MAX_APPLES, MAX_LIVES
from .snake import Snake, create_initial_snake
from .question import Question, QuestionGenerator
from .apples import Apple, ApplePlacer
from .game_state import GameState
from .session import GameSession

__all__ = [
    'UP', 'DOWN', 'LEFT', 'RIGHT', 'VALID_MOVES', 'MAX_APPLES', 'MAX_LIVES',
    'Snake',
    'create_initial_snake',
    'Question',
    'QuestionGenerator',
    'Apple',
    'ApplePlacer',
    'GameState',
    'GameSession',
]
