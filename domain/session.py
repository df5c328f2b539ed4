"""
GameSession aggregate - everything one play-through mutates.
"""

from typing import List, Optional, Set

from .apples import Apple
from .constants import ACTIVE, IDLE, MAX_LIVES, RIGHT
from .game_state import GameState
from .question import Question
from .snake import Snake


class GameSession:
    """
    Mutable state for a single play-through, owned by the game loop.

    Attributes:
        snake: the player's snake
        apples: apples currently on the board
        question: the active question
        used_values: apple values on the board for the active question
        score, lives: player progress
        direction: direction committed at the last tick
        pending_direction: last accepted input, applied at the next tick
        status: idle, loading, active or game_over
        width, height: grid size in cells
        tick_number: ticks resolved so far
    """

    def __init__(self, snake: Snake, question: Question, width: int, height: int):
        self.snake = snake
        self.question = question
        self.width = width
        self.height = height
        self.apples: List[Apple] = []
        self.used_values: Set[int] = set()
        self.score = 0
        self.lives = MAX_LIVES
        self.direction = RIGHT
        self.pending_direction = RIGHT
        self.status = IDLE
        self.tick_number = 0

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    @property
    def death_reason(self) -> Optional[str]:
        return self.snake.death_reason

    def snapshot(self) -> GameState:
        """
        Return a snapshot of the current board as a GameState.
        """
        return GameState(
            tick_number=self.tick_number,
            snake_positions=list(self.snake.positions),
            apples=[(apple.x, apple.y, apple.value) for apple in self.apples],
            score=self.score,
            lives=self.lives,
            question_text=self.question.text,
            answer=self.question.answer,
            width=self.width,
            height=self.height,
            status=self.status,
            direction=self.direction,
            death_reason=self.snake.death_reason,
        )

    def __repr__(self):
        return (
            f"<GameSession status={self.status}, tick={self.tick_number}, "
            f"score={self.score}, lives={self.lives}>"
        )
