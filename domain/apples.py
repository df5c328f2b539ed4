"""
Apple entity and the placement engine that keeps the board solvable.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from .constants import (
    APPLE_EDGE_MARGIN,
    CORRECT_ANSWER_CHANCE,
    MAX_PLACEMENT_ATTEMPTS,
    MAX_WRONG_VALUE_DRAWS,
    MIN_APPLE_DISTANCE,
    MIN_APPLE_VALUE,
    WRONG_VALUE_OFFSET_MAX,
    WRONG_VALUE_OFFSET_MIN,
)
from .question import Question

logger = logging.getLogger(__name__)


@dataclass
class Apple:
    """An apple on the board carrying a candidate answer."""

    position: Tuple[int, int]
    value: int

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]


def count_correct(apples: Iterable[Apple], answer: int) -> int:
    """Number of apples currently holding the answer value."""
    return sum(1 for apple in apples if apple.value == answer)


def apple_at(apples: Iterable[Apple], cell: Tuple[int, int]) -> Optional[Apple]:
    for apple in apples:
        if apple.position == cell:
            return apple
    return None


class ApplePlacer:
    """
    Places apples on the grid under spacing, uniqueness and correctness rules.

    Each attempt draws an interior cell and a value, then rejects the
    candidate if the value is already on the board, the cell is under the
    snake, or the cell is closer than ``min_distance`` to another apple.
    After ``max_attempts`` rejections a single relaxed attempt only rejects
    exact overlaps; if that also fails the placement is skipped.
    """

    def __init__(
        self,
        width: int,
        height: int,
        rng: Optional[random.Random] = None,
        margin: int = APPLE_EDGE_MARGIN,
        min_distance: float = MIN_APPLE_DISTANCE,
        max_attempts: int = MAX_PLACEMENT_ATTEMPTS,
        correct_chance: float = CORRECT_ANSWER_CHANCE,
    ):
        self.width = width
        self.height = height
        self.rng = rng or random.Random()
        self.margin = margin
        self.min_distance = min_distance
        self.max_attempts = max_attempts
        self.correct_chance = correct_chance

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def place_apple(
        self,
        force_correct: bool,
        snake_cells: Iterable[Tuple[int, int]],
        apples: List[Apple],
        question: Question,
        used_values: Set[int],
    ) -> Optional[Apple]:
        """
        Try to add one apple to ``apples``.

        Args:
            force_correct: always use the question's answer as the value
            snake_cells: cells occupied by the snake
            apples: current apples; the new apple is appended on success
            question: the active question
            used_values: values already on the board; updated on success

        Returns:
            The placed apple, or None when every attempt was rejected.
        """
        occupied = set(snake_cells)

        for _ in range(self.max_attempts):
            candidate = self._draw_candidate(force_correct, question.answer, used_values)
            if candidate is None:
                continue
            if self._is_free(candidate, force_correct, occupied, apples, used_values, strict=True):
                return self._accept(candidate, apples, used_values)

        candidate = self._draw_candidate(force_correct, question.answer, used_values)
        if candidate is not None and self._is_free(
            candidate, force_correct, occupied, apples, used_values, strict=False
        ):
            logger.debug(f"Placed apple {candidate} with relaxed spacing")
            return self._accept(candidate, apples, used_values)

        logger.debug(
            f"Skipped apple placement after {self.max_attempts} attempts "
            f"({len(apples)} apples on board)"
        )
        return None

    def _cell_range(self, size: int) -> Tuple[int, int]:
        low, high = self.margin, size - 1 - self.margin
        if high < low:
            # Board too small for an interior
            return 0, size - 1
        return low, high

    def _draw_cell(self) -> Tuple[int, int]:
        x_low, x_high = self._cell_range(self.width)
        y_low, y_high = self._cell_range(self.height)
        return (self.rng.randint(x_low, x_high), self.rng.randint(y_low, y_high))

    def _draw_candidate(
        self, force_correct: bool, answer: int, used_values: Set[int]
    ) -> Optional[Apple]:
        cell = self._draw_cell()
        value = self._draw_value(force_correct, answer, used_values)
        if value is None:
            return None
        return Apple(position=cell, value=value)

    def _draw_value(self, force_correct: bool, answer: int, used_values: Set[int]) -> Optional[int]:
        if force_correct:
            return answer

        if self.rng.random() < self.correct_chance and answer not in used_values:
            return answer

        for _ in range(MAX_WRONG_VALUE_DRAWS):
            value = self._wrong_value(answer)
            if value not in used_values:
                return value
        return None

    def _wrong_value(self, answer: int) -> int:
        offset = self.rng.randint(WRONG_VALUE_OFFSET_MIN, WRONG_VALUE_OFFSET_MAX)
        value = max(MIN_APPLE_VALUE, answer + offset)
        if value == answer:
            if answer <= MIN_APPLE_VALUE:
                value = answer + 1
            else:
                value += self.rng.choice((1, -1))
        return value

    def _is_free(
        self,
        candidate: Apple,
        force_correct: bool,
        occupied: Set[Tuple[int, int]],
        apples: List[Apple],
        used_values: Set[int],
        strict: bool,
    ) -> bool:
        if not force_correct and candidate.value in used_values:
            return False
        if candidate.position in occupied:
            return False

        for apple in apples:
            if apple.position == candidate.position:
                return False
            if strict and math.hypot(apple.x - candidate.x, apple.y - candidate.y) < self.min_distance:
                return False
        return True

    @staticmethod
    def _accept(candidate: Apple, apples: List[Apple], used_values: Set[int]) -> Apple:
        used_values.add(candidate.value)
        apples.append(candidate)
        return candidate
