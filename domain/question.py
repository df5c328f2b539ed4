"""
Arithmetic questions shown above the board.
"""

import random
from dataclasses import dataclass
from typing import Optional, Set, Tuple

from .constants import ADDITION_OPERAND_RANGE, SUBTRACTION_MINUEND_RANGE

ADD = "+"
SUBTRACT = "-"
OPERATIONS = (ADD, SUBTRACT)


@dataclass(frozen=True)
class Question:
    text: str
    answer: int
    operation: str
    operands: Tuple[int, int]


class QuestionGenerator:
    """
    Produces addition and subtraction questions with small operands.

    Addition draws both operands from [1, 15]. Subtraction draws the first
    operand from [10, 24] and the second from [0, first - 1], so the answer
    is never negative.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, used_values: Optional[Set[int]] = None) -> Question:
        """
        Return a new question.

        Args:
            used_values: apple values tracked for the previous question; the
                set is cleared in place since a new question invalidates it.
        """
        operation = self.rng.choice(OPERATIONS)

        if operation == ADD:
            low, high = ADDITION_OPERAND_RANGE
            num1 = self.rng.randint(low, high)
            num2 = self.rng.randint(low, high)
            answer = num1 + num2
        else:
            low, high = SUBTRACTION_MINUEND_RANGE
            num1 = self.rng.randint(low, high)
            num2 = self.rng.randrange(num1)
            answer = num1 - num2

        if used_values is not None:
            used_values.clear()

        return Question(
            text=f"{num1} {operation} {num2} = ?",
            answer=answer,
            operation=operation,
            operands=(num1, num2),
        )
