"""
GameState entity - a snapshot of the game at a point in time.
"""

from typing import List, Tuple, Optional

from .constants import ACTIVE


class GameState:
    """
    A snapshot of the game at a specific point in time.

    Attributes:
        tick_number: how many ticks have resolved in this session
        snake_positions: list of (x, y) from head to tail
        apples: list of (x, y, value) for every apple on the board
        score: current score
        lives: remaining lives
        question_text: the equation shown to the player
        answer: the value of the correct apples
        width, height: board dimensions in cells
        status: one of idle, loading, active, game_over
        direction: the direction the snake last moved in
        death_reason: why the game ended, if it has
    """

    def __init__(
        self,
        tick_number: int,
        snake_positions: List[Tuple[int, int]],
        apples: List[Tuple[int, int, int]],
        score: int,
        lives: int,
        question_text: str,
        answer: int,
        width: int,
        height: int,
        status: str,
        direction: str,
        death_reason: Optional[str] = None
    ):
        self.tick_number = tick_number
        self.snake_positions = snake_positions
        self.apples = apples
        self.score = score
        self.lives = lives
        self.question_text = question_text
        self.answer = answer
        self.width = width
        self.height = height
        self.status = status
        self.direction = direction
        self.death_reason = death_reason

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    @property
    def head(self) -> Optional[Tuple[int, int]]:
        return self.snake_positions[0] if self.snake_positions else None

    def print_board(self) -> str:
        """
        Returns a string representation of the board with:
        . = empty space
        a,b,c... = apples (values listed under the board)
        H = snake head
        S = snake body
        Rows are printed top to bottom, matching the screen.
        """
        # Create empty board
        board = [['.' for _ in range(self.width)] for _ in range(self.height)]

        # Place apples
        legend = []
        for idx, (ax, ay, value) in enumerate(self.apples):
            label = chr(ord('a') + idx)
            if 0 <= ax < self.width and 0 <= ay < self.height:
                board[ay][ax] = label
            legend.append(f"{label}={value}")

        # Place snake
        for pos_idx, (x, y) in enumerate(self.snake_positions):
            if 0 <= x < self.width and 0 <= y < self.height:
                board[y][x] = 'H' if pos_idx == 0 else 'S'

        result = [f"{self.question_text}  Score: {self.score}  Lives: {self.lives}"]
        for y in range(self.height):
            result.append(f"{y:2d} {' '.join(board[y])}")

        # Add x-axis labels at the bottom (last digit keeps columns aligned)
        result.append("   " + " ".join(str(i % 10) for i in range(self.width)))
        if legend:
            result.append("Apples: " + ", ".join(legend))

        return "\n".join(result)

    def to_dict(self) -> dict:
        return {
            "tick_number": self.tick_number,
            "snake_positions": [list(cell) for cell in self.snake_positions],
            "apples": [{"x": x, "y": y, "value": v} for x, y, v in self.apples],
            "score": self.score,
            "lives": self.lives,
            "question": self.question_text,
            "width": self.width,
            "height": self.height,
            "status": self.status,
            "direction": self.direction,
            "death_reason": self.death_reason,
        }

    def __repr__(self):
        return (
            f"<GameState tick={self.tick_number}, status={self.status}, "
            f"score={self.score}, lives={self.lives}, apples={self.apples}>"
        )
