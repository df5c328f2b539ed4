"""
Runtime configuration for Math Snake.

Values come from the environment (a ``.env`` file is loaded by the entry
points via python-dotenv) and can be overridden on the command line.
Gameplay constants such as MAX_APPLES stay fixed in domain.constants.
"""

import os
import random
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from domain.constants import (
    CELL_SIZE,
    DEFAULT_TICK_MS,
    MAX_BOARD_HEIGHT_PX,
    MAX_BOARD_WIDTH_PX,
    MAX_GRID_CELLS_X,
    MAX_GRID_CELLS_Y,
    MIN_CELL_SIZE,
    TOUCH_TICK_MS,
    UI_RESERVED_HEIGHT_PX,
)

ENV_PREFIX = "MATH_SNAKE_"
TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


def _sanitize_env_value(value: Optional[str]) -> Optional[str]:
    """
    Clean up env-provided strings that may include surrounding quotes or whitespace.

    Some shells/export flows set values like MATH_SNAKE_SEED="42".
    """
    if value is None:
        return None
    cleaned = value.strip()
    if len(cleaned) >= 2 and (
        (cleaned[0] == '"' and cleaned[-1] == '"') or (cleaned[0] == "'" and cleaned[-1] == "'")
    ):
        cleaned = cleaned[1:-1].strip()
    return cleaned or None


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = _sanitize_env_value(os.getenv(ENV_PREFIX + name))
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got '{raw}'")


def _env_bool(name: str, default: bool) -> bool:
    raw = _sanitize_env_value(os.getenv(ENV_PREFIX + name))
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got '{raw}'")


@dataclass
class GameConfig:
    grid_width: int = MAX_GRID_CELLS_X
    grid_height: int = MAX_GRID_CELLS_Y
    cell_size: int = CELL_SIZE
    tick_ms: Optional[int] = None
    touch: bool = False
    seed: Optional[int] = None
    sound: bool = True

    @classmethod
    def from_env(cls) -> "GameConfig":
        return cls(
            grid_width=_env_int("GRID_WIDTH", MAX_GRID_CELLS_X),
            grid_height=_env_int("GRID_HEIGHT", MAX_GRID_CELLS_Y),
            cell_size=_env_int("CELL_SIZE", CELL_SIZE),
            tick_ms=_env_int("TICK_MS", None),
            touch=_env_bool("TOUCH", False),
            seed=_env_int("SEED", None),
            sound=_env_bool("SOUND", True),
        )

    def with_overrides(self, **overrides) -> "GameConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def effective_tick_ms(self) -> int:
        """The configured interval, else the default for the input mode (touch is slower)."""
        if self.tick_ms is not None:
            return self.tick_ms
        return TOUCH_TICK_MS if self.touch else DEFAULT_TICK_MS

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)


def board_size_for_window(
    window_width: int, window_height: int, reserved_height: int = UI_RESERVED_HEIGHT_PX
) -> Tuple[int, int]:
    """Pixel size of the board for a window, leaving room for the HUD and capped at 640 x 540."""
    width = min(window_width, MAX_BOARD_WIDTH_PX)
    height = min(max(window_height - reserved_height, 0), MAX_BOARD_HEIGHT_PX)
    return width, height


def compute_grid_dimensions(available_width: int, available_height: int) -> Tuple[int, int, int]:
    """
    Derive the cell size and grid size from the space available for the board.

    Returns:
        (cell_size, grid_width, grid_height), the grid never exceeding
        MAX_GRID_CELLS_X x MAX_GRID_CELLS_Y
    """
    cell_size = max(
        MIN_CELL_SIZE,
        min(available_width // MAX_GRID_CELLS_X, available_height // MAX_GRID_CELLS_Y),
    )
    # Use the cells that are actually visible, not the maximum possible
    grid_width = min(available_width // cell_size, MAX_GRID_CELLS_X)
    grid_height = min(available_height // cell_size, MAX_GRID_CELLS_Y)
    return cell_size, grid_width, grid_height


def grid_for_window(
    window_width: int, window_height: int, reserved_height: int = UI_RESERVED_HEIGHT_PX
) -> Tuple[int, int, int]:
    """Cell and grid size for a window of the given pixel size."""
    return compute_grid_dimensions(*board_size_for_window(window_width, window_height, reserved_height))
