"""
Game constants for Math Snake.
"""

# Movement directions
UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
VALID_MOVES = {UP, DOWN, LEFT, RIGHT}

# Screen orientation: (0, 0) is the top-left cell, y grows downward
DIRECTION_VECTORS = {
    UP: (0, -1),
    DOWN: (0, 1),
    LEFT: (-1, 0),
    RIGHT: (1, 0),
}

OPPOSITE_MOVES = {
    UP: DOWN,
    DOWN: UP,
    LEFT: RIGHT,
    RIGHT: LEFT,
}

# Board settings
CELL_SIZE = 20
MIN_CELL_SIZE = 20
MAX_GRID_CELLS_X = 32
MAX_GRID_CELLS_Y = 27
MAX_BOARD_WIDTH_PX = 640
MAX_BOARD_HEIGHT_PX = 540
UI_RESERVED_HEIGHT_PX = 100

# Timing (milliseconds)
DEFAULT_TICK_MS = 180
TOUCH_TICK_MS = 200

# Game settings
INITIAL_SNAKE_LENGTH = 3
MAX_APPLES = 5
MIN_APPLE_DISTANCE = 5
MAX_LIVES = 3
GUARANTEED_CORRECT_APPLES = 1
CORRECT_ANSWER_CHANCE = 0.4
POINTS_PER_CORRECT = 10

# Apple placement
APPLE_EDGE_MARGIN = 1
MAX_PLACEMENT_ATTEMPTS = 100
WRONG_VALUE_OFFSET_MIN = -5
WRONG_VALUE_OFFSET_MAX = 4
MIN_APPLE_VALUE = 1
MAX_WRONG_VALUE_DRAWS = 50

# Question ranges
ADDITION_OPERAND_RANGE = (1, 15)
SUBTRACTION_MINUEND_RANGE = (10, 24)

# Death reasons
DEATH_WALL = "wall"
DEATH_SELF = "self"
DEATH_LIVES = "lives"

# Game status
IDLE = "idle"
LOADING = "loading"
ACTIVE = "active"
GAME_OVER = "game_over"
