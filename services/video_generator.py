"""
Video Generation Service for Math Snake sessions

This service turns a list of recorded GameState frames into an MP4 by:
1. Rendering each frame using PIL (Pillow)
2. Encoding frames to video using MoviePy/FFmpeg

The rendering follows the game window layout:
- HUD strip with the question, score and lives
- Board with grid lines
- Snake body and head with eyes
- Apples labelled with their values
"""

import os
import logging
import tempfile
from typing import List, Tuple, Optional

from PIL import Image, ImageDraw, ImageFont
from moviepy import ImageSequenceClip
import numpy as np

from domain.constants import CELL_SIZE, DIRECTION_VECTORS, GAME_OVER
from domain.game_state import GameState

logger = logging.getLogger(__name__)

# Video settings
DEFAULT_FPS = 5  # Close to the 180ms tick
HUD_HEIGHT = 60


class ColorScheme:
    """Color configuration matching the game window"""

    BACKGROUND = "#121A26"
    GRID_LINE = "#1E2C3D"
    SNAKE_BODY = "#42A85A"
    SNAKE_HEAD = "#70E078"
    APPLE = "#FF535F"
    APPLE_TEXT = "#FFFFFF"
    HUD_BACKGROUND = "#0B111A"
    HUD_TEXT = "#F0F0F0"
    GAME_OVER_TEXT = "#FFB2B8"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to RGB tuple"""
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


class SnakeVideoGenerator:
    """Generate MP4 videos from recorded Math Snake frames"""

    def __init__(self, cell_size: int = CELL_SIZE, fps: int = DEFAULT_FPS):
        self.cell_size = cell_size
        self.fps = fps

        # Try to load a font, fallback to default if not available
        try:
            self.font_hud = ImageFont.truetype("DejaVuSans-Bold.ttf", 20)
            self.font_apple = ImageFont.truetype("DejaVuSans-Bold.ttf", max(8, cell_size // 2))
        except Exception:
            self.font_hud = ImageFont.load_default()
            self.font_apple = ImageFont.load_default()

    def frame_size(self, state: GameState) -> Tuple[int, int]:
        return state.width * self.cell_size, state.height * self.cell_size + HUD_HEIGHT

    def render_frame(self, state: GameState) -> Image.Image:
        """Render a single frame of the game"""
        width, height = self.frame_size(state)
        img = Image.new('RGB', (width, height), hex_to_rgb(ColorScheme.BACKGROUND))
        draw = ImageDraw.Draw(img)

        self._draw_hud(draw, state, width)
        self._draw_grid(draw, state)

        for ax, ay, value in state.apples:
            self._draw_apple(draw, ax, ay, value)

        for i, (x, y) in enumerate(state.snake_positions):
            color = ColorScheme.SNAKE_HEAD if i == 0 else ColorScheme.SNAKE_BODY
            self._draw_cell(draw, x, y, hex_to_rgb(color), padding=1)

        if state.snake_positions:
            self._draw_eyes(draw, state.snake_positions[0], state.direction)

        if state.status == GAME_OVER:
            text = f"Game Over - Score: {state.score}"
            bbox = draw.textbbox((0, 0), text, font=self.font_hud)
            draw.text(
                (width // 2 - (bbox[2] - bbox[0]) // 2, HUD_HEIGHT + (height - HUD_HEIGHT) // 2),
                text,
                fill=hex_to_rgb(ColorScheme.GAME_OVER_TEXT),
                font=self.font_hud
            )

        return img

    def _draw_hud(self, draw: ImageDraw.ImageDraw, state: GameState, width: int):
        draw.rectangle([0, 0, width, HUD_HEIGHT], fill=hex_to_rgb(ColorScheme.HUD_BACKGROUND))
        draw.text((12, 18), state.question_text, fill=hex_to_rgb(ColorScheme.HUD_TEXT), font=self.font_hud)

        status_text = f"Score: {state.score}  Lives: {state.lives}"
        bbox = draw.textbbox((0, 0), status_text, font=self.font_hud)
        draw.text(
            (width - 12 - (bbox[2] - bbox[0]), 18),
            status_text,
            fill=hex_to_rgb(ColorScheme.HUD_TEXT),
            font=self.font_hud
        )

    def _draw_grid(self, draw: ImageDraw.ImageDraw, state: GameState):
        board_bottom = HUD_HEIGHT + state.height * self.cell_size
        board_right = state.width * self.cell_size
        for i in range(state.width + 1):
            x = i * self.cell_size
            draw.line([x, HUD_HEIGHT, x, board_bottom], fill=hex_to_rgb(ColorScheme.GRID_LINE), width=1)
        for i in range(state.height + 1):
            y = HUD_HEIGHT + i * self.cell_size
            draw.line([0, y, board_right, y], fill=hex_to_rgb(ColorScheme.GRID_LINE), width=1)

    def _cell_origin(self, x: int, y: int) -> Tuple[int, int]:
        return x * self.cell_size, HUD_HEIGHT + y * self.cell_size

    def _draw_cell(self, draw: ImageDraw.ImageDraw, x: int, y: int, color: Tuple[int, int, int], padding: int = 1):
        """Draw a single snake segment"""
        px, py = self._cell_origin(x, y)
        draw.rectangle(
            [px + padding, py + padding, px + self.cell_size - padding, py + self.cell_size - padding],
            fill=color
        )

    def _draw_apple(self, draw: ImageDraw.ImageDraw, x: int, y: int, value: int):
        px, py = self._cell_origin(x, y)
        draw.ellipse(
            [px + 1, py + 1, px + self.cell_size - 1, py + self.cell_size - 1],
            fill=hex_to_rgb(ColorScheme.APPLE)
        )
        label = str(value)
        bbox = draw.textbbox((0, 0), label, font=self.font_apple)
        draw.text(
            (px + (self.cell_size - (bbox[2] - bbox[0])) // 2, py + (self.cell_size - (bbox[3] - bbox[1])) // 2 - bbox[1]),
            label,
            fill=hex_to_rgb(ColorScheme.APPLE_TEXT),
            font=self.font_apple
        )

    def _draw_eyes(self, draw: ImageDraw.ImageDraw, head: Tuple[int, int], direction: str):
        px, py = self._cell_origin(*head)
        cx, cy = px + self.cell_size // 2, py + self.cell_size // 2
        dx, dy = DIRECTION_VECTORS.get(direction, (1, 0))
        offset = self.cell_size // 5
        eye = max(1, self.cell_size // 10)
        if dx:
            eyes = [(cx + dx * offset, cy - 3), (cx + dx * offset, cy + 3)]
        else:
            eyes = [(cx - 3, cy + dy * offset), (cx + 3, cy + dy * offset)]
        for ex, ey in eyes:
            draw.ellipse([ex - eye, ey - eye, ex + eye, ey + eye], fill=(0, 0, 0))

    def generate_video(self, frames: List[GameState], output_path: Optional[str] = None) -> str:
        """
        Generate a video from recorded frames

        Args:
            frames: GameState snapshots in play order
            output_path: Optional output path (if None, uses temp file)

        Returns:
            Path to the generated video file
        """
        if not frames:
            raise ValueError("Cannot generate a video without frames")

        logger.info(f"Rendering {len(frames)} frames")
        images = []
        for i, state in enumerate(frames):
            if i % 50 == 0:
                logger.info(f"Rendering frame {i + 1}/{len(frames)}")
            images.append(np.array(self.render_frame(state)))

        # Frames must share a size; a resize mid-session pads to the largest
        max_w = max(img.shape[1] for img in images)
        max_h = max(img.shape[0] for img in images)
        images = [self._pad(img, max_w, max_h) for img in images]

        if output_path is None:
            output_path = os.path.join(tempfile.gettempdir(), "math_snake_replay.mp4")

        clip = ImageSequenceClip(images, fps=self.fps)
        clip.write_videofile(output_path, codec='libx264', audio=False, logger=None)

        logger.info(f"Video created successfully at {output_path}")
        return output_path

    @staticmethod
    def _pad(image: np.ndarray, width: int, height: int) -> np.ndarray:
        if image.shape[1] == width and image.shape[0] == height:
            return image
        padded = np.zeros((height, width, 3), dtype=image.dtype)
        padded[:image.shape[0], :image.shape[1]] = image
        return padded
