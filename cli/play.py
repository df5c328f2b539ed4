#!/usr/bin/env python3
"""
Play Math Snake in a pygame window.

Usage:
    python cli/play.py
    python cli/play.py --seed 42 --touch

Controls:
    Arrows / WASD: move
    Mouse drag or touch swipe: move
    M: toggle music
    R or Enter: restart after game over
    Esc: quit
"""

import os
import sys
import argparse
import logging

import pygame
from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import GameConfig, grid_for_window  # noqa: E402
from controls.keyboard import KeyboardInput, SwipeInput  # noqa: E402
from domain.constants import (  # noqa: E402
    ACTIVE,
    DIRECTION_VECTORS,
    GAME_OVER,
    INITIAL_SNAKE_LENGTH,
)
from domain.game_state import GameState  # noqa: E402
from main import MathSnakeGame  # noqa: E402
from services.audio import PygameAudioSink  # noqa: E402
from services.render import RenderSurface  # noqa: E402
from services.screens import LoadingSequence, ScreenController  # noqa: E402
from services.ticker import ManualTicker  # noqa: E402

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

HUD_HEIGHT = 60
EFFECT_MS = 800
FRAME_RATE = 60

# Colors (R, G, B)
BG_TOP = (18, 26, 38)
BG_BOTTOM = (9, 14, 22)
GRID_LINE = (30, 44, 61)
HEAD_COLOR = (112, 224, 120)
BODY_COLOR = (66, 168, 90)
APPLE_COLOR = (255, 83, 95)
APPLE_INNER = (255, 178, 184)
CELEBRATION_COLOR = (255, 210, 80)
WHITE = (240, 240, 240)
SHADOW = (0, 0, 0)
BAR_BG = (40, 52, 70)
BAR_FILL = (112, 224, 120)


def get_ui_font(size):
    """Load a preferred UI font, then fall back safely to pygame default."""
    for name in ["Bahnschrift", "Segoe UI Black", "Arial Black", "DejaVu Sans"]:
        path = pygame.font.match_font(name)
        if path:
            return pygame.font.Font(path, size)
    return pygame.font.Font(None, size)


def apple_font(cell_size):
    return get_ui_font(max(10, cell_size // 2 + 2))


class PygameRenderSurface(RenderSurface):
    """
    Keeps the latest state and the running celebration effects; the frame
    loop draws them every frame so effects can fade between ticks.
    """

    def __init__(self, cell_size: int):
        self.cell_size = cell_size
        self.state = None
        self.effects = []

    def render(self, state: GameState) -> None:
        self.state = state

    def celebrate(self, cell, points) -> None:
        self.effects.append({"cell": cell, "text": f"+{points}", "remaining_ms": EFFECT_MS})
        self.effects.append({"cell": None, "text": "GREAT!", "remaining_ms": EFFECT_MS})

    def update(self, dt_ms: float) -> None:
        for effect in self.effects:
            effect["remaining_ms"] = max(0, effect["remaining_ms"] - dt_ms)
        self.effects = [e for e in self.effects if e["remaining_ms"] > 0]

    def grid_rect(self, cell, padding=0):
        x, y = cell
        return pygame.Rect(
            x * self.cell_size + padding,
            HUD_HEIGHT + y * self.cell_size + padding,
            self.cell_size - padding * 2,
            self.cell_size - padding * 2,
        )

    def draw(self, surface, fonts) -> None:
        state = self.state
        draw_background(surface)
        if state is None:
            return

        board = pygame.Rect(0, HUD_HEIGHT, state.width * self.cell_size, state.height * self.cell_size)
        for x in range(board.left, board.right + 1, self.cell_size):
            pygame.draw.line(surface, GRID_LINE, (x, board.top), (x, board.bottom), 1)
        for y in range(board.top, board.bottom + 1, self.cell_size):
            pygame.draw.line(surface, GRID_LINE, (board.left, y), (board.right, y), 1)

        for ax, ay, value in state.apples:
            rect = self.grid_rect((ax, ay), padding=1)
            pygame.draw.circle(surface, APPLE_COLOR, rect.center, rect.width // 2)
            pygame.draw.circle(surface, APPLE_INNER, rect.center, rect.width // 2, 1)
            label = fonts["apple"].render(str(value), True, WHITE)
            surface.blit(label, label.get_rect(center=rect.center))

        for i, segment in enumerate(state.snake_positions):
            color = HEAD_COLOR if i == 0 else BODY_COLOR
            pygame.draw.rect(surface, color, self.grid_rect(segment, padding=1), border_radius=5)
        if state.snake_positions:
            self._draw_eyes(surface, state.snake_positions[0], state.direction)

        self._draw_hud(surface, fonts, state)
        self._draw_effects(surface, fonts, state)

    def _draw_eyes(self, surface, head, direction):
        cx, cy = self.grid_rect(head, padding=1).center
        dx, dy = DIRECTION_VECTORS[direction]
        offset = max(2, self.cell_size // 5)
        if dx:
            eyes = [(cx + dx * offset, cy - 3), (cx + dx * offset, cy + 3)]
        else:
            eyes = [(cx - 3, cy + dy * offset), (cx + 3, cy + dy * offset)]
        for ex, ey in eyes:
            pygame.draw.circle(surface, SHADOW, (ex, ey), 2)

    def _draw_hud(self, surface, fonts, state):
        width = surface.get_width()
        panel = pygame.Surface((width, HUD_HEIGHT), pygame.SRCALPHA)
        panel.fill((0, 0, 0, 120))
        surface.blit(panel, (0, 0))

        question = fonts["hud"].render(state.question_text, True, WHITE)
        surface.blit(question, question.get_rect(center=(width // 2, HUD_HEIGHT // 2)))
        score = fonts["small"].render(f"Score: {state.score}", True, WHITE)
        surface.blit(score, (12, HUD_HEIGHT // 2 - score.get_height() // 2))
        lives = fonts["small"].render(f"Lives: {state.lives}", True, WHITE)
        surface.blit(lives, (width - 12 - lives.get_width(), HUD_HEIGHT // 2 - lives.get_height() // 2))

    def _draw_effects(self, surface, fonts, state):
        for effect in self.effects:
            progress = 1.0 - effect["remaining_ms"] / EFFECT_MS
            if effect["cell"] is None:
                label = fonts["title"].render(effect["text"], True, CELEBRATION_COLOR)
                center = (surface.get_width() // 2, HUD_HEIGHT + state.height * self.cell_size // 2)
            else:
                label = fonts["small"].render(effect["text"], True, CELEBRATION_COLOR)
                rect = self.grid_rect(effect["cell"])
                center = (rect.centerx + 10, rect.top - 10 - int(20 * progress))
            label.set_alpha(max(0, int(255 * (1.0 - progress))))
            surface.blit(label, label.get_rect(center=center))


class PygameScreenController(ScreenController):
    """Tracks which overlay the window should show."""

    def __init__(self):
        self.screen = "welcome"

    def on_status_change(self, previous: str, current: str, state: GameState) -> None:
        if current == ACTIVE:
            self.screen = "game"
        elif current == GAME_OVER:
            self.screen = "game_over"


def draw_background(surface):
    """Draw a vertical gradient background."""
    height = surface.get_height()
    for y in range(height):
        t = y / max(1, height)
        color = tuple(int(BG_TOP[i] + (BG_BOTTOM[i] - BG_TOP[i]) * t) for i in range(3))
        pygame.draw.line(surface, color, (0, y), (surface.get_width(), y))


def draw_panel(surface, lines, fonts):
    """Draw a centered panel of (text, font_key) lines."""
    rendered = [fonts[key].render(text, True, WHITE) for text, key in lines]
    content_w = max(r.get_width() for r in rendered)
    content_h = sum(r.get_height() + 10 for r in rendered) - 10

    panel_rect = pygame.Rect(0, 0, content_w + 48, content_h + 36)
    panel_rect.center = surface.get_rect().center
    panel = pygame.Surface(panel_rect.size, pygame.SRCALPHA)
    panel.fill((0, 0, 0, 190))
    surface.blit(panel, panel_rect.topleft)

    y = panel_rect.top + 18
    for r in rendered:
        surface.blit(r, r.get_rect(centerx=panel_rect.centerx, y=y))
        y += r.get_height() + 10


def draw_loading(surface, fonts, loading):
    draw_background(surface)
    rect = surface.get_rect()
    bar = pygame.Rect(0, 0, rect.width * 2 // 3, 18)
    bar.center = rect.center
    pygame.draw.rect(surface, BAR_BG, bar, border_radius=9)
    fill = bar.copy()
    fill.width = int(bar.width * loading.progress / 100)
    pygame.draw.rect(surface, BAR_FILL, fill, border_radius=9)
    text = fonts["small"].render(loading.message, True, WHITE)
    surface.blit(text, text.get_rect(centerx=rect.centerx, y=bar.bottom + 14))


def window_size(config: GameConfig):
    return config.grid_width * config.cell_size, config.grid_height * config.cell_size + HUD_HEIGHT


def resize_board(window_width, window_height, game, surface, fonts):
    """Fit the grid to a resized window. Returns False if the window is too small to play in."""
    cell_size, grid_w, grid_h = grid_for_window(window_width, window_height, reserved_height=HUD_HEIGHT)
    if grid_w < INITIAL_SNAKE_LENGTH or grid_h < 1:
        return False

    surface.cell_size = cell_size
    fonts["apple"] = apple_font(cell_size)
    game.resize(grid_w, grid_h)
    logger.info(f"Board resized to {grid_w}x{grid_h} cells of {cell_size}px")
    return True


def enable_touch(config: GameConfig, game):
    """Switch to touch play on the first finger event; an explicit tick interval is kept."""
    if config.touch:
        return
    config.touch = True
    game.set_tick_interval(config.effective_tick_ms)


def main():
    parser = argparse.ArgumentParser(
        description='Play Math Snake',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible game')
    parser.add_argument('--width', type=int, default=None, help='Grid width in cells')
    parser.add_argument('--height', type=int, default=None, help='Grid height in cells')
    parser.add_argument('--tick-ms', type=int, default=None, help='Milliseconds per move')
    parser.add_argument('--touch', action='store_true', default=None, help='Slower tick for swipe play')
    parser.add_argument('--mute', action='store_true', help='Disable audio')
    args = parser.parse_args()

    config = GameConfig.from_env().with_overrides(
        seed=args.seed,
        grid_width=args.width,
        grid_height=args.height,
        tick_ms=args.tick_ms,
        touch=args.touch,
    )
    if args.mute:
        config.sound = False

    pygame.mixer.pre_init(44100, -16, 1, 512)
    pygame.init()
    pygame.display.set_caption("Math Snake")
    screen = pygame.display.set_mode(window_size(config), pygame.RESIZABLE)
    clock = pygame.time.Clock()
    fonts = {
        "title": get_ui_font(34),
        "hud": get_ui_font(24),
        "small": get_ui_font(18),
        "apple": apple_font(config.cell_size),
    }

    ticker = ManualTicker()
    surface = PygameRenderSurface(config.cell_size)
    screens = PygameScreenController()
    audio_sink = PygameAudioSink(enabled=config.sound)
    game = MathSnakeGame(
        width=config.grid_width,
        height=config.grid_height,
        tick_ms=config.effective_tick_ms,
        rng=config.make_rng(),
        ticker=ticker,
        render_surface=surface,
        audio_sink=audio_sink,
        screen_controller=screens,
    )
    keyboard = KeyboardInput(game)
    swipe = SwipeInput(game)
    loading = None

    def begin_loading():
        nonlocal loading
        loading = LoadingSequence()
        screens.screen = "loading"

    running = True
    while running:
        dt_ms = clock.tick(FRAME_RATE)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                resize_board(event.w, event.h, game, surface, fonts)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_m:
                    audio_sink.toggle_music()
                elif screens.screen == "welcome" and event.key in (pygame.K_RETURN, pygame.K_SPACE):
                    begin_loading()
                elif screens.screen == "game_over" and event.key in (pygame.K_r, pygame.K_RETURN):
                    game.restart()
                elif screens.screen == "game":
                    keyboard.on_key(pygame.key.name(event.key))
            elif event.type == pygame.MOUSEBUTTONDOWN:
                if screens.screen == "welcome":
                    begin_loading()
                elif screens.screen == "game_over":
                    game.restart()
                else:
                    swipe.on_press(*event.pos)
            elif event.type == pygame.MOUSEBUTTONUP:
                swipe.on_release(event.pos[0], event.pos[1], pygame.time.get_ticks())
            elif event.type == pygame.FINGERDOWN:
                enable_touch(config, game)
                swipe.on_press(event.x * screen.get_width(), event.y * screen.get_height())
            elif event.type == pygame.FINGERUP:
                swipe.on_release(event.x * screen.get_width(), event.y * screen.get_height(), pygame.time.get_ticks())

        if screens.screen == "loading":
            if loading.advance(dt_ms):
                game.start()
                audio_sink.toggle_music()
            else:
                draw_loading(screen, fonts, loading)
                pygame.display.flip()
                continue

        ticker.advance(dt_ms)
        surface.update(dt_ms)

        if screens.screen == "welcome":
            draw_background(screen)
            draw_panel(screen, [
                ("Math Snake", "title"),
                ("Eat the apple with the right answer.", "small"),
                ("Wrong apples cost a life.", "small"),
                ("Press Enter or click to start", "small"),
            ], fonts)
        else:
            surface.draw(screen, fonts)
            if screens.screen == "game_over":
                draw_panel(screen, [
                    ("Game Over", "title"),
                    (f"Score: {game.final_score}", "hud"),
                    ("Press R to restart or Esc to quit", "small"),
                ], fonts)

        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
