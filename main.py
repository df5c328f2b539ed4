import argparse
import json
import logging
import random
import time
from typing import Dict, Optional

from dotenv import load_dotenv

from config import GameConfig
from controls import get_player_class, list_variants
from controls.base import Player
from domain.apples import ApplePlacer, apple_at, count_correct
from domain.constants import (
    ACTIVE,
    DEATH_LIVES,
    DEATH_SELF,
    DEATH_WALL,
    DEFAULT_TICK_MS,
    GAME_OVER,
    GUARANTEED_CORRECT_APPLES,
    IDLE,
    INITIAL_SNAKE_LENGTH,
    LOADING,
    MAX_APPLES,
    MAX_GRID_CELLS_X,
    MAX_GRID_CELLS_Y,
    OPPOSITE_MOVES,
    POINTS_PER_CORRECT,
    VALID_MOVES,
)
from domain.game_state import GameState
from domain.question import QuestionGenerator
from domain.session import GameSession
from domain.snake import create_initial_snake
from services import audio
from services.audio import AudioSink, SilentAudioSink
from services.render import (
    FanoutRenderSurface,
    NullRenderSurface,
    RecordingRenderSurface,
    RenderSurface,
    TextRenderSurface,
)
from services.screens import LoggingScreenController, ScreenController
from services.ticker import ManualTicker, Ticker

load_dotenv()

logger = logging.getLogger(__name__)


class MathSnakeGame:
    """
    Manages:
      - Board (width, height)
      - The snake
      - Apples and the active question
      - Score and lives
      - Tick scheduling and status transitions
    """

    def __init__(
        self,
        width: int = MAX_GRID_CELLS_X,
        height: int = MAX_GRID_CELLS_Y,
        tick_ms: int = DEFAULT_TICK_MS,
        rng: Optional[random.Random] = None,
        ticker: Optional[Ticker] = None,
        render_surface: Optional[RenderSurface] = None,
        audio_sink: Optional[AudioSink] = None,
        screen_controller: Optional[ScreenController] = None
    ):
        self._validate_grid(width, height)
        if tick_ms <= 0:
            raise ValueError(f"Tick interval must be positive, got {tick_ms}")

        self.width = width
        self.height = height
        self.tick_ms = tick_ms
        self.rng = rng or random.Random()
        self.questions = QuestionGenerator(self.rng)
        self.placer = ApplePlacer(width, height, self.rng)
        self.ticker = ticker or ManualTicker()
        self.render_surface = render_surface or NullRenderSurface()
        self.audio_sink = audio_sink or SilentAudioSink()
        self.screen_controller = screen_controller or ScreenController()
        self.session: Optional[GameSession] = None

    @staticmethod
    def _validate_grid(width: int, height: int):
        if width < INITIAL_SNAKE_LENGTH or height < 1:
            raise ValueError(
                f"Grid {width}x{height} cannot hold a snake of length {INITIAL_SNAKE_LENGTH}."
            )

    @property
    def status(self) -> str:
        return self.session.status if self.session else IDLE

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    @property
    def final_score(self) -> Optional[int]:
        """The score of a finished session, None while playing."""
        if self.session is None or self.session.status != GAME_OVER:
            return None
        return self.session.score

    def get_current_state(self) -> Optional[GameState]:
        """
        Return a snapshot of the current board as a GameState.
        """
        return self.session.snapshot() if self.session else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """
        Begin a fresh session from any status:
          1) Stop the previous ticker
          2) Reset snake, score, lives and direction
          3) Generate a question and fill the board
          4) Start ticking
        """
        self.ticker.stop()
        previous = self.status

        session = GameSession(
            snake=create_initial_snake(self.width, self.height),
            question=self.questions.generate(),
            width=self.width,
            height=self.height,
        )
        self.session = session
        self._transition(LOADING, previous=previous)

        # Guaranteed correct apple first, then fill the rest
        self._place_apple(force_correct=True)
        for _ in range(MAX_APPLES - GUARANTEED_CORRECT_APPLES):
            self._place_apple(force_correct=False)

        self._transition(ACTIVE)
        self._play(audio.START)
        logger.info(f"New game on {self.width}x{self.height} grid. Question: {session.question.text}")

        self.render_surface.render(session.snapshot())
        self.ticker.start(self.tick_ms, self.tick)

    def restart(self):
        self.start()

    def set_tick_interval(self, tick_ms: int):
        """Change the tick speed, e.g. when switching to touch controls."""
        if tick_ms <= 0:
            raise ValueError(f"Tick interval must be positive, got {tick_ms}")
        self.tick_ms = tick_ms
        if self.is_active:
            self.ticker.stop()
            self.ticker.start(self.tick_ms, self.tick)

    def change_direction(self, direction: str) -> bool:
        """
        Record a pending direction for the next tick.

        Reversals of the current direction are ignored, as is any input
        while no game is active. Later calls before the tick overwrite
        earlier ones.

        Returns:
            True if the direction was accepted.
        """
        if direction not in VALID_MOVES:
            raise ValueError(f"Unknown direction '{direction}'. Valid: {sorted(VALID_MOVES)}")

        session = self.session
        if session is None or not session.is_active:
            return False
        if direction == OPPOSITE_MOVES[session.direction]:
            return False

        session.pending_direction = direction
        return True

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def tick(self):
        """
        Execute one step:
          1) Commit the pending direction
          2) Compute the new head
          3) Wall and self collisions end the game
          4) Resolve apple eating (score, lives, new question)
          5) Move the snake, growing on any eat
          6) Reset the board around a new question
          7) Restore the apple invariants
          8) Render
        """
        session = self.session
        if session is None or not session.is_active:
            return

        session.tick_number += 1
        session.direction = session.pending_direction
        snake = session.snake
        new_head = snake.next_head(session.direction)

        x, y = new_head
        if x < 0 or x >= session.width or y < 0 or y >= session.height:
            self._game_over(DEATH_WALL)
            return

        if snake.occupies(new_head):
            self._game_over(DEATH_SELF)
            return

        apple = apple_at(session.apples, new_head)
        correct_eaten = False
        if apple is not None:
            session.used_values.discard(apple.value)

            if apple.value == session.question.answer:
                correct_eaten = True
                session.score += POINTS_PER_CORRECT
                self._play(audio.CORRECT)
                session.question = self.questions.generate(session.used_values)
                logger.debug(f"Correct apple {apple.value}. Next question: {session.question.text}")
            else:
                session.lives -= 1
                self._play(audio.WRONG)
                logger.debug(f"Wrong apple {apple.value}. Lives left: {session.lives}")
                if session.lives <= 0:
                    self._game_over(DEATH_LIVES)
                    return

            session.apples.remove(apple)

        snake.advance(new_head, grow=apple is not None)

        if correct_eaten:
            self.render_surface.celebrate(new_head, POINTS_PER_CORRECT)
            session.apples.clear()
            self._place_apple(force_correct=True)

        self._replenish_apples()
        self.render_surface.render(session.snapshot())

    def resize(self, width: int, height: int):
        """
        Adapt to a new grid size: clamp the snake inside it, drop apples that
        fell outside (or under the clamped snake) and refill the board.
        """
        self._validate_grid(width, height)
        self.width = width
        self.height = height
        self.placer.resize(width, height)

        session = self.session
        if session is None:
            return

        session.width = width
        session.height = height
        session.snake.clamp(width, height)

        kept = []
        for apple in session.apples:
            if apple.x < width and apple.y < height and not session.snake.occupies(apple.position):
                kept.append(apple)
            else:
                session.used_values.discard(apple.value)
        session.apples = kept

        if session.is_active:
            self._replenish_apples()
        self.render_surface.render(session.snapshot())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _place_apple(self, force_correct: bool):
        session = self.session
        return self.placer.place_apple(
            force_correct,
            session.snake.positions,
            session.apples,
            session.question,
            session.used_values,
        )

    def _replenish_apples(self):
        session = self.session
        if count_correct(session.apples, session.question.answer) < GUARANTEED_CORRECT_APPLES:
            self._place_apple(force_correct=True)

        while len(session.apples) < MAX_APPLES:
            if self._place_apple(force_correct=False) is None:
                logger.debug(f"Board short of apples this tick ({len(session.apples)}/{MAX_APPLES})")
                break

    def _play(self, cue: str):
        try:
            self.audio_sink.play(cue)
        except Exception as exc:  # noqa: BLE001 - audio must never stop the game
            logger.warning(f"Could not play '{cue}' sound: {exc}")

    def _transition(self, status: str, previous: Optional[str] = None):
        session = self.session
        if previous is None:
            previous = session.status
        session.status = status
        self.screen_controller.on_status_change(previous, status, session.snapshot())

    def _game_over(self, reason: str):
        session = self.session
        session.snake.death_reason = reason
        self.ticker.stop()
        self._transition(GAME_OVER)
        self._play(audio.GAME_OVER)
        logger.info(f"Game Over: {reason}. Final score: {session.score}")
        self.render_surface.render(session.snapshot())


# -------------------------------
# Headless Session
# -------------------------------

def run_session(
    config: GameConfig,
    player: Player,
    max_ticks: int = 1000,
    delay: float = 0.0,
    render_surface: Optional[RenderSurface] = None
) -> Dict:
    """
    Play one game with an autopilot, ticking a manual clock.

    Args:
        config: grid size, tick interval and seed
        player: autopilot choosing a direction before every tick
        max_ticks: stop after this many ticks even if the game is still on
        delay: seconds to sleep between ticks, to watch the run
        render_surface: where frames go (defaults to nowhere)

    Returns:
        A dictionary summarizing the session.
    """
    ticker = ManualTicker()
    game = MathSnakeGame(
        width=config.grid_width,
        height=config.grid_height,
        tick_ms=config.effective_tick_ms,
        rng=config.make_rng(),
        ticker=ticker,
        render_surface=render_surface,
        screen_controller=LoggingScreenController(),
    )
    game.start()

    ticks = 0
    while game.is_active and ticks < max_ticks:
        move = player.get_move(game.get_current_state())
        game.change_direction(move)
        ticker.step()
        ticks += 1
        if delay:
            time.sleep(delay)

    state = game.get_current_state()
    return {
        "status": state.status,
        "ticks": state.tick_number,
        "score": state.score,
        "lives": state.lives,
        "snake_length": len(state.snake_positions),
        "death_reason": state.death_reason,
        "seed": config.seed,
    }


# -------------------------------
# Example Usage (Main Entry Point)
# -------------------------------
def main():
    variants = [v["key"] for v in list_variants()]
    parser = argparse.ArgumentParser(
        description="Run a headless Math Snake game with an autopilot player."
    )
    parser.add_argument("--autopilot", type=str, default="greedy", choices=variants,
                        help="Which autopilot steers the snake")
    parser.add_argument("--width", type=int, default=None, help="Grid width in cells")
    parser.add_argument("--height", type=int, default=None, help="Grid height in cells")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible game")
    parser.add_argument("--max_ticks", type=int, default=1000, help="Maximum number of ticks")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds to wait between ticks")
    parser.add_argument("--board", action="store_true", help="Print the board after every tick")
    parser.add_argument("--video", type=str, default=None, help="Write an MP4 of the game to this path")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = GameConfig.from_env().with_overrides(
        grid_width=args.width, grid_height=args.height, seed=args.seed
    )
    if config.seed is None:
        config.seed = random.randrange(2 ** 31)

    surfaces = []
    if args.board:
        surfaces.append(TextRenderSurface())
    recorder = RecordingRenderSurface()
    if args.video:
        surfaces.append(recorder)

    player = get_player_class(args.autopilot)(rng=random.Random(config.seed))
    result = run_session(
        config,
        player,
        max_ticks=args.max_ticks,
        delay=args.delay,
        render_surface=FanoutRenderSurface(surfaces),
    )

    if args.video:
        from services.video_generator import SnakeVideoGenerator
        result["video"] = SnakeVideoGenerator(cell_size=config.cell_size).generate_video(
            recorder.frames, args.video
        )

    print("\nSession Summary:")
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
