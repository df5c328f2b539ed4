"""
Tests for main.py - the Math Snake game loop.

These tests drive the loop with a manual ticker and seeded randomness so
every scenario is deterministic.
"""

import json
import math
import random
import sys
import os
from collections import deque
from unittest.mock import Mock, patch

import pytest

# Add repository root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import main as main_module
from main import MathSnakeGame, run_session
from config import GameConfig
from controls import GreedyPlayer, RandomPlayer
from domain.apples import Apple, count_correct
from domain.constants import (
    ACTIVE,
    GAME_OVER,
    IDLE,
    LOADING,
    MAX_APPLES,
    MAX_LIVES,
    MIN_APPLE_DISTANCE,
    GUARANTEED_CORRECT_APPLES,
    UP, DOWN, LEFT, RIGHT,
    VALID_MOVES,
)
from domain.game_state import GameState
from domain.question import Question
from domain.snake import Snake
from services import audio
from services.audio import RecordingAudioSink
from services.render import RecordingRenderSurface
from services.screens import LoggingScreenController
from services.ticker import ManualTicker


def make_game(seed=7, width=32, height=27, **kwargs):
    game = MathSnakeGame(
        width=width,
        height=height,
        rng=random.Random(seed),
        ticker=ManualTicker(),
        **kwargs
    )
    game.start()
    return game


def set_board(game, snake, apples, answer=5, direction=RIGHT):
    """Replace the session board with a hand-built one."""
    session = game.session
    session.snake = Snake(snake)
    session.apples = [Apple(position=pos, value=value) for pos, value in apples]
    session.used_values = {value for _, value in apples}
    session.question = Question(text=f"2 + {answer - 2} = ?", answer=answer, operation="+", operands=(2, answer - 2))
    session.direction = direction
    session.pending_direction = direction


def record_placements(game):
    """Wrap the placer so each call's inputs are captured at call time."""
    calls = []
    original = game.placer.place_apple

    def spy(force_correct, snake_cells, apples, question, used_values):
        calls.append({
            "force_correct": force_correct,
            "apples": len(apples),
            "used_values": set(used_values),
            "answer": question.answer,
        })
        return original(force_correct, snake_cells, apples, question, used_values)

    game.placer.place_apple = spy
    return calls


class TestGameStart:
    """Tests for starting and restarting a session."""

    def test_start_initial_state(self):
        """start() resets score, lives, snake and direction."""
        game = make_game()
        session = game.session

        assert game.status == ACTIVE
        assert session.score == 0
        assert session.lives == MAX_LIVES
        assert len(session.snake) == 3
        assert session.direction == RIGHT
        assert session.pending_direction == RIGHT
        assert game.ticker.running is True

    def test_start_snake_is_centered_and_horizontal(self):
        """The starting snake is centered and extends left from the head."""
        game = make_game(width=32, height=27)
        assert list(game.session.snake.positions) == [(16, 13), (15, 13), (14, 13)]

    def test_start_fills_board(self):
        """start() places MAX_APPLES apples including a correct one."""
        game = make_game()
        session = game.session

        assert len(session.apples) == MAX_APPLES
        assert count_correct(session.apples, session.question.answer) >= GUARANTEED_CORRECT_APPLES
        assert {a.value for a in session.apples} == session.used_values

    def test_start_places_forced_correct_apple_first(self):
        """The first placement of a session is forced to the answer."""
        game = MathSnakeGame(rng=random.Random(3), ticker=ManualTicker())
        calls = []
        original = game.placer.place_apple

        def spy(force_correct, *args):
            calls.append(force_correct)
            return original(force_correct, *args)

        game.placer.place_apple = spy
        game.start()

        assert calls[0] is True
        assert calls[1:] == [False] * (MAX_APPLES - 1)

    def test_status_before_start_is_idle(self):
        """A new game is idle and has no state."""
        game = MathSnakeGame(ticker=ManualTicker())
        assert game.status == IDLE
        assert game.get_current_state() is None
        assert game.final_score is None

    def test_start_notifies_screen_controller(self):
        """Screen controller sees idle -> loading -> active."""
        screens = LoggingScreenController()
        make_game(screen_controller=screens)
        assert screens.transitions == [(IDLE, LOADING), (LOADING, ACTIVE)]

    def test_start_plays_start_cue_and_renders(self):
        """start() plays the start cue and renders the first frame."""
        sink = RecordingAudioSink()
        surface = RecordingRenderSurface()
        make_game(audio_sink=sink, render_surface=surface)

        assert sink.cues == [audio.START]
        assert len(surface.frames) == 1
        assert surface.last_frame.status == ACTIVE

    def test_invalid_grid_raises(self):
        """A grid too narrow for the starting snake is rejected."""
        with pytest.raises(ValueError):
            MathSnakeGame(width=2, height=10)

    def test_invalid_tick_interval_raises(self):
        """Tick interval must be positive."""
        with pytest.raises(ValueError):
            MathSnakeGame(tick_ms=0)

    def test_restart_after_wall_game_over(self):
        """restart() from game over yields a fresh active session."""
        game = make_game()
        set_board(game, [(30, 5), (29, 5), (28, 5)], [])
        with patch.object(game.placer, "place_apple", return_value=None):
            game.tick()
            game.tick()
        assert game.status == GAME_OVER

        game.restart()

        assert game.status == ACTIVE
        assert game.session.score == 0
        assert game.session.lives == MAX_LIVES
        assert len(game.session.snake) == 3
        assert game.ticker.running is True

    def test_restart_after_lives_game_over(self):
        """restart() resets a session that ran out of lives with a score."""
        game = make_game()
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((6, 5), 9)], answer=5)
        game.session.lives = 1
        game.session.score = 40
        game.tick()
        assert game.status == GAME_OVER
        assert game.final_score == 40

        game.restart()

        assert game.status == ACTIVE
        assert game.session.score == 0
        assert game.session.lives == MAX_LIVES
        assert len(game.session.snake) == 3
        assert game.final_score is None


class TestCollisions:
    """Tests for wall and self collisions."""

    def test_wall_collision_at_grid_edge(self):
        """Moving right from (5,5) on a 32x27 grid dies when x would become 32."""
        game = make_game(width=32, height=27)
        set_board(game, [(5, 5), (4, 5), (3, 5)], [])

        with patch.object(game.placer, "place_apple", return_value=None):
            for _ in range(26):
                game.tick()
            assert game.is_active is True
            assert game.session.snake.head == (31, 5)

            game.tick()

        assert game.is_active is False
        assert game.status == GAME_OVER
        assert game.session.death_reason == "wall"
        assert game.session.snake.head == (31, 5)

    def test_wall_collision_stops_ticker_and_plays_cue(self):
        """Game over stops ticking and plays the game over cue."""
        sink = RecordingAudioSink()
        game = make_game(audio_sink=sink)
        set_board(game, [(0, 5), (1, 5), (2, 5)], [], direction=LEFT)

        game.tick()

        assert game.ticker.running is False
        assert sink.cues[-1] == audio.GAME_OVER

    def test_self_collision(self):
        """Turning into the body ends the game."""
        game = make_game()
        set_board(game, [(5, 5), (6, 5), (6, 4), (5, 4), (4, 4)], [], direction=LEFT)

        assert game.change_direction(UP) is True
        game.tick()

        assert game.status == GAME_OVER
        assert game.session.death_reason == "self"

    def test_moving_into_tail_cell_is_a_collision(self):
        """The tail counts as body even though it would move away."""
        game = make_game()
        set_board(game, [(5, 5), (5, 6), (6, 6), (6, 5)], [], direction=UP)

        game.change_direction(RIGHT)
        game.tick()

        assert game.status == GAME_OVER
        assert game.session.death_reason == "self"


class TestAppleEating:
    """Tests for eating correct and wrong apples."""

    def test_correct_apple_scenario(self):
        """Eating the answer scores 10, changes question and resets the board."""
        sink = RecordingAudioSink()
        surface = RecordingRenderSurface()
        game = make_game(audio_sink=sink, render_surface=surface)
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((6, 5), 5), ((20, 20), 7)], answer=5)
        old_question = game.session.question
        calls = record_placements(game)

        game.tick()
        session = game.session

        assert session.score == 10
        assert session.question is not old_question
        assert calls[0]["force_correct"] is True
        assert calls[0]["apples"] == 0
        assert calls[0]["used_values"] == set()
        assert calls[0]["answer"] == session.question.answer
        assert len(session.apples) == MAX_APPLES
        assert count_correct(session.apples, session.question.answer) >= 1
        assert audio.CORRECT in sink.cues
        assert surface.celebrations == [((6, 5), 10)]

    def test_correct_apple_grows_snake(self):
        """Eating any apple keeps the tail."""
        game = make_game()
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((6, 5), 5)], answer=5)

        game.tick()

        assert list(game.session.snake.positions) == [(6, 5), (5, 5), (4, 5), (3, 5)]

    def test_wrong_apple_costs_a_life(self):
        """Eating a wrong apple loses a life but the game goes on."""
        sink = RecordingAudioSink()
        game = make_game(audio_sink=sink)
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((6, 5), 9), ((20, 20), 5)], answer=5)

        game.tick()
        session = game.session

        assert session.lives == MAX_LIVES - 1
        assert session.score == 0
        assert game.status == ACTIVE
        assert len(session.snake) == 4
        assert all(a.position != (6, 5) for a in session.apples)
        assert len(session.apples) == MAX_APPLES
        assert audio.WRONG in sink.cues

    def test_wrong_apple_on_last_life_ends_game_immediately(self):
        """lives=1 and a wrong apple: game over in the same tick, no refill."""
        game = make_game()
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((6, 5), 9)], answer=5)
        game.session.lives = 1
        calls = record_placements(game)

        game.tick()
        session = game.session

        assert session.lives == 0
        assert game.status == GAME_OVER
        assert game.is_active is False
        assert session.death_reason == "lives"
        assert calls == []
        assert len(session.snake) == 3
        assert session.snake.head == (5, 5)

    def test_eaten_value_released(self):
        """The eaten apple's value leaves used_values."""
        game = make_game()
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((6, 5), 9), ((20, 20), 5)], answer=5)

        with patch.object(game.placer, "place_apple", return_value=None):
            game.tick()

        assert game.session.used_values == {5}

    def test_missing_correct_apple_is_restored(self):
        """A board without the answer gets a forced-correct apple."""
        game = make_game()
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((20, 20), 7)], answer=5)
        calls = record_placements(game)

        game.tick()

        assert calls[0]["force_correct"] is True
        assert count_correct(game.session.apples, 5) >= 1


class TestDirection:
    """Tests for buffered direction changes."""

    def test_reverse_is_ignored(self):
        """Reversing into the neck is rejected."""
        game = make_game()
        assert game.change_direction(LEFT) is False
        assert game.session.pending_direction == RIGHT

    def test_pending_only_applies_at_tick(self):
        """change_direction() never touches the current direction."""
        game = make_game()
        game.change_direction(UP)
        assert game.session.direction == RIGHT
        assert game.session.pending_direction == UP

    def test_guard_uses_current_not_pending_direction(self):
        """UP then LEFT within one tick: LEFT is still a reversal of RIGHT."""
        game = make_game()
        assert game.change_direction(UP) is True
        assert game.change_direction(LEFT) is False
        assert game.session.pending_direction == UP

    def test_last_writer_wins(self):
        """Only the latest accepted input is applied."""
        game = make_game()
        game.change_direction(UP)
        game.change_direction(DOWN)
        assert game.session.pending_direction == DOWN

    def test_unknown_direction_raises(self):
        game = make_game()
        with pytest.raises(ValueError):
            game.change_direction("sideways")

    def test_input_ignored_when_not_active(self):
        """Directions are dropped before start and after game over."""
        game = MathSnakeGame(ticker=ManualTicker())
        assert game.change_direction(UP) is False

    def test_snake_never_reverses_into_neck(self):
        """Random input over many ticks never moves the head onto the neck."""
        rng = random.Random(11)
        game = make_game(seed=11)
        moves = sorted(VALID_MOVES)

        for _ in range(300):
            if not game.is_active:
                game.restart()
            for _ in range(rng.randint(0, 3)):
                game.change_direction(rng.choice(moves))
            neck = game.session.snake.positions[1]
            game.tick()
            if game.is_active:
                assert game.session.snake.head != neck


class TestTickInvariants:
    """Property tests over long autopilot runs."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_board_invariants_hold_every_tick(self, seed):
        """Apple count, correct apple, spacing, no apple under the snake."""
        game = make_game(seed=seed)
        player = GreedyPlayer(rng=random.Random(seed))

        for _ in range(400):
            if not game.is_active:
                game.restart()
            game.change_direction(player.get_move(game.get_current_state()))
            game.ticker.step()
            session = game.session
            if not session.is_active:
                continue

            assert len(session.apples) == MAX_APPLES
            assert count_correct(session.apples, session.question.answer) >= GUARANTEED_CORRECT_APPLES
            snake_cells = set(session.snake.positions)
            for i, a in enumerate(session.apples):
                assert a.position not in snake_cells
                for b in session.apples[i + 1:]:
                    assert math.hypot(a.x - b.x, a.y - b.y) >= MIN_APPLE_DISTANCE

    @pytest.mark.parametrize("seed", [5, 6, 7])
    def test_snake_grows_only_when_eating(self, seed):
        """Length increases by one exactly on ticks where an apple was eaten."""
        game = make_game(seed=seed)
        player = RandomPlayer(rng=random.Random(seed))

        for _ in range(300):
            if not game.is_active:
                game.restart()
            session = game.session
            before_len = len(session.snake)
            before = (session.score, session.lives)

            game.change_direction(player.get_move(game.get_current_state()))
            game.tick()
            if not session.is_active:
                continue

            ate = (session.score, session.lives) != before
            assert len(session.snake) == before_len + (1 if ate else 0)

    def test_no_duplicate_segments(self):
        """The snake never overlaps itself while the game is active."""
        game = make_game(seed=21)
        player = GreedyPlayer(rng=random.Random(21))
        for _ in range(300):
            if not game.is_active:
                game.restart()
            game.change_direction(player.get_move(game.get_current_state()))
            game.tick()
            positions = list(game.session.snake.positions)
            if game.is_active:
                assert len(positions) == len(set(positions))


class TestTicking:
    """Tests for the ticker integration."""

    def test_ticker_drives_ticks(self):
        """Advancing the clock by three intervals runs three ticks."""
        game = make_game()
        set_board(game, [(5, 5), (4, 5), (3, 5)], [])
        with patch.object(game.placer, "place_apple", return_value=None):
            fired = game.ticker.advance(game.tick_ms * 3 + 10)
        assert fired == 3
        assert game.session.tick_number == 3
        assert game.session.snake.head == (8, 5)

    def test_tick_when_idle_is_noop(self):
        game = MathSnakeGame(ticker=ManualTicker())
        game.tick()
        assert game.session is None

    def test_tick_after_game_over_is_noop(self):
        game = make_game()
        set_board(game, [(31, 5), (30, 5), (29, 5)], [])
        game.tick()
        snapshot = list(game.session.snake.positions)
        game.tick()
        assert list(game.session.snake.positions) == snapshot

    def test_set_tick_interval_restarts_ticker(self):
        game = make_game()
        game.set_tick_interval(200)
        assert game.tick_ms == 200
        assert game.ticker.interval_ms == 200
        assert game.ticker.running is True

    def test_set_tick_interval_rejects_zero(self):
        game = make_game()
        with pytest.raises(ValueError):
            game.set_tick_interval(0)


class TestAudioFailures:
    """Audio errors must never reach the game loop."""

    def test_failing_audio_is_swallowed(self, caplog):
        sink = Mock()
        sink.play.side_effect = RuntimeError("playback blocked")
        game = make_game(audio_sink=sink)
        set_board(game, [(5, 5), (4, 5), (3, 5)], [((6, 5), 5)], answer=5)

        game.tick()

        assert game.session.score == 10
        assert game.status == ACTIVE
        assert "playback blocked" in caplog.text


class TestResize:
    """Tests for shrinking and growing the grid mid-game."""

    def test_resize_clamps_snake_and_refills_apples(self):
        game = make_game(width=32, height=27)
        set_board(game, [(30, 20), (29, 20), (28, 20)], [((25, 22), 5), ((3, 3), 8)], answer=5)

        game.resize(20, 15)
        session = game.session

        assert all(0 <= x < 20 and 0 <= y < 15 for x, y in session.snake.positions)
        assert all(0 <= a.x < 20 and 0 <= a.y < 15 for a in session.apples)
        assert any(a.position == (3, 3) for a in session.apples)
        assert 1 < len(session.apples) <= MAX_APPLES
        assert count_correct(session.apples, 5) >= 1
        assert session.used_values == {a.value for a in session.apples}

    def test_resize_drops_apple_under_clamped_snake(self):
        """Clamping the snake onto an apple removes it and releases its value."""
        game = make_game(width=32, height=27)
        set_board(game, [(30, 14), (29, 14), (28, 14)], [((19, 14), 8), ((3, 3), 5)], answer=5)

        with patch.object(game.placer, "place_apple", return_value=None):
            game.resize(20, 15)
        session = game.session

        assert (19, 14) in session.snake.positions
        assert [a.position for a in session.apples] == [(3, 3)]
        assert session.used_values == {5}

    def test_resize_never_leaves_apple_under_snake(self):
        game = make_game(width=32, height=27)
        set_board(game, [(30, 14), (29, 14), (28, 14)], [((19, 14), 8), ((3, 3), 5)], answer=5)

        game.resize(20, 15)
        session = game.session

        snake_cells = set(session.snake.positions)
        assert all(a.position not in snake_cells for a in session.apples)
        assert session.used_values == {a.value for a in session.apples}

    def test_resize_after_game_over_does_not_refill(self):
        game = make_game(width=32, height=27)
        set_board(game, [(31, 5), (30, 5), (29, 5)], [((25, 22), 5), ((3, 3), 8)], answer=5)
        game.tick()
        assert game.status == GAME_OVER
        calls = record_placements(game)

        game.resize(20, 15)

        assert calls == []
        assert [a.position for a in game.session.apples] == [(3, 3)]
        assert game.status == GAME_OVER

    def test_resize_before_start_only_updates_size(self):
        game = MathSnakeGame(ticker=ManualTicker())
        game.resize(20, 15)
        game.start()
        assert game.session.width == 20
        assert game.session.height == 15

    def test_resize_too_small_raises(self):
        game = make_game()
        with pytest.raises(ValueError):
            game.resize(2, 2)


class TestGameState:
    """Tests for the GameState snapshot."""

    def test_snapshot_fields(self):
        game = make_game()
        state = game.get_current_state()

        assert isinstance(state, GameState)
        assert state.width == 32
        assert state.height == 27
        assert state.score == 0
        assert state.lives == MAX_LIVES
        assert state.question_text == game.session.question.text
        assert len(state.apples) == MAX_APPLES
        assert state.is_active is True

    def test_snapshot_is_detached(self):
        """Mutating the game after a snapshot does not change it."""
        game = make_game()
        state = game.get_current_state()
        game.session.snake.positions.appendleft((0, 0))
        assert (0, 0) not in state.snake_positions

    def test_print_board_marks_snake_and_apples(self):
        state = GameState(
            tick_number=0,
            snake_positions=[(2, 2), (1, 2)],
            apples=[(4, 4, 12)],
            score=10,
            lives=2,
            question_text="7 + 5 = ?",
            answer=12,
            width=6,
            height=6,
            status=ACTIVE,
            direction=RIGHT
        )

        board = state.print_board()
        lines = board.split("\n")

        assert lines[0].startswith("7 + 5 = ?")
        assert " 2 . S H . . ." in lines
        assert " 4 . . . . a ." in lines
        assert "Apples: a=12" in board

    def test_repr_and_to_dict(self):
        game = make_game()
        state = game.get_current_state()
        assert "tick=0" in repr(state)
        data = state.to_dict()
        assert data["status"] == ACTIVE
        assert len(data["apples"]) == MAX_APPLES


class TestSnake:
    """Tests for the Snake entity."""

    def test_snake_positions_is_deque(self):
        snake = Snake([(5, 5)])
        assert isinstance(snake.positions, deque)
        assert snake.death_reason is None

    def test_advance_without_growth_keeps_length(self):
        snake = Snake([(5, 5), (4, 5), (3, 5)])
        snake.advance((6, 5))
        assert list(snake.positions) == [(6, 5), (5, 5), (4, 5)]

    def test_advance_with_growth_keeps_tail(self):
        snake = Snake([(5, 5), (4, 5)])
        snake.advance((5, 4), grow=True)
        assert list(snake.positions) == [(5, 4), (5, 5), (4, 5)]

    def test_next_head_uses_screen_orientation(self):
        snake = Snake([(5, 5)])
        assert snake.next_head(UP) == (5, 4)
        assert snake.next_head(DOWN) == (5, 6)
        assert snake.next_head(LEFT) == (4, 5)
        assert snake.next_head(RIGHT) == (6, 5)

    def test_clamp_pulls_segments_inside(self):
        snake = Snake([(25, 3), (24, 3), (24, 4)])
        snake.clamp(20, 4)
        assert list(snake.positions) == [(19, 3), (19, 3), (19, 3)]

    def test_empty_snake_raises(self):
        with pytest.raises(ValueError):
            Snake([])


class TestRunSession:
    """Tests for the headless session runner."""

    def test_run_session_summary(self):
        config = GameConfig(seed=3)
        result = run_session(config, GreedyPlayer(rng=random.Random(3)), max_ticks=50)

        assert result["seed"] == 3
        assert result["ticks"] <= 50
        assert result["status"] in (ACTIVE, GAME_OVER)
        assert result["snake_length"] >= 3

    def test_run_session_records_frames(self):
        config = GameConfig(seed=4)
        surface = RecordingRenderSurface()
        result = run_session(config, RandomPlayer(rng=random.Random(4)), max_ticks=20, render_surface=surface)

        # One frame for the start plus one per tick
        assert len(surface.frames) == result["ticks"] + 1

    def test_game_over_snapshot_carries_reason(self):
        game = make_game()
        set_board(game, [(31, 5), (30, 5), (29, 5)], [])
        game.tick()

        state = game.get_current_state()
        assert state.death_reason == "wall"
        assert state.to_dict()["death_reason"] == "wall"


class TestCommandLine:
    """Tests for the headless command-line entry point."""

    def test_main_prints_json_summary(self, capsys):
        argv = ["main.py", "--autopilot", "random", "--seed", "5", "--max_ticks", "15"]
        with patch.dict(os.environ, {}, clear=True), patch.object(sys, "argv", argv):
            main_module.main()

        output = capsys.readouterr().out
        summary = json.loads(output.split("Session Summary:", 1)[1])

        assert summary["seed"] == 5
        assert summary["ticks"] <= 15
        assert summary["status"] in (ACTIVE, GAME_OVER)
        assert set(summary) == {"status", "ticks", "score", "lives", "snake_length", "death_reason", "seed"}

    def test_main_rejects_unknown_autopilot(self):
        with patch.object(sys, "argv", ["main.py", "--autopilot", "oracle"]):
            with pytest.raises(SystemExit):
                main_module.main()
