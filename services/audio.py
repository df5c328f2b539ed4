"""
Audio sinks for game cues.

The game loop calls ``play`` fire-and-forget and swallows any failure, so a
sink is free to raise when playback is refused by the environment.
"""

import logging
import math
from array import array
from typing import Dict, List

import pygame

logger = logging.getLogger(__name__)

# Cues
CORRECT = "correct"
WRONG = "wrong"
GAME_OVER = "game_over"
START = "start"
VALID_CUES = {CORRECT, WRONG, GAME_OVER, START}

SAMPLE_RATE = 44100


class AudioSink:
    """
    Base class/interface for audio playback.
    """

    def play(self, cue: str) -> None:
        raise NotImplementedError("Subclasses should implement this method.")


class SilentAudioSink(AudioSink):
    def play(self, cue: str) -> None:
        pass


class RecordingAudioSink(AudioSink):
    """Remembers the cues it was asked to play."""

    def __init__(self):
        self.cues: List[str] = []

    def play(self, cue: str) -> None:
        self.cues.append(cue)


def create_tone(
    frequency_hz,
    duration_ms,
    volume=0.35,
    end_frequency_hz=None,
    attack_ms=8,
    release_ms=60,
):
    """Generate mono 16-bit PCM for a tone/chirp with a soft envelope."""
    sample_count = max(1, int(SAMPLE_RATE * (duration_ms / 1000.0)))

    amplitude = int(32767 * max(0.0, min(volume, 1.0)))
    attack_samples = int(SAMPLE_RATE * (attack_ms / 1000.0))
    release_samples = int(SAMPLE_RATE * (release_ms / 1000.0))
    release_start = max(0, sample_count - release_samples)
    end_frequency_hz = frequency_hz if end_frequency_hz is None else end_frequency_hz

    pcm = array("h")
    phase = 0.0
    for i in range(sample_count):
        progress = i / max(1, sample_count - 1)
        current_freq = frequency_hz + (end_frequency_hz - frequency_hz) * progress
        phase += (2.0 * math.pi * current_freq) / SAMPLE_RATE

        env = 1.0
        if attack_samples > 0 and i < attack_samples:
            env = i / attack_samples
        if release_samples > 0 and i >= release_start:
            env *= max(0.0, (sample_count - i) / release_samples)

        pcm.append(int(amplitude * env * math.sin(phase)))

    return pcm


def create_melody(notes, volume=0.12):
    """Concatenate (frequency_hz, duration_ms) notes into one PCM buffer."""
    pcm = array("h")
    for frequency_hz, duration_ms in notes:
        pcm.extend(create_tone(frequency_hz, duration_ms, volume, attack_ms=20, release_ms=80))
    return pcm


BACKGROUND_NOTES = [(262, 240), (330, 240), (392, 240), (330, 240), (294, 240), (349, 240), (440, 240), (349, 240)]


class PygameAudioSink(AudioSink):
    """
    Plays synthesized cues through ``pygame.mixer``.

    When the mixer cannot be initialised (no audio device, headless CI) the
    sink disables itself and every call becomes a no-op.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = False
        self.sounds: Dict[str, "pygame.mixer.Sound"] = {}
        self.background = None
        self.music_playing = False
        if enabled:
            self._init_sounds()

    def _init_sounds(self) -> None:
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
            self.sounds = {
                CORRECT: self._sound(create_tone(660, 160, 0.3, end_frequency_hz=990, release_ms=90)),
                WRONG: self._sound(create_tone(220, 260, 0.3, end_frequency_hz=160, release_ms=120)),
                GAME_OVER: self._sound(
                    create_tone(420, 420, 0.2, end_frequency_hz=110, attack_ms=16, release_ms=220)
                ),
                START: self._sound(create_tone(440, 200, 0.25, end_frequency_hz=880, release_ms=100)),
            }
            self.background = self._sound(create_melody(BACKGROUND_NOTES))
            self.enabled = True
        except pygame.error as exc:
            logger.warning(f"Audio disabled, mixer unavailable: {exc}")
            self.enabled = False
            self.sounds = {}

    @staticmethod
    def _sound(pcm):
        return pygame.mixer.Sound(buffer=pcm.tobytes())

    def play(self, cue: str) -> None:
        if cue not in VALID_CUES:
            raise ValueError(f"Unknown audio cue '{cue}'")
        if self.enabled:
            self.sounds[cue].play()

    def toggle_music(self) -> bool:
        """Start or pause the looping background tune. Returns the new state."""
        if not self.enabled or self.background is None:
            return False
        self.music_playing = not self.music_playing
        if self.music_playing:
            self.background.set_volume(0.8)
            self.background.play(loops=-1)
        else:
            self.background.stop()
        return self.music_playing
