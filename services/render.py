"""
Render surfaces: read-only consumers of the game state.
"""

import sys
from typing import List, Optional, TextIO, Tuple

from domain.game_state import GameState


class RenderSurface:
    """
    Base class/interface for anything that draws the game.

    ``render`` is called after every tick and on every status change, so it
    must not raise.
    """

    def render(self, state: GameState) -> None:
        raise NotImplementedError("Subclasses should implement this method.")

    def celebrate(self, cell: Tuple[int, int], points: int) -> None:
        """Show the "GREAT!" / "+points" effect at a cell. Optional."""


class NullRenderSurface(RenderSurface):
    def render(self, state: GameState) -> None:
        pass


class TextRenderSurface(RenderSurface):
    """
    Prints the text board for every frame, for terminal play-throughs.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def render(self, state: GameState) -> None:
        self.stream.write("\n" + state.print_board() + "\n")

    def celebrate(self, cell: Tuple[int, int], points: int) -> None:
        self.stream.write(f"GREAT! +{points} at {cell}\n")


class RecordingRenderSurface(RenderSurface):
    """
    Keeps every rendered frame, e.g. for video export.
    """

    def __init__(self):
        self.frames: List[GameState] = []
        self.celebrations: List[Tuple[Tuple[int, int], int]] = []

    def render(self, state: GameState) -> None:
        self.frames.append(state)

    def celebrate(self, cell: Tuple[int, int], points: int) -> None:
        self.celebrations.append((cell, points))

    @property
    def last_frame(self) -> Optional[GameState]:
        return self.frames[-1] if self.frames else None


class FanoutRenderSurface(RenderSurface):
    """
    Forwards every call to several surfaces.
    """

    def __init__(self, surfaces: List[RenderSurface]):
        self.surfaces = list(surfaces)

    def render(self, state: GameState) -> None:
        for surface in self.surfaces:
            surface.render(state)

    def celebrate(self, cell: Tuple[int, int], points: int) -> None:
        for surface in self.surfaces:
            surface.celebrate(cell, points)
