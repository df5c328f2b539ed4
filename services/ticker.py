"""
Tick scheduling for the game loop.

The loop never touches a wall clock itself. A ``Ticker`` decides when the
callback fires; ``ManualTicker`` fires it as elapsed time is fed in, which
serves both the pygame frame loop (fed from its clock) and tests (fed by
hand).
"""

from typing import Callable, Optional


class Ticker:
    """
    Base class/interface for tick schedulers.
    """

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        raise NotImplementedError("Subclasses should implement this method.")

    def stop(self) -> None:
        raise NotImplementedError("Subclasses should implement this method.")

    @property
    def running(self) -> bool:
        raise NotImplementedError("Subclasses should implement this method.")


class ManualTicker(Ticker):
    """
    Fires the callback once per ``interval_ms`` of time passed to ``advance``.
    """

    def __init__(self):
        self.interval_ms: Optional[int] = None
        self.callback: Optional[Callable[[], None]] = None
        self.elapsed_ms = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        if interval_ms <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval_ms}")
        self.interval_ms = interval_ms
        self.callback = callback
        self.elapsed_ms = 0
        self._running = True

    def stop(self) -> None:
        self._running = False
        self.elapsed_ms = 0

    def advance(self, elapsed_ms: float) -> int:
        """
        Feed elapsed time and fire every tick that became due.

        Returns:
            The number of ticks fired.
        """
        if not self._running:
            return 0

        self.elapsed_ms += elapsed_ms
        fired = 0
        while self._running and self.elapsed_ms >= self.interval_ms:
            self.elapsed_ms -= self.interval_ms
            fired += 1
            self.callback()
        return fired

    def step(self, count: int = 1) -> int:
        """Fire ``count`` ticks regardless of elapsed time."""
        fired = 0
        for _ in range(count):
            if not self._running:
                break
            fired += self.advance(self.interval_ms)
        return fired
