from __future__ import annotations

from typing import Callable, Optional


TickCallback = Callable[[], None]


class Ticker:
    """One-second clock with at most one live subscriber.

    The frontend feeds wall time through `advance`; tests call `tick`
    directly. A new subscription replaces the previous one, and an
    unsubscribe from a callback that is no longer current is ignored.
    """

    def __init__(self, interval_ms: int = 1000) -> None:
        self.interval_ms = int(interval_ms)
        self._callback: Optional[TickCallback] = None
        self._elapsed_ms = 0

    @property
    def active(self) -> bool:
        return self._callback is not None

    def subscribe(self, callback: TickCallback) -> None:
        self._callback = callback
        self._elapsed_ms = 0

    def unsubscribe(self, callback: TickCallback) -> None:
        if self._callback == callback:
            self._callback = None
            self._elapsed_ms = 0

    def tick(self) -> None:
        if self._callback is not None:
            self._callback()

    def advance(self, elapsed_ms: int) -> int:
        """Accumulate wall time and fire one tick per full interval."""
        if self._callback is None:
            return 0
        self._elapsed_ms += int(elapsed_ms)
        fired = 0
        while self._callback is not None and self._elapsed_ms >= self.interval_ms:
            self._elapsed_ms -= self.interval_ms
            self.tick()
            fired += 1
        return fired
