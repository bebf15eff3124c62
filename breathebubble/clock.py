"""Tick sources that drive the session state machines.

Everything downstream of a clock runs on the thread that calls
:meth:`PhaseClock.advance`, so session state is only ever mutated from one
place at a time.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

log = logging.getLogger(__name__)

TickCallback = Callable[[float], None]


class PhaseClock:
    """Fan-out tick source. Subscribers receive the elapsed seconds per frame.

    Ticks arriving while a dispatch is already in progress are dropped,
    as are non-positive deltas, so a subscriber never sees a re-entrant or
    out-of-order tick.
    """

    def __init__(self) -> None:
        self._callbacks: list[TickCallback] = []
        self._dispatching: bool = False
        self.dropped_ticks: int = 0

    def on_tick(self, callback: TickCallback) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def advance(self, delta_time: float) -> bool:
        """Deliver one tick. Returns False if the tick was dropped."""
        if delta_time <= 0 or self._dispatching:
            self.dropped_ticks += 1
            log.debug("Dropped tick (delta=%.4f, re-entrant=%s)", delta_time, self._dispatching)
            return False
        self._dispatching = True
        try:
            for callback in list(self._callbacks):
                callback(delta_time)
        finally:
            self._dispatching = False
        return True


class FrameClock(PhaseClock):
    """A PhaseClock fed from the monotonic wall clock.

    Call :meth:`pump` from the control loop once per frame. The first frame
    after construction (or :meth:`resync`) reports one nominal frame interval.
    """

    def __init__(
        self,
        frame_rate: int = 30,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.frame_rate = frame_rate
        self._now = now
        self._last: Optional[float] = None

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.frame_rate

    def resync(self) -> None:
        """Forget the last frame time, e.g. after blocking on user input."""
        self._last = None

    def pump(self) -> float:
        """Measure the time since the last frame and dispatch it."""
        current = self._now()
        delta = self.frame_interval if self._last is None else current - self._last
        self._last = current
        self.advance(delta)
        return delta

    def sleep_until_next_frame(self) -> None:
        time.sleep(self.frame_interval)


class SecondTicker:
    """Turns fractional frame deltas into whole-second ticks."""

    def __init__(self, on_second: Callable[[], None]) -> None:
        self._on_second = on_second
        self._accumulated: float = 0.0

    def __call__(self, delta_time: float) -> None:
        self._accumulated += delta_time
        while self._accumulated >= 1.0:
            self._accumulated -= 1.0
            self._on_second()

    def reset(self) -> None:
        self._accumulated = 0.0
