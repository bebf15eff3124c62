"""Guided-breathing phase state machine."""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from breathebubble.models import PHASE_CONFIGS, BreathPhase, Colour, PhaseConfig

log = logging.getLogger(__name__)


class BreathingSession:
    """One guided-breathing run: inhale, hold, exhale, optional rest, repeat.

    The session has no clock of its own. Feed it with :meth:`tick`; ticks are
    ignored while paused or completed, so an unconditional clock is safe.
    """

    def __init__(
        self,
        total_cycles: int = 4,
        include_hold_empty: bool = False,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self.phase: BreathPhase = BreathPhase.IDLE
        self.is_active: bool = False
        self.elapsed_time: float = 0.0
        self.cycle_count: int = 0
        self.total_cycles = total_cycles
        self.include_hold_empty = include_hold_empty
        self.on_complete = on_complete

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def current_config(self) -> PhaseConfig:
        return PHASE_CONFIGS[self.phase]

    @property
    def phase_duration(self) -> float:
        return self.current_config.duration

    @property
    def current_colour(self) -> Colour:
        return self.current_config.colour

    @property
    def progress(self) -> float:
        """Fraction of the current phase that has elapsed, in [0, 1]."""
        duration = self.phase_duration
        if duration <= 0:
            return 0.0
        return min(self.elapsed_time / duration, 1.0)

    def expansion(self) -> float:
        """Bubble size for the current instant, 0 (empty) to 1 (full)."""
        if self.phase in (BreathPhase.IDLE, BreathPhase.COMPLETED):
            return 0.1
        if self.phase is BreathPhase.INHALE:
            return math.sin(self.progress * math.pi / 2)
        if self.phase is BreathPhase.HOLD_FULL:
            return 1.0
        if self.phase is BreathPhase.EXHALE:
            return 1.0 - math.sin(self.progress * math.pi / 2)
        return 0.0

    @property
    def is_completed(self) -> bool:
        return self.phase is BreathPhase.COMPLETED

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, total_cycles: int, include_hold_empty: bool) -> None:
        """Apply an activity's breathing settings before (re)starting."""
        self.total_cycles = total_cycles
        self.include_hold_empty = include_hold_empty

    # ------------------------------------------------------------------
    # Phase machine
    # ------------------------------------------------------------------

    def next_phase(self, current: BreathPhase) -> BreathPhase:
        if current is BreathPhase.IDLE:
            return BreathPhase.INHALE
        if current is BreathPhase.INHALE:
            return BreathPhase.HOLD_FULL
        if current is BreathPhase.HOLD_FULL:
            return BreathPhase.EXHALE
        if current is BreathPhase.EXHALE:
            return BreathPhase.HOLD_EMPTY if self.include_hold_empty else BreathPhase.INHALE
        if current is BreathPhase.HOLD_EMPTY:
            return BreathPhase.INHALE
        return BreathPhase.IDLE

    def tick(self, delta_time: float) -> None:
        """Advance the current phase by *delta_time* seconds."""
        if not self.is_active or self.phase is BreathPhase.COMPLETED:
            return
        duration = self.phase_duration
        self.elapsed_time = min(self.elapsed_time + delta_time, duration)
        if self.elapsed_time >= duration:
            self.advance_phase()

    def advance_phase(self) -> None:
        upcoming = self.next_phase(self.phase)

        if upcoming is BreathPhase.INHALE:
            self.cycle_count += 1
            if self.cycle_count >= self.total_cycles:
                self.phase = BreathPhase.COMPLETED
                self.is_active = False
                self.elapsed_time = 0.0
                log.debug("Breathing session completed after %d cycles", self.cycle_count)
                if self.on_complete is not None:
                    self.on_complete()
                return

        log.debug("Breath phase %s -> %s", self.phase.value, upcoming.value)
        self.phase = upcoming
        self.elapsed_time = 0.0

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.phase in (BreathPhase.IDLE, BreathPhase.COMPLETED):
            self.reset()
            self.phase = BreathPhase.INHALE
        self.is_active = True

    def pause(self) -> None:
        self.is_active = False

    def toggle(self) -> None:
        if self.phase in (BreathPhase.IDLE, BreathPhase.COMPLETED):
            self.start()
        else:
            self.is_active = not self.is_active

    def reset(self) -> None:
        self.is_active = False
        self.phase = BreathPhase.IDLE
        self.elapsed_time = 0.0
        self.cycle_count = 0
