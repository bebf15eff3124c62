"""Interval countdown and the day lifecycle around it."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from breathebubble.models import DayState, TimerState
from breathebubble.notify import NOTIFICATION_BODY, NOTIFICATION_TITLE, Notifier, send_notification

log = logging.getLogger(__name__)


class TimerManager:
    """Counts down one interval at a time and tracks the active day.

    The manager owns no thread. A once-per-second clock calls :meth:`tick`;
    ticks outside the Running state are ignored.
    """

    def __init__(
        self,
        interval_minutes: int = 30,
        notifier: Notifier = send_notification,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._interval_minutes = interval_minutes
        self.total_seconds: int = interval_minutes * 60
        self.remaining_seconds: int = self.total_seconds
        self.state: TimerState = TimerState.IDLE

        self.day_started: bool = False
        self.day_start_time: Optional[datetime] = None
        self.day_end_time: Optional[datetime] = None

        self._notifier = notifier
        self._now = now

        self.on_timer_complete: Optional[Callable[[], None]] = None
        self.on_day_start: Optional[Callable[[], None]] = None
        self.on_day_end: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Interval
    # ------------------------------------------------------------------

    @property
    def interval_minutes(self) -> int:
        return self._interval_minutes

    @interval_minutes.setter
    def interval_minutes(self, minutes: int) -> None:
        self._interval_minutes = minutes
        if self.state is TimerState.IDLE:
            self.total_seconds = minutes * 60
            self.remaining_seconds = self.total_seconds

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    @property
    def is_day_active(self) -> bool:
        return self.day_started and self.day_start_time is not None

    @property
    def progress(self) -> float:
        if self.total_seconds <= 0:
            return 0.0
        return (self.total_seconds - self.remaining_seconds) / self.total_seconds

    @property
    def formatted_time(self) -> str:
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes}:{seconds:02d}"

    @property
    def formatted_time_short(self) -> str:
        if self.remaining_seconds < 60:
            return f"{self.remaining_seconds}s"
        return f"{self.remaining_seconds // 60}m"

    # ------------------------------------------------------------------
    # Day lifecycle
    # ------------------------------------------------------------------

    def day_state(self) -> DayState:
        return DayState(
            day_started=self.day_started,
            day_start_time=self.day_start_time,
            day_end_time=self.day_end_time,
        )

    def restore_day_state(self, saved: DayState) -> None:
        """Apply persisted day fields, discarding anything from an earlier calendar day."""
        today = self._now().date()
        self.day_started = saved.day_started
        self.day_start_time = saved.day_start_time
        self.day_end_time = saved.day_end_time

        if self.day_start_time is not None and self.day_start_time.date() != today:
            log.info("Discarding day started on %s", self.day_start_time.date().isoformat())
            self.day_started = False
            self.day_start_time = None
        elif self.day_start_time is None:
            self.day_started = False

        if self.day_end_time is not None and self.day_end_time.date() != today:
            self.day_end_time = None

    def start_day(self) -> None:
        self.day_started = True
        self.day_start_time = self._now()
        self.day_end_time = None
        log.debug("Day started at %s", self.day_start_time.isoformat())
        if self.on_day_start is not None:
            self.on_day_start()

        if self.state in (TimerState.IDLE, TimerState.COMPLETED):
            self.remaining_seconds = self.total_seconds
        self.state = TimerState.RUNNING

    def end_day(self) -> None:
        self.state = TimerState.IDLE
        self.total_seconds = self._interval_minutes * 60
        self.remaining_seconds = self.total_seconds
        self.day_end_time = self._now()
        self.day_started = False
        log.debug("Day ended at %s", self.day_end_time.isoformat())
        if self.on_day_end is not None:
            self.on_day_end()

    # ------------------------------------------------------------------
    # Countdown controls
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.state is TimerState.RUNNING:
            return
        if not self.day_started:
            self.start_day()
            return
        if self.state in (TimerState.IDLE, TimerState.COMPLETED):
            self.remaining_seconds = self.total_seconds
        self.state = TimerState.RUNNING

    def pause(self) -> None:
        if self.state is TimerState.RUNNING:
            self.state = TimerState.PAUSED

    def resume(self) -> None:
        if self.state is TimerState.PAUSED:
            self.state = TimerState.RUNNING

    def toggle(self) -> None:
        if self.state is TimerState.RUNNING:
            self.pause()
        elif self.state is TimerState.PAUSED:
            self.resume()
        else:
            self.start()

    def reset(self) -> None:
        self.state = TimerState.IDLE
        self.total_seconds = self._interval_minutes * 60
        self.remaining_seconds = self.total_seconds

    def skip(self) -> None:
        """Finish the current interval now, without a notification."""
        self.state = TimerState.COMPLETED
        log.debug("Interval skipped with %ds remaining", self.remaining_seconds)
        if self.on_timer_complete is not None:
            self.on_timer_complete()

    def restart_after_breathing(self) -> None:
        self.reset()
        self.start()

    def tick(self) -> None:
        """Count down one second."""
        if self.state is not TimerState.RUNNING:
            return
        if self.remaining_seconds > 0:
            self.remaining_seconds -= 1
        if self.remaining_seconds == 0:
            self._complete()

    def _complete(self) -> None:
        self.state = TimerState.COMPLETED
        log.debug("Interval of %d minutes completed", self._interval_minutes)
        try:
            self._notifier(NOTIFICATION_TITLE, NOTIFICATION_BODY)
        except Exception:
            log.warning("Notification delivery failed", exc_info=True)
        if self.on_timer_complete is not None:
            self.on_timer_complete()
