"""Orchestrator: timer expiry -> pick activity -> run session -> record -> re-arm."""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Callable, Optional

from breathebubble.breathing import BreathingSession
from breathebubble.clock import PhaseClock, SecondTicker
from breathebubble.exercise import ExerciseSession
from breathebubble.models import ActivityType
from breathebubble.notify import Notifier, send_notification
from breathebubble.state import AppState
from breathebubble.timer import TimerManager

log = logging.getLogger(__name__)


class Event(str, enum.Enum):
    """Notifications the controller publishes to front-ends."""

    TIMER_COMPLETED = "timer_completed"
    BREATHING_COMPLETED = "breathing_completed"
    EXERCISE_COMPLETED = "exercise_completed"
    DAY_STARTED = "day_started"
    DAY_ENDED = "day_ended"
    SESSION_OPENED = "session_opened"
    SESSION_CLOSED = "session_closed"


class SessionController:
    """Owns the timer and both sessions; wires them to the app state.

    At most one session is open at a time. The clock passed in drives the
    breathing session while it is running and the countdown otherwise.
    """

    def __init__(
        self,
        state: AppState,
        clock: PhaseClock,
        notifier: Notifier = send_notification,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.state = state
        self.clock = clock
        self._now = now
        self.current_activity: Optional[ActivityType] = None
        self._listeners: dict[Event, list[Callable[[], None]]] = {e: [] for e in Event}

        self.timer = TimerManager(state.interval_minutes, notifier=notifier, now=now)
        self.timer.restore_day_state(state.load_day_state())
        state.save_day_state(self.timer.day_state())
        self.timer.on_timer_complete = self._on_timer_complete
        self.timer.on_day_start = self._on_day_start
        self.timer.on_day_end = self._on_day_end
        state.on_interval_change = self._on_interval_change

        self.breathing = BreathingSession(on_complete=self._on_breathing_complete)
        self.exercise = ExerciseSession(on_complete=self._on_exercise_complete)

        self._seconds = SecondTicker(self.timer.tick)
        self._unsubscribe = clock.on_tick(self._on_frame)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, event: Event, callback: Callable[[], None]) -> None:
        self._listeners[event].append(callback)

    def _emit(self, event: Event) -> None:
        for callback in list(self._listeners[event]):
            callback()

    def close(self) -> None:
        """Detach from the clock."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def _on_frame(self, delta_time: float) -> None:
        if self.breathing.is_active:
            self.breathing.tick(delta_time)
            return
        self._seconds(delta_time)

    @property
    def session_open(self) -> bool:
        return self.current_activity is not None

    # ------------------------------------------------------------------
    # Day and countdown commands
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._seconds.reset()
        self.timer.start()

    def start_day(self) -> None:
        self._seconds.reset()
        self.timer.start_day()

    def end_day(self) -> None:
        if self.session_open:
            self._dismiss_session()
        self.timer.end_day()

    def pause(self) -> None:
        self.timer.pause()

    def resume(self) -> None:
        self.timer.resume()

    def toggle(self) -> None:
        self.timer.toggle()

    def reset(self) -> None:
        self.timer.reset()

    def skip_interval(self) -> None:
        self.timer.skip()

    def _on_interval_change(self, minutes: int) -> None:
        self.timer.interval_minutes = minutes

    def _on_day_start(self) -> None:
        if self.timer.day_start_time is not None:
            self.state.ledger.record_day_start(self.timer.day_start_time)
        self.state.save_day_state(self.timer.day_state())
        self._emit(Event.DAY_STARTED)

    def _on_day_end(self) -> None:
        if self.timer.day_end_time is not None:
            self.state.ledger.record_day_end(self.timer.day_end_time)
        self.state.plan.reset_completion_tracking()
        self.state.save_day_state(self.timer.day_state())
        self._emit(Event.DAY_ENDED)

    # ------------------------------------------------------------------
    # Activity selection
    # ------------------------------------------------------------------

    def _on_timer_complete(self) -> None:
        self._emit(Event.TIMER_COMPLETED)
        self.open_next_activity()

    def open_next_activity(self) -> Optional[ActivityType]:
        """Open whatever the rotation says is due. Returns it, or None."""
        if self.session_open:
            log.debug("Session for %s already open", self.current_activity)
            return self.current_activity
        activity = self.state.plan.get_next_activity()
        if activity is None:
            log.info("No activities enabled; re-arming the countdown")
            self._restart_countdown()
            return None
        self.open_activity(activity)
        return activity

    def open_activity(self, activity: ActivityType) -> None:
        if self.session_open:
            return
        config = self.state.plan.get_config(activity)
        if activity.is_breathwork:
            self.breathing.configure(config.breathing_cycles, config.include_hold_empty)
            self.breathing.reset()
            self.breathing.start()
        else:
            self.exercise.configure(activity, config.rep_count)
            self.exercise.start()
        self.current_activity = activity
        self.timer.pause()
        log.debug("Opened %s", activity.value)
        self._emit(Event.SESSION_OPENED)

    # ------------------------------------------------------------------
    # Session outcomes
    # ------------------------------------------------------------------

    def _on_breathing_complete(self) -> None:
        self._finish(ActivityType.BREATHWORK)
        self._emit(Event.BREATHING_COMPLETED)

    def complete_exercise(self) -> None:
        if self.current_activity is None or self.current_activity.is_breathwork:
            return
        self.exercise.complete()

    def _on_exercise_complete(self) -> None:
        self._finish(self.exercise.exercise_type)
        self._emit(Event.EXERCISE_COMPLETED)

    def _finish(self, activity: ActivityType) -> None:
        self.state.record_completion(activity, self._now())
        self.state.plan.mark_activity_completed(activity)
        self.close_session()

    def skip_activity(self) -> None:
        """Dismiss the open session without credit. The rotation does not advance."""
        if self.current_activity is None:
            return
        self.state.plan.mark_activity_skipped(self.current_activity)
        self.close_session()

    def close_session(self) -> None:
        if not self.session_open:
            return
        self._dismiss_session()
        self._restart_countdown()

    def _dismiss_session(self) -> None:
        self.breathing.reset()
        self.exercise.reset()
        self.current_activity = None
        self._emit(Event.SESSION_CLOSED)

    def _restart_countdown(self) -> None:
        self._seconds.reset()
        self.timer.restart_after_breathing()
