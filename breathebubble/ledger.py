"""Per-day completion counts and day start/end times."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Union

from breathebubble.models import ActivityType, DaySummary, DayTimes

log = logging.getLogger(__name__)

DateLike = Union[date, datetime]

HISTORY_DAYS = 90


def date_key(day: DateLike) -> str:
    """Calendar-day key (``YYYY-MM-DD``) in the timestamp's own local time."""
    if isinstance(day, datetime):
        day = day.date()
    return day.strftime("%Y-%m-%d")


class CompletionLedger:
    """Completion history grouped by calendar day.

    Counts only grow; :meth:`reset` is the only way to clear them. Nothing is
    pruned here, the history view just reads a rolling window.
    """

    def __init__(
        self,
        daily_completions: Optional[dict[str, dict[ActivityType, int]]] = None,
        daily_times: Optional[dict[str, DayTimes]] = None,
    ) -> None:
        self.daily_completions: dict[str, dict[ActivityType, int]] = daily_completions or {}
        self.daily_times: dict[str, DayTimes] = daily_times or {}
        # Called with the date key that changed, or None after a full reset.
        self.on_change: Optional[Callable[[Optional[str]], None]] = None

    def _changed(self, key: Optional[str]) -> None:
        if self.on_change is not None:
            self.on_change(key)

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------

    def record_completion(self, activity: ActivityType, day: DateLike) -> int:
        """Add one completion of *activity* on *day*. Returns the new count."""
        key = date_key(day)
        counts = self.daily_completions.setdefault(key, {})
        counts[activity] = counts.get(activity, 0) + 1
        log.debug("Recorded %s on %s (now %d)", activity.value, key, counts[activity])
        self._changed(key)
        return counts[activity]

    def get_completions(self, day: DateLike) -> dict[ActivityType, int]:
        return dict(self.daily_completions.get(date_key(day), {}))

    def get_completion_percentage(
        self, day: DateLike, enabled_activities: Iterable[ActivityType]
    ) -> float:
        """Share of enabled activities done at least once on *day*."""
        enabled = set(enabled_activities)
        if not enabled:
            return 0.0
        counts = self.daily_completions.get(date_key(day), {})
        done = sum(1 for activity in enabled if counts.get(activity, 0) > 0)
        return done / len(enabled)

    # ------------------------------------------------------------------
    # Day times
    # ------------------------------------------------------------------

    def record_day_start(self, when: datetime) -> None:
        key = date_key(when)
        times = self.daily_times.get(key, DayTimes())
        self.daily_times[key] = times.model_copy(update={"start_time": when})
        self._changed(key)

    def record_day_end(self, when: datetime) -> None:
        key = date_key(when)
        times = self.daily_times.get(key, DayTimes())
        self.daily_times[key] = times.model_copy(update={"end_time": when})
        self._changed(key)

    def get_day_times(self, day: DateLike) -> Optional[DayTimes]:
        return self.daily_times.get(date_key(day))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def history(
        self,
        enabled_activities: Iterable[ActivityType],
        today: Optional[date] = None,
        days: int = HISTORY_DAYS,
    ) -> list[DaySummary]:
        """Oldest-first summaries for the *days* calendar days ending *today*."""
        enabled = list(enabled_activities)
        end = today or date.today()
        summaries: list[DaySummary] = []
        for offset in range(days - 1, -1, -1):
            day = end - timedelta(days=offset)
            summaries.append(
                DaySummary(
                    day=day,
                    completions=self.get_completions(day),
                    percentage=self.get_completion_percentage(day, enabled),
                    times=self.get_day_times(day) or DayTimes(),
                )
            )
        return summaries

    def reset(self) -> None:
        self.daily_completions.clear()
        self.daily_times.clear()
        self._changed(None)
