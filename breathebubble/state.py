"""Process-wide settings/state container.

Owns the activity plan, the completion ledger and the interval, and writes
each of them back to the database as soon as it changes. Built once at
startup and handed to whoever needs it.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime
from typing import Callable, Optional

from breathebubble import db
from breathebubble.ledger import CompletionLedger, DateLike
from breathebubble.models import ActivityType, DayState, DaySummary, IntervalSetting
from breathebubble.plan import ActivityPlan

log = logging.getLogger(__name__)


class AppState:
    """Plan + ledger + interval, persisted on every mutation."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        plan: ActivityPlan,
        ledger: CompletionLedger,
        interval_minutes: int = db.DEFAULT_INTERVAL_MINUTES,
    ) -> None:
        self.conn = conn
        self.plan = plan
        self.ledger = ledger
        self._interval_minutes = interval_minutes
        self.on_interval_change: Optional[Callable[[int], None]] = None
        plan.on_change = self._save_plan
        ledger.on_change = self._save_ledger

    @classmethod
    def load(cls, conn: sqlite3.Connection) -> "AppState":
        """Read everything from *conn* once, at startup."""
        return cls(
            conn=conn,
            plan=db.load_plan(conn),
            ledger=db.load_ledger(conn),
            interval_minutes=db.load_interval(conn),
        )

    # ------------------------------------------------------------------
    # Persistence hooks
    # ------------------------------------------------------------------

    def _save_plan(self) -> None:
        db.save_plan(self.conn, self.plan)

    def _save_ledger(self, key: Optional[str]) -> None:
        if key is None:
            db.clear_ledger(self.conn)
        else:
            db.save_ledger_day(self.conn, self.ledger, key)

    def save_day_state(self, state: DayState) -> None:
        db.save_day_state(self.conn, state)

    def load_day_state(self) -> DayState:
        return db.load_day_state(self.conn)

    # ------------------------------------------------------------------
    # Interval
    # ------------------------------------------------------------------

    @property
    def interval_minutes(self) -> int:
        return self._interval_minutes

    def set_interval(self, minutes: int) -> int:
        """Validate and store a new interval (raises pydantic ValidationError)."""
        self._interval_minutes = IntervalSetting(minutes=minutes).minutes
        db.save_interval(self.conn, self._interval_minutes)
        if self.on_interval_change is not None:
            self.on_interval_change(self._interval_minutes)
        return self._interval_minutes

    # ------------------------------------------------------------------
    # Ledger queries that need the plan
    # ------------------------------------------------------------------

    def record_completion(self, activity: ActivityType, when: Optional[DateLike] = None) -> int:
        return self.ledger.record_completion(activity, when or datetime.now())

    def completion_percentage(self, day: DateLike) -> float:
        return self.ledger.get_completion_percentage(day, self.plan.enabled_activities)

    def history(self, days: int = 90, today: Optional[date] = None) -> list[DaySummary]:
        return self.ledger.history(self.plan.enabled_activities, today=today, days=days)
