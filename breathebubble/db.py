"""SQLite persistence. Public functions take a connection and return models."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from breathebubble.config import get_db_path as _config_get_db_path
from breathebubble.ledger import CompletionLedger
from breathebubble.models import ActivityConfig, ActivityType, DayState, DayTimes
from breathebubble.plan import ActivityPlan

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    key    TEXT PRIMARY KEY,
    value  TEXT
);

CREATE TABLE IF NOT EXISTS activity_configs (
    activity            TEXT    PRIMARY KEY,
    enabled             INTEGER NOT NULL DEFAULT 0,
    rep_count           INTEGER NOT NULL DEFAULT 10,
    breathing_cycles    INTEGER NOT NULL DEFAULT 4,
    include_hold_empty  INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS activity_order (
    position  INTEGER PRIMARY KEY,
    activity  TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS daily_completions (
    date      TEXT    NOT NULL,
    activity  TEXT    NOT NULL,
    count     INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (date, activity)
);

CREATE TABLE IF NOT EXISTS daily_times (
    date        TEXT PRIMARY KEY,
    start_time  TEXT,
    end_time    TEXT
);
"""

DEFAULT_INTERVAL_MINUTES = 30


def _get_db_path() -> Path:
    """Return the database file path from config (or default)."""
    return _config_get_db_path()


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open a connection and ensure the schema exists."""
    path = db_path or _get_db_path()
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.executescript(_SCHEMA)
    return conn


# ---------------------------------------------------------------------------
# Key/value settings
# ---------------------------------------------------------------------------


def _get_setting(conn: sqlite3.Connection, key: str) -> Optional[str]:
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def _set_setting(conn: sqlite3.Connection, key: str, value: Optional[str]) -> None:
    conn.execute(
        """INSERT INTO settings (key, value) VALUES (?, ?)
           ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
        (key, value),
    )


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring non-integer setting value %r", raw)
        return None


def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        log.warning("Ignoring unparsable timestamp %r", raw)
        return None


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _parse_activity(raw: str) -> Optional[ActivityType]:
    try:
        return ActivityType(raw)
    except ValueError:
        log.warning("Ignoring unknown activity %r", raw)
        return None


def save_interval(conn: sqlite3.Connection, minutes: int) -> None:
    _set_setting(conn, "timer_interval_minutes", str(minutes))
    conn.commit()


def load_interval(conn: sqlite3.Connection) -> int:
    minutes = _parse_int(_get_setting(conn, "timer_interval_minutes"))
    if minutes is None or minutes <= 0:
        return DEFAULT_INTERVAL_MINUTES
    return minutes


# ---------------------------------------------------------------------------
# Day state
# ---------------------------------------------------------------------------


def save_day_state(conn: sqlite3.Connection, state: DayState) -> None:
    """Persist the timer's day fields."""
    _set_setting(conn, "day_started", "1" if state.day_started else "0")
    _set_setting(
        conn, "day_start_time", state.day_start_time.isoformat() if state.day_start_time else None
    )
    _set_setting(
        conn, "day_end_time", state.day_end_time.isoformat() if state.day_end_time else None
    )
    conn.commit()


def load_day_state(conn: sqlite3.Connection) -> DayState:
    """Read the day fields as stored. Calendar-day checks belong to the timer."""
    return DayState(
        day_started=_get_setting(conn, "day_started") == "1",
        day_start_time=_parse_timestamp(_get_setting(conn, "day_start_time")),
        day_end_time=_parse_timestamp(_get_setting(conn, "day_end_time")),
    )


# ---------------------------------------------------------------------------
# Activity plan
# ---------------------------------------------------------------------------


def save_plan(conn: sqlite3.Connection, plan: ActivityPlan) -> None:
    """Replace the stored plan with *plan*."""
    conn.execute("DELETE FROM activity_configs")
    conn.executemany(
        """INSERT INTO activity_configs
           (activity, enabled, rep_count, breathing_cycles, include_hold_empty)
           VALUES (?, ?, ?, ?, ?)""",
        [
            (
                activity.value,
                int(cfg.enabled),
                cfg.rep_count,
                cfg.breathing_cycles,
                int(cfg.include_hold_empty),
            )
            for activity, cfg in plan.activities.items()
        ],
    )
    conn.execute("DELETE FROM activity_order")
    conn.executemany(
        "INSERT INTO activity_order (position, activity) VALUES (?, ?)",
        [(i, activity.value) for i, activity in enumerate(plan.activity_order)],
    )
    pointers = {
        "last_completed_enabled_index": plan.last_completed_enabled_index,
        "next_up_enabled_index": plan.next_up_enabled_index,
        "last_completed_order_position": plan.last_completed_order_position,
        "next_up_order_position": plan.next_up_order_position,
    }
    for key, value in pointers.items():
        _set_setting(conn, key, None if value is None else str(value))
    conn.commit()


def load_plan(conn: sqlite3.Connection) -> ActivityPlan:
    """Build the stored plan, or the default plan if nothing is stored yet."""
    activities: dict[ActivityType, ActivityConfig] = {}
    for row in conn.execute("SELECT * FROM activity_configs").fetchall():
        activity = _parse_activity(row["activity"])
        if activity is None:
            continue
        activities[activity] = ActivityConfig(
            enabled=bool(row["enabled"]),
            rep_count=_clamp(row["rep_count"], 1, 500),
            breathing_cycles=_clamp(row["breathing_cycles"], 1, 50),
            include_hold_empty=bool(row["include_hold_empty"]),
        )

    order_rows = conn.execute("SELECT activity FROM activity_order ORDER BY position").fetchall()
    if not activities and not order_rows:
        return ActivityPlan()

    order = [a for a in (_parse_activity(r["activity"]) for r in order_rows) if a is not None]
    plan = ActivityPlan(activities=activities, activity_order=order)
    # Order positions first; older databases only hold the enabled index.
    last = _parse_int(_get_setting(conn, "last_completed_order_position"))
    if last is None:
        plan.last_completed_enabled_index = _parse_int(
            _get_setting(conn, "last_completed_enabled_index")
        )
    else:
        plan.last_completed_order_position = last
    next_up = _parse_int(_get_setting(conn, "next_up_order_position"))
    if next_up is None:
        plan.next_up_enabled_index = _parse_int(_get_setting(conn, "next_up_enabled_index"))
    else:
        plan.next_up_order_position = next_up
    return plan


# ---------------------------------------------------------------------------
# Completion ledger
# ---------------------------------------------------------------------------


def save_ledger_day(conn: sqlite3.Connection, ledger: CompletionLedger, key: str) -> None:
    """Write one calendar day of *ledger* (counts and times)."""
    for activity, count in ledger.daily_completions.get(key, {}).items():
        conn.execute(
            """INSERT INTO daily_completions (date, activity, count) VALUES (?, ?, ?)
               ON CONFLICT(date, activity) DO UPDATE SET count = excluded.count""",
            (key, activity.value, count),
        )
    times = ledger.daily_times.get(key)
    if times is not None:
        conn.execute(
            """INSERT INTO daily_times (date, start_time, end_time) VALUES (?, ?, ?)
               ON CONFLICT(date) DO UPDATE SET
                   start_time = excluded.start_time,
                   end_time = excluded.end_time""",
            (
                key,
                times.start_time.isoformat() if times.start_time else None,
                times.end_time.isoformat() if times.end_time else None,
            ),
        )
    conn.commit()


def load_ledger(conn: sqlite3.Connection) -> CompletionLedger:
    completions: dict[str, dict[ActivityType, int]] = {}
    for row in conn.execute("SELECT * FROM daily_completions").fetchall():
        activity = _parse_activity(row["activity"])
        if activity is None:
            continue
        completions.setdefault(row["date"], {})[activity] = row["count"]

    times: dict[str, DayTimes] = {}
    for row in conn.execute("SELECT * FROM daily_times").fetchall():
        times[row["date"]] = DayTimes(
            start_time=_parse_timestamp(row["start_time"]),
            end_time=_parse_timestamp(row["end_time"]),
        )
    return CompletionLedger(daily_completions=completions, daily_times=times)


def clear_ledger(conn: sqlite3.Connection) -> None:
    conn.execute("DELETE FROM daily_completions")
    conn.execute("DELETE FROM daily_times")
    conn.commit()
