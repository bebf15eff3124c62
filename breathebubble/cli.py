"""BreatheBubble CLI -- breathing and movement breaks on a timer."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional

import typer
from pydantic import ValidationError
from rich.live import Live
from rich.logging import RichHandler

from breathebubble import config as cfg
from breathebubble import db, display, encouragement
from breathebubble.breathing import BreathingSession
from breathebubble.clock import FrameClock
from breathebubble.controller import Event, SessionController
from breathebubble.models import ActivityConfig, ActivityType, BreathPhase
from breathebubble.notify import Notifier, send_notification, silent_notifier
from breathebubble.state import AppState

app = typer.Typer(
    name="bubble",
    help="Gentle reminders to breathe and move, on a schedule you choose.",
    no_args_is_help=True,
)
plan_app = typer.Typer(help="Choose and order the activities in the rotation.", no_args_is_help=True)
app.add_typer(plan_app, name="plan")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Set up logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=display.console, show_path=False)],
        force=True,
    )


def _conn() -> sqlite3.Connection:
    """Get a database connection (convenience wrapper)."""
    return db.get_connection()


def _notifier() -> Notifier:
    return send_notification if cfg.load_config().notifications else silent_notifier


def _parse_activity(name: str) -> ActivityType:
    """Resolve a user-typed activity name or exit with a warning."""
    key = name.strip().lower().replace("-", "")
    for activity in ActivityType:
        if key in (activity.value, activity.display_name.lower().replace("-", "")):
            return activity
    names = ", ".join(a.value for a in ActivityType)
    display.print_warning(f"Unknown activity '{name}'. Choose from: {names}.")
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# The reminder loop
# ---------------------------------------------------------------------------


def _countdown(ctl: SessionController, clock: FrameClock) -> None:
    """Show the countdown until a session opens."""
    with Live(display.render_countdown(ctl.timer), console=display.console,
              refresh_per_second=clock.frame_rate, transient=True) as live:
        while not ctl.session_open:
            clock.sleep_until_next_frame()
            clock.pump()
            live.update(display.render_countdown(ctl.timer))


def _guide_breathing(
    session: BreathingSession, clock: FrameClock, is_open: Callable[[], bool]
) -> None:
    """Render a breathing session until *is_open* reports it has closed."""
    with Live(display.render_breathing(session), console=display.console,
              refresh_per_second=clock.frame_rate, transient=True) as live:
        while is_open():
            clock.sleep_until_next_frame()
            clock.pump()
            live.update(display.render_breathing(session))


def _exercise(ctl: SessionController) -> None:
    display.print_exercise(ctl.exercise)
    if typer.confirm("Done?", default=True):
        ctl.complete_exercise()
    else:
        ctl.skip_activity()
        display.print_nudge(encouragement.get_skip_message())


def _menu(ctl: SessionController) -> bool:
    """Options shown on Ctrl-C. Returns False when the user wants to leave."""
    in_session = ctl.session_open
    choices = "[n]ext activity now, [p]ause/resume, [e]nd day, [q]uit, [c]ontinue"
    if in_session:
        choices = "[s]kip activity, [p]ause/resume, [e]nd day, [q]uit, [c]ontinue"
    display.console.print()
    answer = typer.prompt(choices, default="c").strip().lower()[:1]

    if answer == "q":
        return False
    if answer == "e":
        ctl.end_day()
        display.print_success("Day ended. See you tomorrow.")
        return False
    if answer == "p":
        if in_session and ctl.current_activity is ActivityType.BREATHWORK:
            ctl.breathing.toggle()
        else:
            ctl.toggle()
    elif answer == "s" and in_session:
        ctl.skip_activity()
        display.print_nudge(encouragement.get_skip_message())
    elif answer == "n" and not in_session:
        ctl.skip_interval()
    return True


@app.command()
def run(
    interval: Optional[int] = typer.Option(
        None, "--interval", "-i", help="Minutes between reminders (saved for next time)"
    ),
) -> None:
    """Start the day and remind you every interval until you quit."""
    conn = _conn()
    state = AppState.load(conn)
    if interval is not None:
        try:
            state.set_interval(interval)
        except ValidationError:
            display.print_warning("Interval must be between 1 and 240 minutes.")
            conn.close()
            raise typer.Exit(1)

    app_config = cfg.load_config()
    clock = FrameClock(frame_rate=app_config.frame_rate)
    ctl = SessionController(state, clock, notifier=_notifier())

    finished: list[ActivityType] = []
    ctl.subscribe(Event.BREATHING_COMPLETED, lambda: finished.append(ActivityType.BREATHWORK))
    ctl.subscribe(Event.EXERCISE_COMPLETED, lambda: finished.append(ctl.exercise.exercise_type))

    if not state.plan.enabled_activities:
        display.print_warning("No activities are enabled. Use 'bubble plan enable'.")

    ctl.start()
    display.print_info(f"Day started. Reminder every {ctl.timer.interval_minutes} min.")

    keep_going = True
    while keep_going:
        try:
            if not ctl.session_open:
                _countdown(ctl, clock)
            elif ctl.current_activity is ActivityType.BREATHWORK:
                _guide_breathing(ctl.breathing, clock, lambda: ctl.session_open)
            else:
                _exercise(ctl)
                clock.resync()
        except KeyboardInterrupt:
            keep_going = _menu(ctl)
            clock.resync()
        while finished:
            display.print_nudge(encouragement.get_completion_message(finished.pop(0)))

    ctl.close()
    conn.close()


@app.command()
def breathe(
    cycles: Optional[int] = typer.Option(None, "--cycles", "-c", help="Number of breathing cycles"),
    hold_empty: Optional[bool] = typer.Option(
        None, "--hold-empty/--no-hold-empty", help="Rest with empty lungs after each exhale"
    ),
) -> None:
    """Do one guided breathing session right now."""
    conn = _conn()
    state = AppState.load(conn)
    breathing_config = state.plan.get_config(ActivityType.BREATHWORK)

    session = BreathingSession(
        total_cycles=cycles if cycles is not None else breathing_config.breathing_cycles,
        include_hold_empty=hold_empty if hold_empty is not None else breathing_config.include_hold_empty,
    )
    clock = FrameClock(frame_rate=cfg.load_config().frame_rate)
    clock.on_tick(session.tick)
    session.start()

    try:
        _guide_breathing(session, clock, lambda: session.phase is not BreathPhase.COMPLETED)
    except KeyboardInterrupt:
        display.print_warning("Session stopped early.")
        conn.close()
        return

    state.record_completion(ActivityType.BREATHWORK)
    if state.plan.is_enabled(ActivityType.BREATHWORK):
        state.plan.mark_activity_completed(ActivityType.BREATHWORK)
    display.print_nudge(encouragement.get_completion_message(ActivityType.BREATHWORK))
    conn.close()


@app.command(name="end-day")
def end_day() -> None:
    """End the current day and restart the rotation tomorrow."""
    conn = _conn()
    state = AppState.load(conn)
    ctl = SessionController(state, FrameClock(), notifier=silent_notifier)
    if not ctl.timer.is_day_active:
        display.print_info("No day in progress.")
        conn.close()
        return
    ctl.end_day()
    display.print_success("Day ended.")
    conn.close()


@app.command()
def status() -> None:
    """See how today is going."""
    conn = _conn()
    state = AppState.load(conn)
    ctl = SessionController(state, FrameClock(), notifier=silent_notifier)
    today = date.today()
    display.print_status(
        ctl.timer,
        state.plan,
        state.ledger.get_completions(today),
        state.completion_percentage(today),
    )
    conn.close()


@app.command()
def history(
    days: int = typer.Option(90, "--days", "-d", min=1, max=366, help="How many days to show"),
    chart: Optional[Path] = typer.Option(None, "--chart", help="Also save a PNG heat-map here"),
) -> None:
    """Show the completion heat-map."""
    conn = _conn()
    state = AppState.load(conn)
    summaries = state.history(days=days)
    display.print_history(summaries)
    if chart is not None:
        from breathebubble.charts import completion_heatmap, save_heatmap

        image = completion_heatmap(summaries, title=f"Last {days} Days")
        save_heatmap(image, str(chart))
        display.print_success(f"Heat-map saved to {chart}")
    conn.close()


@app.command(name="log")
def log_activity(
    activity: str = typer.Argument(..., help="Activity you did, e.g. pushups"),
) -> None:
    """Record an activity you did outside a reminder."""
    kind = _parse_activity(activity)
    conn = _conn()
    state = AppState.load(conn)
    count = state.record_completion(kind, datetime.now())
    display.print_success(f"Logged {kind.display_name} ({count} today).")
    conn.close()


# ---------------------------------------------------------------------------
# Activity plan
# ---------------------------------------------------------------------------


@plan_app.command("show")
def plan_show() -> None:
    """List the rotation."""
    conn = _conn()
    state = AppState.load(conn)
    display.print_plan(state.plan)
    display.print_info(f"Reminder every {state.interval_minutes} min.")
    conn.close()


@plan_app.command("enable")
def plan_enable(activity: str = typer.Argument(..., help="Activity to enable")) -> None:
    """Include an activity in the rotation."""
    kind = _parse_activity(activity)
    conn = _conn()
    state = AppState.load(conn)
    state.plan.set_enabled(kind, True)
    display.print_success(f"{kind.display_name} enabled.")
    conn.close()


@plan_app.command("disable")
def plan_disable(activity: str = typer.Argument(..., help="Activity to disable")) -> None:
    """Leave an activity out of the rotation (its place is kept)."""
    kind = _parse_activity(activity)
    conn = _conn()
    state = AppState.load(conn)
    state.plan.set_enabled(kind, False)
    display.print_success(f"{kind.display_name} disabled.")
    conn.close()


@plan_app.command("set")
def plan_set(
    activity: str = typer.Argument(..., help="Activity to configure"),
    reps: Optional[int] = typer.Option(None, "--reps", "-r", help="Target reps (exercises)"),
    cycles: Optional[int] = typer.Option(None, "--cycles", "-c", help="Breathing cycles"),
    hold_empty: Optional[bool] = typer.Option(
        None, "--hold-empty/--no-hold-empty", help="Rest phase after exhale (breathwork)"
    ),
) -> None:
    """Change an activity's settings."""
    kind = _parse_activity(activity)
    conn = _conn()
    state = AppState.load(conn)
    updates: dict[str, object] = {}
    if reps is not None:
        updates["rep_count"] = reps
    if cycles is not None:
        updates["breathing_cycles"] = cycles
    if hold_empty is not None:
        updates["include_hold_empty"] = hold_empty
    try:
        current = state.plan.get_config(kind)
        new_config = ActivityConfig.model_validate({**current.model_dump(), **updates})
    except ValidationError:
        display.print_warning("Reps must be 1-500 and cycles 1-50.")
        conn.close()
        raise typer.Exit(1)
    state.plan.update_config(kind, new_config)
    display.print_success(f"{kind.display_name} updated.")
    conn.close()


@plan_app.command("move")
def plan_move(
    from_index: int = typer.Argument(..., help="Current position (see 'plan show')"),
    to_index: int = typer.Argument(..., help="New position"),
) -> None:
    """Move an entry to another position."""
    conn = _conn()
    state = AppState.load(conn)
    if not 0 <= from_index < len(state.plan.activity_order):
        display.print_warning(f"No entry at position {from_index}.")
        conn.close()
        raise typer.Exit(1)
    state.plan.move_activity(from_index, to_index)
    display.print_plan(state.plan)
    conn.close()


@plan_app.command("reorder")
def plan_reorder(
    activities: List[str] = typer.Argument(..., help="Activities in the new order"),
) -> None:
    """Replace the whole order, e.g. 'bubble plan reorder squats breathwork'."""
    order = [_parse_activity(a) for a in activities]
    conn = _conn()
    state = AppState.load(conn)
    state.plan.reorder_activities(order)
    display.print_plan(state.plan)
    conn.close()


@plan_app.command("duplicate")
def plan_duplicate(at: int = typer.Argument(..., help="Position to duplicate")) -> None:
    """Repeat an entry right after itself."""
    conn = _conn()
    state = AppState.load(conn)
    if not 0 <= at < len(state.plan.activity_order):
        display.print_warning(f"No entry at position {at}.")
        conn.close()
        raise typer.Exit(1)
    state.plan.duplicate_activity(at)
    display.print_plan(state.plan)
    conn.close()


@plan_app.command("remove")
def plan_remove(at: int = typer.Argument(..., help="Position to remove")) -> None:
    """Remove an entry from the order."""
    conn = _conn()
    state = AppState.load(conn)
    if not 0 <= at < len(state.plan.activity_order):
        display.print_warning(f"No entry at position {at}.")
        conn.close()
        raise typer.Exit(1)
    state.plan.remove_activity(at)
    display.print_plan(state.plan)
    conn.close()


@plan_app.command("next-up")
def plan_next_up(
    index: Optional[int] = typer.Argument(
        None, help="Position among enabled activities to do next"
    ),
    clear: bool = typer.Option(False, "--clear", help="Remove the override"),
) -> None:
    """Choose the next activity once, ahead of the normal rotation."""
    conn = _conn()
    state = AppState.load(conn)
    if clear or index is None:
        state.plan.set_next_up(None)
        display.print_success("Next-up override cleared.")
    elif state.plan.set_next_up(index):
        chosen = state.plan.enabled_activities[index]
        display.print_success(f"Next up: {chosen.display_name}.")
    else:
        display.print_warning(f"There are only {len(state.plan.enabled_activities)} enabled activities.")
        conn.close()
        raise typer.Exit(1)
    conn.close()


@plan_app.command("interval")
def plan_interval(minutes: int = typer.Argument(..., help="Minutes between reminders")) -> None:
    """Set the time between reminders."""
    conn = _conn()
    state = AppState.load(conn)
    try:
        state.set_interval(minutes)
    except ValidationError:
        display.print_warning("Interval must be between 1 and 240 minutes.")
        conn.close()
        raise typer.Exit(1)
    display.print_success(f"Reminder every {minutes} min.")
    conn.close()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@app.command()
def config(
    db_path: Optional[str] = typer.Option(
        None, "--db-path",
        help="Set a custom database file path",
    ),
    reset: bool = typer.Option(False, "--reset", help="Reset to default local DB"),
    notifications: Optional[bool] = typer.Option(
        None, "--notifications/--no-notifications",
        help="Desktop notification when a reminder is due",
    ),
    frame_rate: Optional[int] = typer.Option(
        None, "--frame-rate", help="Redraws per second while running (1-120)"
    ),
    show: bool = typer.Option(False, "--show", help="Show current config"),
) -> None:
    """Configure where your data is stored and how reminders behave."""
    if db_path:
        result = cfg.set_db_path(db_path)
        display.print_success(f"Database path set to: {result.db_path}")
    elif reset:
        cfg.reset_db_path()
        display.print_success("Reset to default local database.")
    elif notifications is not None:
        cfg.set_notifications(notifications)
        display.print_success(f"Notifications {'on' if notifications else 'off'}.")
    elif frame_rate is not None:
        try:
            cfg.set_frame_rate(frame_rate)
        except ValidationError:
            display.print_warning("Frame rate must be between 1 and 120.")
            raise typer.Exit(1)
        display.print_success(f"Frame rate set to {frame_rate}.")
    elif show:
        current = cfg.load_config()
        resolved = cfg.get_db_path()
        if current.db_path:
            display.print_info(f"Database: {current.db_path}")
        else:
            display.print_info(f"Database: {resolved} (default)")
        display.print_info(f"Notifications: {'on' if current.notifications else 'off'}")
        display.print_info(f"Frame rate: {current.frame_rate}")
    else:
        display.print_info("Use --db-path, --reset, --notifications, --frame-rate, or --show.")
