"""Rich terminal formatting helpers."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from breathebubble.models import ActivityType, Colour, DaySummary, TimerState

if TYPE_CHECKING:
    from breathebubble.breathing import BreathingSession
    from breathebubble.exercise import ExerciseSession
    from breathebubble.plan import ActivityPlan
    from breathebubble.timer import TimerManager

console = Console()

# Heat-map palette (matches charts.py)
_BG_RGB = (43, 43, 43)
_ACCENT_RGB = (53, 211, 153)
_MIN_OPACITY = 0.15

_TIMER_STYLE: dict[TimerState, str] = {
    TimerState.IDLE: "dim",
    TimerState.RUNNING: "bold cyan",
    TimerState.PAUSED: "yellow",
    TimerState.COMPLETED: "green",
}


def _hex(rgb: tuple[int, int, int]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def _colour_hex(colour: Colour) -> str:
    return _hex(tuple(int(round(c * 255)) for c in colour))  # type: ignore[arg-type]


def heat_colour(percentage: float) -> str:
    """Blend the accent over the background at ``max(0.15, percentage)`` opacity."""
    alpha = max(_MIN_OPACITY, min(percentage, 1.0))
    rgb = tuple(
        int(round(bg + (fg - bg) * alpha)) for bg, fg in zip(_BG_RGB, _ACCENT_RGB)
    )
    return _hex(rgb)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Plan & status
# ---------------------------------------------------------------------------


def print_plan(plan: ActivityPlan) -> None:
    """Print the activity order with enabled state and settings."""
    table = Table(box=None, pad_edge=False)
    table.add_column("#", width=3)
    table.add_column("activity")
    table.add_column("on", width=3)
    table.add_column("settings")
    table.add_column("", width=8)

    enabled_positions = {
        plan.index_in_activity_order(i): i for i in range(len(plan.enabled_activities))
    }
    due_index = plan.get_next_activity_index()
    next_up = plan.next_up_enabled_index

    for position, activity in enumerate(plan.activity_order):
        cfg = plan.get_config(activity)
        if activity.is_breathwork:
            settings = f"{cfg.breathing_cycles} cycles" + (", rest" if cfg.include_hold_empty else "")
        else:
            settings = f"{cfg.rep_count} reps"
        marker = ""
        enabled_index = enabled_positions.get(position)
        if enabled_index is not None and enabled_index == due_index:
            marker = "next-up" if enabled_index == next_up else "due"
        table.add_row(
            str(position),
            activity.display_name,
            Text("[x]" if cfg.enabled else "[ ]"),
            settings,
            marker,
            style="bold cyan" if marker else ("" if cfg.enabled else "dim"),
        )

    console.print(Panel(table, title="Activity plan", border_style="blue"))


def print_status(
    timer: TimerManager,
    plan: ActivityPlan,
    completions: dict[ActivityType, int],
    percentage: float,
) -> None:
    """Print the day/timer dashboard."""
    upcoming = plan.get_next_activity()
    day_line = "not started"
    if timer.is_day_active and timer.day_start_time is not None:
        day_line = f"active since {timer.day_start_time.strftime('%H:%M')}"
    lines: list[str] = [
        f"Day: {day_line}",
        f"Interval: {timer.interval_minutes} min",
        f"Next activity: {upcoming.display_name if upcoming else 'none enabled'}",
        "",
        f"Today: {percentage * 100:.0f}% of enabled activities done",
    ]
    for activity, count in sorted(completions.items(), key=lambda kv: kv[0].value):
        lines.append(f"  {activity.display_name}: {count}")
    if timer.day_end_time is not None and not timer.is_day_active:
        lines.append(f"Day ended at {timer.day_end_time.strftime('%H:%M')}")
    console.print(Panel("\n".join(lines), title="Status", border_style="green"))


# ---------------------------------------------------------------------------
# Heat-map
# ---------------------------------------------------------------------------


def render_heatmap(summaries: list[DaySummary], today: Optional[date] = None) -> Table:
    """GitHub-style grid: one column per week, one row per weekday."""
    today = today or date.today()
    table = Table(show_header=False, box=None, padding=(0, 0), pad_edge=False)
    table.add_column("day", width=4)
    if not summaries:
        return table

    first = summaries[0].day
    lead = first.weekday()
    n_weeks = (lead + len(summaries) + 6) // 7
    for _ in range(n_weeks):
        table.add_column(width=2)

    grid: list[list[Text]] = [[Text("  ") for _ in range(n_weeks)] for _ in range(7)]
    for offset, summary in enumerate(summaries):
        slot = lead + offset
        week, weekday = divmod(slot, 7)
        glyph = "▣ " if summary.day == today else "■ "
        grid[weekday][week] = Text(glyph, style=heat_colour(summary.percentage))

    labels = ["Mon", "", "Wed", "", "Fri", "", "Sun"]
    for weekday in range(7):
        table.add_row(Text(labels[weekday], style="dim"), *grid[weekday])
    return table


def print_history(summaries: list[DaySummary], today: Optional[date] = None) -> None:
    total = sum(s.total for s in summaries)
    active_days = sum(1 for s in summaries if s.total > 0)
    caption = f"{total} completions on {active_days} of {len(summaries)} days"
    console.print(
        Panel(
            Group(render_heatmap(summaries, today), Text(caption, style="dim")),
            title="History",
            border_style="green",
        )
    )


# ---------------------------------------------------------------------------
# Live views
# ---------------------------------------------------------------------------


def render_countdown(timer: TimerManager) -> Panel:
    style = _TIMER_STYLE[timer.state]
    header = Text(f"{timer.formatted_time}  ", style=style)
    header.append(timer.state.value, style="dim")
    bar = ProgressBar(total=1.0, completed=timer.progress, width=40)
    return Panel(
        Group(header, bar, Text("Ctrl-C for options", style="dim")),
        title="Next reminder",
        border_style="blue",
    )


def render_breathing(session: BreathingSession) -> Panel:
    config = session.current_config
    colour = _colour_hex(session.current_colour)
    size = session.expansion()
    bubble = Text("●" * max(1, int(round(size * 20))), style=colour)
    title = Text(f"{config.label}", style=f"bold {colour}")
    remaining = max(0.0, session.phase_duration - session.elapsed_time)
    detail = Text(
        f"{config.instruction}  ({remaining:.0f}s)   "
        f"cycle {min(session.cycle_count + 1, session.total_cycles)}/{session.total_cycles}",
        style="dim",
    )
    bar = ProgressBar(total=1.0, completed=session.progress, width=40, complete_style=colour)
    return Panel(Group(title, bubble, bar, detail), title="Breathe", border_style=colour)


def print_exercise(session: ExerciseSession) -> None:
    colour = _colour_hex(session.exercise_colour)
    console.print(
        Panel(
            f"[bold]{session.target_reps} {session.exercise_name}[/bold]\n"
            f"{session.exercise_instruction}",
            title=session.exercise_name,
            border_style=colour,
        )
    )


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


def print_nudge(message: str) -> None:
    """Print an encouragement message in a styled panel."""
    text = Text(message, justify="center")
    console.print(Panel(text, border_style="magenta", padding=(1, 4)))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]{message}[/blue]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{message}[/yellow]")
