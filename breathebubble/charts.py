"""Matplotlib calendar heat-map of completion history.

Uses the same dark palette as the terminal heat-map in ``display.py``.
"""

from __future__ import annotations

import io
from datetime import date
from typing import Optional

import matplotlib
matplotlib.use("Agg")  # non-interactive backend -- render to image buffers
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle
from PIL import Image

from breathebubble.models import DaySummary

# -- Palette -------------------------------------------------------------
_BG = "#2b2b2b"
_FG = "#e0e0e0"
_ACCENT = (53 / 255, 211 / 255, 153 / 255)
_TODAY = "#ff9f0a"
_MIN_OPACITY = 0.15

_WEEKDAY_LABELS = ["Mon", "", "Wed", "", "Fri", "", "Sun"]


# -----------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------

def _fig_to_pil(fig: Figure, dpi: int = 100) -> Image.Image:
    """Render a matplotlib Figure to a PIL Image and close it."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight",
                facecolor=fig.get_facecolor(), edgecolor="none")
    plt.close(fig)
    buf.seek(0)
    return Image.open(buf)


def completion_grid(summaries: list[DaySummary]) -> np.ndarray:
    """Lay summaries out as a 7 x weeks array of percentages (NaN = no day)."""
    if not summaries:
        return np.full((7, 0), np.nan)
    lead = summaries[0].day.weekday()
    n_weeks = (lead + len(summaries) + 6) // 7
    grid = np.full((7, n_weeks), np.nan)
    for offset, summary in enumerate(summaries):
        week, weekday = divmod(lead + offset, 7)
        grid[weekday, week] = summary.percentage
    return grid


def cell_rgba(percentage: float) -> tuple[float, float, float, float]:
    """Accent colour at ``max(0.15, percentage)`` opacity."""
    alpha = float(np.clip(max(_MIN_OPACITY, percentage), 0.0, 1.0))
    return (*_ACCENT, alpha)


# -----------------------------------------------------------------------
# Heat-map
# -----------------------------------------------------------------------

def completion_heatmap(
    summaries: list[DaySummary],
    *,
    today: Optional[date] = None,
    title: str = "Last 90 Days",
    size: tuple[int, int] = (720, 200),
    dpi: int = 100,
) -> Image.Image:
    """Draw the completion heat-map and return it as a PIL Image.

    Parameters
    ----------
    summaries:
        Oldest-first day summaries, typically ``AppState.history()``.
    today:
        The cell to outline. Defaults to the real current date.
    """
    today = today or date.today()
    grid = completion_grid(summaries)
    n_weeks = grid.shape[1]

    fig_w, fig_h = size[0] / dpi, size[1] / dpi
    fig = Figure(figsize=(fig_w, fig_h), dpi=dpi, facecolor=_BG)
    ax = fig.add_subplot(111)
    ax.set_facecolor(_BG)

    lead = summaries[0].day.weekday() if summaries else 0
    for offset, summary in enumerate(summaries):
        week, weekday = divmod(lead + offset, 7)
        is_today = summary.day == today
        ax.add_patch(Rectangle(
            (week + 0.1, weekday + 0.1), 0.8, 0.8,
            facecolor=cell_rgba(summary.percentage),
            edgecolor=to_rgba(_TODAY) if is_today else "none",
            linewidth=1.2 if is_today else 0,
        ))

    ax.set_xlim(0, max(n_weeks, 1))
    ax.set_ylim(7, 0)  # Monday on top
    ax.set_aspect("equal")
    ax.set_yticks(np.arange(7) + 0.5)
    ax.set_yticklabels(_WEEKDAY_LABELS, color=_FG, fontsize=7)

    # Month labels where a new month starts
    xticks: list[float] = []
    xlabels: list[str] = []
    last_month = None
    for offset, summary in enumerate(summaries):
        if summary.day.month != last_month:
            last_month = summary.day.month
            xticks.append((lead + offset) // 7 + 0.5)
            xlabels.append(summary.day.strftime("%b"))
    ax.set_xticks(xticks)
    ax.set_xticklabels(xlabels, color=_FG, fontsize=7)

    ax.tick_params(length=0)
    for spine in ax.spines.values():
        spine.set_visible(False)

    ax.set_title(title, color=_FG, fontsize=10, fontweight="bold")

    return _fig_to_pil(fig, dpi=dpi)


def save_heatmap(image: Image.Image, path: str) -> None:
    """Write a rendered heat-map to *path* (format from the extension)."""
    image.save(path)
