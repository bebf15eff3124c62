"""Pydantic models -- single source of truth for all data types."""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

Colour = tuple[float, float, float]


class ActivityType(str, enum.Enum):
    """Activities that can appear in the rotation."""

    BREATHWORK = "breathwork"
    PUSHUPS = "pushups"
    SITUPS = "situps"
    SQUATS = "squats"

    @property
    def display_name(self) -> str:
        return _ACTIVITY_NAMES[self]

    @property
    def icon(self) -> str:
        return _ACTIVITY_ICONS[self]

    @property
    def instruction(self) -> str:
        if self is ActivityType.BREATHWORK:
            return "Follow the breathing pattern"
        return "Complete the reps at your own pace"

    @property
    def colour(self) -> Colour:
        return _ACTIVITY_COLOURS[self]

    @property
    def is_breathwork(self) -> bool:
        return self is ActivityType.BREATHWORK


_ACTIVITY_NAMES: dict[ActivityType, str] = {
    ActivityType.BREATHWORK: "Breathwork",
    ActivityType.PUSHUPS: "Push-ups",
    ActivityType.SITUPS: "Sit-ups",
    ActivityType.SQUATS: "Squats",
}

_ACTIVITY_ICONS: dict[ActivityType, str] = {
    ActivityType.BREATHWORK: "wind",
    ActivityType.PUSHUPS: "hand.raised.fill",
    ActivityType.SITUPS: "arrow.up.arrow.down",
    ActivityType.SQUATS: "figure.walk",
}

_ACTIVITY_COLOURS: dict[ActivityType, Colour] = {
    ActivityType.BREATHWORK: (0.4, 0.8, 1.0),
    ActivityType.PUSHUPS: (1.0, 0.5, 0.3),
    ActivityType.SITUPS: (0.3, 0.8, 0.5),
    ActivityType.SQUATS: (0.9, 0.7, 0.2),
}


class ActivityConfig(BaseModel):
    """Per-activity settings.

    ``rep_count`` only matters for exercises; ``breathing_cycles`` and
    ``include_hold_empty`` only for breathwork.
    """

    enabled: bool = False
    rep_count: int = Field(default=10, ge=1, le=500)
    breathing_cycles: int = Field(default=4, ge=1, le=50)
    include_hold_empty: bool = False


def default_activity_configs() -> dict[ActivityType, ActivityConfig]:
    """The out-of-the-box plan: breathwork only."""
    return {
        ActivityType.BREATHWORK: ActivityConfig(enabled=True, breathing_cycles=4),
        ActivityType.PUSHUPS: ActivityConfig(),
        ActivityType.SITUPS: ActivityConfig(),
        ActivityType.SQUATS: ActivityConfig(),
    }


class OrderEntry(BaseModel):
    """One slot in the activity order. ``id`` stays fixed while the slot moves."""

    model_config = ConfigDict(frozen=True)

    id: int
    activity: ActivityType


class BreathPhase(str, enum.Enum):
    """Stages of a guided-breathing run."""

    IDLE = "idle"
    INHALE = "inhale"
    HOLD_FULL = "hold_full"
    EXHALE = "exhale"
    HOLD_EMPTY = "hold_empty"
    COMPLETED = "completed"


class PhaseConfig(BaseModel):
    """Static description of one breath phase."""

    model_config = ConfigDict(frozen=True)

    label: str
    duration: float = Field(ge=0)  # seconds
    instruction: str
    colour: Colour


PHASE_CONFIGS: dict[BreathPhase, PhaseConfig] = {
    BreathPhase.IDLE: PhaseConfig(
        label="Ready", duration=0, instruction="Tap to start", colour=(0.2, 0.6, 1.0)
    ),
    BreathPhase.INHALE: PhaseConfig(
        label="Inhale",
        duration=4,
        instruction="Inhale quietly through nose",
        colour=(0.4, 0.8, 1.0),
    ),
    BreathPhase.HOLD_FULL: PhaseConfig(
        label="Hold", duration=6, instruction="Hold your breath", colour=(0.6, 0.5, 1.0)
    ),
    BreathPhase.EXHALE: PhaseConfig(
        label="Exhale",
        duration=8,
        instruction="Exhale slowly through mouth",
        colour=(1.0, 0.4, 0.6),
    ),
    BreathPhase.HOLD_EMPTY: PhaseConfig(
        label="Rest", duration=4, instruction="Hold empty", colour=(0.2, 0.3, 0.5)
    ),
    BreathPhase.COMPLETED: PhaseConfig(
        label="Done",
        duration=0,
        instruction="Session Complete",
        colour=(0.2, 0.8, 0.4),
    ),
}


class TimerState(str, enum.Enum):
    """Countdown lifecycle states."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class ExerciseState(str, enum.Enum):
    """Rep-counted exercise lifecycle states."""

    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"


class DayTimes(BaseModel):
    """When a day was started and ended."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class DaySummary(BaseModel):
    """One cell of the completion heat-map."""

    day: date
    completions: dict[ActivityType, int] = Field(default_factory=dict)
    percentage: float = Field(default=0.0, ge=0.0, le=1.0)
    times: DayTimes = Field(default_factory=DayTimes)

    @property
    def total(self) -> int:
        return sum(self.completions.values())


class DayState(BaseModel):
    """Persisted day lifecycle fields of the countdown timer."""

    day_started: bool = False
    day_start_time: Optional[datetime] = None
    day_end_time: Optional[datetime] = None


class IntervalSetting(BaseModel):
    """Validated countdown interval."""

    minutes: int = Field(default=30, ge=1, le=240)


class AppConfig(BaseModel):
    """Application configuration (persisted to ~/.config/breathebubble/config.json)."""

    db_path: Optional[str] = None  # None = use default (~/.local/share/breathebubble/)
    frame_rate: int = Field(default=30, ge=1, le=120)
    notifications: bool = True
