"""Rep-counted exercise session. Counting is left to the user."""

from __future__ import annotations

from typing import Callable, Optional

from breathebubble.models import ActivityType, Colour, ExerciseState


class ExerciseSession:
    """Idle -> Active -> Completed, with a target shown to the user."""

    def __init__(self, on_complete: Optional[Callable[[], None]] = None) -> None:
        self.exercise_type: ActivityType = ActivityType.PUSHUPS
        self.target_reps: int = 10
        self.state: ExerciseState = ExerciseState.IDLE
        self.on_complete = on_complete

    @property
    def exercise_name(self) -> str:
        return self.exercise_type.display_name

    @property
    def exercise_icon(self) -> str:
        return self.exercise_type.icon

    @property
    def exercise_instruction(self) -> str:
        return self.exercise_type.instruction

    @property
    def exercise_colour(self) -> Colour:
        return self.exercise_type.colour

    def configure(self, exercise_type: ActivityType, rep_count: int) -> None:
        self.exercise_type = exercise_type
        self.target_reps = rep_count
        self.reset()

    def start(self) -> None:
        self.state = ExerciseState.ACTIVE

    def complete(self) -> None:
        self.state = ExerciseState.COMPLETED
        if self.on_complete is not None:
            self.on_complete()

    def reset(self) -> None:
        self.state = ExerciseState.IDLE
