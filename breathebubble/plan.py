"""Activity rotation: which activity is due next.

The order list may hold the same activity more than once and may hold
disabled activities. Each position in it is an *entry* with a stable id, and
the two rotation pointers (last completed, manual next-up) are stored as
entry ids. Their public form is an index into the enabled subsequence, which
is recomputed on every read, so reordering, duplicating or removing entries
and toggling ``enabled`` never leaves a pointer aimed at a different
activity than the one it was set on.
"""

from __future__ import annotations

import itertools
import logging
import random
from typing import Callable, Iterable, Optional

from breathebubble.models import (
    ActivityConfig,
    ActivityType,
    OrderEntry,
    default_activity_configs,
)

log = logging.getLogger(__name__)

_entry_ids = itertools.count(1)


def _new_entry(activity: ActivityType) -> OrderEntry:
    return OrderEntry(id=next(_entry_ids), activity=activity)


class ActivityPlan:
    """Ordered, per-activity configurable round-robin rotation."""

    def __init__(
        self,
        activities: Optional[dict[ActivityType, ActivityConfig]] = None,
        activity_order: Optional[Iterable[ActivityType]] = None,
    ) -> None:
        if activities is None:
            self.activities: dict[ActivityType, ActivityConfig] = default_activity_configs()
        else:
            self.activities = {a: activities.get(a, ActivityConfig()) for a in ActivityType}
        order = list(ActivityType) if activity_order is None else list(activity_order)
        self._entries: list[OrderEntry] = [_new_entry(a) for a in order]
        self._last_completed_id: Optional[int] = None
        self._next_up_id: Optional[int] = None
        self.on_change: Optional[Callable[[], None]] = None

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def activity_order(self) -> list[ActivityType]:
        return [e.activity for e in self._entries]

    def is_enabled(self, activity: ActivityType) -> bool:
        return self.get_config(activity).enabled

    def _enabled_entries(self) -> list[OrderEntry]:
        return [e for e in self._entries if self.is_enabled(e.activity)]

    @property
    def enabled_activities(self) -> list[ActivityType]:
        return [e.activity for e in self._enabled_entries()]

    def _enabled_index_of(self, entry_id: Optional[int]) -> Optional[int]:
        if entry_id is None:
            return None
        for index, entry in enumerate(self._enabled_entries()):
            if entry.id == entry_id:
                return index
        return None

    def _entry_id_at(self, enabled_index: Optional[int]) -> Optional[int]:
        enabled = self._enabled_entries()
        if enabled_index is None or not 0 <= enabled_index < len(enabled):
            return None
        return enabled[enabled_index].id

    def _position_of(self, entry_id: Optional[int]) -> Optional[int]:
        for position, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return position
        return None

    def _entry_id_at_position(self, position: Optional[int]) -> Optional[int]:
        if position is None or not 0 <= position < len(self._entries):
            return None
        return self._entries[position].id

    # ------------------------------------------------------------------
    # Rotation pointers (enabled-index space)
    # ------------------------------------------------------------------

    @property
    def last_completed_enabled_index(self) -> Optional[int]:
        return self._enabled_index_of(self._last_completed_id)

    @last_completed_enabled_index.setter
    def last_completed_enabled_index(self, value: Optional[int]) -> None:
        self._last_completed_id = self._entry_id_at(value)

    @property
    def next_up_enabled_index(self) -> Optional[int]:
        return self._enabled_index_of(self._next_up_id)

    @next_up_enabled_index.setter
    def next_up_enabled_index(self, value: Optional[int]) -> None:
        self._next_up_id = self._entry_id_at(value)

    # Positions in the full order, disabled entries included.

    @property
    def last_completed_order_position(self) -> Optional[int]:
        return self._position_of(self._last_completed_id)

    @last_completed_order_position.setter
    def last_completed_order_position(self, value: Optional[int]) -> None:
        self._last_completed_id = self._entry_id_at_position(value)

    @property
    def next_up_order_position(self) -> Optional[int]:
        return self._position_of(self._next_up_id)

    @next_up_order_position.setter
    def next_up_order_position(self, value: Optional[int]) -> None:
        self._next_up_id = self._entry_id_at_position(value)

    def get_next_activity_index(self) -> Optional[int]:
        """Enabled index of the activity that is due next, or None if none are enabled."""
        count = len(self._enabled_entries())
        if count == 0:
            return None
        next_up = self.next_up_enabled_index
        if next_up is not None:
            return next_up
        last = self.last_completed_enabled_index
        if last is None:
            return 0
        return (last + 1) % count

    def get_next_activity(self) -> Optional[ActivityType]:
        index = self.get_next_activity_index()
        if index is None:
            return None
        return self.enabled_activities[index]

    def select_random_activity(self) -> Optional[ActivityType]:
        enabled = self.enabled_activities
        if not enabled:
            return None
        return random.choice(enabled)

    def _resolve_entry(self, activity: ActivityType) -> Optional[OrderEntry]:
        """The enabled entry that *activity* refers to.

        Prefers the entry currently due, so completing a duplicated activity
        credits the slot that was actually offered.
        """
        enabled = self._enabled_entries()
        due = self.get_next_activity_index()
        if due is not None and enabled[due].activity is activity:
            return enabled[due]
        for entry in enabled:
            if entry.activity is activity:
                return entry
        return None

    def mark_activity_completed(self, activity: ActivityType) -> None:
        entry = self._resolve_entry(activity)
        if entry is None:
            log.debug("Completed %s is no longer enabled; rotation restarts", activity.value)
            self._last_completed_id = None
        else:
            self._last_completed_id = entry.id
            if self._next_up_id == entry.id:
                self._next_up_id = None
        self._changed()

    def mark_activity_skipped(self, activity: ActivityType) -> None:
        entry = self._resolve_entry(activity)
        if entry is not None and self._next_up_id == entry.id:
            self._next_up_id = None
            self._changed()

    def reset_completion_tracking(self) -> None:
        self._last_completed_id = None
        self._changed()

    def set_next_up(self, enabled_index: Optional[int]) -> bool:
        """Override the rotation for one selection. Returns False if the index is invalid."""
        entry_id = self._entry_id_at(enabled_index)
        if enabled_index is not None and entry_id is None:
            log.debug("Ignoring out-of-range next-up index %s", enabled_index)
            return False
        self._next_up_id = entry_id
        self._changed()
        return True

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_config(self, activity: ActivityType) -> ActivityConfig:
        config = self.activities.get(activity)
        return config if config is not None else ActivityConfig()

    def update_config(self, activity: ActivityType, config: ActivityConfig) -> None:
        self.activities[activity] = config
        self._changed()

    def set_enabled(self, activity: ActivityType, enabled: bool) -> None:
        config = self.get_config(activity).model_copy(update={"enabled": enabled})
        self.update_config(activity, config)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def index_in_activity_order(self, enabled_index: int) -> Optional[int]:
        entry_id = self._entry_id_at(enabled_index)
        if entry_id is None:
            return None
        return self._position_of(entry_id)

    def reorder_activities(self, new_order: list[ActivityType]) -> None:
        """Replace the order, keeping existing entries where the activity is still present.

        Entries are matched per activity in their previous relative order,
        so pointers follow their entry. Extra occurrences get new entries and
        entries without a counterpart are dropped.
        """
        pool: dict[ActivityType, list[OrderEntry]] = {}
        for entry in self._entries:
            pool.setdefault(entry.activity, []).append(entry)
        entries: list[OrderEntry] = []
        for activity in new_order:
            available = pool.get(activity)
            entries.append(available.pop(0) if available else _new_entry(activity))
        self._entries = entries
        self._drop_dangling_pointers()
        self._changed()

    def move_activity(self, from_index: int, to_index: int) -> None:
        if not 0 <= from_index < len(self._entries):
            return
        entry = self._entries.pop(from_index)
        to_index = max(0, min(to_index, len(self._entries)))
        self._entries.insert(to_index, entry)
        self._changed()

    def duplicate_activity(self, at: int) -> None:
        if not 0 <= at < len(self._entries):
            return
        self._entries.insert(at + 1, _new_entry(self._entries[at].activity))
        self._changed()

    def remove_activity(self, at: int) -> None:
        if not 0 <= at < len(self._entries):
            return
        self._entries.pop(at)
        self._drop_dangling_pointers()
        self._changed()

    def _drop_dangling_pointers(self) -> None:
        live = {e.id for e in self._entries}
        if self._next_up_id not in live:
            self._next_up_id = None
        if self._last_completed_id not in live:
            self._last_completed_id = None
