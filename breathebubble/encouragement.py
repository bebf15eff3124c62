"""Short messages shown when an activity is finished or skipped.

``ENCOURAGEMENTS.md`` at the project root holds them as bullet points under
``## Done`` and ``## Skipped`` headings. Bullets before any heading count as
"done" messages. A section that is missing or empty falls back to the
built-in lists below.
"""

from __future__ import annotations

import random
from pathlib import Path

from breathebubble.models import ActivityType

_MESSAGES_FILE = Path(__file__).resolve().parent.parent / "ENCOURAGEMENTS.md"

_DEFAULTS: dict[str, list[str]] = {
    "done": [
        "Nicely done. Your body thanks you.",
        "A small reset goes a long way.",
        "Back to it, a little lighter.",
    ],
    "skipped": [
        "No problem. It will be offered again next time.",
        "Skipped for now. Maybe next round.",
    ],
}


def parse_sections(text: str) -> dict[str, list[str]]:
    """Group ``- `` bullets by the lower-cased ``##`` heading above them."""
    sections: dict[str, list[str]] = {}
    current = "done"
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("## "):
            current = stripped[3:].strip().lower()
        elif stripped.startswith("- ") and stripped[2:].strip():
            sections.setdefault(current, []).append(stripped[2:].strip())
    return sections


def _load_messages(path: Path = _MESSAGES_FILE) -> dict[str, list[str]]:
    found = parse_sections(path.read_text(encoding="utf-8")) if path.exists() else {}
    return {name: found.get(name) or fallback for name, fallback in _DEFAULTS.items()}


_MESSAGES: dict[str, list[str]] = _load_messages()


def get_completion_message(activity: ActivityType) -> str:
    """Return a random message for a finished *activity*."""
    return f"{activity.display_name} done. {random.choice(_MESSAGES['done'])}"


def get_skip_message() -> str:
    """Return a no-pressure message for a skipped activity."""
    return random.choice(_MESSAGES["skipped"])
