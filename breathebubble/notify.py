"""Desktop notification when the countdown runs out."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Callable, Optional

from breathebubble.display import console

log = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Time to Breathe"
NOTIFICATION_BODY = "Your breathing session is ready. Take a moment to relax."

Notifier = Callable[[str, str], object]


def _find_notify_send() -> Optional[str]:
    """Locate the freedesktop notification helper."""
    return shutil.which("notify-send")


def send_notification(title: str, body: str) -> bool:
    """Ring the terminal bell and post a desktop notification if possible.

    Returns True if the desktop notification was delivered. Failures are
    logged, never raised.
    """
    console.print("\a", end="")

    binary = _find_notify_send()
    if binary is None:
        log.debug("notify-send not found; desktop notification skipped")
        return False
    try:
        subprocess.run(
            [binary, "--app-name=BreatheBubble", title, body],
            check=True,
            capture_output=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        log.warning("Desktop notification failed: %s", exc)
        return False
    return True


def silent_notifier(title: str, body: str) -> None:
    """Notifier used when notifications are turned off."""
    log.debug("Notification suppressed: %s", title)
