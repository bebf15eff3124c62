"""Settings kept outside the database: where it lives and how the loop behaves."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from breathebubble.models import AppConfig

log = logging.getLogger(__name__)

_CONFIG_DIR = Path.home() / ".config" / "breathebubble"
_DB_DIR = Path.home() / ".local" / "share" / "breathebubble"

_CONFIG_FILE = _CONFIG_DIR / "config.json"

_DB_FILENAME = "breathebubble.db"


def load_config() -> AppConfig:
    """Read the config file. A missing or unreadable file gives the defaults."""
    if not _CONFIG_FILE.exists():
        return AppConfig()
    try:
        return AppConfig.model_validate(json.loads(_CONFIG_FILE.read_text()))
    except (json.JSONDecodeError, ValidationError) as exc:
        log.warning("Ignoring unreadable config %s: %s", _CONFIG_FILE, exc)
        return AppConfig()


def save_config(config: AppConfig) -> Path:
    """Write *config* and return the file it went to."""
    _CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    _CONFIG_FILE.write_text(config.model_dump_json(indent=2))
    return _CONFIG_FILE


def _update(**changes: Any) -> AppConfig:
    """Apply *changes* to the stored config, validate and save it."""
    config = AppConfig.model_validate({**load_config().model_dump(), **changes})
    save_config(config)
    return config


def get_db_path() -> Path:
    """The configured database file, or the default one under the data dir."""
    configured = load_config().db_path
    path = Path(configured) if configured is not None else _DB_DIR / _DB_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def set_db_path(path: str) -> AppConfig:
    """Use another database file. A directory gets the default file name."""
    target = Path(path).expanduser().resolve()
    if target.is_dir():
        target = target / _DB_FILENAME
    target.parent.mkdir(parents=True, exist_ok=True)
    return _update(db_path=str(target))


def reset_db_path() -> AppConfig:
    return _update(db_path=None)


def set_notifications(enabled: bool) -> AppConfig:
    return _update(notifications=enabled)


def set_frame_rate(frame_rate: int) -> AppConfig:
    """Redraws per second of the terminal loop. Raises ValidationError outside 1..120."""
    return _update(frame_rate=frame_rate)
