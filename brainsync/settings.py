"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/BrainSync/settings.json

Components never cache a ``Settings`` instance for long.  They receive a
provider (``load_settings`` by default) and poll it at the start of each
operation that depends on configuration.

Usage::

    settings = load_settings()
    settings.work_duration = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable


logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "BrainSync"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer (minutes / sets) ────────────────────────────────────────
    work_duration: int = 30
    short_break: int = 5
    long_break: int = 15
    long_break_interval: int = 4
    auto_start_break: bool = True
    auto_start_work: bool = False

    # ── notifications ─────────────────────────────────────────────────
    notification_enabled: bool = True
    sound_enabled: bool = True
    sound_volume: int = 50                 # 0-100
    sound_file: str = "bell"               # bell | chime | silent

    # ── fatigue alert ─────────────────────────────────────────────────
    fatigue_alert_enabled: bool = True
    fatigue_alert_threshold: int = 21


SettingsProvider = Callable[[], Settings]

# Minutes / counts that must be at least 1.
POSITIVE_FIELDS = {"work_duration", "short_break", "long_break", "long_break_interval"}
SOUND_VOLUME_RANGE = (0, 100)


def _valid_value(name: str, value, default) -> bool:
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        if name in POSITIVE_FIELDS:
            return value >= 1
        if name == "sound_volume":
            low, high = SOUND_VOLUME_RANGE
            return low <= value <= high
        return value >= 0
    return isinstance(value, type(default))


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults.

    Values of the wrong type or out of range are dropped one by one, so a
    single bad entry does not reset the rest of the file.
    """
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("settings file must hold a JSON object")
            defaults = Settings()
            valid = {}
            for f in fields(Settings):
                if f.name not in data:
                    continue
                value = data[f.name]
                if _valid_value(f.name, value, getattr(defaults, f.name)):
                    valid[f.name] = value
                else:
                    logger.warning("Ignoring invalid setting %s=%r", f.name, value)
            return Settings(**valid)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Unreadable settings at %s, using defaults: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
