"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/GoodLift/settings.json

Usage::

    settings = load_settings()
    settings.hiit_session_length_minutes = 20
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.machine import TimerMode

logger = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "GoodLift"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """User preferences that outlive a single session."""

    # ── timer ─────────────────────────────────────────────────────────
    last_mode: str = TimerMode.HIIT.value
    hiit_session_length_minutes: float = 10
    extended_rest_interval_minutes: float = 8
    cardio_duration_minutes: float = 20

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 30                 # 0-100

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        # Only use keys that exist in the dataclass
        valid_keys = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )


def apply_settings(engine, settings: Settings, sounds=None) -> None:
    """Push persisted preferences into an idle ``TimerEngine``."""
    try:
        mode = TimerMode(settings.last_mode)
    except ValueError:
        mode = TimerMode.HIIT
    engine.set_mode(mode)
    engine.set_session_length(settings.hiit_session_length_minutes)
    engine.set_extended_rest_interval(settings.extended_rest_interval_minutes)
    engine.set_cardio_duration(settings.cardio_duration_minutes)
    if sounds is not None:
        sounds.set_volume(settings.sound_volume)
        sounds.set_enabled(settings.sound_enabled)


def remember_engine(settings: Settings, engine) -> Settings:
    """Copy the engine's current choices back into *settings*."""
    config = engine.config
    settings.last_mode = config.mode.value
    settings.hiit_session_length_minutes = config.session_length_minutes
    settings.extended_rest_interval_minutes = config.extended_rest_interval_minutes
    settings.cardio_duration_minutes = config.cardio_minutes
    return settings
