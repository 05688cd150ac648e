"""Wiring for a ready-to-use timer.

Builds the engine together with its collaborators: settings, the SQLite
store, the sound manager and logging.  Screens hold on to the returned
``TimerBundle`` and talk to ``bundle.engine``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from PyQt6.QtCore import QObject

from .audio.sounds import SoundManager
from .database.db import configure_engine, init_db
from .logging_handler import setup_logger
from .settings import Settings, apply_settings, load_settings, remember_engine, save_settings
from .storage.sql import SqlTimerStore
from .timer.engine import TimerEngine

logger = logging.getLogger(__name__)


@dataclass
class TimerBundle:
    engine: TimerEngine
    store: SqlTimerStore
    settings: Settings
    sounds: SoundManager | None = None
    settings_path: Path | None = None

    def save_settings(self) -> None:
        """Persist the engine's current choices."""
        remember_engine(self.settings, self.engine)
        save_settings(self.settings, self.settings_path)


def build_timer(
    parent: QObject | None = None,
    *,
    db_url: str | None = None,
    settings_path: Path | None = None,
    sounds_dir: Path | None = None,
    with_sound: bool = True,
) -> TimerBundle:
    """Create a configured ``TimerEngine`` with storage and sound."""
    settings = load_settings(settings_path)
    setup_logger("goodlift", level=getattr(logging, settings.log_level, logging.INFO))

    if db_url is not None:
        configure_engine(db_url)
    init_db()

    sounds = SoundManager(parent, sounds_dir=sounds_dir) if with_sound else None
    store = SqlTimerStore()
    engine = TimerEngine(parent, store=store, sounds=sounds)
    apply_settings(engine, settings, sounds)
    engine.refresh_presets()

    logger.info("Timer ready in %s mode", engine.mode.value)
    return TimerBundle(
        engine=engine,
        store=store,
        settings=settings,
        sounds=sounds,
        settings_path=settings_path,
    )
