"""Storage contract the timer relies on.

The engine only needs these operations; whether records end up in
SQLite, in memory or in a remote document store is up to the
implementation.  Implementations raise ``StorageError`` and never retry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import uuid4

from ..presets import Preset
from ..sessions import CompletedSession, UserStats
from ..timer.machine import TimerMode


class StorageError(Exception):
    """A storage call failed.  Safe to retry."""


def new_preset_id() -> str:
    return uuid4().hex


class TimerStore(ABC):

    @abstractmethod
    def load_presets(self, mode: TimerMode) -> list[Preset]:
        """Presets for *mode*, oldest first."""

    @abstractmethod
    def save_preset(self, preset: Preset) -> Preset:
        """Insert or replace by id.  Returns the stored preset (with id)."""

    @abstractmethod
    def delete_preset(self, preset_id: str) -> None:
        """Remove a preset.  Unknown ids are ignored."""

    @abstractmethod
    def save_completed_session(self, session: CompletedSession) -> None:
        ...

    @abstractmethod
    def get_user_stats(self) -> UserStats:
        ...

    @abstractmethod
    def save_user_stats(self, stats: UserStats) -> None:
        ...
