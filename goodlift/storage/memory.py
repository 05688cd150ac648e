"""Dict-backed store, used by tests and as a scratch store."""

from __future__ import annotations

from ..presets import Preset
from ..sessions import CompletedSession, UserStats
from ..timer.machine import TimerMode
from .base import TimerStore, new_preset_id


class InMemoryStore(TimerStore):

    def __init__(self) -> None:
        self._presets: dict[str, Preset] = {}  # insertion order = creation order
        self.sessions: list[CompletedSession] = []
        self.stats = UserStats()

    def load_presets(self, mode: TimerMode) -> list[Preset]:
        return [p for p in self._presets.values() if p.mode == mode]

    def save_preset(self, preset: Preset) -> Preset:
        if preset.id is None:
            preset = preset.with_id(new_preset_id())
        self._presets[preset.id] = preset
        return preset

    def delete_preset(self, preset_id: str) -> None:
        self._presets.pop(preset_id, None)

    def save_completed_session(self, session: CompletedSession) -> None:
        self.sessions.insert(0, session)  # newest first

    def get_user_stats(self) -> UserStats:
        return self.stats

    def save_user_stats(self, stats: UserStats) -> None:
        self.stats = stats
