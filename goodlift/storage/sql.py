"""SQLite-backed store built on the shared SQLAlchemy session."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from ..database.db import get_session
from ..database.models import PresetRecord, UserStatsRecord, WorkoutSession
from ..presets import Preset
from ..sessions import CompletedSession, UserStats
from ..timer.machine import TimerMode
from .base import StorageError, TimerStore, new_preset_id

logger = logging.getLogger(__name__)


class SqlTimerStore(TimerStore):
    """Call :func:`goodlift.database.init_db` before first use."""

    def load_presets(self, mode: TimerMode) -> list[Preset]:
        try:
            with get_session() as db:
                records = (
                    db.query(PresetRecord)
                    .filter(PresetRecord.mode == mode.value)
                    .order_by(PresetRecord.created_at, PresetRecord.name)
                    .all()
                )
                data = [self._record_to_dict(r) for r in records]
        except SQLAlchemyError as exc:
            raise StorageError(f"could not load presets: {exc}") from exc

        presets = []
        for item in data:
            try:
                presets.append(Preset.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping unreadable preset %s", item.get("id"))
        return presets

    def save_preset(self, preset: Preset) -> Preset:
        if preset.id is None:
            preset = preset.with_id(new_preset_id())
        now = datetime.utcnow()
        try:
            with get_session() as db:
                record = db.get(PresetRecord, preset.id)
                if record is None:
                    record = PresetRecord(id=preset.id, created_at=now)
                    db.add(record)
                record.mode = preset.mode.value
                record.name = preset.name
                record.payload = preset.payload()
                record.updated_at = now
        except SQLAlchemyError as exc:
            raise StorageError(f"could not save preset {preset.name!r}: {exc}") from exc
        return preset

    def delete_preset(self, preset_id: str) -> None:
        try:
            with get_session() as db:
                record = db.get(PresetRecord, preset_id)
                if record is not None:
                    db.delete(record)
        except SQLAlchemyError as exc:
            raise StorageError(f"could not delete preset {preset_id}: {exc}") from exc

    def save_completed_session(self, session: CompletedSession) -> None:
        try:
            with get_session() as db:
                db.add(WorkoutSession(
                    date=session.date,
                    session_type=session.type,
                    duration_minutes=session.duration,
                    perceived_effort=session.perceived_effort,
                    notes=session.notes,
                ))
        except SQLAlchemyError as exc:
            raise StorageError(f"could not save session: {exc}") from exc

    def get_user_stats(self) -> UserStats:
        try:
            with get_session() as db:
                record = db.query(UserStatsRecord).first()
                if record is None:
                    return UserStats()
                return UserStats(
                    total_workouts=record.total_workouts,
                    total_time=record.total_time_seconds,
                    current_streak_days=record.current_streak_days,
                    longest_streak_days=record.longest_streak_days,
                    last_workout_date=record.last_workout_date,
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"could not load stats: {exc}") from exc

    def save_user_stats(self, stats: UserStats) -> None:
        try:
            with get_session() as db:
                record = db.query(UserStatsRecord).first()
                if record is None:
                    record = UserStatsRecord()
                    db.add(record)
                record.total_workouts = stats.total_workouts
                record.total_time_seconds = stats.total_time
                record.current_streak_days = stats.current_streak_days
                record.longest_streak_days = stats.longest_streak_days
                record.last_workout_date = stats.last_workout_date
        except SQLAlchemyError as exc:
            raise StorageError(f"could not save stats: {exc}") from exc

    @staticmethod
    def _record_to_dict(record: PresetRecord) -> dict:
        return {
            **(record.payload or {}),
            "id": record.id,
            "name": record.name,
            "mode": record.mode,
        }
