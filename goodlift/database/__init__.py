"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import PresetRecord, WorkoutSession, UserStatsRecord

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "PresetRecord",
    "WorkoutSession",
    "UserStatsRecord",
]
