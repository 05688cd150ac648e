"""SQLAlchemy ORM models for GoodLift."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, JSON, Text
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class PresetRecord(Base):
    """A saved timer preset.  Mode-specific fields live in ``payload``."""

    __tablename__ = "presets"

    id = Column(String(64), primary_key=True)
    mode = Column(String(16), nullable=False, index=True)  # hiit | flow
    name = Column(String(255), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<PresetRecord id={self.id} mode={self.mode} name={self.name!r}>"


class WorkoutSession(Base):
    """One finished timer session in the workout history."""

    __tablename__ = "workout_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    session_type = Column(String(20), nullable=False)  # hiit | yoga | cardio
    duration_minutes = Column(Integer, nullable=False, default=0)
    perceived_effort = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<WorkoutSession id={self.id} type={self.session_type} "
            f"minutes={self.duration_minutes}>"
        )


class UserStatsRecord(Base):
    """Single-row table with running totals."""

    __tablename__ = "user_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    total_workouts = Column(Integer, nullable=False, default=0)
    total_time_seconds = Column(Integer, nullable=False, default=0)
    current_streak_days = Column(Integer, nullable=False, default=0)
    longest_streak_days = Column(Integer, nullable=False, default=0)
    last_workout_date = Column(Date, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<UserStatsRecord workouts={self.total_workouts} "
            f"streak={self.current_streak_days}>"
        )
