"""Completed-session records and the running user totals."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

from .timer.machine import TimerMode


_SESSION_TYPES: dict[TimerMode, str] = {
    TimerMode.HIIT: "hiit",
    TimerMode.FLOW: "yoga",
    TimerMode.CARDIO: "cardio",
}


def session_type_for(mode: TimerMode) -> str:
    """Workout-history type for a timer mode (flow sessions log as yoga)."""
    return _SESSION_TYPES[mode]


@dataclass(frozen=True)
class CompletedSession:
    """A finished session.  Written once, never changed by the timer."""

    date: datetime
    type: str               # hiit | yoga | cardio
    duration: int           # minutes
    perceived_effort: int | None = None
    notes: str | None = None


@dataclass(frozen=True)
class UserStats:
    total_workouts: int = 0
    total_time: int = 0                 # seconds
    current_streak_days: int = 0
    longest_streak_days: int = 0
    last_workout_date: date | None = None

    def record(self, session: CompletedSession, seconds: int) -> UserStats:
        """Totals after *session*, with the daily streak brought forward."""
        session_date = session.date.date()
        last = self.last_workout_date
        streak = self.current_streak_days

        if last is None:
            streak = 1
        elif (session_date - last).days == 1:
            streak += 1
        elif (session_date - last).days == 0:
            streak = max(streak, 1)  # same calendar day
        elif (session_date - last).days > 1:
            streak = 1  # streak broken
        else:
            # back-dated entry; the streak is measured from the latest day
            session_date = last

        return replace(
            self,
            total_workouts=self.total_workouts + 1,
            total_time=self.total_time + seconds,
            current_streak_days=streak,
            longest_streak_days=max(self.longest_streak_days, streak),
            last_workout_date=session_date,
        )
