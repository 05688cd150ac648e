"""Storage package."""

from .base import StorageError, TimerStore
from .memory import InMemoryStore
from .sql import SqlTimerStore

__all__ = ["StorageError", "TimerStore", "InMemoryStore", "SqlTimerStore"]
