"""Shared pytest fixtures for GoodLift tests."""

import os
import sys
import pytest

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from goodlift.database.db import configure_engine, init_db
from goodlift.storage.memory import InMemoryStore
from goodlift.timer.engine import TimerEngine
from goodlift.timer.machine import TimerConfiguration


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def hiit_config():
    """Short HIIT session: 10 s prep, 4 × (30 s work / 30 s rest)."""
    return TimerConfiguration(
        work_interval=30,
        work_rest_ratio="1:1",
        rounds_per_set=4,
        number_of_sets=1,
        preparation_interval=10,
        extended_rest_interval_minutes=4,
        extended_rest_bonus=60,
    )


@pytest.fixture
def engine(qapp, store, hiit_config):
    """Fresh TimerEngine backed by an in-memory store."""
    return TimerEngine(parent=None, config=hiit_config, store=store)
