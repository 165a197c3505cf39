"""Shared pytest fixtures for BrainSync tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from brainsync.app import BrainSyncApp
from brainsync.database.db import configure_engine, init_db
from brainsync.database.storage import Storage
from brainsync.settings import Settings
from brainsync.timer.engine import TimerEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    """25/5/15 minutes, long break every 4 sets, no auto-start."""
    return Settings(
        work_duration=25,
        short_break=5,
        long_break=15,
        long_break_interval=4,
        auto_start_break=False,
        auto_start_work=False,
    )


@pytest.fixture
def storage():
    return Storage()


@pytest.fixture
def engine(qapp, storage, settings, clock):
    """Fresh TimerEngine backed by the in-memory DB and the fake clock."""
    timer = TimerEngine(storage, settings=lambda: settings, clock=clock)
    yield timer
    timer.dispose()


@pytest.fixture
def engine_no_db(qapp, settings, clock):
    """TimerEngine without persistence (pure state-machine tests)."""
    timer = TimerEngine(None, settings=lambda: settings, clock=clock)
    yield timer
    timer.dispose()


@pytest.fixture
def app(qapp, storage, settings, clock):
    brain = BrainSyncApp(storage, settings=lambda: settings, clock=clock)
    yield brain
    brain.dispose()
