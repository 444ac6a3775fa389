"""Shared fixtures for tracker core tests"""
import sqlite3
from datetime import datetime

import pytest

from tracker.db import (
    CategoryStore,
    Database,
    RecordStore,
    Tracker,
    TrackerRepository,
    TrackerStore,
)
from tracker.models import Weekday

# A Monday, noon
FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0)


# ============================================================================
# Clock Fixtures
# ============================================================================

@pytest.fixture
def now():
    """The moment every test treats as "now" """
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock frozen at FIXED_NOW"""
    return lambda: FIXED_NOW


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def db_path(tmp_path):
    """Path to a fresh database file"""
    return tmp_path / "tracker.db"


@pytest.fixture
def database(db_path):
    """Initialized storage handle"""
    return Database(db_path)


@pytest.fixture
def category_store(database):
    """Category store with the default category seeded"""
    return CategoryStore(database)


@pytest.fixture
def tracker_store(database, category_store):
    """Tracker store sharing the database with the category store"""
    return TrackerStore(database)


@pytest.fixture
def record_store(database, clock):
    """Record store with a frozen clock"""
    return RecordStore(database, clock=clock)


@pytest.fixture
def repository(db_path, clock):
    """Repository facade over a fresh database"""
    return TrackerRepository(db_path, clock=clock)


@pytest.fixture
def raw_connection(db_path, database):
    """Plain SQLite connection without foreign key enforcement"""
    conn = sqlite3.connect(db_path)
    yield conn
    conn.close()


# ============================================================================
# Entity Factories
# ============================================================================

@pytest.fixture
def make_tracker():
    """Factory for valid trackers in the default category"""
    def _make(name="Water", schedule=None, category_title="Default", **kwargs):
        return Tracker.create(
            name=name,
            schedule=schedule if schedule is not None else list(Weekday),
            category_title=category_title,
            **kwargs,
        )
    return _make
