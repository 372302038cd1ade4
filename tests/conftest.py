"""Shared test fixtures and configuration.

Sets up environment variables before any active imports, and provides a
fresh temp-file store per test.
"""

import os

# Patch env vars BEFORE any active imports
os.environ.setdefault("DATABASE_PATH", "data/test_active.db")
os.environ.setdefault("SEED_HABIT_COUNT", "2")
os.environ.setdefault("SEED_SEQUENCE_LENGTH", "7")

import random

import pytest


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_active.db")


@pytest.fixture
def store(tmp_db_path):
    """Return a SQLiteStore backed by a temp file."""
    from active.data.db import SQLiteStore
    return SQLiteStore(db_path=tmp_db_path)


@pytest.fixture
def seeder(store):
    """Return a base Seeder (user step only)."""
    from active.core.seeder import Seeder
    return Seeder(store)


@pytest.fixture
def rng():
    """Deterministic random source for factories."""
    return random.Random(1234)
