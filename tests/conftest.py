import os
import tempfile
from datetime import datetime, timezone

import pytest

# point the app at a throwaway database before anything imports studydeck.database
_test_dir = tempfile.mkdtemp(prefix="studydeck-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_test_dir, "studydeck.db")
os.environ["AI_PROVIDER"] = "ollama"

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import studydeck.models  # noqa: F401
from studydeck.clock import FixedClock
from studydeck.database import Base

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def app_db():
    # the CLI opens its own sessions on the configured engine
    from studydeck.database import reset_db
    reset_db()
    yield


def naive(moment):
    """SQLite hands timestamps back without tzinfo"""
    return moment.replace(tzinfo=None)
