import os
import random
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Point the app at a throwaway database before db.py is imported.
_TMP = Path(tempfile.mkdtemp(prefix="arith-practice-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"

import db  # noqa: E402
import models  # noqa: E402,F401
from review_store import ReviewStore, SqlReviewPersistence  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _app_tables():
    db.Base.metadata.create_all(db.engine)
    yield
    db.engine.dispose()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db.Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    with Session() as session:
        yield session
    engine.dispose()


class Clock:
    """Deterministic clock that advances a minute per reading."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store(db_session, clock):
    return ReviewStore(SqlReviewPersistence(db_session), clock=clock)


@pytest.fixture
def rng():
    return random.Random(1234)
