"""Shared test fixtures for all test modules."""

import contextlib
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import database as db_module
from app.core.database import Base, get_db

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

# 2025-01-01 00:00:00 UTC, "day 0" of most scenarios
DAY_0 = datetime(2025, 1, 1, tzinfo=UTC)
DAY = 86400


def day(n: float, hour: int = 0, minute: int = 0) -> int:
    """Epoch seconds for day ``n`` after DAY_0 at the given time."""
    return int((DAY_0 + timedelta(days=n, hours=hour, minutes=minute)).timestamp())


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, now: datetime = DAY_0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, timestamp: int) -> None:
        self.now = datetime.fromtimestamp(timestamp, UTC)

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    db_module.init_db()

    yield
    with _test_engine.connect() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def clock():
    return FakeClock()
