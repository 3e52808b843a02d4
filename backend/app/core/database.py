"""Engine and session wiring for the resource store."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings


def connect_args_for(dsn: str) -> dict[str, Any]:
    """Driver options for a DSN.

    SQLite connections are shared across the threads FastAPI runs sync
    dependencies on.
    """
    if make_url(dsn).get_backend_name() == "sqlite":
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.APP_DATABASE_DSN,
    connect_args=connect_args_for(settings.APP_DATABASE_DSN),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session. Uncommitted work is rolled back on error."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create the resources table if it does not exist."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
