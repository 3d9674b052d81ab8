"""
atlas/db/session.py — SQLAlchemy engine, session factory and schema setup.

Usage:
    from atlas.db.session import get_db, get_session

    # As a FastAPI dependency:
    def my_route(db: Session = Depends(get_db)):
        ...

    # In scripts:
    with get_session() as db:
        ...

The session commits when the block exits cleanly and rolls back on any
exception, so a failed qualification never leaves a half-written prospect.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session, sessionmaker

from atlas.config import settings
from atlas.db.models import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    # SQLite (local dev, tests) takes no pool sizing and is shared across threads
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_size": 5, "max_overflow": 10}


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,          # reconnect on stale connections
    echo=False,                  # set True to log all SQL
    **_engine_options(settings.database_url),
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Context manager for scripts and other non-FastAPI code."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency wrapping get_session()."""
    with get_session() as db:
        yield db


# ── Schema ────────────────────────────────────────────────────────────────────

def check_connection() -> None:
    """Run a trivial query; raises if the database is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection verified.")


def create_tables() -> list[str]:
    """Create the prospect tables if missing and return the table names present."""
    Base.metadata.create_all(bind=engine)
    return inspect(engine).get_table_names()
