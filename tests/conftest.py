"""
tests/conftest.py — Shared pytest configuration and fixtures.

Sets dummy environment variables BEFORE any atlas module is imported,
so that pydantic-settings doesn't fail on missing required fields.
"""

import os

# ── Set dummy env vars before any atlas module is imported ───────────────────
# This runs at collection time, before tests execute.
os.environ.setdefault("OPENROUTER_API_KEY", "test-key")
os.environ.setdefault("OPENROUTER_MODEL", "test-model")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("EVALUATOR_BACKEND", "llm")

import pytest
import sqlalchemy as sa
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


# ── In-memory DB Fixture ──────────────────────────────────────────────────────

@pytest.fixture
def db():
    """
    Provide a fresh in-memory SQLite session for each test.

    SQLite doesn't support PostgreSQL native ENUMs, so we temporarily
    set native_enum=False on all Enum columns before creating tables.
    StaticPool keeps one connection so API tests running routes in a
    worker thread see the same database.
    """
    from atlas.db.models import Base

    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, sa.Enum):
                col.type.native_enum = False

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        # Restore native_enum so production code is unaffected
        for table in Base.metadata.tables.values():
            for col in table.columns:
                if isinstance(col.type, sa.Enum):
                    col.type.native_enum = True
