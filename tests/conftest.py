"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import Engine, create_engine

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

from pokerscore.database.models import Base
from pokerscore.services.store import SqlAlchemyStore


@compiles(PG_JSONB, "sqlite")
def _compile_jsonb_as_text(type_, compiler, **kw):
    return "TEXT"


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all pokerscore tables.

    Uses StaticPool so the TestClient's worker threads share the same
    in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def store(db_engine: Engine) -> SqlAlchemyStore:
    return SqlAlchemyStore(db_engine)


@pytest.fixture
def client(db_engine: Engine):
    """FastAPI TestClient wired to the in-memory database."""
    from fastapi.testclient import TestClient

    from pokerscore.api.deps import get_config, get_engine
    from pokerscore.api.main import app
    from pokerscore.config import LeagueConfig

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: LeagueConfig(
        club_name="Poker du Jeudi", news_feed_limit=20,
    )
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
