"""
Shared fixtures: an in-memory SQLite database with the `schools` table.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 registers School on Base.metadata
from db.base import Base
from db.session import ConnectionProvider


@pytest.fixture()
def empty_engine() -> Iterator[Engine]:
    """In-memory database without any tables."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture()
def engine(empty_engine: Engine) -> Engine:
    Base.metadata.create_all(empty_engine)
    return empty_engine


@pytest.fixture()
def provider(engine: Engine) -> ConnectionProvider:
    return ConnectionProvider(engine=engine)


@pytest.fixture()
def session(provider: ConnectionProvider) -> Iterator[Session]:
    session = provider.acquire()
    yield session
    provider.release(session)
