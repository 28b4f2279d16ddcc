"""
db/session.py

SQLAlchemy engine factory and the connection provider used by the importer.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.config import DatabaseSettings, get_database_settings
from db.repositories.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def create_db_engine(settings: DatabaseSettings) -> Engine:
    return create_engine(
        settings.url,
        echo=_get_bool_env("SQL_ECHO", default=False),
        pool_pre_ping=True,
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
    )


class BaseConnectionProvider(ABC):
    """
    Acquires and releases the single session owned by an import run.
    """

    @abstractmethod
    def acquire(self) -> Session:
        """
        Open a session. Raises DatabaseConnectionError on failure.
        """

    @abstractmethod
    def release(self, session: Session | None) -> None:
        """
        Close a session. Must tolerate None and already-closed sessions.
        """

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self.acquire()
        try:
            yield session
        finally:
            self.release(session)


class ConnectionProvider(BaseConnectionProvider):
    """
    Engine-backed provider. One connection attempt per acquire, no retries.
    """

    def __init__(
        self,
        settings: DatabaseSettings | None = None,
        *,
        engine: Engine | None = None,
    ) -> None:
        self._settings = settings
        self._engine = engine
        self._session_factory: sessionmaker | None = None

    @property
    def settings(self) -> DatabaseSettings:
        if self._settings is None:
            self._settings = get_database_settings()
        return self._settings

    def _get_session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            if self._engine is None:
                self._engine = create_db_engine(self.settings)
            self._session_factory = sessionmaker(
                bind=self._engine,
                class_=Session,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def acquire(self) -> Session:
        session: Session | None = None
        try:
            session = self._get_session_factory()()
            session.execute(text("SELECT 1"))
        except (SQLAlchemyError, ImportError) as exc:
            self.release(session)
            logger.error("Database connection failed error=%s", exc)
            raise DatabaseConnectionError(f"Database connection failed: {exc}") from exc

        logger.info("Database connection established")
        return session

    def release(self, session: Session | None) -> None:
        if session is None:
            return
        try:
            session.close()
        except SQLAlchemyError as exc:
            logger.warning("Error while closing database session error=%s", exc)
        else:
            logger.debug("Database session closed")

    def dispose(self) -> None:
        """Dispose the engine pool, if one was created."""
        if self._engine is not None:
            self._engine.dispose()
