"""
app/repositories/import_target_repository.py

Persistence layer for idempotent inserts into one import target table.
"""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import Insert, MetaData, Table, func, insert, literal, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError, DisconnectionError, IntegrityError, InterfaceError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.bulk_import import ImportRecord, ImportTarget
from db.repositories.errors import RecordWriteError

# Dialects with native INSERT ... ON CONFLICT DO NOTHING.
_CONFLICT_INSERTS: dict[str, Callable[[Table], Any]] = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def is_connection_loss(exc: BaseException) -> bool:
    """
    True when the error means the session's connection is gone.
    """

    if isinstance(exc, DisconnectionError):
        return True
    if isinstance(exc, DBAPIError):
        return bool(exc.connection_invalidated) or isinstance(exc, InterfaceError)
    return False


def describe_error(exc: BaseException) -> str:
    """
    Short, single-line failure reason for reports.
    """

    detail = exc.orig if isinstance(exc, DBAPIError) and exc.orig is not None else exc
    message = " ".join(str(detail).split()) or type(detail).__name__
    return f"{type(detail).__name__}: {message}"


class ImportTargetRepository:
    """
    Row counts, key lookups and conditional inserts against the target table.

    The table is reflected on first use; the repository never issues DDL.
    """

    def __init__(self, session: Session, target: ImportTarget) -> None:
        self._session = session
        self._target = target
        self._table: Table | None = None

    @property
    def table(self) -> Table:
        if self._table is None:
            self._table = Table(
                self._target.table_name,
                MetaData(),
                autoload_with=self._session.connection(),
            )
        return self._table

    @property
    def dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    def count_rows(self) -> int:
        stmt = select(func.count()).select_from(self.table)
        return int(self._session.scalar(stmt) or 0)

    def key_exists(self, natural_key: str) -> bool:
        key_column = self.table.c[self._target.key_column]
        stmt = select(literal(1)).select_from(self.table).where(key_column == natural_key).limit(1)
        return self._session.scalar(stmt) is not None

    def build_payload(self, record: ImportRecord) -> dict[str, Any]:
        payload: dict[str, Any] = {self._target.key_column: record.natural_key}
        payload.update(record.fields)
        if record.created_at is not None:
            payload[self._target.timestamp_column] = record.created_at
        return payload

    def insert_if_absent(self, record: ImportRecord) -> int:
        """
        Insert `record` unless its natural key already exists.

        Returns the number of rows inserted (0 for an existing key).
        IntegrityError and connection-loss errors propagate unchanged;
        every other database error is raised as RecordWriteError.
        """

        try:
            stmt = self._build_insert(record)
            if stmt is None:
                return 0
            result = self._session.execute(stmt)
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            if is_connection_loss(exc):
                raise
            raise RecordWriteError(describe_error(exc), natural_key=record.natural_key) from exc

        return max(result.rowcount or 0, 0)

    def _build_insert(self, record: ImportRecord) -> Insert | None:
        payload = self.build_payload(record)
        conflict_insert = _CONFLICT_INSERTS.get(self.dialect_name)
        if conflict_insert is not None:
            return (
                conflict_insert(self.table)
                .values(payload)
                .on_conflict_do_nothing(index_elements=[self._target.key_column])
            )

        # MySQL and others: INSERT IGNORE would also mask non-key errors.
        if self.key_exists(record.natural_key):
            return None
        return insert(self.table).values(payload)
