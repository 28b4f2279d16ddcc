"""
db/inspector.py

Schema preflight checks for the import target.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session


class BaseSchemaInspector(ABC):
    """
    Answers structural questions about the active database. Never mutates state.
    """

    @abstractmethod
    def table_exists(self, session: Session, table_name: str) -> bool:
        """
        Return True when `table_name` exists in the session's database.
        """


class SchemaInspector(BaseSchemaInspector):
    """
    Reflection-backed inspector, scoped to the connection's default schema.
    """

    def table_exists(self, session: Session, table_name: str) -> bool:
        inspector = sa_inspect(session.connection())
        return bool(inspector.has_table(table_name))
