"""
Repository layer exports.
"""

from db.repositories.errors import (
    BulkImportError,
    DatabaseConnectionError,
    ImportRunError,
    PreconditionError,
    RecordSourceError,
    RecordWriteError,
)

__all__ = [
    "BulkImportError",
    "DatabaseConnectionError",
    "ImportRunError",
    "PreconditionError",
    "RecordSourceError",
    "RecordWriteError",
]
