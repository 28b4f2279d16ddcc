"""
Exceptions for the bulk import flow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from app.domain.bulk_import import ImportOutcome, RunSummary
    from app.validators.record_source_validator import RecordErrorDetail


class BulkImportError(Exception):
    """Base exception for bulk import failures."""


class PreconditionError(BulkImportError):
    """Raised when the target table is missing before any write."""

    def __init__(self, message: str, *, table_name: str) -> None:
        super().__init__(message)
        self.table_name = table_name


class DatabaseConnectionError(BulkImportError):
    """Raised when a database session cannot be acquired or maintained."""


class ImportRunError(DatabaseConnectionError):
    """
    Raised when the connection is lost mid-run.

    `summary` holds the counts accumulated before the failure. It is
    informational only: `post_count` was never sampled.
    """

    def __init__(
        self,
        message: str,
        *,
        summary: RunSummary,
        outcomes: Sequence[ImportOutcome] = (),
    ) -> None:
        super().__init__(message)
        self.summary = summary
        self.outcomes = tuple(outcomes)


class RecordSourceError(BulkImportError, ValueError):
    """Raised when the record source fails validation before the run starts."""

    def __init__(self, *, message: str, errors: Sequence[RecordErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "natural_key": error.natural_key,
                    "position": error.position,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


class RecordWriteError(BulkImportError):
    """Raised when one record cannot be written; recovered as a failed outcome."""

    def __init__(self, message: str, *, natural_key: str) -> None:
        super().__init__(message)
        self.natural_key = natural_key
