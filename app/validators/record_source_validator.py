"""
app/validators/record_source_validator.py

Validation for import record sources, run before any database access.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Sequence

from app.domain.bulk_import import ImportRecord, ImportTarget
from db.repositories.errors import RecordSourceError

SCALAR_TYPES = (str, int, float, bool, Decimal, date, datetime, type(None))


@dataclass(frozen=True)
class RecordErrorDetail:
    """
    Structured record source error detail.
    """

    code: str
    message: str
    natural_key: str | None = None
    position: int | None = None
    context: dict[str, Any] | None = None


class RecordSourceValidator:
    """
    Checks natural keys and field names of a record source against its target.
    """

    def __init__(self, *, target: ImportTarget) -> None:
        self._target = target
        self._reserved_columns = {target.key_column, target.timestamp_column}

    def validate(self, records: Sequence[ImportRecord]) -> None:
        """
        Validate records and raise structured errors if invalid.
        """

        errors: list[RecordErrorDetail] = []
        first_seen: dict[str, int] = {}

        for position, record in enumerate(records):
            key = record.natural_key
            if not isinstance(key, str) or not key.strip():
                errors.append(
                    RecordErrorDetail(
                        code="empty_natural_key",
                        message="Natural key must be a non-empty string.",
                        natural_key=key if isinstance(key, str) else None,
                        position=position,
                    )
                )
                continue

            if key in first_seen:
                errors.append(
                    RecordErrorDetail(
                        code="duplicate_natural_key",
                        message="Natural key appears more than once in the record source.",
                        natural_key=key,
                        position=position,
                        context={"first_position": first_seen[key]},
                    )
                )
            else:
                first_seen[key] = position

            for column, value in record.fields.items():
                if column in self._reserved_columns:
                    errors.append(
                        RecordErrorDetail(
                            code="reserved_column_in_fields",
                            message="Key and timestamp columns are set from the record, not its fields.",
                            natural_key=key,
                            position=position,
                            context={"column": column},
                        )
                    )
                elif not isinstance(value, SCALAR_TYPES):
                    errors.append(
                        RecordErrorDetail(
                            code="non_scalar_field",
                            message="Field values must be scalars.",
                            natural_key=key,
                            position=position,
                            context={"column": column, "type": type(value).__name__},
                        )
                    )

        if errors:
            raise RecordSourceError(
                message=f"Record source for '{self._target.table_name}' failed validation.",
                errors=errors,
            )
