"""
app/domain/bulk_import.py

Domain models for idempotent bulk imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True)
class ImportTarget:
    """
    Table an import writes to. `key_column` must carry a uniqueness constraint.
    """

    table_name: str = "schools"
    key_column: str = "school_id"
    timestamp_column: str = "created_at"


@dataclass(frozen=True)
class ImportRecord:
    """
    One import candidate identified by its natural key.

    `created_at` overrides the table default for the timestamp column when set.
    """

    natural_key: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


class OutcomeStatus(str, Enum):
    INSERTED = "inserted"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportOutcome:
    """
    Result of attempting one record. `reason` is only set for failures.
    """

    natural_key: str
    status: OutcomeStatus
    reason: str | None = None

    @classmethod
    def inserted(cls, natural_key: str) -> "ImportOutcome":
        return cls(natural_key=natural_key, status=OutcomeStatus.INSERTED)

    @classmethod
    def skipped(cls, natural_key: str) -> "ImportOutcome":
        return cls(natural_key=natural_key, status=OutcomeStatus.SKIPPED_DUPLICATE)

    @classmethod
    def failed(cls, natural_key: str, reason: str) -> "ImportOutcome":
        return cls(natural_key=natural_key, status=OutcomeStatus.FAILED, reason=reason)


@dataclass(frozen=True)
class RunSummary:
    """
    End-of-run accounting.

    post_count is None when the run ended before it could be sampled.
    """

    total_records: int
    pre_count: int
    inserted_count: int
    skipped_count: int
    failed_count: int
    post_count: int | None
    complete: bool
    cancelled: bool = False

    @property
    def processed_count(self) -> int:
        return self.inserted_count + self.skipped_count + self.failed_count

    @property
    def counts_consistent(self) -> bool | None:
        """
        True when post_count == pre_count + inserted_count.

        A mismatch points at a concurrent writer. None when post_count is unknown.
        """

        if self.post_count is None:
            return None
        return self.post_count == self.pre_count + self.inserted_count


@dataclass
class RunTally:
    """
    Mutable accumulator used while a run is in progress.
    """

    total_records: int
    pre_count: int = 0
    outcomes: list[ImportOutcome] = field(default_factory=list)

    def record(self, outcome: ImportOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    def finalize(
        self,
        *,
        post_count: int | None,
        complete: bool,
        cancelled: bool = False,
    ) -> RunSummary:
        return RunSummary(
            total_records=self.total_records,
            pre_count=self.pre_count,
            inserted_count=self.count(OutcomeStatus.INSERTED),
            skipped_count=self.count(OutcomeStatus.SKIPPED_DUPLICATE),
            failed_count=self.count(OutcomeStatus.FAILED),
            post_count=post_count,
            complete=complete,
            cancelled=cancelled,
        )


@dataclass(frozen=True)
class ImportRunResult:
    """
    Finalized summary plus per-record outcomes in source order.
    """

    summary: RunSummary
    outcomes: tuple[ImportOutcome, ...] = ()
