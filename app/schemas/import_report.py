"""
app/schemas/import_report.py

Serializable report schemas for bulk import runs.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ImportOutcomeReport(BaseModel):
    """
    One record-level outcome.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    natural_key: str = Field(min_length=1)
    status: Literal["inserted", "skipped_duplicate", "failed"]
    reason: str | None = None


class ImportReport(BaseModel):
    """
    Report payload for one import run.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_records: int = Field(..., ge=0)
    pre_count: int = Field(..., ge=0)
    inserted_count: int = Field(..., ge=0)
    skipped_count: int = Field(..., ge=0)
    failed_count: int = Field(..., ge=0)
    processed_count: int = Field(..., ge=0)
    post_count: int | None = Field(default=None, ge=0)
    complete: bool
    cancelled: bool = False
    counts_consistent: bool | None = None
    outcomes: list[ImportOutcomeReport] = Field(default_factory=list)
