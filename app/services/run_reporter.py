"""
app/services/run_reporter.py

Pure formatting of import run results. No I/O.
"""

from __future__ import annotations

from app.domain.bulk_import import ImportOutcome, ImportRunResult, OutcomeStatus
from app.schemas.import_report import ImportOutcomeReport, ImportReport

_STATUS_LABELS = {
    OutcomeStatus.INSERTED: "inserted",
    OutcomeStatus.SKIPPED_DUPLICATE: "skipped",
    OutcomeStatus.FAILED: "failed",
}


def build_report(result: ImportRunResult) -> ImportReport:
    """
    Build the serializable report for one run.
    """

    summary = result.summary
    return ImportReport(
        total_records=summary.total_records,
        pre_count=summary.pre_count,
        inserted_count=summary.inserted_count,
        skipped_count=summary.skipped_count,
        failed_count=summary.failed_count,
        processed_count=summary.processed_count,
        post_count=summary.post_count,
        complete=summary.complete,
        cancelled=summary.cancelled,
        counts_consistent=summary.counts_consistent,
        outcomes=[
            ImportOutcomeReport(
                natural_key=outcome.natural_key,
                status=outcome.status.value,
                reason=outcome.reason,
            )
            for outcome in result.outcomes
        ],
    )


def _outcome_line(outcome: ImportOutcome) -> str:
    label = _STATUS_LABELS[outcome.status]
    if outcome.status is OutcomeStatus.SKIPPED_DUPLICATE:
        return f"  {label:<8} {outcome.natural_key} (already exists)"
    if outcome.status is OutcomeStatus.FAILED:
        return f"  {label:<8} {outcome.natural_key}: {outcome.reason}"
    return f"  {label:<8} {outcome.natural_key}"


def render_report(
    result: ImportRunResult,
    *,
    table_name: str | None = None,
    include_outcomes: bool = True,
) -> str:
    """
    Render a human-readable report.
    """

    summary = result.summary
    lines: list[str] = []

    if include_outcomes and result.outcomes:
        lines.append("Records:")
        lines.extend(_outcome_line(outcome) for outcome in result.outcomes)
        lines.append("")

    title = f"Import summary ({table_name})" if table_name else "Import summary"
    lines.append(title)
    if summary.cancelled:
        lines.append("  PARTIAL RUN: cancelled before all records were processed")
    elif not summary.complete:
        lines.append("  PARTIAL RUN: counts are informational only")

    lines.append(f"  Inserted:        {summary.inserted_count}")
    lines.append(f"  Skipped:         {summary.skipped_count}")
    lines.append(f"  Failed:          {summary.failed_count}")
    lines.append(f"  Total processed: {summary.processed_count} of {summary.total_records}")
    lines.append(f"  Rows before:     {summary.pre_count}")
    if summary.post_count is None:
        lines.append("  Rows after:      unknown")
    else:
        lines.append(f"  Rows after:      {summary.post_count}")

    if summary.counts_consistent is False:
        lines.append(
            "  WARNING: row count changed by "
            f"{summary.post_count - summary.pre_count} but {summary.inserted_count} rows were inserted"
        )

    return "\n".join(lines)
