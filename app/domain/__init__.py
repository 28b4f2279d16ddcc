"""
app/domain package marker.
"""

from app.domain.bulk_import import (
    ImportOutcome,
    ImportRecord,
    ImportRunResult,
    ImportTarget,
    OutcomeStatus,
    RunSummary,
    RunTally,
)

__all__ = [
    "ImportOutcome",
    "ImportRecord",
    "ImportRunResult",
    "ImportTarget",
    "OutcomeStatus",
    "RunSummary",
    "RunTally",
]
