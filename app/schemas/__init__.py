"""
app/schemas package marker.
"""

from app.schemas.import_report import ImportOutcomeReport, ImportReport

__all__ = [
    "ImportOutcomeReport",
    "ImportReport",
]
