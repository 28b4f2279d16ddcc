"""
app/services package marker.
"""

from app.services.bulk_import_service import IdempotentImporter, run_import
from app.services.run_reporter import build_report, render_report

__all__ = [
    "IdempotentImporter",
    "run_import",
    "build_report",
    "render_report",
]
