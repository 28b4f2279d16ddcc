"""
app/validators package marker.
"""

from app.validators.record_source_validator import RecordErrorDetail, RecordSourceValidator

__all__ = [
    "RecordErrorDetail",
    "RecordSourceValidator",
]
