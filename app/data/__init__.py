"""
app/data package marker.
"""

from app.data.schools import SCHOOL_RECORDS, SCHOOLS_TARGET

__all__ = [
    "SCHOOL_RECORDS",
    "SCHOOLS_TARGET",
]
