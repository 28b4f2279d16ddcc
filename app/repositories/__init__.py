"""
app/repositories package marker.
"""

from app.repositories.import_target_repository import (
    ImportTargetRepository,
    describe_error,
    is_connection_loss,
)

__all__ = [
    "ImportTargetRepository",
    "describe_error",
    "is_connection_loss",
]
