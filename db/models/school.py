"""
db/models/school.py

School model, the reference import target.

The bulk importer never issues DDL against this table; the model documents
the column contract (natural key `school_id` as primary key) and lets tests
build the table in a scratch database.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class School(Base):
    """
    One school supported by the program.

    school_id is the business key shared with the public site and admin
    tooling; it is also the deduplication key for imports.
    """

    __tablename__ = "schools"

    school_id: Mapped[str] = mapped_column(
        String(20),
        primary_key=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    region: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    children_served: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        default=0,
        server_default="0",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<School school_id={self.school_id!r} name={self.name!r} region={self.region!r}>"
