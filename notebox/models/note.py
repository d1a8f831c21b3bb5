"""
Notebox — Note SQLAlchemy Model
=================================

What:  ORM model representing the `note` table.
Why:   Maps Python objects to database rows for type-safe database operations.
Who:   Used by NoteStore for CRUD operations and by Database.create_schema().

Table Design:
    - id: 64-bit primary key assigned by the database on insert, so every id the
      handlers accept fits the column (SQLite keeps INTEGER for rowid autoincrement)
    - title / text: VARCHAR(255); title must be non-empty at creation (enforced
      by the create handler, not the database)
    - created_at / updated_at: UTC timestamps maintained by the application
    - deleted_at: Nullable, indexed. Rows are hard-deleted, so it stays NULL;
      reads still only consider rows where it is NULL.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from notebox.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A single note.

    Lifecycle:
        1. Created by POST /note
        2. Read by id or listed in full
        3. Partially updated by PUT /note/{id} (only supplied fields change)
        4. Permanently deleted by DELETE /note/{id} (no recovery)
    """

    __tablename__ = "note"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    text: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    @classmethod
    def blank(cls, note_id: int = 0) -> "Note":
        """
        Build an unsaved Note carrying only an id.

        The store returns blank(0) when a lookup finds nothing; callers tell
        "absent" apart by checking for id 0.
        """
        return cls(id=note_id, title="", text="")

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}')>"
