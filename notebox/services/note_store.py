"""
Notebox — Note Store (Persistence Layer)
==========================================

What:  Create, find-by-id, find-all, update-by-id and delete-by-id for notes.
Why:   Keeps every SQL statement out of the route handlers, which only decide
       how a failure is reported.
How:   Each operation opens its own transactional session on the Database it
       was constructed with. Driver and connection errors are wrapped in
       StorageError with the original exception chained.
Who:   Built once by create_app(); reached by handlers through a dependency.

Semantics worth knowing:
    - find_by_id never raises for a missing row; it returns Note.blank()
      (id 0) and the caller checks the identifier.
    - update_by_id only touches non-empty fields and is a no-op when nothing
      matches; the returned Note echoes what was sent, not the stored row.
    - delete_by_id is permanent and a no-op when nothing matches.
    - Reads only consider rows whose deleted_at is NULL.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from notebox.database import Database
from notebox.exceptions import StorageError
from notebox.models.note import Note

logger = logging.getLogger(__name__)

# Errors that mean "the database could not complete the operation"
_STORAGE_FAILURES = (SQLAlchemyError, OSError)


class NoteStore:
    """Persistence for Note rows. Holds no state besides the Database handle."""

    def __init__(self, database: Database):
        self._database = database

    async def create(self, title: str, text: str) -> Note:
        """
        Insert a new note and return it with id and timestamps assigned.

        Raises:
            StorageError: Constraint violation or connectivity failure
        """
        note = Note(title=title, text=text)
        try:
            async with self._database.session() as session:
                session.add(note)
                await session.flush()
        except _STORAGE_FAILURES as e:
            logger.error("Database error creating note: %s", str(e))
            raise StorageError("create", context={"error_type": type(e).__name__}) from e

        logger.info("Note %s created", note.id)
        return note

    async def find_by_id(self, note_id: int) -> Note:
        """
        Return the note with `note_id`, or Note.blank() when there is none.

        Query plan:
            SELECT * FROM note WHERE id = :id AND deleted_at IS NULL
        """
        try:
            async with self._database.session() as session:
                result = await session.execute(
                    select(Note).where(Note.id == note_id, Note.deleted_at.is_(None))
                )
                note = result.scalar_one_or_none()
        except _STORAGE_FAILURES as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise StorageError(
                "find_by_id",
                context={"note_id": note_id, "error_type": type(e).__name__},
            ) from e

        if note is None:
            logger.debug("Note %s not found, returning blank note", note_id)
            return Note.blank()
        return note

    async def find_all(self) -> List[Note]:
        """Return every live note, ordered by id."""
        try:
            async with self._database.session() as session:
                result = await session.execute(
                    select(Note).where(Note.deleted_at.is_(None)).order_by(Note.id)
                )
                notes = list(result.scalars().all())
        except _STORAGE_FAILURES as e:
            logger.error("Database error listing notes: %s", str(e))
            raise StorageError("find_all", context={"error_type": type(e).__name__}) from e

        return notes

    async def update_by_id(self, note_id: int, title: str = "", text: str = "") -> Note:
        """
        Apply the non-empty fields among `title` / `text` to note `note_id`.

        Returns an unsaved Note echoing the id and the supplied values (empty
        string where a field was omitted). updated_at is set only when at
        least one field was applied.
        """
        changes: Dict[str, object] = {
            name: value for name, value in (("title", title), ("text", text)) if value
        }
        echo = Note(id=note_id, title=title, text=text)
        if not changes:
            return echo

        changes["updated_at"] = datetime.now(timezone.utc)
        try:
            async with self._database.session() as session:
                result = await session.execute(
                    update(Note)
                    .where(Note.id == note_id, Note.deleted_at.is_(None))
                    .values(**changes)
                )
        except _STORAGE_FAILURES as e:
            logger.error("Database error updating note %s: %s", note_id, str(e))
            raise StorageError(
                "update_by_id",
                context={"note_id": note_id, "error_type": type(e).__name__},
            ) from e

        logger.info(
            "Note %s update applied %s (rows matched: %d)",
            note_id,
            sorted(k for k in changes if k != "updated_at"),
            result.rowcount,
        )
        echo.updated_at = changes["updated_at"]
        return echo

    async def delete_by_id(self, note_id: int) -> Note:
        """Permanently delete note `note_id`; returns Note.blank(note_id)."""
        try:
            async with self._database.session() as session:
                result = await session.execute(delete(Note).where(Note.id == note_id))
        except _STORAGE_FAILURES as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise StorageError(
                "delete_by_id",
                context={"note_id": note_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Note %s delete (rows removed: %d)", note_id, result.rowcount)
        return Note.blank(note_id)
