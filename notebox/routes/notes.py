"""
Notebox — Note Route Handlers
===============================

What:  The five CRUD handlers under /note.
Why:   Translate HTTP requests into Note Store calls and store outcomes into
       the `{code, data, message}` envelope.
How:   Read form fields / path id, validate, call the store, and map any
       StorageError to the (business code, HTTP status) pair of this operation.
Who:   Mounted by create_app(); the store comes from app.state via get_note_store.

Failure mapping:
    POST   /note        empty title → 422/1000, store error → 422/2000
    GET    /note/{id}   store error → 422/3000
    GET    /note        store error → 500/3000, no notes → 404/1002
    PUT    /note/{id}   store error → 500/5000
    DELETE /note/{id}   store error → 500/4000

Path ids that are not integers are treated as 0 rather than rejected.
"""

import json
import logging
import re
from typing import Iterator, List

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, StreamingResponse

from notebox.exceptions import ErrorKind, RequestFailed, StorageError, ValidationError
from notebox.models.note import Note
from notebox.schemas.note import Envelope
from notebox.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/note", tags=["Notes"])

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_ENVELOPE_DOC = {"description": "Envelope {code, data, message}", "model": Envelope}


def get_note_store(request: Request) -> NoteStore:
    """Dependency returning the NoteStore built by the application factory."""
    return request.app.state.note_store


def parse_note_id(raw: str) -> int:
    """
    Parse a path segment as a signed 64-bit integer.

    Anything that is not an optionally signed run of ASCII digits, or that
    does not fit in 64 bits, becomes 0.
    """
    if not _ID_PATTERN.fullmatch(raw):
        logger.debug("Non-integer note id %r treated as 0", raw)
        return 0
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        logger.debug("Out-of-range note id %r treated as 0", raw)
        return 0
    return value


def validate_title(title: str) -> None:
    if len(title) < 1:
        raise ValidationError(message="Note title must not be empty", field="title")


def envelope_response(status_code: int, data=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=Envelope.of(ErrorKind.SUCCESS, data).to_json())


@router.post(
    "",
    status_code=201,
    responses={201: _ENVELOPE_DOC, 422: _ENVELOPE_DOC},
    summary="Create a note",
)
async def create_note(
    title: str = Form(default=""),
    text: str = Form(default=""),
    store: NoteStore = Depends(get_note_store),
) -> JSONResponse:
    validate_title(title)

    try:
        note = await store.create(title=title, text=text)
    except StorageError as e:
        raise RequestFailed(ErrorKind.CREATE_TABLE, status_code=422, context=e.context) from e

    return envelope_response(201, note)


@router.get(
    "/{note_id}",
    responses={200: _ENVELOPE_DOC, 422: _ENVELOPE_DOC},
    summary="Get a note by id",
    description="Returns a zero-value note (id 0) when no note has the given id.",
)
async def get_note(note_id: str, store: NoteStore = Depends(get_note_store)) -> JSONResponse:
    try:
        note = await store.find_by_id(parse_note_id(note_id))
    except StorageError as e:
        raise RequestFailed(ErrorKind.SEARCH, status_code=422, context=e.context) from e

    return envelope_response(200, note)


def _stream_envelopes(notes: List[Note]) -> Iterator[bytes]:
    for note in notes:
        body = json.dumps(
            Envelope.of(ErrorKind.SUCCESS, note).to_json(),
            ensure_ascii=False,
            separators=(",", ":"),
        )
        yield (body + "\n").encode("utf-8")


@router.get(
    "",
    responses={
        200: {"description": "One envelope per note, newline separated"},
        404: _ENVELOPE_DOC,
        500: _ENVELOPE_DOC,
    },
    summary="List every note",
    description=(
        "Emits one JSON envelope per note in a single 200 response, each "
        "followed by a newline. Returns 404 with code 1002 when there are no notes."
    ),
)
async def list_notes(store: NoteStore = Depends(get_note_store)) -> StreamingResponse:
    try:
        notes = await store.find_all()
    except StorageError as e:
        raise RequestFailed(ErrorKind.SEARCH, status_code=500, context=e.context) from e

    if len(notes) < 1:
        raise RequestFailed(ErrorKind.DB_IS_NIL, status_code=404)

    return StreamingResponse(_stream_envelopes(notes), status_code=200, media_type="application/json")


@router.put(
    "/{note_id}",
    responses={200: _ENVELOPE_DOC, 500: _ENVELOPE_DOC},
    summary="Update a note",
    description="Only non-empty fields are applied; updating a missing id is a no-op.",
)
async def update_note(
    note_id: str,
    title: str = Form(default=""),
    text: str = Form(default=""),
    store: NoteStore = Depends(get_note_store),
) -> JSONResponse:
    target_id = parse_note_id(note_id)
    try:
        note = await store.update_by_id(target_id, title=title, text=text)
    except StorageError as e:
        raise RequestFailed(
            ErrorKind.UPDATE,
            status_code=500,
            context=e.context,
            data=Note.blank(target_id),
        ) from e

    return envelope_response(200, note)


@router.delete(
    "/{note_id}",
    responses={200: _ENVELOPE_DOC, 500: _ENVELOPE_DOC},
    summary="Delete a note",
    description="Permanently removes the note; deleting a missing id is a no-op.",
)
async def delete_note(note_id: str, store: NoteStore = Depends(get_note_store)) -> JSONResponse:
    try:
        note = await store.delete_by_id(parse_note_id(note_id))
    except StorageError as e:
        raise RequestFailed(ErrorKind.DELETE, status_code=500, context=e.context) from e

    return envelope_response(200, note)
