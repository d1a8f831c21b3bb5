"""
Notebox — Pydantic Response Schemas
=====================================

What:  Pydantic models defining the JSON contract of the service.
Why:   Strict serialization and OpenAPI doc generation, kept separate from the
       SQLAlchemy model so the wire format (camelCase timestamps, zero-value
       notes) can differ from the table layout.
Who:   Used by route handlers and global exception handlers.

Envelope:
    Every endpoint answers with
        {"code": <business code>, "data": <Note or null>, "message": <text>}
    code 0 means success; see notebox.exceptions.ErrorKind for the rest.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from notebox.exceptions import ErrorKind


class NoteOut(BaseModel):
    """
    What:  JSON representation of a Note.
    When:  Embedded as `data` in success envelopes.

    Timestamps serialize as camelCase (createdAt/updatedAt/deletedAt).
    A zero-value note (id 0, empty fields, null timestamps) is what a lookup
    of an absent id returns.
    """
    id: int = Field(default=0, description="Note identifier; 0 when the note does not exist")
    title: str = Field(default="", description="Note title")
    text: str = Field(default="", description="Note body")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")
    deleted_at: Optional[datetime] = Field(default=None, serialization_alias="deletedAt")

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """SQLite hands back naive datetimes; every stored timestamp is UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Envelope(BaseModel):
    """
    What:  The uniform `{code, data, message}` wrapper.
    Why:   Clients branch on the business code, not the HTTP status.
    """
    code: int = Field(description="Business code; 0 on success")
    data: Optional[NoteOut] = Field(default=None, description="Payload or null")
    message: str = Field(description="Human-readable message for the code")

    @classmethod
    def of(cls, kind: ErrorKind, data: Any = None) -> "Envelope":
        """Build an envelope for `kind`, validating ORM objects into NoteOut."""
        payload = NoteOut.model_validate(data) if data is not None else None
        return cls(code=kind.code, data=payload, message=kind.message)

    def to_json(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase aliases applied."""
        return self.model_dump(mode="json", by_alias=True)


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
