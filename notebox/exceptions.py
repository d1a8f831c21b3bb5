"""
Notebox — Business Codes & Exception Hierarchy
================================================

What:  The enumerated business codes returned in every envelope, plus the
       application exceptions that carry them.
Why:   Every failure leaves the service as `{code, data, message}` with a fixed
       business code and an HTTP status. Keeping both on the exception lets a
       single global handler render any error.
How:   ErrorKind pairs each code with its message. Exceptions carry a kind and
       a status code; global handlers (registered in main.py) turn them into
       envelopes.
Who:   Raised by the Note Store and route handlers; caught by global handlers.

Exception Hierarchy:
    NoteboxError (base)
    ├── ValidationError   → 422, TITLE_IS_NIL (client can fix the input)
    ├── StorageError      → 500, UNRECOGNIZED (database could not complete)
    └── RequestFailed     → per-operation (kind, status) chosen by the handler

Business Codes:
    code 0 is success; every other code identifies a failure category and is
    independent of the HTTP status. The messages are part of the public
    contract and are returned verbatim.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Business code and message pairs used in the response envelope."""

    SUCCESS = (0, "成功")
    UNRECOGNIZED = (-1, "未知错误")
    TITLE_IS_NIL = (1000, "标题为空错误！")
    RECORD_IS_NIL = (1001, "记录为空错误")
    DB_IS_NIL = (1002, "数据库为空错误！")
    CREATE_TABLE = (2000, "创建数据表错误！")
    CREATE_DB = (2001, "创建数据库失败！")
    SEARCH = (3000, "查询数据库错误!")
    DELETE = (4000, "删除记录错误！")
    UPDATE = (5000, "记录更新错误！")

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message


class NoteboxError(Exception):
    """
    Base exception for all Notebox application errors.

    Attributes:
        message:      Developer-facing description (logged, never the envelope message)
        kind:         Business code rendered into the envelope
        status_code:  HTTP status of the error response
        context:      Additional debug info (logged but NOT returned to client)
    """

    default_kind = ErrorKind.UNRECOGNIZED
    default_status = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        kind: Optional[ErrorKind] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.kind = kind or self.default_kind
        self.status_code = status_code or self.default_status
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteboxError):
    """
    Raised when client input fails a precondition.

    When:    Creating a note with an empty title.
    HTTP:    422 Unprocessable Entity, business code 1000.
    """

    default_kind = ErrorKind.TITLE_IS_NIL
    default_status = 422

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, kind=kind, context=ctx)
        self.field = field


class StorageError(NoteboxError):
    """
    Raised when the persistence layer could not complete an operation.

    What:    A query, insert, update or delete failed, or the database was unreachable.
    When:    Wrapped around SQLAlchemy and connection errors by the Note Store.
    HTTP:    Decided by the calling handler (see RequestFailed); 500 if unmapped.

    The original driver exception is chained (`raise ... from exc`) so the full
    cause reaches the server log while the client only sees the business code.
    """

    def __init__(
        self,
        operation: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(
            message=message or f"Storage operation '{operation}' failed",
            context=ctx,
        )
        self.operation = operation


class RequestFailed(NoteboxError):
    """
    Raised by a route handler to report a failure with an explicit
    business code and HTTP status.

    Each handler maps store failures differently (e.g. a failed lookup is 422
    for a single note but 500 for the full listing), so the mapping lives at
    the call site rather than on StorageError.

    `data` optionally rides along into the envelope; a failed update still
    reports the note id it was aimed at.
    """

    def __init__(
        self,
        kind: ErrorKind,
        status_code: int,
        context: Optional[Dict[str, Any]] = None,
        data: Any = None,
    ):
        super().__init__(
            message=kind.message,
            kind=kind,
            status_code=status_code,
            context=context,
        )
        self.data = data
