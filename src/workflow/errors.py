"""
Domain exceptions.

Every error raised by the editors, the local store and the sync layer derives
from WorkflowError, which carries the HTTP status and error code used by the
exception handler registered in main.
"""
from __future__ import annotations

from typing import Optional


class WorkflowError(Exception):
    status_code = 500
    code = "WorkflowError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(WorkflowError):
    status_code = 404
    code = "NotFound"

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.identifier = identifier


class NoActiveDraftError(WorkflowError):
    status_code = 409
    code = "NoActiveDraft"

    def __init__(self) -> None:
        super().__init__("No task is being edited")


class PersistenceError(WorkflowError):
    code = "PersistenceError"


class RemoteError(WorkflowError):
    status_code = 502
    code = "RemoteError"


class RemoteNotReadyError(RemoteError):
    status_code = 503
    code = "RemoteNotReady"


class RemoteAuthError(RemoteError):
    status_code = 401
    code = "RemoteAuthError"


class SyncConflictError(RemoteError):
    status_code = 409
    code = "SyncConflict"

    def __init__(self, expected: Optional[str], actual: Optional[str]) -> None:
        super().__init__("The remote backup was modified by another writer; load it first or force the save")
        self.expected = expected
        self.actual = actual
