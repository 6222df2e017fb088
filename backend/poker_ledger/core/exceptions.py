"""Domain errors and the user-facing messages the API layer reports for them."""
from __future__ import annotations

from fastapi import HTTPException


class ErrorMessages:
    SESSION_NOT_FOUND = "Session not found"
    EMPTY_SESSION = "Session must contain at least one named player"
    EMPTY_QUICK_ENTRY = "No entries recognised. Expected lines like 'Name buy 2000 5000'"
    STORAGE_UNAVAILABLE = "Storage backend unavailable, please retry"
    INVALID_PERIOD_RANGE = "Custom period requires both start and end dates"
    INVALID_DATE_RANGE = "start must not be after end"
    INVALID_AVATAR = "Unknown avatar"
    PLAYER_NOT_FOUND = "Player not found"


class LedgerError(ValueError):
    """Base class for errors raised by the ledger services."""


class SessionNotFoundError(LedgerError):
    def __init__(self, session_id: str):
        super().__init__(f"{ErrorMessages.SESSION_NOT_FOUND}: {session_id}")
        self.session_id = session_id


class EmptySessionError(LedgerError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.EMPTY_SESSION)


class EmptyQuickEntryError(LedgerError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.EMPTY_QUICK_ENTRY)


class StorageError(LedgerError):
    """The storage backend failed; nothing was written."""


def http_error(e: LedgerError) -> HTTPException:
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status_code=404, detail=ErrorMessages.SESSION_NOT_FOUND)
    if isinstance(e, EmptyQuickEntryError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, StorageError):
        return HTTPException(status_code=503, detail=ErrorMessages.STORAGE_UNAVAILABLE)
    return HTTPException(status_code=400, detail=str(e))
