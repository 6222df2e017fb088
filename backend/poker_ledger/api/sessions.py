from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.deps import get_store
from ..core.exceptions import ErrorMessages, LedgerError, http_error
from ..core.store import SessionStore
from ..models.schemas import Period, SessionIn, SessionOut
from ..services.session_service import SessionService
from ..services.stats_service import filter_sessions, session_overview, unique_player_names

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _out(sessions) -> list[SessionOut]:
    return [SessionOut.from_entity(s, session_overview(s)) for s in sessions]


def _custom_range(start: dt.date | None, end: dt.date | None):
    if start is None and end is None:
        return None
    return (start, end)


@router.get("", response_model=list[SessionOut])
def list_sessions(
    period: Period = Query(default="all"),
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    store: SessionStore = Depends(get_store),
):
    try:
        sessions = store.load()
        if period != "all":
            sessions = filter_sessions(sessions, period, _custom_range(start, end))
    except LedgerError as e:
        raise http_error(e)
    return _out(sessions)


@router.get("/players/names", response_model=list[str])
def player_names(store: SessionStore = Depends(get_store)):
    return unique_player_names(SessionService.load_or_empty(store))


@router.post("", response_model=list[SessionOut], status_code=201)
def create_session(payload: SessionIn, store: SessionStore = Depends(get_store)):
    try:
        session = SessionService.build_session(
            date=payload.date,
            players=[p.to_entity() for p in payload.players],
            location=payload.location,
            duration_minutes=payload.duration_minutes,
            notes=payload.notes,
        )
        sessions = SessionService.create_session(store, session)
    except LedgerError as e:
        raise http_error(e)
    return _out(sessions)


@router.get("/{session_id}", response_model=SessionOut)
def get_session(session_id: str, store: SessionStore = Depends(get_store)):
    try:
        s = SessionService.get_session(store, session_id)
    except LedgerError as e:
        raise http_error(e)
    if s is None:
        raise HTTPException(status_code=404, detail=ErrorMessages.SESSION_NOT_FOUND)
    return SessionOut.from_entity(s, session_overview(s))


@router.put("/{session_id}", response_model=list[SessionOut])
def update_session(session_id: str, payload: SessionIn, store: SessionStore = Depends(get_store)):
    try:
        session = SessionService.build_session(
            date=payload.date,
            players=[p.to_entity() for p in payload.players],
            location=payload.location,
            duration_minutes=payload.duration_minutes,
            notes=payload.notes,
            session_id=session_id,
        )
        sessions = SessionService.update_session(store, session)
    except LedgerError as e:
        raise http_error(e)
    return _out(sessions)


@router.delete("/{session_id}", response_model=list[SessionOut])
def delete_session(session_id: str, store: SessionStore = Depends(get_store)):
    try:
        sessions = SessionService.delete_session(store, session_id)
    except LedgerError as e:
        raise http_error(e)
    return _out(sessions)
