from __future__ import annotations

from fastapi import APIRouter, Depends

from ..core.deps import get_store
from ..core.exceptions import LedgerError, http_error
from ..core.store import SessionStore
from ..models.schemas import (
    PlayerEntryOut,
    QuickParseIn,
    QuickParseOut,
    QuickSessionIn,
    QuickSessionOut,
    QuickTotalsOut,
    SessionOut,
)
from ..services.quick_entry import build_quick_session, control_totals, parse_quick_entries
from ..services.session_service import SessionService
from ..services.stats_service import session_overview

router = APIRouter(prefix="/api/quick", tags=["quick"])


@router.post("/parse", response_model=QuickParseOut)
def parse_preview(payload: QuickParseIn):
    """Preview only; nothing is stored."""
    entries = parse_quick_entries(payload.text)
    return QuickParseOut(
        entries=[PlayerEntryOut.model_validate(e) for e in entries],
        totals=QuickTotalsOut.model_validate(control_totals(entries)),
        can_save=bool(entries),
    )


@router.post("/sessions", response_model=QuickSessionOut, status_code=201)
def create_quick_session(payload: QuickSessionIn, store: SessionStore = Depends(get_store)):
    try:
        session = build_quick_session(payload.text, payload.location, payload.day)
        SessionService.create_session(store, session)
    except LedgerError as e:
        raise http_error(e)

    return QuickSessionOut(
        session=SessionOut.from_entity(session, session_overview(session)),
        totals=QuickTotalsOut.model_validate(control_totals(session.players)),
    )
