from __future__ import annotations

from fastapi import APIRouter, Depends

from ..core.deps import get_store
from ..core.exceptions import LedgerError, http_error
from ..core.store import SessionStore
from ..models.schemas import AvatarIn, AvatarsOut
from ..services.session_service import AVATARS, SessionService

router = APIRouter(prefix="/api/avatars", tags=["avatars"])


@router.get("", response_model=AvatarsOut)
def list_avatars(store: SessionStore = Depends(get_store)):
    try:
        current = store.load_avatars()
    except LedgerError as e:
        raise http_error(e)
    return AvatarsOut(catalogue=list(AVATARS), avatars=current)


@router.put("/{name}", response_model=AvatarsOut)
def set_avatar(name: str, payload: AvatarIn, store: SessionStore = Depends(get_store)):
    try:
        current = SessionService.set_avatar(store, name, payload.avatar)
    except LedgerError as e:
        raise http_error(e)
    return AvatarsOut(catalogue=list(AVATARS), avatars=current)
