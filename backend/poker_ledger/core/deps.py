from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session as DBSession

from .config import settings
from .db import SessionLocal
from .store import CloudSessionStore, LocalSessionStore, SessionStore
from ..services.stats_service import DEFAULT_LADDER, RankLadder


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_sync_key(request: Request) -> str | None:
    # Unauthenticated: the key only partitions cloud rows
    raw = request.headers.get(settings.SYNC_KEY_HEADER)
    if raw is None:
        return None
    key = raw.strip()
    return key or None


def get_store(
    db: DBSession = Depends(get_db),
    sync_key: str | None = Depends(get_sync_key),
) -> SessionStore:
    if sync_key:
        return CloudSessionStore(db, sync_key)
    return LocalSessionStore(settings.LOCAL_STORE_PATH)


def get_rank_ladder() -> RankLadder:
    return DEFAULT_LADDER
