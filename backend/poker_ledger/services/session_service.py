from __future__ import annotations

import datetime as dt
import logging
from uuid import uuid4

from ..core.config import settings
from ..core.exceptions import EmptySessionError, ErrorMessages, LedgerError, StorageError
from ..core.store import SessionStore
from ..models.entities import PlayerEntry, PokerSession

logger = logging.getLogger(__name__)

AVATARS = (
    "😎", "🤠", "🤑", "🤡", "🤖", "👽", "👻", "🐯",
    "🦁", "🐼", "🦊", "🐶", "🐱", "🦈", "🦅", "🦉",
)


class SessionService:
    @staticmethod
    def build_session(
        date: dt.datetime,
        players: list[PlayerEntry],
        location: str | None = None,
        duration_minutes: int = 0,
        notes: str | None = None,
        session_id: str | None = None,
    ) -> PokerSession:
        """Validated session; rows with a blank name are dropped, names are trimmed."""
        named = [
            PlayerEntry(name=p.name.strip(), buy_in=p.buy_in, cash_out=p.cash_out)
            for p in players
            if p.name.strip()
        ]
        if not named:
            raise EmptySessionError()
        if duration_minutes < 0:
            raise LedgerError("duration_minutes must be non-negative")

        return PokerSession(
            id=session_id or str(uuid4()),
            date=date,
            location=(location or "").strip() or settings.DEFAULT_LOCATION,
            duration_minutes=duration_minutes,
            notes=notes,
            players=named,
        )

    @staticmethod
    def load_or_empty(store: SessionStore) -> list[PokerSession]:
        """Read path for aggregation: a failing backend reads as "no data yet"."""
        try:
            return store.load()
        except StorageError as e:
            logger.warning(f"Could not load sessions, treating as empty: {e}")
            return []

    @staticmethod
    def get_session(store: SessionStore, session_id: str) -> PokerSession | None:
        return next((s for s in store.load() if s.id == session_id), None)

    @staticmethod
    def create_session(store: SessionStore, session: PokerSession) -> list[PokerSession]:
        if not session.named_players():
            raise EmptySessionError()
        logger.info(f"Adding session {session.id} with {len(session.players)} players")
        return store.add(session)

    @staticmethod
    def update_session(store: SessionStore, session: PokerSession) -> list[PokerSession]:
        if not session.named_players():
            raise EmptySessionError()
        logger.info(f"Updating session {session.id}")
        return store.update(session)

    @staticmethod
    def delete_session(store: SessionStore, session_id: str) -> list[PokerSession]:
        logger.info(f"Deleting session {session_id}")
        return store.remove(session_id)

    @staticmethod
    def set_avatar(store: SessionStore, name: str, avatar: str) -> dict[str, str]:
        if avatar not in AVATARS:
            raise LedgerError(ErrorMessages.INVALID_AVATAR)
        player = name.strip()
        if not player:
            raise LedgerError(ErrorMessages.PLAYER_NOT_FOUND)
        return store.set_avatar(player, avatar)
