"""Session storage backends.

Both backends expose the same load/add/update/remove operations and return the
refreshed, authoritative list after every mutation. The cloud backend partitions
rows by sync key; the local backend keeps everything in a single JSON file.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from ..models.db import CloudSession, PlayerAvatar
from ..models.entities import PokerSession
from .exceptions import SessionNotFoundError, StorageError

logger = logging.getLogger(__name__)


def decode_sessions(records) -> list[PokerSession]:
    """Stored records to entities; a malformed record fails the whole read."""
    try:
        return [PokerSession.from_record(r) for r in records]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error(f"Malformed session record in store: {e!r}")
        raise StorageError(f"Malformed session record: {e!r}") from e


class SessionStore(Protocol):
    def load(self) -> list[PokerSession]: ...

    def add(self, session: PokerSession) -> list[PokerSession]: ...

    def update(self, session: PokerSession) -> list[PokerSession]: ...

    def remove(self, session_id: str) -> list[PokerSession]: ...

    def load_avatars(self) -> dict[str, str]: ...

    def set_avatar(self, name: str, avatar: str) -> dict[str, str]: ...


class CloudSessionStore:
    def __init__(self, db: DBSession, user_key: str):
        self.db = db
        self.user_key = user_key

    def _rows(self):
        return (
            self.db.query(CloudSession)
            .filter(CloudSession.user_key == self.user_key)
            .order_by(CloudSession.created_at.desc())
            .all()
        )

    def _first(self, query):
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cloud store lookup failed: {e}")
            raise StorageError(str(e)) from e

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cloud store write failed for sync key partition: {e}")
            raise StorageError(str(e)) from e

    def load(self) -> list[PokerSession]:
        try:
            rows = self._rows()
        except SQLAlchemyError as e:
            logger.error(f"Cloud store read failed: {e}")
            raise StorageError(str(e)) from e
        return decode_sessions(row.data for row in rows)

    def add(self, session: PokerSession) -> list[PokerSession]:
        self.db.add(CloudSession(id=session.id, user_key=self.user_key, data=session.to_record()))
        self._commit()
        return self.load()

    def update(self, session: PokerSession) -> list[PokerSession]:
        row = self._first(
            self.db.query(CloudSession)
            .filter(CloudSession.id == session.id, CloudSession.user_key == self.user_key)
        )
        if row is None:
            raise SessionNotFoundError(session.id)
        row.data = session.to_record()
        self._commit()
        return self.load()

    def remove(self, session_id: str) -> list[PokerSession]:
        row = self._first(
            self.db.query(CloudSession)
            .filter(CloudSession.id == session_id, CloudSession.user_key == self.user_key)
        )
        if row is None:
            raise SessionNotFoundError(session_id)
        self.db.delete(row)
        self._commit()
        return self.load()

    def load_avatars(self) -> dict[str, str]:
        try:
            rows = self.db.query(PlayerAvatar).filter(PlayerAvatar.user_key == self.user_key).all()
        except SQLAlchemyError as e:
            logger.error(f"Cloud avatar read failed: {e}")
            raise StorageError(str(e)) from e
        return {str(r.name): str(r.avatar) for r in rows}

    def set_avatar(self, name: str, avatar: str) -> dict[str, str]:
        row = self._first(
            self.db.query(PlayerAvatar)
            .filter(PlayerAvatar.user_key == self.user_key, PlayerAvatar.name == name)
        )
        if row is None:
            self.db.add(PlayerAvatar(user_key=self.user_key, name=name, avatar=avatar))
        else:
            row.avatar = avatar
        self._commit()
        return self.load_avatars()


class LocalSessionStore:
    """Single-file JSON store used when no sync key is supplied."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"sessions": [], "avatars": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading local store {self.path}: {e}")
            raise StorageError(str(e)) from e
        if not isinstance(data, dict):
            logger.error(f"Local store {self.path} is not a JSON object")
            raise StorageError(f"Unexpected local store shape: {type(data).__name__}")
        data.setdefault("sessions", [])
        data.setdefault("avatars", {})
        sessions, avatars = data["sessions"], data["avatars"]
        if (
            not isinstance(sessions, list)
            or not all(isinstance(r, dict) for r in sessions)
            or not isinstance(avatars, dict)
        ):
            logger.error(f"Local store {self.path} has malformed sessions or avatars")
            raise StorageError("Unexpected local store shape")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".ledger-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error(f"Error writing local store {self.path}: {e}")
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise StorageError(str(e)) from e

    def load(self) -> list[PokerSession]:
        return decode_sessions(self._read()["sessions"])

    def add(self, session: PokerSession) -> list[PokerSession]:
        data = self._read()
        data["sessions"] = [session.to_record(), *data["sessions"]]
        self._write(data)
        return self.load()

    def update(self, session: PokerSession) -> list[PokerSession]:
        data = self._read()
        if not any(r.get("id") == session.id for r in data["sessions"]):
            raise SessionNotFoundError(session.id)
        data["sessions"] = [
            session.to_record() if r.get("id") == session.id else r for r in data["sessions"]
        ]
        self._write(data)
        return self.load()

    def remove(self, session_id: str) -> list[PokerSession]:
        data = self._read()
        remaining = [r for r in data["sessions"] if r.get("id") != session_id]
        if len(remaining) == len(data["sessions"]):
            raise SessionNotFoundError(session_id)
        data["sessions"] = remaining
        self._write(data)
        return self.load()

    def load_avatars(self) -> dict[str, str]:
        return dict(self._read()["avatars"])

    def set_avatar(self, name: str, avatar: str) -> dict[str, str]:
        data = self._read()
        data["avatars"][name] = avatar
        self._write(data)
        return dict(data["avatars"])
