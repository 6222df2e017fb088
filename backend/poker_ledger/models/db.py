from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CloudSession(Base):
    __tablename__ = "poker_sessions"

    id = Column(String(64), primary_key=True)
    user_key = Column(String(255), nullable=False, index=True)
    # Whole PokerSession record, stored verbatim
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: dt.datetime.utcnow(), index=True)


class PlayerAvatar(Base):
    __tablename__ = "player_avatars"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_key = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    avatar = Column(String(16), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_key", "name", name="uq_player_avatar_user_key_name"),
    )
