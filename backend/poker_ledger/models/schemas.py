from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .entities import PlayerEntry, PlayerStat, PokerSession, Rank


Period = Literal["all", "today", "yesterday", "week", "month", "year", "custom"]


class PlayerEntryIn(BaseModel):
    name: str = Field(default="", max_length=255)
    buy_in: float = Field(default=0, allow_inf_nan=False)
    cash_out: float = Field(default=0, allow_inf_nan=False)

    def to_entity(self) -> PlayerEntry:
        return PlayerEntry(name=self.name, buy_in=self.buy_in, cash_out=self.cash_out)


class PlayerEntryOut(BaseModel):
    name: str
    buy_in: float
    cash_out: float
    profit: float

    model_config = ConfigDict(from_attributes=True)


class SessionIn(BaseModel):
    date: dt.datetime
    location: str | None = Field(default=None, max_length=255)
    duration_minutes: int = Field(default=0, ge=0)
    notes: str | None = None
    players: list[PlayerEntryIn] = Field(default_factory=list)


class SessionOverviewOut(BaseModel):
    total_pot: float
    total_cash_out: float
    discrepancy: float
    player_count: int
    top_winner: str | None = None
    top_profit: float = 0

    model_config = ConfigDict(from_attributes=True)


class SessionOut(BaseModel):
    id: str
    date: dt.datetime
    location: str
    duration_minutes: int
    notes: str | None = None
    players: list[PlayerEntryOut]
    overview: SessionOverviewOut | None = None

    @classmethod
    def from_entity(cls, session: PokerSession, overview=None) -> "SessionOut":
        return cls(
            id=session.id,
            date=session.date,
            location=session.location,
            duration_minutes=session.duration_minutes,
            notes=session.notes,
            players=[PlayerEntryOut.model_validate(p) for p in session.players],
            overview=SessionOverviewOut.model_validate(overview) if overview else None,
        )


class RankOut(BaseModel):
    name: str
    # None stands for the open-ended bottom tier (-inf is not valid JSON)
    threshold: float | None
    color: str
    icon: str

    @classmethod
    def from_entity(cls, rank: Rank) -> "RankOut":
        threshold = None if rank.threshold == float("-inf") else rank.threshold
        return cls(name=rank.name, threshold=threshold, color=rank.color, icon=rank.icon)


class PlayerStatOut(BaseModel):
    name: str
    total_profit: float
    total_buy_in: float
    total_cash_out: float
    sessions_played: int
    last_played: dt.datetime
    average_buy_in: float
    average_profit: float
    avatar: str | None = None
    rank: RankOut

    @classmethod
    def from_entity(cls, stat: PlayerStat, rank: Rank) -> "PlayerStatOut":
        return cls(
            name=stat.name,
            total_profit=stat.total_profit,
            total_buy_in=stat.total_buy_in,
            total_cash_out=stat.total_cash_out,
            sessions_played=stat.sessions_played,
            last_played=stat.last_played,
            average_buy_in=stat.average_buy_in,
            average_profit=stat.average_profit,
            avatar=stat.avatar,
            rank=RankOut.from_entity(rank),
        )


class PlayerHistoryPointOut(BaseModel):
    session_id: str
    date: dt.datetime
    location: str
    profit: float
    cumulative: float


class PlayerDetailOut(BaseModel):
    stat: PlayerStatOut
    history: list[PlayerHistoryPointOut]


class LeaderboardRowOut(BaseModel):
    name: str
    profit: float


class VolumePointOut(BaseModel):
    date: dt.datetime
    volume: float
    cumulative: float


class WinLossOut(BaseModel):
    winners: int
    losers: int
    break_even: int


class SummaryOut(BaseModel):
    period: Period
    total_sessions: int
    total_volume: float
    total_minutes: int
    player_count: int
    total_discrepancy: float
    leaderboard: list[LeaderboardRowOut]
    volume: list[VolumePointOut]
    win_loss: WinLossOut


class QuickParseIn(BaseModel):
    text: str = ""


class QuickTotalsOut(BaseModel):
    sum_buy_in: float
    sum_cash_out: float
    discrepancy: float

    model_config = ConfigDict(from_attributes=True)


class QuickParseOut(BaseModel):
    entries: list[PlayerEntryOut]
    totals: QuickTotalsOut
    can_save: bool


class QuickSessionIn(BaseModel):
    text: str = Field(..., description="One player per line, e.g. 'Dat buy 2000 +5000'")
    location: str | None = Field(default=None, max_length=255)
    day: Literal["today", "yesterday"] = "today"


class QuickSessionOut(BaseModel):
    session: SessionOut
    totals: QuickTotalsOut


class AvatarIn(BaseModel):
    avatar: str = Field(..., min_length=1, max_length=16)


class AvatarsOut(BaseModel):
    catalogue: list[str]
    avatars: dict[str, str]
