from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any


def as_utc(value: dt.datetime) -> dt.datetime:
    """Naive timestamps are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def parse_timestamp(value: str | dt.datetime) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return as_utc(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(dt.datetime.fromisoformat(text))


def format_timestamp(value: dt.datetime) -> str:
    # Same shape as JS Date.toISOString(): millisecond precision, Z suffix
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class PlayerEntry:
    name: str
    buy_in: float = 0.0
    cash_out: float = 0.0

    @property
    def profit(self) -> float:
        return self.cash_out - self.buy_in

    def to_record(self) -> dict[str, Any]:
        return {"name": self.name, "buyIn": self.buy_in, "cashOut": self.cash_out}

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "PlayerEntry":
        return cls(
            name=str(data.get("name") or ""),
            buy_in=float(data.get("buyIn") or 0),
            cash_out=float(data.get("cashOut") or 0),
        )


@dataclass
class PokerSession:
    id: str
    date: dt.datetime
    location: str = "Home Game"
    duration_minutes: int = 0
    notes: str | None = None
    players: list[PlayerEntry] = field(default_factory=list)

    def named_players(self) -> list[PlayerEntry]:
        return [p for p in self.players if p.name.strip()]

    def to_record(self) -> dict[str, Any]:
        """Persisted shape, shared by every storage backend."""
        record: dict[str, Any] = {
            "id": self.id,
            "date": format_timestamp(self.date),
            "location": self.location,
            "durationMinutes": self.duration_minutes,
            "players": [p.to_record() for p in self.players],
        }
        if self.notes is not None:
            record["notes"] = self.notes
        return record

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "PokerSession":
        return cls(
            id=str(data["id"]),
            date=parse_timestamp(data["date"]),
            location=str(data.get("location") or ""),
            duration_minutes=int(data.get("durationMinutes") or 0),
            notes=data.get("notes"),
            players=[PlayerEntry.from_record(p) for p in data.get("players") or []],
        )


@dataclass
class PlayerStat:
    name: str
    last_played: dt.datetime
    total_profit: float = 0.0
    total_buy_in: float = 0.0
    total_cash_out: float = 0.0
    sessions_played: int = 0
    avatar: str | None = None

    @property
    def average_buy_in(self) -> float:
        if self.sessions_played == 0:
            return 0.0
        return self.total_buy_in / self.sessions_played

    @property
    def average_profit(self) -> float:
        if self.sessions_played == 0:
            return 0.0
        return self.total_profit / self.sessions_played


@dataclass(frozen=True)
class Rank:
    name: str
    threshold: float
    color: str
    icon: str
