"""
Player statistics: time-window filtering, per-player aggregation, rank ladder
lookup and the chart-data derivations built on top of them.

Everything here is a pure function of its inputs; nothing reads storage or
ambient state, so callers pass sessions, avatars and the clock explicitly.
"""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from ..core.exceptions import ErrorMessages, LedgerError
from ..models.entities import PlayerStat, PokerSession, Rank, as_utc

PERIODS = ("all", "today", "yesterday", "week", "month", "year", "custom")

_END_OF_DAY = dt.time(23, 59, 59, 999000)


class RankLadder:
    """Ordered tiers, ascending by threshold; the first tier must be the catch-all."""

    def __init__(self, ranks: Iterable[Rank]):
        ordered = sorted(ranks, key=lambda r: r.threshold)
        if not ordered:
            raise ValueError("Rank ladder cannot be empty")
        if ordered[0].threshold != -math.inf:
            raise ValueError("Lowest rank threshold must be -inf")
        self.ranks: tuple[Rank, ...] = tuple(ordered)

    def __iter__(self):
        return iter(self.ranks)

    def __len__(self) -> int:
        return len(self.ranks)

    def rank_of(self, profit: float) -> Rank:
        for rank in reversed(self.ranks):
            if profit >= rank.threshold:
                return rank
        # NaN compares false against everything
        return self.ranks[0]


DEFAULT_LADDER = RankLadder(
    [
        Rank("Tập Sự", -math.inf, "text-gray-400", "🐣"),
        Rank("Đồng", 0, "text-amber-700", "🥉"),
        Rank("Bạc", 2_000_000, "text-slate-400", "🥈"),
        Rank("Vàng", 5_000_000, "text-yellow-500", "🥇"),
        Rank("Bạch Kim", 10_000_000, "text-cyan-400", "💠"),
        Rank("Kim Cương", 20_000_000, "text-blue-400", "💎"),
        Rank("Cao Thủ", 50_000_000, "text-purple-400", "🔮"),
        Rank("Đại Cao Thủ", 100_000_000, "text-red-500", "👹"),
        Rank("Thách Đấu", 200_000_000, "text-yellow-300", "👑"),
    ]
)


def rank_of(total_profit: float, ladder: RankLadder = DEFAULT_LADDER) -> Rank:
    return ladder.rank_of(total_profit)


def _as_date(value: dt.date | dt.datetime) -> dt.date:
    if isinstance(value, dt.datetime):
        return as_utc(value).date()
    return value


def custom_window(
    custom_range: tuple[dt.date, dt.date] | None,
) -> tuple[dt.datetime, dt.datetime]:
    """
    Inclusive window covering whole calendar days.

    Start is pinned to 00:00:00.000 and end to 23:59:59.999 (UTC).
    """
    if custom_range is None or custom_range[0] is None or custom_range[1] is None:
        raise LedgerError(ErrorMessages.INVALID_PERIOD_RANGE)
    start_day, end_day = _as_date(custom_range[0]), _as_date(custom_range[1])
    if start_day > end_day:
        raise LedgerError(ErrorMessages.INVALID_DATE_RANGE)
    start = dt.datetime.combine(start_day, dt.time.min, tzinfo=dt.timezone.utc)
    end = dt.datetime.combine(end_day, _END_OF_DAY, tzinfo=dt.timezone.utc)
    return start, end


def _in_period(
    when: dt.datetime,
    period: str,
    now: dt.datetime,
    window: tuple[dt.datetime, dt.datetime] | None,
) -> bool:
    if period == "all":
        return True
    if period == "today":
        return when.date() == now.date()
    if period == "yesterday":
        return when.date() == now.date() - dt.timedelta(days=1)
    if period == "week":
        return when >= now - dt.timedelta(days=7)
    if period == "month":
        return when.year == now.year and when.month == now.month
    if period == "year":
        return when.year == now.year
    if period == "custom" and window is not None:
        return window[0] <= when <= window[1]
    raise LedgerError(f"Unknown period: {period}")


def filter_sessions(
    sessions: Iterable[PokerSession],
    period: str = "all",
    custom_range: tuple[dt.date, dt.date] | None = None,
    now: dt.datetime | None = None,
) -> list[PokerSession]:
    """Sessions inside the period, newest first."""
    if period not in PERIODS:
        raise LedgerError(f"Unknown period: {period}")
    now = as_utc(now) if now else dt.datetime.now(dt.timezone.utc)
    window = custom_window(custom_range) if period == "custom" else None

    kept = [s for s in sessions if _in_period(as_utc(s.date), period, now, window)]
    return sorted(kept, key=lambda s: as_utc(s.date), reverse=True)


def aggregate_player_stats(
    sessions: Iterable[PokerSession],
    avatars: Mapping[str, str] | None = None,
) -> list[PlayerStat]:
    """
    Fold sessions into one PlayerStat per trimmed player name.

    Entries with a blank name are skipped. A name listed twice in one session is
    counted twice. Result is sorted by total profit, highest first; ties keep
    encounter order.
    """
    stats: dict[str, PlayerStat] = {}

    for session in sessions:
        played_at = as_utc(session.date)
        for entry in session.players:
            name = entry.name.strip()
            if not name:
                continue

            current = stats.get(name)
            if current is None:
                current = PlayerStat(name=name, last_played=played_at)
                stats[name] = current

            current.total_profit += entry.cash_out - entry.buy_in
            current.total_buy_in += entry.buy_in
            current.total_cash_out += entry.cash_out
            current.sessions_played += 1
            if played_at > current.last_played:
                current.last_played = played_at

    if avatars:
        for name, stat in stats.items():
            stat.avatar = avatars.get(name)

    return sorted(stats.values(), key=lambda s: s.total_profit, reverse=True)


def compute_player_stats(
    sessions: Iterable[PokerSession],
    period: str = "all",
    custom_range: tuple[dt.date, dt.date] | None = None,
    avatars: Mapping[str, str] | None = None,
    now: dt.datetime | None = None,
) -> list[PlayerStat]:
    filtered = filter_sessions(sessions, period, custom_range, now=now)
    return aggregate_player_stats(filtered, avatars)


def find_player(stats: Sequence[PlayerStat], name: str) -> PlayerStat | None:
    wanted = name.strip()
    return next((s for s in stats if s.name == wanted), None)


@dataclass
class SessionOverview:
    total_pot: float
    total_cash_out: float
    discrepancy: float
    player_count: int
    top_winner: str | None
    top_profit: float


def session_overview(session: PokerSession) -> SessionOverview:
    total_pot = sum(p.buy_in for p in session.players)
    total_cash_out = sum(p.cash_out for p in session.players)
    winner = max(session.players, key=lambda p: p.profit, default=None)
    return SessionOverview(
        total_pot=total_pot,
        total_cash_out=total_cash_out,
        discrepancy=total_cash_out - total_pot,
        player_count=len(session.players),
        top_winner=winner.name if winner else None,
        top_profit=winner.profit if winner else 0.0,
    )


@dataclass
class LedgerSummary:
    total_sessions: int
    total_volume: float
    total_minutes: int
    player_count: int
    total_discrepancy: float


def summarize(sessions: Sequence[PokerSession]) -> LedgerSummary:
    names = {p.name.strip() for s in sessions for p in s.players if p.name.strip()}
    buy_ins = sum(p.buy_in for s in sessions for p in s.players)
    cash_outs = sum(p.cash_out for s in sessions for p in s.players)
    return LedgerSummary(
        total_sessions=len(sessions),
        total_volume=buy_ins,
        total_minutes=sum(s.duration_minutes for s in sessions),
        player_count=len(names),
        total_discrepancy=cash_outs - buy_ins,
    )


def leaderboard_chart(stats: Sequence[PlayerStat], limit: int = 5) -> list[dict]:
    return [{"name": s.name, "profit": s.total_profit} for s in stats[:limit]]


def cumulative_volume(sessions: Iterable[PokerSession]) -> list[dict]:
    """Per-session buy-in volume with a running total, oldest first."""
    rows = []
    running = 0.0
    for session in sorted(sessions, key=lambda s: as_utc(s.date)):
        volume = sum(p.buy_in for p in session.players)
        running += volume
        rows.append({"date": as_utc(session.date), "volume": volume, "cumulative": running})
    return rows


def win_loss_distribution(stats: Iterable[PlayerStat]) -> dict[str, int]:
    dist = {"winners": 0, "losers": 0, "break_even": 0}
    for s in stats:
        if s.total_profit > 0:
            dist["winners"] += 1
        elif s.total_profit < 0:
            dist["losers"] += 1
        else:
            dist["break_even"] += 1
    return dist


def player_history(sessions: Iterable[PokerSession], name: str) -> list[dict]:
    """Session-by-session profit for one player with the running total, oldest first."""
    wanted = name.strip()
    rows = []
    running = 0.0
    for session in sorted(sessions, key=lambda s: as_utc(s.date)):
        entries = [p for p in session.players if p.name.strip() == wanted]
        if not entries:
            continue
        profit = sum(p.profit for p in entries)
        running += profit
        rows.append(
            {
                "session_id": session.id,
                "date": as_utc(session.date),
                "location": session.location,
                "profit": profit,
                "cumulative": running,
            }
        )
    return rows


def unique_player_names(sessions: Iterable[PokerSession]) -> list[str]:
    return sorted({p.name.strip() for s in sessions for p in s.players if p.name.strip()})
