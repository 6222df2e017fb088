from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.deps import get_rank_ladder, get_store
from ..core.exceptions import ErrorMessages, LedgerError, http_error
from ..core.store import SessionStore
from ..models.schemas import (
    LeaderboardRowOut,
    Period,
    PlayerDetailOut,
    PlayerHistoryPointOut,
    PlayerStatOut,
    RankOut,
    SummaryOut,
    VolumePointOut,
    WinLossOut,
)
from ..services.session_service import SessionService
from ..services.stats_service import (
    RankLadder,
    aggregate_player_stats,
    cumulative_volume,
    filter_sessions,
    find_player,
    leaderboard_chart,
    player_history,
    summarize,
    win_loss_distribution,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stats", tags=["stats"])


def _window(store: SessionStore, period: str, start: dt.date | None, end: dt.date | None):
    custom_range = (start, end) if (start is not None or end is not None) else None
    try:
        return filter_sessions(SessionService.load_or_empty(store), period, custom_range)
    except LedgerError as e:
        raise http_error(e)


def _avatars(store: SessionStore) -> dict[str, str]:
    try:
        return store.load_avatars()
    except LedgerError as e:
        logger.warning(f"Could not load avatars: {e}")
        return {}


@router.get("/players", response_model=list[PlayerStatOut])
def list_player_stats(
    period: Period = Query(default="all"),
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    store: SessionStore = Depends(get_store),
    ladder: RankLadder = Depends(get_rank_ladder),
):
    sessions = _window(store, period, start, end)
    stats = aggregate_player_stats(sessions, _avatars(store))
    return [PlayerStatOut.from_entity(s, ladder.rank_of(s.total_profit)) for s in stats]


@router.get("/players/{name}", response_model=PlayerDetailOut)
def player_detail(
    name: str,
    period: Period = Query(default="all"),
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    store: SessionStore = Depends(get_store),
    ladder: RankLadder = Depends(get_rank_ladder),
):
    sessions = _window(store, period, start, end)
    stat = find_player(aggregate_player_stats(sessions, _avatars(store)), name)
    if stat is None:
        raise HTTPException(status_code=404, detail=ErrorMessages.PLAYER_NOT_FOUND)

    return PlayerDetailOut(
        stat=PlayerStatOut.from_entity(stat, ladder.rank_of(stat.total_profit)),
        history=[PlayerHistoryPointOut(**row) for row in player_history(sessions, name)],
    )


@router.get("/ranks", response_model=list[RankOut])
def list_ranks(ladder: RankLadder = Depends(get_rank_ladder)):
    return [RankOut.from_entity(r) for r in ladder]


@router.get("/rank", response_model=RankOut)
def rank_for_profit(
    profit: float = Query(...),
    ladder: RankLadder = Depends(get_rank_ladder),
):
    return RankOut.from_entity(ladder.rank_of(profit))


@router.get("/summary", response_model=SummaryOut)
def summary(
    period: Period = Query(default="all"),
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    top: int = Query(default=5, ge=1, le=50),
    store: SessionStore = Depends(get_store),
):
    sessions = _window(store, period, start, end)
    stats = aggregate_player_stats(sessions)
    totals = summarize(sessions)

    return SummaryOut(
        period=period,
        total_sessions=totals.total_sessions,
        total_volume=totals.total_volume,
        total_minutes=totals.total_minutes,
        player_count=totals.player_count,
        total_discrepancy=totals.total_discrepancy,
        leaderboard=[LeaderboardRowOut(**row) for row in leaderboard_chart(stats, top)],
        volume=[VolumePointOut(**row) for row in cumulative_volume(sessions)],
        win_loss=WinLossOut(**win_loss_distribution(stats)),
    )
