"""
Quick-add parser: turns loosely typed lines such as

    Dat buy 2000 +5000
    Tung buy 10k tra 15k
    Quan mua 4000 tra 1000

into player entries. Each line needs a name followed by exactly two amounts,
buy-in then cash-out. Anything between the amounts (+, -, "trả", "return", ...)
is noise; the second amount is always the absolute cash-out.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
import re
import uuid
from dataclasses import dataclass
from typing import Iterable, Literal

from ..core.config import settings
from ..core.exceptions import EmptyQuickEntryError
from ..models.entities import PlayerEntry, PokerSession

logger = logging.getLogger(__name__)

QuickDay = Literal["today", "yesterday"]

_AMOUNT = r"\d+(?:[.,]\d+)?[kKmM]?"

# name: everything before the first digit; then buy-in, separator, cash-out.
# The separator may not split a decimal ("2.000" is one amount, not two).
_LINE_RE = re.compile(
    rf"^(?P<head>\D+)(?P<buy_in>{_AMOUNT})(?P<sep>(?![.,]\d)\D+)(?P<cash_out>{_AMOUNT})"
)

# keywords and punctuation that end up glued to the end of the name
_NAME_NOISE_RE = re.compile(
    r"(?:(?<!\S)(?:buy[\s-]?in|buy|mua|b)\b|[\s:=+\-,.;|/])+$",
    re.IGNORECASE,
)

_LEADING_FLOAT_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?")


def normalize_amount(token: str) -> float:
    """
    Expand shorthand amounts: "2k" -> 2000, "1.5m" -> 1500000, "3,5k" -> 3500.

    A comma is a decimal point. Returns NaN when no number can be read.
    """
    value = token.lower().replace(",", ".")
    multiplier = 1
    if "k" in value:
        multiplier = 1_000
        value = value.replace("k", "", 1)
    if "m" in value:
        multiplier = 1_000_000
        value = value.replace("m", "", 1)

    match = _LEADING_FLOAT_RE.match(value)
    if not match:
        return math.nan
    return float(match.group(0)) * multiplier


def clean_name(raw: str) -> str:
    return _NAME_NOISE_RE.sub("", raw.strip()).strip()


def parse_line(line: str) -> PlayerEntry | None:
    if not line.strip():
        return None

    match = _LINE_RE.match(line.strip())
    if not match:
        return None

    name = clean_name(match.group("head"))
    buy_in = normalize_amount(match.group("buy_in"))
    cash_out = normalize_amount(match.group("cash_out"))

    if not name or math.isnan(buy_in) or math.isnan(cash_out):
        return None
    return PlayerEntry(name=name, buy_in=buy_in, cash_out=cash_out)


def parse_quick_entries(text: str) -> list[PlayerEntry]:
    """Parse one entry per line; lines that don't fit are dropped silently."""
    entries = []
    for line in text.splitlines():
        entry = parse_line(line)
        if entry is not None:
            entries.append(entry)
    return entries


@dataclass
class QuickTotals:
    sum_buy_in: float
    sum_cash_out: float
    discrepancy: float


def control_totals(entries: Iterable[PlayerEntry]) -> QuickTotals:
    entries = list(entries)
    sum_buy_in = sum(e.buy_in for e in entries)
    sum_cash_out = sum(e.cash_out for e in entries)
    return QuickTotals(
        sum_buy_in=sum_buy_in,
        sum_cash_out=sum_cash_out,
        discrepancy=sum_cash_out - sum_buy_in,
    )


def quick_session_date(day: QuickDay = "today", now: dt.datetime | None = None) -> dt.datetime:
    now = now or dt.datetime.now(dt.timezone.utc)
    session_day = now.date()
    if day == "yesterday":
        session_day -= dt.timedelta(days=1)
    # 23:00 keeps same-day manual sessions sorted before it
    return dt.datetime.combine(session_day, dt.time(23, 0), tzinfo=dt.timezone.utc)


def build_quick_session(
    text: str,
    location: str | None = None,
    day: QuickDay = "today",
    now: dt.datetime | None = None,
) -> PokerSession:
    entries = parse_quick_entries(text)
    if not entries:
        raise EmptyQuickEntryError()

    totals = control_totals(entries)
    if totals.discrepancy:
        logger.info(f"Quick session has discrepancy {totals.discrepancy:g} across {len(entries)} entries")

    return PokerSession(
        id=str(uuid.uuid4()),
        date=quick_session_date(day, now),
        location=(location or "").strip() or settings.DEFAULT_LOCATION,
        duration_minutes=settings.QUICK_SESSION_DURATION_MINUTES,
        notes=text,
        players=entries,
    )
