"""Trader and book level projections over active trades.

Every function reads store.active_trades() once and aggregates in memory.
Notional totals sum both legs of each trade.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import final

from tradebook.core.errors import PersistenceError
from tradebook.core.result import Err, Ok
from tradebook.infra.protocols import TradeStore
from tradebook.logging_config import get_logger
from tradebook.trade.types import Trade

log = get_logger("reporting.summary")


@final
@dataclass(frozen=True, slots=True)
class DailySummary:
    """A trader's booking activity today against the previous day."""

    trader: str
    day: date
    trade_count_today: int
    notional_today: Decimal
    trade_count_previous: int
    notional_previous: Decimal


def _same(a: str | None, b: str) -> bool:
    return a is not None and a.casefold() == b.casefold()


def _notional(trades: tuple[Trade, ...] | list[Trade]) -> Decimal:
    return sum((leg.notional for t in trades for leg in t.legs), Decimal("0"))


def trades_by_trader(
    store: TradeStore, login: str,
) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]:
    log.info("retrieving trades for trader", extra={"trader": login})
    return store.active_trades().map(
        lambda trades: tuple(t for t in trades if _same(t.trader_user_name, login))
    )


def trades_by_book(
    store: TradeStore, book_name: str,
) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]:
    log.info("retrieving trades for book", extra={"book": book_name})
    return store.active_trades().map(
        lambda trades: tuple(t for t in trades if _same(t.book_name, book_name))
    )


def count_by_status(store: TradeStore, login: str) -> Ok[dict[str, int]] | Err[PersistenceError]:
    return trades_by_trader(store, login).map(
        lambda trades: dict(Counter(t.status.value for t in trades))
    )


def notional_by_currency(
    store: TradeStore, login: str,
) -> Ok[dict[str, Decimal]] | Err[PersistenceError]:
    def total(trades: tuple[Trade, ...]) -> dict[str, Decimal]:
        sums: defaultdict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for trade in trades:
            for leg in trade.legs:
                sums[leg.currency] += leg.notional
        return dict(sums)

    return trades_by_trader(store, login).map(total)


def count_by_counterparty(
    store: TradeStore, login: str,
) -> Ok[dict[str, int]] | Err[PersistenceError]:
    return trades_by_trader(store, login).map(
        lambda trades: dict(Counter(
            t.counterparty_name for t in trades if t.counterparty_name is not None
        ))
    )


def trade_count_for_date(
    store: TradeStore, login: str, day: date,
) -> Ok[int] | Err[PersistenceError]:
    return trades_by_trader(store, login).map(
        lambda trades: sum(1 for t in trades if t.trade_date == day)
    )


def notional_for_date(
    store: TradeStore, login: str, day: date,
) -> Ok[Decimal] | Err[PersistenceError]:
    return trades_by_trader(store, login).map(
        lambda trades: _notional([t for t in trades if t.trade_date == day])
    )


def daily_summary(
    store: TradeStore, login: str, today: date,
) -> Ok[DailySummary] | Err[PersistenceError]:
    previous = today - timedelta(days=1)

    def build(trades: tuple[Trade, ...]) -> DailySummary:
        booked_today = [t for t in trades if t.trade_date == today]
        booked_previous = [t for t in trades if t.trade_date == previous]
        return DailySummary(
            trader=login,
            day=today,
            trade_count_today=len(booked_today),
            notional_today=_notional(booked_today),
            trade_count_previous=len(booked_previous),
            notional_previous=_notional(booked_previous),
        )

    return trades_by_trader(store, login).map(build)
