"""Multi-criteria and query-string search over active trades.

Two ways in:

  TradeFilter       fixed criteria (equality on names/status, date range)
  parse_trade_query RSQL-style query string, e.g.
                    "bookName==FX-*;tradeDate=ge=2025-01-01,tradeStatus==LIVE"

Both feed a predicate over store.active_trades(); results come back whole
(search_trades) or as a TradePage (search_trades_page, query_trades).
"""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any, final

from tradebook.core.errors import PersistenceError, TradeValidationError
from tradebook.core.result import Err, Ok
from tradebook.core.validation import ValidationResult
from tradebook.infra.protocols import TradeStore
from tradebook.trade.types import Trade

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 10

type TradePredicate = Callable[[Trade], bool]


@final
@dataclass(frozen=True, slots=True)
class TradeFilter:
    """Unset criteria match everything.

    Text criteria compare case-insensitively. The trade-date range is
    inclusive and only applies when both bounds are set.
    """

    counterparty_name: str | None = None
    book_name: str | None = None
    trader: str | None = None
    status: str | None = None
    trade_date_start: date | None = None
    trade_date_end: date | None = None

    def matches(self, trade: Trade) -> bool:
        checks = (
            (self.counterparty_name, trade.counterparty_name),
            (self.book_name, trade.book_name),
            (self.trader, trade.trader_user_name),
            (self.status, trade.status.value),
        )
        for wanted, actual in checks:
            if wanted is None:
                continue
            if actual is None or wanted.casefold() != actual.casefold():
                return False
        if self.trade_date_start is not None and self.trade_date_end is not None:
            return self.trade_date_start <= trade.trade_date <= self.trade_date_end
        return True


@final
@dataclass(frozen=True, slots=True)
class TradePage:
    """One zero-based page of a sorted result set."""

    items: tuple[Trade, ...]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.size)


def search_trades(
    store: TradeStore, criteria: TradeFilter,
) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]:
    return store.active_trades().map(
        lambda trades: tuple(t for t in trades if criteria.matches(t))
    )


def search_trades_page(
    store: TradeStore,
    criteria: TradeFilter,
    page: int = DEFAULT_PAGE,
    size: int = DEFAULT_PAGE_SIZE,
) -> Ok[TradePage] | Err[PersistenceError | TradeValidationError]:
    return _paged(store, criteria.matches, page, size, "reporting.search.search_trades_page")


def query_trades(
    store: TradeStore,
    query: str | None,
    page: int = DEFAULT_PAGE,
    size: int = DEFAULT_PAGE_SIZE,
) -> Ok[TradePage] | Err[PersistenceError | TradeValidationError]:
    """Page of active trades matching an RSQL-style query. None or blank matches all."""
    match parse_trade_query(query):
        case Ok(predicate):
            return _paged(store, predicate, page, size, "reporting.search.query_trades")
        case Err(error):
            return Err(error)


def _paged(
    store: TradeStore, predicate: TradePredicate, page: int, size: int, source: str,
) -> Ok[TradePage] | Err[PersistenceError | TradeValidationError]:
    bounds = ValidationResult()
    if page < 0:
        bounds.add_error("page", "Page index must not be less than zero")
    if size < 1:
        bounds.add_error("size", "Page size must not be less than one")
    if not bounds.is_valid():
        return Err(bounds.to_error(source, message="Invalid page request"))

    def cut(trades: tuple[Trade, ...]) -> TradePage:
        hits = tuple(t for t in trades if predicate(t))
        first = page * size
        return TradePage(items=hits[first:first + size], page=page, size=size, total=len(hits))

    return store.active_trades().map(cut)


# ---------------------------------------------------------------------------
# Query strings
# ---------------------------------------------------------------------------

QUERY_FIELD = "query"

# ";" is AND and binds tighter than "," (OR). No grouping parentheses.
_COMPARISON = re.compile(r"^\s*(\w+)\s*(==|!=|=gt=|=ge=|=lt=|=le=)\s*(.*?)\s*$")

_TEXT_FIELDS: dict[str, Callable[[Trade], str | None]] = {
    "counterpartyName": lambda t: t.counterparty_name,
    "bookName": lambda t: t.book_name,
    "traderUserName": lambda t: t.trader_user_name,
    "inputterUserName": lambda t: t.inputter_user_name,
    "tradeStatus": lambda t: t.status.value,
}
_DATE_FIELDS: dict[str, Callable[[Trade], date]] = {
    "tradeDate": lambda t: t.trade_date,
    "tradeStartDate": lambda t: t.start_date,
    "tradeMaturityDate": lambda t: t.maturity_date,
}
_INT_FIELDS: dict[str, Callable[[Trade], int]] = {
    "tradeId": lambda t: t.trade_id,
    "version": lambda t: t.version,
}

_ORDERING: dict[str, Callable[[Any, Any], bool]] = {
    "=gt=": lambda a, b: a > b,
    "=ge=": lambda a, b: a >= b,
    "=lt=": lambda a, b: a < b,
    "=le=": lambda a, b: a <= b,
}


def _split(text: str, separator: str) -> list[str]:
    """Split on separator outside single or double quotes."""
    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    for char in text:
        if quote is not None:
            if char == quote:
                quote = None
            current.append(char)
        elif char in "'\"":
            quote = char
            current.append(char)
        elif char == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def _unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "'\"":
        return raw[1:-1]
    return raw


def _text_comparison(
    getter: Callable[[Trade], str | None], op: str, value: str,
) -> TradePredicate | str:
    if op not in ("==", "!="):
        return f"Operator {op} is not supported for text fields"
    pattern = value.casefold()

    def equal(trade: Trade) -> bool:
        actual = getter(trade)
        return actual is not None and fnmatch.fnmatchcase(actual.casefold(), pattern)

    if op == "==":
        return equal
    return lambda trade: not equal(trade)


def _ordered_comparison[V](
    getter: Callable[[Trade], V], op: str, wanted: V,
) -> TradePredicate:
    if op == "==":
        return lambda trade: getter(trade) == wanted
    if op == "!=":
        return lambda trade: getter(trade) != wanted
    compare = _ORDERING[op]
    return lambda trade: compare(getter(trade), wanted)


def _comparison(clause: str) -> TradePredicate | str:
    """Predicate for one "field op value" clause, or the reason it is invalid."""
    parsed = _COMPARISON.match(clause)
    if parsed is None:
        return f"Invalid comparison: {clause.strip()}"
    name, op, raw_value = parsed.groups()
    value = _unquote(raw_value)
    if name in _TEXT_FIELDS:
        return _text_comparison(_TEXT_FIELDS[name], op, value)
    if name in _DATE_FIELDS:
        try:
            day = date.fromisoformat(value)
        except ValueError:
            return f"Invalid date for {name}: {value}"
        return _ordered_comparison(_DATE_FIELDS[name], op, day)
    if name in _INT_FIELDS:
        if not value.isdecimal():
            return f"Invalid integer for {name}: {value}"
        return _ordered_comparison(_INT_FIELDS[name], op, int(value))
    return f"Unknown field: {name}"


def parse_trade_query(query: str | None) -> Ok[TradePredicate] | Err[TradeValidationError]:
    """Compile an RSQL-style query into a predicate, reporting every bad clause."""
    if query is None or not query.strip():
        return Ok(lambda trade: True)

    problems = ValidationResult()
    alternatives: list[list[TradePredicate]] = []
    for branch in _split(query, ","):
        conjunction: list[TradePredicate] = []
        for clause in _split(branch, ";"):
            compiled = _comparison(clause)
            if isinstance(compiled, str):
                problems.add_error(QUERY_FIELD, compiled)
            else:
                conjunction.append(compiled)
        alternatives.append(conjunction)

    if not problems.is_valid():
        return Err(problems.to_error(
            "reporting.search.parse_trade_query", message="Trade query could not be parsed",
        ))
    return Ok(lambda trade: any(all(p(trade) for p in clauses) for clauses in alternatives))
