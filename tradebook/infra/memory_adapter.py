"""In-memory implementations of the persistence protocols.

Default wiring for tests and local runs. The trade store keeps an arena of
version rows keyed by row id plus a business key -> active row pointer;
conditional writes swap the pointer under a lock.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, date, datetime
from time import perf_counter
from typing import final

from tradebook.core.errors import ConcurrentModificationError, PersistenceError
from tradebook.core.result import Err, Ok
from tradebook.core.types import UtcDatetime
from tradebook.infra.health import HealthStatus
from tradebook.trade.types import (
    AdditionalInfo,
    ApplicationUser,
    Book,
    Cashflow,
    Counterparty,
    EntityType,
    Trade,
    TradeStatus,
)


def _persistence_error(operation: str, detail: str) -> PersistenceError:
    return PersistenceError(
        message=detail,
        code="PERSISTENCE_ERROR",
        timestamp=UtcDatetime.now(),
        source=f"memory_adapter.{operation}",
        operation=operation,
    )


def _version_conflict(
    operation: str, trade_id: int, expected: int, actual: int | None,
) -> ConcurrentModificationError:
    return ConcurrentModificationError(
        message=(
            f"Trade {trade_id} active version is {actual}, expected {expected}"
        ),
        code="CONCURRENT_MODIFICATION",
        timestamp=UtcDatetime.now(),
        source=f"memory_adapter.{operation}",
        trade_id=trade_id,
        expected_version=expected,
        actual_version=actual,
    )


@final
class InMemoryReferenceData:
    """Books, counterparties and users held in dicts."""

    def __init__(self) -> None:
        self._books: dict[str, Book] = {}
        self._counterparties: dict[str, Counterparty] = {}
        self._users: dict[str, ApplicationUser] = {}
        self._user_lookups = 0

    def add_book(self, book: Book) -> None:
        self._books[book.name] = book

    def add_counterparty(self, counterparty: Counterparty) -> None:
        self._counterparties[counterparty.name] = counterparty

    def add_user(self, user: ApplicationUser) -> None:
        self._users[user.login_id] = user

    def find_book(self, name: str) -> Ok[Book | None] | Err[PersistenceError]:
        return Ok(self._books.get(name))

    def find_counterparty(
        self, name: str,
    ) -> Ok[Counterparty | None] | Err[PersistenceError]:
        return Ok(self._counterparties.get(name))

    def find_user(
        self, login_id: str,
    ) -> Ok[ApplicationUser | None] | Err[PersistenceError]:
        self._user_lookups += 1
        return Ok(self._users.get(login_id))

    @property
    def user_lookups(self) -> int:
        """Test-only helper."""
        return self._user_lookups


@final
class InMemoryTradeStore:
    """Versioned trade rows, legs (embedded in rows) and cashflows."""

    def __init__(self, first_trade_id: int = 10000) -> None:
        self._lock = threading.RLock()
        self._first_trade_id = first_trade_id
        self._rows: dict[int, Trade] = {}
        self._active: dict[int, int] = {}
        self._cashflows: dict[int, dict[date, Cashflow]] = {}
        self._row_seq = 0
        self._leg_seq = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """All writes inside the block commit together or are rolled back."""
        with self._lock:
            rows = dict(self._rows)
            active = dict(self._active)
            cashflows = {k: dict(v) for k, v in self._cashflows.items()}
            try:
                yield
            except BaseException:
                self._rows = rows
                self._active = active
                self._cashflows = cashflows
                raise

    def next_trade_id(self) -> Ok[int] | Err[PersistenceError]:
        with self._lock:
            used = [t.trade_id for t in self._rows.values()]
            return Ok(max([self._first_trade_id - 1, *used]) + 1)

    def next_row_id(self) -> Ok[int] | Err[PersistenceError]:
        with self._lock:
            self._row_seq += 1
            return Ok(self._row_seq)

    def next_leg_id(self) -> Ok[int] | Err[PersistenceError]:
        with self._lock:
            self._leg_seq += 1
            return Ok(self._leg_seq)

    def find_active(self, trade_id: int) -> Ok[Trade | None] | Err[PersistenceError]:
        with self._lock:
            row_id = self._active.get(trade_id)
            return Ok(None if row_id is None else self._rows[row_id])

    def history(self, trade_id: int) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]:
        with self._lock:
            versions = [t for t in self._rows.values() if t.trade_id == trade_id]
        return Ok(tuple(sorted(versions, key=lambda t: t.version)))

    def active_trades(self) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]:
        with self._lock:
            trades = [self._rows[row_id] for row_id in self._active.values()]
        return Ok(tuple(sorted(trades, key=lambda t: t.trade_id)))

    def insert(self, trade: Trade) -> Ok[Trade] | Err[PersistenceError]:
        with self._lock:
            if trade.id in self._rows:
                return Err(_persistence_error(
                    "insert", f"Row id already used: {trade.id}",
                ))
            if trade.active and trade.trade_id in self._active:
                return Err(_persistence_error(
                    "insert", f"Trade {trade.trade_id} already has an active version",
                ))
            self._rows[trade.id] = trade
            if trade.active:
                self._active[trade.trade_id] = trade.id
            return Ok(trade)

    def deactivate(
        self, trade_id: int, expected_version: int,
    ) -> Ok[Trade] | Err[ConcurrentModificationError | PersistenceError]:
        """Conditional update: flips active off only on the expected version."""
        with self._lock:
            current = self._current("deactivate", trade_id, expected_version)
            if isinstance(current, Err):
                return current
            row = replace(current.value, active=False)
            self._rows[row.id] = row
            del self._active[trade_id]
            return Ok(row)

    def update_status(
        self, trade_id: int, expected_version: int, status: TradeStatus,
    ) -> Ok[Trade] | Err[ConcurrentModificationError | PersistenceError]:
        with self._lock:
            current = self._current("update_status", trade_id, expected_version)
            if isinstance(current, Err):
                return current
            row = replace(current.value, status=status)
            self._rows[row.id] = row
            return Ok(row)

    def save_cashflow(self, cashflow: Cashflow) -> Ok[None] | Err[PersistenceError]:
        """Idempotent per (leg_id, period_start)."""
        with self._lock:
            self._cashflows.setdefault(cashflow.leg_id, {})[cashflow.period_start] = cashflow
        return Ok(None)

    def cashflows_for_leg(
        self, leg_id: int,
    ) -> Ok[tuple[Cashflow, ...]] | Err[PersistenceError]:
        with self._lock:
            flows = self._cashflows.get(leg_id, {})
            return Ok(tuple(flows[k] for k in sorted(flows)))

    def delete_cashflows_for_leg(self, leg_id: int) -> Ok[int] | Err[PersistenceError]:
        with self._lock:
            return Ok(len(self._cashflows.pop(leg_id, {})))

    def health_check(self) -> Ok[HealthStatus] | Err[PersistenceError]:
        started = perf_counter()
        with self._lock:
            rows = len(self._rows)
        return Ok(HealthStatus(
            healthy=True,
            component="trade_store",
            message=f"{rows} trade rows",
            checked_at=datetime.now(tz=UTC),
            latency_ms=(perf_counter() - started) * 1000,
        ))

    def row_count(self) -> int:
        """Test-only helper."""
        with self._lock:
            return len(self._rows)

    def _current(
        self, operation: str, trade_id: int, expected_version: int,
    ) -> Ok[Trade] | Err[ConcurrentModificationError]:
        row_id = self._active.get(trade_id)
        if row_id is None:
            return Err(_version_conflict(operation, trade_id, expected_version, None))
        row = self._rows[row_id]
        if row.version != expected_version:
            return Err(_version_conflict(operation, trade_id, expected_version, row.version))
        return Ok(row)


@final
class InMemoryAdditionalInfoStore:
    """AdditionalInfo records keyed by info_id."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._infos: dict[int, AdditionalInfo] = {}
        self._seq = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            infos = dict(self._infos)
            try:
                yield
            except BaseException:
                self._infos = infos
                raise

    def next_info_id(self) -> Ok[int] | Err[PersistenceError]:
        with self._lock:
            self._seq += 1
            return Ok(self._seq)

    def find_active_info(
        self, entity_type: EntityType, entity_id: int, field_name: str,
    ) -> Ok[AdditionalInfo | None] | Err[PersistenceError]:
        for info in self._infos.values():
            if (
                info.active
                and info.entity_type is entity_type
                and info.entity_id == entity_id
                and info.field_name == field_name
            ):
                return Ok(info)
        return Ok(None)

    def active_infos(
        self, entity_type: EntityType, field_name: str,
    ) -> Ok[tuple[AdditionalInfo, ...]] | Err[PersistenceError]:
        return Ok(tuple(
            i for i in self._infos.values()
            if i.active and i.entity_type is entity_type and i.field_name == field_name
        ))

    def save_info(self, info: AdditionalInfo) -> Ok[None] | Err[PersistenceError]:
        with self._lock:
            self._infos[info.info_id] = info
        return Ok(None)

    def deactivate_info(self, info_id: int) -> Ok[None] | Err[PersistenceError]:
        with self._lock:
            info = self._infos.get(info_id)
            if info is None:
                return Err(_persistence_error(
                    "deactivate_info", f"AdditionalInfo not found: {info_id}",
                ))
            self._infos[info_id] = replace(info, active=False)
        return Ok(None)

    def health_check(self) -> Ok[HealthStatus] | Err[PersistenceError]:
        started = perf_counter()
        with self._lock:
            infos = len(self._infos)
        return Ok(HealthStatus(
            healthy=True,
            component="additional_info_store",
            message=f"{infos} additional info records",
            checked_at=datetime.now(tz=UTC),
            latency_ms=(perf_counter() - started) * 1000,
        ))

    def count(self) -> int:
        """Test-only helper."""
        return len(self._infos)
