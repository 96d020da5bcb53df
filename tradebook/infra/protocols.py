"""Persistence protocol definitions for the trade lifecycle.

Domain code depends on these abstractions; adapters implement them. All
calls return Ok[T] | Err[PersistenceError] (conditional writes may also
return Err[ConcurrentModificationError]). Infrastructure failures are
values, never invisible exceptions.

Invariants every TradeStore must hold:
  - at most one active row per trade_id (business key);
  - an inactive row is never written again;
  - deactivate() and update_status() only succeed when the active row's
    version equals expected_version (optimistic single-writer check);
  - writes made inside atomic() are all visible or none are.

AdditionalInfoStore gives the same all-or-nothing guarantee for atomic().
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from tradebook.core.errors import ConcurrentModificationError, PersistenceError
from tradebook.core.result import Err, Ok
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


@runtime_checkable
class ReferenceDataStore(Protocol):
    """Books, counterparties and users by natural key. Misses are Ok(None)."""

    def find_book(self, name: str) -> Ok[Book | None] | Err[PersistenceError]: ...

    def find_counterparty(
        self, name: str,
    ) -> Ok[Counterparty | None] | Err[PersistenceError]: ...

    def find_user(
        self, login_id: str,
    ) -> Ok[ApplicationUser | None] | Err[PersistenceError]: ...


@runtime_checkable
class TradeStore(Protocol):
    """Versioned trade rows, their legs, and generated cashflows."""

    def atomic(self) -> AbstractContextManager[None]: ...

    def next_trade_id(self) -> Ok[int] | Err[PersistenceError]: ...

    def next_row_id(self) -> Ok[int] | Err[PersistenceError]: ...

    def next_leg_id(self) -> Ok[int] | Err[PersistenceError]: ...

    def find_active(self, trade_id: int) -> Ok[Trade | None] | Err[PersistenceError]: ...

    def history(self, trade_id: int) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]: ...

    def active_trades(self) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]: ...

    def insert(self, trade: Trade) -> Ok[Trade] | Err[PersistenceError]: ...

    def deactivate(
        self, trade_id: int, expected_version: int,
    ) -> Ok[Trade] | Err[ConcurrentModificationError | PersistenceError]: ...

    def update_status(
        self, trade_id: int, expected_version: int, status: TradeStatus,
    ) -> Ok[Trade] | Err[ConcurrentModificationError | PersistenceError]: ...

    def save_cashflow(self, cashflow: Cashflow) -> Ok[None] | Err[PersistenceError]: ...

    def cashflows_for_leg(
        self, leg_id: int,
    ) -> Ok[tuple[Cashflow, ...]] | Err[PersistenceError]: ...

    def delete_cashflows_for_leg(self, leg_id: int) -> Ok[int] | Err[PersistenceError]: ...

    def health_check(self) -> Ok[HealthStatus] | Err[PersistenceError]: ...


@runtime_checkable
class AdditionalInfoStore(Protocol):
    """Versioned key/value extension records."""

    def atomic(self) -> AbstractContextManager[None]: ...

    def next_info_id(self) -> Ok[int] | Err[PersistenceError]: ...

    def find_active_info(
        self, entity_type: EntityType, entity_id: int, field_name: str,
    ) -> Ok[AdditionalInfo | None] | Err[PersistenceError]: ...

    def active_infos(
        self, entity_type: EntityType, field_name: str,
    ) -> Ok[tuple[AdditionalInfo, ...]] | Err[PersistenceError]: ...

    def save_info(self, info: AdditionalInfo) -> Ok[None] | Err[PersistenceError]: ...

    def deactivate_info(self, info_id: int) -> Ok[None] | Err[PersistenceError]: ...

    def health_check(self) -> Ok[HealthStatus] | Err[PersistenceError]: ...
