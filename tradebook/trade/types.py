"""Trade domain types: versioned trades, legs, cashflows and reference data.

Persisted records are @final @dataclass(frozen=True, slots=True): a stored
version is never mutated, the store replaces it. Submission payloads
(TradeInput, TradeLegInput) allow None everywhere so the validators can
report on incomplete submissions instead of failing at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Protocol, final

from tradebook.core.types import UtcDatetime

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------


class TradeStatus(Enum):
    NEW = "NEW"
    LIVE = "LIVE"
    AMENDED = "AMENDED"
    TERMINATED = "TERMINATED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (TradeStatus.CANCELLED, TradeStatus.TERMINATED)


class LegType(Enum):
    FIXED = "Fixed"
    FLOATING = "Floating"

    @staticmethod
    def parse(raw: str | None) -> LegType | None:
        """Case-insensitive lookup; None for missing or unknown values."""
        if raw is None:
            return None
        for member in LegType:
            if member.value.lower() == raw.strip().lower():
                return member
        return None


class OperationType(Enum):
    """Actions a caller can attempt on a trade."""

    CREATE = "CREATE"
    AMEND = "AMEND"
    VIEW = "VIEW"
    DELETE = "DELETE"  # cancel and terminate

    @staticmethod
    def parse(raw: OperationType | str | None) -> OperationType | None:
        if raw is None or isinstance(raw, OperationType):
            return raw
        try:
            return OperationType(raw.strip().upper())
        except ValueError:
            return None


class UserRole(Enum):
    SUPERUSER = "SUPERUSER"
    TRADER_SALES = "TRADER_SALES"
    MO = "MO"
    SUPPORT = "SUPPORT"


class EntityType(Enum):
    TRADE = "trade"
    BOOK = "book"
    COUNTERPARTY = "counterparty"


class FieldType(Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class TradeContext(Protocol):
    """Anything that names the trade's designated trader."""

    @property
    def trader_user_name(self) -> str | None: ...


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class Book:
    name: str
    active: bool = True


@final
@dataclass(frozen=True, slots=True)
class Counterparty:
    name: str
    active: bool = True


@final
@dataclass(frozen=True, slots=True)
class ApplicationUser:
    """A login with its profile role. role=None means no profile assigned."""

    login_id: str
    role: str | None
    active: bool = True
    first_name: str = ""
    last_name: str = ""


# ---------------------------------------------------------------------------
# Submission payloads
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeLegInput:
    notional: Decimal | None = None
    rate: Decimal | None = None
    leg_type: str | None = None
    pay_receive: str | None = None
    index_name: str | None = None
    currency: str | None = None
    schedule: str | None = None


@final
@dataclass(frozen=True, slots=True)
class TradeInput:
    """A proposed trade (create) or the proposed new terms (amend)."""

    trade_date: date | None = None
    start_date: date | None = None
    maturity_date: date | None = None
    legs: tuple[TradeLegInput, ...] | None = None
    counterparty_name: str | None = None
    book_name: str | None = None
    trader_user_name: str | None = None
    inputter_user_name: str | None = None
    trade_id: int | None = None


# ---------------------------------------------------------------------------
# Persisted records
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeLeg:
    """One side of a swap. Belongs to exactly one trade version row."""

    leg_id: int
    trade_row_id: int
    notional: Decimal
    rate: Decimal | None
    leg_type: LegType
    pay_receive: str
    index_name: str | None
    currency: str
    schedule: str

    def __post_init__(self) -> None:
        if self.notional < 0:
            raise TypeError(f"TradeLeg.notional must be >= 0, got {self.notional}")


@final
@dataclass(frozen=True, slots=True)
class Trade:
    """One version row of a trade. trade_id is the business key."""

    id: int
    trade_id: int
    version: int
    active: bool
    status: TradeStatus
    trade_date: date
    start_date: date
    maturity_date: date
    trader_user_name: str | None
    inputter_user_name: str | None
    counterparty_name: str | None
    book_name: str | None
    legs: tuple[TradeLeg, ...]
    created_at: UtcDatetime

    def __post_init__(self) -> None:
        if self.version < 1:
            raise TypeError(f"Trade.version must be >= 1, got {self.version}")
        if len(self.legs) != 2:
            raise TypeError(f"Trade requires exactly 2 legs, got {len(self.legs)}")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@final
@dataclass(frozen=True, slots=True)
class Cashflow:
    """A scheduled payment derived from a leg. Never edited directly.

    Identity is (leg_id, period_start).
    """

    leg_id: int
    period_start: date
    period_end: date
    value: Decimal
    currency: str
    pending_fixing: bool = False

    @property
    def payment_date(self) -> date:
        return self.period_end


@final
@dataclass(frozen=True, slots=True)
class AdditionalInfo:
    """Key/value extension record attached to an entity by type and id."""

    info_id: int
    entity_type: EntityType
    entity_id: int
    field_name: str
    field_value: str
    field_type: FieldType
    active: bool
    version: int
    created_at: UtcDatetime
