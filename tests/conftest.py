"""Hypothesis profiles and pytest fixtures for tradebook.

The fixtures wire a complete in-memory world: reference data with one user
per role, active and inactive books/counterparties, and a lifecycle manager
whose clock is pinned to TODAY.
"""

from __future__ import annotations

from datetime import date

import pytest
from hypothesis import HealthCheck, settings

from tradebook.core.types import fixed_clock
from tradebook.infra.config import LifecycleConfig
from tradebook.infra.memory_adapter import (
    InMemoryAdditionalInfoStore,
    InMemoryReferenceData,
    InMemoryTradeStore,
)
from tradebook.lifecycle.manager import TradeLifecycleManager
from tradebook.lifecycle.settlement import SettlementInstructionService
from tradebook.trade.types import ApplicationUser, Book, Counterparty
from tradebook.validation.privileges import UserPrivilegeValidator
from tradebook.validation.trades import TradeValidator

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.load_profile("dev")


TODAY = date(2025, 1, 17)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


@pytest.fixture
def reference_data() -> InMemoryReferenceData:
    ref = InMemoryReferenceData()
    for user in (
        ApplicationUser(login_id="alice", role="TRADER_SALES", first_name="Alice"),
        ApplicationUser(login_id="bob", role="TRADER_SALES", first_name="Bob"),
        ApplicationUser(login_id="mo", role="MO"),
        ApplicationUser(login_id="support", role="SUPPORT"),
        ApplicationUser(login_id="admin", role="SUPERUSER"),
        ApplicationUser(login_id="norole", role=None),
        ApplicationUser(login_id="auditor", role="AUDITOR"),
        ApplicationUser(login_id="gone", role="TRADER_SALES", active=False),
    ):
        ref.add_user(user)
    ref.add_book(Book(name="FX-BOOK-1"))
    ref.add_book(Book(name="RATES-BOOK"))
    ref.add_book(Book(name="CLOSED-BOOK", active=False))
    ref.add_counterparty(Counterparty(name="BigBank"))
    ref.add_counterparty(Counterparty(name="MegaFund"))
    ref.add_counterparty(Counterparty(name="OldBank", active=False))
    return ref


@pytest.fixture
def trade_store() -> InMemoryTradeStore:
    return InMemoryTradeStore(first_trade_id=10000)


@pytest.fixture
def info_store() -> InMemoryAdditionalInfoStore:
    return InMemoryAdditionalInfoStore()


@pytest.fixture
def privilege_validator(reference_data: InMemoryReferenceData) -> UserPrivilegeValidator:
    return UserPrivilegeValidator(reference_data)


@pytest.fixture
def trade_validator(reference_data: InMemoryReferenceData) -> TradeValidator:
    return TradeValidator(reference_data, LifecycleConfig(), fixed_clock(TODAY))


@pytest.fixture
def manager(
    trade_store: InMemoryTradeStore,
    reference_data: InMemoryReferenceData,
    trade_validator: TradeValidator,
    privilege_validator: UserPrivilegeValidator,
) -> TradeLifecycleManager:
    return TradeLifecycleManager(
        store=trade_store,
        reference_data=reference_data,
        trade_validator=trade_validator,
        privilege_validator=privilege_validator,
        config=LifecycleConfig(),
        clock=fixed_clock(TODAY),
    )


@pytest.fixture
def settlement_service(
    trade_store: InMemoryTradeStore,
    info_store: InMemoryAdditionalInfoStore,
    privilege_validator: UserPrivilegeValidator,
) -> SettlementInstructionService:
    return SettlementInstructionService(trade_store, info_store, privilege_validator)
