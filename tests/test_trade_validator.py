"""Tests for tradebook.validation.trades -- business-rule validation."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from tradebook.core.types import fixed_clock
from tradebook.infra.config import LifecycleConfig
from tradebook.infra.memory_adapter import InMemoryReferenceData
from tradebook.trade.types import TradeInput, TradeLegInput
from tradebook.validation.trades import (
    MSG_BOOK_INACTIVE,
    MSG_COUNTERPARTY_INACTIVE,
    MSG_LEG_COUNT,
    MSG_MATURITY_BEFORE_START,
    MSG_MATURITY_BEFORE_TRADE,
    MSG_START_BEFORE_TRADE,
    TradeValidator,
)

_TODAY = date(2025, 1, 17)
_TOO_OLD = "Trade date cannot be more than 30 days in the past"


def _legs() -> tuple[TradeLegInput, TradeLegInput]:
    return (
        TradeLegInput(
            notional=Decimal("10000000"), rate=Decimal("3.5"), leg_type="Fixed",
            pay_receive="Pay", currency="USD", schedule="3M",
        ),
        TradeLegInput(
            notional=Decimal("10000000"), leg_type="Floating", pay_receive="Receive",
            index_name="SOFR", currency="USD", schedule="3M",
        ),
    )


def _input(**overrides: Any) -> TradeInput:
    base = TradeInput(
        trade_date=_TODAY,
        start_date=_TODAY,
        maturity_date=date(2026, 1, 17),
        legs=_legs(),
        counterparty_name="BigBank",
        book_name="FX-BOOK-1",
        trader_user_name="alice",
    )
    return replace(base, **overrides)


class TestValidTrade:
    def test_clean_trade_passes(self, trade_validator: TradeValidator) -> None:
        assert trade_validator.validate_trade_business_rules(_input()).is_valid()


class TestDates:
    def test_start_before_trade_date(self, trade_validator: TradeValidator) -> None:
        result = trade_validator.validate_trade_business_rules(
            _input(start_date=_TODAY - timedelta(days=1)),
        )
        assert result.messages_for("tradeStartDate") == (MSG_START_BEFORE_TRADE,)
        assert result.error_count() == 1

    def test_maturity_before_start_and_trade(self, trade_validator: TradeValidator) -> None:
        result = trade_validator.validate_trade_business_rules(
            _input(start_date=date(2025, 3, 1), maturity_date=date(2025, 1, 10)),
        )
        assert result.messages_for("tradeMaturityDate") == (
            MSG_MATURITY_BEFORE_START, MSG_MATURITY_BEFORE_TRADE,
        )

    def test_exactly_thirty_days_ago_allowed(self, trade_validator: TradeValidator) -> None:
        old = _TODAY - timedelta(days=30)
        result = trade_validator.validate_trade_business_rules(
            _input(trade_date=old, start_date=old),
        )
        assert result.messages_for("tradeDate") == ()

    def test_thirty_one_days_ago_rejected(self, trade_validator: TradeValidator) -> None:
        old = _TODAY - timedelta(days=31)
        result = trade_validator.validate_trade_business_rules(
            _input(trade_date=old, start_date=old),
        )
        assert result.messages_for("tradeDate") == (_TOO_OLD,)

    def test_dates_skipped_when_any_missing(self, trade_validator: TradeValidator) -> None:
        result = trade_validator.validate_trade_business_rules(
            _input(start_date=None, maturity_date=date(2000, 1, 1)),
        )
        assert result.is_valid()

    def test_window_comes_from_config(self, reference_data: InMemoryReferenceData) -> None:
        validator = TradeValidator(
            reference_data, LifecycleConfig(max_trade_date_age_days=5), fixed_clock(_TODAY),
        )
        old = _TODAY - timedelta(days=6)
        result = validator.validate_trade_business_rules(_input(trade_date=old, start_date=old))
        assert result.messages_for("tradeDate") == (
            "Trade date cannot be more than 5 days in the past",
        )

    @given(st.integers(min_value=0, max_value=400))
    def test_age_boundary(self, age: int) -> None:
        validator = TradeValidator(InMemoryReferenceData(), clock=fixed_clock(_TODAY))
        trade_date = _TODAY - timedelta(days=age)
        result = validator.validate_trade_business_rules(
            _input(trade_date=trade_date, start_date=trade_date,
                   book_name=None, counterparty_name=None),
        )
        assert (result.messages_for("tradeDate") == (_TOO_OLD,)) == (age > 30)


class TestLegs:
    def test_missing_legs(self, trade_validator: TradeValidator) -> None:
        result = trade_validator.validate_trade_business_rules(_input(legs=None))
        assert result.messages_for("tradeLegs") == (MSG_LEG_COUNT,)

    def test_three_legs_skip_pair_checks(self, trade_validator: TradeValidator) -> None:
        bad = TradeLegInput(leg_type="Fixed", pay_receive="Pay", rate=Decimal("0"))
        result = trade_validator.validate_trade_business_rules(_input(legs=(bad, bad, bad)))
        assert result.messages_for("tradeLegs") == (MSG_LEG_COUNT,)

    def test_leg_errors_merged(self, trade_validator: TradeValidator) -> None:
        fixed, floating = _legs()
        result = trade_validator.validate_trade_business_rules(
            _input(legs=(fixed, replace(floating, pay_receive="Pay"))),
        )
        assert result.messages_for("tradeLegs") == (
            "Legs must have opposite pay/receive flags",
        )


class TestReferenceData:
    def test_inactive_book(self, trade_validator: TradeValidator) -> None:
        result = trade_validator.validate_trade_business_rules(_input(book_name="CLOSED-BOOK"))
        assert result.errors == {"book": (MSG_BOOK_INACTIVE,)}

    def test_inactive_counterparty(self, trade_validator: TradeValidator) -> None:
        result = trade_validator.validate_trade_business_rules(
            _input(counterparty_name="OldBank"),
        )
        assert result.errors == {"counterparty": (MSG_COUNTERPARTY_INACTIVE,)}

    def test_unknown_names_are_not_errors_here(self, trade_validator: TradeValidator) -> None:
        result = trade_validator.validate_trade_business_rules(
            _input(book_name="NOPE", counterparty_name="NOBODY"),
        )
        assert result.is_valid()

    def test_everything_reported_at_once(self, trade_validator: TradeValidator) -> None:
        old = _TODAY - timedelta(days=60)
        result = trade_validator.validate_trade_business_rules(_input(
            trade_date=old, start_date=old - timedelta(days=1), legs=None,
            book_name="CLOSED-BOOK", counterparty_name="OldBank",
        ))
        assert set(result.errors) == {
            "tradeStartDate", "tradeDate", "tradeLegs", "book", "counterparty",
        }
