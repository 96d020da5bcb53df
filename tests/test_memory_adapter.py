"""Tests for tradebook.infra.memory_adapter."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from tradebook.core.errors import ConcurrentModificationError, PersistenceError
from tradebook.core.result import Err, unwrap
from tradebook.core.types import UtcDatetime
from tradebook.infra.memory_adapter import (
    InMemoryAdditionalInfoStore,
    InMemoryReferenceData,
    InMemoryTradeStore,
)
from tradebook.infra.protocols import AdditionalInfoStore, ReferenceDataStore, TradeStore
from tradebook.trade.types import (
    AdditionalInfo,
    Cashflow,
    EntityType,
    FieldType,
    LegType,
    Trade,
    TradeLeg,
    TradeStatus,
)


def _row(store: InMemoryTradeStore, trade_id: int, version: int = 1) -> Trade:
    row_id = unwrap(store.next_row_id())
    legs = tuple(
        TradeLeg(
            leg_id=unwrap(store.next_leg_id()), trade_row_id=row_id,
            notional=Decimal("1000000"), rate=None, leg_type=LegType.FLOATING,
            pay_receive=flag, index_name="ESTR", currency="EUR", schedule="6M",
        )
        for flag in ("Pay", "Receive")
    )
    return Trade(
        id=row_id, trade_id=trade_id, version=version, active=True,
        status=TradeStatus.NEW, trade_date=date(2025, 1, 17),
        start_date=date(2025, 1, 17), maturity_date=date(2026, 1, 17),
        trader_user_name="alice", inputter_user_name="alice",
        counterparty_name="BigBank", book_name="FX-BOOK-1",
        legs=legs, created_at=UtcDatetime.now(),
    )


def _flow(leg_id: int, start: date, value: str = "100.00") -> Cashflow:
    return Cashflow(
        leg_id=leg_id, period_start=start, period_end=date(start.year + 1, 1, 1),
        value=Decimal(value), currency="EUR",
    )


class TestProtocols:
    def test_adapters_satisfy_protocols(self) -> None:
        assert isinstance(InMemoryTradeStore(), TradeStore)
        assert isinstance(InMemoryReferenceData(), ReferenceDataStore)
        assert isinstance(InMemoryAdditionalInfoStore(), AdditionalInfoStore)


class TestIdentifiers:
    def test_trade_ids_start_at_configured_value(self) -> None:
        store = InMemoryTradeStore(first_trade_id=500)
        assert unwrap(store.next_trade_id()) == 500

    def test_trade_ids_follow_highest_used(self) -> None:
        store = InMemoryTradeStore(first_trade_id=500)
        unwrap(store.insert(_row(store, 900)))
        assert unwrap(store.next_trade_id()) == 901

    def test_row_and_leg_ids_are_unique(self) -> None:
        store = InMemoryTradeStore()
        assert unwrap(store.next_row_id()) != unwrap(store.next_row_id())
        assert unwrap(store.next_leg_id()) != unwrap(store.next_leg_id())


class TestInsert:
    def test_duplicate_row_id_rejected(self) -> None:
        store = InMemoryTradeStore()
        row = unwrap(store.insert(_row(store, 1)))
        result = store.insert(replace(row, trade_id=2))
        assert isinstance(result, Err)
        assert isinstance(result.error, PersistenceError)
        assert result.error.operation == "insert"

    def test_second_active_version_rejected(self) -> None:
        store = InMemoryTradeStore()
        unwrap(store.insert(_row(store, 1)))
        result = store.insert(_row(store, 1, version=2))
        assert isinstance(result, Err)
        assert store.row_count() == 1

    def test_history_sorted_by_version(self) -> None:
        store = InMemoryTradeStore()
        unwrap(store.insert(_row(store, 1)))
        unwrap(store.deactivate(1, 1))
        unwrap(store.insert(_row(store, 1, version=2)))
        assert [t.version for t in unwrap(store.history(1))] == [1, 2]
        active = unwrap(store.find_active(1))
        assert active is not None
        assert active.version == 2


class TestConditionalWrites:
    def test_deactivate_wrong_version(self) -> None:
        store = InMemoryTradeStore()
        unwrap(store.insert(_row(store, 7)))
        result = store.deactivate(7, 3)
        assert isinstance(result, Err)
        assert isinstance(result.error, ConcurrentModificationError)
        assert result.error.expected_version == 3
        assert result.error.actual_version == 1
        assert unwrap(store.find_active(7)) is not None

    def test_deactivate_without_active_row(self) -> None:
        store = InMemoryTradeStore()
        result = store.deactivate(7, 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, ConcurrentModificationError)
        assert result.error.actual_version is None

    def test_update_status_keeps_row(self) -> None:
        store = InMemoryTradeStore()
        row = unwrap(store.insert(_row(store, 7)))
        updated = unwrap(store.update_status(7, 1, TradeStatus.LIVE))
        assert updated.id == row.id
        assert updated.status is TradeStatus.LIVE
        assert unwrap(store.find_active(7)) == updated


class TestCashflows:
    def test_save_is_idempotent_per_period(self) -> None:
        store = InMemoryTradeStore()
        unwrap(store.save_cashflow(_flow(1, date(2025, 1, 1))))
        unwrap(store.save_cashflow(_flow(1, date(2025, 1, 1), "250.00")))
        flows = unwrap(store.cashflows_for_leg(1))
        assert len(flows) == 1
        assert flows[0].value == Decimal("250.00")

    def test_ordered_by_period_start(self) -> None:
        store = InMemoryTradeStore()
        for start in (date(2025, 7, 1), date(2025, 1, 1), date(2025, 4, 1)):
            unwrap(store.save_cashflow(_flow(1, start)))
        starts = [cf.period_start for cf in unwrap(store.cashflows_for_leg(1))]
        assert starts == sorted(starts)

    def test_delete_returns_count(self) -> None:
        store = InMemoryTradeStore()
        unwrap(store.save_cashflow(_flow(1, date(2025, 1, 1))))
        unwrap(store.save_cashflow(_flow(1, date(2025, 7, 1))))
        assert unwrap(store.delete_cashflows_for_leg(1)) == 2
        assert unwrap(store.delete_cashflows_for_leg(1)) == 0
        assert unwrap(store.cashflows_for_leg(1)) == ()


class TestAtomic:
    def test_commit(self) -> None:
        store = InMemoryTradeStore()
        with store.atomic():
            unwrap(store.insert(_row(store, 1)))
        assert store.row_count() == 1

    def test_rollback_on_exception(self) -> None:
        store = InMemoryTradeStore()
        original = unwrap(store.insert(_row(store, 1)))
        unwrap(store.save_cashflow(_flow(original.legs[0].leg_id, date(2025, 1, 1))))

        with pytest.raises(RuntimeError, match="boom"):
            with store.atomic():
                unwrap(store.delete_cashflows_for_leg(original.legs[0].leg_id))
                unwrap(store.deactivate(1, 1))
                unwrap(store.insert(_row(store, 1, version=2)))
                raise RuntimeError("boom")

        assert store.row_count() == 1
        assert unwrap(store.find_active(1)) == original
        assert len(unwrap(store.cashflows_for_leg(original.legs[0].leg_id))) == 1


class TestAdditionalInfoStore:
    def test_deactivate_unknown_info(self) -> None:
        result = InMemoryAdditionalInfoStore().deactivate_info(99)
        assert isinstance(result, Err)
        assert result.error.operation == "deactivate_info"

    def test_rollback_restores_deactivated_info(self) -> None:
        store = InMemoryAdditionalInfoStore()
        first = AdditionalInfo(
            info_id=unwrap(store.next_info_id()), entity_type=EntityType.TRADE,
            entity_id=10000, field_name="SETTLEMENT_INSTRUCTIONS", field_value="SWIFT",
            field_type=FieldType.STRING, active=True, version=1, created_at=UtcDatetime.now(),
        )
        unwrap(store.save_info(first))

        with pytest.raises(RuntimeError, match="boom"):
            with store.atomic():
                unwrap(store.deactivate_info(first.info_id))
                unwrap(store.save_info(replace(
                    first, info_id=unwrap(store.next_info_id()), field_value="CHAPS", version=2,
                )))
                raise RuntimeError("boom")

        assert store.count() == 1
        found = unwrap(store.find_active_info(EntityType.TRADE, 10000, "SETTLEMENT_INSTRUCTIONS"))
        assert found == first
