"""Tests for tradebook.workflow.converter -- Temporal payload round trips."""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import pytest
from temporalio.converter import JSONTypeConverter

from tradebook.trade.types import TradeInput, TradeLegInput, TradeStatus
from tradebook.workflow.converter import (
    TRADEBOOK_DATA_CONVERTER,
    TradebookJSONEncoder,
    TradebookJSONTypeConverter,
)
from tradebook.workflow.types import (
    CommandOutcome,
    TradeCommand,
    TradeCommandKind,
    TradeCommandResult,
)

_CONVERTER = TRADEBOOK_DATA_CONVERTER.payload_converter


def _command() -> TradeCommand:
    return TradeCommand(
        command_id="CMD-42",
        kind=TradeCommandKind.AMEND,
        user_id="alice",
        trade_id=10007,
        trade_input=TradeInput(
            trade_date=date(2025, 1, 17),
            start_date=date(2025, 1, 21),
            maturity_date=None,
            legs=(
                TradeLegInput(notional=Decimal("10000000.00"), rate=Decimal("3.125"),
                              leg_type="Fixed", currency="USD", schedule="6M"),
                TradeLegInput(notional=Decimal("10000000.00"), leg_type="Floating",
                              index_name="SOFR", currency="USD", schedule="6M"),
            ),
            book_name="FX-BOOK-1",
        ),
    )


class TestPayloadRoundTrip:
    def test_command_with_nested_input(self) -> None:
        command = _command()
        payloads = _CONVERTER.to_payloads([command])
        [decoded] = _CONVERTER.from_payloads(payloads, [TradeCommand])
        assert decoded == command
        assert decoded.kind is TradeCommandKind.AMEND
        assert decoded.trade_input is not None
        assert isinstance(decoded.trade_input.legs, tuple)
        assert decoded.trade_input.legs[0].rate == Decimal("3.125")
        assert decoded.trade_input.legs[0].notional.as_tuple().exponent == -2

    def test_result_with_field_errors(self) -> None:
        result = TradeCommandResult(
            command_id="CMD-42",
            outcome=CommandOutcome.INVALID,
            trade_id=10007,
            status=TradeStatus.AMENDED,
            message="Trade validation failed",
            errors=(("tradeLegs", ("Legs must have opposite pay/receive flags",)),),
        )
        [decoded] = _CONVERTER.from_payloads(_CONVERTER.to_payloads([result]), [TradeCommandResult])
        assert decoded == result
        assert decoded.outcome is CommandOutcome.INVALID
        assert decoded.status is TradeStatus.AMENDED

    def test_plain_values_untouched(self) -> None:
        payloads = _CONVERTER.to_payloads(["FAILED", 3])
        assert _CONVERTER.from_payloads(payloads, [str, int]) == ["FAILED", 3]


class TestEncoding:
    def test_tags(self) -> None:
        encoded = json.loads(json.dumps(_command(), cls=TradebookJSONEncoder))
        assert encoded["__type__"] == "tradebook.workflow.types.TradeCommand"
        assert encoded["kind"] == "Amend"
        assert encoded["trade_input"]["trade_date"] == {"__date__": "2025-01-17"}
        assert encoded["trade_input"]["legs"][0]["rate"] == {"__decimal__": "3.125"}

    def test_unlisted_module_rejected(self) -> None:
        with pytest.raises(TypeError, match="Unresolvable payload type: os.PathLike"):
            TradebookJSONTypeConverter().to_typed_value(
                TradeCommand, {"__type__": "os.PathLike", "x": 1},
            )

    def test_untagged_values_left_to_default_converter(self) -> None:
        converter = TradebookJSONTypeConverter()
        assert converter.to_typed_value(str, "x") is JSONTypeConverter.Unhandled
