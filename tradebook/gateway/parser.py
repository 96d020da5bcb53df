"""Gateway parser: raw submission dict -> TradeInput.

parse_trade_submission is the entry point for trade payloads arriving from
a transport. It is total (never raises) and reports every malformed field
at once. Missing fields are left as None for the business-rule validators.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from tradebook.core.errors import TradeValidationError
from tradebook.core.result import Err, Ok
from tradebook.core.validation import ValidationResult
from tradebook.trade.types import TradeInput, TradeLegInput

MSG_INVALID_DATE = "Invalid date format"
MSG_INVALID_DECIMAL = "Invalid decimal"
MSG_INVALID_STRING = "Invalid string"

_MISSING = object()


def _extract_str(
    raw: dict[str, object], key: str, result: ValidationResult, field: str,
) -> str | None:
    val = raw.get(key)
    if val is None or isinstance(val, str):
        return val
    result.add_error(field, MSG_INVALID_STRING)
    return None


def _extract_date(
    raw: dict[str, object], key: str, result: ValidationResult, field: str,
) -> date | None:
    val = raw.get(key, _MISSING)
    if val is _MISSING or val is None:
        return None
    if isinstance(val, date) and not isinstance(val, datetime):
        return val
    if isinstance(val, str):
        try:
            return date.fromisoformat(val)
        except ValueError:
            pass
    result.add_error(field, MSG_INVALID_DATE)
    return None


def _extract_decimal(
    raw: dict[str, object], key: str, result: ValidationResult, field: str,
) -> Decimal | None:
    val = raw.get(key, _MISSING)
    if val is _MISSING or val is None:
        return None
    if isinstance(val, Decimal):
        if val.is_finite():
            return val
    elif isinstance(val, (int, float, str)) and not isinstance(val, bool):
        try:
            parsed = Decimal(str(val))
        except InvalidOperation:
            parsed = None
        if parsed is not None and parsed.is_finite():
            return parsed
    result.add_error(field, MSG_INVALID_DECIMAL)
    return None


def _extract_int(
    raw: dict[str, object], key: str, result: ValidationResult, field: str,
) -> int | None:
    val = raw.get(key, _MISSING)
    if val is _MISSING or val is None:
        return None
    if isinstance(val, int) and not isinstance(val, bool):
        return val
    if isinstance(val, str) and val.strip().isdecimal():
        return int(val.strip())
    result.add_error(field, "Invalid integer")
    return None


def _parse_leg(raw: object, index: int, result: ValidationResult) -> TradeLegInput:
    prefix = f"tradeLegs[{index}]"
    if not isinstance(raw, dict):
        result.add_error(prefix, "Leg must be an object")
        return TradeLegInput()
    return TradeLegInput(
        notional=_extract_decimal(raw, "notional", result, f"{prefix}.notional"),
        rate=_extract_decimal(raw, "rate", result, f"{prefix}.rate"),
        leg_type=_extract_str(raw, "legType", result, f"{prefix}.legType"),
        pay_receive=_extract_str(raw, "payReceiveFlag", result, f"{prefix}.payReceiveFlag"),
        index_name=_extract_str(raw, "indexName", result, f"{prefix}.indexName"),
        currency=_extract_str(raw, "currency", result, f"{prefix}.currency"),
        schedule=_extract_str(
            raw, "calculationPeriodSchedule", result, f"{prefix}.calculationPeriodSchedule",
        ),
    )


def parse_trade_submission(
    raw: dict[str, object],
) -> Ok[TradeInput] | Err[TradeValidationError]:
    """Parse a camelCase trade payload into a TradeInput."""
    result = ValidationResult()

    legs: tuple[TradeLegInput, ...] | None = None
    raw_legs = raw.get("tradeLegs")
    if isinstance(raw_legs, list):
        legs = tuple(_parse_leg(leg, i, result) for i, leg in enumerate(raw_legs))
    elif raw_legs is not None:
        result.add_error("tradeLegs", "Trade legs must be a list")

    trade_input = TradeInput(
        trade_id=_extract_int(raw, "tradeId", result, "tradeId"),
        trade_date=_extract_date(raw, "tradeDate", result, "tradeDate"),
        start_date=_extract_date(raw, "tradeStartDate", result, "tradeStartDate"),
        maturity_date=_extract_date(raw, "tradeMaturityDate", result, "tradeMaturityDate"),
        legs=legs,
        counterparty_name=_extract_str(raw, "counterpartyName", result, "counterpartyName"),
        book_name=_extract_str(raw, "bookName", result, "bookName"),
        trader_user_name=_extract_str(raw, "traderUserName", result, "traderUserName"),
        inputter_user_name=_extract_str(raw, "inputterUserName", result, "inputterUserName"),
    )

    if not result.is_valid():
        return Err(result.to_error(
            "gateway.parser.parse_trade_submission",
            message="Trade submission could not be parsed",
        ))
    return Ok(trade_input)
