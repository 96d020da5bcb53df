"""Business-rule validation of a proposed trade.

Collects every violation into one ValidationResult; never raises for a
rule failure.
"""

from __future__ import annotations

from datetime import timedelta

from tradebook.core.result import Ok
from tradebook.core.types import Clock, system_today
from tradebook.core.validation import ValidationResult
from tradebook.infra.config import LifecycleConfig
from tradebook.infra.protocols import ReferenceDataStore
from tradebook.trade.types import TradeInput
from tradebook.validation.legs import LEGS_FIELD, validate_trade_leg_consistency

MSG_MATURITY_BEFORE_START = "Maturity date cannot be before start date"
MSG_MATURITY_BEFORE_TRADE = "Maturity date cannot be before trade date"
MSG_START_BEFORE_TRADE = "Start date cannot be before trade date"
MSG_LEG_COUNT = "Trade legs must have exactly 2 legs"
MSG_BOOK_INACTIVE = "Book must be active"
MSG_COUNTERPARTY_INACTIVE = "Counterparty must be active"


def trade_date_too_old_message(max_age_days: int) -> str:
    return f"Trade date cannot be more than {max_age_days} days in the past"


class TradeValidator:
    """Date, leg and reference-data rules for a TradeInput."""

    def __init__(
        self,
        reference_data: ReferenceDataStore,
        config: LifecycleConfig | None = None,
        clock: Clock = system_today,
    ) -> None:
        self._reference_data = reference_data
        self._config = config or LifecycleConfig()
        self._clock = clock

    def validate_trade_business_rules(self, trade_input: TradeInput) -> ValidationResult:
        result = ValidationResult()
        self._check_dates(trade_input, result)
        self._check_legs(trade_input, result)
        self._check_reference_data(trade_input, result)
        return result

    def _check_dates(self, trade_input: TradeInput, result: ValidationResult) -> None:
        trade_date = trade_input.trade_date
        start = trade_input.start_date
        maturity = trade_input.maturity_date
        if trade_date is None or start is None or maturity is None:
            return

        if maturity < start:
            result.add_error("tradeMaturityDate", MSG_MATURITY_BEFORE_START)
        if maturity < trade_date:
            result.add_error("tradeMaturityDate", MSG_MATURITY_BEFORE_TRADE)
        if start < trade_date:
            result.add_error("tradeStartDate", MSG_START_BEFORE_TRADE)

        max_age = self._config.max_trade_date_age_days
        # exactly max_age days ago is still accepted
        if trade_date < self._clock() - timedelta(days=max_age):
            result.add_error("tradeDate", trade_date_too_old_message(max_age))

    def _check_legs(self, trade_input: TradeInput, result: ValidationResult) -> None:
        legs = trade_input.legs
        if legs is None or len(legs) != 2:
            result.add_error(LEGS_FIELD, MSG_LEG_COUNT)
            return
        result.add_multiple_errors(validate_trade_leg_consistency(legs))

    def _check_reference_data(
        self, trade_input: TradeInput, result: ValidationResult,
    ) -> None:
        # Misses and store failures are left to the lifecycle manager's
        # resolution step, which reports them as their own categories.
        if trade_input.book_name is not None:
            match self._reference_data.find_book(trade_input.book_name):
                case Ok(book) if book is not None and not book.active:
                    result.add_error("book", MSG_BOOK_INACTIVE)
                case _:
                    pass

        if trade_input.counterparty_name is not None:
            match self._reference_data.find_counterparty(trade_input.counterparty_name):
                case Ok(counterparty) if counterparty is not None and not counterparty.active:
                    result.add_error("counterparty", MSG_COUNTERPARTY_INACTIVE)
                case _:
                    pass
