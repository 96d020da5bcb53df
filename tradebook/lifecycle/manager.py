"""Trade lifecycle manager: create, amend, cancel, terminate, activate.

Every operation checks privileges and business rules before touching the
store and returns Ok[Trade] | Err[LifecycleError]. A trade is never
mutated in place by an amendment: the active version row is deactivated
(version-checked) and a new row with version + 1 becomes active. Cancel,
terminate and activate rewrite the status of the active row. All writes of
one operation run inside the store's atomic() unit.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import final

from tradebook.cashflow.schedule import generate_cashflows, schedule_interval_months
from tradebook.core.errors import (
    LifecycleError,
    PersistenceError,
    TradebookError,
    TradeNotFoundError,
    forbidden,
    trade_not_found,
)
from tradebook.core.result import Err, Ok
from tradebook.core.types import Clock, UtcDatetime, system_today
from tradebook.core.validation import ValidationResult
from tradebook.infra.config import LifecycleConfig
from tradebook.infra.protocols import ReferenceDataStore, TradeStore
from tradebook.lifecycle._unit import expect, run_in_unit
from tradebook.lifecycle.transitions import check_transition
from tradebook.logging_config import get_logger
from tradebook.trade.types import (
    LegType,
    OperationType,
    Trade,
    TradeInput,
    TradeLeg,
    TradeLegInput,
    TradeStatus,
)
from tradebook.validation.legs import LEGS_FIELD
from tradebook.validation.privileges import UserPrivilegeValidator
from tradebook.validation.trades import TradeValidator

log = get_logger("lifecycle.manager")


@final
class TradeLifecycleManager:
    """Orchestrates validation, authorization and versioned persistence."""

    def __init__(
        self,
        store: TradeStore,
        reference_data: ReferenceDataStore,
        trade_validator: TradeValidator,
        privilege_validator: UserPrivilegeValidator,
        config: LifecycleConfig | None = None,
        clock: Clock = system_today,
    ) -> None:
        self._store = store
        self._reference_data = reference_data
        self._trade_validator = trade_validator
        self._privileges = privilege_validator
        self._config = config or LifecycleConfig()
        self._clock = clock

    @property
    def store(self) -> TradeStore:
        return self._store

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_trade(
        self, user_id: str, trade_input: TradeInput,
    ) -> Ok[Trade] | Err[LifecycleError]:
        source = "lifecycle.manager.create_trade"
        trade_input = self._with_defaults(trade_input)

        if not self._privileges.validate_user_privileges(
            user_id, OperationType.CREATE, trade_input,
        ):
            return self._rejected("create", forbidden(user_id, OperationType.CREATE.value, source))

        checked = self._check_input(trade_input, source, new_trade=True)
        if isinstance(checked, Err):
            return self._rejected("create", checked.error)

        def work() -> Trade:
            trade_id = trade_input.trade_id
            if trade_id is None:
                trade_id = expect(self._store.next_trade_id())
            trade = self._build_row(
                trade_input, trade_id, version=1,
                status=self._config.initial_status, inputter=user_id,
            )
            expect(self._store.insert(trade))
            self._generate_cashflows(trade)
            return trade

        result = self._in_unit(work)
        if isinstance(result, Ok):
            log.info(
                "trade created",
                extra={"trade_id": result.value.trade_id, "user_id": user_id},
            )
            return result
        return self._rejected("create", result.error)

    def amend_trade(
        self, user_id: str, trade_id: int, trade_input: TradeInput,
    ) -> Ok[Trade] | Err[LifecycleError]:
        source = "lifecycle.manager.amend_trade"
        trade_input = self._with_defaults(trade_input)

        found = self._find_existing(trade_id, source)
        if isinstance(found, Err):
            return self._rejected("amend", found.error)
        existing = found.value

        # Ownership is judged on the trade as booked, not the proposed terms.
        if not self._privileges.validate_user_privileges(
            user_id, OperationType.AMEND, existing,
        ):
            return self._rejected("amend", forbidden(user_id, OperationType.AMEND.value, source))

        checked = self._check_input(trade_input, source, new_trade=False)
        if isinstance(checked, Err):
            return self._rejected("amend", checked.error)

        allowed = check_transition(existing.status, TradeStatus.AMENDED)
        if isinstance(allowed, Err):
            return self._rejected("amend", allowed.error)

        def work() -> Trade:
            for leg in existing.legs:
                expect(self._store.delete_cashflows_for_leg(leg.leg_id))
            expect(self._store.deactivate(existing.trade_id, existing.version))
            trade = self._build_row(
                trade_input, existing.trade_id, version=existing.version + 1,
                status=TradeStatus.AMENDED,
                inputter=user_id,
            )
            expect(self._store.insert(trade))
            self._generate_cashflows(trade)
            return trade

        result = self._in_unit(work)
        if isinstance(result, Ok):
            log.info(
                "trade amended",
                extra={
                    "trade_id": trade_id,
                    "version": result.value.version,
                    "user_id": user_id,
                },
            )
            return result
        return self._rejected("amend", result.error)

    def cancel_trade(self, user_id: str, trade_id: int) -> Ok[Trade] | Err[LifecycleError]:
        return self._change_status(
            user_id, trade_id, TradeStatus.CANCELLED, OperationType.DELETE,
            "lifecycle.manager.cancel_trade",
        )

    def terminate_trade(self, user_id: str, trade_id: int) -> Ok[Trade] | Err[LifecycleError]:
        return self._change_status(
            user_id, trade_id, TradeStatus.TERMINATED, OperationType.DELETE,
            "lifecycle.manager.terminate_trade",
        )

    def activate_trade(self, user_id: str, trade_id: int) -> Ok[Trade] | Err[LifecycleError]:
        """NEW -> LIVE."""
        return self._change_status(
            user_id, trade_id, TradeStatus.LIVE, OperationType.AMEND,
            "lifecycle.manager.activate_trade",
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_trade(self, user_id: str, trade_id: int) -> Ok[Trade] | Err[LifecycleError]:
        source = "lifecycle.manager.get_trade"
        found = self._find_existing(trade_id, source)
        if isinstance(found, Err):
            return self._rejected("view", found.error)
        if not self._privileges.validate_user_privileges(
            user_id, OperationType.VIEW, found.value,
        ):
            return self._rejected("view", forbidden(user_id, OperationType.VIEW.value, source))
        return found

    def trade_history(
        self, trade_id: int,
    ) -> Ok[tuple[Trade, ...]] | Err[TradeNotFoundError | PersistenceError]:
        """Every version row of the trade, oldest first."""
        match self._store.history(trade_id):
            case Ok(versions) if versions:
                return Ok(versions)
            case Ok(_):
                return Err(trade_not_found(trade_id, "lifecycle.manager.trade_history"))
            case Err(error):
                return Err(error)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _change_status(
        self,
        user_id: str,
        trade_id: int,
        target: TradeStatus,
        operation: OperationType,
        source: str,
    ) -> Ok[Trade] | Err[LifecycleError]:
        action = target.value.lower()
        found = self._find_existing(trade_id, source)
        if isinstance(found, Err):
            return self._rejected(action, found.error)
        existing = found.value

        if not self._privileges.validate_user_privileges(user_id, operation, existing):
            return self._rejected(action, forbidden(user_id, operation.value, source))

        allowed = check_transition(existing.status, target)
        if isinstance(allowed, Err):
            return self._rejected(action, allowed.error)

        result = self._in_unit(
            lambda: expect(self._store.update_status(trade_id, existing.version, target))
        )
        if isinstance(result, Ok):
            log.info(
                "trade status changed",
                extra={
                    "trade_id": trade_id,
                    "from_status": existing.status.value,
                    "to_status": target.value,
                    "user_id": user_id,
                },
            )
            return result
        return self._rejected(action, result.error)

    def _with_defaults(self, trade_input: TradeInput) -> TradeInput:
        if trade_input.trade_date is None:
            return replace(trade_input, trade_date=self._clock())
        return trade_input

    def _find_existing(
        self, trade_id: int, source: str,
    ) -> Ok[Trade] | Err[TradeNotFoundError | PersistenceError]:
        match self._store.find_active(trade_id):
            case Ok(None):
                return Err(trade_not_found(trade_id, source))
            case Ok(trade):
                return Ok(trade)
            case Err(error):
                return Err(error)

    def _check_input(
        self, trade_input: TradeInput, source: str, *, new_trade: bool,
    ) -> Ok[None] | Err[LifecycleError]:
        """Business rules, then everything needed to persist the trade."""
        rules = self._trade_validator.validate_trade_business_rules(trade_input)
        if not rules.is_valid():
            return Err(rules.to_error(source))

        result = ValidationResult()
        if trade_input.start_date is None:
            result.add_error("tradeStartDate", "Start date is required")
        if trade_input.maturity_date is None:
            result.add_error("tradeMaturityDate", "Maturity date is required")
        for leg in trade_input.legs or ():
            _check_leg_complete(leg, result)

        resolved = self._check_references(trade_input, result, new_trade=new_trade)
        if isinstance(resolved, Err):
            return resolved
        if not result.is_valid():
            return Err(result.to_error(source))
        return Ok(None)

    def _check_references(
        self, trade_input: TradeInput, result: ValidationResult, *, new_trade: bool,
    ) -> Ok[None] | Err[PersistenceError]:
        ref = self._reference_data
        if trade_input.book_name is not None:
            match ref.find_book(trade_input.book_name):
                case Ok(None):
                    result.add_error("book", f"Book not found: {trade_input.book_name}")
                case Err(error):
                    return Err(error)
        if trade_input.counterparty_name is not None:
            match ref.find_counterparty(trade_input.counterparty_name):
                case Ok(None):
                    result.add_error(
                        "counterparty",
                        f"Counterparty not found: {trade_input.counterparty_name}",
                    )
                case Err(error):
                    return Err(error)
        if trade_input.trader_user_name is not None:
            match ref.find_user(trade_input.trader_user_name):
                case Ok(None):
                    result.add_error(
                        "traderUserName",
                        f"Trader not found: {trade_input.trader_user_name}",
                    )
                case Err(error):
                    return Err(error)
        if new_trade and trade_input.trade_id is not None:
            match self._store.history(trade_input.trade_id):
                case Ok(versions) if versions:
                    result.add_error("tradeId", f"Trade id already exists: {trade_input.trade_id}")
                case Err(error):
                    return Err(error)
        return Ok(None)

    def _build_row(
        self,
        trade_input: TradeInput,
        trade_id: int,
        *,
        version: int,
        status: TradeStatus,
        inputter: str,
    ) -> Trade:
        row_id = expect(self._store.next_row_id())
        legs = tuple(
            self._build_leg(leg, row_id) for leg in trade_input.legs or ()
        )
        # _check_input guarantees the dates and leg fields below are present
        assert trade_input.trade_date is not None
        assert trade_input.start_date is not None
        assert trade_input.maturity_date is not None
        return Trade(
            id=row_id,
            trade_id=trade_id,
            version=version,
            active=True,
            status=status,
            trade_date=trade_input.trade_date,
            start_date=trade_input.start_date,
            maturity_date=trade_input.maturity_date,
            trader_user_name=trade_input.trader_user_name,
            inputter_user_name=trade_input.inputter_user_name or inputter,
            counterparty_name=trade_input.counterparty_name,
            book_name=trade_input.book_name,
            legs=legs,
            created_at=UtcDatetime.now(),
        )

    def _build_leg(self, leg: TradeLegInput, row_id: int) -> TradeLeg:
        leg_type = LegType.parse(leg.leg_type)
        assert leg_type is not None and leg.notional is not None
        assert leg.pay_receive is not None and leg.currency is not None
        assert leg.schedule is not None
        return TradeLeg(
            leg_id=expect(self._store.next_leg_id()),
            trade_row_id=row_id,
            notional=leg.notional,
            rate=leg.rate if leg_type is LegType.FIXED else None,
            leg_type=leg_type,
            pay_receive=leg.pay_receive,
            index_name=leg.index_name if leg_type is LegType.FLOATING else None,
            currency=leg.currency,
            schedule=leg.schedule,
        )

    def _generate_cashflows(self, trade: Trade) -> None:
        for leg in trade.legs:
            for cashflow in generate_cashflows(leg, trade.start_date, trade.maturity_date):
                expect(self._store.save_cashflow(cashflow))

    def _in_unit(self, work: Callable[[], Trade]) -> Ok[Trade] | Err[LifecycleError]:
        return run_in_unit(self._store.atomic, work)

    def _rejected[E: TradebookError](self, action: str, error: E) -> Err[E]:
        log.warning(
            "trade %s rejected", action,
            extra={"error_code": error.code, "error_source": error.source},
        )
        return Err(error)


def _check_leg_complete(leg: TradeLegInput, result: ValidationResult) -> None:
    if leg.notional is None:
        result.add_error(LEGS_FIELD, "Leg notional is required")
    elif leg.notional < 0:
        result.add_error(LEGS_FIELD, "Leg notional cannot be negative")
    if LegType.parse(leg.leg_type) is None:
        result.add_error(LEGS_FIELD, "Leg type must be Fixed or Floating")
    if leg.pay_receive is None or not leg.pay_receive.strip():
        result.add_error(LEGS_FIELD, "Leg pay/receive flag is required")
    if leg.currency is None or not leg.currency.strip():
        result.add_error(LEGS_FIELD, "Leg currency is required")
    match schedule_interval_months(leg.schedule):
        case Err(reason):
            result.add_error(LEGS_FIELD, reason)
        case Ok(_):
            pass
