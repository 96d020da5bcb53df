"""Settlement instructions stored as versioned AdditionalInfo on a trade."""

from __future__ import annotations

from typing import final

from tradebook.core.errors import LifecycleError, PersistenceError, forbidden, trade_not_found
from tradebook.core.result import Err, Ok
from tradebook.core.types import UtcDatetime
from tradebook.core.validation import ValidationResult
from tradebook.infra.config import LifecycleConfig
from tradebook.infra.protocols import AdditionalInfoStore, TradeStore
from tradebook.lifecycle._unit import expect, run_in_unit
from tradebook.logging_config import get_logger
from tradebook.trade.types import (
    AdditionalInfo,
    EntityType,
    FieldType,
    OperationType,
    Trade,
)
from tradebook.validation.privileges import UserPrivilegeValidator

log = get_logger("lifecycle.settlement")

SETTLEMENT_INSTRUCTIONS = "SETTLEMENT_INSTRUCTIONS"
SETTLEMENT_FIELD = "settlementInstructions"


@final
class SettlementInstructionService:
    def __init__(
        self,
        trade_store: TradeStore,
        info_store: AdditionalInfoStore,
        privilege_validator: UserPrivilegeValidator,
        config: LifecycleConfig | None = None,
    ) -> None:
        self._trades = trade_store
        self._infos = info_store
        self._privileges = privilege_validator
        self._config = config or LifecycleConfig()

    def update_instructions(
        self, user_id: str, trade_id: int, text: str | None,
    ) -> Ok[AdditionalInfo] | Err[LifecycleError]:
        """Replace the trade's settlement instructions with a new version."""
        source = "lifecycle.settlement.update_instructions"

        match self._trades.find_active(trade_id):
            case Ok(None):
                return Err(trade_not_found(trade_id, source))
            case Ok(trade):
                pass
            case Err(error):
                return Err(error)

        if not self._privileges.validate_user_privileges(user_id, OperationType.AMEND, trade):
            log.warning("settlement update rejected", extra={"trade_id": trade_id, "user_id": user_id})
            return Err(forbidden(user_id, OperationType.AMEND.value, source))

        value = (text or "").strip()
        low = self._config.settlement_instructions_min_length
        high = self._config.settlement_instructions_max_length
        if not low <= len(value) <= high:
            rules = ValidationResult()
            rules.add_error(
                SETTLEMENT_FIELD,
                f"Settlement instructions must be between {low} and {high} characters long",
            )
            return Err(rules.to_error(source))

        match self._infos.find_active_info(EntityType.TRADE, trade_id, SETTLEMENT_INSTRUCTIONS):
            case Ok(previous):
                pass
            case Err(error):
                return Err(error)

        def work() -> AdditionalInfo:
            version = 1
            if previous is not None:
                expect(self._infos.deactivate_info(previous.info_id))
                version = previous.version + 1
            info = AdditionalInfo(
                info_id=expect(self._infos.next_info_id()),
                entity_type=EntityType.TRADE,
                entity_id=trade_id,
                field_name=SETTLEMENT_INSTRUCTIONS,
                field_value=value,
                field_type=FieldType.STRING,
                active=True,
                version=version,
                created_at=UtcDatetime.now(),
            )
            expect(self._infos.save_info(info))
            return info

        result = run_in_unit(self._infos.atomic, work)
        if isinstance(result, Err):
            log.warning(
                "settlement update failed",
                extra={"trade_id": trade_id, "error_code": result.error.code},
            )
            return result
        log.info(
            "settlement instructions updated",
            extra={"trade_id": trade_id, "version": result.value.version, "user_id": user_id},
        )
        return result

    def get_instructions(self, trade_id: int) -> Ok[str | None] | Err[PersistenceError]:
        return self._infos.find_active_info(
            EntityType.TRADE, trade_id, SETTLEMENT_INSTRUCTIONS,
        ).map(lambda info: None if info is None else info.field_value)

    def search_by_instructions(
        self, fragment: str,
    ) -> Ok[tuple[Trade, ...]] | Err[PersistenceError]:
        """Active trades whose instructions contain fragment, ignoring case."""
        needle = fragment.strip().casefold()
        match self._infos.active_infos(EntityType.TRADE, SETTLEMENT_INSTRUCTIONS):
            case Ok(infos):
                pass
            case Err(error):
                return Err(error)

        trades: list[Trade] = []
        for info in sorted(infos, key=lambda i: i.entity_id):
            if needle not in info.field_value.casefold():
                continue
            match self._trades.find_active(info.entity_id):
                case Ok(None):
                    continue
                case Ok(trade):
                    trades.append(trade)
                case Err(error):
                    return Err(error)
        return Ok(tuple(trades))
