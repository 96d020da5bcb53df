"""Activity implementations for the trade lifecycle workflow.

Activities are thin IO wrappers around TradeLifecycleManager.  Each one:
- Is an @activity.defn method on TradeActivities (the manager is injected)
- Takes a TradeCommand and returns a TradeCommandResult
- Reports business rejections as outcomes, never as activity failures
- Raises ApplicationError on storage failures so Temporal retries them
"""

from __future__ import annotations

from temporalio import activity
from temporalio.exceptions import ApplicationError

from tradebook.core.errors import (
    AuthorizationError,
    ConcurrentModificationError,
    IllegalTransitionError,
    LifecycleError,
    PersistenceError,
    TradeNotFoundError,
    TradeValidationError,
)
from tradebook.core.result import Err, Ok
from tradebook.lifecycle.manager import TradeLifecycleManager
from tradebook.trade.types import Trade
from tradebook.workflow.types import CommandOutcome, TradeCommand, TradeCommandResult


def _to_result(
    command: TradeCommand, result: Ok[Trade] | Err[LifecycleError],
) -> TradeCommandResult:
    match result:
        case Ok(trade):
            return TradeCommandResult(
                command_id=command.command_id,
                outcome=CommandOutcome.SUCCEEDED,
                trade_id=trade.trade_id,
                version=trade.version,
                status=trade.status,
            )
        case Err(PersistenceError() as error):
            raise ApplicationError(error.message, type="PersistenceError")
        case Err(error):
            return TradeCommandResult(
                command_id=command.command_id,
                outcome=_outcome(error),
                trade_id=command.trade_id,
                message=error.message,
                errors=error.errors if isinstance(error, TradeValidationError) else (),
            )


def _outcome(error: LifecycleError) -> CommandOutcome:
    match error:
        case TradeValidationError():
            return CommandOutcome.INVALID
        case AuthorizationError():
            return CommandOutcome.FORBIDDEN
        case TradeNotFoundError():
            return CommandOutcome.NOT_FOUND
        case IllegalTransitionError():
            return CommandOutcome.ILLEGAL_TRANSITION
        case ConcurrentModificationError():
            return CommandOutcome.CONFLICT
        case _:
            return CommandOutcome.FAILED


class TradeActivities:
    """Activity methods bound to one lifecycle manager."""

    def __init__(self, manager: TradeLifecycleManager) -> None:
        self._manager = manager

    @activity.defn(name="create_trade")
    async def create_trade(self, command: TradeCommand) -> TradeCommandResult:
        """Timeout: 30s | Retries: 3 on storage failure."""
        activity.logger.info("Creating trade for command %s", command.command_id)
        assert command.trade_input is not None
        return _to_result(
            command, self._manager.create_trade(command.user_id, command.trade_input),
        )

    @activity.defn(name="amend_trade")
    async def amend_trade(self, command: TradeCommand) -> TradeCommandResult:
        activity.logger.info(
            "Amending trade %s for command %s", command.trade_id, command.command_id,
        )
        assert command.trade_id is not None and command.trade_input is not None
        return _to_result(
            command,
            self._manager.amend_trade(command.user_id, command.trade_id, command.trade_input),
        )

    @activity.defn(name="cancel_trade")
    async def cancel_trade(self, command: TradeCommand) -> TradeCommandResult:
        activity.logger.info(
            "Cancelling trade %s for command %s", command.trade_id, command.command_id,
        )
        assert command.trade_id is not None
        return _to_result(
            command, self._manager.cancel_trade(command.user_id, command.trade_id),
        )

    @activity.defn(name="terminate_trade")
    async def terminate_trade(self, command: TradeCommand) -> TradeCommandResult:
        activity.logger.info(
            "Terminating trade %s for command %s", command.trade_id, command.command_id,
        )
        assert command.trade_id is not None
        return _to_result(
            command, self._manager.terminate_trade(command.user_id, command.trade_id),
        )
