"""Durable workflow executing one trade lifecycle command.

Determinism contract: this module contains NO I/O, NO randomness and NO
system clock access.  All store interaction is delegated to activities.
"""

from __future__ import annotations

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    from tradebook.workflow.activities import TradeActivities
    from tradebook.workflow.types import (
        CommandOutcome,
        TradeCommand,
        TradeCommandKind,
        TradeCommandResult,
    )

COMMAND_TIMEOUT: timedelta = timedelta(seconds=30)

# Business rejections come back as outcomes; only storage failures retry.
COMMAND_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=2),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(seconds=10),
    maximum_attempts=3,
    non_retryable_error_types=["TypeError", "ValueError", "AssertionError"],
)

_ACTIVITIES = {
    TradeCommandKind.CREATE: TradeActivities.create_trade,
    TradeCommandKind.AMEND: TradeActivities.amend_trade,
    TradeCommandKind.CANCEL: TradeActivities.cancel_trade,
    TradeCommandKind.TERMINATE: TradeActivities.terminate_trade,
}


@workflow.defn(name="TradeLifecycle")
class TradeLifecycleWorkflow:
    """Runs a TradeCommand to exactly one CommandOutcome."""

    def __init__(self) -> None:
        self._status: str = "RECEIVED"

    @workflow.query
    def get_status(self) -> str:
        return self._status

    @workflow.run
    async def run(self, command: TradeCommand) -> TradeCommandResult:
        self._status = command.kind.value.upper()
        try:
            result = await workflow.execute_activity_method(
                _ACTIVITIES[command.kind],
                command,
                start_to_close_timeout=COMMAND_TIMEOUT,
                retry_policy=COMMAND_RETRY,
            )
        except ActivityError as exc:
            self._status = "FAILED"
            cause = exc.cause if exc.cause is not None else exc
            return TradeCommandResult(
                command_id=command.command_id,
                outcome=CommandOutcome.FAILED,
                trade_id=command.trade_id,
                message=str(cause),
            )
        self._status = "COMPLETED"
        return result
