"""Workflow data types for trade lifecycle commands.

All types: @final @dataclass(frozen=True, slots=True), serializable by the
tradebook DataConverter.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from tradebook.trade.types import TradeInput, TradeStatus

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TradeCommandKind(Enum):
    CREATE = "Create"
    AMEND = "Amend"
    CANCEL = "Cancel"
    TERMINATE = "Terminate"


class CommandOutcome(Enum):
    """Terminal states of a trade command.  Exhaustive."""

    SUCCEEDED = "Succeeded"
    INVALID = "Invalid"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    ILLEGAL_TRANSITION = "IllegalTransition"
    CONFLICT = "Conflict"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# Workflow input
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeCommand:
    """One lifecycle command.  command_id doubles as the Temporal workflow id."""

    command_id: str
    kind: TradeCommandKind
    user_id: str
    trade_id: int | None = None
    trade_input: TradeInput | None = None

    def __post_init__(self) -> None:
        if not self.command_id:
            raise TypeError("TradeCommand.command_id must be non-empty")
        needs_input = self.kind in (TradeCommandKind.CREATE, TradeCommandKind.AMEND)
        if needs_input and self.trade_input is None:
            raise TypeError(f"{self.kind.value} command requires trade_input")
        if self.kind is not TradeCommandKind.CREATE and self.trade_id is None:
            raise TypeError(f"{self.kind.value} command requires trade_id")


# ---------------------------------------------------------------------------
# Activity / workflow output
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeCommandResult:
    command_id: str
    outcome: CommandOutcome
    trade_id: int | None = None
    version: int | None = None
    status: TradeStatus | None = None
    message: str | None = None
    errors: tuple[tuple[str, tuple[str, ...]], ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.outcome is CommandOutcome.SUCCEEDED
