"""Trade status state machine.

NEW -> LIVE, and any non-terminal status -> AMENDED | CANCELLED | TERMINATED.
CANCELLED and TERMINATED are terminal.
"""

from __future__ import annotations

from tradebook.core.errors import IllegalTransitionError
from tradebook.core.result import Err, Ok
from tradebook.core.types import UtcDatetime
from tradebook.trade.types import TradeStatus

type TransitionTable = frozenset[tuple[TradeStatus, TradeStatus]]

_OPEN = (TradeStatus.NEW, TradeStatus.LIVE, TradeStatus.AMENDED)
_EXITS = (TradeStatus.AMENDED, TradeStatus.CANCELLED, TradeStatus.TERMINATED)

TRADE_TRANSITIONS: TransitionTable = frozenset(
    {(TradeStatus.NEW, TradeStatus.LIVE)}
    | {(source, target) for source in _OPEN for target in _EXITS}
)


def check_transition(
    from_state: TradeStatus,
    to_state: TradeStatus,
    transitions: TransitionTable = TRADE_TRANSITIONS,
) -> Ok[None] | Err[IllegalTransitionError]:
    """Validate a state transition against a transition table."""
    if (from_state, to_state) in transitions:
        return Ok(None)
    return Err(IllegalTransitionError(
        message=f"Invalid transition: {from_state.value} -> {to_state.value}",
        code="ILLEGAL_TRANSITION",
        timestamp=UtcDatetime.now(),
        source="lifecycle.transitions.check_transition",
        from_state=from_state.value,
        to_state=to_state.value,
    ))
