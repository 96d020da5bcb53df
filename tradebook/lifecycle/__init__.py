"""tradebook.lifecycle -- state machine, lifecycle manager and settlement instructions."""

from tradebook.lifecycle.manager import TradeLifecycleManager as TradeLifecycleManager
from tradebook.lifecycle.settlement import (
    SettlementInstructionService as SettlementInstructionService,
)
from tradebook.lifecycle.transitions import TRADE_TRANSITIONS as TRADE_TRANSITIONS
from tradebook.lifecycle.transitions import check_transition as check_transition
