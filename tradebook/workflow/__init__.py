"""tradebook.workflow -- Temporal.io trade lifecycle workflow."""

from tradebook.workflow.types import CommandOutcome as CommandOutcome
from tradebook.workflow.types import TradeCommand as TradeCommand
from tradebook.workflow.types import TradeCommandKind as TradeCommandKind
from tradebook.workflow.types import TradeCommandResult as TradeCommandResult
