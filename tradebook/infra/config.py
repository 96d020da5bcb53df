"""Configuration for the trade lifecycle, the Temporal worker and logging.

Pure configuration data. Environment variables are read only by the
from_env() constructors, never at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import final

from tradebook.trade.types import TradeStatus

# ---------------------------------------------------------------------------
# Lifecycle rules
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class LifecycleConfig:
    """Knobs of the booking rules."""

    max_trade_date_age_days: int = 30
    initial_status: TradeStatus = TradeStatus.NEW
    first_trade_id: int = 10000
    settlement_instructions_min_length: int = 10
    settlement_instructions_max_length: int = 500

    def __post_init__(self) -> None:
        if self.max_trade_date_age_days < 0:
            raise TypeError(
                "LifecycleConfig.max_trade_date_age_days must be >= 0, "
                f"got {self.max_trade_date_age_days}"
            )
        if self.settlement_instructions_min_length > self.settlement_instructions_max_length:
            raise TypeError("settlement instruction bounds are inverted")


# ---------------------------------------------------------------------------
# Temporal
# ---------------------------------------------------------------------------

TASK_QUEUE_TRADE_LIFECYCLE: str = "tradebook-trade-lifecycle"


@final
@dataclass(frozen=True, slots=True)
class TemporalConfig:
    target_host: str = "localhost:7233"
    namespace: str = "default"
    task_queue: str = TASK_QUEUE_TRADE_LIFECYCLE

    @staticmethod
    def from_env() -> TemporalConfig:
        return TemporalConfig(
            target_host=os.environ.get("TRADEBOOK_TEMPORAL_HOST", "localhost:7233"),
            namespace=os.environ.get("TRADEBOOK_TEMPORAL_NAMESPACE", "default"),
            task_queue=os.environ.get("TRADEBOOK_TASK_QUEUE", TASK_QUEUE_TRADE_LIFECYCLE),
        )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@final
@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    json: bool = True

    @staticmethod
    def from_env() -> LoggingConfig:
        return LoggingConfig(
            level=os.environ.get("TRADEBOOK_LOG_LEVEL", "INFO").upper(),
            json=os.environ.get("TRADEBOOK_LOG_JSON", "true").strip().lower() in _TRUTHY,
        )
