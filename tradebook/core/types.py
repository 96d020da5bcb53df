"""Core value types: UtcDatetime and the injectable business-date clock."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import final

from tradebook.core.result import Err, Ok


@final
@dataclass(frozen=True, slots=True)
class UtcDatetime:
    """Timezone-aware UTC datetime. Naive datetimes are rejected."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise TypeError("UtcDatetime requires timezone-aware datetime, got naive")

    @staticmethod
    def parse(raw: datetime) -> Ok[UtcDatetime] | Err[str]:
        if raw.tzinfo is None:
            return Err("UtcDatetime requires timezone-aware datetime, got naive")
        return Ok(UtcDatetime(value=raw.astimezone(UTC)))

    @staticmethod
    def now() -> UtcDatetime:
        return UtcDatetime(value=datetime.now(tz=UTC))


# Validators and the lifecycle manager take "today" from an injected clock so
# the trade-date window can be tested at its boundary.
type Clock = Callable[[], date]


def system_today() -> date:
    """Business date from the process clock (UTC)."""
    return datetime.now(tz=UTC).date()


def fixed_clock(today: date) -> Clock:
    """Clock that always answers the given date."""
    return lambda: today
