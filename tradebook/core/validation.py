"""ValidationResult -- field-keyed accumulation of business-rule messages.

One instance per validation call. Mutable and not thread-safe; it never
leaves the request that created it except as a TradeValidationError value.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import final

from tradebook.core.errors import TradeValidationError
from tradebook.core.types import UtcDatetime


@final
class ValidationResult:
    """Ordered mapping of field name -> ordered error messages."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add_error(self, field: str, message: str) -> None:
        """Append a message for field. Earlier messages are kept."""
        self._errors.setdefault(field, []).append(message)

    def add_multiple_errors(
        self, other: ValidationResult | Mapping[str, Sequence[str]],
    ) -> None:
        """Merge another result's errors, keeping both sides' entries."""
        source = other.errors if isinstance(other, ValidationResult) else other
        for field, messages in source.items():
            for message in messages:
                self.add_error(field, message)

    def is_valid(self) -> bool:
        return not self._errors

    @property
    def errors(self) -> dict[str, tuple[str, ...]]:
        """Snapshot of field -> messages in insertion order."""
        return {field: tuple(messages) for field, messages in self._errors.items()}

    def messages_for(self, field: str) -> tuple[str, ...]:
        return tuple(self._errors.get(field, ()))

    def error_count(self) -> int:
        return sum(len(messages) for messages in self._errors.values())

    def to_error(
        self,
        source: str,
        message: str = "Trade validation failed",
    ) -> TradeValidationError:
        return TradeValidationError(
            message=message,
            code="TRADE_VALIDATION",
            timestamp=UtcDatetime.now(),
            source=source,
            errors=tuple(self.errors.items()),
        )

    def __repr__(self) -> str:
        return f"ValidationResult({self._errors!r})"
