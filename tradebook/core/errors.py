"""Error value hierarchy for the trade lifecycle.

Expected failures are frozen dataclass values, never exceptions. Base class
TradebookError; each @final subclass is one externally observable failure
category, so a transport maps it to exactly one response.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from tradebook.core.types import UtcDatetime


@dataclass(frozen=True, slots=True)
class TradebookError:
    """Base error value. NOT @final; has subclasses."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> TradebookError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.value.isoformat(),
            "source": self.source,
        }


@final
@dataclass(frozen=True, slots=True)
class TradeValidationError(TradebookError):
    """One or more business rules failed. Field -> ordered messages."""

    errors: tuple[tuple[str, tuple[str, ...]], ...]

    def field_errors(self) -> dict[str, list[str]]:
        return {name: list(messages) for name, messages in self.errors}

    def messages_for(self, field_name: str) -> tuple[str, ...]:
        for name, messages in self.errors:
            if name == field_name:
                return messages
        return ()

    def to_dict(self) -> dict[str, object]:
        return {**TradebookError.to_dict(self), "errors": self.field_errors()}


@final
@dataclass(frozen=True, slots=True)
class AuthorizationError(TradebookError):
    """Caller's role or ownership does not permit the operation."""

    user_id: str
    operation: str

    def to_dict(self) -> dict[str, object]:
        return {
            **TradebookError.to_dict(self),
            "user_id": self.user_id,
            "operation": self.operation,
        }


@final
@dataclass(frozen=True, slots=True)
class TradeNotFoundError(TradebookError):
    """No active version exists for the business key."""

    trade_id: int

    def to_dict(self) -> dict[str, object]:
        return {**TradebookError.to_dict(self), "trade_id": self.trade_id}


@final
@dataclass(frozen=True, slots=True)
class IllegalTransitionError(TradebookError):
    """State transition is not allowed."""

    from_state: str
    to_state: str

    def to_dict(self) -> dict[str, object]:
        return {
            **TradebookError.to_dict(self),
            "from_state": self.from_state,
            "to_state": self.to_state,
        }


@final
@dataclass(frozen=True, slots=True)
class ConcurrentModificationError(TradebookError):
    """The active version moved between read and write."""

    trade_id: int
    expected_version: int
    actual_version: int | None

    def to_dict(self) -> dict[str, object]:
        return {
            **TradebookError.to_dict(self),
            "trade_id": self.trade_id,
            "expected_version": self.expected_version,
            "actual_version": self.actual_version,
        }


@final
@dataclass(frozen=True, slots=True)
class PersistenceError(TradebookError):
    """Storage operation failed."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**TradebookError.to_dict(self), "operation": self.operation}


type LifecycleError = (
    TradeValidationError
    | AuthorizationError
    | TradeNotFoundError
    | IllegalTransitionError
    | ConcurrentModificationError
    | PersistenceError
)


def http_status(error: TradebookError) -> int:
    """Status code a transport should answer with for this error category."""
    match error:
        case TradeValidationError():
            return 400
        case AuthorizationError():
            return 403
        case TradeNotFoundError():
            return 404
        case IllegalTransitionError() | ConcurrentModificationError():
            return 409
        case _:
            return 500


def trade_not_found(trade_id: int, source: str) -> TradeNotFoundError:
    return TradeNotFoundError(
        message=f"Trade not found: {trade_id}",
        code="TRADE_NOT_FOUND",
        timestamp=UtcDatetime.now(),
        source=source,
        trade_id=trade_id,
    )


def forbidden(user_id: str, operation: str, source: str) -> AuthorizationError:
    return AuthorizationError(
        message=f"User {user_id} is not permitted to {operation} this trade",
        code="FORBIDDEN",
        timestamp=UtcDatetime.now(),
        source=source,
        user_id=user_id,
        operation=operation,
    )
