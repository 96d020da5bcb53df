"""Role and ownership based authorization of trade operations.

  SUPERUSER      every operation
  TRADER_SALES   every operation, only on trades where they are the trader
  MO             AMEND, VIEW
  SUPPORT        VIEW
  anything else  nothing

Role names and login ids compare case-insensitively. Inactive users and
users without a role are denied.
"""

from __future__ import annotations

from tradebook.core.result import Err
from tradebook.infra.protocols import ReferenceDataStore
from tradebook.logging_config import get_logger
from tradebook.trade.types import OperationType, TradeContext, UserRole

log = get_logger("validation.privileges")

_ROLE_OPERATIONS: dict[UserRole, frozenset[OperationType]] = {
    UserRole.SUPERUSER: frozenset(OperationType),
    UserRole.MO: frozenset({OperationType.AMEND, OperationType.VIEW}),
    UserRole.SUPPORT: frozenset({OperationType.VIEW}),
}


def _parse_role(raw: str | None) -> UserRole | None:
    if raw is None:
        return None
    try:
        return UserRole(raw.strip().upper())
    except ValueError:
        return None


class UserPrivilegeValidator:
    def __init__(self, reference_data: ReferenceDataStore) -> None:
        self._reference_data = reference_data

    def validate_user_privileges(
        self,
        user_id: str | None,
        operation: OperationType | str | None,
        trade_context: TradeContext | None,
    ) -> bool:
        """True when user_id may perform operation on the trade described by trade_context."""
        if user_id is None or operation is None or trade_context is None:
            return False

        op = OperationType.parse(operation)
        if op is None:
            return False

        lookup = self._reference_data.find_user(user_id)
        if isinstance(lookup, Err):
            log.warning(
                "user lookup failed, denying",
                extra={"user_id": user_id, "error_code": lookup.error.code},
            )
            return False

        user = lookup.value
        if user is None or not user.active:
            return False
        role = _parse_role(user.role)
        if role is None:
            return False

        if role is UserRole.TRADER_SALES:
            owner = trade_context.trader_user_name
            return owner is not None and owner.casefold() == user_id.casefold()
        return op in _ROLE_OPERATIONS.get(role, frozenset())
