"""tradebook.validation -- business-rule, leg-pair and privilege validators."""

from tradebook.validation.legs import (
    validate_trade_leg_consistency as validate_trade_leg_consistency,
)
from tradebook.validation.privileges import UserPrivilegeValidator as UserPrivilegeValidator
from tradebook.validation.trades import TradeValidator as TradeValidator
