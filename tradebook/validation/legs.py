"""Leg-pair consistency rules for a two-legged swap.

Every rule is evaluated; none short-circuits. All messages go under the
tradeLegs field.
"""

from __future__ import annotations

from collections.abc import Sequence

from tradebook.core.validation import ValidationResult
from tradebook.trade.types import LegType, TradeLegInput

LEGS_FIELD = "tradeLegs"

MSG_OPPOSITE_FLAGS = "Legs must have opposite pay/receive flags"
MSG_FLOATING_INDEX = "Floating legs must have an index specified"
MSG_FIXED_RATE = "Fixed legs must have rate greater than 0"


def _same_flag(first: str | None, second: str | None) -> bool:
    if first is None or second is None:
        return False
    return first.strip().casefold() == second.strip().casefold()


def validate_trade_leg_consistency(legs: Sequence[TradeLegInput]) -> ValidationResult:
    """Check a pair of legs. Raises ValueError unless exactly two are given."""
    if len(legs) != 2:
        raise ValueError(f"validate_trade_leg_consistency expects 2 legs, got {len(legs)}")

    result = ValidationResult()
    first, second = legs

    if _same_flag(first.pay_receive, second.pay_receive):
        result.add_error(LEGS_FIELD, MSG_OPPOSITE_FLAGS)

    for leg in legs:
        match LegType.parse(leg.leg_type):
            case LegType.FLOATING:
                if leg.index_name is None or not leg.index_name.strip():
                    result.add_error(LEGS_FIELD, MSG_FLOATING_INDEX)
            case LegType.FIXED:
                if leg.rate is None or leg.rate <= 0:
                    result.add_error(LEGS_FIELD, MSG_FIXED_RATE)
            case None:
                pass

    return result
