"""Decimal context and currency precision for cashflow arithmetic.

All valuation runs under TRADEBOOK_DECIMAL_CONTEXT (prec=28) and cashflow
values are quantized ROUND_HALF_UP to the currency's ISO 4217 minor unit.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal, DivisionByZero, InvalidOperation, Overflow

TRADEBOOK_DECIMAL_CONTEXT = Context(
    prec=28,
    rounding=ROUND_HALF_UP,
    Emin=-999999,
    Emax=999999,
    capitals=1,
    clamp=0,
    flags=[],
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

_ISO4217_MINOR_UNITS: dict[str, int] = {
    "USD": 2, "EUR": 2, "GBP": 2, "CHF": 2, "CAD": 2, "AUD": 2, "SEK": 2,
    "NOK": 2, "DKK": 2, "HKD": 2, "SGD": 2, "NZD": 2,
    "JPY": 0, "KRW": 0,
    "BHD": 3, "KWD": 3, "OMR": 3,
}

DEFAULT_MINOR_UNITS = 2


def minor_units(currency: str | None) -> int:
    """Minor-unit digits for a currency code. Unknown or missing codes use 2."""
    if not currency:
        return DEFAULT_MINOR_UNITS
    return _ISO4217_MINOR_UNITS.get(currency.upper(), DEFAULT_MINOR_UNITS)


def round_to_minor_unit(amount: Decimal, currency: str | None) -> Decimal:
    """Quantize ROUND_HALF_UP to the currency's minor unit."""
    quantizer = Decimal(10) ** -minor_units(currency)
    return amount.quantize(quantizer, rounding=ROUND_HALF_UP, context=TRADEBOOK_DECIMAL_CONTEXT)
