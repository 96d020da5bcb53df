"""Cashflow schedule generation and valuation for a swap leg.

Periods step from the accrual start by the leg's schedule interval. A leg
has ceil(whole months / interval) periods and the last one is clipped to
the accrual end; days past the last whole month do not start a period.
Fixed legs accrue notional * rate% * interval/12. Floating legs are valued
at zero and flagged pending_fixing, since no rate fixings are sourced here.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import date
from decimal import Decimal, localcontext

from dateutil.relativedelta import relativedelta

from tradebook.core.money import TRADEBOOK_DECIMAL_CONTEXT, round_to_minor_unit
from tradebook.core.result import Err, Ok
from tradebook.trade.types import Cashflow, LegType, TradeLeg

_WORD_INTERVALS: dict[str, int] = {
    "monthly": 1,
    "quarterly": 3,
    "semi-annually": 6,
    "semiannually": 6,
    "semi-annual": 6,
    "annually": 12,
    "annual": 12,
    "yearly": 12,
}

_TENOR = re.compile(r"^(\d+)\s*([MY])$")


def schedule_interval_months(token: str | None) -> Ok[int] | Err[str]:
    """Months per period for a schedule token ("1M", "3M", "1Y", "Quarterly", ...)."""
    if token is None or not token.strip():
        return Err("Schedule is required")
    normalized = token.strip()
    words = _WORD_INTERVALS.get(normalized.lower())
    if words is not None:
        return Ok(words)
    tenor = _TENOR.match(normalized.upper())
    if tenor is None:
        return Err(f"Unsupported schedule: {token}")
    count = int(tenor.group(1))
    months = count * 12 if tenor.group(2) == "Y" else count
    if months <= 0:
        return Err(f"Unsupported schedule: {token}")
    return Ok(months)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (negative if end < start).

    A month counts once start + n months is on or before end, so 31 Jan to
    28 Feb is one month.
    """
    delta = relativedelta(end, start)
    months = delta.years * 12 + delta.months
    if months < 0:
        return months
    while start + relativedelta(months=months + 1) <= end:
        months += 1
    return months


def calculate_cashflow_value(leg: TradeLeg, interval_months: int) -> Decimal:
    """Value of one full period of the leg, rounded to the currency minor unit."""
    if leg.leg_type is LegType.FLOATING or leg.rate is None:
        return Decimal("0")
    with localcontext(TRADEBOOK_DECIMAL_CONTEXT):
        raw = leg.notional * (leg.rate / Decimal(100)) * (Decimal(interval_months) / Decimal(12))
    return round_to_minor_unit(raw, leg.currency)


def _period_dates(
    start: date, end: date, interval_months: int,
) -> Iterator[tuple[date, date]]:
    # ceil(whole months / interval) periods; offsets are taken from start
    # so month-end dates do not drift.
    count = -(-max(months_between(start, end), 0) // interval_months)
    current = start
    for index in range(1, count + 1):
        next_date = start + relativedelta(months=interval_months * index)
        yield current, min(next_date, end)
        current = next_date


def generate_cashflows(
    leg: TradeLeg, period_start: date, period_end: date,
) -> Iterator[Cashflow]:
    """Lazily yield the leg's cashflows over [period_start, period_end).

    Raises ValueError for a schedule token that cannot be parsed; the
    lifecycle manager checks schedules before generating.
    """
    parsed = schedule_interval_months(leg.schedule)
    if isinstance(parsed, Err):
        raise ValueError(parsed.error)
    interval = parsed.value

    value = calculate_cashflow_value(leg, interval)
    pending = leg.leg_type is LegType.FLOATING
    for start, end in _period_dates(period_start, period_end, interval):
        yield Cashflow(
            leg_id=leg.leg_id,
            period_start=start,
            period_end=end,
            value=value,
            currency=leg.currency,
            pending_fixing=pending,
        )
