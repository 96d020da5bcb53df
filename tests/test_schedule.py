"""Tests for tradebook.cashflow.schedule -- period generation and valuation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta
from hypothesis import given
from hypothesis import strategies as st

from tradebook.cashflow.schedule import (
    calculate_cashflow_value,
    generate_cashflows,
    months_between,
    schedule_interval_months,
)
from tradebook.core.result import Err, Ok
from tradebook.trade.types import LegType, TradeLeg


def _leg(
    schedule: str = "1M",
    leg_type: LegType = LegType.FIXED,
    rate: Decimal | None = Decimal("3.5"),
    notional: Decimal = Decimal("10000000"),
    currency: str = "USD",
) -> TradeLeg:
    return TradeLeg(
        leg_id=1, trade_row_id=1, notional=notional, rate=rate, leg_type=leg_type,
        pay_receive="Pay", index_name="SOFR" if leg_type is LegType.FLOATING else None,
        currency=currency, schedule=schedule,
    )


class TestScheduleTokens:
    @pytest.mark.parametrize(
        ("token", "months"),
        [
            ("1M", 1), ("3M", 3), ("6M", 6), ("12M", 12), ("1Y", 12), ("2y", 24),
            ("Monthly", 1), ("quarterly", 3), ("Semi-annually", 6), ("ANNUALLY", 12),
        ],
    )
    def test_known_tokens(self, token: str, months: int) -> None:
        assert schedule_interval_months(token) == Ok(months)

    @pytest.mark.parametrize("token", [None, "", "weekly", "0M", "M3", "3D"])
    def test_unknown_tokens(self, token: str | None) -> None:
        assert isinstance(schedule_interval_months(token), Err)


class TestMonthsBetween:
    def test_one_year(self) -> None:
        assert months_between(date(2025, 1, 17), date(2026, 1, 17)) == 12

    def test_partial_month_truncates(self) -> None:
        assert months_between(date(2025, 1, 17), date(2025, 3, 10)) == 1

    def test_reverse_is_negative(self) -> None:
        assert months_between(date(2025, 6, 1), date(2025, 1, 1)) == -5

    def test_month_end_start_counts_clipped_month(self) -> None:
        assert months_between(date(2025, 1, 31), date(2025, 2, 28)) == 1
        assert months_between(date(2025, 1, 31), date(2025, 2, 27)) == 0


class TestValuation:
    def test_quarterly_fixed_value(self) -> None:
        assert calculate_cashflow_value(_leg("3M"), 3) == Decimal("87500.00")

    def test_monthly_fixed_value(self) -> None:
        assert calculate_cashflow_value(_leg("1M"), 1) == Decimal("29166.67")

    def test_floating_is_zero(self) -> None:
        leg = _leg(leg_type=LegType.FLOATING, rate=None)
        assert calculate_cashflow_value(leg, 3) == Decimal("0")

    def test_rounds_to_currency_minor_unit(self) -> None:
        value = calculate_cashflow_value(_leg(currency="JPY", notional=Decimal("1000001")), 1)
        assert value == Decimal("2917")


class TestGeneration:
    def test_monthly_year_yields_twelve(self) -> None:
        flows = list(generate_cashflows(_leg("1M"), date(2025, 1, 17), date(2026, 1, 17)))
        assert len(flows) == 12
        assert flows[0].period_start == date(2025, 1, 17)
        assert flows[-1].period_end == date(2026, 1, 17)

    def test_periods_are_contiguous(self) -> None:
        flows = list(generate_cashflows(_leg("3M"), date(2025, 1, 17), date(2026, 1, 17)))
        assert len(flows) == 4
        for prev, nxt in zip(flows, flows[1:], strict=False):
            assert prev.period_end == nxt.period_start
        assert all(cf.value == Decimal("87500.00") for cf in flows)

    def test_last_period_clipped(self) -> None:
        flows = list(generate_cashflows(_leg("3M"), date(2025, 1, 1), date(2025, 8, 15)))
        assert [cf.period_end for cf in flows] == [
            date(2025, 4, 1), date(2025, 7, 1), date(2025, 8, 15),
        ]

    def test_month_end_does_not_drift(self) -> None:
        flows = list(generate_cashflows(_leg("1M"), date(2025, 1, 31), date(2025, 5, 31)))
        assert [cf.period_end for cf in flows] == [
            date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30), date(2025, 5, 31),
        ]

    def test_floating_cashflows_pending_fixing(self) -> None:
        leg = _leg(leg_type=LegType.FLOATING, rate=None)
        flows = list(generate_cashflows(leg, date(2025, 1, 17), date(2025, 7, 17)))
        assert flows and all(cf.pending_fixing and cf.value == 0 for cf in flows)

    def test_payment_date_is_period_end(self) -> None:
        cf = next(generate_cashflows(_leg("6M"), date(2025, 1, 17), date(2026, 1, 17)))
        assert cf.payment_date == date(2025, 7, 17)

    def test_days_past_whole_month_start_no_period(self) -> None:
        flows = list(generate_cashflows(_leg("1M"), date(2025, 1, 17), date(2026, 1, 20)))
        assert len(flows) == 12
        assert flows[-1].period_start == date(2025, 12, 17)
        assert flows[-1].period_end == date(2026, 1, 17)
        assert all(cf.value == Decimal("29166.67") for cf in flows)

    def test_term_shorter_than_a_month(self) -> None:
        assert list(generate_cashflows(_leg("1M"), date(2025, 1, 17), date(2025, 2, 10))) == []

    def test_empty_when_no_accrual(self) -> None:
        assert list(generate_cashflows(_leg(), date(2025, 1, 17), date(2025, 1, 17))) == []

    def test_is_lazy(self) -> None:
        flows = generate_cashflows(_leg("1M"), date(2025, 1, 1), date(2125, 1, 1))
        assert next(flows).period_end == date(2025, 2, 1)

    def test_bad_schedule_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported schedule"):
            list(generate_cashflows(_leg("fortnightly"), date(2025, 1, 1), date(2025, 6, 1)))

    @given(
        st.dates(min_value=date(2020, 1, 1), max_value=date(2030, 12, 31)),
        st.integers(min_value=1, max_value=120),
        st.sampled_from([1, 3, 6, 12]),
    )
    def test_count_is_ceil_of_months(self, start: date, months: int, interval: int) -> None:
        end = start + relativedelta(months=months)
        flows = list(generate_cashflows(_leg(f"{interval}M"), start, end))
        assert len(flows) == -(-months // interval)
        assert flows[0].period_start == start
        assert flows[-1].period_end == end

    @given(
        st.dates(min_value=date(2020, 1, 1), max_value=date(2030, 12, 31)),
        st.dates(min_value=date(2020, 1, 1), max_value=date(2035, 12, 31)),
        st.sampled_from(["1M", "3M", "6M", "1Y"]),
    )
    def test_count_matches_whole_months_for_any_end(
        self, start: date, end: date, schedule: str,
    ) -> None:
        interval = schedule_interval_months(schedule).unwrap()
        flows = list(generate_cashflows(_leg(schedule), start, end))
        assert len(flows) == -(-max(months_between(start, end), 0) // interval)
        assert all(cf.period_start < cf.period_end <= end for cf in flows)
