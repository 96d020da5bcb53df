"""tradebook.cashflow -- schedule generation and valuation of swap legs."""

from tradebook.cashflow.schedule import calculate_cashflow_value as calculate_cashflow_value
from tradebook.cashflow.schedule import generate_cashflows as generate_cashflows
from tradebook.cashflow.schedule import months_between as months_between
from tradebook.cashflow.schedule import schedule_interval_months as schedule_interval_months
