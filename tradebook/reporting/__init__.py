"""tradebook.reporting -- summaries and search over active trades."""

from tradebook.reporting.search import DEFAULT_PAGE as DEFAULT_PAGE
from tradebook.reporting.search import DEFAULT_PAGE_SIZE as DEFAULT_PAGE_SIZE
from tradebook.reporting.search import TradeFilter as TradeFilter
from tradebook.reporting.search import TradePage as TradePage
from tradebook.reporting.search import parse_trade_query as parse_trade_query
from tradebook.reporting.search import query_trades as query_trades
from tradebook.reporting.search import search_trades as search_trades
from tradebook.reporting.search import search_trades_page as search_trades_page
from tradebook.reporting.summary import DailySummary as DailySummary
from tradebook.reporting.summary import count_by_counterparty as count_by_counterparty
from tradebook.reporting.summary import count_by_status as count_by_status
from tradebook.reporting.summary import daily_summary as daily_summary
from tradebook.reporting.summary import notional_by_currency as notional_by_currency
from tradebook.reporting.summary import notional_for_date as notional_for_date
from tradebook.reporting.summary import trade_count_for_date as trade_count_for_date
from tradebook.reporting.summary import trades_by_book as trades_by_book
from tradebook.reporting.summary import trades_by_trader as trades_by_trader
