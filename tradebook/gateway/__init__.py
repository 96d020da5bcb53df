"""tradebook.gateway -- transport payload parsing."""

from tradebook.gateway.parser import parse_trade_submission as parse_trade_submission
