"""tradebook.trade -- trade, leg, cashflow and reference data types."""

from tradebook.trade.types import AdditionalInfo as AdditionalInfo
from tradebook.trade.types import ApplicationUser as ApplicationUser
from tradebook.trade.types import Book as Book
from tradebook.trade.types import Cashflow as Cashflow
from tradebook.trade.types import Counterparty as Counterparty
from tradebook.trade.types import EntityType as EntityType
from tradebook.trade.types import FieldType as FieldType
from tradebook.trade.types import LegType as LegType
from tradebook.trade.types import OperationType as OperationType
from tradebook.trade.types import Trade as Trade
from tradebook.trade.types import TradeInput as TradeInput
from tradebook.trade.types import TradeLeg as TradeLeg
from tradebook.trade.types import TradeLegInput as TradeLegInput
from tradebook.trade.types import TradeStatus as TradeStatus
from tradebook.trade.types import UserRole as UserRole
