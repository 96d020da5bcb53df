"""tradebook.core -- result, error and validation primitives."""

from tradebook.core.errors import (
    AuthorizationError as AuthorizationError,
)
from tradebook.core.errors import (
    ConcurrentModificationError as ConcurrentModificationError,
)
from tradebook.core.errors import (
    IllegalTransitionError as IllegalTransitionError,
)
from tradebook.core.errors import (
    LifecycleError as LifecycleError,
)
from tradebook.core.errors import (
    PersistenceError as PersistenceError,
)
from tradebook.core.errors import (
    TradebookError as TradebookError,
)
from tradebook.core.errors import (
    TradeNotFoundError as TradeNotFoundError,
)
from tradebook.core.errors import (
    TradeValidationError as TradeValidationError,
)
from tradebook.core.errors import (
    http_status as http_status,
)
from tradebook.core.money import (
    TRADEBOOK_DECIMAL_CONTEXT as TRADEBOOK_DECIMAL_CONTEXT,
)
from tradebook.core.money import (
    round_to_minor_unit as round_to_minor_unit,
)
from tradebook.core.result import (
    Err as Err,
)
from tradebook.core.result import (
    Ok as Ok,
)
from tradebook.core.result import (
    Result as Result,
)
from tradebook.core.result import (
    sequence as sequence,
)
from tradebook.core.result import (
    unwrap as unwrap,
)
from tradebook.core.types import (
    Clock as Clock,
)
from tradebook.core.types import (
    UtcDatetime as UtcDatetime,
)
from tradebook.core.types import (
    fixed_clock as fixed_clock,
)
from tradebook.core.types import (
    system_today as system_today,
)
from tradebook.core.validation import (
    ValidationResult as ValidationResult,
)
