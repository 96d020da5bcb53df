"""tradebook.infra -- Persistence protocols, adapters, health and configuration."""

from tradebook.infra.config import LifecycleConfig as LifecycleConfig
from tradebook.infra.config import LoggingConfig as LoggingConfig
from tradebook.infra.config import TemporalConfig as TemporalConfig
from tradebook.infra.health import HealthCheckable as HealthCheckable
from tradebook.infra.health import HealthStatus as HealthStatus
from tradebook.infra.health import SystemHealth as SystemHealth
from tradebook.infra.health import WorkerNotReadyError as WorkerNotReadyError
from tradebook.infra.health import ensure_ready as ensure_ready
from tradebook.infra.health import liveness_check as liveness_check
from tradebook.infra.health import readiness_check as readiness_check
from tradebook.infra.memory_adapter import (
    InMemoryAdditionalInfoStore as InMemoryAdditionalInfoStore,
)
from tradebook.infra.memory_adapter import InMemoryReferenceData as InMemoryReferenceData
from tradebook.infra.memory_adapter import InMemoryTradeStore as InMemoryTradeStore
from tradebook.infra.protocols import AdditionalInfoStore as AdditionalInfoStore
from tradebook.infra.protocols import ReferenceDataStore as ReferenceDataStore
from tradebook.infra.protocols import TradeStore as TradeStore
