"""Worker for the trade lifecycle workflow.

Usage::

    import asyncio
    from tradebook.infra.config import TemporalConfig
    from tradebook.workflow.worker import build_default_manager, run_worker

    asyncio.run(run_worker(TemporalConfig.from_env(), build_default_manager()))
"""

from __future__ import annotations

from temporalio.client import Client
from temporalio.worker import Worker

from tradebook.infra.config import LifecycleConfig, TemporalConfig
from tradebook.infra.health import HealthCheckable, ensure_ready
from tradebook.infra.memory_adapter import InMemoryReferenceData, InMemoryTradeStore
from tradebook.lifecycle.manager import TradeLifecycleManager
from tradebook.logging_config import get_logger
from tradebook.validation.privileges import UserPrivilegeValidator
from tradebook.validation.trades import TradeValidator
from tradebook.workflow.activities import TradeActivities
from tradebook.workflow.converter import TRADEBOOK_DATA_CONVERTER
from tradebook.workflow.trade_workflow import TradeLifecycleWorkflow

log = get_logger("workflow.worker")


def build_default_manager(
    config: LifecycleConfig | None = None,
    reference_data: InMemoryReferenceData | None = None,
) -> TradeLifecycleManager:
    """Manager wired to in-memory stores."""
    cfg = config or LifecycleConfig()
    ref = reference_data or InMemoryReferenceData()
    return TradeLifecycleManager(
        store=InMemoryTradeStore(first_trade_id=cfg.first_trade_id),
        reference_data=ref,
        trade_validator=TradeValidator(ref, cfg),
        privilege_validator=UserPrivilegeValidator(ref),
        config=cfg,
    )


def build_worker(
    client: Client, config: TemporalConfig, manager: TradeLifecycleManager,
) -> Worker:
    activities = TradeActivities(manager)
    return Worker(
        client,
        task_queue=config.task_queue,
        workflows=[TradeLifecycleWorkflow],
        activities=[
            activities.create_trade,
            activities.amend_trade,
            activities.cancel_trade,
            activities.terminate_trade,
        ],
    )


async def run_worker(
    config: TemporalConfig,
    manager: TradeLifecycleManager,
    dependencies: tuple[HealthCheckable, ...] | None = None,
) -> None:
    """Check the stores, connect to Temporal and run the worker until interrupted.

    dependencies defaults to the manager's trade store. Raises
    WorkerNotReadyError without connecting when any of them is down.
    """
    ensure_ready(dependencies if dependencies is not None else (manager.store,))
    client = await Client.connect(
        config.target_host, namespace=config.namespace,
        data_converter=TRADEBOOK_DATA_CONVERTER,
    )
    log.info(
        "starting trade lifecycle worker",
        extra={"task_queue": config.task_queue, "namespace": config.namespace},
    )
    await build_worker(client, config, manager).run()
