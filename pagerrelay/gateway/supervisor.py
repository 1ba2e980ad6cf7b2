"""Gateway supervisor — startup self-test and the two gateway loops."""

from __future__ import annotations

import structlog

from pagerrelay.core.config import GatewayConfig
from pagerrelay.gateway.consumer import QueueConsumer
from pagerrelay.gateway.exceptions import StartupFatalError
from pagerrelay.gateway.lock import ReconciliationLock
from pagerrelay.gateway.reconciler import AckReconciler
from pagerrelay.pagerduty.client import PagerDutyClient

logger = structlog.get_logger(__name__)


class Gateway:
    """Owns the consumer and reconciler for the lifetime of the process.

    The two loops share no in-process state; they only meet in Redis and
    PagerDuty. :meth:`run` returns once the consumer has stopped.
    """

    def __init__(
        self,
        client: PagerDutyClient,
        consumer: QueueConsumer,
        reconciler: AckReconciler,
        lock: ReconciliationLock,
        config: GatewayConfig,
    ) -> None:
        self._client = client
        self._consumer = consumer
        self._reconciler = reconciler
        self._lock = lock
        self._config = config

    @property
    def consumer(self) -> QueueConsumer:
        return self._consumer

    @property
    def reconciler(self) -> AckReconciler:
        return self._reconciler

    async def run(self) -> None:
        """Self-test, then run both loops until the consumer stops.

        Raises:
            StartupFatalError: PagerDuty did not accept the NOP event.
        """
        logger.info("gateway_starting", queue=self._config.queue)
        if not await self._client.test_connection():
            raise StartupFatalError("Can't connect to the PagerDuty API")

        if self._config.clear_lock_on_start:
            await self._lock.clear()

        await self._reconciler.start()
        try:
            await self._consumer.run()
        finally:
            await self._reconciler.stop()
        logger.info(
            "gateway_stopped",
            forwarded=self._consumer.forwarded,
            failed=self._consumer.failed,
            reconciliation_passes=self._reconciler.pass_count,
        )

    async def request_stop(self) -> None:
        """Ask the consumer to stop after its in-flight item."""
        await self._consumer.request_stop()
