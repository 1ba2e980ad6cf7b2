"""Acknowledgement reconciliation — mirror PagerDuty acks into the registry."""

from __future__ import annotations

import asyncio
import time

import structlog

from pagerrelay.core.config import GatewayConfig, PagerDutyConfig
from pagerrelay.core.types import AcknowledgementQuery, ReconciliationPass
from pagerrelay.gateway.lock import ReconciliationLock
from pagerrelay.pagerduty.client import PagerDutyClient
from pagerrelay.pagerduty.exceptions import PagerDutyError
from pagerrelay.registry.checks import CheckRegistry

logger = structlog.get_logger(__name__)


class AckReconciler:
    """Periodically looks up failing checks in PagerDuty and records acks.

    Nothing is remembered between passes: a check that is not acknowledged
    yet (or whose lookup failed) is simply asked about again next tick.

    Usage::

        reconciler = AckReconciler(client, registry, lock, gateway_cfg, pd_cfg)
        await reconciler.start()
        # ...
        await reconciler.stop()
    """

    def __init__(
        self,
        client: PagerDutyClient,
        registry: CheckRegistry,
        lock: ReconciliationLock,
        config: GatewayConfig,
        pagerduty_config: PagerDutyConfig | None = None,
    ) -> None:
        self._client = client
        self._registry = registry
        self._lock = lock
        self._config = config
        self._pd_config = pagerduty_config or PagerDutyConfig()
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._wakeup = asyncio.Event()
        self._pass_count = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pass_count(self) -> int:
        """Number of passes run (skipped passes included)."""
        return self._pass_count

    # ── Lifecycle ────────────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._wakeup.clear()
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "ack_reconciler_started",
            interval=self._config.ack_poll_interval_secs,
            lock=self._lock.name,
        )

    async def stop(self) -> None:
        """Stop after the in-flight pass (if any) has finished."""
        self._running = False
        self._wakeup.set()
        if self._task is not None:
            await self._task
            self._task = None
        logger.info("ack_reconciler_stopped", pass_count=self._pass_count)

    async def _loop(self) -> None:
        interval = self._config.ack_poll_interval_secs
        while self._running:
            started = time.monotonic()
            try:
                await self.run_once()
            except Exception:
                logger.exception("ack_reconciliation_error")

            remaining = max(0.0, interval - (time.monotonic() - started))
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=remaining)
            except TimeoutError:
                pass

    # ── Single pass ──────────────────────────────────────────────

    async def run_once(self) -> ReconciliationPass:
        """Run one reconciliation pass under the cross-instance lock."""
        self._pass_count += 1
        if not await self._lock.try_acquire():
            logger.debug("ack_reconciliation_skipped", reason="lock_held", lock=self._lock.name)
            return ReconciliationPass(skipped=True)

        result = ReconciliationPass()
        try:
            logger.debug("ack_reconciliation_started")
            checks = await self._registry.unacknowledged_failing_checks()
            for check in checks:
                result.checked += 1
                try:
                    if await self._reconcile_check(check):
                        result.acknowledged.append(check)
                except PagerDutyError as exc:
                    result.failed.append(check)
                    logger.warning("pagerduty_ack_query_failed", check=check, error=str(exc))
                except Exception:
                    result.failed.append(check)
                    logger.exception("ack_reconciliation_check_error", check=check)
        finally:
            await self._lock.release()

        logger.info(
            "ack_reconciliation_finished",
            checked=result.checked,
            acknowledged=result.acknowledged,
            failed=len(result.failed),
        )
        return result

    async def _reconcile_check(self, check: str) -> bool:
        credentials = await self._registry.credentials_for(check)
        if credentials is None:
            logger.warning("pagerduty_credentials_missing", check=check)
            return False

        query = AcknowledgementQuery.for_check(
            credentials,
            check,
            lookback_days=self._pd_config.ack_lookback_days,
            lookahead_days=self._pd_config.ack_lookahead_days,
        )
        if not await self._client.query_acknowledged(query):
            logger.debug("check_not_acknowledged", check=check)
            return False

        logger.debug("check_acknowledged_in_pagerduty", check=check)
        await self._registry.record_acknowledgement(check, self._config.ack_summary)
        return True
