"""Convenience factory for wiring the gateway from settings."""

from __future__ import annotations

from dataclasses import dataclass

import redis.asyncio as aioredis
import structlog

from pagerrelay.core.config import Settings
from pagerrelay.gateway.consumer import QueueConsumer
from pagerrelay.gateway.lock import ReconciliationLock
from pagerrelay.gateway.reconciler import AckReconciler
from pagerrelay.gateway.supervisor import Gateway
from pagerrelay.pagerduty.client import PagerDutyClient
from pagerrelay.registry.checks import CheckRegistry

logger = structlog.get_logger(__name__)


@dataclass
class GatewayStack:
    """The gateway plus the connections it needs closed on exit."""

    gateway: Gateway
    client: PagerDutyClient
    queue_redis: aioredis.Redis
    redis: aioredis.Redis

    async def close(self) -> None:
        for name, closer in (
            ("pagerduty", self.client.close),
            ("queue_redis", self.queue_redis.aclose),
            ("redis", self.redis.aclose),
        ):
            try:
                await closer()
            except Exception:
                logger.exception("gateway_close_error", resource=name)


async def create_gateway(settings: Settings) -> GatewayStack:
    """Build and connect every gateway component.

    The consumer gets its own Redis connection because its pop blocks
    indefinitely; the registry and lock share the other one. Queue items stay
    raw bytes so an undecodable payload fails inside the consumer's per-item
    handling rather than inside the pop.
    """
    queue_redis = aioredis.from_url(settings.redis.url, decode_responses=False)
    redis = aioredis.from_url(settings.redis.url, decode_responses=True)

    client = PagerDutyClient(settings.pagerduty)
    await client.connect()

    cfg = settings.gateway
    registry = CheckRegistry(redis, settings.registry)
    lock = ReconciliationLock(
        redis,
        name=cfg.lock_name,
        ttl_secs=cfg.lock_ttl_secs,
        owner=cfg.instance_id,
    )
    consumer = QueueConsumer(queue_redis, client, queue=cfg.queue)
    reconciler = AckReconciler(client, registry, lock, cfg, settings.pagerduty)

    gateway = Gateway(
        client=client,
        consumer=consumer,
        reconciler=reconciler,
        lock=lock,
        config=cfg,
    )
    return GatewayStack(
        gateway=gateway,
        client=client,
        queue_redis=queue_redis,
        redis=redis,
    )
