"""Queue consumer — pops notifications and forwards them to PagerDuty."""

from __future__ import annotations

import json
from enum import StrEnum

import redis.asyncio as aioredis
import structlog
from pydantic import ValidationError

from pagerrelay.core.types import Notification, NotificationType
from pagerrelay.pagerduty.client import PagerDutyClient
from pagerrelay.pagerduty.exceptions import PagerDutyError, UnmappedTypeError
from pagerrelay.pagerduty.translator import translate

logger = structlog.get_logger(__name__)

SHUTDOWN_PAYLOAD = json.dumps({"notification_type": NotificationType.SHUTDOWN.value})


class ConsumerState(StrEnum):
    RUNNING = "running"
    STOPPING = "stopping"


class QueueConsumer:
    """Drains the notification queue until a shutdown is requested.

    Each popped item is forwarded at most once: a failed send is logged and
    dropped, never re-queued. The only way to stop it is the shutdown
    sentinel on its own queue, so the consumer that exits is always the one
    that popped the sentinel and none is left behind for the next instance.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        client: PagerDutyClient,
        queue: str,
    ) -> None:
        self._redis = redis
        self._client = client
        self._queue = queue
        self._state = ConsumerState.RUNNING
        self._forwarded = 0
        self._failed = 0

    @property
    def state(self) -> ConsumerState:
        return self._state

    @property
    def forwarded(self) -> int:
        """Events PagerDuty accepted with a 2xx status."""
        return self._forwarded

    @property
    def failed(self) -> int:
        """Items that were popped but not forwarded successfully."""
        return self._failed

    async def request_stop(self) -> None:
        """Stop after the in-flight item, ahead of any backlog.

        The sentinel goes to the head of the queue, so with several consumers
        on one queue whichever pops next is the one that stops.
        """
        await self._redis.lpush(self._queue, SHUTDOWN_PAYLOAD)

    async def enqueue_shutdown(self) -> None:
        """Stop once everything already queued has been forwarded."""
        await self._redis.rpush(self._queue, SHUTDOWN_PAYLOAD)

    async def run(self) -> None:
        """Consume until a shutdown notification is popped."""
        self._state = ConsumerState.RUNNING
        while True:
            logger.debug("queue_blocking_pop", queue=self._queue)
            # timeout=0 blocks until an item arrives
            _, payload = await self._redis.blpop([self._queue], timeout=0)
            if not await self.handle(payload):
                break
        self._state = ConsumerState.STOPPING
        logger.info(
            "queue_consumer_stopped",
            queue=self._queue,
            forwarded=self._forwarded,
            failed=self._failed,
        )

    async def handle(self, payload: str | bytes) -> bool:
        """Process one raw queue item. Returns False on shutdown."""
        try:
            notification = Notification.model_validate_json(payload)
        except ValidationError:
            self._failed += 1
            logger.exception("notification_decode_error", payload=str(payload)[:500])
            return True

        logger.debug("notification_popped", notification=notification.model_dump())

        if notification.is_shutdown:
            logger.info("shutdown_notification_received", queue=self._queue)
            return False

        try:
            event = translate(notification)
        except UnmappedTypeError:
            self._failed += 1
            logger.exception("notification_unmapped", event_id=notification.event_id)
            return True

        try:
            status, body = await self._client.send_event(event)
        except PagerDutyError:
            self._failed += 1
            logger.exception(
                "pagerduty_forward_error",
                incident_key=event.incident_key,
                event_type=event.event_type,
            )
            return True

        if 200 <= status < 300:
            self._forwarded += 1
            logger.info(
                "notification_forwarded",
                incident_key=event.incident_key,
                event_type=event.event_type,
                status=status,
            )
        else:
            self._failed += 1
            logger.warning(
                "pagerduty_forward_rejected",
                incident_key=event.incident_key,
                event_type=event.event_type,
                status=status,
                response=body,
            )
        return True
