"""Read-mostly view of the monitoring system's check registry in Redis."""

from __future__ import annotations

from collections.abc import Collection

import redis.asyncio as aioredis
import structlog

from pagerrelay.core.config import RegistryConfig, get_settings
from pagerrelay.core.types import AcknowledgementEvent, PagerDutyCredentials
from pagerrelay.registry.exceptions import RegistryContractError

logger = structlog.get_logger(__name__)

_CREDENTIAL_FIELDS = ("subdomain", "username", "password")


def split_check(check: str) -> tuple[str, str]:
    """Split an ``entity:check`` id on the first colon."""
    entity, _, name = check.partition(":")
    return entity, name


def as_check_list(key: str, result: object) -> list[str]:
    """Coerce a ZRANGE reply into check ids.

    Raises:
        RegistryContractError: The reply is not a collection of members.
    """
    if isinstance(result, (str, bytes)) or not isinstance(result, Collection):
        raise RegistryContractError(
            f"{key} returned {type(result).__name__}, expected a collection: {result!r}"
        )
    return [str(check) for check in result]


class CheckRegistry:
    """Failing checks, maintenance windows, contacts and acknowledgements.

    Everything except :meth:`record_acknowledgement` is a read. Failing-check
    membership is owned upstream; this class never changes it.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        config: RegistryConfig | None = None,
    ) -> None:
        self._redis = redis
        self._config = config or get_settings().registry

    async def list_failing_checks(self) -> list[str]:
        """All checks the monitoring system currently considers failing."""
        key = self._config.failing_checks_key
        result = await self._redis.zrange(key, 0, -1)
        try:
            return as_check_list(key, result)
        except RegistryContractError as exc:
            logger.error("failing_checks_not_a_collection", key=key, error=str(exc))
            return []

    async def is_under_maintenance(self, check: str) -> bool:
        key = self._config.maintenance_key_template.format(check=check)
        return bool(await self._redis.exists(key))

    async def unacknowledged_failing_checks(self) -> list[str]:
        """Failing checks that are not already suppressed by maintenance."""
        checks = [
            check
            for check in await self.list_failing_checks()
            if not await self.is_under_maintenance(check)
        ]
        logger.debug("unacknowledged_failing_checks", checks=checks)
        return checks

    async def credentials_for(self, check: str) -> PagerDutyCredentials | None:
        """PagerDuty credentials of the first contact for *check* that has any.

        Contacts are gathered from both the entity-wide and the check-specific
        contact sets and tried in sorted order.
        """
        entity, name = split_check(check)
        keys = [
            template.format(entity=entity, check=name)
            for template in self._config.contacts_key_templates
        ]
        contact_ids = await self._redis.sunion(keys)

        for contact_id in sorted(contact_ids):
            key = self._config.credentials_key_template.format(contact_id=contact_id)
            fields = await self._redis.hgetall(key)
            if all(fields.get(f) for f in _CREDENTIAL_FIELDS):
                return PagerDutyCredentials(
                    subdomain=fields["subdomain"],
                    username=fields["username"],
                    password=fields["password"],
                )
        return None

    async def record_acknowledgement(self, check: str, summary: str) -> None:
        """Queue an acknowledgement event for the monitoring system.

        Duplicate acknowledgements are harmless; the processor deduplicates.
        """
        entity, name = split_check(check)
        event = AcknowledgementEvent(entity=entity, check=name, summary=summary)
        await self._redis.rpush(self._config.events_queue, event.model_dump_json())
        logger.info("acknowledgement_recorded", check=check, summary=summary)
