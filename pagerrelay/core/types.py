"""Domain types shared by the queue consumer, PagerDuty client and registry."""

from __future__ import annotations

import datetime
import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class NotificationType(StrEnum):
    """Kind of notification travelling over the work queue."""

    PROBLEM = "problem"
    RECOVERY = "recovery"
    ACKNOWLEDGEMENT = "acknowledgement"
    SHUTDOWN = "shutdown"


class IncidentEventType(StrEnum):
    """PagerDuty create-event types."""

    TRIGGER = "trigger"
    ACKNOWLEDGE = "acknowledge"
    RESOLVE = "resolve"
    NOP = "nop"  # only used by the connectivity self-test


class Notification(BaseModel):
    """A monitoring state change (or shutdown request) popped off the queue.

    The shutdown sentinel carries only ``notification_type``, so every other
    field defaults to an empty string.
    """

    notification_type: NotificationType
    event_id: str = ""
    state: str = ""
    summary: str = ""
    address: str = ""

    @field_validator("notification_type", mode="before")
    @classmethod
    def _lowercase_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def entity(self) -> str:
        return self.event_id.partition(":")[0]

    @property
    def check(self) -> str:
        return self.event_id.partition(":")[2]

    @property
    def is_shutdown(self) -> bool:
        return self.notification_type == NotificationType.SHUTDOWN


class IncidentEvent(BaseModel):
    """Body of a PagerDuty create-event request."""

    model_config = ConfigDict(frozen=True)

    service_key: str
    incident_key: str
    event_type: IncidentEventType
    description: str

    @property
    def routing_key(self) -> str:
        return self.service_key


class PagerDutyCredentials(BaseModel):
    """Per-contact PagerDuty REST API credentials."""

    subdomain: str
    username: str
    password: SecretStr


class AcknowledgementQuery(BaseModel):
    """Everything needed to ask PagerDuty whether a check is acknowledged."""

    subdomain: str
    username: str
    password: SecretStr
    incident_key: str
    since: datetime.datetime
    until: datetime.datetime

    @classmethod
    def for_check(
        cls,
        credentials: PagerDutyCredentials,
        check: str,
        now: datetime.datetime | None = None,
        lookback_days: int = 7,
        lookahead_days: int = 1,
    ) -> AcknowledgementQuery:
        """Build the query for *check*.

        The window reaches a day into the future to absorb clock skew
        between us and PagerDuty.
        """
        now = now or datetime.datetime.now(datetime.UTC)
        return cls(
            subdomain=credentials.subdomain,
            username=credentials.username,
            password=credentials.password,
            incident_key=check,
            since=now - datetime.timedelta(days=lookback_days),
            until=now + datetime.timedelta(days=lookahead_days),
        )

    def params(self) -> dict[str, str]:
        """Query-string parameters for the incidents endpoint."""
        return {
            "fields": "incident_number,status",
            "since": self.since.isoformat(),
            "until": self.until.isoformat(),
            "incident_key": self.incident_key,
            "status": "acknowledged",
        }


class AcknowledgementEvent(BaseModel):
    """Acknowledgement pushed back onto the monitoring system's event list."""

    type: str = "action"
    state: str = "acknowledgement"
    entity: str
    check: str
    summary: str
    time: int = Field(default_factory=lambda: int(time.time()))


class ReconciliationPass(BaseModel):
    """Outcome of a single acknowledgement reconciliation pass."""

    skipped: bool = False
    checked: int = 0
    acknowledged: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
