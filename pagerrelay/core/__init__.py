"""Core module — config, types, logging."""

from pagerrelay.core.config import Settings, get_settings, load_settings, reset_settings
from pagerrelay.core.logging import setup_logging
from pagerrelay.core.types import (
    AcknowledgementEvent,
    AcknowledgementQuery,
    IncidentEvent,
    IncidentEventType,
    Notification,
    NotificationType,
    PagerDutyCredentials,
    ReconciliationPass,
)

__all__ = [
    "AcknowledgementEvent",
    "AcknowledgementQuery",
    "IncidentEvent",
    "IncidentEventType",
    "Notification",
    "NotificationType",
    "PagerDutyCredentials",
    "ReconciliationPass",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
