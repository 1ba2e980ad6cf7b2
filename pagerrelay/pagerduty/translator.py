"""Notification → PagerDuty incident event mapping."""

from __future__ import annotations

from pagerrelay.core.types import (
    IncidentEvent,
    IncidentEventType,
    Notification,
    NotificationType,
)
from pagerrelay.pagerduty.exceptions import UnmappedTypeError

_EVENT_TYPES: dict[NotificationType, IncidentEventType] = {
    NotificationType.PROBLEM: IncidentEventType.TRIGGER,
    NotificationType.RECOVERY: IncidentEventType.RESOLVE,
    NotificationType.ACKNOWLEDGEMENT: IncidentEventType.ACKNOWLEDGE,
}


def _condition(notification: Notification) -> str:
    if notification.notification_type == NotificationType.ACKNOWLEDGEMENT:
        return "has been acknowledged"
    return f"is {notification.state.upper()}"


def format_description(notification: Notification) -> str:
    """Human-readable incident description, e.g.
    ``PROBLEM - "ping" on web01 is CRITICAL - timeout``.
    """
    return (
        f"{notification.notification_type.value.upper()} - "
        f'"{notification.check}" on {notification.entity} '
        f"{_condition(notification)} - {notification.summary}"
    )


def translate(notification: Notification) -> IncidentEvent:
    """Map a queue notification to a PagerDuty incident event.

    The incident key is the notification's event id verbatim; acknowledgement
    reconciliation relies on that to find the check again.

    Raises:
        UnmappedTypeError: for shutdown (or any other unmapped) notifications.
    """
    event_type = _EVENT_TYPES.get(notification.notification_type)
    if event_type is None:
        raise UnmappedTypeError(
            f"no PagerDuty event for notification type "
            f"{notification.notification_type.value!r}"
        )

    return IncidentEvent(
        service_key=notification.address,
        incident_key=notification.event_id,
        event_type=event_type,
        description=format_description(notification),
    )
