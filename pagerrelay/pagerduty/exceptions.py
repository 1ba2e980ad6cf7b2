"""Exception hierarchy for the PagerDuty client and translator."""

from __future__ import annotations


class PagerDutyError(Exception):
    """Base exception for all PagerDuty errors."""


class PagerDutyTransportError(PagerDutyError):
    """Failed to reach the PagerDuty API (connect, timeout, protocol)."""


class PagerDutyDecodeError(PagerDutyError):
    """PagerDuty returned a body that is not the expected JSON shape."""


class UnmappedTypeError(PagerDutyError):
    """Notification type has no PagerDuty event equivalent."""
