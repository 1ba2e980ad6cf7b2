"""PagerDuty client and notification translation."""

from pagerrelay.pagerduty.client import PagerDutyClient
from pagerrelay.pagerduty.exceptions import (
    PagerDutyDecodeError,
    PagerDutyError,
    PagerDutyTransportError,
    UnmappedTypeError,
)
from pagerrelay.pagerduty.translator import translate

__all__ = [
    "PagerDutyClient",
    "PagerDutyDecodeError",
    "PagerDutyError",
    "PagerDutyTransportError",
    "UnmappedTypeError",
    "translate",
]
