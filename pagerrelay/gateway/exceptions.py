"""Gateway lifecycle exceptions."""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for gateway errors."""


class StartupFatalError(GatewayError):
    """The gateway cannot start (e.g. PagerDuty is unreachable)."""
