"""Exceptions raised while reading the monitoring system's check registry."""

from __future__ import annotations


class RegistryError(Exception):
    """Base exception for check registry errors."""


class RegistryContractError(RegistryError):
    """The registry returned a value of an unexpected shape."""
