"""Access to the monitoring system's check registry."""

from pagerrelay.registry.checks import CheckRegistry
from pagerrelay.registry.exceptions import RegistryContractError, RegistryError

__all__ = ["CheckRegistry", "RegistryContractError", "RegistryError"]
