"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class RedisConfig(BaseModel):
    """Redis connection shared by the queue, registry and lock."""

    url: str = "redis://localhost:6379/0"


class PagerDutyConfig(BaseModel):
    """PagerDuty API endpoints and request behaviour."""

    events_api_url: str = (
        "https://events.pagerduty.com/generic/2010-04-15/create_event.json"
    )
    incidents_url_template: str = "https://{subdomain}.pagerduty.com/api/v1/incidents"
    timeout_secs: float = 30.0
    ack_lookback_days: int = 7
    ack_lookahead_days: int = 1


class RegistryConfig(BaseModel):
    """Key layout of the monitoring system's check registry."""

    failing_checks_key: str = "failed_checks"
    maintenance_key_template: str = "{check}:unscheduled_maintenance"
    contacts_key_templates: list[str] = [
        "contacts_for:{entity}",
        "contacts_for:{entity}:{check}",
    ]
    credentials_key_template: str = "contact_pagerduty:{contact_id}"
    events_queue: str = "events"


class GatewayConfig(BaseModel):
    """Queue consumption and acknowledgement reconciliation."""

    queue: str = "pagerduty_notifications"
    ack_poll_interval_secs: float = 10.0
    lock_name: str = "sem_pagerduty_acks_running"
    lock_ttl_secs: int = 300
    # Assumes a single gateway instance per registry; see DESIGN.md.
    clear_lock_on_start: bool = True
    ack_summary: str = "Acknowledged on PagerDuty"
    instance_id: str = socket.gethostname()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    redis: RedisConfig = RedisConfig()
    pagerduty: PagerDutyConfig = PagerDutyConfig()
    registry: RegistryConfig = RegistryConfig()
    gateway: GatewayConfig = GatewayConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
