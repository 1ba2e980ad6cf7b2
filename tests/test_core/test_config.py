"""Tests for pagerrelay/core/config.py — YAML loading and defaults."""

from __future__ import annotations

from pathlib import Path

import yaml

from pagerrelay.core.config import (
    GatewayConfig,
    LoggingConfig,
    PagerDutyConfig,
    RegistryConfig,
    Settings,
    get_settings,
    load_settings,
)


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_pagerduty_config(self) -> None:
        cfg = PagerDutyConfig()
        assert cfg.events_api_url.endswith("/create_event.json")
        assert cfg.ack_lookback_days == 7
        assert cfg.ack_lookahead_days == 1
        assert cfg.timeout_secs > 0

    def test_default_gateway_config(self) -> None:
        cfg = GatewayConfig()
        assert cfg.ack_poll_interval_secs == 10.0
        assert cfg.lock_name == "sem_pagerduty_acks_running"
        assert cfg.lock_ttl_secs == 300
        assert cfg.clear_lock_on_start is True
        assert cfg.ack_summary == "Acknowledged on PagerDuty"
        assert cfg.instance_id

    def test_default_registry_keys(self) -> None:
        cfg = RegistryConfig()
        assert cfg.failing_checks_key == "failed_checks"
        assert cfg.maintenance_key_template.format(check="web01:ping") == (
            "web01:ping:unscheduled_maintenance"
        )
        assert cfg.events_queue == "events"

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "json"

    def test_default_settings(self) -> None:
        s = Settings()
        assert s.redis.url.startswith("redis://")
        assert s.gateway.queue == "pagerduty_notifications"


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "redis": {"url": "redis://cache:6380/2"},
            "pagerduty": {"timeout_secs": 5, "ack_lookback_days": 3},
            "gateway": {
                "queue": "pd_events",
                "lock_ttl_secs": 60,
                "clear_lock_on_start": False,
            },
            "logging": {"level": "DEBUG", "format": "console"},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        settings = load_settings(config_file)

        assert settings.redis.url == "redis://cache:6380/2"
        assert settings.pagerduty.timeout_secs == 5
        assert settings.pagerduty.ack_lookback_days == 3
        assert settings.gateway.queue == "pd_events"
        assert settings.gateway.lock_ttl_secs == 60
        assert settings.gateway.clear_lock_on_start is False
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "console"

    def test_load_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.gateway.lock_ttl_secs == 300

    def test_load_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        settings = load_settings(config_file)
        assert settings.gateway.ack_poll_interval_secs == 10.0

    def test_partial_yaml_merges_with_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"gateway": {"lock_ttl_secs": 30}}))

        settings = load_settings(config_file)
        assert settings.gateway.lock_ttl_secs == 30
        # Other defaults still intact
        assert settings.gateway.lock_name == "sem_pagerduty_acks_running"
        assert settings.registry.failing_checks_key == "failed_checks"


class TestCache:
    def test_get_settings_caches_loaded(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"gateway": {"queue": "q1"}}))
        loaded = load_settings(config_file)
        assert get_settings() is loaded
        assert get_settings().gateway.queue == "q1"
