"""Async PagerDuty client — create events and look up acknowledged incidents."""

from __future__ import annotations

import re
from types import TracebackType
from typing import Any

import httpx
import structlog

from pagerrelay.core.config import PagerDutyConfig, get_settings
from pagerrelay.core.types import (
    AcknowledgementQuery,
    IncidentEvent,
    IncidentEventType,
)
from pagerrelay.pagerduty.exceptions import (
    PagerDutyDecodeError,
    PagerDutyTransportError,
)

logger = structlog.get_logger(__name__)

_SUCCESS_RE = re.compile(r"success", re.IGNORECASE)

# PagerDuty accepts "nop" events against any well-formed service key.
NOOP_EVENT = IncidentEvent(
    service_key="1" * 32,
    incident_key="pagerrelay is running a NOOP",
    event_type=IncidentEventType.NOP,
    description="I love APIs with noops.",
)


def _decode_object(response: httpx.Response, url: str) -> dict[str, Any]:
    """Parse a JSON object body or raise PagerDutyDecodeError."""
    try:
        body = response.json()
    except ValueError as exc:
        logger.error(
            "pagerduty_invalid_json",
            url=url,
            status=response.status_code,
            headers=dict(response.headers),
            body=response.text[:500],
        )
        raise PagerDutyDecodeError(f"PagerDuty returned invalid JSON from {url}") from exc

    if not isinstance(body, dict):
        raise PagerDutyDecodeError(
            f"PagerDuty returned {type(body).__name__}, expected an object"
        )
    return body


class PagerDutyClient:
    """Thin async wrapper over the two PagerDuty endpoints the gateway uses.

    No retries happen here; callers decide what a failure means.

    Usage::

        async with PagerDutyClient(config) as client:
            if not await client.test_connection():
                ...
            status, body = await client.send_event(event)
    """

    def __init__(
        self,
        config: PagerDutyConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or get_settings().pagerduty
        self._http = http

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        if self.connected:
            return
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_secs),
        )

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            raise PagerDutyTransportError("HTTP client not connected")
        return self._http

    # ── Events API ───────────────────────────────────────────────

    async def send_event(self, event: IncidentEvent) -> tuple[int, dict[str, Any]]:
        """POST a single incident event.

        Returns:
            ``(http_status, parsed_body)``. Non-2xx statuses are returned,
            not raised.

        Raises:
            PagerDutyTransportError: the request could not be completed.
            PagerDutyDecodeError: the response body is not a JSON object.
        """
        url = self._config.events_api_url
        try:
            response = await self._client().post(url, json=event.model_dump(mode="json"))
        except httpx.TransportError as exc:
            raise PagerDutyTransportError(f"PagerDuty event POST failed: {exc}") from exc

        body = _decode_object(response, url)
        logger.debug(
            "pagerduty_event_sent",
            incident_key=event.incident_key,
            event_type=event.event_type,
            status=response.status_code,
            response=body,
        )
        return response.status_code, body

    async def test_connection(self) -> bool:
        """Send a NOP event and report whether PagerDuty accepted it."""
        try:
            status, body = await self.send_event(NOOP_EVENT)
        except (PagerDutyTransportError, PagerDutyDecodeError):
            logger.exception("pagerduty_connection_test_error")
            return False

        if status == 200 and _SUCCESS_RE.search(str(body.get("status", ""))):
            logger.info("pagerduty_connection_ok")
            return True

        logger.error("pagerduty_connection_test_failed", status=status, response=body)
        return False

    # ── REST API ─────────────────────────────────────────────────

    async def query_acknowledged(self, query: AcknowledgementQuery) -> bool:
        """Return True if PagerDuty has an acknowledged incident for the key.

        Raises:
            PagerDutyTransportError: the request could not be completed.
            PagerDutyDecodeError: the body is not JSON or lacks ``incidents``.
                Callers must treat this as "unknown", not "not acknowledged".
        """
        url = self._config.incidents_url_template.format(subdomain=query.subdomain)
        try:
            response = await self._client().get(
                url,
                params=query.params(),
                auth=(query.username, query.password.get_secret_value()),
            )
        except httpx.TransportError as exc:
            raise PagerDutyTransportError(f"PagerDuty incidents GET failed: {exc}") from exc

        body = _decode_object(response, url)
        incidents = body.get("incidents")
        if not isinstance(incidents, list):
            logger.warning(
                "pagerduty_incidents_missing",
                url=url,
                status=response.status_code,
                keys=list(body.keys()),
            )
            raise PagerDutyDecodeError("PagerDuty response has no incidents list")

        return len(incidents) > 0

    # ── Context manager ──────────────────────────────────────────

    async def __aenter__(self) -> PagerDutyClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
