#!/usr/bin/env python3
"""Gateway entrypoint — forwards queue notifications to PagerDuty and
reconciles PagerDuty acknowledgements back into the check registry.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from pagerrelay.core.config import load_settings
from pagerrelay.core.logging import setup_logging
from pagerrelay.gateway.exceptions import StartupFatalError
from pagerrelay.gateway.factory import create_gateway

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start the gateway and run until a shutdown is requested."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    logger.info(
        "gateway_process_starting",
        queue=settings.gateway.queue,
        ack_poll_interval=settings.gateway.ack_poll_interval_secs,
    )

    stack = await create_gateway(settings)
    gateway = stack.gateway
    pending: set[asyncio.Task[None]] = set()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        # The sentinel also wakes a consumer blocked on an empty queue.
        task = asyncio.create_task(gateway.request_stop())
        pending.add(task)
        task.add_done_callback(pending.discard)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await gateway.run()
    except StartupFatalError as exc:
        logger.error("gateway_startup_failed", error=str(exc))
        print(f"Startup failed: {exc}", file=sys.stderr)
        return 1
    finally:
        await stack.close()

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the PagerDuty notification gateway.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
