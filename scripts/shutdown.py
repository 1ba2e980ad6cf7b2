#!/usr/bin/env python3
"""Ask running gateways to stop by pushing the shutdown sentinel.

Each gateway consuming the queue stops after popping one sentinel, so pass
``--count`` when several instances share a queue.

Usage::

    python scripts/shutdown.py --config config/settings.yaml --count 2
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import redis.asyncio as aioredis

from pagerrelay.core.config import load_settings
from pagerrelay.gateway.consumer import SHUTDOWN_PAYLOAD


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    redis = aioredis.from_url(settings.redis.url, decode_responses=True)
    try:
        for _ in range(args.count):
            await redis.rpush(settings.gateway.queue, SHUTDOWN_PAYLOAD)
    finally:
        await redis.aclose()
    print(f"Queued {args.count} shutdown request(s) on {settings.gateway.queue}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Request a graceful stop of PagerDuty gateways.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of shutdown sentinels to push (one per instance)",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
