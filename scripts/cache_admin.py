#!/usr/bin/env python3
"""
Operator commands for the portfolio cache.

Runs the same cache service the API uses, against the Redis instance given by
CACHE_REDIS_URL or --redis-url:

    cache_admin.py health
    cache_admin.py keys --prefix portfolio-snapshot-
    cache_admin.py invalidate-user <user_id>
    cache_admin.py reset --yes
"""

import argparse
import asyncio
import json
from typing import Optional
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import get_config  # noqa: E402
from shared.logging import clear_context, configure_logging, get_logger, set_request_id  # noqa: E402
from service_cache.app.redis_cache.service import RedisCacheService  # noqa: E402


async def run(command: str, *, redis_url: Optional[str], prefix: Optional[str], user_id: Optional[str]) -> dict:
    """Execute one command and return its summary."""
    overrides = {"redis_url": redis_url} if redis_url else {}
    config = get_config(**overrides)
    configure_logging("cache_admin", config.log_level)

    set_request_id()
    get_logger("cache_admin.run").info("Running cache command", command=command)

    service = RedisCacheService.from_config(config)

    try:
        await service.start()

        if command == "health":
            return {"healthy": await service.is_healthy()}

        if command == "keys":
            result = await service.scan_keys(prefix)
            return {"keys": result.keys, "count": len(result.keys), "truncated": result.truncated}

        if command == "invalidate-user":
            deleted = await service.remove_portfolio_snapshots_by_user_id(user_id)
            return {"user_id": user_id, "deleted": deleted}

        if command == "reset":
            return {"reset": await service.reset()}

        raise ValueError(f"Unknown command: {command}")

    finally:
        await service.stop()
        clear_context()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and maintain the portfolio cache.")
    parser.add_argument("--redis-url", default=None, help="Redis connection URL (defaults to CACHE_REDIS_URL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("health", help="Run the bounded-time health check")

    keys_parser = subparsers.add_parser("keys", help="List cache keys")
    keys_parser.add_argument("--prefix", default=None, help="Only list keys starting with this prefix")

    invalidate_parser = subparsers.add_parser("invalidate-user", help="Drop all portfolio snapshots of a user")
    invalidate_parser.add_argument("user_id", help="User identifier")

    reset_parser = subparsers.add_parser("reset", help="Remove every cache entry")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")

    return parser.parse_args()


def main() -> int:
    args = _parse_args()

    if args.command == "reset" and not args.yes:
        print("[cache-admin] refusing to reset without --yes", file=sys.stderr)
        return 2

    try:
        summary = asyncio.run(
            run(
                args.command,
                redis_url=args.redis_url,
                prefix=getattr(args, "prefix", None),
                user_id=getattr(args, "user_id", None),
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cache-admin] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.command == "health" and not summary["healthy"]:
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
