"""
Bounded-time health check for the cache store.
"""

import asyncio
import time
from typing import Optional

from shared.errors import HealthCheckError
from shared.logging import get_logger
from shared.metrics import CacheMetrics
from .client import COMPONENT, CacheClient

DEFAULT_HEALTH_CHECK_KEY = "__health_check__"

# Least time the sentinel delete gets once the check window is spent
MIN_CLEANUP_WINDOW = 0.1


class HealthMonitor:
    """Reports store liveness with a write/read round trip raced against a timer.

    The round trip writes a short-lived sentinel, reads it back and compares. The
    check passes only if it finishes before the timer with a matching
    value. Whatever happens, the sentinel is deleted afterwards.
    """

    def __init__(
        self,
        client: CacheClient,
        *,
        key: str = DEFAULT_HEALTH_CHECK_KEY,
        timeout: float = 2.0,
        sentinel_ttl: float = 1.0,
        cleanup_timeout: float = 1.0,
        metrics: Optional[CacheMetrics] = None
    ):
        self.client = client
        self.key = key
        self.timeout = timeout
        self.sentinel_ttl = sentinel_ttl
        self.cleanup_timeout = cleanup_timeout
        self.metrics = metrics
        self.logger = get_logger("cache.health")

    async def is_healthy(self) -> bool:
        """Run one check. Never raises; failures are logged and return False."""
        test_value = str(int(time.time() * 1000))
        deadline = time.monotonic() + self.timeout

        check = asyncio.ensure_future(self._write_read(test_value))
        timer = asyncio.ensure_future(self._timer())

        try:
            done, _ = await asyncio.wait({check, timer}, return_when=asyncio.FIRST_COMPLETED)

            # A round trip that settled in the same tick as the timer still counts
            if check in done:
                check.result()
            else:
                timer.result()

            healthy = True

        except Exception as e:
            self.logger.error("Redis health check failed", component=COMPONENT, error=str(e))
            healthy = False

        finally:
            await self._cancel(check, timer)
            await self._cleanup(deadline)

        if self.metrics:
            self.metrics.record_health_check("healthy" if healthy else "unhealthy")

        return healthy

    async def _write_read(self, test_value: str):
        await self.client.set(self.key, test_value, self.sentinel_ttl)
        result = await self.client.get(self.key)

        if result != test_value:
            raise HealthCheckError(
                "Redis health check failed: value mismatch",
                details={"expected": test_value, "actual": result}
            )

    async def _timer(self):
        await asyncio.sleep(self.timeout)
        raise HealthCheckError(
            "Redis health check failed: timeout",
            details={"timeout": self.timeout}
        )

    async def _cancel(self, *tasks: "asyncio.Future"):
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    async def _cleanup(self, deadline: float):
        # Never runs past the check window by more than MIN_CLEANUP_WINDOW
        remaining = max(deadline - time.monotonic(), MIN_CLEANUP_WINDOW)
        try:
            await asyncio.wait_for(self.client.delete(self.key), min(self.cleanup_timeout, remaining))
        except Exception as e:
            self.logger.debug("Health check cleanup failed", key=self.key, error=str(e))
