"""
Namespace-scoped bulk invalidation.
"""

from shared.logging import get_logger
from .client import COMPONENT, CacheClient
from .keys import get_portfolio_snapshot_key


class BulkInvalidator:
    """Deletes groups of cache entries sharing a key prefix."""

    def __init__(self, client: CacheClient):
        self.client = client
        self.logger = get_logger("cache.invalidation")

    async def remove_portfolio_snapshots_by_user_id(self, user_id: str) -> int:
        """Invalidate every cached portfolio snapshot of a user.

        Best effort: if the key scan is cut short by a store error, only the
        keys seen so far are deleted and no error is raised for the scan.
        Returns the number of keys deleted.
        """
        prefix = get_portfolio_snapshot_key(user_id)
        result = await self.client.scan_keys(prefix)

        if result.truncated:
            self.logger.warning(
                "Partial portfolio snapshot invalidation",
                component=COMPONENT,
                user_id=user_id,
                collected=len(result.keys),
                error=str(result.error)
            )

        deleted = await self.client.delete_many(result.keys)

        self.logger.info(
            "Invalidated portfolio snapshots",
            user_id=user_id,
            count=deleted
        )
        return deleted

    async def reset(self) -> bool:
        """Remove every entry in the cache."""
        return await self.client.clear()
