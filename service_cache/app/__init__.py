"""
Portfolio cache package.

This package standardizes how request handlers use Redis as a cache:

- app.redis_cache.keys: Cache key derivation for quotes and portfolio snapshots.
- app.redis_cache.client: Async store facade with default-TTL injection.
- app.redis_cache.invalidation: Bulk invalidation by key namespace.
- app.redis_cache.health: Bounded-time liveness check.
- app.redis_cache.service: The facade wired once at startup and injected.

Guidelines:
- Primary data-path operations raise on store failure; callers own retries.
- Only key scans and health-check cleanup swallow store errors.
"""
