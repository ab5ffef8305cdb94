"""
Shared utilities for the portfolio cache layer.

This package aggregates common building blocks:

- config: Cache configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics for store operations
- errors: Canonical error types and responses
- test_helpers: In-memory Redis double and test data factories

Do not import from service_* packages into shared/.
"""
