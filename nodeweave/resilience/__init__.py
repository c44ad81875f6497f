"""Resilience helpers for NodeWeave."""

from nodeweave.resilience.retry import RetryPolicy, RetryStrategy

__all__ = ["RetryPolicy", "RetryStrategy"]
