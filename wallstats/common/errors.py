"""
Error Types

Exception hierarchy shared by the wallboard stats poller. Startup errors
(configuration, authentication) stop the process; cycle errors (query,
schema) abandon a single poll cycle; write errors affect a single key.

Author: WallStats Team
Date: 2026-10-19
"""

from typing import Optional


class WallStatsError(Exception):
    """Base class for all poller errors."""


class ConfigError(WallStatsError):
    """Configuration is missing, unreadable or invalid."""


class AuthError(WallStatsError):
    """Client credentials login to PureCloud failed."""


class QueryError(WallStatsError):
    """An analytics query failed in transport or returned an undecodable body."""


class PredicateLimitError(QueryError):
    """A query filter clause would exceed the provider's predicate limit."""

    def __init__(self, dimension: str, count: int, limit: int):
        self.dimension = dimension
        self.count = count
        self.limit = limit
        super().__init__(
            f"Filter on {dimension} needs {count} predicates, "
            f"provider limit is {limit}"
        )


class SchemaViolationError(WallStatsError):
    """The provider returned a metric name the registry does not know."""

    def __init__(self, metric: str, feed: str):
        self.metric = metric
        self.feed = feed
        super().__init__(f"Unrecognized {feed} metric {metric!r}")


class WriteError(WallStatsError):
    """Updating the stats row for one key failed."""

    def __init__(self, queue_id: str, media_type: str, reason: Optional[str] = None):
        self.queue_id = queue_id
        self.media_type = media_type
        message = f"Failed to update stats for queue {queue_id} ({media_type})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
