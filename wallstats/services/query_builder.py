"""
Analytics Query Builder

Builds the conversation aggregate query and the queue observation query
for one interval. Both share a single filter:

    (mediaType = m1 OR m2 OR ...) AND (queueId = q1 OR q2 OR ...)

and the aggregate query groups by queueId. Results are not paginated, so
every tracked queue must fit in one filter clause; a clause that would
exceed the provider's predicate limit is rejected rather than truncated.

Author: WallStats Team
Date: 2026-10-19
"""

import datetime as dt
from typing import Sequence, Tuple, Union

from wallstats.common.config import SUPPORTED_MEDIA_TYPES
from wallstats.common.errors import PredicateLimitError
from wallstats.common.schemas import (
    AggregationQuery,
    AnalyticsQueryClause,
    AnalyticsQueryFilter,
    AnalyticsQueryPredicate,
    ObservationQuery,
)
from wallstats.services.interval_clock import GRANULARITIES, Interval
from wallstats.services.metric_registry import OBSERVATION_REGISTRY


# Provider limit on predicates in a single filter clause
MAX_FILTER_PREDICATES = 100


def _or_clause(dimension: str, values: Sequence[str], limit: int) -> AnalyticsQueryClause:
    if len(values) > limit:
        raise PredicateLimitError(dimension, len(values), limit)
    return AnalyticsQueryClause(
        type="or",
        predicates=[
            AnalyticsQueryPredicate(dimension=dimension, value=value)
            for value in values
        ],
    )


def build_filter(
    queue_ids: Sequence[str],
    media_types: Sequence[str] = SUPPORTED_MEDIA_TYPES,
    max_predicates: int = MAX_FILTER_PREDICATES,
) -> AnalyticsQueryFilter:
    """
    Build the shared media type / queue filter.

    Raises:
        PredicateLimitError: If either clause exceeds ``max_predicates``
        ValueError: If there is nothing to filter on
    """
    if not queue_ids or not media_types:
        raise ValueError("At least one queue ID and one media type are required")

    return AnalyticsQueryFilter(
        type="and",
        clauses=[
            _or_clause("mediaType", list(media_types), max_predicates),
            _or_clause("queueId", list(queue_ids), max_predicates),
        ],
    )


def _granularity_code(granularity: Union[str, dt.timedelta]) -> str:
    if isinstance(granularity, str):
        return granularity
    for code, width in GRANULARITIES.items():
        if width == granularity:
            return code
    raise ValueError(f"Unsupported granularity {granularity}")


def build_queries(
    interval: Interval,
    queue_ids: Sequence[str],
    media_types: Sequence[str] = SUPPORTED_MEDIA_TYPES,
    granularity: Union[str, dt.timedelta, None] = None,
    max_predicates: int = MAX_FILTER_PREDICATES,
) -> Tuple[AggregationQuery, ObservationQuery]:
    """
    Build the aggregate and observation queries for one poll cycle.

    Args:
        interval: Interval to aggregate over
        queue_ids: Tracked queue IDs
        media_types: Tracked media types
        granularity: Granularity code sent to the provider; defaults to
            the interval's own width
        max_predicates: Provider predicate limit per clause

    Returns:
        Tuple[AggregationQuery, ObservationQuery]: Queries sharing one filter

    Raises:
        PredicateLimitError: If the queue list does not fit in one filter
    """
    query_filter = build_filter(queue_ids, media_types, max_predicates)

    aggregate_query = AggregationQuery(
        interval=interval.to_query(),
        granularity=_granularity_code(granularity or interval.granularity),
        group_by=["queueId"],
        filter=query_filter,
    )

    # Reuse the same filter for the observation query
    observation_query = ObservationQuery(
        filter=query_filter,
        metrics=OBSERVATION_REGISTRY.requested_metrics(),
    )

    return aggregate_query, observation_query
