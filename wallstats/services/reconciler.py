"""
Result Reconciler

Turns one aggregate response and one observation response into a complete
stat row for every tracked (queue, media type) key.

For each key the first matching grouping of each response is used; any
later grouping for the same key is ignored and logged. Keys with no
grouping keep zeros, since a queue may simply have had no traffic. An
unknown metric name anywhere raises SchemaViolationError before any row
is returned, so a cycle is either fully reconciled or not at all.

Author: WallStats Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from wallstats.common.config import SUPPORTED_MEDIA_TYPES
from wallstats.common.schemas import (
    AggregateQueryResponse,
    ObservationQueryResponse,
    ResultGroup,
)
from wallstats.services.metric_registry import (
    AGGREGATE_REGISTRY,
    OBSERVATION_REGISTRY,
    MetricRegistry,
    Number,
    zero_values,
)


logger = logging.getLogger("wallstats.reconciler")


class TrackedKey(NamedTuple):
    queue_id: str
    media_type: str


@dataclass
class StatRow:
    """All stat columns for one key; columns not reported stay zero."""

    key: TrackedKey
    values: Dict[str, Number] = field(default_factory=zero_values)

    def __getitem__(self, column: str) -> Number:
        return self.values[column]

    def summary(self) -> str:
        return (
            f"Que: {self.key.queue_id:.8}..., Med: {self.key.media_type:>5}, "
            f"Int: {self['oInteracting']:3d}, Wai: {self['oWaiting']:3d}, "
            f"Off: {self['nOffered']:3d}, Ans: {self['nAnswered']:3d}, "
            f"Aba: {self['nAbandon']:3d}, Svc: {self['oServiceLevel']:1.2f}"
        )


def tracked_keys(
    queue_ids: Iterable[str],
    media_types: Sequence[str] = SUPPORTED_MEDIA_TYPES,
) -> List[TrackedKey]:
    """Cross product of queue IDs and media types, in configuration order."""
    return [
        TrackedKey(queue_id, media_type)
        for queue_id in queue_ids
        for media_type in media_types
    ]


def _matches(group: ResultGroup, key: TrackedKey) -> bool:
    return group.queue_id == key.queue_id and group.media_type == key.media_type


def _first_match(results: Sequence, key: TrackedKey, feed: str):
    found = None
    for result in results:
        if not _matches(result.group, key):
            continue
        if found is None:
            found = result
        else:
            logger.warning(
                "Duplicate %s grouping for queue %s (%s); keeping the first",
                feed, key.queue_id, key.media_type,
            )
    return found


def _apply_metrics(registry: MetricRegistry, metrics: Iterable, values: Dict[str, Number]) -> None:
    for metric in metrics:
        registry.apply(metric.metric, metric.stats, values)


def reconcile_key(
    key: TrackedKey,
    aggregate: Optional[AggregateQueryResponse],
    observation: Optional[ObservationQueryResponse],
) -> StatRow:
    """
    Build the row for a single key.

    Raises:
        SchemaViolationError: If either response carries an unknown metric
    """
    row = StatRow(key)

    if aggregate is not None:
        result = _first_match(aggregate.results, key, AGGREGATE_REGISTRY.feed)
        # Granularity equals the interval width, so only the first bucket is relevant
        if result is not None and result.data:
            _apply_metrics(AGGREGATE_REGISTRY, result.data[0].metrics, row.values)

    if observation is not None:
        result = _first_match(observation.results, key, OBSERVATION_REGISTRY.feed)
        if result is not None:
            _apply_metrics(OBSERVATION_REGISTRY, result.data, row.values)

    return row


def reconcile(
    keys: Iterable[TrackedKey],
    aggregate: Optional[AggregateQueryResponse],
    observation: Optional[ObservationQueryResponse],
) -> List[StatRow]:
    """
    Reconcile both responses against every tracked key.

    Args:
        keys: Every tracked key; one row is produced per key
        aggregate: Conversation aggregate response
        observation: Queue observation response

    Returns:
        List[StatRow]: One complete row per key, in key order

    Raises:
        SchemaViolationError: If any metric name is unknown; no rows are
            returned for the cycle in that case
    """
    check_metric_names(aggregate, observation)
    return [reconcile_key(key, aggregate, observation) for key in keys]


def check_metric_names(
    aggregate: Optional[AggregateQueryResponse],
    observation: Optional[ObservationQueryResponse],
) -> None:
    """
    Look up every metric of both responses, including groupings and
    buckets that reconciliation itself would skip.

    Raises:
        SchemaViolationError: On the first unknown metric name
    """
    if aggregate is not None:
        for result in aggregate.results:
            for bucket in result.data:
                for metric in bucket.metrics:
                    AGGREGATE_REGISTRY.lookup(metric.metric)

    if observation is not None:
        for result in observation.results:
            for metric in result.data:
                OBSERVATION_REGISTRY.lookup(metric.metric)
