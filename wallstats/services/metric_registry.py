"""
Metric Schema Registry

Maps every metric name PureCloud returns to the stat columns it fills.
There is one lookup table per feed: the conversation aggregate feed and the
queue observation feed. A name missing from its feed's table is a schema
violation, never a silent drop, so a provider contract change surfaces as
an error instead of a quietly wrong wallboard.

Rule kinds:
- counter: ``count`` into one column
- duration: ``sum``/``max``/``count`` into ``tX``/``mtX``/``nX``
- ratio / current: ``ratio`` or ``current`` into one column
- ignored: recognised, owned by the other feed, nothing written

Author: WallStats Team
Date: 2026-10-19
"""

from typing import Dict, Iterable, Mapping, NamedTuple, Tuple, Union

from wallstats.common.errors import SchemaViolationError
from wallstats.common.schemas import MetricStats


Number = Union[int, float]

COUNTER = "counter"
DURATION = "duration"
RATIO = "ratio"
CURRENT = "current"
IGNORED = "ignored"

AGGREGATE_FEED = "aggregate"
OBSERVATION_FEED = "observation"


# Every stat column of a row and the Python type it holds
STAT_FIELDS: Dict[str, type] = {
    "oServiceTarget": float,
    "oServiceLevel": float,
    "oInteracting": int,
    "oWaiting": int,
    "nError": int,
    "nOffered": int,
    "nOutboundAbandoned": int,
    "nOutboundAttempted": int,
    "nOutboundConnected": int,
    "nTransferred": int,
    "nOverSla": int,
}

DURATION_METRICS = (
    "tAbandon",
    "tAcd",
    "tAcw",
    "tAgentResponseTime",
    "tAnswered",
    "tHandle",
    "tHeld",
    "tHeldComplete",
    "tIvr",
    "tTalk",
    "tTalkComplete",
    "tUserResponseTime",
    "tWait",
)

for _metric in DURATION_METRICS:
    STAT_FIELDS[_metric] = float
    STAT_FIELDS["m" + _metric] = float
    STAT_FIELDS["n" + _metric[1:]] = int


class MetricRule(NamedTuple):
    """How one metric is copied into a row: (stats attribute, column) pairs."""

    kind: str
    targets: Tuple[Tuple[str, str], ...]

    def apply(self, stats: MetricStats, values: Dict[str, Number]) -> None:
        for attribute, column in self.targets:
            raw = getattr(stats, attribute)
            values[column] = STAT_FIELDS[column](raw or 0)


def counter(column: str) -> MetricRule:
    return MetricRule(COUNTER, (("count", column),))


def duration(metric: str) -> MetricRule:
    # tAnswered -> tAnswered, mtAnswered, nAnswered
    return MetricRule(
        DURATION,
        (("sum", metric), ("max", "m" + metric), ("count", "n" + metric[1:])),
    )


def ratio(column: str) -> MetricRule:
    return MetricRule(RATIO, (("ratio", column),))


def current(column: str) -> MetricRule:
    return MetricRule(CURRENT, (("current", column),))


IGNORE = MetricRule(IGNORED, ())


class MetricRegistry:
    """Lookup table for one feed."""

    def __init__(self, feed: str, rules: Mapping[str, MetricRule]):
        self.feed = feed
        self._rules = dict(rules)

    def __contains__(self, metric: str) -> bool:
        return metric in self._rules

    def __iter__(self):
        return iter(self._rules)

    def items(self):
        return self._rules.items()

    def lookup(self, metric: str) -> MetricRule:
        try:
            return self._rules[metric]
        except KeyError:
            raise SchemaViolationError(metric, self.feed) from None

    def apply(self, metric: str, stats: MetricStats, values: Dict[str, Number]) -> None:
        """Dispatch one metric into ``values``; raises SchemaViolationError on unknown names."""
        self.lookup(metric).apply(stats, values)

    def requested_metrics(self):
        """Names worth asking the provider for: everything not ignored."""
        return [name for name, rule in self._rules.items() if rule.kind != IGNORED]


def _build_aggregate_rules() -> Dict[str, MetricRule]:
    rules = {
        "nError": counter("nError"),
        "nOffered": counter("nOffered"),
        "nOutboundAbandoned": counter("nOutboundAbandoned"),
        "nOutboundAttempted": counter("nOutboundAttempted"),
        "nOutboundConnected": counter("nOutboundConnected"),
        "nTransferred": counter("nTransferred"),
        "nOverSla": counter("nOverSla"),
        "oServiceLevel": ratio("oServiceLevel"),
        "oServiceTarget": current("oServiceTarget"),
        # Observed counts belong to the observation feed
        "oInteracting": IGNORE,
        "oWaiting": IGNORE,
    }
    for metric in DURATION_METRICS:
        rules[metric] = duration(metric)
    return rules


AGGREGATE_REGISTRY = MetricRegistry(AGGREGATE_FEED, _build_aggregate_rules())

OBSERVATION_REGISTRY = MetricRegistry(
    OBSERVATION_FEED,
    {
        "oInteracting": counter("oInteracting"),
        "oWaiting": counter("oWaiting"),
    },
)


def zero_values() -> Dict[str, Number]:
    """A fresh all-zero set of stat columns."""
    return {column: kind() for column, kind in STAT_FIELDS.items()}


def validate_registries(registries: Iterable[MetricRegistry] = (AGGREGATE_REGISTRY, OBSERVATION_REGISTRY)) -> None:
    """
    Check the registries against STAT_FIELDS.

    Every rule must target existing columns, and every column must be
    filled by exactly one rule across all feeds.

    Raises:
        ValueError: If a column is unknown, unfilled or filled twice
    """
    owners: Dict[str, str] = {}
    for registry in registries:
        for metric, rule in registry.items():
            for _attribute, column in rule.targets:
                if column not in STAT_FIELDS:
                    raise ValueError(
                        f"{registry.feed} metric {metric} targets unknown column {column}"
                    )
                if column in owners:
                    raise ValueError(
                        f"Column {column} is filled by both {owners[column]} "
                        f"and {registry.feed}:{metric}"
                    )
                owners[column] = f"{registry.feed}:{metric}"

    missing = [column for column in STAT_FIELDS if column not in owners]
    if missing:
        raise ValueError(f"No metric fills columns: {', '.join(missing)}")
