import pytest

from wallstats.common.errors import SchemaViolationError
from wallstats.common.schemas import MetricStats
from wallstats.services.metric_registry import (
    AGGREGATE_REGISTRY,
    COUNTER,
    DURATION,
    IGNORED,
    OBSERVATION_REGISTRY,
    STAT_FIELDS,
    MetricRegistry,
    counter,
    validate_registries,
    zero_values,
)


def test_builtin_registries_cover_every_column_once():
    validate_registries()


def test_row_has_fifty_stat_columns():
    assert len(STAT_FIELDS) == 50
    assert all(value == 0 for value in zero_values().values())


def test_duration_triplet_fills_exactly_three_columns():
    values = zero_values()
    AGGREGATE_REGISTRY.apply("tHandle", MetricStats(sum=120.5, max=45.0, count=3), values)

    changed = {column: value for column, value in values.items() if value != 0}
    assert changed == {"tHandle": 120.5, "mtHandle": 45.0, "nHandle": 3}
    assert isinstance(values["nHandle"], int)


def test_counter_uses_count():
    values = zero_values()
    AGGREGATE_REGISTRY.apply("nOffered", MetricStats(count=17), values)
    assert values["nOffered"] == 17


def test_counter_without_count_reads_zero():
    values = zero_values()
    values["nTransferred"] = 9
    AGGREGATE_REGISTRY.apply("nTransferred", MetricStats(), values)
    assert values["nTransferred"] == 0


def test_service_level_uses_ratio_and_target_uses_current():
    values = zero_values()
    AGGREGATE_REGISTRY.apply("oServiceLevel", MetricStats(ratio=0.85, count=4), values)
    AGGREGATE_REGISTRY.apply("oServiceTarget", MetricStats(current=0.8, ratio=0.1), values)
    assert values["oServiceLevel"] == 0.85
    assert values["oServiceTarget"] == 0.8


@pytest.mark.parametrize("metric", ["oInteracting", "oWaiting"])
def test_observed_metrics_are_ignored_in_aggregate_feed(metric):
    values = zero_values()
    AGGREGATE_REGISTRY.apply(metric, MetricStats(count=7), values)
    assert values == zero_values()
    assert AGGREGATE_REGISTRY.lookup(metric).kind == IGNORED


def test_observation_feed_fills_observed_counts():
    values = zero_values()
    OBSERVATION_REGISTRY.apply("oWaiting", MetricStats(count=4), values)
    OBSERVATION_REGISTRY.apply("oInteracting", MetricStats(count=2), values)
    assert values["oWaiting"] == 4
    assert values["oInteracting"] == 2


def test_unknown_metric_is_schema_violation():
    with pytest.raises(SchemaViolationError) as excinfo:
        AGGREGATE_REGISTRY.apply("tNewMetric", MetricStats(sum=1), zero_values())
    assert excinfo.value.metric == "tNewMetric"
    assert excinfo.value.feed == "aggregate"


def test_aggregate_metric_is_unknown_to_observation_feed():
    with pytest.raises(SchemaViolationError):
        OBSERVATION_REGISTRY.lookup("nOffered")


def test_rule_kinds():
    assert AGGREGATE_REGISTRY.lookup("tAnswered").kind == DURATION
    assert AGGREGATE_REGISTRY.lookup("nOverSla").kind == COUNTER


def test_observation_requested_metrics():
    assert OBSERVATION_REGISTRY.requested_metrics() == ["oInteracting", "oWaiting"]


def test_validation_reports_uncovered_columns():
    partial = MetricRegistry("aggregate", {"nError": counter("nError")})
    with pytest.raises(ValueError, match="No metric fills columns"):
        validate_registries([partial])


def test_validation_reports_unknown_target_column():
    broken = MetricRegistry("aggregate", {"nBogus": counter("nBogus")})
    with pytest.raises(ValueError, match="unknown column"):
        validate_registries([broken])


def test_validation_reports_column_filled_twice():
    twice = MetricRegistry("observation", {"nOffered": counter("nOffered")})
    with pytest.raises(ValueError, match="filled by both"):
        validate_registries([AGGREGATE_REGISTRY, twice])
