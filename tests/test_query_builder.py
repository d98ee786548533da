import datetime as dt

import pytest

from wallstats.common.errors import PredicateLimitError, QueryError
from wallstats.services.interval_clock import current_interval
from wallstats.services.query_builder import MAX_FILTER_PREDICATES, build_filter, build_queries


INTERVAL = current_interval(dt.datetime(2016, 6, 8, 10, 47, tzinfo=dt.timezone.utc), "PT30M")


def test_aggregate_query_wire_format():
    aggregate, _ = build_queries(INTERVAL, ["q1", "q2"], granularity="PT30M")

    assert aggregate.to_wire() == {
        "interval": "2016-06-08T10:30:00+0000/2016-06-08T11:00:00+0000",
        "granularity": "PT30M",
        "groupBy": ["queueId"],
        "filter": {
            "type": "and",
            "clauses": [
                {
                    "type": "or",
                    "predicates": [
                        {"type": "dimension", "dimension": "mediaType", "operator": "matches", "value": "voice"},
                        {"type": "dimension", "dimension": "mediaType", "operator": "matches", "value": "chat"},
                        {"type": "dimension", "dimension": "mediaType", "operator": "matches", "value": "email"},
                    ],
                },
                {
                    "type": "or",
                    "predicates": [
                        {"type": "dimension", "dimension": "queueId", "operator": "matches", "value": "q1"},
                        {"type": "dimension", "dimension": "queueId", "operator": "matches", "value": "q2"},
                    ],
                },
            ],
        },
    }


def test_observation_query_shares_the_filter():
    aggregate, observation = build_queries(INTERVAL, ["q1"])

    assert observation.filter == aggregate.filter
    wire = observation.to_wire()
    assert set(wire) == {"filter", "metrics"}
    assert wire["metrics"] == ["oInteracting", "oWaiting"]


def test_granularity_defaults_to_interval_width():
    hour = current_interval(dt.datetime(2016, 6, 8, 10, 47), "PT1H")
    aggregate, _ = build_queries(hour, ["q1"])
    assert aggregate.granularity == "PT60M"


def test_queue_list_at_limit_is_accepted():
    queues = [f"q{i}" for i in range(MAX_FILTER_PREDICATES)]
    aggregate, _ = build_queries(INTERVAL, queues)
    assert len(aggregate.filter.clauses[1].predicates) == MAX_FILTER_PREDICATES


def test_queue_list_over_limit_fails_instead_of_truncating():
    queues = [f"q{i}" for i in range(MAX_FILTER_PREDICATES + 1)]
    with pytest.raises(PredicateLimitError) as excinfo:
        build_queries(INTERVAL, queues)

    assert excinfo.value.dimension == "queueId"
    assert excinfo.value.count == MAX_FILTER_PREDICATES + 1
    assert isinstance(excinfo.value, QueryError)


def test_custom_predicate_limit():
    with pytest.raises(PredicateLimitError):
        build_filter(["q1", "q2", "q3", "q4"], max_predicates=3)


def test_empty_queue_list_is_rejected():
    with pytest.raises(ValueError):
        build_filter([])
