"""
Shared fixtures for the wallboard stats poller tests.
"""

from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wallstats.common.config import Settings
from wallstats.common.init_db import prepare_stats_table
from wallstats.common.schemas import AggregateQueryResponse, ObservationQueryResponse


@pytest.fixture
def make_settings():
    """Factory for valid settings with per-test overrides."""
    def _make(**overrides) -> Settings:
        values: Dict[str, Any] = {
            "pure_cloud_client_id": "client-id",
            "pure_cloud_client_secret": "client-secret",
            "queues": ["Q1"],
            "poll_frequency_seconds": 1,
        }
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across sessions."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def seeded_engine(engine):
    """Engine with QueueStats seeded for queues Q1 and Q2."""
    prepare_stats_table(engine, ["Q1", "Q2"], {"Q1": "Sales", "Q2": "Support"})
    return engine


def metric(name: str, **stats) -> Dict[str, Any]:
    return {"metric": name, "stats": stats}


def aggregate_response(*groups: Dict[str, Any]) -> AggregateQueryResponse:
    """
    Build an aggregate response from (queue_id, media_type, metrics) dicts.

    Each group may carry ``buckets`` (a list of metric lists) instead of
    ``metrics`` to produce several data buckets.
    """
    results = []
    for group in groups:
        buckets: Optional[List[List[Dict[str, Any]]]] = group.get("buckets")
        if buckets is None:
            buckets = [group.get("metrics", [])]
        results.append({
            "group": {"queueId": group["queue_id"], "mediaType": group["media_type"]},
            "data": [
                {"interval": "2016-06-08T10:30:00+0000/2016-06-08T11:00:00+0000", "metrics": metrics}
                for metrics in buckets
            ],
        })
    return AggregateQueryResponse.model_validate({"results": results})


def observation_response(*groups: Dict[str, Any]) -> ObservationQueryResponse:
    return ObservationQueryResponse.model_validate({
        "results": [
            {
                "group": {"queueId": group["queue_id"], "mediaType": group["media_type"]},
                "data": group.get("metrics", []),
            }
            for group in groups
        ]
    })
