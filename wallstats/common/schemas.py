"""
PureCloud Analytics Wire Models

Pydantic models for the analytics query bodies the poller sends and the
responses it reads back. Field aliases follow the provider's camelCase JSON.

Author: WallStats Team
Date: 2026-10-19
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for provider payloads: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        """Serialize for a request body."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AccessToken(WireModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None


# ---------------------------------------------------------------------------
# Query bodies
# ---------------------------------------------------------------------------

class AnalyticsQueryPredicate(WireModel):
    type: str = "dimension"
    dimension: str
    operator: str = "matches"
    value: str


class AnalyticsQueryClause(WireModel):
    type: str
    predicates: List[AnalyticsQueryPredicate] = Field(default_factory=list)


class AnalyticsQueryFilter(WireModel):
    type: str
    clauses: List[AnalyticsQueryClause] = Field(default_factory=list)


class AggregationQuery(WireModel):
    interval: str
    granularity: Optional[str] = None
    group_by: List[str] = Field(default_factory=list, alias="groupBy")
    filter: AnalyticsQueryFilter
    metrics: Optional[List[str]] = None


class ObservationQuery(WireModel):
    filter: AnalyticsQueryFilter
    metrics: Optional[List[str]] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class MetricStats(WireModel):
    """Statistical fields of one metric; which are set depends on the metric."""

    count: Optional[int] = None
    sum: Optional[float] = None
    max: Optional[float] = None
    min: Optional[float] = None
    ratio: Optional[float] = None
    numerator: Optional[float] = None
    denominator: Optional[float] = None
    target: Optional[float] = None
    current: Optional[float] = None


class MetricValue(WireModel):
    metric: str
    qualifier: Optional[str] = None
    stats: MetricStats = Field(default_factory=MetricStats)


class ResultGroup(WireModel):
    queue_id: Optional[str] = Field(None, alias="queueId")
    media_type: Optional[str] = Field(None, alias="mediaType")


class AggregateDataBucket(WireModel):
    interval: Optional[str] = None
    metrics: List[MetricValue] = Field(default_factory=list)


class AggregateResult(WireModel):
    group: ResultGroup = Field(default_factory=ResultGroup)
    data: List[AggregateDataBucket] = Field(default_factory=list)


class AggregateQueryResponse(WireModel):
    results: List[AggregateResult] = Field(default_factory=list)


class ObservationResult(WireModel):
    group: ResultGroup = Field(default_factory=ResultGroup)
    data: List[MetricValue] = Field(default_factory=list)


class ObservationQueryResponse(WireModel):
    results: List[ObservationResult] = Field(default_factory=list)


class QueueEntity(WireModel):
    id: str
    name: Optional[str] = None


class QueueEntityListing(WireModel):
    entities: List[QueueEntity] = Field(default_factory=list)
    page_number: Optional[int] = Field(None, alias="pageNumber")
    page_count: Optional[int] = Field(None, alias="pageCount")
    total: Optional[int] = None
