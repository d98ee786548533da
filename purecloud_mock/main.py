"""
PureCloud Mock Service

This module provides a mock implementation of the PureCloud endpoints the
stats poller uses, for development and testing. It simulates login, the
queue listing and both analytics queries with realistic, repeatable data.

Features:
- Client credentials token endpoint
- Routing queue listing
- Conversation aggregate query honouring the queueId/mediaType filter
- Queue observation query
- Deterministic per-queue traffic so repeated polls agree

Run with:
    uvicorn purecloud_mock.main:app --port 8000

Author: WallStats Team
Date: 2026-10-19
"""

import hashlib
import random
import uuid
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, Header, HTTPException, Query
from pydantic import BaseModel, Field


# FastAPI application instance
app = FastAPI(title="PureCloud Mock API", version="1.0.0")

# Queues known to the mock; any other queue ID in a filter still gets data
MOCK_QUEUES: Dict[str, str] = {
    "c2788c7e-c8c5-40ac-97d9-51c3b364479b": "Sales",
    "4a1d5f0e-3c1b-4d7a-9a55-0f6a3e2b1c11": "Support",
    "9e8f7a6b-5c4d-4e3f-8a2b-1c0d9e8f7a6b": "Billing",
}

DURATION_METRICS = (
    "tAbandon", "tAcd", "tAcw", "tAgentResponseTime", "tAnswered", "tHandle",
    "tHeld", "tHeldComplete", "tIvr", "tTalk", "tTalkComplete",
    "tUserResponseTime", "tWait",
)

COUNTER_METRICS = (
    "nError", "nOffered", "nOutboundAbandoned", "nOutboundAttempted",
    "nOutboundConnected", "nTransferred", "nOverSla",
)

# Issued tokens, so analytics calls can be rejected without login.
# Oldest tokens are forgotten once the cap is reached.
MAX_ISSUED_TOKENS = 1000
issued_tokens: "OrderedDict[str, str]" = OrderedDict()


class Predicate(BaseModel):
    type: str = "dimension"
    dimension: str
    operator: str = "matches"
    value: str


class Clause(BaseModel):
    type: str
    predicates: List[Predicate] = Field(default_factory=list)


class QueryFilter(BaseModel):
    type: str
    clauses: List[Clause] = Field(default_factory=list)


class AggregateQueryBody(BaseModel):
    interval: str
    granularity: Optional[str] = None
    groupBy: List[str] = Field(default_factory=list)
    filter: QueryFilter


class ObservationQueryBody(BaseModel):
    filter: QueryFilter
    metrics: Optional[List[str]] = None


def seeded_random(*parts: str) -> random.Random:
    """
    Get a random generator seeded from the given parts.

    Uses MD5 hashing so the same queue, media type and interval always
    produce the same numbers.
    """
    digest = hashlib.md5("|".join(parts).encode()).hexdigest()
    return random.Random(int(digest, 16))


def filter_values(query_filter: QueryFilter, dimension: str) -> List[str]:
    """Collect the values of all predicates on a dimension."""
    return [
        predicate.value
        for clause in query_filter.clauses
        for predicate in clause.predicates
        if predicate.dimension == dimension
    ]


def filter_keys(query_filter: QueryFilter) -> List[Tuple[str, str]]:
    queue_ids = filter_values(query_filter, "queueId")
    media_types = filter_values(query_filter, "mediaType")
    return [(queue_id, media_type) for queue_id in queue_ids for media_type in media_types]


def require_token(authorization: Optional[str]) -> None:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    if authorization[len("Bearer "):] not in issued_tokens:
        raise HTTPException(status_code=401, detail="Unknown access token")


def generate_aggregate_metrics(rng: random.Random) -> List[Dict[str, Any]]:
    """
    Generate one interval's worth of aggregate metrics.

    Returns:
        List[Dict]: Metric entries in PureCloud response format
    """
    offered = rng.randint(1, 60)
    answered = rng.randint(0, offered)
    abandoned = offered - answered

    metrics: List[Dict[str, Any]] = []
    for name in COUNTER_METRICS:
        count = offered if name == "nOffered" else rng.randint(0, max(1, offered // 5))
        metrics.append({"metric": name, "stats": {"count": count}})

    for name in DURATION_METRICS:
        if name == "tAnswered":
            count = answered
        elif name == "tAbandon":
            count = abandoned
        else:
            count = rng.randint(0, offered)
        if count == 0:
            continue
        longest = round(rng.uniform(5, 600), 3)
        total = round(longest + rng.uniform(0, longest) * (count - 1), 3)
        metrics.append({
            "metric": name,
            "stats": {"max": longest, "min": round(longest / 4, 3), "count": count, "sum": total},
        })

    level = round(answered / offered, 4)
    metrics.append({
        "metric": "oServiceLevel",
        "stats": {"ratio": level, "numerator": answered, "denominator": offered, "target": 0.8},
    })
    metrics.append({"metric": "oServiceTarget", "stats": {"current": 0.8}})
    return metrics


@app.post("/oauth/token")
def oauth_token(grant_type: str = "client_credentials"):
    """Issue an access token for any client credentials."""
    token = uuid.uuid4().hex
    issued_tokens[token] = grant_type
    while len(issued_tokens) > MAX_ISSUED_TOKENS:
        issued_tokens.popitem(last=False)
    return {"access_token": token, "token_type": "bearer", "expires_in": 86399}


@app.get("/api/v2/routing/queues")
def list_queues(
    pageSize: int = Query(25, description="Page size"),
    pageNumber: int = Query(1, description="Page number"),
    authorization: Optional[str] = Header(None),
):
    """Return the configured queues as a single page."""
    require_token(authorization)
    entities = [
        {"id": queue_id, "name": name}
        for queue_id, name in list(MOCK_QUEUES.items())[:pageSize]
    ]
    return {
        "entities": entities,
        "pageSize": pageSize,
        "pageNumber": pageNumber,
        "total": len(MOCK_QUEUES),
        "pageCount": 1,
    }


@app.post("/api/v2/analytics/conversations/aggregates/query")
def conversation_aggregates(
    body: AggregateQueryBody,
    authorization: Optional[str] = Header(None),
):
    """
    Aggregate metrics per queue and media type for the requested interval.

    Email never carries traffic in the mock, which mirrors the common case
    of a tracked key with no volume and no result grouping.
    """
    require_token(authorization)
    results = []
    for queue_id, media_type in filter_keys(body.filter):
        if media_type == "email":
            continue
        rng = seeded_random(queue_id, media_type, body.interval)
        results.append({
            "group": {"queueId": queue_id, "mediaType": media_type},
            "data": [{"interval": body.interval, "metrics": generate_aggregate_metrics(rng)}],
        })
    return {"results": results}


@app.post("/api/v2/analytics/queues/observations/query")
def queue_observations(
    body: ObservationQueryBody,
    authorization: Optional[str] = Header(None),
):
    """Current interacting and waiting counts per queue and media type."""
    require_token(authorization)
    metrics = body.metrics or ["oInteracting", "oWaiting"]
    results = []
    for queue_id, media_type in filter_keys(body.filter):
        rng = seeded_random(queue_id, media_type, "observation")
        results.append({
            "group": {"queueId": queue_id, "mediaType": media_type},
            "data": [
                {"metric": name, "stats": {"count": rng.randint(0, 12)}}
                for name in metrics
            ],
        })
    return {"results": results}


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "queues": len(MOCK_QUEUES),
        "issued_tokens": len(issued_tokens),
    }
