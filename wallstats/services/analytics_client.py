"""
PureCloud Analytics Client

This module wraps the PureCloud REST endpoints the poller depends on:
client credentials login, the queue listing, and the two analytics
queries. Responses are validated into pydantic models.

The access token is obtained once at startup and used for the lifetime of
the process; there is no refresh.

Author: WallStats Team
Date: 2026-10-19
"""

import logging
import time
from typing import Dict, Optional, Type, TypeVar

import httpx
from prometheus_client import Histogram

from wallstats.common.errors import AuthError, QueryError
from wallstats.common.schemas import (
    AccessToken,
    AggregateQueryResponse,
    AggregationQuery,
    ObservationQuery,
    ObservationQueryResponse,
    QueueEntityListing,
    WireModel,
)


logger = logging.getLogger("wallstats.analytics")

AGGREGATES_PATH = "/api/v2/analytics/conversations/aggregates/query"
OBSERVATIONS_PATH = "/api/v2/analytics/queues/observations/query"
QUEUES_PATH = "/api/v2/routing/queues"

QUERY_LATENCY = Histogram(
    'wallstats_query_latency_seconds',
    'Latency of PureCloud API calls',
    ['endpoint']
)

ModelT = TypeVar("ModelT", bound=WireModel)


def login_url(region: str) -> str:
    return f"https://login.{region}/oauth/token"


def api_base_url(region: str) -> str:
    return f"https://api.{region}"


async def acquire_session(
    region: str,
    client_id: str,
    client_secret: str,
    timeout: float = 30,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AccessToken:
    """
    Log into PureCloud with client credentials.

    Args:
        region: PureCloud region domain, e.g. mypurecloud.com
        client_id: OAuth client ID
        client_secret: OAuth client secret
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests, proxies)

    Returns:
        AccessToken: Bearer token for API calls

    Raises:
        AuthError: If the login request fails or is rejected
    """
    logger.info("Logging into PureCloud (%s)...", region)
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(
                login_url(region),
                data={"grant_type": "client_credentials"},
                auth=(client_id, client_secret),
            )
            response.raise_for_status()
            token = AccessToken.model_validate(response.json())
    except httpx.HTTPStatusError as ex:
        raise AuthError(
            f"Login rejected with HTTP {ex.response.status_code}: {ex.response.text[:200]}"
        ) from ex
    except httpx.HTTPError as ex:
        raise AuthError(f"Login request failed: {ex}") from ex
    except ValueError as ex:  # JSON decode and pydantic validation errors
        raise AuthError(f"Unexpected login response: {ex}") from ex

    logger.info("Successfully logged in.")
    return token


class AnalyticsClient:
    """Authenticated access to the analytics and routing APIs."""

    def __init__(
        self,
        token: AccessToken,
        region: str,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.region = region
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=api_base_url(self.region),
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.token.access_token}",
                "Content-Type": "application/json",
            },
        )

    async def _request(
        self,
        method: str,
        path: str,
        model: Type[ModelT],
        body: Optional[WireModel] = None,
        params: Optional[Dict[str, object]] = None,
    ) -> ModelT:
        start_time = time.perf_counter()
        try:
            async with self._client() as client:
                response = await client.request(
                    method,
                    path,
                    json=body.to_wire() if body is not None else None,
                    params=params,
                )
                response.raise_for_status()
                return model.model_validate(response.json())
        except httpx.HTTPStatusError as ex:
            raise QueryError(
                f"{method} {path} returned HTTP {ex.response.status_code}: "
                f"{ex.response.text[:200]}"
            ) from ex
        except httpx.HTTPError as ex:
            raise QueryError(f"{method} {path} failed: {ex}") from ex
        except ValueError as ex:  # JSON decode and pydantic validation errors
            raise QueryError(f"{method} {path} returned an unexpected body: {ex}") from ex
        finally:
            QUERY_LATENCY.labels(endpoint=path).observe(time.perf_counter() - start_time)

    async def query_aggregates(self, query: AggregationQuery) -> AggregateQueryResponse:
        """Run a conversation aggregate query."""
        return await self._request("POST", AGGREGATES_PATH, AggregateQueryResponse, body=query)

    async def query_observations(self, query: ObservationQuery) -> ObservationQueryResponse:
        """Run a queue observation query."""
        return await self._request("POST", OBSERVATIONS_PATH, ObservationQueryResponse, body=query)

    async def list_queues(self, page_size: int = 1000) -> Dict[str, str]:
        """
        Map queue IDs to queue names.

        Only the first page is read, so up to ``page_size`` active and
        inactive queues are returned.

        Returns:
            Dict[str, str]: queue ID -> queue name
        """
        logger.info("Retrieving list of configured queues...")
        listing = await self._request(
            "GET",
            QUEUES_PATH,
            QueueEntityListing,
            params={"pageSize": page_size, "pageNumber": 1},
        )
        queues = {queue.id: queue.name or "" for queue in listing.entities}
        logger.info("Mapped %d queues", len(queues))
        return queues
