"""
Queue Stats Poller Service

This module polls PureCloud for per-queue interval statistics on a fixed
tick and writes the latest values into the QueueStats table.

Each cycle:
- computes the current statistics interval
- issues the aggregate and observation queries concurrently
- reconciles both responses into one row per tracked (queue, media type)
- updates each row in its own transaction

A cycle always runs to completion before the next tick is considered;
ticks that fall inside a running cycle are dropped, not queued. A failed
query or an unknown metric abandons the cycle and the next tick simply
polls the then-current interval.

Usage:
    python -m wallstats.services.stats_poller [config.json]

Author: WallStats Team
Date: 2026-10-19
"""

import asyncio
import datetime as dt
import logging
import signal
import sys
import time
from typing import Callable, List, NamedTuple, Optional

from prometheus_client import Counter, Histogram, start_http_server
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wallstats.common.config import SUPPORTED_MEDIA_TYPES, Settings, load_settings, set_settings
from wallstats.common.db import check_connection, dispose_engine, get_session, init_engine
from wallstats.common.errors import QueryError, SchemaViolationError, WallStatsError
from wallstats.common.init_db import prepare_stats_table
from wallstats.services.analytics_client import AnalyticsClient, acquire_session
from wallstats.services.interval_clock import Interval, current_interval, parse_granularity
from wallstats.services.metric_registry import validate_registries
from wallstats.services.query_builder import build_filter, build_queries
from wallstats.services.reconciler import TrackedKey, reconcile, tracked_keys
from wallstats.services.stats_writer import WriteSummary, write_rows


logger = logging.getLogger("wallstats.poller")

# Prometheus metrics
CYCLES = Counter('wallstats_cycles_total', 'Poll cycles started')
CYCLE_FAILURES = Counter(
    'wallstats_cycle_failures_total',
    'Poll cycles abandoned before writing',
    ['reason']
)
ROW_WRITES = Counter(
    'wallstats_row_writes_total',
    'Stat row updates',
    ['outcome']
)
CYCLE_SECONDS = Histogram('wallstats_cycle_seconds', 'Duration of a full poll cycle')


class CycleResult(NamedTuple):
    interval: Interval
    summary: WriteSummary


class StatsPoller:
    """
    Long-lived poller context.

    Holds everything a cycle needs (settings, authenticated client, session
    factory, tracked keys) so nothing is kept in module globals.
    """

    def __init__(
        self,
        settings: Settings,
        client: AnalyticsClient,
        session_factory: Callable[[], Session],
        clock: Callable[[], dt.datetime] = lambda: dt.datetime.now(dt.timezone.utc),
    ):
        self.settings = settings
        self.client = client
        self.session_factory = session_factory
        self.clock = clock
        self.granularity = parse_granularity(settings.granularity)
        self.media_types = SUPPORTED_MEDIA_TYPES
        self.keys: List[TrackedKey] = tracked_keys(settings.queues, self.media_types)
        self.cycles_completed = 0
        self._stop_event: Optional[asyncio.Event] = None
        self._stopped = False

        validate_registries()
        # Fail at startup if the tracked queues cannot fit in one filter
        build_filter(settings.queues, self.media_types, settings.max_filter_predicates)

    async def poll_once(self, now: Optional[dt.datetime] = None) -> CycleResult:
        """
        Run one poll-reconcile-write cycle.

        Args:
            now: Instant to poll for; defaults to the poller's clock

        Returns:
            CycleResult: Interval polled and the write summary

        Raises:
            QueryError: If either analytics query fails
            SchemaViolationError: If a response carries an unknown metric
        """
        interval = current_interval(now or self.clock(), self.granularity)
        logger.info(f"Querying queue stats for interval {interval.to_query()}...")

        aggregate_query, observation_query = build_queries(
            interval,
            self.settings.queues,
            self.media_types,
            granularity=self.settings.granularity,
            max_predicates=self.settings.max_filter_predicates,
        )

        # Wait for both queries before looking at either result
        responses = await asyncio.gather(
            self.client.query_aggregates(aggregate_query),
            self.client.query_observations(observation_query),
            return_exceptions=True,
        )
        for response in responses:
            if isinstance(response, BaseException):
                raise response
        aggregate, observation = responses

        rows = reconcile(self.keys, aggregate, observation)
        for row in rows:
            logger.info(row.summary())

        summary = write_rows(self.session_factory, rows)
        ROW_WRITES.labels(outcome='success').inc(summary.written)
        ROW_WRITES.labels(outcome='failure').inc(len(summary.failed))
        self.cycles_completed += 1
        return CycleResult(interval, summary)

    async def run_cycle(self) -> Optional[CycleResult]:
        """Run a cycle, logging and counting failures instead of raising."""
        CYCLES.inc()
        start_time = time.perf_counter()
        try:
            result = await self.poll_once()
        except QueryError as ex:
            CYCLE_FAILURES.labels(reason='query').inc()
            logger.error(f"Cycle abandoned, query failed: {ex}")
            return None
        except SchemaViolationError as ex:
            CYCLE_FAILURES.labels(reason='schema').inc()
            logger.error(f"Cycle abandoned, metric registry is out of date: {ex}")
            return None
        except Exception:
            CYCLE_FAILURES.labels(reason='unexpected').inc()
            logger.exception("Cycle abandoned, unexpected error")
            return None
        finally:
            CYCLE_SECONDS.observe(time.perf_counter() - start_time)

        if result.summary.failed:
            logger.warning(
                f"Wrote {result.summary.written} rows, "
                f"{len(result.summary.failed)} failed"
            )
        return result

    async def run(self) -> None:
        """
        Tick every poll_frequency_seconds until stop() is called.

        The first cycle runs one period after start. Ticks missed while a
        cycle was running are coalesced into the next one.
        """
        period = float(self.settings.poll_frequency_seconds)
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        if self._stopped:
            self._stop_event.set()

        logger.info(f"Setting ticker to {period}s")
        next_tick = loop.time() + period

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=max(0.0, next_tick - loop.time()),
                )
                break
            except asyncio.TimeoutError:
                pass

            await self.run_cycle()

            next_tick += period
            now = loop.time()
            if next_tick <= now:
                missed = int((now - next_tick) // period) + 1
                logger.warning(f"Cycle overran its tick, dropping {missed} tick(s)")
                next_tick += missed * period

        logger.info("Poller stopped")

    def stop(self) -> None:
        """Stop ticking; a cycle already in flight finishes first."""
        self._stopped = True
        if self._stop_event is not None:
            self._stop_event.set()


async def start_poller(settings: Settings) -> StatsPoller:
    """
    Perform startup: database, login, table preparation.

    Raises:
        ConfigError: If the database is not configured
        SQLAlchemyError: If the database cannot be reached or prepared
        AuthError: If login fails
        QueryError: If the queue list cannot be read
    """
    engine = init_engine(settings.database_url)
    check_connection(engine)
    logger.info("Database connection OK")

    token = await acquire_session(
        settings.pure_cloud_region,
        settings.pure_cloud_client_id,
        settings.pure_cloud_client_secret,
        timeout=settings.http_timeout_seconds,
    )
    client = AnalyticsClient(
        token,
        settings.pure_cloud_region,
        timeout=settings.http_timeout_seconds,
    )

    poller = StatsPoller(settings, client, get_session)

    # Needs a valid access token for queue names
    queue_names = await client.list_queues()
    prepare_stats_table(engine, settings.queues, queue_names, poller.media_types)

    return poller


async def run_service(config_file: Optional[str] = None) -> int:
    """
    Main poller service function.

    Returns:
        int: Process exit code
    """
    try:
        settings = load_settings(config_file)
    except WallStatsError as ex:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Error: {ex}")
        return 1

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    set_settings(settings)

    try:
        poller = await start_poller(settings)
    except (WallStatsError, SQLAlchemyError) as ex:
        logger.error(f"Error: {ex}")
        dispose_engine()
        return 1

    if settings.metrics_port > 0:
        start_http_server(settings.metrics_port)
        logger.info(f"Prometheus metrics server started on :{settings.metrics_port}")

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, poller.stop)
        except NotImplementedError:
            # Windows: KeyboardInterrupt still ends asyncio.run
            pass

    try:
        await poller.run()
    finally:
        dispose_engine()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run_service(sys.argv[1] if len(sys.argv) > 1 else None)))
