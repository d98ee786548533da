"""
Stats Writer

Writes reconciled rows into the QueueStats table. Every row is an update of
a row seeded at startup, keyed by (QueueID, MediaType), committed in its own
transaction. A failed key is rolled back and reported; the remaining keys
of the cycle are still written.

Author: WallStats Team
Date: 2026-10-19
"""

import logging
from typing import Callable, Iterable, List, NamedTuple, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wallstats.common.errors import WriteError
from wallstats.common.models import QueueStat
from wallstats.services.reconciler import StatRow, TrackedKey


logger = logging.getLogger("wallstats.writer")


class WriteSummary(NamedTuple):
    written: int
    failed: List[Tuple[TrackedKey, WriteError]]


def upsert_row(session: Session, row: StatRow) -> None:
    """
    Update the pre-seeded row for ``row.key`` and commit.

    Raises:
        WriteError: If the statement fails or no seeded row exists
    """
    queue_id, media_type = row.key
    statement = (
        update(QueueStat)
        .where(QueueStat.queue_id == queue_id, QueueStat.media_type == media_type)
        .values(**row.values)
    )

    try:
        result = session.execute(statement)
        if result.rowcount == 0:
            raise WriteError(queue_id, media_type, "row was not seeded")
        session.commit()
    except SQLAlchemyError as ex:
        session.rollback()
        raise WriteError(queue_id, media_type, str(ex)) from ex
    except WriteError:
        session.rollback()
        raise


def write_rows(session_factory: Callable[[], Session], rows: Iterable[StatRow]) -> WriteSummary:
    """
    Write rows one key at a time.

    Args:
        session_factory: Callable returning a new SQLAlchemy session
        rows: Reconciled rows for one cycle

    Returns:
        WriteSummary: Number of rows written and the per-key failures
    """
    written = 0
    failed: List[Tuple[TrackedKey, WriteError]] = []

    with session_factory() as session:
        for row in rows:
            try:
                upsert_row(session, row)
            except WriteError as ex:
                logger.error(str(ex))
                failed.append((row.key, ex))
                continue
            written += 1

    return WriteSummary(written, failed)
