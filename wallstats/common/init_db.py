"""
Database Initialization

Recreates the QueueStats table on startup. Wallboard stats keep no history,
so the table is dropped, created again and seeded with one all-zero row per
tracked (queue, media type) key. The poller only ever updates these rows.

Usage:
    python -m wallstats.common.init_db [config.json]

Author: WallStats Team
Date: 2026-10-19
"""

import logging
import sys
from typing import Mapping, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from wallstats.common.config import SUPPORTED_MEDIA_TYPES, load_settings
from wallstats.common.db import init_engine
from wallstats.common.models import QUEUE_STATS_TABLE, QueueStat


logger = logging.getLogger("wallstats.init_db")


def prepare_stats_table(
    engine: Engine,
    queue_ids: Sequence[str],
    queue_names: Optional[Mapping[str, str]] = None,
    media_types: Sequence[str] = SUPPORTED_MEDIA_TYPES,
) -> int:
    """
    Drop, create and seed the QueueStats table.

    Args:
        engine: Database engine
        queue_ids: Tracked queue IDs
        queue_names: Optional queue ID -> display name mapping
        media_types: Tracked media types

    Returns:
        int: Number of seeded rows
    """
    queue_names = queue_names or {}
    table = QueueStat.__table__

    table.drop(bind=engine, checkfirst=True)
    logger.info(f"Creating {QUEUE_STATS_TABLE} table")
    table.create(bind=engine)

    logger.info("Prepopulating table data")
    with Session(engine) as session:
        for queue_id in queue_ids:
            if queue_names and queue_id not in queue_names:
                logger.warning(f"Queue {queue_id} not found in PureCloud queue list")
            for media_type in media_types:
                session.add(QueueStat(
                    queue_id=queue_id,
                    media_type=media_type,
                    queue_name=queue_names.get(queue_id),
                ))
        session.commit()

    return len(queue_ids) * len(media_types)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    settings = load_settings(sys.argv[1] if len(sys.argv) > 1 else None)
    prepare_stats_table(init_engine(settings.database_url), settings.queues)
