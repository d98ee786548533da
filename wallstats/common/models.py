"""
SQLAlchemy Database Models

This module defines the wallboard stats table. One row exists per tracked
(queue, media type) key; the poller overwrites its stat columns every cycle.

Column names follow the PureCloud metric names so wallboard products can
bind to them directly: ``o`` prefix for observed values, ``n`` for counts,
``t`` for total seconds and ``mt`` for maximum seconds.

Author: WallStats Team
Date: 2026-10-19
"""

from sqlalchemy import Column, Float, Integer, String

from wallstats.common.db import Base


QUEUE_STATS_TABLE = "QueueStats"


class QueueStat(Base):
    """
    Latest interval statistics for one queue and media type.

    Rows are seeded with zeros at startup and only ever updated afterwards.
    """
    __tablename__ = QUEUE_STATS_TABLE

    # Key fields
    queue_id = Column("QueueID", String(50), primary_key=True)
    media_type = Column("MediaType", String(10), primary_key=True)
    queue_name = Column("QueueName", String(100))

    # Observed values
    oServiceTarget = Column(Float, nullable=False, default=0.0)
    oServiceLevel = Column(Float, nullable=False, default=0.0)
    oInteracting = Column(Integer, nullable=False, default=0)
    oWaiting = Column(Integer, nullable=False, default=0)

    # Counters
    nError = Column(Integer, nullable=False, default=0)
    nOffered = Column(Integer, nullable=False, default=0)
    nOutboundAbandoned = Column(Integer, nullable=False, default=0)
    nOutboundAttempted = Column(Integer, nullable=False, default=0)
    nOutboundConnected = Column(Integer, nullable=False, default=0)
    nTransferred = Column(Integer, nullable=False, default=0)
    nOverSla = Column(Integer, nullable=False, default=0)

    # Duration triplets: total seconds, max seconds, count
    tAbandon = Column(Float, nullable=False, default=0.0)
    mtAbandon = Column(Float, nullable=False, default=0.0)
    nAbandon = Column(Integer, nullable=False, default=0)

    tAcd = Column(Float, nullable=False, default=0.0)
    mtAcd = Column(Float, nullable=False, default=0.0)
    nAcd = Column(Integer, nullable=False, default=0)

    tAcw = Column(Float, nullable=False, default=0.0)
    mtAcw = Column(Float, nullable=False, default=0.0)
    nAcw = Column(Integer, nullable=False, default=0)

    tAgentResponseTime = Column(Float, nullable=False, default=0.0)
    mtAgentResponseTime = Column(Float, nullable=False, default=0.0)
    nAgentResponseTime = Column(Integer, nullable=False, default=0)

    tAnswered = Column(Float, nullable=False, default=0.0)
    mtAnswered = Column(Float, nullable=False, default=0.0)
    nAnswered = Column(Integer, nullable=False, default=0)

    tHandle = Column(Float, nullable=False, default=0.0)
    mtHandle = Column(Float, nullable=False, default=0.0)
    nHandle = Column(Integer, nullable=False, default=0)

    tHeld = Column(Float, nullable=False, default=0.0)
    mtHeld = Column(Float, nullable=False, default=0.0)
    nHeld = Column(Integer, nullable=False, default=0)

    tHeldComplete = Column(Float, nullable=False, default=0.0)
    mtHeldComplete = Column(Float, nullable=False, default=0.0)
    nHeldComplete = Column(Integer, nullable=False, default=0)

    tIvr = Column(Float, nullable=False, default=0.0)
    mtIvr = Column(Float, nullable=False, default=0.0)
    nIvr = Column(Integer, nullable=False, default=0)

    tTalk = Column(Float, nullable=False, default=0.0)
    mtTalk = Column(Float, nullable=False, default=0.0)
    nTalk = Column(Integer, nullable=False, default=0)

    tTalkComplete = Column(Float, nullable=False, default=0.0)
    mtTalkComplete = Column(Float, nullable=False, default=0.0)
    nTalkComplete = Column(Integer, nullable=False, default=0)

    tUserResponseTime = Column(Float, nullable=False, default=0.0)
    mtUserResponseTime = Column(Float, nullable=False, default=0.0)
    nUserResponseTime = Column(Integer, nullable=False, default=0)

    tWait = Column(Float, nullable=False, default=0.0)
    mtWait = Column(Float, nullable=False, default=0.0)
    nWait = Column(Integer, nullable=False, default=0)
