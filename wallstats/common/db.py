"""
Database Engine

The poller talks to a single database holding the QueueStats table. One
engine is created per process by init_engine() and released again by
dispose_engine() on shutdown; get_session() hands out sessions bound to it.

check_connection() is run once at startup so an unreachable or misconfigured
database is reported before the first poll rather than on the first write.

Author: WallStats Team
Date: 2026-10-19
"""

from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from wallstats.common.config import get_settings
from wallstats.common.errors import ConfigError


class Base(DeclarativeBase):
    pass


_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def init_engine(database_url: Optional[str] = None) -> Engine:
    """
    Return the process engine, creating it on first call.

    Args:
        database_url: SQLAlchemy URL. Only consulted on the first call; when
            omitted the configured database_url is used.

    Returns:
        sqlalchemy.Engine: The shared engine

    Raises:
        ConfigError: If neither the argument nor the settings give a URL
    """
    global _engine, _SessionLocal

    if _engine is None:
        url = database_url or get_settings().database_url
        if not url:
            raise ConfigError(
                "No database configured. Set databaseUrl in the config "
                "file or DATABASE_URL in the environment."
            )

        _engine = create_engine(url, pool_pre_ping=True)
        _SessionLocal = sessionmaker(bind=_engine, expire_on_commit=False)

    return _engine


def check_connection(engine: Engine) -> None:
    """
    Open a connection and run a trivial statement.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached
    """
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def get_session():
    """New session on the process engine; use it as a context manager."""
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal()


def dispose_engine() -> None:
    """Close pooled connections so the next init_engine() starts fresh."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
