"""Snapshot database engine and sessions.

The engine is created on first use so that it binds to the event loop the
application (or a test) is actually running. SQLite is the default
backend; any async SQLAlchemy URL works.
"""

from pathlib import Path
from typing import Any

from sqlalchemy import URL, make_url, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from glucos.config import settings
from glucos.logging_config import get_logger
from glucos.models import Base

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def _is_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite"


def _sqlite_file(url: URL) -> Path | None:
    """Database file of a SQLite URL, or None for in-memory databases."""
    if not _is_sqlite(url) or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database)


def _engine_options(url: URL) -> dict[str, Any]:
    if settings.testing:
        # Tests run each case in a fresh event loop
        return {"poolclass": NullPool}
    if _is_sqlite(url):
        return {}
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


def get_engine() -> AsyncEngine:
    """Return the shared engine, creating it on first use."""
    global _engine
    if _engine is None:
        url = make_url(settings.database_url)
        echo_sql = (
            settings.log_level.upper() == "DEBUG" and settings.log_format == "text"
        )
        _engine = create_async_engine(
            url,
            echo=echo_sql,
            **_engine_options(url),
        )
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the shared session factory bound to ``get_engine()``."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_maker


async def init_database() -> None:
    """Create the snapshot tables (and the SQLite file's directory) if missing."""
    engine = get_engine()
    database_file = _sqlite_file(engine.url)
    if database_file is not None:
        database_file.parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(
        "Snapshot tables ready",
        backend=engine.url.get_backend_name(),
        tables=sorted(Base.metadata.tables),
    )


async def check_database_connection() -> bool:
    """Return True if a trivial query succeeds."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database connection check failed", error=str(e))
        return False
    return True


async def close_database() -> None:
    """Dispose of the engine; the next call to ``get_engine()`` recreates it."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None
