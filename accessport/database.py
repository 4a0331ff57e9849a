"""
Database configuration and connection management.

Engines and session factories are built explicitly from settings and
handed to repositories; nothing here is created at import time.
"""

import time
from contextlib import contextmanager
from typing import Generator, Optional

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings
from .models import Base

logger = structlog.get_logger(__name__)


def get_connect_args(db_url: str) -> dict:
    """
    Get database-specific connection arguments.

    Args:
        db_url: Database connection URL

    Returns:
        Connection arguments dict
    """
    if "sqlite" in db_url:
        return {"check_same_thread": False}
    return {}


def _is_memory_sqlite(db_url: str) -> bool:
    return db_url in ("sqlite://", "sqlite:///:memory:")


def _sanitize_url(db_url: str) -> str:
    if "@" in db_url:
        return db_url.split("@")[0].rsplit(":", 1)[0] + ":***@..."
    return db_url


def create_db_engine(
    db_url: Optional[str] = None, settings: Optional[Settings] = None
) -> Engine:
    """
    Create a SQLAlchemy engine for the record store.

    In-memory SQLite shares one connection across threads so every session
    sees the same database.

    Args:
        db_url: Database URL, defaults to ``settings.DATABASE_URL``
        settings: Settings to read pool options from

    Returns:
        Configured engine
    """
    settings = settings or get_settings()
    db_url = db_url or settings.DATABASE_URL

    kwargs: dict = {
        "connect_args": get_connect_args(db_url),
        "echo": settings.DATABASE_ECHO,
    }
    if _is_memory_sqlite(db_url):
        kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = settings.DATABASE_POOL_PRE_PING

    engine = create_engine(db_url, **kwargs)
    _track_slow_queries(engine, settings.SLOW_QUERY_THRESHOLD_MS)

    logger.info("Database engine created", database=_sanitize_url(db_url))
    return engine


def _track_slow_queries(engine: Engine, threshold_ms: int) -> None:
    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        total_time_ms = (time.perf_counter() - conn.info["query_start_time"].pop()) * 1000
        if total_time_ms > threshold_ms:
            logger.warning(
                "Slow query detected",
                query_time_ms=round(total_time_ms, 2),
                statement=statement[:200],
            )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )


def init_db(engine: Engine) -> None:
    """
    Initialize database tables.

    Uses checkfirst=True to safely handle existing tables.
    """
    logger.info("Initializing database tables")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database initialized", tables=sorted(Base.metadata.tables))


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Commits on success, rolls back and re-raises on any error.

    Args:
        session_factory: Factory producing sessions

    Yields:
        SQLAlchemy database session
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
