"""Database engine construction and health checks."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    """Map hosted-Postgres style URLs onto SQLAlchemy's psycopg dialect.

    ``postgres://`` and ``postgresql://`` URLs (as handed out by most hosting
    providers) are rewritten to ``postgresql+psycopg://``; anything else is
    returned as is.
    """
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def create_db_engine(url: str) -> Engine:
    """Create the process-wide engine (and its connection pool).

    The engine is built once at startup, passed to every component that
    touches the database and disposed on shutdown.

    Args:
        url: Database URL, e.g. ``sqlite:///data/dobiefetch.db``.

    Returns:
        SQLAlchemy engine (connections are opened lazily).
    """
    engine = create_engine(normalize_database_url(url), pool_pre_ping=True)
    logger.info(
        "Database engine ready for %s", engine.url.render_as_string(hide_password=True)
    )
    return engine


def ping(engine: Engine) -> bool:
    """Return True if a trivial query succeeds on *engine*."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database ping failed", exc_info=True)
        return False
    return True
