from contextlib import contextmanager
from functools import lru_cache
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_engine() -> Engine:
    """
    Create engine with connection pool (built on first use).
    pool_size=5: maintain 5 connections ready
    max_overflow=10: allow 10 extra connections under load
    """
    settings = get_settings()
    url = settings.database_url_resolved
    if url.startswith("sqlite"):
        # Local runs only; SQLite has no server-side pool
        return create_engine(url, connect_args={"check_same_thread": False}, echo=settings.debug)
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        echo=settings.debug  # Log SQL queries in debug mode
    )


@lru_cache()
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


@contextmanager
def get_db_session(session_factory: sessionmaker = None):
    """
    Context manager for database sessions.
    Usage:
        with get_db_session() as db:
            db.execute(select(profiles))
    """
    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_database_connection() -> bool:
    """
    Test if the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False
