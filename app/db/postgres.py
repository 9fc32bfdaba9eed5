"""
Relational store access.

Queries are written as raw SQL through SQLAlchemy text(). Each unit of work
runs inside get_db_session(), which commits when the block exits normally and
rolls back when anything escapes it, domain errors included.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(url: str, echo: bool = False):
    if url.startswith("sqlite"):
        # Requests are served from a threadpool, connections cross threads
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo, pool_size=5, max_overflow=10, pool_pre_ping=True)


engine = build_engine(settings.sqlalchemy_url, echo=settings.debug)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Transactional session.

    Usage:
        with get_db_session() as db:
            db.execute(text("UPDATE jobs SET is_verified = :v WHERE job_id = :id"), {...})
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def test_database_connection() -> bool:
    """True if a trivial query succeeds."""
    try:
        with get_db_session() as db:
            return db.execute(text("SELECT 1")).scalar() == 1
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        return False


def execute_raw_sql(sql: str, params: dict = None) -> list:
    """Run one statement in its own session and return the rows as dicts."""
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings().fetchall()]
