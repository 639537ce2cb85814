"""
Database wiring for the course ranking service.

DATABASE_URL is read from the environment (.env supported). PostgreSQL in
production; SQLite works for local runs and tests.
"""

import os
import logging
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL env var not set")


class Base(DeclarativeBase):
    pass


def build_engine(url: str):
    # SQLite connections are shared across FastAPI worker threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(bind=None):
    """Create the ranking tables (courses, ranking_settings) if missing."""
    from ranking import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=bind or engine)
    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


def get_db():
    """
    FastAPI dependency: one session per request.
    Commits on success, rolls back on error, always closes.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
