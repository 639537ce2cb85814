"""
Shared fixtures for the ranking engine tests.

DATABASE_URL must be set before `db` is imported anywhere.
"""

import os
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base, init_db
from ranking.models import CourseRecord, RankingSettingsRecord
from ranking.logic.constants import DEFAULT_SETTINGS
from ranking.logic.contracts import Course, RankingSettings


FIXED_NOW = datetime(2026, 1, 28, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def settings():
    """The seeded production settings (cap 5, floor 3.5)."""
    return RankingSettings(**DEFAULT_SETTINGS)


@pytest.fixture
def make_course(now):
    """Factory for Course contracts aged relative to the fixed `now`."""
    def _make(course_id="c1", rating_avg=4.0, rating_count=100, enrollments=100,
              days_old=0.0, **fields):
        return Course(
            id=course_id,
            title=fields.pop("title", f"Course {course_id}"),
            rating_avg=rating_avg,
            rating_count=rating_count,
            enrollments=enrollments,
            last_updated_at=now - timedelta(days=days_old),
            **fields,
        )
    return _make


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store_settings():
    """Persist a settings row; keyword overrides apply on top of the defaults."""
    def _store(db, **overrides):
        record = RankingSettingsRecord(**{**DEFAULT_SETTINGS, **overrides})
        db.add(record)
        db.commit()
        return record
    return _store


@pytest.fixture
def store_course():
    """Persist a course row; created_at increments so read order is stable."""
    counter = {"n": 0}

    def _store(db, course_id, rating_avg=4.0, rating_count=100, enrollments=100,
               last_updated_at=None, **fields):
        counter["n"] += 1
        moment = datetime.now(timezone.utc).replace(tzinfo=None)
        record = CourseRecord(
            id=course_id,
            title=fields.pop("title", f"Course {course_id}"),
            rating_avg=rating_avg,
            rating_count=rating_count,
            enrollments=enrollments,
            last_updated_at=last_updated_at or moment,
            created_at=fields.pop("created_at", datetime(2025, 1, 1) + timedelta(minutes=counter["n"])),
            **fields,
        )
        db.add(record)
        db.commit()
        return record
    return _store


@pytest.fixture
def client(session_factory):
    """TestClient bound to the in-memory database."""
    from fastapi.testclient import TestClient

    from db import get_db
    from main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
