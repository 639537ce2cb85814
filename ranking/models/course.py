import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime

from .base import Base


def _utcnow() -> datetime:
    # Stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CourseRecord(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Descriptive
    title = Column(String, nullable=False, default="")
    category = Column(String, nullable=False, default="", index=True)
    level = Column(String, nullable=False, default="")
    language = Column(String, nullable=False, default="")
    price_cents = Column(Integer, nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False, default=0)
    has_practice = Column(Boolean, nullable=False, default=False)
    has_certificate = Column(Boolean, nullable=False, default=False)

    # Ranking signals
    rating_avg = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)
    enrollments = Column(Integer, nullable=False, default=0)
    last_updated_at = Column(DateTime(timezone=False), nullable=False, default=_utcnow)

    # Promotion state
    is_sponsored = Column(Boolean, nullable=False, default=False, index=True)
    is_editors_choice = Column(Boolean, nullable=False, default=False, index=True)
    is_accredited = Column(Boolean, nullable=False, default=False)
    promo_start = Column(DateTime(timezone=False), nullable=True)
    promo_end = Column(DateTime(timezone=False), nullable=True)

    # Meta
    created_at = Column(DateTime(timezone=False), nullable=False, default=_utcnow)
