"""
Data Adapter for the Ranking Engine

Reads courses and settings from the database and transforms ORM rows into
engine contracts. Writes are limited to the two operator actions the engine
decides on: saving settings and applying an accepted promotion.

Promotion writes are the one place with a check-then-act hazard:
two concurrent requests could each see `count == cap - 1` and both pass.
apply_promotion closes it in two layers:
- the settings row is locked (SELECT ... FOR UPDATE) for the whole
  transaction, serializing promotion writers on databases that support it
- the write itself is a single conditional UPDATE whose WHERE clause
  recomputes the live active-promotion count, so the cap holds even where
  row locks are not available
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update, func, or_, and_
from sqlalchemy.orm import Session, aliased

from ..models import CourseRecord, RankingSettingsRecord
from .contracts import Course, RankingSettings, PromotionRequest, PromotionDecision
from .constants import UNCAPPED_PROMOTIONS
from .errors import SettingsNotConfiguredError, CourseNotFoundError
from .normalizer import as_utc
from .promotion import evaluate_promotion, cap_exceeded_decision

logger = logging.getLogger(__name__)


def _to_naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Columns store naive UTC."""
    if moment is None:
        return None
    return as_utc(moment).replace(tzinfo=None)


# =============================================================================
# COURSES
# =============================================================================

def fetch_courses(db: Session) -> List[Course]:
    """
    Fetch every course in a stable order (creation time, then id).

    The order matters: ranking ties keep the order they were read in.
    """
    records = db.execute(
        select(CourseRecord).order_by(CourseRecord.created_at, CourseRecord.id)
    ).scalars().all()
    return [Course.model_validate(r) for r in records]


def fetch_course(db: Session, course_id: str) -> Course:
    record = db.get(CourseRecord, course_id)
    if record is None:
        raise CourseNotFoundError(course_id)
    return Course.model_validate(record)


def fetch_promoted_courses(db: Session, exclude_id: Optional[str] = None) -> List[Course]:
    """Courses carrying a promotion flag, whatever their window."""
    query = select(CourseRecord).where(
        or_(CourseRecord.is_sponsored.is_(True), CourseRecord.is_editors_choice.is_(True))
    )
    if exclude_id is not None:
        query = query.where(CourseRecord.id != exclude_id)
    records = db.execute(query.order_by(CourseRecord.id)).scalars().all()
    return [Course.model_validate(r) for r in records]


def _active_promotion_clause(model, now: datetime):
    """SQL form of promotion.is_promotion_active for `model` (table or alias)."""
    moment = _to_naive_utc(now)
    return and_(
        or_(model.is_sponsored.is_(True), model.is_editors_choice.is_(True)),
        or_(model.promo_start.is_(None), model.promo_start <= moment),
        or_(model.promo_end.is_(None), model.promo_end >= moment),
    )


def count_active_promotions(
    db: Session,
    now: datetime,
    exclude_id: Optional[str] = None
) -> int:
    query = select(func.count()).select_from(CourseRecord).where(
        _active_promotion_clause(CourseRecord, now)
    )
    if exclude_id is not None:
        query = query.where(CourseRecord.id != exclude_id)
    return db.execute(query).scalar_one()


# =============================================================================
# SETTINGS
# =============================================================================

def _settings_record(db: Session, lock: bool = False) -> Optional[RankingSettingsRecord]:
    query = select(RankingSettingsRecord).order_by(RankingSettingsRecord.id).limit(1)
    if lock:
        query = query.with_for_update()
    return db.execute(query).scalar_one_or_none()


def fetch_settings(db: Session, lock: bool = False) -> RankingSettings:
    """
    Read the settings singleton.

    Raises:
        SettingsNotConfiguredError: no settings row exists
    """
    record = _settings_record(db, lock=lock)
    if record is None:
        raise SettingsNotConfiguredError()
    return RankingSettings.model_validate(record)


def save_settings(db: Session, settings: RankingSettings) -> RankingSettings:
    """Update the settings singleton, creating it on first save."""
    record = _settings_record(db, lock=True)
    if record is None:
        record = RankingSettingsRecord(**settings.model_dump())
        db.add(record)
        logger.info("Ranking settings created")
    else:
        for field, value in settings.model_dump().items():
            setattr(record, field, value)
        logger.info("Ranking settings updated")
    db.flush()
    return RankingSettings.model_validate(record)


# =============================================================================
# PROMOTION WRITE
# =============================================================================

def apply_promotion(
    db: Session,
    course_id: str,
    request: PromotionRequest,
    now: datetime
) -> PromotionDecision:
    """
    Decide a promotion request and, when accepted, persist it atomically.

    Runs inside the caller's transaction; the caller commits.

    Args:
        db: Database session
        course_id: Target course id
        request: Requested flags and window
        now: Evaluation instant

    Returns:
        PromotionDecision (rejections are returned, not raised)

    Raises:
        SettingsNotConfiguredError: no settings row exists
        CourseNotFoundError: unknown course id
    """
    settings = fetch_settings(db, lock=True)

    record = db.get(CourseRecord, course_id, with_for_update=True)
    if record is None:
        raise CourseNotFoundError(course_id)
    course = Course.model_validate(record)

    others = fetch_promoted_courses(db, exclude_id=course_id)
    decision = evaluate_promotion(course, request, settings, others, now)
    if not decision.accepted:
        return decision

    values = {
        "is_sponsored": request.is_sponsored,
        "is_editors_choice": request.is_editors_choice,
        "promo_start": _to_naive_utc(request.promo_start),
        "promo_end": _to_naive_utc(request.promo_end),
    }
    if request.is_accredited is not None:
        values["is_accredited"] = request.is_accredited

    stmt = update(CourseRecord).where(CourseRecord.id == course_id)

    guard_cap = decision.is_active and settings.promotion_cap != UNCAPPED_PROMOTIONS
    if guard_cap:
        # Alias keeps the subquery uncorrelated from the row being updated
        other = aliased(CourseRecord)
        live_count = (
            select(func.count())
            .select_from(other)
            .where(other.id != course_id, _active_promotion_clause(other, now))
            .scalar_subquery()
        )
        stmt = stmt.where(live_count < settings.promotion_cap)

    result = db.execute(
        stmt.values(**values).execution_options(synchronize_session=False)
    )
    db.expire(record)

    if result.rowcount == 0:
        observed = count_active_promotions(db, now, exclude_id=course_id)
        logger.warning(
            f"Promotion for {course_id} lost a concurrent race for the last slot "
            f"({observed}/{settings.promotion_cap})"
        )
        return cap_exceeded_decision(observed, settings.promotion_cap)

    return decision
