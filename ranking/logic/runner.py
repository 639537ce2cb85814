"""
Engine Runner

Orchestrates the ranking pipeline against the database:
1. Reads settings and courses via the adapter
2. Runs the ranking engine with an explicit evaluation instant
3. Applies catalog filters / ordering
4. Returns the catalog output

and the promotion pipeline:
1. Decides the request inside one transaction
2. Persists it with the adapter's atomic conditional write

This is a pure orchestration layer - NO scoring, NO SQL, NO business logic.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from .adapter import fetch_courses, fetch_settings, fetch_promoted_courses, apply_promotion
from .catalog import filter_courses, sort_courses, list_categories
from .constants import SortOption, PriceFilter, PracticeFilter, SponsoredFilter
from .contracts import CatalogOutput, PromotionRequest, PromotionDecision, PromotionUsage
from .engine import RankingEngine
from .promotion import summarize_usage

logger = logging.getLogger(__name__)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def run_ranking(
    db: Session,
    now: Optional[datetime] = None,
    category: Optional[str] = None,
    price: PriceFilter = PriceFilter.ALL,
    practice: PracticeFilter = PracticeFilter.ALL,
    sponsored: SponsoredFilter = SponsoredFilter.ALL,
    sort: SortOption = SortOption.RANK
) -> CatalogOutput:
    """
    Main entry point: rank the whole catalog, then filter and order it.

    Filters are applied after ranking so popularity stays relative to the
    full catalog, not to the filtered view.

    Args:
        db: Database session
        now: Evaluation instant (defaults to current UTC time)
        category, price, practice, sponsored: Catalog filters
        sort: Catalog ordering

    Returns:
        CatalogOutput

    Raises:
        SettingsNotConfiguredError: no settings row exists
    """
    now = _now(now)
    settings = fetch_settings(db)
    courses = fetch_courses(db)

    logger.info(f"📦 Courses fetched for ranking: {len(courses)}")

    if not courses:
        logger.warning("⚠️ No courses found to rank")
        return CatalogOutput(
            evaluated_at=now,
            warnings=["No courses found."],
        )

    engine = RankingEngine()
    start_time = time.perf_counter()

    ranked = engine.rank(courses, settings, now)
    visible = filter_courses(ranked, category, price, practice, sponsored)
    visible = sort_courses(visible, sort)

    processing_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"🏆 Ranked {len(ranked)} courses, {len(visible)} visible ({processing_time:.2f}ms)"
    )

    warnings = []
    if not visible:
        warnings.append("No courses match the selected filters.")

    return CatalogOutput(
        courses=visible,
        categories=list_categories(courses),
        total_ranked=len(ranked),
        total_visible=len(visible),
        evaluated_at=now,
        processing_time_ms=round(processing_time, 2),
        engine_version=engine.version,
        warnings=warnings,
    )


def run_promotion(
    db: Session,
    course_id: str,
    request: PromotionRequest,
    now: Optional[datetime] = None
) -> PromotionDecision:
    """
    Decide and persist a promotion request.

    The caller owns the transaction and commits it; a rejected request
    writes nothing.

    Raises:
        SettingsNotConfiguredError: no settings row exists
        CourseNotFoundError: unknown course id
    """
    now = _now(now)
    decision = apply_promotion(db, course_id, request, now)

    if decision.accepted:
        logger.info(
            f"✅ Promotion saved for {course_id} "
            f"(sponsored={request.is_sponsored}, editors_choice={request.is_editors_choice}, "
            f"active={decision.is_active})"
        )
    else:
        logger.info(f"🚫 Promotion rejected for {course_id}: {decision.reason}")

    return decision


def get_promotion_usage(db: Session, now: Optional[datetime] = None) -> PromotionUsage:
    """Active promotion slots in use versus the configured cap."""
    now = _now(now)
    settings = fetch_settings(db)
    return summarize_usage(fetch_promoted_courses(db), settings, now)
