"""
Score Aggregator

Combines individual signal scores into a base and final score, builds the
replayable breakdown and picks the reason tag.
"""

from datetime import datetime
from typing import Tuple

from .contracts import Course, RankingSettings, RankingBreakdown, RankedCourse
from .dimension_scorers import (
    EnrollmentBounds,
    score_quality,
    score_popularity,
    score_freshness,
    compute_editorial_boost,
)
from .constants import ReasonTag, REASON_THRESHOLDS


def combine_scores(
    quality: float,
    popularity: float,
    freshness: float,
    editorial_boost: float,
    settings: RankingSettings
) -> Tuple[float, float]:
    """
    Weighted merge of the signals.

    Returns:
        (base_score, final_score)
    """
    base_score = (
        quality * settings.quality_weight
        + popularity * settings.popularity_weight
        + freshness * settings.freshness_weight
    )
    final_score = base_score + editorial_boost * settings.editorial_weight
    return base_score, final_score


def derive_reason(
    is_sponsored: bool,
    is_editors_choice: bool,
    quality: float,
    popularity: float,
    freshness: float
) -> ReasonTag:
    """First matching rule wins; the order below is fixed."""
    if is_sponsored:
        return ReasonTag.SPONSORED
    if is_editors_choice:
        return ReasonTag.EDITORS_CHOICE
    if (quality > REASON_THRESHOLDS["popular_quality"]
            and popularity > REASON_THRESHOLDS["popular_popularity"]):
        return ReasonTag.HIGHLY_RATED_AND_POPULAR
    if freshness > REASON_THRESHOLDS["recent_freshness"]:
        return ReasonTag.RECENTLY_UPDATED
    if quality > REASON_THRESHOLDS["strong_quality"]:
        return ReasonTag.STRONG_RATING
    return ReasonTag.BALANCED


def build_formula(settings: RankingSettings) -> str:
    """Human-readable formula with the weights in effect."""
    return (
        f"Final = (Q*{settings.quality_weight:.2f}) + (P*{settings.popularity_weight:.2f}) "
        f"+ (F*{settings.freshness_weight:.2f}) + (E*{settings.editorial_weight:.2f})"
    )


def score_course(
    course: Course,
    settings: RankingSettings,
    bounds: EnrollmentBounds,
    now: datetime
) -> RankedCourse:
    """
    Score a single course against precomputed batch bounds.

    Args:
        course: Course to score
        settings: Ranking settings
        bounds: Enrollment bounds of the batch the course is ranked in
        now: Evaluation instant for freshness

    Returns:
        RankedCourse carrying the course fields, final score, reason and breakdown
    """
    quality = score_quality(
        course.rating_avg,
        course.rating_count,
        settings.min_ratings_for_confidence,
    )
    popularity = score_popularity(course.enrollments, bounds)
    freshness = score_freshness(
        course.last_updated_at,
        settings.freshness_max_age_days,
        now,
    )
    editorial_boost = compute_editorial_boost(
        is_sponsored=course.is_sponsored,
        is_editors_choice=course.is_editors_choice,
        rating_avg=course.rating_avg,
        quality_floor=settings.quality_floor,
        sponsored_boost=settings.sponsored_boost,
        editors_choice_boost=settings.editors_choice_boost,
    )

    base_score, final_score = combine_scores(
        quality, popularity, freshness, editorial_boost, settings
    )

    reason = derive_reason(
        course.is_sponsored,
        course.is_editors_choice,
        quality,
        popularity,
        freshness,
    )

    breakdown = RankingBreakdown(
        quality_score=quality,
        popularity_score=popularity,
        freshness_score=freshness,
        editorial_boost=editorial_boost,
        base_score=base_score,
        final_score=final_score,
        formula=build_formula(settings),
        quality_weight=settings.quality_weight,
        popularity_weight=settings.popularity_weight,
        freshness_weight=settings.freshness_weight,
        editorial_weight=settings.editorial_weight,
    )

    return RankedCourse(
        **course.model_dump(include=set(Course.model_fields)),
        final_score=final_score,
        reason=reason.value,
        breakdown=breakdown,
    )
