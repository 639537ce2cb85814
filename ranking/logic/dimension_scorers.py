"""
Dimension Scorers

Individual scoring functions for each ranking signal.
Quality, popularity and freshness produce a score between 0.0 and 1.0;
the editorial boost is an unbounded non-negative number of boost units.
All logic is deterministic - the only clock input is the explicit `now`.
"""

from datetime import datetime
from typing import NamedTuple, Sequence

from .constants import (
    RATING_SCALE_MIN,
    RATING_SCALE_MAX,
    RATING_AVG_MIN,
    RATING_AVG_MAX,
    LOW_CONFIDENCE_FACTOR,
    SECONDS_PER_DAY,
)
from .errors import InvalidInputError
from .normalizer import clamp, rescale, as_utc


class EnrollmentBounds(NamedTuple):
    """Min and max enrollments of the batch being ranked."""
    minimum: int
    maximum: int


def score_quality(
    rating_avg: float,
    rating_count: int,
    min_ratings_for_confidence: int
) -> float:
    """
    Confidence-adjusted quality score.

    A rating backed by few reviews is pulled toward 20% of its raw value
    instead of zero, so new courses are not fully suppressed.
    """
    if rating_count < 0:
        raise InvalidInputError(f"rating_count must be >= 0, got {rating_count}")
    if not RATING_AVG_MIN <= rating_avg <= RATING_AVG_MAX:
        raise InvalidInputError(
            f"rating_avg must be within [{RATING_AVG_MIN}, {RATING_AVG_MAX}], got {rating_avg}"
        )
    if min_ratings_for_confidence <= 0:
        raise InvalidInputError(
            f"min_ratings_for_confidence must be > 0, got {min_ratings_for_confidence}"
        )

    confidence = clamp(rating_count / min_ratings_for_confidence, 0.0, 1.0)

    # Unrated courses (0.0 average) sit below the 1-5 scale; floor them at 0
    base = clamp(rescale(rating_avg, RATING_SCALE_MIN, RATING_SCALE_MAX), 0.0, 1.0)

    return base * confidence + base * LOW_CONFIDENCE_FACTOR * (1 - confidence)


def compute_enrollment_bounds(enrollments: Sequence[int]) -> EnrollmentBounds:
    """
    Bounds pass for popularity scoring.

    An empty batch yields (0, 0) instead of failing on min()/max().
    """
    if not enrollments:
        return EnrollmentBounds(0, 0)
    return EnrollmentBounds(min(enrollments), max(enrollments))


def score_popularity(enrollments: int, bounds: EnrollmentBounds) -> float:
    """Enrollments rescaled against the current batch, so the score is batch-relative."""
    if enrollments < 0:
        raise InvalidInputError(f"enrollments must be >= 0, got {enrollments}")
    return clamp(rescale(enrollments, bounds.minimum, bounds.maximum), 0.0, 1.0)


def score_freshness(
    last_updated_at: datetime,
    max_age_days: float,
    now: datetime
) -> float:
    """
    Linear decay over the configured max age.

    Updated just now -> 1.0; at or beyond max_age_days -> 0.0.
    A timestamp in the future clamps to 1.0.
    """
    if max_age_days <= 0:
        raise InvalidInputError(f"freshness_max_age_days must be > 0, got {max_age_days}")

    age_seconds = (as_utc(now) - as_utc(last_updated_at)).total_seconds()
    age_days = age_seconds / SECONDS_PER_DAY

    return 1 - clamp(age_days / max_age_days, 0.0, 1.0)


def compute_editorial_boost(
    is_sponsored: bool,
    is_editors_choice: bool,
    rating_avg: float,
    quality_floor: float,
    sponsored_boost: float,
    editors_choice_boost: float
) -> float:
    """
    Additive boost from promotion flags.

    Courses below the quality floor get nothing, whatever flags they carry.
    """
    if rating_avg < quality_floor:
        return 0.0

    boost = 0.0
    if is_sponsored:
        boost += sponsored_boost
    if is_editors_choice:
        boost += editors_choice_boost
    return boost
