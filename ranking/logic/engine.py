"""
Ranking Engine

Main entry point that exposes the two pure operations of the engine:
ranking a batch of courses and deciding a promotion request.

The engine holds no state besides its version; settings and the evaluation
instant are passed into every call.
"""

from datetime import datetime
from typing import Iterable, List, Sequence

from .contracts import (
    Course,
    RankingSettings,
    RankedCourse,
    PromotionRequest,
    PromotionDecision,
)
from .constants import ENGINE_VERSION
from .aggregator import score_course
from .dimension_scorers import EnrollmentBounds, compute_enrollment_bounds
from .ranker import rank_courses
from .promotion import evaluate_promotion as _evaluate_promotion


class RankingEngine:
    """
    Ranking and promotion engine.

    Pipeline flow for rank():
    1. Bounds pass - min/max enrollments of the batch
    2. Dimension scoring - quality, popularity, freshness, editorial boost
    3. Combination - base and final score, breakdown, reason tag
    4. Ranking - stable descending sort by final score
    """

    def __init__(self):
        self.version = ENGINE_VERSION

    def rank(
        self,
        courses: Sequence[Course],
        settings: RankingSettings,
        now: datetime
    ) -> List[RankedCourse]:
        """
        Rank a batch of courses.

        Args:
            courses: Courses to rank
            settings: Ranking settings
            now: Evaluation instant for freshness

        Returns:
            RankedCourse list, best first
        """
        return rank_courses(courses, settings, now)

    def evaluate_promotion(
        self,
        course: Course,
        request: PromotionRequest,
        settings: RankingSettings,
        other_promotions: Iterable[Course],
        now: datetime
    ) -> PromotionDecision:
        """Accept or reject a promotion request (see promotion.evaluate_promotion)."""
        return _evaluate_promotion(course, request, settings, other_promotions, now)

    def score_single_course(
        self,
        course: Course,
        settings: RankingSettings,
        now: datetime,
        batch: Sequence[Course] = ()
    ) -> dict:
        """
        Score one course for a detailed breakdown.

        Popularity is relative to `batch` (the course itself is always
        included); with no batch it is 0.

        Returns:
            Dict with scoring details
        """
        enrollments = [c.enrollments for c in batch] + [course.enrollments]
        bounds: EnrollmentBounds = compute_enrollment_bounds(enrollments)
        scored = score_course(course, settings, bounds, now)

        return {
            "course_id": scored.id,
            "final_score": scored.final_score,
            "reason": scored.reason,
            "breakdown": scored.breakdown.model_dump(),
        }


# Convenience functions for simple usage
def rank(
    courses: Sequence[Course],
    settings: RankingSettings,
    now: datetime
) -> List[RankedCourse]:
    return RankingEngine().rank(courses, settings, now)


def evaluate_promotion(
    course: Course,
    request: PromotionRequest,
    settings: RankingSettings,
    other_promotions: Iterable[Course],
    now: datetime
) -> PromotionDecision:
    return RankingEngine().evaluate_promotion(course, request, settings, other_promotions, now)
