"""
Ranker

Ranks a batch of courses: one pass to gather batch bounds, one pass to score
every course, then a stable descending sort by final score.
"""

from datetime import datetime
from typing import List, Sequence

from .contracts import Course, RankingSettings, RankedCourse
from .aggregator import score_course
from .dimension_scorers import compute_enrollment_bounds


def rank_candidates(
    scored_courses: List[RankedCourse]
) -> List[RankedCourse]:
    """
    Rank courses by final score (descending).

    sorted() is stable, so equal scores keep their input order.
    """
    return sorted(
        scored_courses,
        key=lambda x: x.final_score,
        reverse=True
    )


def rank_courses(
    courses: Sequence[Course],
    settings: RankingSettings,
    now: datetime
) -> List[RankedCourse]:
    """
    Score and rank a batch of courses.

    Popularity is relative to this batch, so the same course can score
    differently in a different batch.

    Args:
        courses: Courses to rank (RankedCourse instances are accepted too)
        settings: Ranking settings
        now: Evaluation instant

    Returns:
        RankedCourse list sorted by final score, ties in input order
    """
    if not courses:
        return []

    # Pass 1: batch bounds
    bounds = compute_enrollment_bounds([c.enrollments for c in courses])

    # Pass 2: score each course
    scored = [score_course(c, settings, bounds, now) for c in courses]

    return rank_candidates(scored)
