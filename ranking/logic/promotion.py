"""
Promotion Eligibility

Decides whether a sponsored / editor's choice flag may be granted, given the
quality floor and the cap on simultaneously active promotions.

Rejections are returned as PromotionDecision values, never raised.
The count-then-accept sequence is only race-free when the caller runs it
inside the atomic write provided by adapter.apply_promotion.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from .contracts import Course, RankingSettings, PromotionRequest, PromotionDecision, PromotionUsage
from .constants import RejectionKind, UNCAPPED_PROMOTIONS
from .normalizer import as_utc


def is_window_open(
    promo_start: Optional[datetime],
    promo_end: Optional[datetime],
    now: datetime
) -> bool:
    """Open when start is unset or has passed, and end is unset or not yet passed."""
    now = as_utc(now)
    if promo_start is not None and as_utc(promo_start) > now:
        return False
    if promo_end is not None and as_utc(promo_end) < now:
        return False
    return True


def is_promotion_active(
    is_sponsored: bool,
    is_editors_choice: bool,
    promo_start: Optional[datetime],
    promo_end: Optional[datetime],
    now: datetime
) -> bool:
    """A promotion is active when a flag is set and its window includes now."""
    if not (is_sponsored or is_editors_choice):
        return False
    return is_window_open(promo_start, promo_end, now)


def is_course_actively_promoted(course: Course, now: datetime) -> bool:
    return is_promotion_active(
        course.is_sponsored,
        course.is_editors_choice,
        course.promo_start,
        course.promo_end,
        now,
    )


def active_promotions(
    courses: Iterable[Course],
    now: datetime,
    exclude_id: Optional[str] = None
) -> List[Course]:
    """Courses (other than exclude_id) whose promotion is active at now."""
    return [
        c for c in courses
        if c.id != exclude_id and is_course_actively_promoted(c, now)
    ]


def evaluate_promotion(
    course: Course,
    request: PromotionRequest,
    settings: RankingSettings,
    other_promotions: Iterable[Course],
    now: datetime
) -> PromotionDecision:
    """
    Decide a promotion request.

    1. No flag requested -> accept (turning promotion off is always allowed)
    2. Rating below the quality floor -> reject, whatever the cap usage
    3. Requested state inactive at now -> accept without a cap check
    4. Capped and other active promotions >= cap -> reject
    A promotion_cap of 0 means uncapped.

    Args:
        course: Target course (its current rating is checked)
        request: Requested flags and window
        settings: Ranking settings
        other_promotions: Other courses' promotion state; the target itself
            and inactive entries are ignored
        now: Evaluation instant

    Returns:
        PromotionDecision
    """
    if not request.wants_promotion:
        return PromotionDecision(accepted=True, is_active=False, changes=request)

    if course.rating_avg < settings.quality_floor:
        return PromotionDecision(
            accepted=False,
            rejection=RejectionKind.QUALITY_FLOOR_REJECTED,
            reason=(
                f"Quality too low for promotion "
                f"({course.rating_avg:.2f} < {settings.quality_floor:.2f})"
            ),
        )

    is_active = is_promotion_active(
        request.is_sponsored,
        request.is_editors_choice,
        request.promo_start,
        request.promo_end,
        now,
    )

    if not is_active or settings.promotion_cap == UNCAPPED_PROMOTIONS:
        return PromotionDecision(accepted=True, is_active=is_active, changes=request)

    active_count = len(active_promotions(other_promotions, now, exclude_id=course.id))
    return decide_against_cap(request, active_count, settings.promotion_cap)


def decide_against_cap(
    request: PromotionRequest,
    active_count: int,
    promotion_cap: int
) -> PromotionDecision:
    """Cap check for a request already known to be active and capped."""
    if active_count >= promotion_cap:
        return cap_exceeded_decision(active_count, promotion_cap)
    return PromotionDecision(
        accepted=True,
        is_active=True,
        active_count=active_count,
        promotion_cap=promotion_cap,
        changes=request,
    )


def cap_exceeded_decision(active_count: int, promotion_cap: int) -> PromotionDecision:
    return PromotionDecision(
        accepted=False,
        rejection=RejectionKind.PROMOTION_CAP_EXCEEDED,
        reason=f"Promotion cap reached ({active_count}/{promotion_cap})",
        is_active=True,
        active_count=active_count,
        promotion_cap=promotion_cap,
    )


def summarize_usage(
    courses: Iterable[Course],
    settings: RankingSettings,
    now: datetime
) -> PromotionUsage:
    """Active promotion slots in use at now."""
    active = active_promotions(courses, now)
    return PromotionUsage(
        active_count=len(active),
        promotion_cap=settings.promotion_cap,
        uncapped=settings.promotion_cap == UNCAPPED_PROMOTIONS,
        promoted_course_ids=[c.id for c in active],
    )
