"""
Catalog View

Filters and alternative orderings applied to an already-ranked list.
Filtering never rescores: popularity stays relative to the batch that was ranked.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .contracts import Course, RankedCourse
from .constants import SortOption, PriceFilter, PracticeFilter, SponsoredFilter


def filter_courses(
    ranked: Iterable[RankedCourse],
    category: Optional[str] = None,
    price: PriceFilter = PriceFilter.ALL,
    practice: PracticeFilter = PracticeFilter.ALL,
    sponsored: SponsoredFilter = SponsoredFilter.ALL
) -> List[RankedCourse]:
    """Keep courses matching every given filter; order is preserved."""
    visible = []
    for course in ranked:
        if category and course.category != category:
            continue
        if price == PriceFilter.FREE and course.price_cents != 0:
            continue
        if price == PriceFilter.PAID and course.price_cents == 0:
            continue
        if practice == PracticeFilter.WITH and not course.has_practice:
            continue
        if practice == PracticeFilter.WITHOUT and course.has_practice:
            continue
        if sponsored == SponsoredFilter.SPONSORED and not course.is_sponsored:
            continue
        if sponsored == SponsoredFilter.ORGANIC and course.is_sponsored:
            continue
        visible.append(course)
    return visible


def _created_key(course: RankedCourse) -> float:
    return course.created_at.timestamp() if course.created_at else float("-inf")


# sort option -> (key, descending)
_SORT_KEYS: Dict[SortOption, Tuple[Callable[[RankedCourse], float], bool]] = {
    SortOption.RANK: (lambda c: c.final_score, True),
    SortOption.PRICE_ASC: (lambda c: c.price_cents, False),
    SortOption.PRICE_DESC: (lambda c: c.price_cents, True),
    SortOption.FRESHNESS: (lambda c: c.last_updated_at.timestamp(), True),
    SortOption.NEWEST: (_created_key, True),
    SortOption.RATING: (lambda c: c.rating_avg, True),
    SortOption.POPULARITY: (lambda c: c.enrollments, True),
}


def sort_courses(
    ranked: Iterable[RankedCourse],
    sort: SortOption = SortOption.RANK
) -> List[RankedCourse]:
    """Stable sort by the chosen option; ties keep their incoming order."""
    key, descending = _SORT_KEYS[SortOption(sort)]
    return sorted(ranked, key=key, reverse=descending)


def list_categories(courses: Iterable[Course]) -> List[str]:
    """Distinct, sorted, non-empty categories."""
    return sorted({c.category for c in courses if c.category})
