"""
Ranking Engine Constants

Defines scoring constants, reason tags, catalog options and the default
settings used when an operator saves ranking settings for the first time.
"""

from enum import Enum
from typing import Dict, Union

# =============================================================================
# QUALITY SCORING
# =============================================================================

# Rating scale used to rescale rating averages
RATING_SCALE_MIN = 1.0
RATING_SCALE_MAX = 5.0

# Accepted range for a stored rating average (0.0 = not yet rated)
RATING_AVG_MIN = 0.0
RATING_AVG_MAX = 5.0

# Share of the raw rating kept when a course has no ratings backing it
LOW_CONFIDENCE_FACTOR = 0.2

# =============================================================================
# FRESHNESS SCORING
# =============================================================================

SECONDS_PER_DAY = 60 * 60 * 24

# =============================================================================
# REASON TAGS
# =============================================================================

class ReasonTag(str, Enum):
    """Short natural-language reason shown next to a ranked course."""
    SPONSORED = "Sponsored course"
    EDITORS_CHOICE = "Editor's Choice"
    HIGHLY_RATED_AND_POPULAR = "Highly rated and popular"
    RECENTLY_UPDATED = "Recently updated"
    STRONG_RATING = "Strong rating"
    BALANCED = "Balanced ranking"


# Thresholds for the reason tags (strictly greater than)
REASON_THRESHOLDS: Dict[str, float] = {
    "popular_quality": 0.7,
    "popular_popularity": 0.5,
    "recent_freshness": 0.7,
    "strong_quality": 0.6,
}

# =============================================================================
# PROMOTION
# =============================================================================

class RejectionKind(str, Enum):
    """Why a promotion request was turned down."""
    QUALITY_FLOOR_REJECTED = "quality_floor_rejected"
    PROMOTION_CAP_EXCEEDED = "promotion_cap_exceeded"


# A promotion cap of 0 means "uncapped", not "no promotions allowed"
UNCAPPED_PROMOTIONS = 0

# =============================================================================
# CATALOG VIEW
# =============================================================================

class SortOption(str, Enum):
    """Orderings offered by the catalog view."""
    RANK = "rank"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    FRESHNESS = "freshness"
    NEWEST = "newest"
    RATING = "rating"
    POPULARITY = "popularity"


class PriceFilter(str, Enum):
    ALL = "all"
    FREE = "free"
    PAID = "paid"


class PracticeFilter(str, Enum):
    ALL = "all"
    WITH = "with"
    WITHOUT = "without"


class SponsoredFilter(str, Enum):
    ALL = "all"
    SPONSORED = "sponsored"
    ORGANIC = "organic"

# =============================================================================
# DEFAULT SETTINGS
# =============================================================================

# Used only to create the settings row the first time it is saved.
# The engine itself never falls back to these values.
DEFAULT_SETTINGS: Dict[str, Union[int, float]] = {
    "quality_weight": 0.45,
    "popularity_weight": 0.25,
    "freshness_weight": 0.2,
    "editorial_weight": 0.1,
    "quality_floor": 3.5,
    "promotion_cap": 5,
    "sponsored_boost": 0.2,
    "editors_choice_boost": 0.15,
    "min_ratings_for_confidence": 30,
    "freshness_max_age_days": 365,
}

ENGINE_VERSION = "1.0.0"
