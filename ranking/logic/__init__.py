"""
Ranking Logic Module

Provides the deterministic ranking and promotion engine for the course catalog.
"""

from .contracts import (
    Course,
    RankingSettings,
    RankingBreakdown,
    RankedCourse,
    PromotionRequest,
    PromotionDecision,
    PromotionUsage,
)
from .engine import RankingEngine, rank, evaluate_promotion
from .constants import ReasonTag, RejectionKind, SortOption
from .errors import (
    RankingError,
    InvalidInputError,
    SettingsNotConfiguredError,
    CourseNotFoundError,
)

__all__ = [
    # Main engine
    "RankingEngine",
    "rank",
    "evaluate_promotion",

    # Contracts
    "Course",
    "RankingSettings",
    "RankingBreakdown",
    "RankedCourse",
    "PromotionRequest",
    "PromotionDecision",
    "PromotionUsage",

    # Enums
    "ReasonTag",
    "RejectionKind",
    "SortOption",

    # Errors
    "RankingError",
    "InvalidInputError",
    "SettingsNotConfiguredError",
    "CourseNotFoundError",
]
