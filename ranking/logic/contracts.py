"""
Data Contracts for the Course Ranking Engine

Defines Pydantic models for Course and RankingSettings (input) and
RankedCourse / PromotionDecision (output).
These contracts are the API boundary for the ranking engine.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import RejectionKind, RATING_AVG_MIN, RATING_AVG_MAX, ENGINE_VERSION
from .normalizer import as_utc


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class Course(BaseModel):
    """
    A catalog course as read from the store.
    The engine treats it as immutable input.
    """
    # Identity
    id: str

    # Descriptive fields (display and catalog filtering only)
    title: str = ""
    category: str = ""
    level: str = ""
    language: str = ""
    price_cents: int = Field(default=0, ge=0)
    duration_minutes: int = Field(default=0, ge=0)
    has_practice: bool = False
    has_certificate: bool = False
    created_at: Optional[datetime] = None

    # Ranking signals
    rating_avg: float = Field(ge=RATING_AVG_MIN, le=RATING_AVG_MAX)
    rating_count: int = Field(ge=0)
    enrollments: int = Field(ge=0)
    last_updated_at: datetime

    # Promotion state
    is_sponsored: bool = False
    is_editors_choice: bool = False
    is_accredited: bool = False  # display-only
    promo_start: Optional[datetime] = None
    promo_end: Optional[datetime] = None

    @field_validator("created_at", "last_updated_at", "promo_start", "promo_end")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    @property
    def is_promoted(self) -> bool:
        return self.is_sponsored or self.is_editors_choice

    class Config:
        from_attributes = True


class RankingSettings(BaseModel):
    """
    Ranking and promotion configuration.

    Passed explicitly into every engine call. Weights are not required to
    sum to 1.
    """
    quality_weight: float = Field(description="Weight of the quality score in the base score.")
    popularity_weight: float = Field(description="Weight of the popularity score in the base score.")
    freshness_weight: float = Field(description="Weight of the freshness score in the base score.")
    editorial_weight: float = Field(description="Multiplier applied to the editorial boost.")

    quality_floor: float = Field(
        ge=RATING_AVG_MIN,
        le=RATING_AVG_MAX,
        description="Minimum rating average required for any promotion.",
    )
    promotion_cap: int = Field(
        ge=0,
        description=(
            "Maximum number of simultaneously active promoted courses. "
            "0 means UNCAPPED (unlimited promotions), not 'no promotions allowed'."
        ),
    )
    sponsored_boost: float = Field(ge=0.0, description="Boost units for a sponsored course.")
    editors_choice_boost: float = Field(ge=0.0, description="Boost units for an editor's choice course.")
    min_ratings_for_confidence: int = Field(
        gt=0,
        description="Rating count at which rating confidence saturates to 1.0.",
    )
    freshness_max_age_days: float = Field(
        gt=0,
        description="Age in days at which the freshness score reaches 0.",
    )

    class Config:
        from_attributes = True


class PromotionRequest(BaseModel):
    """Requested promotion flags and optional active window for one course."""
    is_sponsored: bool = False
    is_editors_choice: bool = False
    promo_start: Optional[datetime] = None
    promo_end: Optional[datetime] = None
    is_accredited: Optional[bool] = None  # None leaves the stored value untouched

    @field_validator("promo_start", "promo_end")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _check_window(self) -> "PromotionRequest":
        if self.promo_start and self.promo_end and self.promo_end < self.promo_start:
            raise ValueError("promo_end must not be earlier than promo_start")
        return self

    @property
    def wants_promotion(self) -> bool:
        return self.is_sponsored or self.is_editors_choice


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class RankingBreakdown(BaseModel):
    """Every intermediate value of one course's score, replayable on its own."""
    quality_score: float = Field(ge=0.0, le=1.0)
    popularity_score: float = Field(ge=0.0, le=1.0)
    freshness_score: float = Field(ge=0.0, le=1.0)
    editorial_boost: float = Field(ge=0.0)
    base_score: float
    final_score: float
    formula: str = ""

    # Weights used
    quality_weight: float
    popularity_weight: float
    freshness_weight: float
    editorial_weight: float


class RankedCourse(Course):
    """
    A course annotated with its score.
    Still a Course, so an already-ranked list can be ranked again.
    """
    final_score: float = 0.0
    reason: str = ""
    breakdown: Optional[RankingBreakdown] = None


class PromotionDecision(BaseModel):
    """
    Outcome of a promotion request.
    On acceptance `changes` holds the values to persist.
    """
    accepted: bool
    reason: Optional[str] = None
    rejection: Optional[RejectionKind] = None
    is_active: bool = False
    active_count: Optional[int] = None
    promotion_cap: Optional[int] = None
    changes: Optional[PromotionRequest] = None


class CatalogOutput(BaseModel):
    """
    Output of a catalog ranking run.
    Contains the ranked (and optionally filtered) courses with summary data.
    """
    courses: List[RankedCourse] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)

    # Summary Statistics
    total_ranked: int = 0
    total_visible: int = 0

    # Processing metadata
    evaluated_at: Optional[datetime] = None
    processing_time_ms: Optional[float] = None
    engine_version: str = ENGINE_VERSION

    # Warnings/Notes
    warnings: List[str] = Field(default_factory=list)


class PromotionUsage(BaseModel):
    """Active promotion slots in use at a given instant."""
    active_count: int
    promotion_cap: int
    uncapped: bool
    promoted_course_ids: List[str] = Field(default_factory=list)
