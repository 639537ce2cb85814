from sqlalchemy import Column, Integer, Float

from .base import Base


class RankingSettingsRecord(Base):
    """Singleton row; also serves as the lock serializing promotion writes."""
    __tablename__ = "ranking_settings"

    id = Column(Integer, primary_key=True)

    # Weights
    quality_weight = Column(Float, nullable=False)
    popularity_weight = Column(Float, nullable=False)
    freshness_weight = Column(Float, nullable=False)
    editorial_weight = Column(Float, nullable=False)

    # Promotion rules
    quality_floor = Column(Float, nullable=False)
    promotion_cap = Column(Integer, nullable=False)  # 0 = uncapped
    sponsored_boost = Column(Float, nullable=False)
    editors_choice_boost = Column(Float, nullable=False)

    # Signal tuning
    min_ratings_for_confidence = Column(Integer, nullable=False)
    freshness_max_age_days = Column(Float, nullable=False)
