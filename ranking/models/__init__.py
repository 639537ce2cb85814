# Export all ranking models for easy imports
from .base import Base
from .course import CourseRecord
from .settings import RankingSettingsRecord

__all__ = [
    "Base",
    "CourseRecord",
    "RankingSettingsRecord",
]
