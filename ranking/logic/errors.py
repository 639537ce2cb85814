"""
Ranking Engine Errors

Only contract violations are raised. Promotion rejections are returned as
structured decisions (see contracts.PromotionDecision).
"""


class RankingError(Exception):
    """Base class for ranking engine errors."""


class InvalidInputError(RankingError, ValueError):
    """A numeric input is outside its declared domain."""


class SettingsNotConfiguredError(RankingError):
    """No ranking settings row exists; scores cannot be computed."""

    def __init__(self, message: str = "Ranking settings are not configured"):
        super().__init__(message)


class CourseNotFoundError(RankingError):
    """The requested course id does not exist."""

    def __init__(self, course_id: str):
        self.course_id = course_id
        super().__init__(f"Course not found: {course_id}")
