"""
API-related enums.

Defines enums for rate limiting and other API concerns.
"""

from enum import Enum


class RateLimitType(str, Enum):
    """
    Rate limit categories for different endpoint types.

    Each category has a corresponding rate limit configured in settings.
    Usage:
        from revision_hub.enums import RateLimitType
        from revision_hub.config import settings

        limit = settings.get_rate_limit(RateLimitType.REVIEW)
    """

    # General API endpoints
    DEFAULT = "default"

    # Review submission and undo (write path, guarded against UI double clicks)
    REVIEW = "review"

    # Streak and activity endpoints
    ANALYTICS = "analytics"
