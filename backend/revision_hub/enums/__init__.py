"""
Centralized enum definitions for the application.

All enums are organized by domain:
- review.py: Performance ratings and schedule modes
- api.py: Rate limit categories

Usage:
    from revision_hub.enums import Rating, RateLimitType
"""

from revision_hub.enums.review import Rating, ScheduleMode
from revision_hub.enums.api import RateLimitType

__all__ = [
    # Review enums
    "Rating",
    "ScheduleMode",
    # API enums
    "RateLimitType",
]
