"""
Review Scheduler API Models (Pydantic)

Request/response schemas for:
- Review submission and undo
- Custom reminder overrides
- Pacing preference
- Review streaks and activity heatmap

ARCHITECTURE NOTE:
    This file contains PYDANTIC models for API validation.
    There is a corresponding SQLAlchemy file: revision_hub/db/models.py

    Data flows: API Request → Pydantic → Service → SQLAlchemy → Database

API Contract:
    Request models use StrictRequest (extra="forbid") to reject unknown fields.
    All bodies are camelCase on the wire.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, StrictInt

from revision_hub.models.base import StrictRequest, StrictResponse


# ===========================================
# Schedule State
# ===========================================


class ScheduleStateModel(StrictResponse):
    """
    Memory-model state of a reviewable item as exposed over the API.

    Built from a scheduler.ScheduleState via from_attributes.
    """

    repetitions: int = Field(..., ge=0)
    ease_factor: float = Field(..., ge=1.3)
    interval_days: int = Field(..., ge=0)
    next_review_date: Optional[datetime] = None


# ===========================================
# Review Submission
# ===========================================


class ReviewSubmitRequest(StrictRequest):
    """
    Rate one reviewable item.

    itemRef may be the item's own id or the id of the question it
    bookmarks. The rating must be a JSON integer, never coerced. Its range
    is checked by the service, so an out-of-range rating is reported as a
    validation_error with the offending value.
    """

    item_ref: str = Field(..., min_length=1, description="Item id or question id")
    rating: StrictInt = Field(..., description="1=again, 2=hard, 3=good, 4=easy")
    user_id: str = Field(..., min_length=1)


class ReviewSubmitResponse(StrictResponse):
    """Result of a successful review: schedule before and after."""

    success: bool = True
    item_id: str
    previous_state: ScheduleStateModel
    updated_state: ScheduleStateModel
    override_cleared: bool = Field(
        False, description="True if a custom reminder was consumed by this review"
    )


# ===========================================
# Undo
# ===========================================


class UndoRequest(StrictRequest):
    """Revert the most recent review of an item."""

    item_ref: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)


class UndoResponse(StrictResponse):
    """Schedule restored from the pre-review snapshot."""

    success: bool = True
    restored_state: ScheduleStateModel


# ===========================================
# Custom Reminder Override
# ===========================================


class CustomReminderRequest(StrictRequest):
    """
    Set or clear a custom reminder for an item.

    customNextReviewDate is a calendar date (YYYY-MM-DD), required when
    isCustomReminderActive is true and ignored otherwise.
    """

    user_id: str = Field(..., min_length=1)
    is_custom_reminder_active: bool
    custom_next_review_date: Optional[date] = None


class CustomReminderResponse(StrictResponse):
    """Override state after the update."""

    success: bool = True
    item_id: str
    is_custom_reminder_active: bool
    custom_next_review_date: Optional[datetime] = None
    message: str


# ===========================================
# Pacing Preference
# ===========================================


class PacingPreferenceRequest(StrictRequest):
    """Update the user's pacing dial."""

    pacing_mode: float = Field(
        ...,
        ge=-1.0,
        le=1.0,
        description="-1 most intensive, 0 standard, +1 most relaxed",
    )


class PacingPreferenceResponse(StrictResponse):
    """Current pacing dial for a user."""

    user_id: str
    pacing_mode: float


# ===========================================
# Streak Models
# ===========================================


class ActivityDay(StrictResponse):
    """
    Single day of review activity for the heatmap.

    level is 0-4 relative to the busiest day in the window.
    """

    date: date
    count: int = Field(0, description="Reviews completed on this UTC day")
    level: int = Field(0, ge=0, le=4, description="Activity level for heatmap coloring")


class StreakResponse(StrictResponse):
    """
    Review streak information.

    Tracks consecutive UTC days with at least one completed review, plus a
    zero-filled activity window ending today.
    """

    success: bool = True
    current_streak: int = 0
    longest_streak: int = 0
    streak_start: Optional[date] = None
    last_review_date: Optional[date] = None
    is_active_today: bool = False
    milestones_reached: list[int] = Field(default_factory=list)
    next_milestone: Optional[int] = None
    last_90_days: list[ActivityDay] = Field(default_factory=list)
