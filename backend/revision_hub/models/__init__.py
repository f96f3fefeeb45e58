"""Pydantic request/response models for the review API."""

from revision_hub.models.base import StrictRequest, StrictResponse
from revision_hub.models.review import (
    ActivityDay,
    CustomReminderRequest,
    CustomReminderResponse,
    PacingPreferenceRequest,
    PacingPreferenceResponse,
    ReviewSubmitRequest,
    ReviewSubmitResponse,
    ScheduleStateModel,
    StreakResponse,
    UndoRequest,
    UndoResponse,
)

__all__ = [
    "StrictRequest",
    "StrictResponse",
    "ScheduleStateModel",
    "ReviewSubmitRequest",
    "ReviewSubmitResponse",
    "UndoRequest",
    "UndoResponse",
    "CustomReminderRequest",
    "CustomReminderResponse",
    "PacingPreferenceRequest",
    "PacingPreferenceResponse",
    "ActivityDay",
    "StreakResponse",
]
