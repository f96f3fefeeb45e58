"""
Review API Router

Endpoints for reviewing bookmarked questions.

Endpoints:
- POST /review - Submit a rating and reschedule the item
- POST /review/undo - Revert the item's most recent review
- GET /review/streak - Review streak and 90-day activity
- PUT /review/items/{item_id}/custom-reminder - Set or clear a custom reminder

Errors are raised as ServiceError subclasses and rendered by the error
handling middleware (400 validation_error, 404 not_found, 409
nothing_to_undo, 500 persistence_error).
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.db.base import get_db
from revision_hub.enums import RateLimitType
from revision_hub.middleware.rate_limit import get_rate_limit, limiter
from revision_hub.models.review import (
    CustomReminderRequest,
    CustomReminderResponse,
    ReviewSubmitRequest,
    ReviewSubmitResponse,
    ScheduleStateModel,
    StreakResponse,
    UndoRequest,
    UndoResponse,
)
from revision_hub.services.review import (
    CustomReminderService,
    ReviewLogService,
    ScheduleState,
    StreakTrackingService,
    UndoService,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/review", tags=["review"])


# ===========================================
# Dependency Injection
# ===========================================


async def get_review_log_service(
    db: AsyncSession = Depends(get_db),
) -> ReviewLogService:
    """Get review submission service."""
    return ReviewLogService(db)


async def get_undo_service(
    db: AsyncSession = Depends(get_db),
) -> UndoService:
    """Get review undo service."""
    return UndoService(db)


async def get_streak_service(
    db: AsyncSession = Depends(get_db),
) -> StreakTrackingService:
    """Get streak tracking service."""
    return StreakTrackingService(db)


async def get_custom_reminder_service(
    db: AsyncSession = Depends(get_db),
) -> CustomReminderService:
    """Get custom reminder service."""
    return CustomReminderService(db)


def _to_model(state: ScheduleState) -> ScheduleStateModel:
    return ScheduleStateModel(
        repetitions=state.repetitions,
        ease_factor=state.ease_factor,
        interval_days=state.interval_days,
        next_review_date=state.next_review_date,
    )


# ===========================================
# Review Endpoints
# ===========================================


@router.post("", response_model=ReviewSubmitResponse)
@limiter.limit(get_rate_limit(RateLimitType.REVIEW))
async def submit_review(
    request: Request,
    body: ReviewSubmitRequest,
    service: ReviewLogService = Depends(get_review_log_service),
) -> ReviewSubmitResponse:
    """
    Submit a review rating for a bookmarked question.

    The item is rescheduled by the SM-2 scheduler using the user's pacing
    mode. An active custom reminder is consumed by the review.
    """
    result = await service.submit_review(
        item_ref=body.item_ref,
        user_id=body.user_id,
        rating=body.rating,
    )

    return ReviewSubmitResponse(
        item_id=result.item_id,
        previous_state=_to_model(result.previous),
        updated_state=_to_model(result.updated),
        override_cleared=result.override_cleared,
    )


@router.post("/undo", response_model=UndoResponse)
@limiter.limit(get_rate_limit(RateLimitType.REVIEW))
async def undo_review(
    request: Request,
    body: UndoRequest,
    service: UndoService = Depends(get_undo_service),
) -> UndoResponse:
    """
    Undo the most recent review of a bookmarked question.

    Returns 409 if the item has no review left to undo.
    """
    restored = await service.undo_last_review(
        item_ref=body.item_ref,
        user_id=body.user_id,
    )
    return UndoResponse(restored_state=_to_model(restored))


# ===========================================
# Streak Endpoints
# ===========================================


@router.get("/streak", response_model=StreakResponse)
@limiter.limit(get_rate_limit(RateLimitType.ANALYTICS))
async def get_streak(
    request: Request,
    user_id: str = Query(..., alias="userId", min_length=1),
    service: StreakTrackingService = Depends(get_streak_service),
) -> StreakResponse:
    """
    Get the user's review streak and recent activity.

    A day counts toward the streak when at least one review was completed.
    """
    return await service.get_streak(user_id)


# ===========================================
# Custom Reminder Endpoints
# ===========================================


@router.put("/items/{item_id}/custom-reminder", response_model=CustomReminderResponse)
async def update_custom_reminder(
    item_id: str,
    body: CustomReminderRequest,
    service: CustomReminderService = Depends(get_custom_reminder_service),
) -> CustomReminderResponse:
    """
    Set or clear a custom reminder.

    While active, the learner sees the custom date; the next review clears
    it and the item returns to scheduler-driven reviews.
    """
    item = await service.update_reminder(
        item_ref=item_id,
        user_id=body.user_id,
        active=body.is_custom_reminder_active,
        reminder_date=body.custom_next_review_date,
    )

    if item.is_custom_reminder_active:
        message = f"Custom reminder set for {body.custom_next_review_date.isoformat()}"
    else:
        message = "Custom reminder disabled - question will use SRS scheduling"

    return CustomReminderResponse(
        item_id=item.id,
        is_custom_reminder_active=item.is_custom_reminder_active,
        custom_next_review_date=item.custom_next_review_date,
        message=message,
    )
